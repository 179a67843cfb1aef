"""
Repeg Validity — проверка допустимости смены peg multiplier

Чистая часть проверки repeg: по рынку (уже с кандидатным peg), цене
и доверительному интервалу oracle оценивает, допустим ли repeg:

- direction_valid: terminal price двигается в сторону oracle
- profitability_valid: terminal price не выходит за доверительный интервал oracle
- price_impact_valid: mark price не выходит за доверительный интервал oracle

Расхождение oracle/terminal возвращается в единицах 1/1024:
    divergence = (oracle - terminal) * 2^10 / oracle

При невалидном oracle все флаги допустимости — False.
Получение цены oracle — внешний сервис; сюда передаются готовые значения.

Оценка бюджета repeg (fee pool):
    fee_pool = total_fee_minus_distributions - total_fee * 1/2
    budget = fee_pool / 2
Оптимальный peg — шаг на минимальную единицу peg (1) в сторону oracle,
если стоимость переоценки нетто-позиции укладывается в бюджет.
"""

import logging
from dataclasses import dataclass

from src.core.domain.amm import Market
from src.core.domain.precision import (
    SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_DENOMINATOR,
    SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_NUMERATOR,
)
from src.core.errors import DomainError, InvalidArgument
from src.core.math.fixed_point import (
    abs_int,
    clamp_int,
    div_trunc,
    mul_div,
    require_non_negative,
    require_positive,
    sign,
)
from src.core.math.reserve_curve import (
    calculate_base_asset_value_and_pnl,
    calculate_mark_price,
    calculate_terminal_price,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepegValidity:
    """Результат проверки repeg."""

    oracle_valid: bool
    direction_valid: bool
    profitability_valid: bool
    price_impact_valid: bool

    # (oracle - terminal) / oracle в единицах 1/1024
    oracle_terminal_divergence_pct: int

    @property
    def is_valid(self) -> bool:
        """Все проверки пройдены."""
        return (
            self.oracle_valid
            and self.direction_valid
            and self.profitability_valid
            and self.price_impact_valid
        )


def calculate_repeg_validity(
    market: Market,
    oracle_price: int,
    oracle_conf: int,
    oracle_is_valid: bool,
    terminal_price_before: int,
) -> RepegValidity:
    """
    Проверка допустимости repeg.

    Args:
        market: Снапшот рынка после применения кандидатного peg
        oracle_price: Цена oracle (MARK_PRICE_PRECISION, > 0)
        oracle_conf: Доверительный интервал oracle (MARK_PRICE_PRECISION, <= oracle_price)
        oracle_is_valid: Валидность oracle (решается внешним слоем)
        terminal_price_before: Terminal price до repeg

    Returns:
        RepegValidity

    Raises:
        InvalidArgument: Если oracle_price <= 0 или oracle_conf вне [0, oracle_price]
    """
    require_positive(oracle_price, "oracle_price")
    require_non_negative(oracle_conf, "oracle_conf")
    if oracle_conf > oracle_price:
        raise InvalidArgument(
            f"oracle_conf {oracle_conf} exceeds oracle_price {oracle_price}"
        )

    terminal_price_after = calculate_terminal_price(market)
    oracle_terminal_spread_after = oracle_price - terminal_price_after
    oracle_terminal_divergence_pct_after = div_trunc(oracle_terminal_spread_after << 10, oracle_price)

    if not oracle_is_valid:
        return RepegValidity(
            oracle_valid=False,
            direction_valid=False,
            profitability_valid=False,
            price_impact_valid=False,
            oracle_terminal_divergence_pct=oracle_terminal_divergence_pct_after,
        )

    direction_valid = True
    profitability_valid = True
    price_impact_valid = True

    mark_price_after = calculate_mark_price(market)
    oracle_conf_band_top = oracle_price + oracle_conf
    oracle_conf_band_bottom = oracle_price - oracle_conf

    if oracle_price > terminal_price_after:
        # terminal только вверх, когда oracle выше
        if terminal_price_after < terminal_price_before:
            direction_valid = False
        # terminal не выше нижней границы интервала oracle
        if oracle_conf_band_bottom < terminal_price_after:
            profitability_valid = False
        # mark не выше верхней границы интервала oracle
        if mark_price_after > oracle_conf_band_top:
            price_impact_valid = False
    elif oracle_price < terminal_price_after:
        if terminal_price_after > terminal_price_before:
            direction_valid = False
        if oracle_conf_band_top > terminal_price_after:
            profitability_valid = False
        if mark_price_after < oracle_conf_band_bottom:
            price_impact_valid = False

    return RepegValidity(
        oracle_valid=True,
        direction_valid=direction_valid,
        profitability_valid=profitability_valid,
        price_impact_valid=price_impact_valid,
        oracle_terminal_divergence_pct=oracle_terminal_divergence_pct_after,
    )


# =============================================================================
# FEE POOL И СТОИМОСТЬ REPEG
# =============================================================================


@dataclass(frozen=True)
class PegAdjustment:
    """Кандидатный peg и стоимость его применения (QUOTE_PRECISION)."""

    peg_multiplier: int
    cost: int


def total_fee_lower_bound(market: Market) -> int:
    """Часть total_fee, закреплённая за клиринговой палатой (QUOTE_PRECISION)."""
    return mul_div(
        market.amm.total_fee,
        SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_NUMERATOR,
        SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_DENOMINATOR,
    )


def calculate_fee_pool(market: Market) -> int:
    """
    Fee pool, доступный для оплаты repeg.

    total_fee_minus_distributions - total_fee_lower_bound

    Raises:
        DomainError: Если распределения съели закреплённую долю комиссий
    """
    lower_bound = total_fee_lower_bound(market)
    fee_pool = market.amm.total_fee_minus_distributions - lower_bound
    if fee_pool < 0:
        logger.warning(
            "fee pool underflow: market=%d total_fee_minus_distributions=%d lower_bound=%d",
            market.market_index,
            market.amm.total_fee_minus_distributions,
            lower_bound,
        )
        raise DomainError(
            f"total_fee_minus_distributions {market.amm.total_fee_minus_distributions} "
            f"is below the fee lower bound {lower_bound}"
        )
    return fee_pool


def adjust_peg_cost(market: Market, new_peg_candidate: int) -> tuple[Market, int]:
    """
    Стоимость смены peg для нетто-позиции пользователей.

    Нетто-позиция переоценивается по новому peg; стоимость — PnL пользователей
    относительно текущей стоимости позиции. Положительная стоимость платится
    из fee pool.

    Args:
        market: Снапшот рынка (не изменяется)
        new_peg_candidate: Кандидатный peg (PEG_PRECISION, > 0)

    Returns:
        (копия Market с новым peg, стоимость в QUOTE_PRECISION)
    """
    require_positive(new_peg_candidate, "new_peg_candidate")

    current_net_market_value, _ = calculate_base_asset_value_and_pnl(
        market.base_asset_amount, 0, market.amm
    )

    repegged_amm = market.amm.model_copy(update={"peg_multiplier": new_peg_candidate})
    repegged_market = market.model_copy(update={"amm": repegged_amm})

    _, cost = calculate_base_asset_value_and_pnl(
        market.base_asset_amount, current_net_market_value, repegged_amm
    )
    return repegged_market, cost


def calculate_optimal_peg_and_cost(
    market: Market,
    oracle_terminal_price_divergence: int,
) -> PegAdjustment:
    """
    Минимальный шаг peg в сторону oracle, если он укладывается в бюджет.

    Бюджет — половина fee pool. Peg сдвигается на минимальную единицу (1)
    по знаку расхождения oracle/terminal; если стоимость сдвига положительна
    и превышает бюджет, peg остаётся прежним с нулевой стоимостью.

    Args:
        market: Снапшот рынка (не изменяется)
        oracle_terminal_price_divergence: Расхождение oracle/terminal
            (знак задаёт направление сдвига)

    Returns:
        PegAdjustment
    """
    budget = calculate_fee_pool(market) // 2

    current_peg = market.amm.peg_multiplier
    optimal_peg = clamp_int(current_peg + sign(oracle_terminal_price_divergence), min_value=1)

    _, optimal_adjustment_cost = adjust_peg_cost(market, optimal_peg)

    if optimal_adjustment_cost > 0 and abs_int(optimal_adjustment_cost) > budget:
        logger.debug(
            "repeg over budget: market=%d peg=%d candidate=%d cost=%d budget=%d",
            market.market_index,
            current_peg,
            optimal_peg,
            optimal_adjustment_cost,
            budget,
        )
        return PegAdjustment(peg_multiplier=current_peg, cost=0)

    return PegAdjustment(peg_multiplier=optimal_peg, cost=optimal_adjustment_cost)

"""
TradeSimulator — Симуляция сделки против vAMM без изменения леджера

Модуль вычисляет для кандидатной сделки:
- Приобретённые base/quote (acquired amounts)
- Среднюю и максимальную проскальзку относительно котировки до сделки
- Новый снапшот рынка после сделки (для цепочек симуляций)

КОНВЕНЦИЯ ЗНАКОВ (acquired amounts):
    acquired_base  = base_reserve_before  - base_reserve_after
    acquired_quote = quote_reserve_before - quote_reserve_after

    LONG  (quote или base вход): acquired_base > 0, acquired_quote < 0
    SHORT (quote или base вход): acquired_base < 0, acquired_quote > 0

То есть acquired_base — изменение base позиции трейдера, acquired_quote —
то, что отдаёт кривая (отрицательно, когда трейдер платит quote).

ФОРМУЛЫ SLIPPAGE:
    entry_price = -price(acquired_base, acquired_quote, peg)
    new_price = price(base - acquired_base, quote - acquired_quote, peg)
    pct_max_slippage = |new_price - old_price| * MARK_PRICE_PRECISION / old_price
    pct_avg_slippage = |entry_price - old_price| * MARK_PRICE_PRECISION / old_price

КРИТИЧЕСКИЙ ИНВАРИАНТ:
LONG поднимает цену (new > old), SHORT опускает (new < old).
Нарушение → DomainError (дефект арифметики, не восстанавливаемая ситуация).
"""

import logging
from dataclasses import dataclass

from src.core.domain.amm import AMM, AssetType, Market, PositionDirection
from src.core.domain.precision import MARK_PRICE_PRECISION
from src.core.errors import DomainError
from src.core.math.fixed_point import abs_int, div_trunc
from src.core.math.reserve_curve import (
    calculate_amm_reserves_after_swap,
    calculate_mark_price,
    calculate_price,
    get_swap_direction,
)
from src.core.math.spread import calculate_ask_price, calculate_bid_price, spread_adjusted_amm

logger = logging.getLogger(__name__)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class TradeSimulationResult:
    """Приобретённые суммы (AMM_RESERVE_PRECISION, знаковые)."""

    acquired_base: int
    acquired_quote: int


@dataclass(frozen=True)
class SlippageResult:
    """Проскальзывание сделки (все поля в MARK_PRICE_PRECISION)."""

    pct_avg_slippage: int
    pct_max_slippage: int
    entry_price: int
    new_price: int


# =============================================================================
# HELPERS
# =============================================================================


def _uses_spread(market: Market, use_spread: bool) -> bool:
    return use_spread and market.amm.base_spread > 0


def _quoting_amm(market: Market, direction: PositionDirection, use_spread: bool) -> AMM:
    """AMM, против которого котируется сделка: сырой или со сдвигом спреда."""
    if _uses_spread(market, use_spread):
        return spread_adjusted_amm(market.amm, direction)
    return market.amm


def _reference_price(market: Market, direction: PositionDirection, use_spread: bool) -> int:
    """Цена до сделки: ask для LONG, bid для SHORT (при спреде), иначе mark."""
    if _uses_spread(market, use_spread):
        if direction == PositionDirection.LONG:
            return calculate_ask_price(market)
        return calculate_bid_price(market)
    return calculate_mark_price(market)


# =============================================================================
# ACQUIRED AMOUNTS
# =============================================================================


def calculate_trade_acquired_amounts(
    direction: PositionDirection,
    amount: int,
    market: Market,
    input_asset_type: AssetType = AssetType.QUOTE,
    use_spread: bool = True,
) -> TradeSimulationResult:
    """
    Приобретённые base/quote для кандидатной сделки.

    Args:
        direction: Направление сделки (LONG/SHORT)
        amount: Размер (QUOTE_PRECISION для QUOTE, AMM_RESERVE_PRECISION для BASE)
        market: Снапшот рынка
        input_asset_type: В каком активе задан amount
        use_spread: Учитывать bid/ask спред

    Returns:
        TradeSimulationResult (см. конвенцию знаков в docstring модуля)
    """
    if amount == 0:
        return TradeSimulationResult(acquired_base=0, acquired_quote=0)

    direction = PositionDirection(direction)
    swap_direction = get_swap_direction(input_asset_type, direction)
    amm = _quoting_amm(market, direction, use_spread)

    new_quote_asset_reserve, new_base_asset_reserve = calculate_amm_reserves_after_swap(
        amm, input_asset_type, amount, swap_direction
    )

    result = TradeSimulationResult(
        acquired_base=amm.base_asset_reserve - new_base_asset_reserve,
        acquired_quote=amm.quote_asset_reserve - new_quote_asset_reserve,
    )
    logger.debug(
        "acquired amounts: market=%d direction=%s amount=%d input=%s spread=%s -> base=%d quote=%d",
        market.market_index,
        direction.value,
        amount,
        AssetType(input_asset_type).value,
        _uses_spread(market, use_spread),
        result.acquired_base,
        result.acquired_quote,
    )
    return result


# =============================================================================
# SLIPPAGE
# =============================================================================


def calculate_trade_slippage(
    direction: PositionDirection,
    amount: int,
    market: Market,
    input_asset_type: AssetType = AssetType.QUOTE,
    use_spread: bool = True,
) -> SlippageResult:
    """
    Средняя/максимальная проскальзка (price impact) кандидатной сделки.

    Args:
        direction: Направление сделки (LONG/SHORT)
        amount: Размер сделки
        market: Снапшот рынка
        input_asset_type: В каком активе задан amount
        use_spread: Учитывать bid/ask спред

    Returns:
        SlippageResult(pct_avg_slippage, pct_max_slippage, entry_price, new_price)

    Raises:
        DomainError: Если цена сдвинулась против направления сделки
    """
    direction = PositionDirection(direction)
    old_price = _reference_price(market, direction, use_spread)

    if amount == 0:
        return SlippageResult(
            pct_avg_slippage=0,
            pct_max_slippage=0,
            entry_price=old_price,
            new_price=old_price,
        )

    acquired = calculate_trade_acquired_amounts(
        direction, amount, market, input_asset_type, use_spread
    )
    amm = _quoting_amm(market, direction, use_spread)

    # acquired amounts в перспективе пула → знак цены инвертируется
    entry_price = -calculate_price(
        acquired.acquired_base,
        acquired.acquired_quote,
        amm.peg_multiplier,
    )
    new_price = calculate_price(
        amm.base_asset_reserve - acquired.acquired_base,
        amm.quote_asset_reserve - acquired.acquired_quote,
        amm.peg_multiplier,
    )

    if direction == PositionDirection.SHORT:
        moved_correctly = new_price < old_price
    else:
        moved_correctly = new_price > old_price

    if not moved_correctly:
        logger.warning(
            "price moved against trade direction: market=%d direction=%s old=%d new=%d",
            market.market_index,
            direction.value,
            old_price,
            new_price,
        )
        raise DomainError(
            f"{direction.value} trade of {amount} moved price from {old_price} to {new_price}"
        )

    pct_max_slippage = abs_int(div_trunc((new_price - old_price) * MARK_PRICE_PRECISION, old_price))
    pct_avg_slippage = abs_int(div_trunc((entry_price - old_price) * MARK_PRICE_PRECISION, old_price))

    return SlippageResult(
        pct_avg_slippage=pct_avg_slippage,
        pct_max_slippage=pct_max_slippage,
        entry_price=entry_price,
        new_price=new_price,
    )


# =============================================================================
# MARKET AFTER TRADE
# =============================================================================


def calculate_market_after_trade(
    direction: PositionDirection,
    amount: int,
    market: Market,
    input_asset_type: AssetType = AssetType.QUOTE,
) -> Market:
    """
    Новый снапшот рынка после симулированной сделки против сырой кривой.

    Исходный снапшот не изменяется. Обновляются резервы AMM и нетто base
    позиция пользователей (base_asset_amount). sqrt_k, peg и спред сохраняются.

    Args:
        direction: Направление сделки
        amount: Размер сделки
        market: Снапшот рынка до сделки
        input_asset_type: В каком активе задан amount

    Returns:
        Новый Market
    """
    direction = PositionDirection(direction)
    if amount == 0:
        return market

    new_quote_asset_reserve, new_base_asset_reserve = calculate_amm_reserves_after_swap(
        market.amm,
        input_asset_type,
        amount,
        get_swap_direction(input_asset_type, direction),
    )
    acquired_base = market.amm.base_asset_reserve - new_base_asset_reserve

    new_amm = market.amm.model_copy(
        update={
            "base_asset_reserve": new_base_asset_reserve,
            "quote_asset_reserve": new_quote_asset_reserve,
        }
    )
    return market.model_copy(
        update={
            "amm": new_amm,
            "base_asset_amount": market.base_asset_amount + acquired_base,
        }
    )

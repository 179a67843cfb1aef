"""
TargetPriceSolver — Размер сделки, сдвигающей mark price к целевой цене

Обращение инварианта кривой: по целевой цене находится новый base резерв,
из него — quote резерв и размер сделки. Используется для поиска
арбитражных сделок (mark → oracle) и оценки глубины рынка.

ФОРМУЛЫ:
    k = sqrt_k² * MARK_PRICE_PRECISION
    target = mark ± (|target - mark| * pct / MAX_PCT)        (демпфирование)

    SHORT (mark > target), переоценка base_after:
        base_after = isqrt(k / target * peg / PEG_PRECISION - 1) - 1
    LONG (mark < target), недооценка base_after:
        base_after = isqrt(k / target * peg / PEG_PRECISION + 1) + 1

    quote_after = k / MARK_PRICE_PRECISION / base_after
    size_quote = |quote_after - quote_before| * peg / PEG_PRECISION / AMM_TO_QUOTE_PRECISION_RATIO
    size_base = |base_after - base_before|
    entry_price = size_quote * AMM_TO_QUOTE_PRECISION_RATIO * MARK_PRICE_PRECISION / size_base

Смещения ±1 компенсируют усечение isqrt так, чтобы решённая цена не
уходила за целевую в сторону, противоположную сделке.

ПОСТ-УСЛОВИЯ (DomainError при нарушении):
1. |target - achieved| <= исходный разрыв
2. achieved не уходит за target дальше TARGET_PRICE_TOLERANCE
"""

import logging
from dataclasses import dataclass

from src.core.domain.amm import AssetType, Market, PositionDirection
from src.core.domain.precision import (
    AMM_TO_QUOTE_PRECISION_RATIO,
    MARK_PRICE_PRECISION,
    MAX_PCT,
    PEG_PRECISION,
    TARGET_PRICE_TOLERANCE,
)
from src.core.errors import DomainError, InvalidArgument
from src.core.math.fixed_point import (
    abs_int,
    div_trunc,
    integer_square_root,
    mul_div,
    require_positive,
)
from src.core.math.reserve_curve import calculate_mark_price, calculate_price
from src.core.math.spread import (
    calculate_ask_price,
    calculate_bid_price,
    calculate_spread_reserves,
)

logger = logging.getLogger(__name__)

# Смещение для компенсации усечения isqrt
BIAS_MODIFIER = 1


@dataclass(frozen=True)
class TargetTradeResult:
    """
    Сделка, необходимая для сдвига цены к цели.

    size — в QUOTE_PRECISION или AMM_RESERVE_PRECISION (по output_asset_type).
    achieved_price — mark price решённых резервов; target_price — демпфированная
    цель. Для сделки нулевого размера оба равны target_price.
    """

    direction: PositionDirection
    size: int
    entry_price: int
    achieved_price: int
    target_price: int


def _no_trade(direction: PositionDirection, target_price: int) -> TargetTradeResult:
    return TargetTradeResult(
        direction=direction,
        size=0,
        entry_price=target_price,
        achieved_price=target_price,
        target_price=target_price,
    )


def calculate_target_price_trade(
    market: Market,
    target_price: int,
    pct: int = MAX_PCT,
    output_asset_type: AssetType = AssetType.QUOTE,
    use_spread: bool = True,
) -> TargetTradeResult:
    """
    Направление и размер сделки, сдвигающей mark price к target_price.

    Args:
        market: Снапшот рынка
        target_price: Целевая цена (MARK_PRICE_PRECISION, > 0)
        pct: Доля закрываемого разрыва, (0, MAX_PCT]; MAX_PCT = 100%
        output_asset_type: В каком активе вернуть size
        use_spread: Учитывать bid/ask спред

    Returns:
        TargetTradeResult

    Raises:
        InvalidArgument: Нарушены предусловия
        DomainError: Решённая цена нарушает пост-условия
    """
    require_positive(market.amm.base_asset_reserve, "base_asset_reserve")
    require_positive(target_price, "target_price")
    if not 0 < pct <= MAX_PCT:
        raise InvalidArgument(f"pct must be in (0, {MAX_PCT}], got {pct}")

    amm = market.amm
    mark_price_before = calculate_mark_price(market)
    bid_price_before = calculate_bid_price(market)
    ask_price_before = calculate_ask_price(market)

    # 1. Демпфирование разрыва
    if target_price > mark_price_before:
        price_gap_scaled = mul_div(target_price - mark_price_before, pct, MAX_PCT)
        target_price = mark_price_before + price_gap_scaled
        direction = PositionDirection.LONG
    else:
        price_gap_scaled = mul_div(mark_price_before - target_price, pct, MAX_PCT)
        target_price = mark_price_before - price_gap_scaled
        direction = PositionDirection.SHORT

    # 2. Цель внутри спреда: сделка не нужна
    if use_spread and bid_price_before < target_price < ask_price_before:
        if mark_price_before > target_price:
            direction = PositionDirection.SHORT
        else:
            direction = PositionDirection.LONG
        logger.debug(
            "target %d inside bid/ask band (%d, %d): no trade",
            target_price,
            bid_price_before,
            ask_price_before,
        )
        return _no_trade(direction, target_price)

    if mark_price_before == target_price:
        return _no_trade(PositionDirection.LONG, target_price)

    if use_spread and amm.base_spread > 0:
        reserves_before = calculate_spread_reserves(amm, direction)
    else:
        reserves_before = amm.reserves

    peg = amm.peg_multiplier
    k = amm.invariant * MARK_PRICE_PRECISION
    scaled_invariant = mul_div(div_trunc(k, target_price), peg, PEG_PRECISION)

    # 3. Обращение инварианта
    if direction == PositionDirection.SHORT:
        # переоценка base_after
        base_asset_reserve_after = integer_square_root(scaled_invariant - BIAS_MODIFIER) - 1
    else:
        # недооценка base_after
        base_asset_reserve_after = integer_square_root(scaled_invariant + BIAS_MODIFIER) + 1

    if base_asset_reserve_after <= 0:
        logger.warning(
            "target price solve collapsed base reserve: market=%d target=%d",
            market.market_index,
            target_price,
        )
        raise DomainError(
            f"solved base reserve is non-positive ({base_asset_reserve_after}) "
            f"for target price {target_price}"
        )

    quote_asset_reserve_after = div_trunc(div_trunc(k, MARK_PRICE_PRECISION), base_asset_reserve_after)
    mark_price_after = calculate_price(base_asset_reserve_after, quote_asset_reserve_after, peg)

    trade_size = div_trunc(
        mul_div(
            abs_int(quote_asset_reserve_after - reserves_before.quote_asset_reserve),
            peg,
            PEG_PRECISION,
        ),
        AMM_TO_QUOTE_PRECISION_RATIO,
    )
    base_size = abs_int(base_asset_reserve_after - reserves_before.base_asset_reserve)

    # 4. Пост-условия
    if direction == PositionDirection.SHORT:
        tp1, tp2 = mark_price_after, target_price
        original_diff = mark_price_before - target_price
    else:
        tp1, tp2 = target_price, mark_price_after
        original_diff = target_price - mark_price_before

    if tp1 - tp2 > original_diff:
        logger.warning(
            "target price overshoot: market=%d direction=%s target=%d achieved=%d before=%d",
            market.market_index,
            direction.value,
            target_price,
            mark_price_after,
            mark_price_before,
        )
        raise DomainError(
            f"target price calculation incorrect: |{tp1} - {tp2}| exceeds original gap {original_diff}"
        )

    if tp2 > tp1 and tp2 - tp1 >= TARGET_PRICE_TOLERANCE:
        logger.warning(
            "target price passed beyond tolerance: market=%d direction=%s target=%d achieved=%d",
            market.market_index,
            direction.value,
            target_price,
            mark_price_after,
        )
        raise DomainError(
            f"target price calculation incorrect: {tp2} >= {tp1}, err: {tp2 - tp1}"
        )

    if base_size == 0:
        return _no_trade(direction, target_price)

    entry_price = mul_div(trade_size * AMM_TO_QUOTE_PRECISION_RATIO, MARK_PRICE_PRECISION, base_size)

    size = trade_size if AssetType(output_asset_type) == AssetType.QUOTE else base_size
    logger.debug(
        "target trade: market=%d direction=%s size=%d (%s) entry=%d target=%d achieved=%d",
        market.market_index,
        direction.value,
        size,
        AssetType(output_asset_type).value,
        entry_price,
        target_price,
        mark_price_after,
    )

    return TargetTradeResult(
        direction=direction,
        size=size,
        entry_price=entry_price,
        achieved_price=mark_price_after,
        target_price=target_price,
    )

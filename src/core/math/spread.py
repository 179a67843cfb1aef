"""
SpreadAdjuster — Резервы, скорректированные на bid/ask спред

Для котирования ask (LONG) и bid (SHORT) quote резерв сдвигается на половину
спреда, base резерв пересчитывается из инварианта sqrt_k²:

    half_spread = max(base_spread / 2, 1)
    delta = quote / (BID_ASK_SPREAD_PRECISION / half_spread)
    LONG:  quote' = quote + delta    (ask > mark)
    SHORT: quote' = quote - delta    (bid < mark)
    base'  = sqrt_k² / quote'

Так как price' ∝ quote'² / sqrt_k², сдвиг цены примерно вдвое больше
сдвига quote: base_spread = 500 (5%) даёт ask ≈ mark * 1.0506.

ИНВАРИАНТЫ:
1. base_spread == 0 → сырые резервы без изменений
2. base_spread == 1 → половина спреда округляется вверх до 1, а не до 0
3. Скорректированные резервы строго положительны (иначе DomainError)
4. bid_price <= mark_price <= ask_price; снапшот, у которого sqrt_k разошёлся
   с резервами так, что сторона спреда котируется по ту сторону mark,
   отклоняется DomainError
"""

import logging

from src.core.domain.amm import AMM, Market, PositionDirection, ReservePair
from src.core.domain.precision import BID_ASK_SPREAD_PRECISION
from src.core.errors import DomainError
from src.core.math.fixed_point import div_trunc
from src.core.math.reserve_curve import calculate_price

logger = logging.getLogger(__name__)


def calculate_spread_reserves(amm: AMM, direction: PositionDirection) -> ReservePair:
    """
    Резервы для котирования стороны `direction`.

    Args:
        amm: Состояние AMM
        direction: LONG — ask сторона, SHORT — bid сторона

    Returns:
        ReservePair со сдвинутыми резервами (или сырые при нулевом спреде)

    Raises:
        DomainError: Если спред обнуляет резерв или сторона котируется
            по ту сторону mark price
    """
    if amm.base_spread == 0:
        return amm.reserves

    # ненулевой спред всегда сдвигает резервы
    half_spread = max(amm.base_spread // 2, 1)

    divisor = div_trunc(BID_ASK_SPREAD_PRECISION, half_spread)
    if divisor == 0:
        raise DomainError(
            f"base_spread {amm.base_spread} exceeds BID_ASK_SPREAD_PRECISION "
            f"{BID_ASK_SPREAD_PRECISION}: spread would invert the curve"
        )

    quote_asset_reserve_delta = div_trunc(amm.quote_asset_reserve, divisor)
    direction = PositionDirection(direction)

    if direction == PositionDirection.LONG:
        quote_asset_reserve = amm.quote_asset_reserve + quote_asset_reserve_delta
    else:
        quote_asset_reserve = amm.quote_asset_reserve - quote_asset_reserve_delta

    if quote_asset_reserve <= 0:
        raise DomainError(
            f"spread-adjusted quote reserve is non-positive ({quote_asset_reserve}) "
            f"for base_spread={amm.base_spread}"
        )

    base_asset_reserve = amm.invariant // quote_asset_reserve
    if base_asset_reserve <= 0:
        raise DomainError(
            f"spread-adjusted base reserve is non-positive ({base_asset_reserve}) "
            f"for quote reserve {quote_asset_reserve}"
        )

    mark_price = calculate_price(amm.base_asset_reserve, amm.quote_asset_reserve, amm.peg_multiplier)
    side_price = calculate_price(base_asset_reserve, quote_asset_reserve, amm.peg_multiplier)

    if direction == PositionDirection.LONG:
        quoted_correctly = side_price >= mark_price
    else:
        quoted_correctly = side_price <= mark_price

    if not quoted_correctly:
        logger.warning(
            "spread quote crossed mark: direction=%s mark=%d side=%d sqrt_k=%d",
            direction.value,
            mark_price,
            side_price,
            amm.sqrt_k,
        )
        raise DomainError(
            f"{direction.value} spread price {side_price} is on the wrong side of "
            f"mark {mark_price}: sqrt_k is inconsistent with reserves"
        )

    return ReservePair(
        base_asset_reserve=base_asset_reserve,
        quote_asset_reserve=quote_asset_reserve,
    )


def spread_adjusted_amm(amm: AMM, direction: PositionDirection) -> AMM:
    """Копия AMM с резервами, скорректированными на спред для `direction`."""
    reserves = calculate_spread_reserves(amm, direction)
    return amm.model_copy(
        update={
            "base_asset_reserve": reserves.base_asset_reserve,
            "quote_asset_reserve": reserves.quote_asset_reserve,
        }
    )


def calculate_bid_price(market: Market) -> int:
    """Bid price (SHORT сторона) в MARK_PRICE_PRECISION."""
    reserves = calculate_spread_reserves(market.amm, PositionDirection.SHORT)
    return calculate_price(
        reserves.base_asset_reserve,
        reserves.quote_asset_reserve,
        market.amm.peg_multiplier,
    )


def calculate_ask_price(market: Market) -> int:
    """Ask price (LONG сторона) в MARK_PRICE_PRECISION."""
    reserves = calculate_spread_reserves(market.amm, PositionDirection.LONG)
    return calculate_price(
        reserves.base_asset_reserve,
        reserves.quote_asset_reserve,
        market.amm.peg_multiplier,
    )


def calculate_bid_ask_price(market: Market) -> tuple[int, int]:
    """(bid_price, ask_price) в MARK_PRICE_PRECISION."""
    return calculate_bid_price(market), calculate_ask_price(market)

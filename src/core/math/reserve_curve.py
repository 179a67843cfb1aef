"""
ReserveCurve — Кривая виртуальных резервов (constant product с peg)

Модуль отвечает на вопросы к "сырой" (не скорректированной на спред) кривой:
- Мгновенная цена пары резервов: quote * peg / base в MARK_PRICE_PRECISION
- Mark price рынка
- Отображение (input asset × position direction) → swap direction
- Резервы после гипотетического свопа при сохранении инварианта sqrt_k²
- Стоимость и PnL base позиции при её закрытии против кривой
- Terminal price: цена после закрытия всей нетто-позиции пользователей

ФОРМУЛЫ:
    price = quote * MARK_PRICE_PRECISION * peg / PEG_PRECISION / base
    new_input = input ± amount
    new_output = sqrt_k² / new_input   (усечение)

Quote вход переводится в единицы резерва:
    amount_reserve = amount_quote * AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO / peg
"""

from typing import Final

from src.core.domain.amm import AMM, AssetType, Market, PositionDirection, SwapDirection
from src.core.domain.precision import (
    AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO,
    MARK_PRICE_PRECISION,
    PEG_PRECISION,
)
from src.core.errors import InvalidArgument
from src.core.math.fixed_point import (
    abs_int,
    div_trunc,
    mul_div,
    require_non_negative,
    require_non_zero_reserve,
)

# =============================================================================
# ТАБЛИЦА НАПРАВЛЕНИЙ СВОПА
# =============================================================================

# (входной актив, направление позиции) → ADD/REMOVE для входного резерва
SWAP_DIRECTION_TABLE: Final[dict[tuple[AssetType, PositionDirection], SwapDirection]] = {
    (AssetType.QUOTE, PositionDirection.LONG): SwapDirection.ADD,
    (AssetType.QUOTE, PositionDirection.SHORT): SwapDirection.REMOVE,
    (AssetType.BASE, PositionDirection.LONG): SwapDirection.REMOVE,
    (AssetType.BASE, PositionDirection.SHORT): SwapDirection.ADD,
}


def get_swap_direction(
    input_asset_type: AssetType,
    position_direction: PositionDirection,
) -> SwapDirection:
    """
    Направление свопа для входного актива и направления позиции.

    Args:
        input_asset_type: Какой актив подаётся на вход (QUOTE/BASE)
        position_direction: Направление сделки (LONG/SHORT)

    Returns:
        SwapDirection.ADD или SwapDirection.REMOVE для входного резерва
    """
    return SWAP_DIRECTION_TABLE[(AssetType(input_asset_type), PositionDirection(position_direction))]


# =============================================================================
# ЦЕНА
# =============================================================================


def calculate_price(base_asset_reserve: int, quote_asset_reserve: int, peg_multiplier: int) -> int:
    """
    Цена пары резервов в MARK_PRICE_PRECISION.

    Функция знаковая: используется и для acquired amounts (entry price),
    где base/quote могут быть отрицательными.

    Args:
        base_asset_reserve: Base резерв (или acquired base), не ноль
        quote_asset_reserve: Quote резерв (или acquired quote)
        peg_multiplier: Peg (PEG_PRECISION)

    Returns:
        quote * MARK_PRICE_PRECISION * peg / PEG_PRECISION / base

    Raises:
        ZeroReserveError: Если base_asset_reserve == 0

    Examples:
        >>> calculate_price(5 * 10**18, 5 * 10**18, 1000)
        10000000000
    """
    require_non_zero_reserve(base_asset_reserve, "base_asset_reserve", "calculate_price")

    scaled_quote = div_trunc(quote_asset_reserve * MARK_PRICE_PRECISION * peg_multiplier, PEG_PRECISION)
    return div_trunc(scaled_quote, base_asset_reserve)


def calculate_mark_price(market: Market) -> int:
    """Mark price рынка по сырым резервам."""
    amm = market.amm
    return calculate_price(amm.base_asset_reserve, amm.quote_asset_reserve, amm.peg_multiplier)


# =============================================================================
# СВОП
# =============================================================================


def calculate_swap_output(
    input_asset_reserve: int,
    swap_amount: int,
    swap_direction: SwapDirection,
    invariant: int,
) -> tuple[int, int]:
    """
    Новые резервы (input, output) после свопа.

    Args:
        input_asset_reserve: Текущий резерв входного актива
        swap_amount: Величина свопа в единицах резерва (>= 0)
        swap_direction: ADD/REMOVE для входного резерва
        invariant: sqrt_k²

    Returns:
        (new_input_asset_reserve, new_output_asset_reserve)

    Raises:
        InvalidArgument: Если REMOVE исчерпывает входной резерв
    """
    if swap_direction == SwapDirection.ADD:
        new_input_asset_reserve = input_asset_reserve + swap_amount
    else:
        new_input_asset_reserve = input_asset_reserve - swap_amount

    if new_input_asset_reserve <= 0:
        raise InvalidArgument(
            f"swap of {swap_amount} exhausts input reserve {input_asset_reserve}"
        )

    new_output_asset_reserve = div_trunc(invariant, new_input_asset_reserve)
    return new_input_asset_reserve, new_output_asset_reserve


def calculate_amm_reserves_after_swap(
    amm: AMM,
    input_asset_type: AssetType,
    swap_amount: int,
    swap_direction: SwapDirection,
) -> tuple[int, int]:
    """
    Резервы AMM после гипотетического свопа.

    Инвариант new_base * new_quote == sqrt_k² сохраняется с точностью
    до усечения выходного резерва. `amm` может быть любым объектом
    с полями base_asset_reserve, quote_asset_reserve, sqrt_k, peg_multiplier
    (например, AMM с резервами, скорректированными на спред).

    Args:
        amm: Состояние AMM
        input_asset_type: QUOTE (QUOTE_PRECISION) или BASE (AMM_RESERVE_PRECISION)
        swap_amount: Величина входа (>= 0)
        swap_direction: ADD/REMOVE для входного резерва

    Returns:
        (new_quote_asset_reserve, new_base_asset_reserve)

    Raises:
        InvalidArgument: Если swap_amount < 0 или своп исчерпывает резерв
    """
    require_non_negative(swap_amount, "swap_amount")

    if swap_amount == 0:
        return amm.quote_asset_reserve, amm.base_asset_reserve

    invariant = amm.sqrt_k * amm.sqrt_k

    if AssetType(input_asset_type) == AssetType.QUOTE:
        # quote amount → единицы резерва с учётом peg
        reserve_amount = mul_div(swap_amount, AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO, amm.peg_multiplier)
        new_quote_asset_reserve, new_base_asset_reserve = calculate_swap_output(
            amm.quote_asset_reserve,
            reserve_amount,
            swap_direction,
            invariant,
        )
    else:
        new_base_asset_reserve, new_quote_asset_reserve = calculate_swap_output(
            amm.base_asset_reserve,
            swap_amount,
            swap_direction,
            invariant,
        )

    return new_quote_asset_reserve, new_base_asset_reserve


def calculate_quote_asset_amount_swapped(
    quote_asset_reserve_before: int,
    quote_asset_reserve_after: int,
    peg_multiplier: int,
) -> int:
    """
    Стоимость изменения quote резерва в QUOTE_PRECISION (всегда >= 0).

    abs(after - before) * peg / AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO
    """
    delta = abs(quote_asset_reserve_after - quote_asset_reserve_before)
    return mul_div(delta, peg_multiplier, AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO)


# =============================================================================
# ЗАКРЫТИЕ ПОЗИЦИИ
# =============================================================================


def get_position_direction(base_asset_amount: int) -> PositionDirection:
    """Направление позиции по знаку base_asset_amount (ноль считается LONG)."""
    if base_asset_amount >= 0:
        return PositionDirection.LONG
    return PositionDirection.SHORT


def calculate_base_asset_value_and_pnl(
    base_asset_amount: int,
    quote_asset_amount: int,
    amm: AMM,
) -> tuple[int, int]:
    """
    Стоимость base позиции при закрытии против кривой и PnL относительно
    затраченного quote.

    Long закрывается добавлением base в резерв, short — изъятием.

    Args:
        base_asset_amount: Знаковая base позиция (AMM_RESERVE_PRECISION)
        quote_asset_amount: Затраченный quote (QUOTE_PRECISION)
        amm: Состояние AMM

    Returns:
        (base_asset_value, pnl), оба в QUOTE_PRECISION
    """
    if base_asset_amount == 0:
        return 0, 0

    direction_to_close = get_position_direction(base_asset_amount).opposite()
    new_quote_asset_reserve, _ = calculate_amm_reserves_after_swap(
        amm,
        AssetType.BASE,
        abs_int(base_asset_amount),
        get_swap_direction(AssetType.BASE, direction_to_close),
    )
    base_asset_value = calculate_quote_asset_amount_swapped(
        amm.quote_asset_reserve,
        new_quote_asset_reserve,
        amm.peg_multiplier,
    )

    if base_asset_amount > 0:
        pnl = base_asset_value - quote_asset_amount
    else:
        pnl = quote_asset_amount - base_asset_value
    return base_asset_value, pnl


# =============================================================================
# TERMINAL PRICE
# =============================================================================


def calculate_terminal_price(market: Market) -> int:
    """
    Terminal price — цена кривой после закрытия всей нетто-позиции пользователей.

    Нетто long закрывается SHORT-ом (base добавляется в резерв), нетто short —
    LONG-ом. При нулевой нетто-позиции terminal price равна mark price.

    Returns:
        Terminal price в MARK_PRICE_PRECISION
    """
    amm = market.amm
    direction_to_close = get_position_direction(market.base_asset_amount).opposite()

    new_quote_asset_reserve, new_base_asset_reserve = calculate_amm_reserves_after_swap(
        amm,
        AssetType.BASE,
        abs_int(market.base_asset_amount),
        get_swap_direction(AssetType.BASE, direction_to_close),
    )

    return calculate_price(new_base_asset_reserve, new_quote_asset_reserve, amm.peg_multiplier)

"""
FixedPoint — целочисленная арифметика с фиксированной точкой

Модуль обеспечивает детерминированные целочисленные примитивы для всего ядра:
- Целочисленный квадратный корень (floor)
- Деление с усечением к нулю (как у BN / checked_div на стороне леджера)
- Масштабирование "умножить на A, разделить на B"
- Тотальные хелперы: abs, sign, clamp
- Валидация предусловий с понятным контекстом

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никакой float арифметики: только int произвольной точности
2. Деление всегда усекает к нулю; нужное смещение (+1/-1) добавляет вызывающий
3. Деление на ноль никогда не происходит неявно: делитель проверяется заранее
4. Все операции детерминированы и воспроизводимы
"""

import math

from src.core.errors import DomainError, InvalidArgument, ZeroReserveError

# =============================================================================
# КВАДРАТНЫЙ КОРЕНЬ
# =============================================================================


def integer_square_root(value: int) -> int:
    """
    Целочисленный квадратный корень (floor).

    Args:
        value: Неотрицательное масштабированное целое

    Returns:
        floor(sqrt(value))

    Raises:
        DomainError: Если value < 0

    Examples:
        >>> integer_square_root(16)
        4
        >>> integer_square_root(17)
        4
        >>> integer_square_root(0)
        0
    """
    if value < 0:
        raise DomainError(f"square root of negative value requested: {value}")
    return math.isqrt(value)


# =============================================================================
# ДЕЛЕНИЕ И МАСШТАБИРОВАНИЕ
# =============================================================================


def div_trunc(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с усечением к нулю.

    Python `//` округляет к -inf; для отрицательных величин (acquired amounts,
    разница цен) это расходится с реализацией леджера. Здесь знак результата
    вычисляется отдельно, модуль делится нацело.

    Args:
        numerator: Числитель (любой знак)
        denominator: Знаменатель (любой знак, не ноль)

    Returns:
        trunc(numerator / denominator)

    Raises:
        InvalidArgument: Если denominator == 0

    Examples:
        >>> div_trunc(7, 2)
        3
        >>> div_trunc(-7, 2)
        -3
        >>> div_trunc(7, -2)
        -3
    """
    if denominator == 0:
        raise InvalidArgument(f"division by zero: {numerator} / 0")

    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def mul_div(value: int, numerator: int, denominator: int) -> int:
    """
    Масштабирование: value * numerator / denominator (усечение к нулю).

    Промежуточное произведение не переполняется: int произвольной точности.

    Examples:
        >>> mul_div(5, 10**10, 10**3)
        50000000
        >>> mul_div(-3, 1, 2)
        -1
    """
    return div_trunc(value * numerator, denominator)


# =============================================================================
# ТОТАЛЬНЫЕ ХЕЛПЕРЫ
# =============================================================================


def abs_int(value: int) -> int:
    """Модуль целого числа."""
    return value if value >= 0 else -value


def sign(value: int) -> int:
    """Знак: -1, 0 или +1."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def clamp_int(
    value: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """
    Ограничение целого значения диапазоном [min_value, max_value].

    Examples:
        >>> clamp_int(5, 0, 10)
        5
        >>> clamp_int(-1, 0, 10)
        0
        >>> clamp_int(15, max_value=10)
        10
    """
    result = value

    if min_value is not None:
        result = max(result, min_value)

    if max_value is not None:
        result = min(result, max_value)

    return result


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def require_positive(value: int, name: str) -> None:
    """
    Валидация, что значение строго положительное.

    Raises:
        InvalidArgument: Если value <= 0
    """
    if value <= 0:
        raise InvalidArgument(f"{name} must be positive, got {value}")


def require_non_negative(value: int, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Raises:
        InvalidArgument: Если value < 0
    """
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")


def require_non_zero_reserve(value: int, name: str, operation: str) -> None:
    """
    Проверка резерва-делителя до деления.

    Raises:
        ZeroReserveError: Если value == 0
    """
    if value == 0:
        raise ZeroReserveError(name, operation)

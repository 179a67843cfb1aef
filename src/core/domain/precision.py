"""
Precision — Таблица констант масштабирования

Все суммы в ядре — масштабированные целые числа. Отношения между доменами
точности фиксированы и не конфигурируются во время исполнения.

Домены:
- MARK_PRICE_PRECISION — цены (mark/bid/ask/entry)
- AMM_RESERVE_PRECISION — виртуальные резервы base/quote
- PEG_PRECISION — peg multiplier
- QUOTE_PRECISION — реальный quote asset (USDC)
- BID_ASK_SPREAD_PRECISION — единица base_spread (basis points)

КРИТИЧЕСКИЙ ИНВАРИАНТ:
Каждое умножение/деление между доменами использует константу из этого модуля.
Неверная константа — самый дорогой класс ошибок в системе.
"""

from typing import Final

# =============================================================================
# БАЗОВЫЕ ДОМЕНЫ ТОЧНОСТИ
# =============================================================================

MARK_PRICE_PRECISION: Final[int] = 10**10

# sqrt(MARK_PRICE_PRECISION): кривая с резервами base == quote == N * 10^5
# при peg = PEG_PRECISION даёт mark price ровно 1.0
MARK_PRICE_PRECISION_SQRT: Final[int] = 10**5

AMM_RESERVE_PRECISION: Final[int] = 10**13

PEG_PRECISION: Final[int] = 10**3

QUOTE_PRECISION: Final[int] = 10**6

BID_ASK_SPREAD_PRECISION: Final[int] = 10**4


# =============================================================================
# ОТНОШЕНИЯ МЕЖДУ ДОМЕНАМИ
# =============================================================================

# reserve → quote
AMM_TO_QUOTE_PRECISION_RATIO: Final[int] = AMM_RESERVE_PRECISION // QUOTE_PRECISION

# price → quote
PRICE_TO_QUOTE_PRECISION: Final[int] = MARK_PRICE_PRECISION // QUOTE_PRECISION

# reserve * peg → quote
AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO: Final[int] = (
    AMM_RESERVE_PRECISION * PEG_PRECISION // QUOTE_PRECISION
)


# =============================================================================
# TARGET PRICE SOLVER
# =============================================================================

# Единицы доли сдвига к целевой цене: [0, 1000] => [0, 1]
MAX_PCT: Final[int] = 1000

# Допуск (в единицах цены), на который решённая цена может уйти
# за целевую из-за целочисленного округления sqrt
TARGET_PRICE_TOLERANCE: Final[int] = 100_000


# =============================================================================
# FEE POOL
# =============================================================================

# Доля total_fee, закреплённая за клиринговой палатой (1/2); она не входит
# в бюджет repeg
SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_NUMERATOR: Final[int] = 1
SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_DENOMINATOR: Final[int] = 2

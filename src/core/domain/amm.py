"""
AMM / Market — Модели снапшота виртуального маркет-мейкера

Immutable Pydantic модели, представляющие снапшот состояния рынка,
полученный от внешнего слоя подписки на аккаунты.
Полная совместимость с JSON Schema (contracts/schema/market.json):
поля принимаются как в camelCase (формат аккаунта), так и в snake_case.

Все суммы — масштабированные целые (см. src.core.domain.precision).
Float значения отклоняются (strict int).
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from src.core.domain.precision import BID_ASK_SPREAD_PRECISION


# =============================================================================
# ENUMS
# =============================================================================


class PositionDirection(str, Enum):
    """Направление позиции / сделки"""

    LONG = "long"
    SHORT = "short"

    def opposite(self) -> "PositionDirection":
        """Противоположное направление (закрытие позиции)."""
        if self is PositionDirection.LONG:
            return PositionDirection.SHORT
        return PositionDirection.LONG


class AssetType(str, Enum):
    """Какой актив является входом (или выходом) расчёта"""

    QUOTE = "quote"
    BASE = "base"


class SwapDirection(str, Enum):
    """Направление изменения входного резерва при свопе"""

    ADD = "add"
    REMOVE = "remove"


# =============================================================================
# RESERVE PAIR
# =============================================================================


@dataclass(frozen=True)
class ReservePair:
    """Пара виртуальных резервов (сырые или скорректированные на спред)."""

    base_asset_reserve: int
    quote_asset_reserve: int


# =============================================================================
# AMM MODEL
# =============================================================================


class AMM(BaseModel):
    """
    Состояние виртуального AMM (read-only для ядра).

    Инвариант кривой: base_asset_reserve * quote_asset_reserve ≈ sqrt_k².
    В покое (после settlement funding) равенство точное, в серии сделок
    допускается транзитный дрейф на величину округления.
    """

    # Кривая
    base_asset_reserve: int = Field(
        ..., gt=0, strict=True, description="Виртуальный base резерв (AMM_RESERVE_PRECISION)"
    )
    quote_asset_reserve: int = Field(
        ..., gt=0, strict=True, description="Виртуальный quote резерв (AMM_RESERVE_PRECISION)"
    )
    sqrt_k: int = Field(
        ..., gt=0, strict=True, description="Корень инварианта кривой (AMM_RESERVE_PRECISION)"
    )
    peg_multiplier: int = Field(
        ..., gt=0, strict=True, description="Peg multiplier (PEG_PRECISION)"
    )
    base_spread: int = Field(
        0,
        ge=0,
        lt=BID_ASK_SPREAD_PRECISION,
        strict=True,
        description="Полный bid/ask спред (BID_ASK_SPREAD_PRECISION); 0 — котировать mark",
    )

    # Комиссии (fee pool для бюджета repeg) и funding (passthrough)
    total_fee: int = Field(0, ge=0, strict=True, description="Накопленные комиссии (QUOTE_PRECISION)")
    total_fee_minus_distributions: int = Field(
        0, strict=True, description="Комиссии за вычетом распределений (QUOTE_PRECISION)"
    )
    cumulative_funding_rate_long: int = Field(0, strict=True, description="Кумулятивный funding long")
    cumulative_funding_rate_short: int = Field(0, strict=True, description="Кумулятивный funding short")
    last_mark_price_twap: int = Field(0, ge=0, strict=True, description="TWAP mark price")
    periodicity: int = Field(0, ge=0, strict=True, description="Период funding (секунды)")

    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

    @property
    def invariant(self) -> int:
        """Инвариант кривой k = sqrt_k²."""
        return self.sqrt_k * self.sqrt_k

    @property
    def reserves(self) -> ReservePair:
        """Сырые (не скорректированные на спред) резервы."""
        return ReservePair(
            base_asset_reserve=self.base_asset_reserve,
            quote_asset_reserve=self.quote_asset_reserve,
        )


# =============================================================================
# MARKET MODEL
# =============================================================================


class Market(BaseModel):
    """
    Модель рынка: AMM + идентификация и учёт открытого интереса.

    Immutable модель (frozen=True). Все "изменения" (симуляция сделки)
    создают новый экземпляр через model_copy.
    """

    market_index: int = Field(..., ge=0, strict=True, description="Индекс рынка")
    amm: AMM = Field(..., description="Состояние виртуального AMM")

    initialized: bool = Field(True, description="Рынок инициализирован")
    oracle: str = Field("", description="Ссылка на oracle (непрозрачная)")

    # Открытый интерес (AMM_RESERVE_PRECISION)
    base_asset_amount: int = Field(
        0, strict=True, description="Нетто base позиция пользователей (знаковая)"
    )
    base_asset_amount_long: int = Field(0, ge=0, strict=True, description="Суммарный long")
    base_asset_amount_short: int = Field(0, le=0, strict=True, description="Суммарный short")
    open_interest: int = Field(0, ge=0, strict=True, description="Число открытых позиций")

    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

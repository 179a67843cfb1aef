"""
Тесты для доменных моделей: AMM, Market, перечисления

Проверяет:
1. Создание и валидацию моделей Pydantic
2. Immutability (frozen=True)
3. Strict int: float значения отклоняются
4. camelCase алиасы (формат аккаунта) и snake_case имена
5. Инвариант кривой и границы спреда
"""

import pytest
from pydantic import ValidationError

from src.core.domain import (
    AMM,
    BID_ASK_SPREAD_PRECISION,
    MARK_PRICE_PRECISION_SQRT,
    PEG_PRECISION,
    AssetType,
    Market,
    PositionDirection,
    ReservePair,
    SwapDirection,
)

RESERVE = 5 * 10**13 * MARK_PRICE_PRECISION_SQRT


@pytest.fixture
def amm() -> AMM:
    """1:1 кривая без спреда"""
    return AMM(
        base_asset_reserve=RESERVE,
        quote_asset_reserve=RESERVE,
        sqrt_k=RESERVE,
        peg_multiplier=PEG_PRECISION,
    )


class TestEnums:
    """Тесты перечислений"""

    def test_values(self) -> None:
        assert PositionDirection.LONG.value == "long"
        assert AssetType("quote") is AssetType.QUOTE
        assert SwapDirection("remove") is SwapDirection.REMOVE

    def test_opposite_direction(self) -> None:
        assert PositionDirection.LONG.opposite() is PositionDirection.SHORT
        assert PositionDirection.SHORT.opposite() is PositionDirection.LONG


class TestAMM:
    """Тесты для модели AMM"""

    def test_defaults(self, amm: AMM) -> None:
        assert amm.base_spread == 0
        assert amm.total_fee == 0

    def test_invariant(self, amm: AMM) -> None:
        assert amm.invariant == RESERVE * RESERVE
        assert amm.invariant == amm.base_asset_reserve * amm.quote_asset_reserve

    def test_reserves_pair(self, amm: AMM) -> None:
        assert amm.reserves == ReservePair(base_asset_reserve=RESERVE, quote_asset_reserve=RESERVE)

    def test_frozen(self, amm: AMM) -> None:
        with pytest.raises(ValidationError, match="frozen"):
            amm.base_asset_reserve = 1

    @pytest.mark.parametrize(
        "field", ["base_asset_reserve", "quote_asset_reserve", "sqrt_k", "peg_multiplier"]
    )
    def test_non_positive_rejected(self, field: str) -> None:
        data = {
            "base_asset_reserve": RESERVE,
            "quote_asset_reserve": RESERVE,
            "sqrt_k": RESERVE,
            "peg_multiplier": PEG_PRECISION,
        }
        data[field] = 0
        with pytest.raises(ValidationError, match="greater than 0"):
            AMM(**data)

    def test_float_rejected(self) -> None:
        """Float в горячем пути запрещён"""
        with pytest.raises(ValidationError):
            AMM(
                base_asset_reserve=5.0e18,
                quote_asset_reserve=RESERVE,
                sqrt_k=RESERVE,
                peg_multiplier=PEG_PRECISION,
            )

    def test_spread_bounds(self) -> None:
        AMM(
            base_asset_reserve=RESERVE,
            quote_asset_reserve=RESERVE,
            sqrt_k=RESERVE,
            peg_multiplier=PEG_PRECISION,
            base_spread=BID_ASK_SPREAD_PRECISION - 1,
        )
        with pytest.raises(ValidationError, match="less than"):
            AMM(
                base_asset_reserve=RESERVE,
                quote_asset_reserve=RESERVE,
                sqrt_k=RESERVE,
                peg_multiplier=PEG_PRECISION,
                base_spread=BID_ASK_SPREAD_PRECISION,
            )
        with pytest.raises(ValidationError):
            AMM(
                base_asset_reserve=RESERVE,
                quote_asset_reserve=RESERVE,
                sqrt_k=RESERVE,
                peg_multiplier=PEG_PRECISION,
                base_spread=-1,
            )

    def test_camel_case_aliases(self) -> None:
        """Снапшот аккаунта приходит в camelCase"""
        amm = AMM.model_validate(
            {
                "baseAssetReserve": RESERVE,
                "quoteAssetReserve": RESERVE,
                "sqrtK": RESERVE,
                "pegMultiplier": PEG_PRECISION,
                "baseSpread": 500,
            }
        )
        assert amm.base_spread == 500
        dumped = amm.model_dump(by_alias=True)
        assert dumped["sqrtK"] == RESERVE
        assert "base_asset_reserve" not in dumped


class TestMarket:
    """Тесты для модели Market"""

    def test_create(self, amm: AMM) -> None:
        market = Market(market_index=0, amm=amm)
        assert market.initialized is True
        assert market.base_asset_amount == 0
        assert market.amm is amm

    def test_frozen(self, amm: AMM) -> None:
        market = Market(market_index=0, amm=amm)
        with pytest.raises(ValidationError, match="frozen"):
            market.base_asset_amount = 10

    def test_short_total_must_be_non_positive(self, amm: AMM) -> None:
        with pytest.raises(ValidationError):
            Market(market_index=0, amm=amm, base_asset_amount_short=1)

    def test_nested_dict(self) -> None:
        market = Market.model_validate(
            {
                "marketIndex": 3,
                "amm": {
                    "baseAssetReserve": RESERVE,
                    "quoteAssetReserve": RESERVE,
                    "sqrtK": RESERVE,
                    "pegMultiplier": PEG_PRECISION,
                },
                "baseAssetAmount": -10**13,
            }
        )
        assert market.market_index == 3
        assert market.base_asset_amount == -10**13
        assert market.amm.peg_multiplier == PEG_PRECISION

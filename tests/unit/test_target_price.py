"""
Тесты для модуля TargetPriceSolver

Проверяет:
1. Обратный ход: сделка и решение обратно к исходной цене
2. Демпфирование разрыва (pct)
3. Цель внутри bid/ask: сделка нулевого размера
4. Размер в quote и base
5. Пост-условия и отказ на вырожденных резервах
6. Валидацию аргументов
"""

import pytest

from src.core.domain import (
    AMM,
    MARK_PRICE_PRECISION,
    MARK_PRICE_PRECISION_SQRT,
    PEG_PRECISION,
    TARGET_PRICE_TOLERANCE,
    AssetType,
    Market,
    PositionDirection,
)
from src.core.errors import DomainError, InvalidArgument
from src.core.math.reserve_curve import calculate_mark_price
from src.core.math.spread import calculate_ask_price
from src.core.math.target_price import TargetTradeResult, calculate_target_price_trade
from src.core.math.trade import calculate_market_after_trade

RESERVE = 5 * 10**13 * MARK_PRICE_PRECISION_SQRT


def make_market(reserve: int = RESERVE, base_spread: int = 0) -> Market:
    amm = AMM(
        base_asset_reserve=reserve,
        quote_asset_reserve=reserve,
        sqrt_k=reserve,
        peg_multiplier=PEG_PRECISION,
        base_spread=base_spread,
    )
    return Market(market_index=0, amm=amm)


@pytest.fixture
def market() -> Market:
    return make_market()


@pytest.fixture
def spread_market() -> Market:
    return make_market(base_spread=500)


@pytest.fixture
def moved_market(market: Market) -> Market:
    """Рынок после LONG на 1000 USDC"""
    return calculate_market_after_trade(PositionDirection.LONG, 10**9, market)


# =============================================================================
# ОБРАТНЫЙ ХОД
# =============================================================================


class TestRoundTrip:
    """Сделка → решение обратно к исходной цене"""

    def test_quote_size_recovers_trade(self, moved_market: Market) -> None:
        result = calculate_target_price_trade(moved_market, MARK_PRICE_PRECISION, use_spread=False)

        assert isinstance(result, TargetTradeResult)
        assert result.direction is PositionDirection.SHORT
        assert abs(result.size - 10**9) <= 10
        assert result.achieved_price == MARK_PRICE_PRECISION
        assert result.target_price == MARK_PRICE_PRECISION

    def test_base_size(self, moved_market: Market) -> None:
        result = calculate_target_price_trade(
            moved_market,
            MARK_PRICE_PRECISION,
            output_asset_type=AssetType.BASE,
            use_spread=False,
        )
        # isqrt(R² - 1) - 1 == R - 2
        assert result.size == (RESERVE - 2) - moved_market.amm.base_asset_reserve
        assert abs(result.size - moved_market.base_asset_amount) <= 10

    def test_entry_price_between_mark_and_target(self, moved_market: Market) -> None:
        result = calculate_target_price_trade(moved_market, MARK_PRICE_PRECISION, use_spread=False)
        assert MARK_PRICE_PRECISION < result.entry_price < calculate_mark_price(moved_market)


# =============================================================================
# ДЕМПФИРОВАНИЕ И СПРЕД
# =============================================================================


class TestDampingAndSpread:
    """Тесты pct и bid/ask"""

    def test_pct_halves_gap(self, spread_market: Market) -> None:
        result = calculate_target_price_trade(spread_market, 12 * 10**9, pct=500)

        assert result.target_price == 11 * 10**9
        assert result.direction is PositionDirection.LONG
        assert result.size > 0
        assert abs(result.target_price - result.achieved_price) < TARGET_PRICE_TOLERANCE
        assert calculate_ask_price(spread_market) < result.entry_price < result.target_price

    def test_target_inside_band_long(self, spread_market: Market) -> None:
        result = calculate_target_price_trade(spread_market, 10_200_000_000)
        assert result.direction is PositionDirection.LONG
        assert result.size == 0
        assert result.achieved_price == 10_200_000_000

    def test_target_inside_band_short(self, spread_market: Market) -> None:
        result = calculate_target_price_trade(spread_market, 9_800_000_000)
        assert result.direction is PositionDirection.SHORT
        assert result.size == 0

    def test_band_ignored_without_spread(self, spread_market: Market) -> None:
        result = calculate_target_price_trade(spread_market, 10_200_000_000, use_spread=False)
        assert result.direction is PositionDirection.LONG
        assert result.size > 0

    def test_target_equals_mark(self, market: Market) -> None:
        result = calculate_target_price_trade(market, MARK_PRICE_PRECISION, use_spread=False)
        assert result.size == 0
        assert result.achieved_price == MARK_PRICE_PRECISION


# =============================================================================
# ОШИБКИ
# =============================================================================


class TestErrors:
    """Пост-условия и валидация"""

    def test_tiny_reserves_overshoot_raises(self) -> None:
        market = make_market(reserve=10)
        with pytest.raises(DomainError, match="target price calculation incorrect"):
            calculate_target_price_trade(market, 10_100_000_000, use_spread=False)

    def test_collapsed_base_reserve_raises(self) -> None:
        market = make_market(reserve=1)
        with pytest.raises(DomainError, match="non-positive"):
            calculate_target_price_trade(market, 5 * 10**9, use_spread=False)

    @pytest.mark.parametrize("pct", [0, -1, 1001])
    def test_invalid_pct(self, market: Market, pct: int) -> None:
        with pytest.raises(InvalidArgument, match="pct"):
            calculate_target_price_trade(market, 2 * MARK_PRICE_PRECISION, pct=pct)

    @pytest.mark.parametrize("target_price", [0, -MARK_PRICE_PRECISION])
    def test_non_positive_target(self, market: Market, target_price: int) -> None:
        with pytest.raises(InvalidArgument, match="target_price"):
            calculate_target_price_trade(market, target_price)

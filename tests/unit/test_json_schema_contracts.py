"""
Тесты для JSON Schema контрактов снапшота рынка

Проверяет:
1. Загрузку и meta-validation схемы
2. Валидный снапшот проходит схему и загружается в Market
3. Отсутствующие/отрицательные/нецелые поля отклоняются
4. Ограничения модели (strict int) поверх схемы
"""

import copy

import jsonschema
import pytest
from pydantic import ValidationError

from src.core.contracts import (
    SCHEMA_DIR,
    MarketSnapshotValidator,
    load_market_snapshot,
    load_schema,
    validate_market_snapshot,
)
from src.core.domain import Market
from src.core.math import calculate_mark_price

RESERVE = 5 * 10**18


@pytest.fixture
def snapshot() -> dict:
    """Снапшот аккаунта рынка в camelCase"""
    return {
        "marketIndex": 0,
        "initialized": True,
        "oracle": "oracle-sol-usd",
        "baseAssetAmount": 0,
        "baseAssetAmountLong": 0,
        "baseAssetAmountShort": 0,
        "openInterest": 0,
        "amm": {
            "baseAssetReserve": RESERVE,
            "quoteAssetReserve": RESERVE,
            "sqrtK": RESERVE,
            "pegMultiplier": 1000,
            "baseSpread": 500,
            "totalFee": 0,
            "lastMarkPriceTwap": 10_000_000_000,
            "periodicity": 3600,
        },
    }


class TestLoadSchema:
    """Тесты для load_schema"""

    def test_load_market_schema(self) -> None:
        schema = load_schema("market")
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        assert "amm" in schema["required"]

    def test_schema_dir(self) -> None:
        assert (SCHEMA_DIR / "market.json").is_file()

    def test_schema_cached(self) -> None:
        assert load_schema("market") is load_schema("market")

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_schema("no_such_schema")

    def test_validators_share_schema(self) -> None:
        first = MarketSnapshotValidator()
        second = MarketSnapshotValidator()
        assert first._validator.schema is second._validator.schema


class TestMarketSnapshotContract:
    """Тесты схемы market.json"""

    def test_valid_snapshot(self, snapshot: dict) -> None:
        validate_market_snapshot(snapshot)
        assert MarketSnapshotValidator().is_valid(snapshot)

    def test_minimal_snapshot(self, snapshot: dict) -> None:
        minimal = {
            "marketIndex": 1,
            "amm": {
                key: snapshot["amm"][key]
                for key in ("baseAssetReserve", "quoteAssetReserve", "sqrtK", "pegMultiplier")
            },
        }
        validate_market_snapshot(minimal)

    def test_missing_sqrt_k(self, snapshot: dict) -> None:
        del snapshot["amm"]["sqrtK"]
        with pytest.raises(jsonschema.ValidationError, match="sqrtK"):
            validate_market_snapshot(snapshot)

    def test_negative_reserve(self, snapshot: dict) -> None:
        snapshot["amm"]["baseAssetReserve"] = -1
        with pytest.raises(jsonschema.ValidationError):
            validate_market_snapshot(snapshot)

    def test_fractional_reserve(self, snapshot: dict) -> None:
        snapshot["amm"]["quoteAssetReserve"] = 5.5
        with pytest.raises(jsonschema.ValidationError):
            validate_market_snapshot(snapshot)

    def test_spread_out_of_range(self, snapshot: dict) -> None:
        snapshot["amm"]["baseSpread"] = 10_000
        with pytest.raises(jsonschema.ValidationError):
            validate_market_snapshot(snapshot)

    def test_positive_short_total(self, snapshot: dict) -> None:
        snapshot["baseAssetAmountShort"] = 1
        with pytest.raises(jsonschema.ValidationError):
            validate_market_snapshot(snapshot)

    def test_iter_errors_reports_all(self, snapshot: dict) -> None:
        snapshot["amm"]["sqrtK"] = 0
        snapshot["amm"]["pegMultiplier"] = 0
        errors = list(MarketSnapshotValidator().iter_errors(snapshot))
        assert len(errors) == 2

    def test_error_paths(self, snapshot: dict) -> None:
        snapshot["amm"]["sqrtK"] = 0
        snapshot["amm"]["pegMultiplier"] = 0
        assert MarketSnapshotValidator().error_paths(snapshot) == ["amm.pegMultiplier", "amm.sqrtK"]

    def test_missing_root_field_path(self, snapshot: dict) -> None:
        del snapshot["marketIndex"]
        assert MarketSnapshotValidator().error_paths(snapshot) == ["<root>"]


class TestLoadMarketSnapshot:
    """Тесты для load_market_snapshot"""

    def test_loads_market(self, snapshot: dict) -> None:
        market = load_market_snapshot(snapshot)
        assert isinstance(market, Market)
        assert market.oracle == "oracle-sol-usd"
        assert market.amm.base_spread == 500
        assert market.amm.periodicity == 3600
        assert calculate_mark_price(market) == 10_000_000_000

    def test_input_not_modified(self, snapshot: dict) -> None:
        original = copy.deepcopy(snapshot)
        load_market_snapshot(snapshot)
        assert snapshot == original

    def test_integral_float_rejected_by_model(self, snapshot: dict) -> None:
        """5.0 проходит JSON Schema integer, но не strict int модели"""
        snapshot["amm"]["sqrtK"] = 5.0
        validate_market_snapshot(snapshot)
        with pytest.raises(ValidationError):
            load_market_snapshot(snapshot)

    def test_schema_checked_first(self, snapshot: dict) -> None:
        del snapshot["marketIndex"]
        with pytest.raises(jsonschema.ValidationError):
            load_market_snapshot(snapshot)

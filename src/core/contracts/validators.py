"""
Market Snapshot Contract

Снапшот рынка приходит от внешнего слоя подписки на аккаунты в camelCase.
Перед построением модели он проверяется по JSON Schema контракту
contracts/schema/market.json (Draft 2020-12), затем по ограничениям
pydantic модели Market (strict int, frozen).

Порядок проверок:
1. JSON Schema: структура, обязательные поля, знаки и диапазоны
2. Market.model_validate: strict int (5.0 проходит схему, но не модель)
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List

import jsonschema
from jsonschema import Draft202012Validator

from src.core.domain.amm import Market

logger = logging.getLogger(__name__)

# contracts/schema/ в корне репозитория
SCHEMA_DIR = Path(__file__).resolve().parents[3] / "contracts" / "schema"

MARKET_SCHEMA_NAME = "market"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """
    JSON Schema из SCHEMA_DIR, прошедшая meta-validation.

    Raises:
        FileNotFoundError: Если файла схемы нет
        ValueError: Если файл не является валидной Draft 2020-12 схемой
    """
    schema_path = SCHEMA_DIR / f"{schema_name}.json"
    if not schema_path.is_file():
        raise FileNotFoundError(f"Schema not found: {schema_path}")

    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {schema_path.name}: {e.message}") from e

    logger.debug("loaded schema %s from %s", schema_name, schema_path)
    return schema


class MarketSnapshotValidator:
    """
    Проверка снапшота рынка и построение Market.

    Схема загружается один раз; экземпляр можно переиспользовать
    для потока снапшотов одного источника.
    """

    def __init__(self) -> None:
        self._validator = Draft202012Validator(load_schema(MARKET_SCHEMA_NAME))

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Первое (по релевантности) нарушение схемы
        """
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(data))
        if error is not None:
            raise error

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self._validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[jsonschema.ValidationError]:
        return self._validator.iter_errors(data)

    def error_paths(self, data: Dict[str, Any]) -> List[str]:
        """Пути полей с нарушениями ("amm.sqrtK"), отсортированные."""
        return sorted(
            ".".join(str(part) for part in error.absolute_path) or "<root>"
            for error in self._validator.iter_errors(data)
        )

    def load(self, data: Dict[str, Any]) -> Market:
        """
        Снапшот → Market: сначала контракт, затем модель.

        Raises:
            jsonschema.ValidationError: Нарушение схемы
            pydantic.ValidationError: Нарушение ограничений модели
        """
        self.validate(data)
        market = Market.model_validate(data)
        logger.debug(
            "market snapshot loaded: index=%d base=%d quote=%d peg=%d spread=%d",
            market.market_index,
            market.amm.base_asset_reserve,
            market.amm.quote_asset_reserve,
            market.amm.peg_multiplier,
            market.amm.base_spread,
        )
        return market


def validate_market_snapshot(data: Dict[str, Any]) -> None:
    """Проверка снапшота рынка по контракту (jsonschema.ValidationError)."""
    MarketSnapshotValidator().validate(data)


def load_market_snapshot(data: Dict[str, Any]) -> Market:
    """Immutable Market из снапшота подписки."""
    return MarketSnapshotValidator().load(data)

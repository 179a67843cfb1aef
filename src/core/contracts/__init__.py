"""
Contract Validation Module

Модуль для валидации JSON контрактов снапшотов рынка.
"""

from .validators import (
    MARKET_SCHEMA_NAME,
    SCHEMA_DIR,
    MarketSnapshotValidator,
    load_market_snapshot,
    load_schema,
    validate_market_snapshot,
)

__all__ = [
    # Schema
    "SCHEMA_DIR",
    "MARKET_SCHEMA_NAME",
    "load_schema",
    # Validator
    "MarketSnapshotValidator",
    # Functions
    "validate_market_snapshot",
    "load_market_snapshot",
]

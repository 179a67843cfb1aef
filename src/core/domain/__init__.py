"""
Domain models and value objects.

Contains the market snapshot (AMM, Market), closed enumerations
(PositionDirection, AssetType, SwapDirection) and the precision table.
"""

from src.core.domain.amm import (
    AMM,
    AssetType,
    Market,
    PositionDirection,
    ReservePair,
    SwapDirection,
)
from src.core.domain.precision import (
    AMM_RESERVE_PRECISION,
    AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO,
    AMM_TO_QUOTE_PRECISION_RATIO,
    BID_ASK_SPREAD_PRECISION,
    MARK_PRICE_PRECISION,
    MARK_PRICE_PRECISION_SQRT,
    MAX_PCT,
    PEG_PRECISION,
    PRICE_TO_QUOTE_PRECISION,
    QUOTE_PRECISION,
    SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_DENOMINATOR,
    SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_NUMERATOR,
    TARGET_PRICE_TOLERANCE,
)

__all__ = [
    # Precision table
    "AMM_RESERVE_PRECISION",
    "AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO",
    "AMM_TO_QUOTE_PRECISION_RATIO",
    "BID_ASK_SPREAD_PRECISION",
    "MARK_PRICE_PRECISION",
    "MARK_PRICE_PRECISION_SQRT",
    "MAX_PCT",
    "PEG_PRECISION",
    "PRICE_TO_QUOTE_PRECISION",
    "QUOTE_PRECISION",
    "SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_DENOMINATOR",
    "SHARE_OF_FEES_ALLOCATED_TO_CLEARING_HOUSE_NUMERATOR",
    "TARGET_PRICE_TOLERANCE",
    # Market snapshot
    "AMM",
    "Market",
    "ReservePair",
    # Enums
    "AssetType",
    "PositionDirection",
    "SwapDirection",
]

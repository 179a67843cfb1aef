"""
Core math modules для ядра ценообразования vAMM

Целочисленные примитивы, кривая резервов, спред, симуляция сделок
и обращение инварианта для целевой цены.
"""

# Fixed point
from src.core.math.fixed_point import (
    abs_int,
    clamp_int,
    div_trunc,
    integer_square_root,
    mul_div,
    require_non_negative,
    require_non_zero_reserve,
    require_positive,
    sign,
)

# Reserve curve
from src.core.math.reserve_curve import (
    SWAP_DIRECTION_TABLE,
    calculate_amm_reserves_after_swap,
    calculate_base_asset_value_and_pnl,
    calculate_mark_price,
    calculate_price,
    calculate_quote_asset_amount_swapped,
    calculate_swap_output,
    calculate_terminal_price,
    get_position_direction,
    get_swap_direction,
)

# Spread
from src.core.math.spread import (
    calculate_ask_price,
    calculate_bid_ask_price,
    calculate_bid_price,
    calculate_spread_reserves,
    spread_adjusted_amm,
)

# Trade simulation
from src.core.math.trade import (
    SlippageResult,
    TradeSimulationResult,
    calculate_market_after_trade,
    calculate_trade_acquired_amounts,
    calculate_trade_slippage,
)

# Target price
from src.core.math.target_price import TargetTradeResult, calculate_target_price_trade

# Repeg
from src.core.math.repeg import (
    PegAdjustment,
    RepegValidity,
    adjust_peg_cost,
    calculate_fee_pool,
    calculate_optimal_peg_and_cost,
    calculate_repeg_validity,
    total_fee_lower_bound,
)

__all__ = [
    # Fixed point
    "abs_int",
    "clamp_int",
    "div_trunc",
    "integer_square_root",
    "mul_div",
    "require_non_negative",
    "require_non_zero_reserve",
    "require_positive",
    "sign",
    # Reserve curve
    "SWAP_DIRECTION_TABLE",
    "calculate_amm_reserves_after_swap",
    "calculate_base_asset_value_and_pnl",
    "calculate_mark_price",
    "calculate_price",
    "calculate_quote_asset_amount_swapped",
    "calculate_swap_output",
    "calculate_terminal_price",
    "get_position_direction",
    "get_swap_direction",
    # Spread
    "calculate_ask_price",
    "calculate_bid_ask_price",
    "calculate_bid_price",
    "calculate_spread_reserves",
    "spread_adjusted_amm",
    # Trade simulation: types
    "SlippageResult",
    "TradeSimulationResult",
    # Trade simulation: functions
    "calculate_market_after_trade",
    "calculate_trade_acquired_amounts",
    "calculate_trade_slippage",
    # Target price
    "TargetTradeResult",
    "calculate_target_price_trade",
    # Repeg
    "PegAdjustment",
    "RepegValidity",
    "adjust_peg_cost",
    "calculate_fee_pool",
    "calculate_optimal_peg_and_cost",
    "calculate_repeg_validity",
    "total_fee_lower_bound",
]

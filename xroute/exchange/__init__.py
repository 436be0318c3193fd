"""
xroute Exchange Engine

Components:
  - Pricing (constant-product, integer floor math)
  - Pool Registry + lookup index
  - Liquidity Book (mint-only provider shares)
  - Pool Engine (create / swap / add-liquidity)
  - Chain Routes (route-cost estimates)
"""

from .pricing import (
    amount_in_after_fee,
    fee_amount,
    get_amount_out,
    initial_shares,
    liquidity_shares,
)
from .pools import LiquidityBook, Pool, PoolRegistry
from .routes import ChainRoute, RouteEstimate, RouteTable, validate_network
from .engine import PoolEngine

__all__ = [
    # Pricing
    "amount_in_after_fee", "fee_amount", "get_amount_out",
    "initial_shares", "liquidity_shares",
    # Pools
    "LiquidityBook", "Pool", "PoolRegistry",
    # Routes
    "ChainRoute", "RouteEstimate", "RouteTable", "validate_network",
    # Engine
    "PoolEngine",
]

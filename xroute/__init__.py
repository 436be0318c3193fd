"""
xroute Package

Constant-product pool router and cross-chain message relay sharing one
owner-gated, all-or-nothing ledger.

    from xroute import Ledger, OpType
    from xroute.tokens import FungibleToken
    from xroute.exceptions import SlippageExceeded
"""

from .exceptions import XRouteError
from .ledger import ExecResult, Ledger, OpType

__all__ = ["ExecResult", "Ledger", "OpType", "XRouteError"]

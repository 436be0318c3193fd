"""
xroute RPC Modules

Each module implements a namespace of JSON-RPC methods.
"""

from .messaging import MessagingModule
from .router import RouterModule

__all__ = [
    "MessagingModule",
    "RouterModule",
]

"""
xroute asset layer

Provides:
  - FungibleAsset / AssetRegistry                  (asset.py)
  - FungibleToken reference implementation         (fungible.py)
"""

from .asset import AssetRegistry, FungibleAsset
from .fungible import (
    FungibleToken,
    InsufficientBalanceError,
    MintEvent,
    TokenError,
    TokenFrozenError,
    TransferEvent,
)

__all__ = [
    "AssetRegistry",
    "FungibleAsset",
    "FungibleToken",
    "InsufficientBalanceError",
    "MintEvent",
    "TokenError",
    "TokenFrozenError",
    "TransferEvent",
]

"""
xroute Cross-Chain Messaging

Provides:
  - types: Bridge, ChainConfig, CrossChainMessage, ValidationRecord, MessageStatus
  - registry: BridgeRegistry, ChainConfigRegistry
  - messaging: MessageLedger, MessageEngine
"""

from .types import (
    Bridge,
    ChainConfig,
    CrossChainMessage,
    MessageStatus,
    ValidationRecord,
)
from .registry import BridgeRegistry, ChainConfigRegistry
from .messaging import MessageEngine, MessageLedger

__all__ = [
    "Bridge",
    "BridgeRegistry",
    "ChainConfig",
    "ChainConfigRegistry",
    "CrossChainMessage",
    "MessageEngine",
    "MessageLedger",
    "MessageStatus",
    "ValidationRecord",
]

"""
xroute Cross-Chain Types

Core data structures for the cross-chain messaging subsystem.

Defines:
  - Bridge: relay configuration naming a validator, supported networks
    and a fee schedule
  - ChainConfig: per-network destination parameters
  - CrossChainMessage: a message recorded for relay to another chain
  - ValidationRecord: a validator's attestation for one message
  - MessageStatus: Created → Attested → Processed
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from ..constants import (
    MAX_BRIDGE_ID_LENGTH,
    MAX_BRIDGE_NAME_LENGTH,
    MAX_FEE_RATE,
    MAX_PAYLOAD_SIZE,
    MAX_SUPPORTED_NETWORKS,
    MAX_TARGET_CONTRACT_LENGTH,
)
from ..exceptions import InvalidAmount, InvalidChain, InvalidMessage
from ..exchange.routes import validate_network


# ══════════════════════════════════════════════════════════════════════
#  MESSAGE STATUS
# ══════════════════════════════════════════════════════════════════════

class MessageStatus(IntEnum):
    """Lifecycle of a cross-chain message.  PROCESSED is terminal."""
    CREATED   = 0  # Recorded by send_message
    ATTESTED  = 1  # At least one validator attestation recorded
    PROCESSED = 2  # Marked processed, no further mutation


def _byte_len(value: str) -> int:
    return len(value.encode("utf-8"))


# ══════════════════════════════════════════════════════════════════════
#  BRIDGE
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Bridge:
    """
    Registered relay configuration.

    Attributes:
        bridge_id: Unique identifier, fixed at registration
        name: Human-readable name
        supported_networks: Ordered destination network tags (≤10)
        fee_rate: Per-payload-byte fee rate out of 1000
        min_fee: Minimum acceptable message fee
        validator: Identity allowed to attest and process messages
        active: Whether new messages may be sent through this bridge
    """
    bridge_id: str
    name: str
    supported_networks: List[str]
    fee_rate: int
    min_fee: int
    validator: str
    active: bool = True

    def __post_init__(self):
        if not self.bridge_id or _byte_len(self.bridge_id) > MAX_BRIDGE_ID_LENGTH:
            raise InvalidMessage(f"Bridge id must be 1-{MAX_BRIDGE_ID_LENGTH} bytes")
        if not self.name or _byte_len(self.name) > MAX_BRIDGE_NAME_LENGTH:
            raise InvalidMessage(f"Bridge name must be 1-{MAX_BRIDGE_NAME_LENGTH} bytes")
        if not self.supported_networks or len(self.supported_networks) > MAX_SUPPORTED_NETWORKS:
            raise InvalidChain(f"A bridge supports 1-{MAX_SUPPORTED_NETWORKS} networks")
        for network in self.supported_networks:
            validate_network(network)
        if self.fee_rate < 0 or self.fee_rate > MAX_FEE_RATE:
            raise InvalidAmount(f"Bridge fee rate must be 0-{MAX_FEE_RATE}")
        if self.min_fee < 0:
            raise InvalidAmount("Bridge minimum fee cannot be negative")
        if not self.validator:
            raise InvalidMessage("Bridge validator identity cannot be empty")
        self.supported_networks = list(self.supported_networks)

    def supports(self, network: str) -> bool:
        return network in self.supported_networks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bridge_id": self.bridge_id,
            "name": self.name,
            "supported_networks": list(self.supported_networks),
            "fee_rate": self.fee_rate,
            "min_fee": self.min_fee,
            "validator": self.validator,
            "active": self.active,
        }


# ══════════════════════════════════════════════════════════════════════
#  CHAIN CONFIG
# ══════════════════════════════════════════════════════════════════════

@dataclass
class ChainConfig:
    """Destination parameters for one network tag."""
    network: str
    chain_id: int
    confirmations: int
    gas_limit: int
    contract: str
    active: bool = True

    def __post_init__(self):
        validate_network(self.network)
        if self.chain_id < 0:
            raise InvalidChain("chain_id must be non-negative")
        if self.confirmations < 0:
            raise InvalidAmount("confirmations must be non-negative")
        if self.gas_limit <= 0:
            raise InvalidAmount("gas_limit must be positive")
        if _byte_len(self.contract) > MAX_TARGET_CONTRACT_LENGTH:
            raise InvalidMessage(f"Contract reference exceeds {MAX_TARGET_CONTRACT_LENGTH} bytes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "chain_id": self.chain_id,
            "confirmations": self.confirmations,
            "gas_limit": self.gas_limit,
            "contract": self.contract,
            "active": self.active,
        }


# ══════════════════════════════════════════════════════════════════════
#  CROSS-CHAIN MESSAGE
# ══════════════════════════════════════════════════════════════════════

@dataclass
class CrossChainMessage:
    """
    A message recorded for relay to ``target_network``.

    ``processed`` flips False → True once and the record is frozen from
    then on.
    """
    message_id: int
    sender: str
    target_network: str
    target_contract: str
    payload: bytes
    fee: int
    created_at: int
    bridge_id: str
    processed: bool = False
    processed_at: Optional[int] = None

    def __post_init__(self):
        if not self.target_contract or _byte_len(self.target_contract) > MAX_TARGET_CONTRACT_LENGTH:
            raise InvalidMessage(f"Target contract must be 1-{MAX_TARGET_CONTRACT_LENGTH} bytes")
        if len(self.payload) > MAX_PAYLOAD_SIZE:
            raise InvalidMessage(f"Payload exceeds {MAX_PAYLOAD_SIZE} bytes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "sender": self.sender,
            "target_network": self.target_network,
            "target_contract": self.target_contract,
            "payload": self.payload.hex(),
            "fee": self.fee,
            "created_at": self.created_at,
            "bridge_id": self.bridge_id,
            "processed": self.processed,
            "processed_at": self.processed_at,
        }


# ══════════════════════════════════════════════════════════════════════
#  VALIDATION RECORD
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ValidationRecord:
    """
    A validator's attestation for one message.

    The signature is kept as an opaque blob; it is never verified.
    """
    message_id: int
    validator: str
    block_height: int
    signature: bytes = b""
    validated: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "validator": self.validator,
            "block_height": self.block_height,
            "signature": self.signature.hex(),
            "validated": self.validated,
        }

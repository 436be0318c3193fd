"""
Cross-chain message ledger and validation state machine

  - MessageLedger: message_id → CrossChainMessage, the append-only
    attestation map and the monotonic nonce
  - MessageEngine: send / validate / process / batch_process

Per message: Created → (Attested)* → Processed.  Processing requires the
calling validator's own attestation; with one validator per bridge a
single attestation suffices.  Attestation signatures are stored opaque and
unverified: authorization rests on caller identity alone.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..constants import (
    FEE_DENOMINATOR,
    FIRST_MESSAGE_ID,
    MAX_BATCH_SIZE,
    MAX_PAYLOAD_SIZE,
    MAX_SIGNATURE_SIZE,
)
from ..context import ExecutionContext
from ..exceptions import (
    BridgeNotFound,
    DuplicateMessage,
    InsufficientFee,
    InvalidChain,
    InvalidMessage,
    Unauthorized,
    XRouteError,
)
from ..governance.settings import ProtocolSettings
from ..journal import UndoJournal
from ..logger import get_logger
from .registry import BridgeRegistry, ChainConfigRegistry
from .types import Bridge, CrossChainMessage, MessageStatus, ValidationRecord

logger = get_logger(__name__)


class MessageLedger:
    """Storage for messages and attestations."""

    def __init__(self) -> None:
        self._messages: Dict[int, CrossChainMessage] = {}
        self._validations: Dict[int, Dict[str, ValidationRecord]] = {}
        self._nonce: int = FIRST_MESSAGE_ID

    @property
    def next_nonce(self) -> int:
        return self._nonce

    def append(
        self,
        journal: UndoJournal,
        sender: str,
        target_network: str,
        target_contract: str,
        payload: bytes,
        fee: int,
        created_at: int,
        bridge_id: str,
    ) -> CrossChainMessage:
        message = CrossChainMessage(
            message_id=self._nonce,
            sender=sender,
            target_network=target_network,
            target_contract=target_contract,
            payload=bytes(payload),
            fee=fee,
            created_at=created_at,
            bridge_id=bridge_id,
        )
        journal.set_item(self._messages, message.message_id, message)
        journal.set_attr(self, "_nonce", self._nonce + 1)
        return message

    def get(self, message_id: int) -> Optional[CrossChainMessage]:
        return self._messages.get(message_id)

    def record_validation(self, journal: UndoJournal, record: ValidationRecord) -> None:
        by_validator = self._validations.get(record.message_id)
        if by_validator is None:
            by_validator = {}
            journal.set_item(self._validations, record.message_id, by_validator)
        journal.set_item(by_validator, record.validator, record)

    def get_validation(self, message_id: int, validator: str) -> Optional[ValidationRecord]:
        return self._validations.get(message_id, {}).get(validator)

    def attestations_for(self, message_id: int) -> List[ValidationRecord]:
        return list(self._validations.get(message_id, {}).values())

    @property
    def count(self) -> int:
        return len(self._messages)


class MessageEngine:
    """
    Cross-chain message protocol.

    Admission checks consult the bridge and chain-config registries; the
    computed fee is recorded on the message but not charged.
    """

    def __init__(
        self,
        settings: ProtocolSettings,
        bridges: BridgeRegistry,
        chains: ChainConfigRegistry,
    ) -> None:
        self.settings = settings
        self.bridges = bridges
        self.chains = chains
        self.ledger = MessageLedger()

    # -- Fees -----------------------------------------------------------------

    def compute_fee(self, bridge: Bridge, payload_length: int) -> int:
        """``base_fee + payload_length * fee_rate // 1000``."""
        return self.settings.base_message_fee + payload_length * bridge.fee_rate // FEE_DENOMINATOR

    def calculate_bridge_fee(self, bridge_id: str, payload_length: int) -> int:
        if payload_length < 0 or payload_length > MAX_PAYLOAD_SIZE:
            raise InvalidMessage(f"Payload length must be 0-{MAX_PAYLOAD_SIZE}")
        return self.compute_fee(self.bridges.get_or_raise(bridge_id), payload_length)

    # -- Send -----------------------------------------------------------------

    def send_message(
        self,
        ctx: ExecutionContext,
        target_network: str,
        target_contract: str,
        payload: bytes,
        bridge_id: str,
    ) -> int:
        """
        Record a message for relay through ``bridge_id``.

        Returns:
            The allocated message id

        Raises:
            Paused, BridgeNotFound, InvalidChain, InvalidMessage, InsufficientFee
        """
        self.settings.require_messaging_active()

        bridge = self.bridges.get(bridge_id)
        if bridge is None or not bridge.active:
            raise BridgeNotFound(f"No active bridge {bridge_id}")

        chain = self.chains.get(target_network)
        if chain is None or not chain.active:
            raise InvalidChain(f"No active chain config for {target_network}")
        if not bridge.supports(target_network):
            raise InvalidChain(f"Bridge {bridge_id} does not support {target_network}")

        if len(payload) > MAX_PAYLOAD_SIZE:
            raise InvalidMessage(f"Payload exceeds {MAX_PAYLOAD_SIZE} bytes")

        fee = self.compute_fee(bridge, len(payload))
        if fee < bridge.min_fee:
            raise InsufficientFee(f"Fee {fee} below bridge minimum {bridge.min_fee}")

        message = self.ledger.append(
            ctx.journal,
            sender=ctx.caller,
            target_network=target_network,
            target_contract=target_contract,
            payload=payload,
            fee=fee,
            created_at=ctx.block_height,
            bridge_id=bridge_id,
        )
        ctx.emit(
            "message-sent",
            message_id=message.message_id,
            sender=ctx.caller,
            target_network=target_network,
            target_contract=target_contract,
            bridge_id=bridge_id,
            fee=fee,
        )
        logger.debug("Message %d sent → %s via %s fee=%d", message.message_id, target_network, bridge_id, fee)
        return message.message_id

    # -- Validate -------------------------------------------------------------

    def _authorized_message(self, ctx: ExecutionContext, message_id: int) -> CrossChainMessage:
        message = self.ledger.get(message_id)
        if message is None:
            raise InvalidMessage(f"Message {message_id} not found")
        bridge = self.bridges.get(message.bridge_id)
        if bridge is None:
            raise BridgeNotFound(f"Bridge {message.bridge_id} not found")
        if ctx.caller != bridge.validator:
            raise Unauthorized(f"{ctx.caller} is not the validator of {bridge.bridge_id}")
        if message.processed:
            raise DuplicateMessage(f"Message {message_id} already processed")
        return message

    def validate_message(self, ctx: ExecutionContext, message_id: int, signature: bytes) -> bool:
        """Record the calling validator's attestation for ``message_id``."""
        self.settings.require_messaging_active()
        message = self._authorized_message(ctx, message_id)
        if len(signature) > MAX_SIGNATURE_SIZE:
            raise InvalidMessage(f"Signature exceeds {MAX_SIGNATURE_SIZE} bytes")
        if self.ledger.get_validation(message_id, ctx.caller) is not None:
            raise DuplicateMessage(f"Message {message_id} already attested by {ctx.caller}")

        self.ledger.record_validation(ctx.journal, ValidationRecord(
            message_id=message.message_id,
            validator=ctx.caller,
            block_height=ctx.block_height,
            signature=bytes(signature),
        ))
        ctx.emit("message-validated", message_id=message_id, validator=ctx.caller)
        logger.debug("Message %d attested by %s", message_id, ctx.caller)
        return True

    # -- Process --------------------------------------------------------------

    def process_message(self, ctx: ExecutionContext, message_id: int) -> bool:
        """Mark ``message_id`` processed.  One-way; a repeat raises DuplicateMessage."""
        self.settings.require_messaging_active()
        message = self._authorized_message(ctx, message_id)
        if self.ledger.get_validation(message_id, ctx.caller) is None:
            raise InvalidMessage(f"Message {message_id} has no attestation from {ctx.caller}")

        ctx.journal.set_attr(message, "processed", True)
        ctx.journal.set_attr(message, "processed_at", ctx.block_height)
        ctx.emit(
            "message-processed",
            message_id=message_id,
            validator=ctx.caller,
            target_network=message.target_network,
            target_contract=message.target_contract,
        )
        logger.debug("Message %d processed → %s:%s", message_id, message.target_network, message.target_contract)
        return True

    def batch_process(self, ctx: ExecutionContext, message_ids: List[int]) -> List[bool]:
        """
        Process each id independently.

        A failing item yields False instead of aborting the batch.  Every
        check in ``process_message`` precedes its writes, so a failed item
        leaves no partial state behind.
        """
        if len(message_ids) > MAX_BATCH_SIZE:
            raise InvalidMessage(f"Batch size {len(message_ids)} exceeds {MAX_BATCH_SIZE}")

        results = []
        for message_id in message_ids:
            try:
                results.append(self.process_message(ctx, message_id))
            except XRouteError as e:
                logger.debug("Batch item %s rejected: [%s] %s", message_id, e.tag, e)
                results.append(False)
        return results

    # -- Queries --------------------------------------------------------------

    def get_message(self, message_id: int) -> Optional[CrossChainMessage]:
        return self.ledger.get(message_id)

    def get_validation(self, message_id: int, validator: str) -> Optional[ValidationRecord]:
        return self.ledger.get_validation(message_id, validator)

    def get_next_nonce(self) -> int:
        return self.ledger.next_nonce

    def message_status(self, message_id: int) -> MessageStatus:
        message = self.ledger.get(message_id)
        if message is None:
            raise InvalidMessage(f"Message {message_id} not found")
        if message.processed:
            return MessageStatus.PROCESSED
        if self.ledger.attestations_for(message_id):
            return MessageStatus.ATTESTED
        return MessageStatus.CREATED


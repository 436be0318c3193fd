"""
Cross-chain messaging

Covers:
  - Bridge and chain-config registration (owner gate, limits, duplicates)
  - send_message admission checks and fee computation
  - validate_message / process_message state machine
  - batch_process partial success
"""

import pytest

from conftest import ALICE, BOB, BRIDGE_ID, OWNER, RELAYER, REMOTE, send
from xroute.bridge import MessageStatus
from xroute.exceptions import BridgeNotFound, InvalidMessage
from xroute.ledger import OpType


def validate(ledger, message_id, validator=RELAYER, signature=b"\x00" * 65):
    return ledger.execute(validator, OpType.VALIDATE_MESSAGE, message_id=message_id, signature=signature)


def process(ledger, message_id, validator=RELAYER):
    return ledger.execute(validator, OpType.PROCESS_MESSAGE, message_id=message_id)


# ============================================================================
#  REGISTRATION
# ============================================================================

class TestBridgeRegistration:

    def _register(self, ledger, caller=OWNER, **overrides):
        params = dict(
            bridge_id="bridge-sol", name="Solana Bridge", supported_networks=["solana"],
            fee_rate=10, min_fee=0, validator=BOB,
        )
        params.update(overrides)
        return ledger.execute(caller, OpType.REGISTER_BRIDGE, **params)

    def test_register(self, ledger):
        result = self._register(ledger)
        assert result.success
        bridge = ledger.get_bridge("bridge-sol")
        assert bridge.validator == BOB
        assert bridge.active
        assert ledger.get_supported_networks("bridge-sol") == ["solana"]
        assert result.events[0].name == "bridge-registered"

    def test_non_owner(self, ledger):
        assert self._register(ledger, caller=ALICE).tag == "unauthorized"
        assert ledger.get_bridge("bridge-sol") is None

    def test_duplicate_id(self, bridge_ledger):
        result = self._register(bridge_ledger, bridge_id=BRIDGE_ID)
        assert result.tag == "duplicate-message"
        assert bridge_ledger.get_bridge(BRIDGE_ID).validator == RELAYER

    def test_too_many_networks(self, ledger):
        result = self._register(ledger, supported_networks=[f"net{i}" for i in range(11)])
        assert result.tag == "invalid-chain"

    def test_ten_networks_allowed(self, ledger):
        assert self._register(ledger, supported_networks=[f"net{i}" for i in range(10)]).success

    def test_no_networks(self, ledger):
        assert self._register(ledger, supported_networks=[]).tag == "invalid-chain"

    def test_fee_rate_bound(self, ledger):
        assert self._register(ledger, fee_rate=1001).tag == "invalid-amount"

    def test_long_identifier(self, ledger):
        assert self._register(ledger, bridge_id="b" * 33).tag == "invalid-message"

    def test_network_support_query(self, bridge_ledger):
        assert bridge_ledger.is_network_supported(BRIDGE_ID, REMOTE)
        assert not bridge_ledger.is_network_supported(BRIDGE_ID, "solana")
        assert not bridge_ledger.is_network_supported("nope", REMOTE)

    def test_supported_networks_unknown_bridge(self, ledger):
        with pytest.raises(BridgeNotFound):
            ledger.get_supported_networks("nope")

    def test_deactivate(self, bridge_ledger):
        result = bridge_ledger.execute(OWNER, OpType.SET_BRIDGE_ACTIVE, bridge_id=BRIDGE_ID, active=False)
        assert result.success
        assert not bridge_ledger.get_bridge(BRIDGE_ID).active

    def test_deactivate_unknown(self, ledger):
        result = ledger.execute(OWNER, OpType.SET_BRIDGE_ACTIVE, bridge_id="nope", active=False)
        assert result.tag == "bridge-not-found"


class TestChainConfig:

    def test_registered(self, bridge_ledger):
        config = bridge_ledger.get_chain_config(REMOTE)
        assert config.chain_id == 1
        assert config.confirmations == 12
        assert config.active

    def test_last_write_wins(self, bridge_ledger):
        result = bridge_ledger.execute(
            OWNER, OpType.REGISTER_CHAIN_CONFIG,
            network=REMOTE, chain_id=5, confirmations=3, gas_limit=100_000, contract="0xnew",
        )
        assert result.success
        assert bridge_ledger.get_chain_config(REMOTE).chain_id == 5
        assert bridge_ledger.get_stats()["chain_configs"] == 1

    def test_non_owner(self, ledger):
        result = ledger.execute(
            ALICE, OpType.REGISTER_CHAIN_CONFIG,
            network=REMOTE, chain_id=1, confirmations=1, gas_limit=1, contract="0x",
        )
        assert result.tag == "unauthorized"

    def test_zero_gas_limit(self, ledger):
        result = ledger.execute(
            OWNER, OpType.REGISTER_CHAIN_CONFIG,
            network=REMOTE, chain_id=1, confirmations=1, gas_limit=0, contract="0x",
        )
        assert result.tag == "invalid-amount"


# ============================================================================
#  SEND
# ============================================================================

class TestSendMessage:

    def test_send(self, bridge_ledger):
        result = send(bridge_ledger)
        assert result.success
        assert result.value == 1
        message = bridge_ledger.get_message(1)
        assert message.sender == ALICE
        assert message.target_network == REMOTE
        assert message.target_contract == "0xreceiver"
        assert message.payload == b"\x01" * 100
        assert message.bridge_id == BRIDGE_ID
        assert message.created_at == 100
        assert not message.processed
        assert message.processed_at is None

    def test_fee(self, bridge_ledger):
        send(bridge_ledger)
        # 10 + 100 * 50 // 1000
        assert bridge_ledger.get_message(1).fee == 15
        assert bridge_ledger.calculate_bridge_fee(BRIDGE_ID, 100) == 15

    def test_nonce_increments(self, bridge_ledger):
        assert bridge_ledger.get_next_nonce() == 1
        assert send(bridge_ledger).value == 1
        assert send(bridge_ledger, sender=BOB).value == 2
        assert bridge_ledger.get_next_nonce() == 3

    def test_failed_send_keeps_nonce(self, bridge_ledger):
        send(bridge_ledger, payload=b"\x00" * 1025)
        assert bridge_ledger.get_next_nonce() == 1

    def test_event(self, bridge_ledger):
        result = send(bridge_ledger)
        event = result.events[0]
        assert event.name == "message-sent"
        assert event.data["message_id"] == 1
        assert event.data["fee"] == 15

    def test_max_payload(self, bridge_ledger):
        assert send(bridge_ledger, payload=b"\x00" * 1024).success

    def test_oversized_payload(self, bridge_ledger):
        assert send(bridge_ledger, payload=b"\x00" * 1025).tag == "invalid-message"

    def test_empty_payload(self, bridge_ledger):
        result = send(bridge_ledger, payload=b"")
        assert result.success
        assert bridge_ledger.get_message(1).fee == 10

    def test_unknown_bridge(self, bridge_ledger):
        result = bridge_ledger.execute(
            ALICE, OpType.SEND_MESSAGE,
            target_network=REMOTE, target_contract="0xreceiver", payload=b"", bridge_id="nope",
        )
        assert result.tag == "bridge-not-found"

    def test_inactive_bridge(self, bridge_ledger):
        bridge_ledger.execute(OWNER, OpType.SET_BRIDGE_ACTIVE, bridge_id=BRIDGE_ID, active=False)
        assert send(bridge_ledger).tag == "bridge-not-found"

    def test_network_without_config(self, bridge_ledger):
        # polygon is supported by the bridge but has no chain config
        assert send(bridge_ledger, network="polygon").tag == "invalid-chain"

    def test_network_not_supported_by_bridge(self, bridge_ledger):
        bridge_ledger.execute(
            OWNER, OpType.REGISTER_CHAIN_CONFIG,
            network="solana", chain_id=900, confirmations=1, gas_limit=1, contract="prog",
        )
        assert send(bridge_ledger, network="solana").tag == "invalid-chain"

    def test_inactive_chain_config(self, bridge_ledger):
        bridge_ledger.execute(
            OWNER, OpType.REGISTER_CHAIN_CONFIG,
            network=REMOTE, chain_id=1, confirmations=12, gas_limit=500_000,
            contract="0xrouter", active=False,
        )
        assert send(bridge_ledger).tag == "invalid-chain"

    def test_below_min_fee(self, bridge_ledger):
        bridge_ledger.execute(
            OWNER, OpType.REGISTER_BRIDGE,
            bridge_id="bridge-pricey", name="Pricey", supported_networks=[REMOTE],
            fee_rate=0, min_fee=100, validator=RELAYER,
        )
        result = bridge_ledger.execute(
            ALICE, OpType.SEND_MESSAGE,
            target_network=REMOTE, target_contract="0xreceiver", payload=b"hi", bridge_id="bridge-pricey",
        )
        assert result.tag == "insufficient-fee"

    def test_fee_meets_min_fee(self, bridge_ledger):
        bridge_ledger.execute(
            OWNER, OpType.REGISTER_BRIDGE,
            bridge_id="bridge-min", name="Min Fee", supported_networks=[REMOTE],
            fee_rate=50, min_fee=10, validator=RELAYER,
        )
        result = bridge_ledger.execute(
            ALICE, OpType.SEND_MESSAGE,
            target_network=REMOTE, target_contract="0xreceiver", payload=b"\x00" * 100, bridge_id="bridge-min",
        )
        assert result.success
        assert bridge_ledger.get_message(result.value).fee == 15

    @pytest.mark.parametrize("contract", ["", "c" * 65])
    def test_bad_target_contract(self, bridge_ledger, contract):
        result = bridge_ledger.execute(
            ALICE, OpType.SEND_MESSAGE,
            target_network=REMOTE, target_contract=contract, payload=b"", bridge_id=BRIDGE_ID,
        )
        assert result.tag == "invalid-message"

    def test_paused(self, bridge_ledger):
        bridge_ledger.execute(OWNER, OpType.SET_MESSAGING_PAUSED, paused=True)
        assert send(bridge_ledger).tag == "paused"

    def test_bridge_fee_query_bounds(self, bridge_ledger):
        with pytest.raises(InvalidMessage):
            bridge_ledger.calculate_bridge_fee(BRIDGE_ID, 1025)
        with pytest.raises(BridgeNotFound):
            bridge_ledger.calculate_bridge_fee("nope", 10)


# ============================================================================
#  VALIDATE / PROCESS
# ============================================================================

class TestValidation:

    def test_validate(self, bridge_ledger):
        send(bridge_ledger)
        result = validate(bridge_ledger, 1)
        assert result.success
        record = bridge_ledger.get_validation(1, RELAYER)
        assert record.validated
        assert record.block_height == 100
        assert bridge_ledger.get_message_status(1) == MessageStatus.ATTESTED

    def test_status_created(self, bridge_ledger):
        send(bridge_ledger)
        assert bridge_ledger.get_message_status(1) == MessageStatus.CREATED

    def test_non_validator(self, bridge_ledger):
        send(bridge_ledger)
        assert validate(bridge_ledger, 1, validator=BOB).tag == "unauthorized"
        assert bridge_ledger.get_validation(1, BOB) is None

    def test_unknown_message(self, bridge_ledger):
        assert validate(bridge_ledger, 42).tag == "invalid-message"

    def test_duplicate_attestation(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        assert validate(bridge_ledger, 1).tag == "duplicate-message"

    def test_oversized_signature(self, bridge_ledger):
        send(bridge_ledger)
        assert validate(bridge_ledger, 1, signature=b"\x00" * 66).tag == "invalid-message"

    def test_paused(self, bridge_ledger):
        send(bridge_ledger)
        bridge_ledger.execute(OWNER, OpType.SET_MESSAGING_PAUSED, paused=True)
        assert validate(bridge_ledger, 1).tag == "paused"


class TestProcessing:

    def test_process_requires_attestation(self, bridge_ledger):
        send(bridge_ledger)
        result = process(bridge_ledger, 1)
        assert result.tag == "invalid-message"
        assert not bridge_ledger.get_message(1).processed

    def test_process(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        bridge_ledger.advance_block(5)
        result = process(bridge_ledger, 1)
        assert result.success
        message = bridge_ledger.get_message(1)
        assert message.processed
        assert message.processed_at == 105
        assert bridge_ledger.get_message_status(1) == MessageStatus.PROCESSED
        assert result.events[0].name == "message-processed"

    def test_second_process_is_duplicate(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        process(bridge_ledger, 1)
        root = bridge_ledger.compute_state_root()
        event_count = len(bridge_ledger.events)

        result = process(bridge_ledger, 1)
        assert result.tag == "duplicate-message"
        assert bridge_ledger.compute_state_root() == root
        assert len(bridge_ledger.events) == event_count

    def test_validate_after_processed(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        process(bridge_ledger, 1)
        assert validate(bridge_ledger, 1).tag == "duplicate-message"

    def test_non_validator(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        assert process(bridge_ledger, 1, validator=ALICE).tag == "unauthorized"

    def test_inactive_bridge_still_processes(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        bridge_ledger.execute(OWNER, OpType.SET_BRIDGE_ACTIVE, bridge_id=BRIDGE_ID, active=False)
        assert process(bridge_ledger, 1).success

    def test_status_unknown_message(self, bridge_ledger):
        with pytest.raises(InvalidMessage):
            bridge_ledger.get_message_status(9)


class TestBatchProcess:

    def test_partial_success(self, bridge_ledger):
        send(bridge_ledger)
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        result = bridge_ledger.execute(RELAYER, OpType.BATCH_PROCESS, message_ids=[1, 2, 99])
        assert result.success
        assert result.value == [True, False, False]
        assert bridge_ledger.get_message(1).processed
        assert not bridge_ledger.get_message(2).processed
        assert [e.name for e in result.events] == ["message-processed"]

    def test_repeat_in_batch(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        result = bridge_ledger.execute(RELAYER, OpType.BATCH_PROCESS, message_ids=[1, 1])
        assert result.value == [True, False]

    def test_empty_batch(self, bridge_ledger):
        result = bridge_ledger.execute(RELAYER, OpType.BATCH_PROCESS, message_ids=[])
        assert result.value == []

    def test_batch_limit(self, bridge_ledger):
        result = bridge_ledger.execute(RELAYER, OpType.BATCH_PROCESS, message_ids=list(range(1, 52)))
        assert result.tag == "invalid-message"

    def test_batch_of_fifty(self, bridge_ledger):
        result = bridge_ledger.execute(RELAYER, OpType.BATCH_PROCESS, message_ids=list(range(1, 51)))
        assert result.success
        assert result.value == [False] * 50

    def test_batch_by_stranger(self, bridge_ledger):
        send(bridge_ledger)
        validate(bridge_ledger, 1)
        result = bridge_ledger.execute(BOB, OpType.BATCH_PROCESS, message_ids=[1])
        assert result.value == [False]
        assert not bridge_ledger.get_message(1).processed

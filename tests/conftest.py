"""
Shared fixtures: a ledger with two funded tokens, one pool-ready pair of
traders, a registered bridge and an active chain config.
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from xroute.ledger import Ledger, OpType
from xroute.tokens import FungibleToken

OWNER = "xroute_owner"
ALICE = "xroute_alice_0000000000000000000001"
BOB = "xroute_bob___0000000000000000000002"
RELAYER = "xroute_relayer_000000000000000000003"

NETWORK = "mainnet"
REMOTE = "ethereum"
BRIDGE_ID = "bridge-eth"

STARTING_BALANCE = 1_000_000


def make_token(asset_id: str, symbol: str, holders=(ALICE, BOB), amount: int = STARTING_BALANCE) -> FungibleToken:
    token = FungibleToken(asset_id, f"{symbol} Token", symbol, owner=OWNER)
    for holder in holders:
        token.mint(OWNER, holder, amount)
    return token


@pytest.fixture
def ledger():
    """Empty ledger owned by OWNER with the default 3/1000 fee."""
    return Ledger(owner=OWNER, custody="xroute_custody", block_height=100)


@pytest.fixture
def token_a(ledger):
    return ledger.register_asset(make_token("asset-a", "AAA"))


@pytest.fixture
def token_b(ledger):
    return ledger.register_asset(make_token("asset-b", "BBB"))


@pytest.fixture
def pool_ledger(ledger, token_a, token_b):
    """Ledger holding one (asset-a, asset-b) pool seeded 1000/1000 by ALICE."""
    result = ledger.execute(
        ALICE, OpType.CREATE_POOL,
        asset_a="asset-a", asset_b="asset-b",
        amount_a=1000, amount_b=1000, network=NETWORK,
    )
    assert result.success, result
    return ledger


@pytest.fixture
def bridge_ledger(ledger):
    """Ledger with BRIDGE_ID (fee_rate 50, validator RELAYER) and an active REMOTE config."""
    result = ledger.execute(
        OWNER, OpType.REGISTER_BRIDGE,
        bridge_id=BRIDGE_ID, name="Ethereum Bridge",
        supported_networks=[REMOTE, "polygon"],
        fee_rate=50, min_fee=0, validator=RELAYER,
    )
    assert result.success, result
    result = ledger.execute(
        OWNER, OpType.REGISTER_CHAIN_CONFIG,
        network=REMOTE, chain_id=1, confirmations=12,
        gas_limit=500_000, contract="0xrouter",
    )
    assert result.success, result
    return ledger


def send(ledger: Ledger, payload: bytes = b"\x01" * 100, sender: str = ALICE, network: str = REMOTE):
    return ledger.execute(
        sender, OpType.SEND_MESSAGE,
        target_network=network, target_contract="0xreceiver",
        payload=payload, bridge_id=BRIDGE_ID,
    )

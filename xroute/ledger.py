"""
xroute Ledger  (execution environment / state layer)

Single-writer execution environment for both engines.  Every
state-changing call goes through ``Ledger.execute`` which:

  1. Runs the operation against a fresh ExecutionContext (caller identity,
     current block height and an empty undo journal)
  2. On success, discards the journal and commits the call's buffered
     events to the bounded event log
  3. On failure, rolls the journal back so no partial state survives
     (including completed asset transfers), and returns a tagged ExecResult

Only the keys an operation touched are journalled, so the cost of an
operation and of its rollback does not grow with the size of the ledger.

Responsibilities:
  - Owns settings, pool engine, routes, bridges, chain configs, messages
  - Block-height bookkeeping (advance_block)
  - Deterministic state root over all registries
  - Read-only query interface for the RPC layer
"""

from __future__ import annotations

import hashlib
from collections import deque
from enum import IntEnum
from typing import Any, Callable, Deque, Dict, List, Optional

from .bridge.messaging import MessageEngine
from .bridge.registry import BridgeRegistry, ChainConfigRegistry
from .bridge.types import Bridge, ChainConfig, CrossChainMessage, MessageStatus, ValidationRecord
from .config.loader import XRouteConfig
from .constants import DEFAULT_CUSTODY, DEFAULT_OWNER, FIRST_MESSAGE_ID, LEDGER_EVENT_LOG_SIZE
from .context import Event, ExecutionContext
from .exceptions import InvalidAmount, Reentrancy, XRouteError
from .exchange.engine import PoolEngine
from .exchange.pools import Pool
from .exchange.routes import ChainRoute, RouteEstimate, RouteTable
from .journal import UndoJournal
from .governance.settings import ProtocolSettings
from .logger import get_logger
from .tokens.asset import AssetRegistry, FungibleAsset

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Operation types
# ---------------------------------------------------------------------------

class OpType(IntEnum):
    """All state-changing operations.  Values are stable."""
    CREATE_POOL = 1
    SWAP_EXACT_IN = 2
    ADD_LIQUIDITY = 3
    SEND_MESSAGE = 10
    VALIDATE_MESSAGE = 11
    PROCESS_MESSAGE = 12
    BATCH_PROCESS = 13
    SET_ROUTER_PAUSED = 20
    SET_MESSAGING_PAUSED = 21
    SET_FEE_RATE = 22
    ADD_CHAIN_ROUTE = 23
    REGISTER_BRIDGE = 24
    REGISTER_CHAIN_CONFIG = 25
    SET_BRIDGE_ACTIVE = 26
    TRANSFER_OWNERSHIP = 27


# ---------------------------------------------------------------------------
# Execution result
# ---------------------------------------------------------------------------

class ExecResult:
    """Result of executing a single operation."""

    __slots__ = ("success", "value", "error", "tag", "code", "events")

    def __init__(
        self,
        success: bool = True,
        value: Any = None,
        error: str = "",
        tag: str = "",
        code: int = 0,
        events: Optional[List[Event]] = None,
    ):
        self.success = success
        self.value = value
        self.error = error
        self.tag = tag
        self.code = code
        self.events = events or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "value": self.value,
            "error": self.error,
            "tag": self.tag,
            "code": self.code,
            "events": [e.to_dict() for e in self.events],
        }

    def __repr__(self) -> str:
        if self.success:
            return f"<ExecResult ok value={self.value!r}>"
        return f"<ExecResult err [{self.tag}] {self.error}>"


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class Ledger:
    """
    Deterministic execution environment.

    Usage:

        ledger = Ledger(owner="admin")
        ledger.assets.deploy(token_a)
        result = ledger.execute("alice", OpType.CREATE_POOL, asset_a="A", ...)
        ledger.advance_block()
    """

    def __init__(
        self,
        owner: str = DEFAULT_OWNER,
        custody: str = DEFAULT_CUSTODY,
        fee_rate: Optional[int] = None,
        base_message_fee: Optional[int] = None,
        block_height: int = 0,
        event_log_size: int = LEDGER_EVENT_LOG_SIZE,
    ) -> None:
        settings_kwargs: Dict[str, Any] = {"owner": owner}
        if fee_rate is not None:
            settings_kwargs["fee_rate"] = fee_rate
        if base_message_fee is not None:
            settings_kwargs["base_message_fee"] = base_message_fee

        # --- Components (all consensus-critical state) ---
        self.settings = ProtocolSettings(**settings_kwargs)
        self.assets = AssetRegistry()
        self.routes = RouteTable(self.settings)
        self.pool_engine = PoolEngine(self.settings, self.assets, custody=custody)
        self.bridges = BridgeRegistry(self.settings)
        self.chains = ChainConfigRegistry(self.settings)
        self.messages = MessageEngine(self.settings, self.bridges, self.chains)

        self._block_height: int = block_height
        self._events: Deque[Event] = deque(maxlen=event_log_size)
        self._executing: bool = False

        self._handlers: Dict[OpType, Callable[..., Any]] = {
            OpType.CREATE_POOL: self.pool_engine.create_pool,
            OpType.SWAP_EXACT_IN: self.pool_engine.swap_exact_in,
            OpType.ADD_LIQUIDITY: self.pool_engine.add_liquidity,
            OpType.SEND_MESSAGE: self.messages.send_message,
            OpType.VALIDATE_MESSAGE: self.messages.validate_message,
            OpType.PROCESS_MESSAGE: self.messages.process_message,
            OpType.BATCH_PROCESS: self.messages.batch_process,
            OpType.SET_ROUTER_PAUSED: self.settings.set_router_paused,
            OpType.SET_MESSAGING_PAUSED: self.settings.set_messaging_paused,
            OpType.SET_FEE_RATE: self.settings.set_fee_rate,
            OpType.ADD_CHAIN_ROUTE: self.routes.add_chain_route,
            OpType.REGISTER_BRIDGE: self.bridges.register_bridge,
            OpType.REGISTER_CHAIN_CONFIG: self.chains.register_chain_config,
            OpType.SET_BRIDGE_ACTIVE: self.bridges.set_bridge_active,
            OpType.TRANSFER_OWNERSHIP: self.settings.transfer_ownership,
        }

    @classmethod
    def from_config(cls, config: XRouteConfig) -> "Ledger":
        ledger = cls(
            owner=config.ledger.owner,
            custody=config.ledger.custody,
            fee_rate=config.router.fee_rate,
            base_message_fee=config.messaging.base_fee,
            block_height=config.ledger.start_block,
        )
        ledger.settings.state.router_paused = config.router.paused
        ledger.settings.state.messaging_paused = config.messaging.paused
        logger.info(
            "Ledger initialized at block %d (owner=%s, fee_rate=%d)",
            ledger.block_height, config.ledger.owner, config.router.fee_rate,
        )
        return ledger

    # =====================================================================
    #  Block lifecycle
    # =====================================================================

    @property
    def block_height(self) -> int:
        return self._block_height

    def advance_block(self, blocks: int = 1) -> int:
        if blocks <= 0:
            raise InvalidAmount("Block height only moves forward")
        self._block_height += blocks
        return self._block_height

    # =====================================================================
    #  Execution (single writer, all-or-nothing)
    # =====================================================================

    def execute(self, caller: str, op: OpType, **params: Any) -> ExecResult:
        """
        Run one operation atomically on behalf of ``caller``.

        Tagged failures come back as ``ExecResult(success=False)`` after a
        full rollback.  Anything else is rolled back and re-raised.
        """
        if self._executing:
            raise Reentrancy(f"{op.name} issued while another operation is executing")

        handler = self._handlers.get(op)
        if handler is None:
            return ExecResult(success=False, error=f"Unknown op type: {op}", tag="invalid-op")

        ctx = ExecutionContext(caller=caller, block_height=self._block_height, journal=UndoJournal())
        self._executing = True
        try:
            value = handler(ctx, **params)
        except XRouteError as e:
            self._rollback(ctx.journal)
            logger.debug("%s by %s rejected: [%s] %s", op.name, caller, e.tag, e)
            return ExecResult(success=False, error=str(e), tag=e.tag, code=e.code)
        except Exception:
            self._rollback(ctx.journal)
            logger.exception("%s by %s failed unexpectedly, state rolled back", op.name, caller)
            raise
        finally:
            self._executing = False

        ctx.journal.discard()
        self._events.extend(ctx.events)
        return ExecResult(success=True, value=value, events=list(ctx.events))

    def _rollback(self, journal: UndoJournal) -> None:
        try:
            undone = journal.rollback()
        except Exception:
            logger.critical("Rollback at block %d did not complete", self._block_height)
            raise
        logger.warning("Operation at block %d rolled back (%d journal entries undone)", self._block_height, undone)

    # =====================================================================
    #  State root
    # =====================================================================

    def compute_state_root(self) -> str:
        """
        Deterministic hash of all ledger state.

        Returns:
            64-char hex string (blake2b-256)
        """
        hasher = hashlib.blake2b(digest_size=32)

        s = self.settings.state
        hasher.update(
            f"{s.owner}:{s.router_paused}:{s.messaging_paused}:{s.fee_rate}:{s.base_message_fee}".encode()
        )

        for pool in self.pool_engine.pools.all_pools():
            hasher.update(
                f"pool:{pool.pool_id}:{pool.asset_a}:{pool.asset_b}:{pool.network}:"
                f"{pool.reserve_a}:{pool.reserve_b}:{pool.total_shares}:{pool.active}".encode()
            )
            for provider, shares in sorted(self.pool_engine.liquidity.providers(pool.pool_id).items()):
                hasher.update(f"lp:{pool.pool_id}:{provider}:{shares}".encode())

        for message_id in range(FIRST_MESSAGE_ID, self.messages.get_next_nonce()):
            message = self.messages.get_message(message_id)
            if message is None:
                continue
            hasher.update(
                f"msg:{message.message_id}:{message.sender}:{message.target_network}:"
                f"{message.target_contract}:{message.fee}:{message.processed}".encode()
            )
            hasher.update(message.payload)
            for record in sorted(self.messages.ledger.attestations_for(message_id), key=lambda r: r.validator):
                hasher.update(f"att:{message_id}:{record.validator}:{record.block_height}".encode())

        hasher.update(self._block_height.to_bytes(8, "big"))
        return hasher.hexdigest()

    # =====================================================================
    #  Query interface (read-only)
    # =====================================================================

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def register_asset(self, asset: FungibleAsset) -> FungibleAsset:
        return self.assets.deploy(asset)

    # -- router --

    def get_pool(self, pool_id: int) -> Optional[Pool]:
        return self.pool_engine.get_pool(pool_id)

    def get_pool_id(self, asset_a: str, asset_b: str, network: str) -> Optional[int]:
        return self.pool_engine.get_pool_id(asset_a, asset_b, network)

    def get_liquidity_position(self, pool_id: int, provider: str) -> int:
        return self.pool_engine.get_position(pool_id, provider)

    def get_chain_route(self, from_network: str, to_network: str) -> Optional[ChainRoute]:
        return self.routes.get_chain_route(from_network, to_network)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return self.pool_engine.get_amount_out(amount_in, reserve_in, reserve_out)

    def calculate_optimal_route(self, from_network: str, to_network: str, amount: int) -> RouteEstimate:
        return self.routes.calculate_optimal_route(from_network, to_network, amount)

    def is_router_paused(self) -> bool:
        return self.settings.is_router_paused()

    def is_messaging_paused(self) -> bool:
        return self.settings.is_messaging_paused()

    def get_fee_rate(self) -> int:
        return self.settings.fee_rate

    # -- messaging --

    def get_message(self, message_id: int) -> Optional[CrossChainMessage]:
        return self.messages.get_message(message_id)

    def get_message_status(self, message_id: int) -> MessageStatus:
        return self.messages.message_status(message_id)

    def get_bridge(self, bridge_id: str) -> Optional[Bridge]:
        return self.bridges.get(bridge_id)

    def get_chain_config(self, network: str) -> Optional[ChainConfig]:
        return self.chains.get(network)

    def get_validation(self, message_id: int, validator: str) -> Optional[ValidationRecord]:
        return self.messages.get_validation(message_id, validator)

    def calculate_bridge_fee(self, bridge_id: str, payload_length: int) -> int:
        return self.messages.calculate_bridge_fee(bridge_id, payload_length)

    def get_supported_networks(self, bridge_id: str) -> List[str]:
        return self.bridges.get_supported_networks(bridge_id)

    def is_network_supported(self, bridge_id: str, network: str) -> bool:
        return self.bridges.is_network_supported(bridge_id, network)

    def get_next_nonce(self) -> int:
        return self.messages.get_next_nonce()

    def get_stats(self) -> Dict[str, Any]:
        """Ledger-wide statistics."""
        return {
            "block_height": self._block_height,
            "pools": self.pool_engine.pools.pool_count,
            "next_pool_id": self.pool_engine.pools.next_pool_id,
            "routes": self.routes.route_count,
            "bridges": self.bridges.count,
            "chain_configs": self.chains.count,
            "messages": self.messages.ledger.count,
            "next_nonce": self.messages.get_next_nonce(),
            "events": len(self._events),
            "router_paused": self.settings.is_router_paused(),
            "messaging_paused": self.settings.is_messaging_paused(),
            "fee_rate": self.settings.fee_rate,
        }

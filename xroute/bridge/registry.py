"""
Bridge and chain-config registries

Both are owner-gated.  Bridge identifiers are unique for the lifetime of
the ledger; chain configs are last-write-wins.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..context import ExecutionContext
from ..exceptions import BridgeNotFound, DuplicateMessage
from ..governance.settings import ProtocolSettings
from ..logger import get_logger
from .types import Bridge, ChainConfig

logger = get_logger(__name__)


class BridgeRegistry:

    def __init__(self, settings: ProtocolSettings) -> None:
        self._settings = settings
        self._bridges: Dict[str, Bridge] = {}

    def register_bridge(
        self,
        ctx: ExecutionContext,
        bridge_id: str,
        name: str,
        supported_networks: List[str],
        fee_rate: int,
        min_fee: int,
        validator: str,
    ) -> bool:
        """Register a new bridge.  Owner only; identifiers cannot be reused."""
        self._settings.require_owner(ctx)
        if bridge_id in self._bridges:
            raise DuplicateMessage(f"Bridge {bridge_id} already registered")

        bridge = Bridge(
            bridge_id=bridge_id,
            name=name,
            supported_networks=supported_networks,
            fee_rate=fee_rate,
            min_fee=min_fee,
            validator=validator,
        )
        ctx.journal.set_item(self._bridges, bridge_id, bridge)
        ctx.emit(
            "bridge-registered",
            bridge_id=bridge_id,
            validator=validator,
            supported_networks=list(bridge.supported_networks),
        )
        logger.info("Bridge %s (%s) registered, validator=%s", bridge_id, name, validator)
        return True

    def set_bridge_active(self, ctx: ExecutionContext, bridge_id: str, active: bool) -> bool:
        self._settings.require_owner(ctx)
        bridge = self.get_or_raise(bridge_id)
        ctx.journal.set_attr(bridge, "active", bool(active))
        ctx.emit("bridge-status-updated", bridge_id=bridge_id, active=bridge.active)
        logger.info("Bridge %s %s", bridge_id, "activated" if active else "deactivated")
        return True

    def get(self, bridge_id: str) -> Optional[Bridge]:
        return self._bridges.get(bridge_id)

    def get_or_raise(self, bridge_id: str) -> Bridge:
        bridge = self._bridges.get(bridge_id)
        if bridge is None:
            raise BridgeNotFound(f"Bridge {bridge_id} not found")
        return bridge

    def get_supported_networks(self, bridge_id: str) -> List[str]:
        return list(self.get_or_raise(bridge_id).supported_networks)

    def is_network_supported(self, bridge_id: str, network: str) -> bool:
        bridge = self._bridges.get(bridge_id)
        return bridge is not None and bridge.supports(network)

    @property
    def count(self) -> int:
        return len(self._bridges)


class ChainConfigRegistry:

    def __init__(self, settings: ProtocolSettings) -> None:
        self._settings = settings
        self._configs: Dict[str, ChainConfig] = {}

    def register_chain_config(
        self,
        ctx: ExecutionContext,
        network: str,
        chain_id: int,
        confirmations: int,
        gas_limit: int,
        contract: str,
        active: bool = True,
    ) -> bool:
        """Register or overwrite the config for ``network``.  Owner only."""
        self._settings.require_owner(ctx)
        config = ChainConfig(
            network=network,
            chain_id=chain_id,
            confirmations=confirmations,
            gas_limit=gas_limit,
            contract=contract,
            active=active,
        )
        replaced = network in self._configs
        ctx.journal.set_item(self._configs, network, config)
        ctx.emit("chain-config-registered", network=network, chain_id=chain_id, active=active)
        logger.info("Chain config %s %s (chain_id=%d)", network, "replaced" if replaced else "registered", chain_id)
        return True

    def get(self, network: str) -> Optional[ChainConfig]:
        return self._configs.get(network)

    @property
    def count(self) -> int:
        return len(self._configs)

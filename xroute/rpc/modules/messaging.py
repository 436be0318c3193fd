"""
xroute messaging_* RPC Methods

Exposes messages, attestations, bridge records and chain configuration
via the JSON-RPC interface.

Namespace: ``messaging``  (methods are ``messaging_getMessage``, etc.)
"""

from typing import Any, Dict, List, Optional

from ..server import RPCError, RPCErrorCode, RPCModule, rpc_method


class MessagingModule(RPCModule):
    """
    Cross-chain messaging RPC methods (messaging_* namespace).

    Context expectations:
        self.context: Ledger instance
    """

    namespace = "messaging"

    def _get_ledger(self):
        if self.context is None:
            raise RPCError(RPCErrorCode.SERVER_ERROR, "Ledger not available")
        return self.context

    # ── Messages ────────────────────────────────────────────────────

    @rpc_method
    async def getMessage(self, message_id: int) -> Optional[Dict[str, Any]]:
        """
        Message record by id, or null.

        The payload is returned hex-encoded.
        """
        message = self._get_ledger().get_message(int(message_id))
        return message.to_dict() if message is not None else None

    @rpc_method
    async def getMessageStatus(self, message_id: int) -> str:
        """One of ``created``, ``attested`` or ``processed``."""
        return self._get_ledger().get_message_status(int(message_id)).name.lower()

    @rpc_method
    async def getValidation(self, message_id: int, validator: str) -> Optional[Dict[str, Any]]:
        record = self._get_ledger().get_validation(int(message_id), validator)
        return record.to_dict() if record is not None else None

    @rpc_method
    async def getNextNonce(self) -> int:
        return self._get_ledger().get_next_nonce()

    # ── Bridges / chains ────────────────────────────────────────────

    @rpc_method
    async def getBridge(self, bridge_id: str) -> Optional[Dict[str, Any]]:
        bridge = self._get_ledger().get_bridge(bridge_id)
        return bridge.to_dict() if bridge is not None else None

    @rpc_method
    async def getChainConfig(self, network: str) -> Optional[Dict[str, Any]]:
        config = self._get_ledger().get_chain_config(network)
        return config.to_dict() if config is not None else None

    @rpc_method
    async def getSupportedNetworks(self, bridge_id: str) -> List[str]:
        return self._get_ledger().get_supported_networks(bridge_id)

    @rpc_method
    async def isNetworkSupported(self, bridge_id: str, network: str) -> bool:
        return self._get_ledger().is_network_supported(bridge_id, network)

    @rpc_method
    async def calculateBridgeFee(self, bridge_id: str, payload_length: int) -> int:
        """Fee for a payload of ``payload_length`` bytes over ``bridge_id``."""
        return self._get_ledger().calculate_bridge_fee(bridge_id, int(payload_length))

    @rpc_method
    async def isPaused(self) -> bool:
        return self._get_ledger().is_messaging_paused()

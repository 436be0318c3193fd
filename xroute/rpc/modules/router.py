"""
xroute router_* RPC Methods

Read-only pool, route and pricing queries.

Namespace: ``router``  (methods are ``router_getPool``, etc.)
"""

from typing import Any, Dict, Optional

from ..server import RPCError, RPCErrorCode, RPCModule, rpc_method


class RouterModule(RPCModule):
    """
    Router RPC methods (router_* namespace).

    Context expectations:
        self.context: Ledger instance
    """

    namespace = "router"

    def _get_ledger(self):
        if self.context is None:
            raise RPCError(RPCErrorCode.SERVER_ERROR, "Ledger not available")
        return self.context

    # ── Pools ───────────────────────────────────────────────────────

    @rpc_method
    async def getPool(self, pool_id: int) -> Optional[Dict[str, Any]]:
        """Pool record by id, or null."""
        pool = self._get_ledger().get_pool(int(pool_id))
        return pool.to_dict() if pool is not None else None

    @rpc_method
    async def getPoolId(self, asset_a: str, asset_b: str, network: str) -> Optional[int]:
        """Pool id for the ordered (asset_a, asset_b, network) key, or null."""
        return self._get_ledger().get_pool_id(asset_a, asset_b, network)

    @rpc_method
    async def getLiquidityPosition(self, pool_id: int, provider: str) -> int:
        return self._get_ledger().get_liquidity_position(int(pool_id), provider)

    # ── Pricing ─────────────────────────────────────────────────────

    @rpc_method
    async def getAmountOut(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """
        Constant-product quote at the current fee rate.

        Returns a ledger error (``invalid-amount`` or
        ``insufficient-liquidity``) when the quote is undefined.
        """
        return self._get_ledger().get_amount_out(int(amount_in), int(reserve_in), int(reserve_out))

    @rpc_method
    async def getChainRoute(self, from_network: str, to_network: str) -> Optional[Dict[str, Any]]:
        route = self._get_ledger().get_chain_route(from_network, to_network)
        return route.to_dict() if route is not None else None

    @rpc_method
    async def calculateOptimalRoute(self, from_network: str, to_network: str, amount: int) -> Dict[str, Any]:
        return self._get_ledger().calculate_optimal_route(from_network, to_network, int(amount)).to_dict()

    # ── Settings ────────────────────────────────────────────────────

    @rpc_method
    async def isPaused(self) -> bool:
        return self._get_ledger().is_router_paused()

    @rpc_method
    async def getFeeRate(self) -> int:
        return self._get_ledger().get_fee_rate()

    @rpc_method
    async def getStats(self) -> Dict[str, Any]:
        ledger = self._get_ledger()
        stats = ledger.get_stats()
        stats["state_root"] = ledger.compute_state_root()
        return stats

"""
xroute Pool Engine

Orchestrates pool creation, exact-in swaps and liquidity provision over
the pool registry, the liquidity book, the pricing functions and the
external asset collaborators.

Security features:
  - Slippage protection (min_amount_out on every swap)
  - A reserve can never be drained to zero
  - Reentrancy lock around every mutating call
  - External transfers complete before any reserve or share mutation
  - Emergency pause (router flag in ProtocolSettings)

Every write goes through the operation's undo journal, and every completed
transfer journals its reverse transfer, so a failure part-way leaves
neither reserves nor deposits behind once the journal is rolled back.
"""

from __future__ import annotations

from typing import Optional

from ..constants import DEFAULT_CUSTODY
from ..context import ExecutionContext
from ..exceptions import (
    InsufficientLiquidity,
    InvalidAmount,
    PoolAlreadyExists,
    PoolNotFound,
    Reentrancy,
    SlippageExceeded,
    TransferFailed,
)
from ..governance.settings import ProtocolSettings
from ..logger import get_logger
from ..tokens.asset import AssetRegistry
from ..tokens.fungible import TokenError
from . import pricing
from .pools import LiquidityBook, Pool, PoolRegistry
from .routes import validate_network

logger = get_logger(__name__)


class PoolEngine:
    """
    Constant-product AMM over registered assets.

    Implements:
      - create_pool: seed a new pair and mint initial shares
      - swap_exact_in: order-sensitive pool lookup, fee, slippage guard
      - add_liquidity: proportional share minting
    """

    def __init__(
        self,
        settings: ProtocolSettings,
        assets: AssetRegistry,
        custody: str = DEFAULT_CUSTODY,
    ) -> None:
        self.settings = settings
        self.assets = assets
        self.custody = custody
        self.pools = PoolRegistry()
        self.liquidity = LiquidityBook()
        self._locked: bool = False   # reentrancy guard

    # -- Reentrancy guard ---------------------------------------------------

    def _acquire_lock(self) -> None:
        if self._locked:
            raise Reentrancy("Reentrancy detected: pool engine is locked")
        self._locked = True

    def _release_lock(self) -> None:
        self._locked = False

    # -- Asset movement -----------------------------------------------------

    def _transfer(self, asset_id: str, amount: int, sender: str, recipient: str) -> None:
        asset = self.assets.get_or_raise(asset_id)
        try:
            ok = asset.transfer(amount, sender, recipient, None)
        except TokenError as e:
            raise TransferFailed(f"{asset_id} transfer {sender} → {recipient} failed: {e}") from e
        if not ok:
            raise TransferFailed(f"{asset_id} transfer {sender} → {recipient} refused")

    def _journalled_transfer(
        self,
        ctx: ExecutionContext,
        asset_id: str,
        amount: int,
        sender: str,
        recipient: str,
    ) -> None:
        """Transfer, then journal the reverse transfer for rollback."""
        self._transfer(asset_id, amount, sender, recipient)

        def reverse() -> None:
            self._acquire_lock()
            try:
                self._transfer(asset_id, amount, recipient, sender)
            finally:
                self._release_lock()

        ctx.journal.record(f"return {amount} {asset_id} {recipient} → {sender}", reverse)

    def _pull(self, ctx: ExecutionContext, asset_id: str, amount: int) -> None:
        self._journalled_transfer(ctx, asset_id, amount, ctx.caller, self.custody)

    def _push(self, ctx: ExecutionContext, asset_id: str, amount: int) -> None:
        self._journalled_transfer(ctx, asset_id, amount, self.custody, ctx.caller)

    def _active_pool(self, asset_a: str, asset_b: str, network: str) -> Pool:
        pool = self.pools.lookup(asset_a, asset_b, network)
        if pool is None or not pool.active:
            raise PoolNotFound(f"No active pool for {asset_a}/{asset_b} on {network}")
        return pool

    # -- Create -------------------------------------------------------------

    def create_pool(
        self,
        ctx: ExecutionContext,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        network: str,
    ) -> int:
        """
        Create a pool seeded with the caller's deposit.

        Returns:
            The new pool id
        """
        self.settings.require_router_active()
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmount("Initial amounts must be positive")
        if asset_a == asset_b:
            raise InvalidAmount("Pool assets must differ")
        validate_network(network)
        if self.pools.exists(asset_a, asset_b, network):
            raise PoolAlreadyExists(f"Pool already exists for {asset_a}/{asset_b} on {network}")

        shares = pricing.initial_shares(amount_a, amount_b)
        if shares <= 0:
            raise InvalidAmount("Initial deposit mints no shares")

        self._acquire_lock()
        try:
            self._pull(ctx, asset_a, amount_a)
            self._pull(ctx, asset_b, amount_b)

            pool = self.pools.insert(
                ctx.journal, asset_a, asset_b, amount_a, amount_b, shares, network, ctx.block_height,
            )
            self.liquidity.credit(ctx.journal, pool.pool_id, ctx.caller, shares)
        finally:
            self._release_lock()

        ctx.emit(
            "pool-created",
            pool_id=pool.pool_id,
            asset_a=asset_a,
            asset_b=asset_b,
            network=network,
            shares=shares,
            creator=ctx.caller,
        )
        logger.info("Pool %d created: %s/%s on %s shares=%d", pool.pool_id, asset_a, asset_b, network, shares)
        return pool.pool_id

    # -- Swap ---------------------------------------------------------------

    def swap_exact_in(
        self,
        ctx: ExecutionContext,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int,
        network: str,
    ) -> int:
        """
        Sell exactly ``amount_in`` of ``asset_in``.

        The pool is looked up as (asset_in, asset_out, network): a pool
        created as (A, B) is not reachable as (B, A).

        Returns:
            amount_out

        Raises:
            Paused, InvalidAmount, PoolNotFound, SlippageExceeded,
            InsufficientLiquidity, TransferFailed, Reentrancy
        """
        self.settings.require_router_active()
        if amount_in <= 0:
            raise InvalidAmount("Swap amount must be positive")
        if min_amount_out < 0:
            raise InvalidAmount("Minimum output cannot be negative")

        pool = self._active_pool(asset_in, asset_out, network)
        zero_for_one = pool.asset_a == asset_in
        reserve_in, reserve_out = pool.reserves_for(asset_in)

        fee_rate = self.settings.fee_rate
        amount_out = pricing.get_amount_out(amount_in, reserve_in, reserve_out, fee_rate)

        # --- Slippage protection ---
        if amount_out < min_amount_out:
            raise SlippageExceeded(f"Slippage exceeded: got {amount_out}, minimum {min_amount_out}")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity("Swap would drain pool")
        if amount_out == 0:
            raise InvalidAmount("Swap output rounds down to zero")

        self._acquire_lock()
        try:
            self._pull(ctx, asset_in, amount_in)
            self._push(ctx, asset_out, amount_out)

            if zero_for_one:
                ctx.journal.set_attr(pool, "reserve_a", pool.reserve_a + amount_in)
                ctx.journal.set_attr(pool, "reserve_b", pool.reserve_b - amount_out)
            else:
                ctx.journal.set_attr(pool, "reserve_b", pool.reserve_b + amount_in)
                ctx.journal.set_attr(pool, "reserve_a", pool.reserve_a - amount_out)
        finally:
            self._release_lock()

        ctx.emit(
            "swap",
            pool_id=pool.pool_id,
            trader=ctx.caller,
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=amount_out,
            fee=pricing.fee_amount(amount_in, fee_rate),
        )
        logger.debug("Swap pool=%d %d %s → %d %s", pool.pool_id, amount_in, asset_in, amount_out, asset_out)
        return amount_out

    # -- Liquidity ----------------------------------------------------------

    def add_liquidity(
        self,
        ctx: ExecutionContext,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        network: str,
    ) -> int:
        """
        Deposit into an existing pool.

        Returns:
            Shares minted to the caller
        """
        self.settings.require_router_active()
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmount("Deposit amounts must be positive")

        pool = self._active_pool(asset_a, asset_b, network)
        shares = pricing.liquidity_shares(
            amount_a, amount_b, pool.reserve_a, pool.reserve_b, pool.total_shares,
        )
        if shares <= 0:
            raise InvalidAmount("Deposit too small to mint shares")

        self._acquire_lock()
        try:
            self._pull(ctx, asset_a, amount_a)
            self._pull(ctx, asset_b, amount_b)

            ctx.journal.set_attr(pool, "reserve_a", pool.reserve_a + amount_a)
            ctx.journal.set_attr(pool, "reserve_b", pool.reserve_b + amount_b)
            ctx.journal.set_attr(pool, "total_shares", pool.total_shares + shares)
            position = self.liquidity.credit(ctx.journal, pool.pool_id, ctx.caller, shares)
        finally:
            self._release_lock()

        ctx.emit(
            "liquidity-added",
            pool_id=pool.pool_id,
            provider=ctx.caller,
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        logger.debug("Liquidity pool=%d +%d shares (position %d)", pool.pool_id, shares, position)
        return shares

    # -- Queries ------------------------------------------------------------

    def get_pool(self, pool_id: int) -> Optional[Pool]:
        return self.pools.get(pool_id)

    def get_pool_id(self, asset_a: str, asset_b: str, network: str) -> Optional[int]:
        return self.pools.get_id(asset_a, asset_b, network)

    def get_position(self, pool_id: int, provider: str) -> int:
        return self.liquidity.shares_of(pool_id, provider)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Pure swap quote at the current fee rate."""
        return pricing.get_amount_out(amount_in, reserve_in, reserve_out, self.settings.fee_rate)


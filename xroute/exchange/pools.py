"""
Pool registry and liquidity accounting

  - Pool: reserve pair + share supply
  - PoolRegistry: pool_id → Pool, plus the (asset_a, asset_b, network)
    lookup index, written together and only at creation
  - LiquidityBook: (pool_id, provider) → shares, mint-only
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..constants import FIRST_POOL_ID
from ..exceptions import PoolAlreadyExists
from ..journal import UndoJournal
from ..logger import get_logger

logger = get_logger(__name__)

PoolKey = Tuple[str, str, str]


@dataclass
class Pool:
    """
    State of a constant-product pool.

    Asset order is the order given at creation; it is not canonicalised.
    """
    pool_id: int
    asset_a: str
    asset_b: str
    reserve_a: int
    reserve_b: int
    total_shares: int
    network: str
    active: bool = True
    created_at: int = 0

    @property
    def key(self) -> PoolKey:
        return (self.asset_a, self.asset_b, self.network)

    @property
    def invariant(self) -> int:
        return self.reserve_a * self.reserve_b

    def reserves_for(self, asset_in: str) -> Tuple[int, int]:
        """(reserve_in, reserve_out) for a trade that sells ``asset_in``."""
        if asset_in == self.asset_a:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PoolRegistry:
    """Primary pool records and the order-sensitive lookup index."""

    def __init__(self) -> None:
        self._pools: Dict[int, Pool] = {}
        self._index: Dict[PoolKey, int] = {}
        self._next_pool_id: int = FIRST_POOL_ID

    @property
    def next_pool_id(self) -> int:
        return self._next_pool_id

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def insert(
        self,
        journal: UndoJournal,
        asset_a: str,
        asset_b: str,
        reserve_a: int,
        reserve_b: int,
        total_shares: int,
        network: str,
        block_height: int = 0,
    ) -> Pool:
        """Allocate an id and write the pool and its index entry together."""
        key = (asset_a, asset_b, network)
        if key in self._index:
            raise PoolAlreadyExists(f"Pool already exists for {asset_a}/{asset_b} on {network}")

        pool = Pool(
            pool_id=self._next_pool_id,
            asset_a=asset_a,
            asset_b=asset_b,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            total_shares=total_shares,
            network=network,
            created_at=block_height,
        )
        journal.set_item(self._pools, pool.pool_id, pool)
        journal.set_item(self._index, key, pool.pool_id)
        journal.set_attr(self, "_next_pool_id", self._next_pool_id + 1)
        return pool

    def get(self, pool_id: int) -> Optional[Pool]:
        return self._pools.get(pool_id)

    def get_id(self, asset_a: str, asset_b: str, network: str) -> Optional[int]:
        return self._index.get((asset_a, asset_b, network))

    def lookup(self, asset_a: str, asset_b: str, network: str) -> Optional[Pool]:
        pool_id = self._index.get((asset_a, asset_b, network))
        return self._pools.get(pool_id) if pool_id is not None else None

    def exists(self, asset_a: str, asset_b: str, network: str) -> bool:
        return (asset_a, asset_b, network) in self._index

    def all_pools(self) -> List[Pool]:
        return [self._pools[pid] for pid in sorted(self._pools)]


class LiquidityBook:
    """Per-provider share balances.  Shares are minted, never burned."""

    def __init__(self) -> None:
        self._positions: Dict[Tuple[int, str], int] = {}

    def shares_of(self, pool_id: int, provider: str) -> int:
        return self._positions.get((pool_id, provider), 0)

    def credit(self, journal: UndoJournal, pool_id: int, provider: str, shares: int) -> int:
        balance = self._positions.get((pool_id, provider), 0) + shares
        journal.set_item(self._positions, (pool_id, provider), balance)
        return balance

    def providers(self, pool_id: int) -> Dict[str, int]:
        return {
            provider: shares
            for (pid, provider), shares in self._positions.items()
            if pid == pool_id
        }

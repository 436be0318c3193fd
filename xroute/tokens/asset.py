"""
Asset-transfer capability

The pool engine never holds assets itself: it moves them through whatever
object is registered under an asset identifier, as long as that object
satisfies :class:`FungibleAsset`.  Implementations are interchangeable
(structural typing, no base class required).
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..exceptions import AssetNotFound, InvalidAsset
from ..logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class FungibleAsset(Protocol):
    """Capability set every pooled asset must expose."""

    asset_id: str
    name: str
    symbol: str
    decimals: int

    @property
    def total_supply(self) -> int: ...

    def balance_of(self, owner: str) -> int: ...

    def transfer(
        self,
        amount: int,
        sender: str,
        recipient: str,
        memo: Optional[bytes] = None,
    ) -> bool: ...


class AssetRegistry:
    """
    Maps asset identifiers to asset implementations.

    Mirrors a token registry: deployment, lookup and enumeration.
    """

    def __init__(self) -> None:
        self._assets: Dict[str, FungibleAsset] = {}

    def deploy(self, asset: FungibleAsset) -> FungibleAsset:
        if not isinstance(asset, FungibleAsset):
            raise InvalidAsset(f"{asset!r} does not implement the asset-transfer capability")
        if asset.asset_id in self._assets:
            raise InvalidAsset(f"Asset {asset.asset_id} already registered")
        self._assets[asset.asset_id] = asset
        logger.info("Asset registered: %s (%s)", asset.asset_id, asset.symbol)
        return asset

    def get(self, asset_id: str) -> Optional[FungibleAsset]:
        return self._assets.get(asset_id)

    def get_or_raise(self, asset_id: str) -> FungibleAsset:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFound(f"Asset {asset_id} not registered")
        return asset

    def exists(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def list_assets(self) -> List[str]:
        return list(self._assets.keys())

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"<AssetRegistry assets={len(self._assets)}>"

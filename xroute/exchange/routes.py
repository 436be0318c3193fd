"""
Chain routes (router side)

Owner-registered (from_network, to_network) routes carrying a fee
multiplier and a transferable range.  Routes feed off-chain cost
estimates only; swaps never consult them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from ..constants import FEE_DENOMINATOR, MAX_FEE_RATE, MAX_NETWORK_LENGTH
from ..context import ExecutionContext
from ..exceptions import InvalidAmount, InvalidChain
from ..governance.settings import ProtocolSettings
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class ChainRoute:
    from_network: str
    to_network: str
    fee_multiplier: int
    min_amount: int
    max_amount: int
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RouteEstimate:
    from_network: str
    to_network: str
    amount_in: int
    fee: int
    amount_out: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_network(network: str) -> str:
    if not network or len(network.encode("utf-8")) > MAX_NETWORK_LENGTH:
        raise InvalidChain(f"Network tag must be 1-{MAX_NETWORK_LENGTH} bytes")
    return network


class RouteTable:

    def __init__(self, settings: ProtocolSettings) -> None:
        self._settings = settings
        self._routes: Dict[Tuple[str, str], ChainRoute] = {}

    def add_chain_route(
        self,
        ctx: ExecutionContext,
        from_network: str,
        to_network: str,
        fee_multiplier: int,
        min_amount: int,
        max_amount: int,
    ) -> bool:
        """Register or replace a route.  Owner only."""
        self._settings.require_owner(ctx)
        validate_network(from_network)
        validate_network(to_network)
        if from_network == to_network:
            raise InvalidChain("Route cannot point at its own network")
        if fee_multiplier < 0 or fee_multiplier > MAX_FEE_RATE:
            raise InvalidAmount(f"Fee multiplier must be 0-{MAX_FEE_RATE}")
        if min_amount < 0 or max_amount <= 0 or min_amount > max_amount:
            raise InvalidAmount("Route range must satisfy 0 <= min <= max, max > 0")

        ctx.journal.set_item(self._routes, (from_network, to_network), ChainRoute(
            from_network=from_network,
            to_network=to_network,
            fee_multiplier=fee_multiplier,
            min_amount=min_amount,
            max_amount=max_amount,
        ))
        ctx.emit(
            "chain-route-added",
            from_network=from_network,
            to_network=to_network,
            fee_multiplier=fee_multiplier,
        )
        logger.info("Route %s → %s registered (x%d/1000)", from_network, to_network, fee_multiplier)
        return True

    def get_chain_route(self, from_network: str, to_network: str) -> Optional[ChainRoute]:
        return self._routes.get((from_network, to_network))

    def calculate_optimal_route(self, from_network: str, to_network: str, amount: int) -> RouteEstimate:
        """Pure cost estimate for moving ``amount`` along a registered route."""
        if from_network == to_network:
            raise InvalidChain("Route cannot point at its own network")
        route = self._routes.get((from_network, to_network))
        if route is None or not route.active:
            raise InvalidChain(f"No active route {from_network} → {to_network}")
        if amount < route.min_amount or amount > route.max_amount:
            raise InvalidAmount(
                f"Amount {amount} outside route range [{route.min_amount}, {route.max_amount}]"
            )

        fee = amount * route.fee_multiplier // FEE_DENOMINATOR
        return RouteEstimate(
            from_network=from_network,
            to_network=to_network,
            amount_in=amount,
            fee=fee,
            amount_out=amount - fee,
        )

    @property
    def route_count(self) -> int:
        return len(self._routes)

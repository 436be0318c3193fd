"""
Protocol settings and owner-gated admin surface

Holds the process-wide switches shared by both engines:
  - owner identity
  - independent pause flags for the router and for messaging
  - swap fee rate (out of 1000)
  - base fee charged on every cross-chain message

Mutations require the caller to be the current owner.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from ..constants import (
    DEFAULT_BASE_MESSAGE_FEE,
    DEFAULT_FEE_RATE,
    DEFAULT_OWNER,
    MAX_FEE_RATE,
)
from ..context import ExecutionContext
from ..exceptions import InvalidAmount, Paused, Unauthorized
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class SettingsState:
    owner: str = DEFAULT_OWNER
    router_paused: bool = False
    messaging_paused: bool = False
    fee_rate: int = DEFAULT_FEE_RATE
    base_message_fee: int = DEFAULT_BASE_MESSAGE_FEE


class ProtocolSettings:
    """Governance component owning the process-wide flags."""

    def __init__(
        self,
        owner: str = DEFAULT_OWNER,
        fee_rate: int = DEFAULT_FEE_RATE,
        base_message_fee: int = DEFAULT_BASE_MESSAGE_FEE,
        router_paused: bool = False,
        messaging_paused: bool = False,
    ) -> None:
        if not owner:
            raise InvalidAmount("Owner identity cannot be empty")
        _check_fee_rate(fee_rate)
        if base_message_fee < 0:
            raise InvalidAmount("Base message fee cannot be negative")
        self.state = SettingsState(
            owner=owner,
            router_paused=router_paused,
            messaging_paused=messaging_paused,
            fee_rate=fee_rate,
            base_message_fee=base_message_fee,
        )

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def owner(self) -> str:
        return self.state.owner

    @property
    def fee_rate(self) -> int:
        return self.state.fee_rate

    @property
    def base_message_fee(self) -> int:
        return self.state.base_message_fee

    def is_router_paused(self) -> bool:
        return self.state.router_paused

    def is_messaging_paused(self) -> bool:
        return self.state.messaging_paused

    # ── Guards ────────────────────────────────────────────────────────

    def require_owner(self, ctx: ExecutionContext) -> None:
        if ctx.caller != self.state.owner:
            raise Unauthorized(f"{ctx.caller} is not the owner")

    def require_router_active(self) -> None:
        if self.state.router_paused:
            raise Paused("Router is paused")

    def require_messaging_active(self) -> None:
        if self.state.messaging_paused:
            raise Paused("Messaging is paused")

    # ── Admin ─────────────────────────────────────────────────────────

    def set_router_paused(self, ctx: ExecutionContext, paused: bool) -> bool:
        self.require_owner(ctx)
        ctx.journal.set_attr(self.state, "router_paused", bool(paused))
        ctx.emit("router-paused", paused=self.state.router_paused)
        logger.warning("Router %s by %s", "paused" if paused else "unpaused", ctx.caller)
        return True

    def set_messaging_paused(self, ctx: ExecutionContext, paused: bool) -> bool:
        self.require_owner(ctx)
        ctx.journal.set_attr(self.state, "messaging_paused", bool(paused))
        ctx.emit("messaging-paused", paused=self.state.messaging_paused)
        logger.warning("Messaging %s by %s", "paused" if paused else "unpaused", ctx.caller)
        return True

    def set_fee_rate(self, ctx: ExecutionContext, fee_rate: int) -> bool:
        self.require_owner(ctx)
        _check_fee_rate(fee_rate)
        ctx.journal.set_attr(self.state, "fee_rate", fee_rate)
        ctx.emit("fee-rate-updated", fee_rate=fee_rate)
        logger.info("Fee rate set to %d/1000", fee_rate)
        return True

    def transfer_ownership(self, ctx: ExecutionContext, new_owner: str) -> bool:
        self.require_owner(ctx)
        if not new_owner:
            raise InvalidAmount("New owner identity cannot be empty")
        previous = self.state.owner
        ctx.journal.set_attr(self.state, "owner", new_owner)
        ctx.emit("ownership-transferred", previous=previous, owner=new_owner)
        logger.warning("Ownership transferred %s → %s", previous, new_owner)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self.state)


def _check_fee_rate(fee_rate: int) -> None:
    if not isinstance(fee_rate, int) or fee_rate < 0 or fee_rate > MAX_FEE_RATE:
        raise InvalidAmount(f"Fee rate must be 0-{MAX_FEE_RATE}, got {fee_rate}")

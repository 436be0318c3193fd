"""
Reference fungible token

An in-memory token implementing the asset-transfer capability with:
  - transfer / balance_of / total_supply
  - name / symbol / decimals / token_uri metadata
  - owner-gated mint
  - per-token event log, bounded to the most recent entries
  - freeze switch (makes every transfer fail)
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from ..constants import TOKEN_EVENT_LOG_SIZE
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_DECIMALS = 6


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(Exception):
    """Base exception for token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


class TokenFrozenError(TokenError):
    """Raised when the token is frozen."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful transfer."""
    asset_id: str
    sender: str
    recipient: str
    amount: int
    memo: Optional[bytes] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "transfer",
            "asset": self.asset_id,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "memo": self.memo.hex() if self.memo else None,
        }


@dataclass(frozen=True)
class MintEvent:
    asset_id: str
    recipient: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "mint",
            "asset": self.asset_id,
            "to": self.recipient,
            "amount": self.amount,
        }


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class FungibleToken:
    """
    In-memory fungible token.

    ``transfer`` returns True on success and raises :class:`TokenError`
    subclasses on failure, the same way an on-chain token aborts.
    """

    def __init__(
        self,
        asset_id: str,
        name: str,
        symbol: str,
        decimals: int = DEFAULT_DECIMALS,
        owner: str = "",
        token_uri: Optional[str] = None,
    ):
        if not asset_id:
            raise TokenError("Asset id cannot be empty")
        if not name:
            raise TokenError("Token name cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise TokenError(f"Decimals must be 0-18, got {decimals}")

        self.asset_id = asset_id
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.owner = owner
        self.token_uri = token_uri
        self._total_supply = 0
        self._frozen = False

        self._balances: Dict[str, int] = {}
        self._events: Deque[Any] = deque(maxlen=TOKEN_EVENT_LOG_SIZE)

        logger.info("Token deployed: %s (%s)", symbol, asset_id)

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Mutations ─────────────────────────────────────────────────────

    def transfer(
        self,
        amount: int,
        sender: str,
        recipient: str,
        memo: Optional[bytes] = None,
    ) -> bool:
        if self._frozen:
            raise TokenFrozenError(f"Token {self.symbol} is frozen")
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")
        if sender == recipient:
            raise TokenError("Cannot transfer to self")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

        self._events.append(TransferEvent(self.asset_id, sender, recipient, amount, memo))
        logger.debug("Transfer: %s → %s %d %s", sender, recipient, amount, self.symbol)
        return True

    def mint(self, caller: str, recipient: str, amount: int) -> MintEvent:
        if self.owner and caller != self.owner:
            raise TokenError(f"{caller} is not the owner of {self.symbol}")
        if amount <= 0:
            raise TokenError("Mint amount must be positive")

        self._total_supply += amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

        event = MintEvent(self.asset_id, recipient, amount)
        self._events.append(event)
        return event

    def freeze(self) -> None:
        self._frozen = True
        logger.warning("Token %s FROZEN", self.symbol)

    def unfreeze(self) -> None:
        self._frozen = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self._total_supply,
            "tokenUri": self.token_uri,
            "frozen": self._frozen,
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<FungibleToken {self.symbol} supply={self._total_supply}>"

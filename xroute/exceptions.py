"""
xroute Exceptions

Tagged failure taxonomy shared by the pool engine, the cross-chain
message engine and the admin surface.

Every error carries a stable ``tag`` and numeric ``code`` so the ledger can
turn a raised exception into a tagged ``ExecResult`` after rolling back.
"""


class XRouteError(Exception):
    """Base exception for xroute."""
    tag = "error"
    code = 1

    def to_dict(self) -> dict:
        return {"tag": self.tag, "code": self.code, "message": str(self)}


# ── Shared / router ──────────────────────────────────────────────────

class Unauthorized(XRouteError):
    """Caller identity does not match the owner or bridge validator."""
    tag = "unauthorized"
    code = 100


class InvalidAmount(XRouteError):
    """Zero, negative or out-of-range numeric input."""
    tag = "invalid-amount"
    code = 101


class InsufficientLiquidity(XRouteError):
    """Swap would drain a reserve to zero or below."""
    tag = "insufficient-liquidity"
    code = 102


class PoolNotFound(XRouteError):
    """No pool for the key, or the pool is inactive."""
    tag = "pool-not-found"
    code = 103


class PoolAlreadyExists(XRouteError):
    """A pool is already registered for the (asset_a, asset_b, network) key."""
    tag = "pool-already-exists"
    code = 104


class SlippageExceeded(XRouteError):
    """Output fell below the caller's minimum."""
    tag = "slippage-exceeded"
    code = 105


class Paused(XRouteError):
    """Subsystem is paused."""
    tag = "paused"
    code = 106


class InvalidChain(XRouteError):
    """Unknown, inactive or unsupported network, or a self-referential route."""
    tag = "invalid-chain"
    code = 107


# ── Messaging ────────────────────────────────────────────────────────

class InvalidMessage(XRouteError):
    tag = "invalid-message"
    code = 200


class BridgeNotFound(XRouteError):
    tag = "bridge-not-found"
    code = 201


class DuplicateMessage(XRouteError):
    """Message already processed, attested twice, or bridge id reused."""
    tag = "duplicate-message"
    code = 202


class InsufficientFee(XRouteError):
    tag = "insufficient-fee"
    code = 203


# ── Collaborator boundary ────────────────────────────────────────────

class TransferFailed(XRouteError):
    """The asset collaborator refused or failed a transfer."""
    tag = "transfer-failed"
    code = 300


class Reentrancy(XRouteError):
    """A pool-engine call was made from inside an in-flight transfer."""
    tag = "reentrancy"
    code = 301


class AssetNotFound(XRouteError):
    tag = "asset-not-found"
    code = 302


class InvalidAsset(XRouteError):
    """An asset registration was rejected (missing capability or id reuse)."""
    tag = "invalid-asset"
    code = 303


class ConfigurationError(XRouteError):
    """Configuration error."""
    tag = "configuration"
    code = 400

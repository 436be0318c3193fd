"""
xroute TOML Configuration Loader

Loads every section of config.toml at startup with environment variable
overrides (dataclass + from_dict + apply_env per section).

Environment variable mapping:
    [ledger] owner          → XROUTE_OWNER
    [ledger] custody        → XROUTE_CUSTODY
    [router] fee_rate       → XROUTE_FEE_RATE
    [messaging] base_fee    → XROUTE_BASE_MESSAGE_FEE
    [rpc] host / port       → XROUTE_RPC_HOST / XROUTE_RPC_PORT
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_BASE_MESSAGE_FEE,
    DEFAULT_CUSTODY,
    DEFAULT_FEE_RATE,
    DEFAULT_OWNER,
    MAX_FEE_RATE,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class LedgerSectionConfig:
    """[ledger] section."""
    owner: str = DEFAULT_OWNER
    custody: str = DEFAULT_CUSTODY
    start_block: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerSectionConfig":
        return cls(
            owner=data.get("owner", DEFAULT_OWNER),
            custody=data.get("custody", DEFAULT_CUSTODY),
            start_block=data.get("start_block", 0),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("XROUTE_OWNER"):
            self.owner = v
        if v := os.environ.get("XROUTE_CUSTODY"):
            self.custody = v


@dataclass
class RouterConfig:
    """[router] section."""
    fee_rate: int = DEFAULT_FEE_RATE
    paused: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouterConfig":
        return cls(
            fee_rate=data.get("fee_rate", DEFAULT_FEE_RATE),
            paused=data.get("paused", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("XROUTE_FEE_RATE"):
            self.fee_rate = _env_int("XROUTE_FEE_RATE", v)
        if v := os.environ.get("XROUTE_ROUTER_PAUSED"):
            self.paused = _env_bool(v)


@dataclass
class MessagingConfig:
    """[messaging] section."""
    base_fee: int = DEFAULT_BASE_MESSAGE_FEE
    paused: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessagingConfig":
        return cls(
            base_fee=data.get("base_fee", DEFAULT_BASE_MESSAGE_FEE),
            paused=data.get("paused", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("XROUTE_BASE_MESSAGE_FEE"):
            self.base_fee = _env_int("XROUTE_BASE_MESSAGE_FEE", v)
        if v := os.environ.get("XROUTE_MESSAGING_PAUSED"):
            self.paused = _env_bool(v)


@dataclass
class RPCConfig:
    """[rpc] section."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8545

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RPCConfig":
        return cls(
            enabled=data.get("enabled", True),
            host=data.get("host", "127.0.0.1"),
            port=data.get("port", 8545),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("XROUTE_RPC_HOST"):
            self.host = v
        if v := os.environ.get("XROUTE_RPC_PORT"):
            self.port = _env_int("XROUTE_RPC_PORT", v)


@dataclass
class XRouteConfig:
    """Top-level configuration."""
    ledger: LedgerSectionConfig = field(default_factory=LedgerSectionConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    messaging: MessagingConfig = field(default_factory=MessagingConfig)
    rpc: RPCConfig = field(default_factory=RPCConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "XRouteConfig":
        return cls(
            ledger=LedgerSectionConfig.from_dict(data.get("ledger", {})),
            router=RouterConfig.from_dict(data.get("router", {})),
            messaging=MessagingConfig.from_dict(data.get("messaging", {})),
            rpc=RPCConfig.from_dict(data.get("rpc", {})),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "XRouteConfig":
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        with open(path, "rb") as f:
            data = tomli.load(f)
        return cls.from_dict(data)

    def apply_env(self) -> None:
        self.ledger.apply_env()
        self.router.apply_env()
        self.messaging.apply_env()
        self.rpc.apply_env()

    def validate(self) -> None:
        if not self.ledger.owner:
            raise ConfigurationError("[ledger] owner cannot be empty")
        if not self.ledger.custody:
            raise ConfigurationError("[ledger] custody cannot be empty")
        if self.ledger.owner == self.ledger.custody:
            raise ConfigurationError("[ledger] owner and custody must differ")
        if not 0 <= self.router.fee_rate <= MAX_FEE_RATE:
            raise ConfigurationError(f"[router] fee_rate must be 0-{MAX_FEE_RATE}")
        if self.messaging.base_fee < 0:
            raise ConfigurationError("[messaging] base_fee cannot be negative")
        if self.ledger.start_block < 0:
            raise ConfigurationError("[ledger] start_block cannot be negative")


def load_config(path: Optional[Union[str, Path]] = None) -> XRouteConfig:
    """
    Load configuration from TOML (if given) then apply env overrides.

    Falls back to XROUTE_CONFIG when ``path`` is None, and to defaults when
    neither is set.
    """
    path = path or os.environ.get("XROUTE_CONFIG")
    if path:
        config = XRouteConfig.from_file(path)
        logger.info("Loaded config from %s", path)
    else:
        config = XRouteConfig()
    config.apply_env()
    config.validate()
    return config

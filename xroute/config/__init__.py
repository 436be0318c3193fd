"""
xroute Configuration

Loads config.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    LedgerSectionConfig,
    MessagingConfig,
    RouterConfig,
    RPCConfig,
    XRouteConfig,
    load_config,
)

__all__ = [
    "LedgerSectionConfig",
    "MessagingConfig",
    "RouterConfig",
    "RPCConfig",
    "XRouteConfig",
    "load_config",
]

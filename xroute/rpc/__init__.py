"""
xroute RPC Module

Provides JSON-RPC 2.0 access to the read-only query surface:
- router_* pool, route and pricing queries
- messaging_* message, bridge and chain queries
- HTTP mount (FastAPI, POST /rpc)
"""

from .http import build_rpc_server, create_app, run
from .server import RPCError, RPCErrorCode, RPCModule, RPCServer, rpc_method

__all__ = [
    "RPCError",
    "RPCErrorCode",
    "RPCModule",
    "RPCServer",
    "build_rpc_server",
    "create_app",
    "rpc_method",
    "run",
]

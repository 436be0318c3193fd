"""
HTTP mount for the JSON-RPC server.

A FastAPI app exposing ``POST /rpc``, served by uvicorn.
"""

from typing import Any, Optional

import uvicorn
from fastapi import Body, FastAPI
from starlette.responses import Response

from ..config.loader import XRouteConfig
from ..ledger import Ledger
from ..logger import get_logger
from .modules import MessagingModule, RouterModule
from .server import RPCServer

logger = get_logger(__name__)


def build_rpc_server(ledger: Ledger) -> RPCServer:
    """RPC server with the router and messaging namespaces bound to ``ledger``."""
    server = RPCServer()
    server.register_module(RouterModule(ledger))
    server.register_module(MessagingModule(ledger))
    return server


def create_app(server: RPCServer) -> FastAPI:
    app = FastAPI(title="xroute", description="Pool router and cross-chain messaging queries.")

    @app.post("/rpc")
    async def rpc_endpoint(body: Any = Body(...)):
        """JSON-RPC 2.0 endpoint"""
        result = await server.handle_request(body)
        if result is None:
            return Response(status_code=204)
        # handle_request returns a JSON string; send it raw to avoid double-encoding
        return Response(content=result, media_type="application/json")

    @app.get("/")
    async def root():
        return {"methods": sorted(server.get_methods())}

    return app


def run(config: XRouteConfig, ledger: Optional[Ledger] = None) -> None:
    """Serve the query surface until interrupted."""
    ledger = ledger or Ledger.from_config(config)
    app = create_app(build_rpc_server(ledger))
    logger.info(f"Serving JSON-RPC on http://{config.rpc.host}:{config.rpc.port}/rpc")
    uvicorn.run(app, host=config.rpc.host, port=config.rpc.port, log_level="warning")

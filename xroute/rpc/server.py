"""
xroute JSON-RPC 2.0 Server

Implements the JSON-RPC 2.0 specification with support for:
- Method registration and namespacing
- Batch requests
- Error handling with standard codes, plus ledger error tags
"""

import asyncio
import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Union

from ..exceptions import XRouteError
from ..logger import get_logger

logger = get_logger(__name__)


class RPCErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (-32000 to -32099)
    SERVER_ERROR = -32000
    RESOURCE_NOT_FOUND = -32001
    LEDGER_ERROR = -32010


@dataclass
class RPCError(Exception):
    """JSON-RPC error."""

    code: int
    message: str
    data: Optional[Any] = None

    def to_dict(self) -> dict:
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result


@dataclass
class RPCRequest:
    """JSON-RPC request."""

    jsonrpc: str
    method: str
    params: Union[List, Dict, None]
    id: Union[str, int, None]

    @classmethod
    def from_dict(cls, data: dict) -> "RPCRequest":
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            method=data.get("method", ""),
            params=data.get("params"),
            id=data.get("id"),
        )

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass
class RPCResponse:
    """JSON-RPC response."""

    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[Dict] = None
    id: Union[str, int, None] = None

    def to_dict(self) -> dict:
        response = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            response["error"] = self.error
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


RPCMethod = Callable[..., Any]


class RPCModule:
    """
    Base class for RPC modules.

    Subclass this to create method namespaces like router_, messaging_.
    """

    namespace: str = ""

    def __init__(self, context: Any = None):
        """
        Args:
            context: Application context (the Ledger)
        """
        self.context = context

    def get_methods(self) -> Dict[str, RPCMethod]:
        """Public methods marked with @rpc_method, keyed by full name."""
        methods = {}
        for name in dir(self):
            if name.startswith("_"):
                continue
            attr = getattr(self, name)
            if callable(attr) and hasattr(attr, "__rpc_method__"):
                full_name = f"{self.namespace}_{name}" if self.namespace else name
                methods[full_name] = attr
        return methods


def rpc_method(func: RPCMethod) -> RPCMethod:
    """
    Decorator to mark a method as an RPC endpoint.

    Usage:
        @rpc_method
        async def getPool(self, pool_id: int) -> dict:
            ...
    """
    func.__rpc_method__ = True
    return func


class RPCServer:
    """
    JSON-RPC 2.0 server.

    Manages method registration and request handling.
    """

    def __init__(self):
        self._methods: Dict[str, RPCMethod] = {}
        self._modules: Dict[str, RPCModule] = {}

    def register_method(self, name: str, handler: RPCMethod):
        self._methods[name] = handler
        logger.debug(f"Registered RPC method: {name}")

    def register_module(self, module: RPCModule):
        methods = module.get_methods()
        self._methods.update(methods)
        self._modules[module.namespace] = module
        logger.info(f"Registered RPC module: {module.namespace} ({len(methods)} methods)")

    def get_methods(self) -> List[str]:
        return list(self._methods.keys())

    async def handle_request(self, data: Union[str, bytes, dict, list]) -> Optional[str]:
        """
        Handle a JSON-RPC request.

        Args:
            data: Request data (JSON string or already-parsed object)

        Returns:
            JSON response string, or None for notifications
        """
        try:
            if isinstance(data, (str, bytes)):
                parsed = json.loads(data)
            else:
                parsed = data
        except json.JSONDecodeError as e:
            error = RPCError(RPCErrorCode.PARSE_ERROR, f"Parse error: {e}")
            return RPCResponse(error=error.to_dict()).to_json()

        if isinstance(parsed, list):
            if not parsed:
                error = RPCError(RPCErrorCode.INVALID_REQUEST, "Empty batch")
                return RPCResponse(error=error.to_dict()).to_json()

            responses = await asyncio.gather(*[
                self._handle_single(req) for req in parsed
            ])
            responses = [r for r in responses if r is not None]
            if not responses:
                return None
            return json.dumps(responses)

        response = await self._handle_single(parsed)
        if response is None:
            return None
        return json.dumps(response)

    async def _handle_single(self, data: Any) -> Optional[dict]:
        if not isinstance(data, dict):
            return RPCResponse(
                error=RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid request").to_dict()
            ).to_dict()
        request = RPCRequest.from_dict(data)

        if request.jsonrpc != "2.0":
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.INVALID_REQUEST, "Invalid JSON-RPC version").to_dict()
            ).to_dict()

        if not request.method:
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.INVALID_REQUEST, "Missing method").to_dict()
            ).to_dict()

        handler = self._methods.get(request.method)
        if handler is None:
            if request.is_notification:
                return None
            return RPCResponse(
                id=request.id,
                error=RPCError(
                    RPCErrorCode.METHOD_NOT_FOUND,
                    f"Method not found: {request.method}"
                ).to_dict()
            ).to_dict()

        try:
            if request.params is None:
                result = await handler()
            elif isinstance(request.params, list):
                result = await handler(*request.params)
            elif isinstance(request.params, dict):
                result = await handler(**request.params)
            else:
                raise RPCError(RPCErrorCode.INVALID_PARAMS, "Invalid params type")

            if request.is_notification:
                return None
            return RPCResponse(id=request.id, result=result).to_dict()

        except RPCError as e:
            if request.is_notification:
                return None
            return RPCResponse(id=request.id, error=e.to_dict()).to_dict()

        except XRouteError as e:
            if request.is_notification:
                return None
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.LEDGER_ERROR, str(e), data=e.to_dict()).to_dict()
            ).to_dict()

        except TypeError as e:
            if request.is_notification:
                return None
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.INVALID_PARAMS, str(e)).to_dict()
            ).to_dict()

        except Exception as e:
            logger.exception(f"Error handling RPC method {request.method}")
            if request.is_notification:
                return None
            return RPCResponse(
                id=request.id,
                error=RPCError(RPCErrorCode.INTERNAL_ERROR, str(e)).to_dict()
            ).to_dict()

"""
JSON-RPC query surface

Covers:
  - router_* and messaging_* namespaces over RPCServer.handle_request
  - Ledger errors mapped to JSON-RPC errors with tag data
  - Batch requests and notifications
  - FastAPI mount at POST /rpc
"""

import json

import pytest
from fastapi.testclient import TestClient

from conftest import BRIDGE_ID, NETWORK, REMOTE, send
from xroute.rpc import RPCErrorCode, build_rpc_server, create_app


def call(method, params=None, req_id=1):
    return {"jsonrpc": "2.0", "method": method, "params": params, "id": req_id}


@pytest.fixture
def server(pool_ledger):
    return build_rpc_server(pool_ledger)


@pytest.fixture
def messaging_server(bridge_ledger):
    send(bridge_ledger)
    return build_rpc_server(bridge_ledger)


class TestRouterNamespace:

    @pytest.mark.asyncio
    async def test_get_pool(self, server):
        response = json.loads(await server.handle_request(call("router_getPool", [1])))
        assert response["id"] == 1
        assert response["result"]["reserve_a"] == 1000
        assert response["result"]["asset_b"] == "asset-b"

    @pytest.mark.asyncio
    async def test_get_missing_pool(self, server):
        response = json.loads(await server.handle_request(call("router_getPool", [7])))
        assert response["result"] is None

    @pytest.mark.asyncio
    async def test_get_pool_id_named_params(self, server):
        request = call("router_getPoolId", {"asset_a": "asset-a", "asset_b": "asset-b", "network": NETWORK})
        response = json.loads(await server.handle_request(request))
        assert response["result"] == 1

    @pytest.mark.asyncio
    async def test_amount_out(self, server):
        response = json.loads(await server.handle_request(call("router_getAmountOut", [10, 1000, 1000])))
        assert response["result"] == 8

    @pytest.mark.asyncio
    async def test_ledger_error_mapped(self, server):
        response = json.loads(await server.handle_request(call("router_getAmountOut", [10, 0, 1000])))
        assert response["error"]["code"] == RPCErrorCode.LEDGER_ERROR
        assert response["error"]["data"]["tag"] == "insufficient-liquidity"

    @pytest.mark.asyncio
    async def test_stats_include_state_root(self, server, pool_ledger):
        response = json.loads(await server.handle_request(call("router_getStats")))
        assert response["result"]["state_root"] == pool_ledger.compute_state_root()

    @pytest.mark.asyncio
    async def test_paused_flag(self, server):
        response = json.loads(await server.handle_request(call("router_isPaused")))
        assert response["result"] is False


class TestMessagingNamespace:

    @pytest.mark.asyncio
    async def test_get_message(self, messaging_server):
        response = json.loads(await messaging_server.handle_request(call("messaging_getMessage", [1])))
        message = response["result"]
        assert message["fee"] == 15
        assert message["payload"] == "01" * 100
        assert message["target_network"] == REMOTE

    @pytest.mark.asyncio
    async def test_message_status(self, messaging_server):
        response = json.loads(await messaging_server.handle_request(call("messaging_getMessageStatus", [1])))
        assert response["result"] == "created"

    @pytest.mark.asyncio
    async def test_unknown_message_status(self, messaging_server):
        response = json.loads(await messaging_server.handle_request(call("messaging_getMessageStatus", [5])))
        assert response["error"]["data"]["tag"] == "invalid-message"

    @pytest.mark.asyncio
    async def test_bridge_fee(self, messaging_server):
        response = json.loads(
            await messaging_server.handle_request(call("messaging_calculateBridgeFee", [BRIDGE_ID, 100]))
        )
        assert response["result"] == 15

    @pytest.mark.asyncio
    async def test_supported_networks(self, messaging_server):
        response = json.loads(
            await messaging_server.handle_request(call("messaging_getSupportedNetworks", [BRIDGE_ID]))
        )
        assert response["result"] == [REMOTE, "polygon"]

    @pytest.mark.asyncio
    async def test_next_nonce(self, messaging_server):
        response = json.loads(await messaging_server.handle_request(call("messaging_getNextNonce")))
        assert response["result"] == 2


class TestProtocol:

    @pytest.mark.asyncio
    async def test_method_not_found(self, server):
        response = json.loads(await server.handle_request(call("router_swap", [])))
        assert response["error"]["code"] == RPCErrorCode.METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_parse_error(self, server):
        response = json.loads(await server.handle_request("{not json"))
        assert response["error"]["code"] == RPCErrorCode.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_wrong_params(self, server):
        response = json.loads(await server.handle_request(call("router_getPool", [1, 2, 3])))
        assert response["error"]["code"] == RPCErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_batch(self, server):
        batch = [call("router_getFeeRate", req_id=1), call("router_getPool", [1], req_id=2)]
        responses = json.loads(await server.handle_request(batch))
        assert [r["id"] for r in responses] == [1, 2]
        assert responses[0]["result"] == 3

    @pytest.mark.asyncio
    async def test_notification(self, server):
        assert await server.handle_request(call("router_getFeeRate", req_id=None)) is None

    def test_registered_methods(self, server):
        methods = server.get_methods()
        assert "router_getPool" in methods
        assert "messaging_getMessage" in methods
        assert not any(name.endswith("_get_ledger") for name in methods)


class TestHTTPMount:

    def test_post_rpc(self, server):
        client = TestClient(create_app(server))
        response = client.post("/rpc", json=call("router_getFeeRate"))
        assert response.status_code == 200
        assert response.json()["result"] == 3

    def test_post_batch(self, server):
        client = TestClient(create_app(server))
        response = client.post("/rpc", json=[call("router_getFeeRate"), call("router_isPaused", req_id=2)])
        assert len(response.json()) == 2

    def test_notification_no_content(self, server):
        client = TestClient(create_app(server))
        response = client.post("/rpc", json=call("router_getFeeRate", req_id=None))
        assert response.status_code == 204

    def test_method_listing(self, server):
        client = TestClient(create_app(server))
        assert "router_getPool" in client.get("/").json()["methods"]

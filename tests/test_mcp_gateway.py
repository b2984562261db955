import pytest
from fastapi.testclient import TestClient

from firestore_mcp import executor as executor_module
from firestore_mcp.executor import ToolExecutor
from firestore_mcp.metrics import default_metrics
from firestore_mcp.server import MCP_SERVER_NAME, MCP_SERVER_VERSION, app


@pytest.fixture
def fake_executor(monkeypatch, orders_client):
    executor = ToolExecutor(orders_client)
    monkeypatch.setattr(executor_module, "default_executor", executor)
    return executor


def test_mcp_list_tools():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["jsonrpc"] == "2.0"
    assert data["id"] == 1
    tools = {tool["name"]: tool for tool in data["result"]["tools"]}
    assert set(tools) == {"list_collections", "inspect_collection_schema", "query_firestore"}
    query_schema = tools["query_firestore"]["inputSchema"]
    assert query_schema["required"] == ["collectionPath"]
    assert "array-contains-any" in query_schema["properties"]["filters"]["items"]["properties"]["operator"]["enum"]


def test_mcp_list_tools_alias():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "list_tools"})
    assert resp.status_code == 200
    assert len(resp.json()["result"]["tools"]) == 3


def test_mcp_initialize():
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 10,
            "method": "initialize",
            "params": {
                "protocolVersion": "2025-03-26",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "0.0.0"},
            },
        },
    )
    assert resp.status_code == 200
    result = resp.json()["result"]
    assert result["protocolVersion"] == "2025-03-26"
    assert result["serverInfo"] == {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION}
    assert result["capabilities"]["tools"]["listChanged"] is False


def test_mcp_initialize_requires_protocol_version():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 11, "method": "initialize", "params": {}})
    assert resp.json()["error"]["code"] == -32602


def test_mcp_tools_call_runs_query(fake_executor):
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 4,
            "method": "tools/call",
            "params": {
                "name": "query_firestore",
                "arguments": {"collectionPath": "orders", "limit": 1, "aggregation": {"count": True}},
            },
        },
    )
    assert resp.status_code == 200
    result = resp.json()["result"]
    assert result["isError"] is False
    text = result["content"][0]["text"]
    assert text.startswith("Found 1 documents.\nAggregate count: 12")
    assert default_metrics.snapshot()["tool_success"] == {"query_firestore": 1}


def test_mcp_call_tool_alias_with_params_key(fake_executor):
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 5,
            "method": "call_tool",
            "params": {"tool": "list_collections", "params": {}},
        },
    )
    assert resp.json()["result"]["content"][0]["text"] == "Found 1 collections:\n\norders"


def test_mcp_tool_errors_are_in_band(fake_executor):
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 6,
            "method": "tools/call",
            "params": {"name": "query_firestore", "arguments": {"collectionPath": "orders", "limit": -1}},
        },
    )
    assert resp.status_code == 200
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "limit must be a positive integer when provided."
    assert default_metrics.snapshot()["tool_error"] == {"query_firestore": 1}


def test_mcp_unknown_tool_is_in_band(fake_executor):
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {"name": "delete_everything"}},
    )
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "Unknown tool: delete_everything"


def test_mcp_unknown_method_returns_error():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 8, "method": "not_a_real_method"})
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32601


def test_mcp_invalid_params_type():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 9, "method": "tools/call", "params": []})
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 9
    assert data["error"]["code"] == -32602


def test_mcp_call_tool_missing_name_is_invalid_params():
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 13, "method": "tools/call", "params": {"arguments": {}}},
    )
    assert resp.json()["error"]["code"] == -32602


def test_mcp_parse_error_invalid_json():
    client = TestClient(app)
    resp = client.post("/mcp", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700


def test_mcp_non_object_body_is_invalid_request():
    client = TestClient(app)
    resp = client.post("/mcp", json=[1, 2, 3])
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600


def test_mcp_missing_method_invalid_request():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 12})
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32600


def test_mcp_initialized_notification_ignored():
    client = TestClient(app)
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert resp.status_code == 204
    assert resp.text == ""


def test_rate_limit_returns_429_and_counts(monkeypatch):
    from firestore_mcp import server as server_mod

    async def deny(*_args, **_kwargs):
        return False

    monkeypatch.setattr(server_mod.rate_limiter, "allow", deny)
    client = TestClient(app)
    resp = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 14, "method": "tools/call", "params": {"name": "list_collections"}},
    )
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == 429
    assert client.get("/metrics").json()["rate_limited"] == 1

"""
Lightweight JSON-RPC surface for MCP-style tooling.

Transports (HTTP, stdio) decode a JSON body and hand it here; this module maps
``initialize``, ``tools/list`` and ``tools/call`` onto the tool catalog and the
executor. It is intentionally small and stateless; callers own authentication
and session handling.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from firestore_mcp import executor as executor_module
from firestore_mcp.executor import ToolExecutor
from firestore_mcp.tools.catalog import list_tools

MCP_SERVER_NAME = "firestore-mcp-server"
MCP_SERVER_VERSION = "1.0.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

LIST_METHODS = ("list_tools", "tools/list")
CALL_METHODS = ("call_tool", "tools/call")
NOTIFICATION_METHODS = ("initialized",)

# Returned by dispatch() for notifications, which get no response body.
NO_RESPONSE = object()


class JsonRpcError(Exception):
    """A request-level failure carrying a JSON-RPC error code."""

    def __init__(self, code: int, message: str, *, http_status: int = 200) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status


def success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def parse_request(body: Any) -> Tuple[str, Any, Dict[str, Any]]:
    """Split a decoded JSON-RPC body into (method, id, params)."""
    if not isinstance(body, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid request", http_status=400)

    method = body.get("method")
    raw_params = body.get("params")
    if raw_params is None:
        params: Dict[str, Any] = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        raise JsonRpcError(INVALID_PARAMS, "Invalid params")

    if not isinstance(method, str) or not method:
        raise JsonRpcError(INVALID_REQUEST, "Invalid request")
    return method, body.get("id"), params


def tool_call_target(params: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Extract (tool name, arguments) from ``tools/call`` params."""
    tool_name = params.get("name") or params.get("tool")
    arguments = params.get("arguments")
    if arguments is None:
        arguments = params.get("params") or {}
    if not isinstance(tool_name, str) or not tool_name.strip():
        raise JsonRpcError(INVALID_PARAMS, "Invalid params")
    if not isinstance(arguments, dict):
        raise JsonRpcError(INVALID_PARAMS, "Invalid params")
    return tool_name.strip(), arguments


def is_notification(method: str) -> bool:
    return method.startswith("notifications/") or method in NOTIFICATION_METHODS


async def call_tool(
    tool_name: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    executor: Optional[ToolExecutor] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Dispatch to a tool by name."""
    runner = executor or executor_module.default_executor
    return await runner.execute(tool_name, params or {}, request_id=request_id)


async def dispatch(
    method: str,
    params: Dict[str, Any],
    *,
    executor: Optional[ToolExecutor] = None,
    request_id: Optional[str] = None,
) -> Any:
    """
    Run one JSON-RPC method and return its ``result`` value.

    Returns ``NO_RESPONSE`` for notifications. Raises ``JsonRpcError`` for
    protocol-level failures; tool failures are in-band results with isError set.
    """
    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            raise JsonRpcError(INVALID_PARAMS, "Invalid params")
        return {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
            "capabilities": {"tools": {"listChanged": False}},
        }

    if method == "ping":
        return {}

    if method in LIST_METHODS:
        return {"tools": list_tools()}

    if method in CALL_METHODS:
        tool_name, arguments = tool_call_target(params)
        return await call_tool(tool_name, arguments, executor=executor, request_id=request_id)

    if is_notification(method):
        return NO_RESPONSE

    raise JsonRpcError(METHOD_NOT_FOUND, "Method not found")


async def handle_message(body: Any, *, executor: Optional[ToolExecutor] = None) -> Optional[Dict[str, Any]]:
    """Full request/response cycle for one decoded message; None means no reply."""
    rpc_id = body.get("id") if isinstance(body, dict) else None
    try:
        method, rpc_id, params = parse_request(body)
        result = await dispatch(method, params, executor=executor)
    except JsonRpcError as exc:
        return error_payload(rpc_id, exc.code, exc.message)
    if result is NO_RESPONSE:
        return None
    return success_payload(rpc_id, result)

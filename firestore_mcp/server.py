"""FastAPI application exposing the Firestore tools over stateless HTTP JSON-RPC."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from firestore_mcp import mcp
from firestore_mcp.config import default_config
from firestore_mcp.firestore_api import default_client
from firestore_mcp.logging_config import configure_logging
from firestore_mcp.metrics import default_metrics
from firestore_mcp.rate_limiter import PerKeyRateLimiter

logger = logging.getLogger(__name__)
configure_logging(default_config)

rate_limiter = PerKeyRateLimiter(
    rate_per_sec=default_config.rate_limit_qps,
    per_tool=default_config.per_tool_rate_limits,
)
APP_VERSION = mcp.MCP_SERVER_VERSION
MCP_SERVER_NAME = mcp.MCP_SERVER_NAME
MCP_SERVER_VERSION = mcp.MCP_SERVER_VERSION
TRANSPORT_NAME = "streamable-http"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    yield
    # Shutdown
    await default_client.aclose()


app = FastAPI(
    title="Firestore MCP Server",
    description="Read-only Firestore query tools for LLM agents.",
    version=APP_VERSION,
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=default_config.cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Mcp-Session-Id"],
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    default_metrics.record_duration(request_id, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


async def _enforce_rate_limit(key: str) -> Optional[JSONResponse]:
    allowed = await rate_limiter.allow(key)
    if not allowed:
        logger.warning("tool=%s outcome=rate_limited", key, extra={"tool": key})
        default_metrics.incr_rate_limited()
        return JSONResponse(
            status_code=429,
            content={"jsonrpc": "2.0", "error": {"code": 429, "message": "Rate limit exceeded"}},
        )
    return None


def _rate_limit_key(method: str, params: Dict[str, Any]) -> Optional[str]:
    if method in mcp.LIST_METHODS:
        return "list_tools"
    if method in mcp.CALL_METHODS:
        name = params.get("name") or params.get("tool")
        return name if isinstance(name, str) and name.strip() else "call_tool"
    return None


@app.get("/")
async def root() -> JSONResponse:
    """Describe the service and its endpoints."""
    return JSONResponse(
        content={
            "name": "Firestore MCP Server",
            "status": "operational",
            "transport": TRANSPORT_NAME,
            "endpoints": {"health": "/health", "metrics": "/metrics", "mcp": "/mcp"},
        }
    )


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(
        content={
            "status": "ok",
            "service": MCP_SERVER_NAME,
            "transport": TRANSPORT_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """
    Stateless JSON-RPC gateway for MCP clients.

    Supported methods:
      - initialize, ping
      - list_tools / tools/list
      - call_tool / tools/call
      - notifications/* (acknowledged with 204)
    """
    request_id = getattr(request.state, "request_id", None)
    start_time = time.time()

    def _respond(
        payload: Dict[str, Any],
        status_code: int = 200,
        *,
        outcome: str,
        method_label: Optional[str] = None,
        error_code: Optional[int] = None,
    ) -> JSONResponse:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "mcp outcome=%s method=%s id=%s status=%s duration_ms=%.2f error_code=%s",
            outcome,
            method_label,
            payload.get("id"),
            status_code,
            duration_ms,
            error_code,
            extra={"request_id": request_id, "error": error_code},
        )
        return JSONResponse(status_code=status_code, content=payload)

    try:
        body = await request.json()
    except Exception:
        payload = mcp.error_payload(None, mcp.PARSE_ERROR, "Parse error")
        return _respond(payload, status_code=400, outcome="error", error_code=mcp.PARSE_ERROR)

    rpc_id = body.get("id") if isinstance(body, dict) else None
    try:
        method, rpc_id, params = mcp.parse_request(body)
    except mcp.JsonRpcError as exc:
        payload = mcp.error_payload(rpc_id, exc.code, exc.message)
        return _respond(payload, status_code=exc.http_status, outcome="error", error_code=exc.code)

    limit_key = _rate_limit_key(method, params)
    if limit_key is not None:
        limited = await _enforce_rate_limit(limit_key)
        if limited:
            return limited

    try:
        result = await mcp.dispatch(method, params, request_id=request_id)
    except mcp.JsonRpcError as exc:
        payload = mcp.error_payload(rpc_id, exc.code, exc.message)
        return _respond(payload, status_code=exc.http_status, outcome="error", method_label=method, error_code=exc.code)

    if result is mcp.NO_RESPONSE:
        # Notifications should not return a JSON-RPC response body.
        logger.debug("mcp notification %s received", method, extra={"request_id": request_id})
        return Response(status_code=204)

    return _respond(mcp.success_payload(rpc_id, result), outcome="success", method_label=method)


# Run with: uvicorn firestore_mcp.server:app --port 3000

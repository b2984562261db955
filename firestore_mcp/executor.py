"""
Single entry point for tool execution.

``ToolExecutor.execute`` never raises: validation failures, Firestore errors
and unexpected exceptions all come back as an error result.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from firestore_mcp.firestore_api import FirestoreApiError, FirestoreClient, default_client
from firestore_mcp.metrics import MetricsRecorder, default_metrics
from firestore_mcp.tools.catalog import TOOL_REGISTRY
from firestore_mcp.tools.results import error_result
from firestore_mcp.tools.validators import InvalidArgumentError

logger = logging.getLogger(__name__)

# Unregistered names share one counter so arbitrary input cannot grow the metrics.
UNKNOWN_TOOL_METRIC = "unknown_tool"


class ToolExecutor:
    """Runs catalog tools against one injected Firestore client."""

    def __init__(self, client: FirestoreClient, *, metrics: MetricsRecorder = default_metrics) -> None:
        self.client = client
        self.metrics = metrics

    async def execute(
        self,
        tool_name: str,
        raw_arguments: Optional[Any] = None,
        *,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Run one tool, log its outcome and record it in the metrics."""
        start = time.time()
        result = await self._run(tool_name, raw_arguments)
        duration_ms = (time.time() - start) * 1000
        success = not result.get("isError")
        if success:
            logger.info(
                "tool=%s outcome=success request_id=%s duration_ms=%.2f",
                tool_name,
                request_id,
                duration_ms,
                extra={"tool": tool_name, "request_id": request_id},
            )
        else:
            logger.warning(
                "tool=%s outcome=error request_id=%s duration_ms=%.2f",
                tool_name,
                request_id,
                duration_ms,
                extra={"tool": tool_name, "request_id": request_id, "error": "tool_error"},
            )
        metric_name = tool_name if tool_name in TOOL_REGISTRY else UNKNOWN_TOOL_METRIC
        self.metrics.record_tool(metric_name, success=success, duration_ms=duration_ms)
        return result

    async def _run(self, tool_name: str, raw_arguments: Optional[Any]) -> Dict[str, Any]:
        tool = TOOL_REGISTRY.get(tool_name)
        if tool is None:
            return error_result(f"Unknown tool: {tool_name}")

        arguments = {} if raw_arguments is None else raw_arguments
        try:
            return await tool.callable(arguments, client=self.client)
        except InvalidArgumentError as exc:
            logger.debug("tool=%s rejected arguments: %s", tool_name, exc, extra={"tool": tool_name})
            return error_result(str(exc))
        except FirestoreApiError as exc:
            logger.warning(
                "tool=%s firestore error code=%s: %s",
                tool_name,
                exc.code,
                exc,
                extra={"tool": tool_name, "error": exc.code},
            )
            return error_result(str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while running tool %s", tool_name, extra={"tool": tool_name})
            return error_result(str(exc) or "Unexpected error while calling tool.")


default_executor = ToolExecutor(default_client)

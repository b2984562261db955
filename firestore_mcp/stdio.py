"""
Single-session stdio transport.

Reads one JSON-RPC message per line from stdin and writes one response per
line to stdout. Logging goes to stderr so stdout carries protocol data only.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional, TextIO

from firestore_mcp import mcp
from firestore_mcp.config import default_config
from firestore_mcp.executor import ToolExecutor
from firestore_mcp.firestore_api import default_client
from firestore_mcp.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def handle_line(line: str, *, executor: Optional[ToolExecutor] = None) -> Optional[str]:
    """Answer one raw input line; None when nothing should be written."""
    if not line.strip():
        return None
    try:
        body = json.loads(line)
    except ValueError:
        return json.dumps(mcp.error_payload(None, mcp.PARSE_ERROR, "Parse error"))
    response = await mcp.handle_message(body, executor=executor)
    if response is None:
        return None
    return json.dumps(response, ensure_ascii=False)


async def serve(
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
    *,
    executor: Optional[ToolExecutor] = None,
) -> None:
    """Serve until stdin reaches EOF."""
    while True:
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        reply = await handle_line(line, executor=executor)
        if reply is not None:
            stdout.write(reply + "\n")
            stdout.flush()


async def _run() -> None:
    try:
        await serve()
    finally:
        await default_client.aclose()


def main() -> None:
    configure_logging(default_config)
    logger.info("Firestore MCP server running on stdio")
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

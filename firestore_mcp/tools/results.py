"""Tool result shape shared by every tool: text content plus an error flag."""

from __future__ import annotations

from typing import Any, Dict


def success_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "isError": False}


def error_result(message: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": message}], "isError": True}


def result_text(result: Dict[str, Any]) -> str:
    """Join the text blocks of a tool result."""
    return "\n".join(
        block.get("text", "")
        for block in result.get("content", [])
        if isinstance(block, dict) and block.get("type") == "text"
    )

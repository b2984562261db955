"""Logging setup shared by the HTTP and stdio transports."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

from firestore_mcp.config import FirestoreMcpConfig, default_config

EXTRA_KEYS = ("tool", "request_id", "error")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def resolve_level(level_name: Optional[str]) -> int:
    if not level_name:
        return logging.INFO
    level = getattr(logging, level_name.upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: FirestoreMcpConfig = default_config) -> logging.Handler:
    """
    Install a single stderr handler on the root logger.

    stdout stays untouched so the stdio transport can own it.
    """
    handler = logging.StreamHandler(sys.stderr)
    if config.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.basicConfig(level=resolve_level(config.log_level), handlers=[handler], force=True)
    return handler

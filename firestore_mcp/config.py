"""
Configuration helpers for the Firestore MCP server.

This module centralizes service-account loading, database selection, logging
and safety limits. No secrets are stored in the repository; the service account
JSON is read from environment or a local file if present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

# Service account handling
SERVICE_ACCOUNT_ENV_VAR = "FIREBASE_SERVICE_ACCOUNT"
SERVICE_ACCOUNT_FILE_ENV_VAR = "FIREBASE_SERVICE_ACCOUNT_FILE"

PROJECT_ID = os.getenv("FIRESTORE_PROJECT_ID") or None
DATABASE = os.getenv("FIRESTORE_DATABASE") or None

# Tool defaults
DEFAULT_SAMPLE_SIZE = 10


def _load_rate_limit() -> float:
    raw_qps = os.getenv("FIRESTORE_MCP_RATE_LIMIT_QPS")
    if raw_qps:
        try:
            parsed = float(raw_qps)
        except ValueError:
            return 5.0
        return parsed if parsed > 0 else 5.0
    return 5.0


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["*"]


def _parse_per_tool_limits(raw: Optional[str]) -> Dict[str, float]:
    """Parse ``tool=qps`` pairs separated by commas; malformed or non-positive entries are skipped."""
    limits: Dict[str, float] = {}
    if not raw:
        return limits
    for item in raw.split(","):
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        try:
            parsed = float(value)
        except ValueError:
            continue
        if parsed > 0:
            limits[name] = parsed
    return limits


DEFAULT_RATE_LIMIT_QPS = _load_rate_limit()
LOG_LEVEL = os.getenv("FIRESTORE_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("FIRESTORE_MCP_LOG_FORMAT", "json")  # json or plain
CORS_ORIGINS = _parse_origins(os.getenv("FIRESTORE_MCP_CORS_ORIGINS"))
PER_TOOL_RATE_LIMITS = _parse_per_tool_limits(os.getenv("FIRESTORE_MCP_PER_TOOL_RATE_LIMITS"))


def load_service_account() -> Optional[str]:
    """
    Load the raw service account JSON from environment or a local file.

    Returns:
        The JSON text if available, otherwise None. The content is never logged
        or returned to callers.
    """
    env_value = os.getenv(SERVICE_ACCOUNT_ENV_VAR)
    if env_value and env_value.strip():
        return env_value.strip()

    key_path = os.getenv(SERVICE_ACCOUNT_FILE_ENV_VAR)
    if key_path:
        path = Path(key_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


@dataclass(slots=True)
class FirestoreMcpConfig:
    """Runtime configuration for Firestore access and the HTTP surface."""

    service_account_json: Optional[str] = field(default_factory=load_service_account)
    project_id: Optional[str] = PROJECT_ID
    database: Optional[str] = DATABASE
    default_sample_size: int = DEFAULT_SAMPLE_SIZE
    rate_limit_qps: float = DEFAULT_RATE_LIMIT_QPS
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    cors_origins: List[str] = field(default_factory=lambda: list(CORS_ORIGINS))
    per_tool_rate_limits: Dict[str, float] = field(default_factory=lambda: dict(PER_TOOL_RATE_LIMITS))


default_config = FirestoreMcpConfig()

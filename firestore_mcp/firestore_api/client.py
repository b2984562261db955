"""
Thin async wrapper around the Firestore client library.

All methods are read-only and map Google API errors to internal exceptions that
the tool layer turns into error results. The underlying ``AsyncClient`` is
created lazily on first use and reused for the lifetime of the wrapper.
"""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as core_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.oauth2 import service_account

from firestore_mcp.config import FirestoreMcpConfig, SERVICE_ACCOUNT_ENV_VAR, default_config

logger = logging.getLogger(__name__)

COUNT_ALIAS = "count"


class FirestoreApiError(Exception):
    """Base exception for Firestore access errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class CredentialsError(FirestoreApiError):
    """Raised when the service account configuration is missing or malformed."""


class PermissionDeniedError(FirestoreApiError):
    """Raised when the credentials are not allowed to read the requested data."""


class QueryRejectedError(FirestoreApiError):
    """Raised when Firestore refuses the query shape (bad argument, missing index)."""


class NotFoundError(FirestoreApiError):
    """Raised when the project or database does not exist."""


class DatabaseUnavailableError(FirestoreApiError):
    """Raised when Firestore cannot be reached in time."""


@dataclass(slots=True)
class DocumentRecord:
    """A fetched document: its id and raw field data."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)


def parse_service_account(raw: Optional[str]) -> Dict[str, Any]:
    """Decode and check the service account JSON."""
    if not raw:
        raise CredentialsError(f"{SERVICE_ACCOUNT_ENV_VAR} environment variable is required")
    try:
        info = json.loads(raw)
    except ValueError:
        raise CredentialsError(f"Invalid JSON in {SERVICE_ACCOUNT_ENV_VAR} environment variable") from None
    if not isinstance(info, dict):
        raise CredentialsError(f"Invalid JSON in {SERVICE_ACCOUNT_ENV_VAR} environment variable")
    project_id = info.get("project_id")
    if not isinstance(project_id, str) or not project_id.strip():
        raise CredentialsError(f"{SERVICE_ACCOUNT_ENV_VAR} must include a project_id")
    return info


def build_async_client(config: FirestoreMcpConfig) -> firestore.AsyncClient:
    info = parse_service_account(config.service_account_json)
    try:
        credentials = service_account.Credentials.from_service_account_info(info)
    except ValueError as exc:
        raise CredentialsError(f"Invalid service account: {exc}") from exc
    project_id = config.project_id or info["project_id"].strip()
    kwargs: Dict[str, Any] = {"project": project_id, "credentials": credentials}
    if config.database:
        kwargs["database"] = config.database
    logger.info("Initializing Firestore client for project %s", project_id)
    return firestore.AsyncClient(**kwargs)


def _map_error(exc: Exception) -> FirestoreApiError:
    message = str(exc) or exc.__class__.__name__
    status_code = getattr(exc, "code", None)
    status_code = status_code if isinstance(status_code, int) else None
    if isinstance(exc, (core_exceptions.PermissionDenied, core_exceptions.Unauthenticated)):
        return PermissionDeniedError(message, code="permission_denied", status_code=status_code)
    if isinstance(exc, (core_exceptions.FailedPrecondition, core_exceptions.InvalidArgument)):
        return QueryRejectedError(message, code="query_rejected", status_code=status_code)
    if isinstance(exc, auth_exceptions.RefreshError):
        return CredentialsError(message, code="credentials")
    if isinstance(exc, core_exceptions.NotFound):
        return NotFoundError(message, code="not_found", status_code=status_code)
    if isinstance(
        exc,
        (
            core_exceptions.ServiceUnavailable,
            core_exceptions.DeadlineExceeded,
            core_exceptions.RetryError,
            auth_exceptions.TransportError,
        ),
    ):
        return DatabaseUnavailableError(message, code="unavailable", status_code=status_code)
    return FirestoreApiError(message, code="firestore_error", status_code=status_code)


_UPSTREAM_ERRORS = (core_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


class FirestoreClient:
    """Async client for the read-only Firestore surface used by the tools."""

    def __init__(
        self,
        config: FirestoreMcpConfig | None = None,
        *,
        firestore_client: Optional[firestore.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[firestore.AsyncClient] = firestore_client
        self._owns_client = firestore_client is None

    def _get_client(self) -> firestore.AsyncClient:
        if self._client is None:
            self._client = build_async_client(self.config)
            self._owns_client = True
        return self._client

    def collection(self, collection_path: str):
        """Return the collection at ``collection_path`` as the root of a query."""
        return self._get_client().collection(collection_path)

    async def list_collection_ids(self) -> List[str]:
        client = self._get_client()
        try:
            return [collection.id async for collection in client.collections()]
        except _UPSTREAM_ERRORS as exc:
            raise _map_error(exc) from exc

    async def count_documents(self, query) -> Optional[int]:
        """Run a server-side count aggregation over ``query``."""
        try:
            results = await query.count(alias=COUNT_ALIAS).get()
        except _UPSTREAM_ERRORS as exc:
            raise _map_error(exc) from exc
        for batch in results:
            for result in batch:
                if result.alias == COUNT_ALIAS and isinstance(result.value, int):
                    return result.value
        return None

    async def fetch_documents(self, query) -> List[DocumentRecord]:
        try:
            snapshots = await query.get()
        except _UPSTREAM_ERRORS as exc:
            raise _map_error(exc) from exc
        return [DocumentRecord(id=snapshot.id, data=snapshot.to_dict() or {}) for snapshot in snapshots]

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            result = self._client.close()
            if inspect.isawaitable(result):
                await result
            self._client = None


default_client = FirestoreClient()

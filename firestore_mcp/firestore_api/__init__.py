"""Firestore client wrappers."""

from .client import (
    CredentialsError,
    DatabaseUnavailableError,
    DocumentRecord,
    FirestoreApiError,
    FirestoreClient,
    NotFoundError,
    PermissionDeniedError,
    QueryRejectedError,
    default_client,
)

__all__ = [
    "FirestoreClient",
    "FirestoreApiError",
    "CredentialsError",
    "PermissionDeniedError",
    "QueryRejectedError",
    "NotFoundError",
    "DatabaseUnavailableError",
    "DocumentRecord",
    "default_client",
]

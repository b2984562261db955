"""LLM-facing tool implementations."""

from .listing import list_collections
from .schema import inspect_collection_schema
from .query import query_firestore
from . import validators

__all__ = [
    "list_collections",
    "inspect_collection_schema",
    "query_firestore",
    "validators",
]

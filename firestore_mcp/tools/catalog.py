"""Tool catalog: names, descriptions and JSON-schema input contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List

from firestore_mcp.config import DEFAULT_SAMPLE_SIZE
from firestore_mcp.tools.listing import list_collections
from firestore_mcp.tools.query import query_firestore
from firestore_mcp.tools.schema import inspect_collection_schema
from firestore_mcp.tools.validators import ORDER_DIRECTIONS, WHERE_OPERATORS

ToolCallable = Callable[..., Awaitable[Dict[str, Any]]]


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    callable: ToolCallable


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "list_collections": ToolDefinition(
        name="list_collections",
        description="List all top-level collections in the Firestore database.",
        input_schema={
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        },
        callable=list_collections,
    ),
    "inspect_collection_schema": ToolDefinition(
        name="inspect_collection_schema",
        description="Analyze the structure of documents in a collection by sampling documents.",
        input_schema={
            "type": "object",
            "properties": {
                "collectionPath": {
                    "type": "string",
                    "description": "Path to the collection to inspect (required).",
                },
                "sampleSize": {
                    "type": "integer",
                    "minimum": 1,
                    "description": f"Number of documents to sample for schema analysis (default: {DEFAULT_SAMPLE_SIZE}).",
                    "default": DEFAULT_SAMPLE_SIZE,
                },
            },
            "required": ["collectionPath"],
            "additionalProperties": False,
        },
        callable=inspect_collection_schema,
    ),
    "query_firestore": ToolDefinition(
        name="query_firestore",
        description=(
            "Execute queries on a Firestore collection with optional filters, ordering, "
            "limits, and aggregations."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "collectionPath": {
                    "type": "string",
                    "description": "Path to the collection to query (required).",
                },
                "filters": {
                    "type": "array",
                    "description": "Optional array of filter conditions to apply before executing the query.",
                    "items": {
                        "type": "object",
                        "properties": {
                            "field": {"type": "string"},
                            "operator": {"type": "string", "enum": list(WHERE_OPERATORS)},
                            "value": {"description": "Value for the filter condition."},
                        },
                        "required": ["field", "operator", "value"],
                    },
                },
                "orderBy": {
                    "type": "array",
                    "description": "Optional array of order by clauses.",
                    "items": {
                        "type": "object",
                        "properties": {
                            "field": {"type": "string"},
                            "direction": {"type": "string", "enum": list(ORDER_DIRECTIONS)},
                        },
                        "required": ["field", "direction"],
                    },
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Optional maximum number of documents to return (must be > 0).",
                },
                "aggregation": {
                    "type": "object",
                    "description": "Optional aggregation operations to perform on the result set.",
                    "properties": {
                        "count": {"type": "boolean", "description": "Return the number of matching documents."},
                        "sum": {"type": "string", "description": "Compute the sum for the provided field name."},
                        "avg": {"type": "string", "description": "Compute the average for the provided field name."},
                    },
                },
            },
            "required": ["collectionPath"],
            "additionalProperties": False,
        },
        callable=query_firestore,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return the catalog in MCP ``tools/list`` shape."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]

"""Query construction and execution for ``query_firestore``."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from firestore_mcp.firestore_api import DocumentRecord, FirestoreClient, default_client
from firestore_mcp.tools.aggregation import collect_numeric_stats, format_numeric_line
from firestore_mcp.tools.results import success_result
from firestore_mcp.tools.sanitize import sanitize_value
from firestore_mcp.tools.validators import QueryArguments, parse_query_args

logger = logging.getLogger(__name__)

DIRECTIONS = {
    "asc": firestore.Query.ASCENDING,
    "desc": firestore.Query.DESCENDING,
}

# The client spells the array operators with underscores.
CLIENT_OPERATORS = {
    "array-contains": "array_contains",
    "array-contains-any": "array_contains_any",
}


def build_filtered_query(client: FirestoreClient, args: QueryArguments):
    """Apply filters then ordering, in input order. No limit is applied here."""
    query = client.collection(args.collection_path)
    for clause in args.filters:
        operator = CLIENT_OPERATORS.get(clause.operator, clause.operator)
        query = query.where(filter=FieldFilter(clause.field, operator, clause.value))
    for order in args.order_by:
        query = query.order_by(order.field, direction=DIRECTIONS[order.direction])
    return query


def sanitize_documents(docs: List[DocumentRecord]) -> List[Dict[str, Any]]:
    sanitized = []
    for doc in docs:
        fields = sanitize_value(doc.data)
        entry: Dict[str, Any] = {"id": doc.id}
        if isinstance(fields, dict):
            entry.update(fields)
        sanitized.append(entry)
    return sanitized


def render_query_result(
    args: QueryArguments,
    docs: List[DocumentRecord],
    aggregate_count: Optional[int],
) -> str:
    lines = [f"Found {len(docs)} documents."]

    if aggregate_count is not None:
        lines.append(f"Aggregate count: {aggregate_count}")

    aggregation = args.aggregation
    if aggregation is not None and aggregation.sum:
        stats = collect_numeric_stats(docs, aggregation.sum)
        lines.append(format_numeric_line(f"Sum of '{aggregation.sum}'", stats.sum, stats.invalid_count))
    if aggregation is not None and aggregation.avg:
        stats = collect_numeric_stats(docs, aggregation.avg)
        lines.append(format_numeric_line(f"Average of '{aggregation.avg}'", stats.average, stats.invalid_count))

    if docs:
        lines.extend(["", json.dumps(sanitize_documents(docs), indent=2, ensure_ascii=False)])

    return "\n".join(lines)


async def query_firestore(raw_args: Any, *, client: FirestoreClient = default_client) -> Dict[str, Any]:
    """
    Run a filtered, ordered, optionally limited query with aggregations.

    The aggregate count covers every document matching the filters; sum and
    average only cover the documents actually fetched (so they honour ``limit``).

    Raises:
        InvalidArgumentError: malformed arguments.
        FirestoreApiError: Firestore rejected or failed the query.
    """
    args = parse_query_args(raw_args)
    query = build_filtered_query(client, args)

    aggregate_count: Optional[int] = None
    if args.aggregation is not None and args.aggregation.count:
        aggregate_count = await client.count_documents(query)

    if args.limit is not None:
        query = query.limit(args.limit)

    docs = await client.fetch_documents(query)
    logger.debug("Query on %s returned %d documents", args.collection_path, len(docs))
    return success_result(render_query_result(args, docs, aggregate_count))

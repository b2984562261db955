"""Minimal sanity checks for the Firestore MCP tools against a real project."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from firestore_mcp.executor import default_executor  # noqa: E402
from firestore_mcp.firestore_api import default_client  # noqa: E402
from firestore_mcp.tools.results import result_text  # noqa: E402

# Collection to inspect and query; falls back to the first listed collection if unset.
SAMPLE_COLLECTION = os.getenv("FIRESTORE_SAMPLE_COLLECTION")
# Optional numeric field for the sum/avg aggregation check.
SAMPLE_NUMERIC_FIELD = os.getenv("FIRESTORE_SAMPLE_NUMERIC_FIELD")


async def main() -> None:
    listing = await default_executor.execute("list_collections", {})
    print("Collections:", result_text(listing))

    collection = SAMPLE_COLLECTION
    if not collection and not listing["isError"]:
        lines = result_text(listing).splitlines()
        collection = lines[2] if len(lines) > 2 else None

    if collection:
        schema = await default_executor.execute(
            "inspect_collection_schema", {"collectionPath": collection, "sampleSize": 5}
        )
        print("Schema:", result_text(schema))

        aggregation = {"count": True}
        if SAMPLE_NUMERIC_FIELD:
            aggregation.update({"sum": SAMPLE_NUMERIC_FIELD, "avg": SAMPLE_NUMERIC_FIELD})
        query = await default_executor.execute(
            "query_firestore", {"collectionPath": collection, "limit": 3, "aggregation": aggregation}
        )
        print("Query (limit 3):", result_text(query))

    await default_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())

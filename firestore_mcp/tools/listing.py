"""Collection listing tool."""

from __future__ import annotations

from typing import Any, Dict

from firestore_mcp.firestore_api import FirestoreClient, default_client
from firestore_mcp.tools.results import success_result


async def list_collections(raw_args: Any = None, *, client: FirestoreClient = default_client) -> Dict[str, Any]:
    """List top-level collection ids. Arguments are accepted and ignored."""
    names = sorted(await client.list_collection_ids())
    if not names:
        return success_result("No collections found in the Firestore project.")
    return success_result("\n".join([f"Found {len(names)} collections:", "", "\n".join(names)]))

"""Schema inference by sampling documents."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from firestore_mcp.config import FirestoreMcpConfig, default_config
from firestore_mcp.firestore_api import DocumentRecord, FirestoreClient, default_client
from firestore_mcp.tools.results import success_result
from firestore_mcp.tools.sanitize import sanitize_value
from firestore_mcp.tools.validators import parse_inspect_args
from firestore_mcp.tools.values import ValueKind, classify_value, describe_value_type

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SchemaAccumulator:
    """
    Observed type tags and one example value per dot-joined field path.

    The first example seen for a path is kept; later documents only add types.
    """

    types: Dict[str, Dict[str, None]] = field(default_factory=dict)
    examples: Dict[str, Any] = field(default_factory=dict)

    def observe(self, data: Mapping[str, Any], prefix: str = "") -> None:
        for key, value in data.items():
            field_path = f"{prefix}.{key}" if prefix else str(key)
            if field_path not in self.types:
                self.types[field_path] = {}
                self.examples[field_path] = value
            # dict keys keep insertion order, so this doubles as an ordered set
            self.types[field_path][describe_value_type(value)] = None

            if classify_value(value) is ValueKind.MAP:
                self.observe(value, field_path)

    def field_paths(self) -> List[str]:
        return sorted(self.types)

    def types_for(self, field_path: str) -> List[str]:
        return list(self.types.get(field_path, {}))


def collect_schema(docs: List[DocumentRecord]) -> SchemaAccumulator:
    accumulator = SchemaAccumulator()
    for doc in docs:
        if isinstance(doc.data, Mapping):
            accumulator.observe(doc.data)
    return accumulator


def render_schema(collection_path: str, sampled: int, accumulator: SchemaAccumulator) -> str:
    blocks = [f"Schema analysis for collection '{collection_path}' (sampled {sampled} documents):"]
    for field_path in accumulator.field_paths():
        example = sanitize_value(accumulator.examples.get(field_path))
        blocks.append(
            "\n".join(
                [
                    f"Field: {field_path}",
                    f"  Types: {', '.join(accumulator.types_for(field_path))}",
                    f"  Example: {json.dumps(example, indent=2, ensure_ascii=False)}",
                ]
            )
        )
    return "\n\n".join(blocks)


async def inspect_collection_schema(
    raw_args: Any,
    *,
    client: FirestoreClient = default_client,
    config: FirestoreMcpConfig = default_config,
) -> Dict[str, Any]:
    """
    Sample up to ``sampleSize`` documents and describe the fields they contain.
    Without ``sampleSize`` the sample is ``config.default_sample_size`` documents.

    Raises:
        InvalidArgumentError: malformed arguments.
        FirestoreApiError: the read failed.
    """
    args = parse_inspect_args(raw_args, default_sample_size=config.default_sample_size)
    query = client.collection(args.collection_path).limit(args.sample_size)
    docs = await client.fetch_documents(query)

    if not docs:
        return success_result(f"Collection '{args.collection_path}' is empty or does not exist.")

    logger.debug("Sampled %d documents from %s", len(docs), args.collection_path)
    accumulator = collect_schema(docs)
    return success_result(render_schema(args.collection_path, len(docs), accumulator))

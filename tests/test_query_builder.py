import pytest
from google.auth.credentials import AnonymousCredentials
from google.cloud import firestore
from google.cloud.firestore_v1.types import StructuredQuery

from firestore_mcp.firestore_api import FirestoreClient
from firestore_mcp.tools.query import build_filtered_query
from firestore_mcp.tools.validators import WHERE_OPERATORS, parse_query_args

Operator = StructuredQuery.FieldFilter.Operator


@pytest.fixture
def real_client():
    async_client = firestore.AsyncClient(project="demo-project", credentials=AnonymousCredentials())
    return FirestoreClient(firestore_client=async_client)


def _filter_value(operator):
    if operator in ("in", "not-in", "array-contains-any"):
        return ["a", "b"]
    return "a"


@pytest.mark.parametrize("operator", WHERE_OPERATORS)
def test_every_operator_builds_on_the_real_client(real_client, operator):
    args = parse_query_args(
        {
            "collectionPath": "orders",
            "filters": [{"field": "tags", "operator": operator, "value": _filter_value(operator)}],
        }
    )
    query = build_filtered_query(real_client, args)
    assert len(query._field_filters) == 1


def test_array_operators_use_client_spelling(real_client):
    args = parse_query_args(
        {
            "collectionPath": "orders",
            "filters": [
                {"field": "tags", "operator": "array-contains", "value": "gift"},
                {"field": "tags", "operator": "array-contains-any", "value": ["gift", "sale"]},
            ],
            "orderBy": [{"field": "total", "direction": "desc"}],
        }
    )
    query = build_filtered_query(real_client, args)
    ops = [pb.op for pb in query._field_filters]
    assert ops == [Operator.ARRAY_CONTAINS, Operator.ARRAY_CONTAINS_ANY]
    assert query._orders[0].field.field_path == "total"

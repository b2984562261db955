import pytest

from firestore_mcp.tools import validators
from firestore_mcp.tools.validators import InvalidArgumentError


def test_inspect_args_trims_and_defaults():
    args = validators.parse_inspect_args({"collectionPath": "  users  "})
    assert args.collection_path == "users"
    assert args.sample_size == 10


@pytest.mark.parametrize("raw", [None, [], "users", {"collectionPath": "   "}, {"collectionPath": 5}])
def test_inspect_args_rejects_bad_payloads(raw):
    with pytest.raises(InvalidArgumentError):
        validators.parse_inspect_args(raw)


@pytest.mark.parametrize("sample_size", [0, -3, 2.5, "10", True, None])
def test_inspect_args_rejects_bad_sample_size(sample_size):
    with pytest.raises(InvalidArgumentError, match="sampleSize must be a positive integer"):
        validators.parse_inspect_args({"collectionPath": "users", "sampleSize": sample_size})


def test_query_args_full_payload_is_normalized():
    args = validators.parse_query_args(
        {
            "collectionPath": " orders ",
            "filters": [{"field": " status ", "operator": "==", "value": "shipped"}],
            "orderBy": [{"field": "total ", "direction": "desc"}],
            "limit": 5,
            "aggregation": {"count": 1, "sum": " total", "avg": "total "},
        }
    )
    assert args.collection_path == "orders"
    assert args.filters == (validators.FilterClause("status", "==", "shipped"),)
    assert args.order_by == (validators.OrderClause("total", "desc"),)
    assert args.limit == 5
    assert args.aggregation == validators.AggregationSpec(count=True, sum="total", avg="total")


def test_query_args_defaults_when_optional_parts_absent():
    args = validators.parse_query_args({"collectionPath": "orders"})
    assert args.filters == ()
    assert args.order_by == ()
    assert args.limit is None
    assert args.aggregation is None


def test_invalid_operator_is_named_in_error():
    with pytest.raises(InvalidArgumentError) as excinfo:
        validators.parse_query_args(
            {"collectionPath": "c", "filters": [{"field": "x", "operator": "~=", "value": 1}]}
        )
    assert "filters[0].operator must be one of" in str(excinfo.value)


def test_missing_value_key_differs_from_null_value():
    with pytest.raises(InvalidArgumentError, match=r"filters\[0\] must include a value property"):
        validators.parse_query_args({"collectionPath": "c", "filters": [{"field": "x", "operator": "=="}]})

    args = validators.parse_query_args(
        {"collectionPath": "c", "filters": [{"field": "x", "operator": "==", "value": None}]}
    )
    assert args.filters[0].value is None


def test_error_names_offending_index():
    with pytest.raises(InvalidArgumentError, match=r"filters\[1\]\.field must be a non-empty string"):
        validators.parse_query_args(
            {
                "collectionPath": "c",
                "filters": [
                    {"field": "a", "operator": "==", "value": 1},
                    {"field": "  ", "operator": "==", "value": 2},
                ],
            }
        )


@pytest.mark.parametrize(
    "filters, message",
    [
        ("status", "filters must be an array"),
        (["status"], r"filters\[0\] must be an object"),
    ],
)
def test_filters_structure_errors(filters, message):
    with pytest.raises(InvalidArgumentError, match=message):
        validators.parse_query_args({"collectionPath": "c", "filters": filters})


@pytest.mark.parametrize(
    "order_by, message",
    [
        ({"field": "a"}, "orderBy must be an array"),
        ([{"field": "a", "direction": "up"}], r"orderBy\[0\]\.direction must be either 'asc' or 'desc'"),
        ([{"direction": "asc"}], r"orderBy\[0\]\.field must be a non-empty string"),
        ([1], r"orderBy\[0\] must be an object"),
    ],
)
def test_order_by_errors(order_by, message):
    with pytest.raises(InvalidArgumentError, match=message):
        validators.parse_query_args({"collectionPath": "c", "orderBy": order_by})


@pytest.mark.parametrize("limit", [0, -1, 1.5, "5", False, None])
def test_limit_must_be_positive_integer(limit):
    with pytest.raises(InvalidArgumentError, match="limit must be a positive integer"):
        validators.parse_query_args({"collectionPath": "c", "limit": limit})


def test_integral_float_limit_is_accepted():
    assert validators.parse_query_args({"collectionPath": "c", "limit": 3.0}).limit == 3


def test_empty_aggregation_means_no_aggregation():
    args = validators.parse_query_args({"collectionPath": "c", "aggregation": {"unknown": True}})
    assert args.aggregation is None


def test_aggregation_count_is_coerced_to_bool():
    assert validators.parse_aggregation({"count": "yes"}).count is True
    assert validators.parse_aggregation({"count": 0}).count is False
    assert validators.parse_aggregation({"count": []}).count is True


@pytest.mark.parametrize("key", ["sum", "avg"])
def test_aggregation_field_names_must_be_non_blank(key):
    with pytest.raises(InvalidArgumentError, match=f"aggregation.{key} must be a non-empty string"):
        validators.parse_aggregation({key: " "})


def test_aggregation_must_be_object():
    with pytest.raises(InvalidArgumentError, match="aggregation must be an object"):
        validators.parse_aggregation(["count"])


def test_query_args_requires_object():
    with pytest.raises(InvalidArgumentError, match="query_firestore expects an object"):
        validators.parse_query_args("orders")


def test_inspect_args_use_supplied_default_sample_size():
    args = validators.parse_inspect_args({"collectionPath": "users"}, default_sample_size=4)
    assert args.sample_size == 4
    args = validators.parse_inspect_args({"collectionPath": "users", "sampleSize": 7}, default_sample_size=4)
    assert args.sample_size == 7


@pytest.mark.parametrize(
    "key, message",
    [
        ("filters", "filters must be an array"),
        ("orderBy", "orderBy must be an array"),
        ("limit", "limit must be a positive integer"),
        ("aggregation", "aggregation must be an object"),
    ],
)
def test_null_optional_query_arguments_are_rejected(key, message):
    with pytest.raises(InvalidArgumentError, match=message):
        validators.parse_query_args({"collectionPath": "c", key: None})


def test_absent_optional_query_arguments_keep_defaults():
    args = validators.parse_query_args({"collectionPath": "c"})
    assert (args.filters, args.order_by, args.limit, args.aggregation) == ((), (), None, None)
    assert validators.parse_filters() == ()
    assert validators.parse_limit() is None

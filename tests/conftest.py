import os
import sys

import pytest

# Ensure repository root (and this directory, for fakes.py) is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
tests_dir = os.path.dirname(os.path.abspath(__file__))
for path in (repo_root, tests_dir):
    if path not in sys.path:
        sys.path.insert(0, path)

from firestore_mcp.metrics import default_metrics  # noqa: E402
from fakes import FakeFirestoreClient  # noqa: E402


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture
def orders_client():
    """Twelve orders; totals 10..120, odd ones marked shipped."""
    docs = [
        (f"order-{i:02d}", {"total": i * 10, "status": "shipped" if i % 2 else "pending", "rank": i})
        for i in range(1, 13)
    ]
    return FakeFirestoreClient({"orders": docs})

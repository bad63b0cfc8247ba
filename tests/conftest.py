"""
Shared pytest fixtures.

Tests never reach MongoDB, OpenAQ or a worker process: the
environment is pinned before any project module is imported so
`config.settings` sees no remote credentials and the off-thread
dispatcher computes in-process unless a test opts in.
"""

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

os.environ["ENV"] = "test"
os.environ["OFFTHREAD_ENABLED"] = "false"
os.environ["MONGO_URI"] = ""
os.environ.setdefault("LOG_DIR", os.path.join(os.path.dirname(__file__), ".logs"))


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture()
def fake_clock():
    return FakeClock()


@pytest.fixture()
def frozen_now():
    return datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def remote_client():
    """Stand-in for MongoService with the same call surface."""
    client = MagicMock()
    client.rpc.return_value = {"data": None, "error": None}
    client.get_city_metrics.return_value = []
    client.upsert_measurements.side_effect = lambda snapshots: len(snapshots)
    return client

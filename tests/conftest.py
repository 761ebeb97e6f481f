# tests/conftest.py
"""
Shared Test Fixtures

Provides a snapshot store in a temporary directory, deterministic clocks,
a sample snapshot built from the fallback table, and a fake fetcher whose
per-source behaviour is scripted by the test.
"""
import threading  # Blocks "slow" fetches without sleeping
from datetime import datetime, timedelta, timezone  # Deterministic timestamps

import pytest  # Testing framework for writing and running tests

from taxwatch.adapters.crawlers.fetcher import FetchResult
from taxwatch.adapters.persistence.file_store import SnapshotStore
from taxwatch.application.snapshot_builder import build_snapshot
from taxwatch.domain.fallback import SOURCES, fallback_table
from taxwatch.domain.models import FetchOutcome

T0 = datetime(2024, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


class TickingClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class FakeFetcher:
    """
    Stand-in for SourceFetcher.

    behaviour maps source id to "ok", "fail" or "slow"; unknown ids are "ok".
    "slow" blocks until `release` is set (or 5 seconds pass).
    """

    def __init__(self, behaviour=None, timeout: float = 1):
        self.behaviour = behaviour or {}
        self.timeout = timeout
        self.release = threading.Event()
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, source):
        with self._lock:
            self.calls.append(source.id)
        mode = self.behaviour.get(source.id, "ok")
        if mode == "slow":
            self.release.wait(5)
        if mode == "fail":
            return FetchResult(
                outcome=FetchOutcome(
                    source_id=source.id,
                    success=False,
                    timestamp=T0,
                    error_message="Request failed: connection refused",
                ),
            )
        return FetchResult(
            outcome=FetchOutcome(source_id=source.id, success=True, timestamp=T0, status_code=200),
            body="<html><head><title>Tax</title></head><body></body></html>",
        )


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "data" / "tax-data.json")


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def sample_snapshot():
    outcomes = [
        FetchOutcome(source_id=s.id, success=True, timestamp=T0, status_code=200)
        for s in SOURCES
    ]
    return build_snapshot(fallback_table(), outcomes, clock=lambda: T0)

# tests/test_refresh_service.py
"""
Refresh Service Tests - One Fetch → Build → Persist Cycle

Files that this module USES:
- taxwatch.application.refresh_service (RefreshService under test)
- conftest (FakeFetcher, TickingClock)
- pytest (testing framework)
"""
import asyncio
import time
from unittest.mock import patch

import pytest

from conftest import FakeFetcher, TickingClock
from taxwatch.adapters.crawlers import extractors
from taxwatch.application.refresh_service import RefreshService
from taxwatch.domain.errors import PersistError
from taxwatch.domain.fallback import SOURCES


def _service(store, fetcher, **kwargs):
    kwargs.setdefault("clock", TickingClock())
    return RefreshService(sources=SOURCES, fetcher=fetcher, store=store, **kwargs)


def _without_timestamps(snapshot):
    data = snapshot.to_json()
    data.pop("lastUpdate")
    for outcome in data["fetchOutcomes"].values():
        outcome.pop("timestamp")
    return data


class TestRunCycle:
    def test_one_outcome_per_source(self, store):
        fetcher = FakeFetcher({"SPAIN": "fail", "UK": "fail"})
        report = asyncio.run(_service(store, fetcher).run_cycle())

        snap = store.load()
        assert set(snap.fetch_outcomes) == {s.id for s in SOURCES}
        assert sorted(fetcher.calls) == sorted(s.id for s in SOURCES)
        assert report.persisted is True
        assert report.sources_ok == 2
        assert report.sources_failed == 2
        assert snap.fetch_outcomes["SPAIN"].error_message

    def test_all_sources_failing_still_publishes_fallback(self, store):
        fetcher = FakeFetcher({s.id: "fail" for s in SOURCES})
        asyncio.run(_service(store, fetcher).run_cycle())

        snap = store.load()
        assert len(snap.jurisdictions) == 10
        assert len(snap.fetch_outcomes) == len(SOURCES)

    def test_slow_source_does_not_block_cycle(self, store):
        fetcher = FakeFetcher({"SINGAPORE": "slow"})
        service = _service(store, fetcher, fetch_deadline=0.2)

        async def run():
            started = time.monotonic()
            try:
                report = await service.run_cycle()
            finally:
                fetcher.release.set()
            return report, time.monotonic() - started

        report, elapsed = asyncio.run(run())

        assert elapsed < 2
        assert report.sources_failed == 1
        outcome = store.load().fetch_outcomes["SINGAPORE"]
        assert outcome.success is False
        assert "Deadline" in outcome.error_message

    def test_fetches_run_concurrently(self, store):
        fetcher = FakeFetcher({s.id: "slow" for s in SOURCES})
        service = _service(store, fetcher, fetch_deadline=5)

        async def run():
            task = asyncio.create_task(service.run_cycle())
            # All sources must be in flight at once before any is released
            for _ in range(200):
                if len(fetcher.calls) == len(SOURCES):
                    break
                await asyncio.sleep(0.01)
            in_flight = len(fetcher.calls)
            fetcher.release.set()
            await task
            return in_flight

        assert asyncio.run(run()) == len(SOURCES)

    def test_extraction_does_not_stall_event_loop(self, store, monkeypatch):
        def heavy(html):
            time.sleep(0.15)
            return {}

        monkeypatch.setattr(extractors, "EXTRACTORS", {s.id: heavy for s in SOURCES})
        service = _service(store, FakeFetcher())

        async def run():
            gaps = []
            done = asyncio.Event()

            async def ticker():
                last = time.monotonic()
                while not done.is_set():
                    await asyncio.sleep(0.01)
                    now = time.monotonic()
                    gaps.append(now - last)
                    last = now

            watcher = asyncio.create_task(ticker())
            try:
                await service.run_cycle()
            finally:
                done.set()
                await watcher
            return max(gaps)

        # Four extractions take 0.6s in total; the loop keeps ticking meanwhile
        assert asyncio.run(run()) < 0.3

    def test_two_cycles_differ_only_in_timestamps(self, store):
        service = _service(store, FakeFetcher({"UK": "fail"}))

        asyncio.run(service.run_cycle())
        first = store.load()
        asyncio.run(service.run_cycle())
        second = store.load()

        assert second.last_update > first.last_update
        assert _without_timestamps(first) == _without_timestamps(second)

    def test_unexpected_fetcher_error_is_recorded(self, store):
        fetcher = FakeFetcher()

        def explode(source):
            raise RuntimeError("fetcher bug")

        fetcher.fetch = explode
        asyncio.run(_service(store, fetcher).run_cycle())

        snap = store.load()
        assert len(snap.fetch_outcomes) == len(SOURCES)
        assert all("fetcher bug" in o.error_message for o in snap.fetch_outcomes.values())

    def test_extractor_errors_do_not_fail_cycle(self, store, monkeypatch):
        def broken(html):
            raise ValueError("unexpected markup")

        monkeypatch.setattr(extractors, "EXTRACTORS", {"FRANCE": broken})
        report = asyncio.run(_service(store, FakeFetcher()).run_cycle())
        assert report.persisted is True

    def test_extracted_fields_are_not_merged(self, store, monkeypatch):
        monkeypatch.setattr(
            extractors, "EXTRACTORS",
            {"FRANCE": lambda html: {"corporateTax": {"standard": 0.5}}},
        )
        asyncio.run(_service(store, FakeFetcher()).run_cycle())
        assert store.load().jurisdictions["PARIS"].corporate_tax.standard == 0.25


class TestPersistFailure:
    def test_failed_write_keeps_previous_snapshot(self, store):
        service = _service(store, FakeFetcher())
        asyncio.run(service.run_cycle())
        before = store.load()

        with patch.object(store, "persist", side_effect=PersistError("disk full")):
            with pytest.raises(PersistError):
                asyncio.run(service.run_cycle())

        after = store.load()
        assert after == before
        assert len(after.jurisdictions) == 10


class TestDefaults:
    def test_deadline_defaults_to_timeout_plus_grace(self, store):
        service = RefreshService(sources=SOURCES, fetcher=FakeFetcher(timeout=10), store=store)
        assert service.fetch_deadline == 12.0
        assert len(service.fallback) == 10

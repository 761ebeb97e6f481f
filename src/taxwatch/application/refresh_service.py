# src/taxwatch/application/refresh_service.py
"""
Refresh Service - One Fetch → Build → Persist Cycle

Fetches every configured source concurrently (worker threads joined with
asyncio.gather), runs the per-source extraction strategies on a worker
thread, builds the snapshot from the fallback table and persists it.

A slow source cannot hold the cycle past its deadline: a fetch that has not
finished by then is recorded as a failed outcome and the cycle moves on.

Files that USE this module:
- taxwatch.app (wires the service into the scheduler and the CLI)
- taxwatch.application.scheduler (runs cycles through a callable)

Files that this module USES:
- taxwatch.adapters.crawlers (SourceFetcher, extraction strategies)
- taxwatch.adapters.persistence (SnapshotStore)
- taxwatch.application.snapshot_builder (build_snapshot)
- taxwatch.domain (models, fallback table)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import asyncio  # Concurrent fetches on worker threads
import logging  # Standard library for logging messages
from dataclasses import dataclass  # Decorator for creating data classes
from datetime import datetime, timezone  # Timestamps for reports and outcomes
from typing import Callable, Mapping, Optional, Sequence

from taxwatch.adapters.crawlers.extractors import get_extractor
from taxwatch.adapters.crawlers.fetcher import FetchResult, SourceFetcher
from taxwatch.adapters.persistence.file_store import SnapshotStore
from taxwatch.application.snapshot_builder import build_snapshot
from taxwatch.domain.fallback import SNAPSHOT_NOTE, UPDATE_FREQUENCY_LABEL, fallback_table
from taxwatch.domain.models import FetchOutcome, JurisdictionRecord, Snapshot, Source

log = logging.getLogger(__name__)

# Extra time on top of the HTTP timeout before a fetch is abandoned
DEADLINE_GRACE_SECONDS = 2.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CycleReport:
    """
    Summary of one refresh cycle.

    Attributes:
        started_at: When the cycle began
        finished_at: When the cycle ended (successfully or not)
        persisted: True when a new snapshot was written
        sources_ok: Number of sources that answered
        sources_failed: Number of sources that failed or timed out
        error: Failure text when the cycle did not persist
    """
    started_at: datetime
    finished_at: datetime
    persisted: bool
    sources_ok: int = 0
    sources_failed: int = 0
    error: Optional[str] = None

    def to_json(self) -> dict:
        return {
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat(),
            "persisted": self.persisted,
            "sourcesOk": self.sources_ok,
            "sourcesFailed": self.sources_failed,
            "error": self.error,
        }


class RefreshService:
    """Runs refresh cycles against a fixed set of sources."""

    def __init__(
        self,
        sources: Sequence[Source],
        fetcher: SourceFetcher,
        store: SnapshotStore,
        fallback: Optional[Mapping[str, JurisdictionRecord]] = None,
        update_frequency_label: str = UPDATE_FREQUENCY_LABEL,
        note: str = SNAPSHOT_NOTE,
        fetch_deadline: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the refresh service.

        Args:
            sources: Tax authorities fetched every cycle
            fetcher: Performs the HTTP requests
            store: Receives the built snapshot
            fallback: Jurisdiction records to publish (default: static table)
            update_frequency_label: Cadence label stored in every snapshot
            note: Disclaimer stored in every snapshot
            fetch_deadline: Seconds after which a pending fetch is abandoned
                (default: fetcher timeout + DEADLINE_GRACE_SECONDS)
            clock: Time source for reports and snapshots
        """
        self.sources = tuple(sources)
        self.fetcher = fetcher
        self.store = store
        self.fallback = dict(fallback) if fallback is not None else fallback_table()
        self.update_frequency_label = update_frequency_label
        self.note = note
        self.fetch_deadline = (
            fetch_deadline if fetch_deadline is not None
            else float(fetcher.timeout) + DEADLINE_GRACE_SECONDS
        )
        self._clock = clock

    async def _fetch_one(self, source: Source) -> FetchResult:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.fetcher.fetch, source),
                timeout=self.fetch_deadline,
            )
        except asyncio.TimeoutError:
            log.error("Fetch of %s abandoned after %.1fs", source.id, self.fetch_deadline)
            message = f"Deadline of {self.fetch_deadline:g}s exceeded for {source.url}"
        except Exception as e:  # fetch() contract says it never raises; keep the cardinality anyway
            log.error("Unexpected error fetching %s: %s", source.id, e, exc_info=True)
            message = f"Unexpected error for {source.url}: {e}"
        return FetchResult(
            outcome=FetchOutcome(
                source_id=source.id,
                success=False,
                timestamp=self._clock(),
                error_message=message,
            ),
        )

    async def fetch_all(self) -> list[FetchResult]:
        """
        Fetch every source concurrently.

        Returns:
            Exactly one FetchResult per configured source, in source order
        """
        return list(await asyncio.gather(*(self._fetch_one(s) for s in self.sources)))

    def _extract(self, results: Sequence[FetchResult]) -> None:
        """Run extraction strategies; results are logged, not merged."""
        for result in results:
            if result.body is None:
                continue
            source_id = result.outcome.source_id
            try:
                fields = get_extractor(source_id)(result.body)
            except Exception as e:
                log.warning("Extraction failed for %s: %s", source_id, e)
                continue
            if fields:
                log.info("Extracted fields for %s (not merged, fallback published): %s",
                         source_id, sorted(fields))

    def build(self, outcomes: Sequence[FetchOutcome]) -> Snapshot:
        return build_snapshot(
            self.fallback,
            outcomes,
            update_frequency_label=self.update_frequency_label,
            note=self.note,
            clock=self._clock,
        )

    async def run_cycle(self) -> CycleReport:
        """
        Execute one fetch → build → persist cycle.

        Returns:
            CycleReport describing the persisted cycle

        Raises:
            PersistError: If the snapshot could not be written; the previous
                snapshot file stays authoritative
            BuildError: If the inputs are inconsistent (programming error)
        """
        started = self._clock()
        log.info("Refresh cycle started (%d sources)", len(self.sources))

        results = await self.fetch_all()
        # Parsing is CPU bound and must not stall the event loop
        await asyncio.to_thread(self._extract, results)

        outcomes = [r.outcome for r in results]
        snapshot = self.build(outcomes)

        # No await between build and the end of persist: cancellation cannot
        # interrupt a write in progress.
        self.store.persist(snapshot)

        ok = sum(1 for o in outcomes if o.success)
        report = CycleReport(
            started_at=started,
            finished_at=self._clock(),
            persisted=True,
            sources_ok=ok,
            sources_failed=len(outcomes) - ok,
        )
        log.info(
            "Refresh cycle completed: %d/%d sources answered, lastUpdate=%s",
            ok, len(outcomes), snapshot.last_update.isoformat(),
        )
        return report

# src/taxwatch/application/snapshot_builder.py
"""
Snapshot Builder - Merge Fetch Outcomes With the Fallback Table

Produces one Snapshot per cycle. Every fallback record is published as is;
live-extracted values are not merged into records yet. Every fetch outcome
is attached, successful or not, so a failing source never blocks a snapshot.

Files that USE this module:
- taxwatch.application.refresh_service (builds the snapshot after fetching)

Files that this module USES:
- taxwatch.domain.models (Snapshot, JurisdictionRecord, FetchOutcome)
- taxwatch.domain.errors (BuildError)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping

from taxwatch.domain.errors import BuildError
from taxwatch.domain.fallback import SNAPSHOT_NOTE, UPDATE_FREQUENCY_LABEL
from taxwatch.domain.models import FetchOutcome, JurisdictionRecord, Snapshot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_snapshot(
    fallback: Mapping[str, JurisdictionRecord],
    outcomes: Iterable[FetchOutcome],
    *,
    update_frequency_label: str = UPDATE_FREQUENCY_LABEL,
    note: str = SNAPSHOT_NOTE,
    clock: Callable[[], datetime] = _utcnow,
) -> Snapshot:
    """
    Build the snapshot for the current cycle.

    Args:
        fallback: Static jurisdiction records keyed by id
        outcomes: One FetchOutcome per configured source
        update_frequency_label: Cadence label stored in the snapshot
        note: Disclaimer stored in the snapshot
        clock: Source of the lastUpdate timestamp

    Returns:
        Snapshot stamped with the build completion time

    Raises:
        BuildError: If a fallback key does not match its record id or two
            outcomes share a source id. Both indicate a programming error.
    """
    jurisdictions: dict[str, JurisdictionRecord] = {}
    for key, record in fallback.items():
        if key != record.id:
            raise BuildError(f"Fallback key {key!r} does not match record id {record.id!r}")
        jurisdictions[key] = record

    fetch_outcomes: dict[str, FetchOutcome] = {}
    for outcome in outcomes:
        if outcome.source_id in fetch_outcomes:
            raise BuildError(f"Duplicate fetch outcome for source {outcome.source_id!r}")
        fetch_outcomes[outcome.source_id] = outcome

    return Snapshot(
        last_update=clock(),
        update_frequency_label=update_frequency_label,
        note=note,
        jurisdictions=jurisdictions,
        fetch_outcomes=fetch_outcomes,
    )

# tests/test_snapshot_builder.py
"""
Snapshot Builder Tests
"""
from datetime import timedelta

import pytest

from conftest import T0
from taxwatch.application.snapshot_builder import build_snapshot
from taxwatch.domain.errors import BuildError
from taxwatch.domain.fallback import SNAPSHOT_NOTE, UPDATE_FREQUENCY_LABEL, fallback_table
from taxwatch.domain.models import FetchOutcome


def _outcome(source_id, success=True):
    return FetchOutcome(
        source_id=source_id,
        success=success,
        timestamp=T0,
        error_message=None if success else "boom",
    )


class TestBuildSnapshot:
    def test_fallback_records_included_verbatim(self):
        table = fallback_table()
        snap = build_snapshot(table, [], clock=lambda: T0)
        assert list(snap.jurisdictions) == list(table)
        assert all(snap.jurisdictions[k] is table[k] for k in table)

    def test_outcomes_attached_regardless_of_success(self):
        outcomes = [_outcome("FRANCE"), _outcome("UK", success=False)]
        snap = build_snapshot(fallback_table(), outcomes, clock=lambda: T0)
        assert set(snap.fetch_outcomes) == {"FRANCE", "UK"}
        assert snap.fetch_outcomes["UK"].success is False
        assert len(snap.jurisdictions) == 10

    def test_all_failed_still_builds(self):
        outcomes = [_outcome(s, success=False) for s in ("FRANCE", "SPAIN", "UK", "SINGAPORE")]
        snap = build_snapshot(fallback_table(), outcomes, clock=lambda: T0)
        assert len(snap.jurisdictions) == 10
        assert not any(o.success for o in snap.fetch_outcomes.values())

    def test_last_update_from_clock(self):
        later = T0 + timedelta(hours=6)
        snap = build_snapshot(fallback_table(), [], clock=lambda: later)
        assert snap.last_update == later

    def test_default_labels(self):
        snap = build_snapshot(fallback_table(), [], clock=lambda: T0)
        assert snap.update_frequency_label == UPDATE_FREQUENCY_LABEL
        assert snap.note == SNAPSHOT_NOTE

    def test_duplicate_outcome_is_a_logic_error(self):
        with pytest.raises(BuildError, match="Duplicate"):
            build_snapshot(fallback_table(), [_outcome("UK"), _outcome("UK")], clock=lambda: T0)

    def test_mismatched_fallback_key_is_a_logic_error(self):
        table = fallback_table()
        table["LYON"] = table.pop("PARIS")
        with pytest.raises(BuildError, match="LYON"):
            build_snapshot(table, [], clock=lambda: T0)

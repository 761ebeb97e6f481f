# tests/test_file_store.py
"""
File Store Tests - Snapshot Persistence

Covers round trips, cold start, corrupt files and failed writes leaving
the previous snapshot in place.

Files that this module USES:
- taxwatch.adapters.persistence.file_store (SnapshotStore)
- pytest (tmp_path fixture, testing framework)
"""
import json
from dataclasses import replace
from datetime import timedelta
from unittest.mock import Mock, patch

import pytest

from taxwatch.adapters.persistence.file_store import SnapshotStore
from taxwatch.domain.errors import PersistError, SnapshotCorruptError, SnapshotNotFoundError


class TestPersistAndLoad:
    def test_round_trip(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        assert store.load() == sample_snapshot

    def test_creates_parent_directory(self, tmp_path, sample_snapshot):
        store = SnapshotStore(tmp_path / "a" / "b" / "tax-data.json")
        store.persist(sample_snapshot)
        assert store.path.exists()

    def test_file_is_indented_utf8_json(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        text = store.path.read_text(encoding="utf-8")
        assert text.startswith("{\n  ")
        assert "Générale" in text  # ensure_ascii=False
        assert json.loads(text)["jurisdictions"]["DUBAI"]["corporateTax"]["standard"] == 0.09

    def test_persist_replaces_previous(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        newer = replace(sample_snapshot, last_update=sample_snapshot.last_update + timedelta(hours=6))
        store.persist(newer)
        assert store.load() == newer

    def test_no_temp_files_left(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        store.persist(sample_snapshot)
        assert [p.name for p in store.path.parent.iterdir()] == ["tax-data.json"]

    def test_load_text_is_verbatim(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        assert store.load_text() == store.path.read_text(encoding="utf-8")


class TestLoadFailures:
    def test_missing_file_is_not_found(self, store):
        with pytest.raises(SnapshotNotFoundError):
            store.load()
        with pytest.raises(SnapshotNotFoundError):
            store.load_text()

    def test_truncated_file_is_corrupt(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        text = store.path.read_text(encoding="utf-8")
        store.path.write_text(text[: len(text) // 2], encoding="utf-8")
        with pytest.raises(SnapshotCorruptError):
            store.load()

    def test_empty_file_is_corrupt(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("", encoding="utf-8")
        with pytest.raises(SnapshotCorruptError):
            store.load_text()

    def test_non_object_is_corrupt(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(SnapshotCorruptError):
            store.load()

    @pytest.mark.parametrize("mutate", [
        lambda d: d.pop("lastUpdate"),
        lambda d: d.pop("fetchOutcomes"),
        lambda d: d["jurisdictions"]["PARIS"].pop("corporateTax"),
        lambda d: d["jurisdictions"].__setitem__("PARIS", None),
        lambda d: d["jurisdictions"]["PARIS"]["vat"].__setitem__("standard", 20),
        lambda d: d["jurisdictions"]["ROME"].__setitem__("capitalGainsTax", None),
        lambda d: d.__setitem__("lastUpdate", "yesterday"),
        lambda d: d["fetchOutcomes"]["UK"].__setitem__("success", "true"),
        lambda d: d["jurisdictions"]["PARIS"]["corporateTax"].__setitem__("threshold", float("nan")),
        lambda d: d["jurisdictions"]["PARIS"]["corporateTax"].__setitem__("threshold", float("inf")),
        lambda d: d["jurisdictions"]["PARIS"].__setitem__("id", "ROME"),
        lambda d: d["fetchOutcomes"]["UK"].__setitem__("sourceId", "FRANCE"),
    ])
    def test_shape_mismatch_is_corrupt(self, store, sample_snapshot, mutate):
        data = sample_snapshot.to_json()
        mutate(data)
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(SnapshotCorruptError):
            store.load()

    @pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity", "1e400"])
    def test_non_finite_threshold_is_corrupt(self, store, sample_snapshot, token):
        store.persist(sample_snapshot)
        text = store.path.read_text(encoding="utf-8")
        assert '"threshold": 42500' in text
        store.path.write_text(text.replace('"threshold": 42500', f'"threshold": {token}', 1), encoding="utf-8")
        with pytest.raises(SnapshotCorruptError):
            store.load()
        with pytest.raises(SnapshotCorruptError):
            store.load_text()


class TestPersistFailures:
    def test_failed_rename_keeps_previous_snapshot(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        before = store.path.read_text(encoding="utf-8")
        newer = replace(sample_snapshot, last_update=sample_snapshot.last_update + timedelta(hours=6))

        with patch("taxwatch.adapters.persistence.file_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistError, match="disk full"):
                store.persist(newer)

        assert store.path.read_text(encoding="utf-8") == before
        assert store.load() == sample_snapshot
        assert [p.name for p in store.path.parent.iterdir()] == ["tax-data.json"]

    def test_unwritable_directory(self, tmp_path, sample_snapshot):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        store = SnapshotStore(blocker / "tax-data.json")
        with pytest.raises(PersistError):
            store.persist(sample_snapshot)

    def test_non_finite_number_is_not_written(self, store, sample_snapshot):
        store.persist(sample_snapshot)
        before = store.path.read_text(encoding="utf-8")
        broken = Mock(to_json=lambda: {"lastUpdate": "2024-02-13T12:00:00+00:00", "value": float("nan")})

        with pytest.raises(PersistError):
            store.persist(broken)

        assert store.path.read_text(encoding="utf-8") == before
        assert [p.name for p in store.path.parent.iterdir()] == ["tax-data.json"]

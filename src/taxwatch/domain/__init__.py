# src/taxwatch/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models, the static fallback table and
domain errors. No dependencies on infrastructure or external systems.
"""

from taxwatch.domain.models import (
    CorporateTax,
    FetchOutcome,
    JurisdictionRecord,
    Snapshot,
    Source,
    SourceRef,
    Vat,
)
from taxwatch.domain.errors import (
    BuildError,
    DomainError,
    FetchError,
    InvalidRateError,
    PersistError,
    SnapshotCorruptError,
    SnapshotNotFoundError,
)

__all__ = [
    "Source",
    "SourceRef",
    "FetchOutcome",
    "CorporateTax",
    "Vat",
    "JurisdictionRecord",
    "Snapshot",
    "DomainError",
    "InvalidRateError",
    "FetchError",
    "BuildError",
    "PersistError",
    "SnapshotNotFoundError",
    "SnapshotCorruptError",
]

# src/taxwatch/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions for the refresh pipeline.
Adapters translate library exceptions (requests, OS, JSON) into these
so that callers only ever handle one hierarchy.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class InvalidRateError(DomainError):
    """Raised when a tax rate is outside [0, 1] or a threshold is negative."""
    pass


class FetchError(DomainError):
    """Raised inside the fetcher when a source cannot be reached.

    Never escapes SourceFetcher.fetch(); it is recorded as a failed outcome.
    """
    pass


class BuildError(DomainError):
    """Raised when snapshot inputs are inconsistent (a logic error)."""
    pass


class PersistError(DomainError):
    """Raised when the snapshot file cannot be written."""
    pass


class SnapshotNotFoundError(DomainError):
    """Raised when no snapshot has been persisted yet."""
    pass


class SnapshotCorruptError(DomainError):
    """Raised when the snapshot file exists but is not a valid snapshot."""
    pass

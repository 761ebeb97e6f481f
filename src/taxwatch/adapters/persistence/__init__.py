# src/taxwatch/adapters/persistence/__init__.py
"""
Persistence Adapters - Data Storage

This package contains adapters for persisting data:
- File-based snapshot storage (JSON, atomic replace)
"""

from taxwatch.adapters.persistence.file_store import SnapshotStore

__all__ = ["SnapshotStore"]

# src/taxwatch/application/health.py
"""
Health Checker - Pipeline Monitoring

Reports whether a snapshot is being served, how old it is, and what the
scheduler did last. A snapshot older than two refresh intervals marks the
pipeline unhealthy: at least one cycle in a row failed to persist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from taxwatch.adapters.persistence.file_store import SnapshotStore
from taxwatch.application.scheduler import RefreshScheduler
from taxwatch.domain.errors import SnapshotCorruptError, SnapshotNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Represents the health status of a component."""
    is_healthy: bool
    message: str
    last_check: datetime
    details: Optional[Dict[str, Any]] = None

    def to_json(self) -> dict:
        return {
            "healthy": self.is_healthy,
            "message": self.message,
            "lastCheck": self.last_check.isoformat(),
            "details": self.details or {},
        }


class HealthChecker:
    """Health checks for the snapshot file and the scheduler."""

    def __init__(
        self,
        store: SnapshotStore,
        interval: timedelta,
        scheduler: Optional[RefreshScheduler] = None,
    ):
        self.store = store
        self.interval = interval
        self.scheduler = scheduler

    def check_snapshot(self) -> HealthStatus:
        now = datetime.now(timezone.utc)
        try:
            snap = self.store.load()
        except SnapshotNotFoundError:
            return HealthStatus(
                is_healthy=False,
                message="No snapshot yet (first cycle pending)",
                last_check=now,
                details={"exists": False},
            )
        except SnapshotCorruptError as e:
            logger.error("Snapshot health check failed: %s", e)
            return HealthStatus(
                is_healthy=False,
                message=f"Snapshot corrupt: {e}",
                last_check=now,
                details={"exists": True, "corrupt": True},
            )

        age = now - snap.last_update
        stale = age > 2 * self.interval
        failed = [sid for sid, o in snap.fetch_outcomes.items() if not o.success]
        return HealthStatus(
            is_healthy=not stale,
            message=(
                f"Snapshot stale ({age.total_seconds() / 3600:.1f}h old)" if stale
                else f"Snapshot fresh ({age.total_seconds() / 60:.0f} min old)"
            ),
            last_check=now,
            details={
                "exists": True,
                "lastUpdate": snap.last_update.isoformat(),
                "ageSeconds": int(age.total_seconds()),
                "jurisdictions": len(snap.jurisdictions),
                "failedSources": failed,
            },
        )

    def check_scheduler(self) -> HealthStatus:
        now = datetime.now(timezone.utc)
        if self.scheduler is None:
            return HealthStatus(
                is_healthy=True,
                message="Scheduler not attached (read-only server)",
                last_check=now,
            )
        report = self.scheduler.last_report
        healthy = report is None or report.persisted
        return HealthStatus(
            is_healthy=healthy,
            message=(
                "No cycle completed yet" if report is None
                else "Last cycle persisted" if report.persisted
                else f"Last cycle failed: {report.error}"
            ),
            last_check=now,
            details={
                "state": self.scheduler.state.value,
                "cyclesRun": self.scheduler.cycles_run,
                "ticksSkipped": self.scheduler.ticks_skipped,
                "lastReport": report.to_json() if report else None,
            },
        )

    def check_all(self) -> Dict[str, HealthStatus]:
        return {
            "snapshot": self.check_snapshot(),
            "scheduler": self.check_scheduler(),
        }

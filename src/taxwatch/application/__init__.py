# src/taxwatch/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains the refresh pipeline (builder, cycle, scheduler),
the tax calculators and health checks.
"""

from taxwatch.application.snapshot_builder import build_snapshot
from taxwatch.application.refresh_service import CycleReport, RefreshService
from taxwatch.application.scheduler import RefreshScheduler, SchedulerState
from taxwatch.application.calculators import (
    TaxBurden,
    corporate_tax,
    investor_metrics,
    total_tax_burden,
)
from taxwatch.application.health import HealthChecker, HealthStatus

__all__ = [
    "build_snapshot",
    "CycleReport",
    "RefreshService",
    "RefreshScheduler",
    "SchedulerState",
    "TaxBurden",
    "corporate_tax",
    "investor_metrics",
    "total_tax_burden",
    "HealthChecker",
    "HealthStatus",
]

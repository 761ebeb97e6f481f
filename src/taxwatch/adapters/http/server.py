# src/taxwatch/adapters/http/server.py
"""
Snapshot Server - HTTP Surface of the Dashboard

FastAPI application exposing the persisted snapshot to the browser
application. Every request re-reads the snapshot file; the server keeps no
in-memory copy, so responses always reflect the last completed cycle.

Responses for the snapshot endpoint:
- 200 with the stored document, byte for byte
- 200 with a "loading" placeholder while no cycle has completed yet
- 500 when the file is corrupt (never substituted with other data)

Files that USE this module:
- taxwatch.app (builds and serves the application)

Files that this module USES:
- taxwatch.adapters.persistence (SnapshotStore)
- taxwatch.application (calculators, health checks, scheduler)
- taxwatch.shared.validators (validate_profit)
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from taxwatch import __version__
from taxwatch.adapters.persistence.file_store import SnapshotStore
from taxwatch.application.calculators import corporate_tax, investor_metrics, total_tax_burden
from taxwatch.application.health import HealthChecker
from taxwatch.application.scheduler import RefreshScheduler
from taxwatch.domain.errors import SnapshotCorruptError, SnapshotNotFoundError
from taxwatch.domain.models import Snapshot
from taxwatch.shared.validators import validate_profit

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("taxwatch.access")

LOADING_PLACEHOLDER = {
    "status": "loading",
    "message": "Tax data is being collected, please retry shortly.",
    "jurisdictions": {},
}


def _current_snapshot(store: SnapshotStore) -> Snapshot:
    """Load the snapshot for calculator endpoints, mapping store errors to HTTP."""
    try:
        return store.load()
    except SnapshotNotFoundError:
        raise HTTPException(status_code=503, detail="Tax data not available yet")
    except SnapshotCorruptError as e:
        raise HTTPException(status_code=500, detail=f"Snapshot corrupt: {e}")


def create_app(
    store: SnapshotStore,
    *,
    interval: timedelta = timedelta(hours=6),
    static_dir: Optional[Union[str, Path]] = None,
    scheduler: Optional[RefreshScheduler] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Snapshot store read by every request
        interval: Refresh interval, used to judge snapshot staleness
        static_dir: Directory with the built single-page UI (mounted at "/")
        scheduler: Refresh scheduler, started/stopped with the app lifespan
        start_scheduler: Set False to attach a scheduler for health only

    Returns:
        Configured FastAPI instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None and start_scheduler:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None and start_scheduler:
                await scheduler.stop()

    app = FastAPI(
        title="Taxwatch",
        description="Corporate tax comparison data, refreshed from official sources.",
        version=__version__,
        lifespan=lifespan,
    )
    health = HealthChecker(store=store, interval=interval, scheduler=scheduler)

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        access_logger.info(
            "METHOD=%s PATH=%s STATUS=%s DURATION=%.4fs",
            request.method, request.url.path, response.status_code, time.time() - start_time,
        )
        return response

    @app.get("/api/tax-data", tags=["Data"])
    @app.get("/tax-data.json", include_in_schema=False)
    def get_tax_data():
        """Current snapshot as stored, or a loading placeholder before the first cycle."""
        try:
            text = store.load_text()
        except SnapshotNotFoundError:
            logger.info("Snapshot requested before first cycle completed")
            return JSONResponse(LOADING_PLACEHOLDER)
        except SnapshotCorruptError as e:
            logger.error("Refusing to serve corrupt snapshot: %s", e)
            raise HTTPException(status_code=500, detail="Snapshot file is corrupt")
        return Response(content=text, media_type="application/json")

    @app.get("/api/burden/{jurisdiction_id}", tags=["Calculators"])
    def get_burden(
        jurisdiction_id: str,
        profit: float = Query(..., description="Yearly profit in local currency"),
    ):
        """Estimated corporate, capital gains and dividend tax for a profit, plus the
        corporate tax with the reduced band applied."""
        if not validate_profit(profit):
            raise HTTPException(status_code=422, detail="profit must be a finite amount")
        snap = _current_snapshot(store)
        record = snap.jurisdictions.get(jurisdiction_id.upper())
        if record is None:
            raise HTTPException(status_code=404, detail=f"Unknown jurisdiction {jurisdiction_id}")
        return {
            "jurisdiction": record.id,
            "profit": profit,
            "lastUpdate": snap.last_update.isoformat(),
            "burden": total_tax_burden(profit, record).to_json(),
            # reduced band up to the threshold, standard rate above it
            "corporateProgressive": corporate_tax(profit, record),
        }

    @app.get("/api/metrics", tags=["Calculators"])
    def get_metrics():
        """Chart series (percent) for every jurisdiction in the snapshot."""
        snap = _current_snapshot(store)
        return {
            "lastUpdate": snap.last_update.isoformat(),
            **investor_metrics(snap.jurisdictions.values()),
        }

    @app.get("/api/health", tags=["System"])
    def get_health():
        checks = health.check_all()
        return {
            "healthy": all(c.is_healthy for c in checks.values()),
            "version": __version__,
            "checks": {name: c.to_json() for name, c in checks.items()},
        }

    if static_dir is not None and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
        logger.info("Serving static UI from %s", static_dir)

    return app

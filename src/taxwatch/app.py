# src/taxwatch/app.py
"""
Application Entry Point - Wiring and Startup

This module serves as the composition root for taxwatch. It wires the
refresh pipeline (fetcher, store, refresh service, scheduler) and the HTTP
server, and provides the command line:

    taxwatch serve     scheduler + HTTP server (default)
    taxwatch refresh   run one refresh cycle and exit (0 = persisted, 1 = failed)

Files that USE this module:
- taxwatch.__main__ (python -m taxwatch)
- the `taxwatch` console script

Files that this module USES:
- taxwatch.config (settings for configuration management)
- taxwatch.shared.logging_conf (setup_logging for logging configuration)
- taxwatch.application (RefreshService, RefreshScheduler)
- taxwatch.adapters (SourceFetcher, SnapshotStore, create_app)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import argparse  # Command line parsing
import asyncio  # Runs the one-shot refresh cycle
import logging  # Standard library for logging messages and errors
import os  # Working directory for startup diagnostics
import sys  # System-specific parameters and functions for exit codes
from typing import Optional, Sequence

import uvicorn  # ASGI server for the FastAPI application
from pydantic import ValidationError  # Raised by Settings on invalid environment

from taxwatch.adapters.crawlers.fetcher import SourceFetcher
from taxwatch.adapters.http.server import create_app
from taxwatch.adapters.persistence.file_store import SnapshotStore
from taxwatch.application.refresh_service import RefreshService
from taxwatch.application.scheduler import RefreshScheduler
from taxwatch.domain.errors import DomainError
from taxwatch.domain.fallback import snapshot_note
from taxwatch.shared.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def build_refresh_service(settings) -> RefreshService:
    """Create the refresh service from settings."""
    return RefreshService(
        sources=settings.sources,
        fetcher=SourceFetcher(timeout=settings.fetch_timeout.total_seconds()),
        store=SnapshotStore(settings.snapshot_path),
        update_frequency_label=settings.update_frequency_label,
        note=snapshot_note(settings.update_frequency_label),
    )


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="taxwatch", description="Tax comparison data service")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="run the scheduler and the HTTP server")
    serve.add_argument("--host", default=None, help="bind host (default: HTTP_HOST)")
    serve.add_argument("--port", type=int, default=None, help="bind port (default: HTTP_PORT)")

    sub.add_parser("refresh", help="run one refresh cycle and exit")

    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(["serve"])
    return args


def refresh_once(settings) -> int:
    """Run a single cycle; returns the process exit code."""
    service = build_refresh_service(settings)
    try:
        report = asyncio.run(service.run_cycle())
    except DomainError as e:
        logger.error("Refresh failed: %s (type: %s)", e, type(e).__name__)
        return 1
    logger.info(
        "Refresh completed: %d sources ok, %d failed",
        report.sources_ok, report.sources_failed,
    )
    return 0


def serve(settings, host: Optional[str] = None, port: Optional[int] = None) -> int:
    """Run scheduler and HTTP server until SIGINT/SIGTERM."""
    service = build_refresh_service(settings)
    scheduler = RefreshScheduler(service.run_cycle, settings.refresh_interval)
    app = create_app(
        service.store,
        interval=settings.refresh_interval,
        static_dir=settings.static_dir,
        scheduler=scheduler,
    )

    host = host or settings.http_host
    port = port or settings.http_port
    logger.info(
        "Starting server on %s:%d, refresh interval=%s, snapshot=%s",
        host, port, settings.refresh_interval, settings.snapshot_path,
    )
    # uvicorn exits with status 1 itself when the port cannot be bound
    uvicorn.run(app, host=host, port=port, log_config=None)
    logger.info("Server stopped")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse the command line, configure logging and run the chosen command.

    Returns:
        Process exit code
    """
    args = _parse_args(argv)

    # Import settings here so configuration errors are reported, not raised at import
    try:
        from taxwatch.config import settings
    except ValidationError as e:
        setup_logging(level=logging.INFO)
        logger.error("Invalid configuration: %s", e)
        return 2

    setup_logging(
        level=settings.log_level_value,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logger.info("Working directory: %s", os.getcwd())

    if args.command == "refresh":
        return refresh_once(settings)
    return serve(settings, host=args.host, port=args.port)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()

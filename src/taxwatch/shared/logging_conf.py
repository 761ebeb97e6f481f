# src/taxwatch/shared/logging_conf.py
"""
Logging Configuration

One root configuration shared by the refresh pipeline and the HTTP server.
uvicorn's loggers are re-attached to the root handlers so access and error
lines use the same format and files as the application.

Output:
- stdout, unless TAXWATCH_LOG_STDOUT=false (e.g. under systemd, which keeps
  its own journal)
- a size-rotated file when LOG_FILE or LOG_DIR is configured

Files that USE this module:
- taxwatch.app (configures logging before any command runs)
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "taxwatch.log"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, DATE_FORMAT)


def _resolve_log_file(
    log_file: Optional[Union[str, Path]],
    log_dir: Optional[Union[str, Path]],
) -> Optional[Path]:
    """LOG_DIR wins over LOG_FILE; parent directories are created."""
    if log_dir:
        path = Path(log_dir) / LOG_FILE_NAME
    elif log_file:
        path = Path(log_file)
    else:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level=logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Install root handlers, replacing any earlier configuration.

    Args:
        level: Root logging level
        log_file: Rotated log file path
        log_dir: Directory holding taxwatch.log (takes precedence over log_file)
        max_bytes: Rotation size per file
        backup_count: Rotated files to keep
    """
    handlers: list[logging.Handler] = []

    if os.environ.get("TAXWATCH_LOG_STDOUT", "true").lower() == "true":
        handlers.append(logging.StreamHandler(sys.stdout))

    log_file_path = _resolve_log_file(log_file, log_dir)
    if log_file_path is not None:
        handlers.append(RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ))

    # Never leave the process silent
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(_formatter())
    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = []
        uv_logger.propagate = True

    logging.getLogger(__name__).info(
        "Logging configured: %s, level=%s",
        f"file={log_file_path}" if log_file_path is not None else "stdout",
        logging.getLevelName(level),
    )

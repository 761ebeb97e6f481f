# src/taxwatch/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Logging configuration
"""

from taxwatch.shared.validators import (
    normalize_log_level,
    validate_host,
    validate_profit,
    validate_url,
)
from taxwatch.shared.logging_conf import setup_logging

__all__ = [
    "validate_url",
    "validate_host",
    "validate_profit",
    "normalize_log_level",
    "setup_logging",
]

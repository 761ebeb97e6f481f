# src/taxwatch/shared/validators.py
"""
Input Validation Utilities - Configuration and Request Validation

This module provides validation functions for configuration values and
HTTP query input: source URLs, bind hosts, log levels and profit amounts.

Files that USE this module:
- taxwatch.config.settings (uses validation functions in Settings field validators)
- taxwatch.adapters.http.server (profit validation for the burden endpoint)

Files that this module USES:
- None (pure utility functions)
"""
import logging
import math
import re
from urllib.parse import urlparse

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Upper bound for calculator input; larger values are almost certainly typos
MAX_PROFIT = 1e12


def validate_url(url: str) -> bool:
    """
    Validate that a source URL is an absolute http(s) URL.

    Args:
        url: URL to validate

    Returns:
        True if valid, False otherwise
    """
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_host(host: str) -> bool:
    """
    Validate an HTTP bind host (hostname, IPv4 or bracket-less IPv6).

    Args:
        host: Host to validate

    Returns:
        True if valid, False otherwise
    """
    if not host or host.isspace():
        return False
    return bool(re.match(r'^[A-Za-z0-9.\-:_]+$', host))


def normalize_log_level(level: str) -> int:
    """
    Convert a log level name to its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    name = (level or "").strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Invalid log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")
    return getattr(logging, name)


def validate_profit(profit: float) -> bool:
    """
    Validate a profit amount passed to the calculators.

    Negative profits are allowed (they produce a zero burden); NaN, infinity
    and absurdly large values are not.
    """
    if isinstance(profit, bool) or not isinstance(profit, (int, float)):
        return False
    if math.isnan(profit) or math.isinf(profit):
        return False
    return abs(profit) <= MAX_PROFIT

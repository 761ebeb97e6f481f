# src/taxwatch/adapters/crawlers/fetcher.py
"""
Source Fetcher - Bounded HTTP GET Against Tax Authority Pages

Issues a single GET per source with a fixed timeout and browser-like headers
(some authority sites reject obvious bots). Any completed HTTP response counts
as success; the status code is recorded but not checked. Transport failures
(timeout, DNS, connection reset, ...) become a failed FetchOutcome. fetch()
never raises.

Files that USE this module:
- taxwatch.application.refresh_service (fetches every configured source per cycle)

Files that this module USES:
- taxwatch.domain.models (Source, FetchOutcome)
- taxwatch.domain.errors (FetchError)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import logging  # Standard library for logging messages
from dataclasses import dataclass  # Decorator for creating data classes
from datetime import datetime, timezone  # Timestamps for outcomes
from typing import Callable, Mapping, Optional

import requests  # HTTP library for making web requests

from taxwatch.domain.errors import FetchError
from taxwatch.domain.models import FetchOutcome, Source

log = logging.getLogger(__name__)  # Create logger for this module

BROWSER_HEADERS: Mapping[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch plus the raw body for the extraction step."""

    outcome: FetchOutcome
    body: Optional[str] = None


class SourceFetcher:
    """
    Fetch tax authority pages with a bounded timeout.

    Holds no state between calls, so one instance can be shared by all
    worker threads of a cycle.
    """

    def __init__(
        self,
        timeout: float = 10,
        headers: Optional[Mapping[str, str]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize fetcher.

        Args:
            timeout: HTTP request timeout in seconds (connect and read)
            headers: Request headers, defaults to BROWSER_HEADERS
            clock: Source of outcome timestamps
        """
        self.timeout = timeout
        self.headers = dict(headers if headers is not None else BROWSER_HEADERS)
        self._clock = clock

    def _get(self, source: Source) -> requests.Response:
        """
        Perform the HTTP request.

        Raises:
            FetchError: If the request fails or times out
        """
        try:
            log.info("Fetching %s (%s) from %s", source.id, source.country, source.url)
            return requests.get(source.url, timeout=self.timeout, headers=self.headers)
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timeout after {self.timeout}s for {source.url}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request failed for {source.url}: {e}") from e

    def fetch(self, source: Source) -> FetchResult:
        """
        Fetch one source and produce exactly one outcome.

        Args:
            source: Tax authority to fetch

        Returns:
            FetchResult with a success outcome and the response body, or a
            failed outcome carrying the error text
        """
        try:
            resp = self._get(source)
        except FetchError as e:
            log.error("Error fetching %s: %s", source.id, e)
            return FetchResult(
                outcome=FetchOutcome(
                    source_id=source.id,
                    success=False,
                    timestamp=self._clock(),
                    error_message=str(e),
                ),
            )

        log.info("Fetched %s: HTTP %s", source.id, resp.status_code)
        return FetchResult(
            outcome=FetchOutcome(
                source_id=source.id,
                success=True,
                timestamp=self._clock(),
                status_code=resp.status_code,
            ),
            body=resp.text,
        )

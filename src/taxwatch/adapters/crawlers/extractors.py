# src/taxwatch/adapters/crawlers/extractors.py
"""
Extraction Strategies - Per-source HTML Parsing

Each source id maps to a pure function `html -> partial record fields`.
No authority page has a parser yet, so every source uses
`no_extraction`, which parses the document and returns nothing; the
refresh cycle then publishes the fallback figures unchanged.

To add a parser, write a function returning e.g.
{"corporateTax": {"standard": 0.25}} and register it with
register_extractor("FRANCE", parse_france).

Files that USE this module:
- taxwatch.application.refresh_service (runs the strategy for each fetched body)

Files that this module USES:
- None
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from bs4 import BeautifulSoup  # HTML parsing library for extracting data from web pages

log = logging.getLogger(__name__)

Extractor = Callable[[str], dict[str, Any]]


def parse_html(html: str) -> BeautifulSoup:
    """Parse an authority page with the stdlib-backed html.parser."""
    return BeautifulSoup(html, "html.parser")


def no_extraction(html: str) -> dict[str, Any]:
    """Default strategy: parse the page, extract nothing."""
    soup = parse_html(html)
    title = soup.title.get_text(strip=True) if soup.title else None
    log.debug("No extraction rules for page %r", title)
    return {}


EXTRACTORS: dict[str, Extractor] = {}


def register_extractor(source_id: str, extractor: Extractor) -> None:
    EXTRACTORS[source_id] = extractor


def get_extractor(source_id: str) -> Extractor:
    """Return the strategy registered for a source, or no_extraction."""
    return EXTRACTORS.get(source_id, no_extraction)

# src/taxwatch/adapters/crawlers/__init__.py
"""
Web Crawlers for Tax Authority Pages

This package contains the source fetcher (bounded HTTP GET with browser-like
headers) and the per-source extraction strategies that parse the pages.
"""

from taxwatch.adapters.crawlers.fetcher import BROWSER_HEADERS, FetchResult, SourceFetcher
from taxwatch.adapters.crawlers.extractors import get_extractor, no_extraction, register_extractor

__all__ = [
    "BROWSER_HEADERS",
    "FetchResult",
    "SourceFetcher",
    "get_extractor",
    "no_extraction",
    "register_extractor",
]

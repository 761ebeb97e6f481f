# src/taxwatch/adapters/http/__init__.py
"""
HTTP Adapter - FastAPI Snapshot Server
"""

from taxwatch.adapters.http.server import LOADING_PLACEHOLDER, create_app

__all__ = ["LOADING_PLACEHOLDER", "create_app"]

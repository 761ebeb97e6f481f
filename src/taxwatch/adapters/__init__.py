# src/taxwatch/adapters/__init__.py
"""
Adapters Layer - External Integrations

This package contains adapters for external systems:
- Tax authority web pages (crawlers)
- Snapshot persistence (JSON file)
- HTTP server (FastAPI)
"""

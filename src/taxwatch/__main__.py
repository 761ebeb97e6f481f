# src/taxwatch/__main__.py
"""Module entry point: python -m taxwatch [serve|refresh]."""

from taxwatch.app import run

run()

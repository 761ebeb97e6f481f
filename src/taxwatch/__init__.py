# src/taxwatch/__init__.py
"""
Taxwatch - Corporate Tax Comparison Data Service

Periodically fetches official tax authority pages, publishes a JSON snapshot
of verified corporate tax figures for ten jurisdictions, and serves it over
HTTP together with simple investment-burden calculators.
"""

__version__ = "1.0.0"

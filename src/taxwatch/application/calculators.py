# src/taxwatch/application/calculators.py
"""
Tax Calculators - Investment Burden Estimates

Pure functions over JurisdictionRecords. Callers pass the records of the
snapshot they are rendering; nothing here keeps a module-level copy.

Burden model:
- corporate tax on the whole profit at the standard rate
- 20% of profit assumed to be realised as capital gains
- 50% of the after-tax profit assumed to be distributed as dividends

Files that USE this module:
- taxwatch.adapters.http.server (burden and metrics endpoints)

Files that this module USES:
- taxwatch.domain.models (JurisdictionRecord)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from taxwatch.domain.models import JurisdictionRecord

CAPITAL_GAINS_SHARE = 0.2
DISTRIBUTED_SHARE = 0.5


@dataclass(frozen=True)
class TaxBurden:
    """Estimated yearly tax burden for a given profit (currency units)."""
    corporate: float
    capital_gains: float
    dividends: float
    total: float
    effective_rate: float  # percent of profit

    def to_json(self) -> dict:
        d = asdict(self)
        return {
            "corporate": d["corporate"],
            "capitalGains": d["capital_gains"],
            "dividends": d["dividends"],
            "total": d["total"],
            "effectiveRate": d["effective_rate"],
        }


def corporate_tax(profit: float, record: JurisdictionRecord) -> float:
    """
    Corporate tax with the reduced band applied.

    Profit up to `threshold` is taxed at `reduced`, the rest at `standard`.
    Without a threshold the standard rate applies to everything.
    """
    if profit <= 0:
        return 0.0
    ct = record.corporate_tax
    if ct.reduced is None or ct.threshold is None:
        return profit * ct.standard
    if profit <= ct.threshold:
        return profit * ct.reduced
    return ct.threshold * ct.reduced + (profit - ct.threshold) * ct.standard


def total_tax_burden(profit: float, record: JurisdictionRecord) -> TaxBurden:
    if profit <= 0:
        return TaxBurden(corporate=0.0, capital_gains=0.0, dividends=0.0, total=0.0, effective_rate=0.0)

    corporate = profit * record.corporate_tax.standard
    capital_gains = profit * CAPITAL_GAINS_SHARE * record.capital_gains_tax
    dividends = (profit - corporate) * DISTRIBUTED_SHARE * record.dividend_tax
    total = corporate + capital_gains + dividends
    return TaxBurden(
        corporate=corporate,
        capital_gains=capital_gains,
        dividends=dividends,
        total=total,
        effective_rate=total / profit * 100,
    )


def investor_metrics(records: Iterable[JurisdictionRecord]) -> dict[str, list]:
    """
    Chart series for the comparison view, rates in percent.

    Returns:
        Dict with "labels" (city names) and one list per tax, in input order
    """
    records = list(records)
    return {
        "labels": [r.city for r in records],
        "corporateTax": [r.corporate_tax.standard * 100 for r in records],
        "capitalGains": [r.capital_gains_tax * 100 for r in records],
        "dividendTax": [r.dividend_tax * 100 for r in records],
        "vat": [r.vat.standard * 100 for r in records],
    }

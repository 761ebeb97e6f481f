# src/taxwatch/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Tax authorities that are polled each cycle (Source)
- Per-jurisdiction tax figures (JurisdictionRecord)
- Per-source fetch results (FetchOutcome)
- The dataset handed from the refresh cycle to the HTTP server (Snapshot)

All rates are fractions (0.25 means 25%). JSON keys are camelCase because
the persisted file is consumed directly by the browser application.

Files that USE this module:
- taxwatch.domain.fallback (builds the static jurisdiction table)
- taxwatch.application.* (builder, refresh service, calculators)
- taxwatch.adapters.* (fetcher creates outcomes, store serializes snapshots)
- tests.* (tests use domain models for test data)

Files that this module USES:
- taxwatch.domain.errors (InvalidRateError for rate invariants)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import math  # Finite checks for amounts
from dataclasses import dataclass, field  # Decorators for creating data classes
from datetime import date, datetime, timezone  # Date/time utilities for timestamps
from typing import Any, Optional  # Type hints for optional values

from taxwatch.domain.errors import InvalidRateError


def _check_rate(name: str, value: Any) -> None:
    """Reject anything that is not a fraction in [0, 1]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidRateError(f"{name} must be a number, got {value!r}")
    if not 0 <= value <= 1:
        raise InvalidRateError(f"{name} must be within [0, 1], got {value!r}")


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts both "...Z" and "+00:00" suffixes.

    Raises:
        ValueError: If the value is not an ISO-8601 string
    """
    if not isinstance(raw, str):
        raise ValueError(f"timestamp must be a string, got {raw!r}")
    ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class SourceRef:
    """Authority a jurisdiction's figures were verified against."""
    url: str
    name: str
    country: str

    def to_json(self) -> dict:
        return {"url": self.url, "name": self.name, "country": self.country}

    @staticmethod
    def from_json(data: dict) -> "SourceRef":
        return SourceRef(
            url=str(data["url"]),
            name=str(data["name"]),
            country=str(data["country"]),
        )


@dataclass(frozen=True)
class Source:
    """
    A tax authority whose page is fetched every cycle.

    Attributes:
        id: Stable key, also the key of the matching FetchOutcome
        url: Page requested by the fetcher
        display_name: Human readable authority name
        country: Country label shown in the dashboard
    """
    id: str
    url: str
    display_name: str
    country: str

    @property
    def ref(self) -> SourceRef:
        """SourceRef view used inside jurisdiction records."""
        return SourceRef(url=self.url, name=self.display_name, country=self.country)


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of one fetch attempt against one Source.

    Attributes:
        source_id: Id of the Source that was fetched
        success: True when any HTTP response was received
        timestamp: When the attempt finished (UTC)
        error_message: Error text for failed attempts
        status_code: HTTP status of the response, if one was received
    """
    source_id: str
    success: bool
    timestamp: datetime
    error_message: Optional[str] = None
    status_code: Optional[int] = None

    def to_json(self) -> dict:
        d: dict[str, Any] = {
            "sourceId": self.source_id,
            "success": self.success,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.error_message is not None:
            d["errorMessage"] = self.error_message
        if self.status_code is not None:
            d["statusCode"] = self.status_code
        return d

    @staticmethod
    def from_json(data: dict) -> "FetchOutcome":
        success = data["success"]
        if not isinstance(success, bool):
            raise ValueError(f"success must be a boolean, got {success!r}")
        status_code = data.get("statusCode")
        error_message = data.get("errorMessage")
        return FetchOutcome(
            source_id=str(data["sourceId"]),
            success=success,
            timestamp=parse_timestamp(data["timestamp"]),
            error_message=str(error_message) if error_message is not None else None,
            status_code=int(status_code) if status_code is not None else None,
        )


@dataclass(frozen=True)
class CorporateTax:
    """Corporate income tax: standard rate plus optional reduced band."""
    standard: float
    reduced: Optional[float] = None
    threshold: Optional[float] = None  # profit up to which `reduced` applies

    def __post_init__(self) -> None:
        _check_rate("corporateTax.standard", self.standard)
        if self.reduced is not None:
            _check_rate("corporateTax.reduced", self.reduced)
        if self.threshold is not None:
            if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
                raise InvalidRateError(f"corporateTax.threshold must be a number, got {self.threshold!r}")
            if not math.isfinite(self.threshold) or self.threshold < 0:
                raise InvalidRateError(f"corporateTax.threshold must be a finite amount >= 0, got {self.threshold!r}")

    def to_json(self) -> dict:
        d: dict[str, Any] = {"standard": self.standard}
        if self.reduced is not None:
            d["reduced"] = self.reduced
        if self.threshold is not None:
            d["threshold"] = self.threshold
        return d

    @staticmethod
    def from_json(data: dict) -> "CorporateTax":
        return CorporateTax(
            standard=data["standard"],
            reduced=data.get("reduced"),
            threshold=data.get("threshold"),
        )


@dataclass(frozen=True)
class Vat:
    """Value added (or sales) tax."""
    standard: float

    def __post_init__(self) -> None:
        _check_rate("vat.standard", self.standard)

    def to_json(self) -> dict:
        return {"standard": self.standard}

    @staticmethod
    def from_json(data: dict) -> "Vat":
        return Vat(standard=data["standard"])


@dataclass(frozen=True)
class JurisdictionRecord:
    """
    Tax figures for one city/country regime.

    Attributes:
        id: Table key (e.g. "PARIS")
        city: City name
        country: Country name
        corporate_tax: Corporate income tax rates
        vat: VAT / sales tax rate
        capital_gains_tax: Capital gains rate for companies
        dividend_tax: Withholding/personal rate on distributed dividends
        startup_rate: Rate applied to a newly founded small company
        source: Authority the figures were verified against
        verified_date: Date of the last manual verification
        notes: Free-form remarks shown in the dashboard
    """
    id: str
    city: str
    country: str
    corporate_tax: CorporateTax
    vat: Vat
    capital_gains_tax: float
    dividend_tax: float
    startup_rate: float
    source: SourceRef
    verified_date: date
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        _check_rate(f"{self.id}.capitalGainsTax", self.capital_gains_tax)
        _check_rate(f"{self.id}.dividendTax", self.dividend_tax)
        _check_rate(f"{self.id}.startupRate", self.startup_rate)

    def to_json(self) -> dict:
        d: dict[str, Any] = {
            "id": self.id,
            "city": self.city,
            "country": self.country,
            "corporateTax": self.corporate_tax.to_json(),
            "vat": self.vat.to_json(),
            "capitalGainsTax": self.capital_gains_tax,
            "dividendTax": self.dividend_tax,
            "startupRate": self.startup_rate,
            "source": self.source.to_json(),
            "verifiedDate": self.verified_date.isoformat(),
        }
        if self.notes is not None:
            d["notes"] = self.notes
        return d

    @staticmethod
    def from_json(data: dict) -> "JurisdictionRecord":
        notes = data.get("notes")
        return JurisdictionRecord(
            id=str(data["id"]),
            city=str(data["city"]),
            country=str(data["country"]),
            corporate_tax=CorporateTax.from_json(data["corporateTax"]),
            vat=Vat.from_json(data["vat"]),
            capital_gains_tax=data["capitalGainsTax"],
            dividend_tax=data["dividendTax"],
            startup_rate=data["startupRate"],
            source=SourceRef.from_json(data["source"]),
            verified_date=date.fromisoformat(data["verifiedDate"]),
            notes=str(notes) if notes is not None else None,
        )


@dataclass(frozen=True)
class Snapshot:
    """
    Complete dataset produced by one refresh cycle.

    Built once, persisted, then never mutated; the next cycle's snapshot
    replaces it on disk.

    Attributes:
        last_update: When the snapshot was built (UTC)
        update_frequency_label: Human readable refresh cadence ("6 hours")
        note: Disclaimer shown next to the data
        jurisdictions: Records keyed by jurisdiction id
        fetch_outcomes: One outcome per configured source, keyed by source id
    """
    last_update: datetime
    update_frequency_label: str
    note: str
    jurisdictions: dict[str, JurisdictionRecord] = field(default_factory=dict)
    fetch_outcomes: dict[str, FetchOutcome] = field(default_factory=dict)

    def to_json(self) -> dict:
        return {
            "lastUpdate": self.last_update.isoformat(),
            "updateFrequencyLabel": self.update_frequency_label,
            "note": self.note,
            "jurisdictions": {k: r.to_json() for k, r in self.jurisdictions.items()},
            "fetchOutcomes": {k: o.to_json() for k, o in self.fetch_outcomes.items()},
        }

    @staticmethod
    def from_json(data: dict) -> "Snapshot":
        """
        Create Snapshot from a JSON dictionary.

        Unknown fields are ignored. Missing or ill-typed required fields, and
        map keys that differ from the id they hold, raise KeyError, TypeError,
        ValueError or InvalidRateError.
        """
        jurisdictions = data["jurisdictions"]
        outcomes = data["fetchOutcomes"]
        if not isinstance(jurisdictions, dict) or not isinstance(outcomes, dict):
            raise TypeError("jurisdictions and fetchOutcomes must be objects")
        records = {k: JurisdictionRecord.from_json(v) for k, v in jurisdictions.items()}
        for key, record in records.items():
            if key != record.id:
                raise ValueError(f"jurisdiction key {key!r} holds record {record.id!r}")
        fetch_outcomes = {k: FetchOutcome.from_json(v) for k, v in outcomes.items()}
        for key, outcome in fetch_outcomes.items():
            if key != outcome.source_id:
                raise ValueError(f"fetch outcome key {key!r} holds source {outcome.source_id!r}")
        return Snapshot(
            last_update=parse_timestamp(data["lastUpdate"]),
            update_frequency_label=str(data["updateFrequencyLabel"]),
            note=str(data["note"]),
            jurisdictions=records,
            fetch_outcomes=fetch_outcomes,
        )

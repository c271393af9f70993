"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

BASE_CURRENCY = "BRL"
REGION_TYPES = ("country", "state", "city", "region")


@dataclass(slots=True, frozen=True)
class BudgetSpec:
    total: Optional[float]
    per_person: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "per_person": self.per_person}


@dataclass(slots=True, frozen=True)
class DestinationMeta:
    normalized_name: str
    region_type: str
    country_name: str
    country_code: str
    currency_code: str
    currency_name: str

    @property
    def label(self) -> str:
        """Nome exibido: "Lisboa, Portugal" ou só "Portugal"."""
        if self.country_name and self.country_name != self.normalized_name:
            return f"{self.normalized_name}, {self.country_name}"
        return self.normalized_name


@dataclass(slots=True, frozen=True)
class FxQuote:
    base: str
    quote: str
    rate: float
    inverse: float
    as_of: date
    provider: str

    @property
    def available(self) -> bool:
        return self.rate > 0

    def convert(self, amount_brl: float | None) -> float | None:
        """BRL -> quote; ``None`` when no rate is known."""
        if amount_brl is None or not self.available:
            return None
        return amount_brl * self.rate

    def to_dict(self) -> dict[str, Any]:
        return {
            "base": self.base,
            "quote": self.quote,
            "brl_to_local": self.rate,
            "local_to_brl": self.inverse,
            "date": self.as_of.isoformat(),
            "provider": self.provider,
        }


@dataclass(slots=True, frozen=True)
class FlightOffer:
    origin: str
    destination: str
    depart_date: date
    return_date: Optional[date]
    price_brl: Decimal
    price_text: str
    airline: Optional[str]
    stops: int
    duration_text: Optional[str]
    deep_link: Optional[str]
    currency: str = BASE_CURRENCY

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.origin,
            "to": self.destination,
            "depart_date": self.depart_date.isoformat(),
            "return_date": self.return_date.isoformat() if self.return_date else None,
            "airline": self.airline,
            "stops": self.stops,
            "duration": self.duration_text,
            "price": float(self.price_brl),
            "price_text": self.price_text,
            "currency": self.currency,
            "link": self.deep_link,
        }


@dataclass(slots=True, frozen=True)
class CombinedFlightOffer:
    """Pseudo round trip built from two independently priced one-ways."""

    outbound: FlightOffer
    inbound: FlightOffer
    price_text: str

    @property
    def price_brl(self) -> Decimal:
        return self.outbound.price_brl + self.inbound.price_brl

    @property
    def stops(self) -> int:
        return self.outbound.stops + self.inbound.stops

    @property
    def duration_text(self) -> Optional[str]:
        parts = [d for d in (self.outbound.duration_text, self.inbound.duration_text) if d]
        return " + ".join(parts) if parts else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.outbound.origin,
            "to": self.outbound.destination,
            "depart_date": self.outbound.depart_date.isoformat(),
            "return_date": self.inbound.depart_date.isoformat(),
            "stops": self.stops,
            "duration": self.duration_text,
            "price": float(self.price_brl),
            "price_text": self.price_text,
            "currency": BASE_CURRENCY,
            "outbound": self.outbound.to_dict(),
            "inbound": self.inbound.to_dict(),
        }


@dataclass(slots=True)
class FlightResult:
    """Outcome of one flight search; ``error`` set means no usable items."""

    origin: str
    destination: str
    mode: str = "roundtrip"
    items: List[FlightOffer] = field(default_factory=list)
    items_outbound: List[FlightOffer] = field(default_factory=list)
    items_return: List[FlightOffer] = field(default_factory=list)
    items_combined: List[CombinedFlightOffer] = field(default_factory=list)
    error: Optional[str] = None
    status: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "origin": self.origin,
            "destination": self.destination,
            "mode": self.mode,
        }
        if self.error:
            out.update(error=self.error, status=self.status, message=self.message)
            return out
        if self.mode == "roundtrip":
            out["items"] = [o.to_dict() for o in self.items]
        else:
            out["items_outbound"] = [o.to_dict() for o in self.items_outbound]
            out["items_return"] = [o.to_dict() for o in self.items_return]
            out["items_combined"] = [c.to_dict() for c in self.items_combined]
        return out


__all__ = [
    "BASE_CURRENCY",
    "REGION_TYPES",
    "BudgetSpec",
    "DestinationMeta",
    "FxQuote",
    "FlightOffer",
    "CombinedFlightOffer",
    "FlightResult",
]

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

import requests

from .aviasales_fetcher import (
    AviasalesFetcher,
    AviasalesFetcherError,
    DateSpanRejectedError,
)
from .fallback import try_in_order
from .models import FlightResult
from .pair_engine import DEFAULT_TOP_N, pair_one_ways

logger = logging.getLogger(__name__)

DateLike = Union[date, str]

MODE_ROUNDTRIP = "roundtrip"
MODE_DECOMPOSED = "decomposed"


def _as_date(value: DateLike | None) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def travel_days(depart_date: date | None, return_date: date | None) -> int:
    """Days between departure and return; 0 for one-way trips."""
    if not depart_date or not return_date:
        return 0
    return (return_date - depart_date).days


class FlightSearchOrchestrator:
    """Round trip search with fallback to two priced one-ways."""

    def __init__(
        self,
        fetcher: AviasalesFetcher,
        *,
        max_span_days: int = 30,
        top_n: int = DEFAULT_TOP_N,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.max_span_days = max_span_days
        self.top_n = top_n
        self.log = log or logger

    # ──────────────────────────────────────────────────────────

    def search(
        self,
        origin: str,
        destination: str,
        depart_date: DateLike,
        return_date: DateLike | None = None,
        result_limit: int = 10,
    ) -> FlightResult:
        if not self.fetcher.configured:
            return FlightResult(
                origin,
                destination,
                error="not_configured",
                message="Busca de voos desativada: TP_TOKEN não configurado.",
            )

        try:
            depart = _as_date(depart_date)
            ret = _as_date(return_date)
        except ValueError:
            return FlightResult(
                origin, destination, error="invalid_dates", message="Data em formato inválido."
            )
        if depart is None:
            return FlightResult(
                origin, destination, error="missing_dates", message="Data de ida ausente."
            )
        if ret is not None and ret < depart:
            return FlightResult(
                origin,
                destination,
                error="invalid_dates",
                message="Data de volta anterior à data de ida.",
            )

        span = travel_days(depart, ret)
        try:
            if ret is None or span > self.max_span_days:
                self.log.info(
                    "Flights %s->%s: decomposed search (span=%s days)", origin, destination, span
                )
                return self._decomposed(origin, destination, depart, ret, result_limit)

            hit = try_in_order(
                [
                    (MODE_ROUNDTRIP, lambda: self._roundtrip(origin, destination, depart, ret, result_limit)),
                    (MODE_DECOMPOSED, lambda: self._decomposed(origin, destination, depart, ret, result_limit)),
                ],
                accept=lambda result: True,
                errors=(DateSpanRejectedError,),
                log=self.log,
                label=f"Flights {origin}->{destination}",
            )
        except AviasalesFetcherError as exc:
            self.log.warning("Flights %s->%s rejected: %s", origin, destination, exc)
            return FlightResult(
                origin, destination, error="provider_error", status=exc.status, message=exc.message
            )
        except requests.Timeout:
            self.log.warning("Flights %s->%s timed out", origin, destination)
            return FlightResult(
                origin, destination, error="provider_unavailable", message="Tempo esgotado na busca de voos."
            )
        except (requests.RequestException, ValueError) as exc:
            self.log.warning("Flights %s->%s failed: %s", origin, destination, exc)
            return FlightResult(
                origin, destination, error="provider_unavailable", message=str(exc)
            )

        if hit is None:
            return FlightResult(
                origin,
                destination,
                error="provider_error",
                message="Intervalo de datas não suportado pelo provedor.",
            )
        return hit[1]

    # ──────────────────────────────────────────────────────────

    def _roundtrip(
        self, origin: str, destination: str, depart: date, ret: date, limit: int
    ) -> FlightResult:
        offers = self.fetcher.search_prices(
            origin,
            destination,
            departure_at=depart.isoformat(),
            return_at=ret.isoformat(),
            one_way=False,
            limit=limit,
        )
        items = sorted(offers, key=lambda o: o.price_brl)[:limit]
        return FlightResult(origin, destination, mode=MODE_ROUNDTRIP, items=items)

    def _decomposed(
        self,
        origin: str,
        destination: str,
        depart: date,
        ret: Optional[date],
        limit: int,
    ) -> FlightResult:
        outbound = self.fetcher.search_prices(
            origin,
            destination,
            departure_at=depart.isoformat(),
            one_way=True,
            limit=limit,
        )
        inbound = []
        if ret is not None:
            inbound = self.fetcher.search_prices(
                destination,
                origin,
                departure_at=ret.isoformat(),
                one_way=True,
                limit=limit,
            )

        outbound = sorted(outbound, key=lambda o: o.price_brl)
        inbound = sorted(inbound, key=lambda o: o.price_brl)
        combined = pair_one_ways(outbound, inbound, top_n=self.top_n, limit=limit, log=self.log)
        return FlightResult(
            origin,
            destination,
            mode=MODE_DECOMPOSED,
            items_outbound=outbound[:limit],
            items_return=inbound[:limit],
            items_combined=combined,
        )


__all__ = [
    "FlightSearchOrchestrator",
    "travel_days",
    "MODE_ROUNDTRIP",
    "MODE_DECOMPOSED",
]

from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal, InvalidOperation

import requests

from .formatting import fmt_duration, fmt_money_brl
from .models import BASE_CURRENCY, FlightOffer

logger = logging.getLogger(__name__)

# Fragments of the API message when return_at - departure_at is too long
DATE_SPAN_MARKERS = (
    "30 days",
    "date range",
    "max range",
    "maximum range",
    "too long",
)


class AviasalesFetcherError(RuntimeError):
    """Erro na comunicação com a API da Travelpayouts."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class DateSpanRejectedError(AviasalesFetcherError):
    """The API refused a round trip whose dates are too far apart."""


def is_date_span_message(message: str) -> bool:
    text = (message or "").lower()
    return any(marker in text for marker in DATE_SPAN_MARKERS)


def fetcher_error(message: str, status: int | None) -> AviasalesFetcherError:
    cls = DateSpanRejectedError if is_date_span_message(message) else AviasalesFetcherError
    return cls(message, status=status)


class AviasalesFetcher:
    """
    Cliente da Flight Data API v3 (caminho */aviasales/v3*).
    """

    def __init__(
        self,
        token: str | None = None,
        marker: str | int | None = None,
        base_url: str = "https://api.travelpayouts.com/aviasales/v3",
        domain: str = "https://www.aviasales.com",
        *,
        timeout: float = 20,
    ) -> None:
        self.token = token or ""
        self.marker = str(marker or "")
        self.base_url = base_url.rstrip("/")
        self.domain = domain.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.token)

    # ──────────────────────────────────────────────────────────

    def search_prices(
        self,
        origin: str,
        destination: str,
        departure_at: str | None = None,
        return_at: str | None = None,
        *,
        one_way: bool = False,
        currency: str = "brl",
        limit: int = 30,
        sorting: str = "price",
    ) -> list[FlightOffer]:
        """Return the offers for a route, cheapest first.

        Network errors (``requests.RequestException``, timeouts included)
        propagate unchanged; API rejections raise ``AviasalesFetcherError``.
        """

        params: dict[str, str | int] = {
            "origin": origin,
            "destination": destination,
            "currency": currency.lower(),
            "one_way": "true" if one_way else "false",
            "sorting": sorting,
            "limit": limit,
            "token": self.token,
        }
        if departure_at:
            params["departure_at"] = departure_at
        if return_at and not one_way:
            params["return_at"] = return_at
        if self.marker:
            params["marker"] = self.marker

        resp = requests.get(
            f"{self.base_url}/prices_for_dates",
            params=params,
            timeout=self.timeout,
            headers={"Accept-Encoding": "gzip"},
        )
        if resp.status_code != 200:
            raise fetcher_error(_error_message(resp), resp.status_code)

        data = resp.json()
        if not isinstance(data, dict):
            raise fetcher_error("Resposta inesperada da API", resp.status_code)
        if not data.get("success"):
            raise fetcher_error(f"API error: {data.get('error')}", resp.status_code)

        offers = [self._to_offer(item) for item in data.get("data") or []]
        offers = [off for off in offers if off]
        logger.info(
            "Fetched %d offers %s -> %s (%s%s)",
            len(offers),
            origin,
            destination,
            departure_at,
            f" / {return_at}" if return_at and not one_way else ", one way",
        )
        return offers

    def _to_offer(self, item: dict) -> FlightOffer | None:
        """Mapeia um registro JSON para ``FlightOffer``; ``None`` se inutilizável."""
        try:
            price_brl = Decimal(str(item["price"]))
        except (KeyError, InvalidOperation, TypeError):
            return None
        if not price_brl.is_finite() or price_brl <= 0:
            return None

        dep_raw = item.get("departure_at") or item.get("depart_date")
        ret_raw = item.get("return_at") or item.get("return_date")
        try:
            depart = dt.date.fromisoformat(str(dep_raw)[:10])
        except ValueError:
            return None
        try:
            return_dt = dt.date.fromisoformat(str(ret_raw)[:10]) if ret_raw else None
        except ValueError:
            return_dt = None

        origin = item.get("origin") or ""
        destination = item.get("destination") or ""

        if item.get("link"):
            deep_link = f"{self.domain}{item['link']}"
            if self.marker and "marker=" not in deep_link:
                sep = "&" if "?" in deep_link else "?"
                deep_link += f"{sep}marker={self.marker}"
        elif origin and destination:
            deep_link = (
                f"{self.domain}/search/"
                f"{origin}{depart.strftime('%d%m')}"
                f"{destination}"
                f"{return_dt.strftime('%d%m') if return_dt else ''}"
                f"1"
                f"{f'?marker={self.marker}' if self.marker else ''}"
            )
        else:
            deep_link = None

        stops = item.get("transfers", item.get("number_of_changes", 0))
        try:
            stops = int(stops or 0)
        except (TypeError, ValueError):
            stops = 0

        return FlightOffer(
            origin=origin or item.get("origin_airport") or "",
            destination=destination or item.get("destination_airport") or "",
            depart_date=depart,
            return_date=return_dt,
            price_brl=price_brl,
            price_text=fmt_money_brl(price_brl),
            airline=item.get("airline") or None,
            stops=stops,
            duration_text=_duration_text(item),
            deep_link=deep_link,
            currency=BASE_CURRENCY,
        )


def _duration_text(item: dict) -> str | None:
    to_txt = fmt_duration(item.get("duration_to"))
    back_txt = fmt_duration(item.get("duration_back"))
    if to_txt and back_txt:
        return f"ida {to_txt} · volta {back_txt}"
    return to_txt or fmt_duration(item.get("duration"))


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code} – {resp.text[:200]}"
    if isinstance(body, dict):
        err = body.get("error") or body.get("message")
        if err:
            return str(err)
    return f"HTTP {resp.status_code} – {str(body)[:200]}"


__all__ = [
    "AviasalesFetcher",
    "AviasalesFetcherError",
    "DateSpanRejectedError",
    "DATE_SPAN_MARKERS",
    "is_date_span_message",
]

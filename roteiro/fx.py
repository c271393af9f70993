from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from functools import partial
from typing import Any, Callable, Optional, Sequence, Tuple

import requests

from .fallback import try_in_order
from .models import BASE_CURRENCY, FxQuote

logger = logging.getLogger(__name__)

# (rate BRL -> target, as-of date or None)
RateResult = Tuple[float, Optional[date]]
Provider = Tuple[str, Callable[..., RateResult]]


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _iso_date(raw: Any) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        return None


def _get_json(url: str, params: dict | None, timeout: float) -> dict:
    resp = requests.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError(f"unexpected payload type {type(data).__name__}")
    return data


# ────────────────────────────────────────────────────────────────
# Providers – each returns (rate, as_of) or raises
# ────────────────────────────────────────────────────────────────


def exchangerate_host(target: str, timeout: float, access_key: str = "") -> RateResult:
    params = {"base": BASE_CURRENCY, "symbols": target}
    if access_key:
        params["access_key"] = access_key
    data = _get_json("https://api.exchangerate.host/latest", params, timeout)
    rate = (data.get("rates") or {}).get(target)
    if rate is None:
        # newer payload: {"quotes": {"BRLUSD": 0.18}}
        rate = (data.get("quotes") or {}).get(f"{BASE_CURRENCY}{target}")
    return float(rate), _iso_date(data.get("date"))


def open_er_api(target: str, timeout: float) -> RateResult:
    data = _get_json(f"https://open.er-api.com/v6/latest/{BASE_CURRENCY}", None, timeout)
    if data.get("result") not in (None, "success"):
        raise ValueError(f"open.er-api result={data.get('result')}")
    as_of = None
    if data.get("time_last_update_unix"):
        as_of = datetime.fromtimestamp(int(data["time_last_update_unix"]), timezone.utc).date()
    return float(data["rates"][target]), as_of


def frankfurter(target: str, timeout: float) -> RateResult:
    data = _get_json(
        "https://api.frankfurter.app/latest",
        {"from": BASE_CURRENCY, "to": target},
        timeout,
    )
    return float(data["rates"][target]), _iso_date(data.get("date"))


DEFAULT_PROVIDERS: Sequence[Provider] = (
    ("exchangerate.host", exchangerate_host),
    ("open.er-api.com", open_er_api),
    ("frankfurter.app", frankfurter),
)


def _usable(result: RateResult) -> bool:
    rate = result[0]
    return math.isfinite(rate) and rate > 0


class FxResolver:
    """BRL -> target currency with ordered provider fallback. Never raises."""

    def __init__(
        self,
        *,
        timeout: float = 15,
        providers: Sequence[Provider] = DEFAULT_PROVIDERS,
        exchangerate_host_key: str = "",
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.timeout = timeout
        self.providers = providers
        self.exchangerate_host_key = exchangerate_host_key
        self.log = log or logger

    def _attempt(self, provider: Callable[..., RateResult], target: str) -> RateResult:
        if provider is exchangerate_host and self.exchangerate_host_key:
            provider = partial(provider, access_key=self.exchangerate_host_key)
        return provider(target, self.timeout)

    def get_rate(self, target_currency: str | None) -> FxQuote:
        target = (target_currency or BASE_CURRENCY).strip().upper()
        if target == BASE_CURRENCY:
            return FxQuote(BASE_CURRENCY, target, 1.0, 1.0, _today(), "none")

        hit = try_in_order(
            [
                (name, partial(self._attempt, provider, target))
                for name, provider in self.providers
            ],
            accept=_usable,
            log=self.log,
            label=f"FX {BASE_CURRENCY}->{target}",
        )
        if hit is None:
            self.log.warning("FX %s->%s unavailable from all providers", BASE_CURRENCY, target)
            return FxQuote(BASE_CURRENCY, target, 0.0, 0.0, _today(), "unavailable")

        name, (rate, as_of) = hit
        self.log.info("FX %s->%s = %.6f (%s)", BASE_CURRENCY, target, rate, name)
        return FxQuote(BASE_CURRENCY, target, rate, 1 / rate, as_of or _today(), name)


__all__ = [
    "FxResolver",
    "DEFAULT_PROVIDERS",
    "exchangerate_host",
    "open_er_api",
    "frankfurter",
]

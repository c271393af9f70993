from __future__ import annotations

import logging
import re
from typing import List, Optional

import requests

from .fallback import try_in_order
from .normalize import normalize_key
from .places import COUNTRY_SUFFIXES, PLACE_ALIASES, prefer_city_code

logger = logging.getLogger(__name__)

AUTOCOMPLETE_URL = "https://autocomplete.travelpayouts.com/places2"

_IATA_TOKEN = re.compile(r"\b[A-Z]{3}\b")
_IATA_CODE = re.compile(r"^[A-Z]{3}$")
_UF_SUFFIX = re.compile(r"\s[a-z]{2}$")


def candidate_keys(term: str) -> List[str]:
    """Lookup keys for *term*: full, before the first comma, without a
    trailing country name and without a trailing two-letter state (UF)."""
    seeds = [normalize_key(term)]
    if "," in term:
        seeds.append(normalize_key(term.split(",", 1)[0]))

    keys: List[str] = []
    for key in seeds:
        variants = [key]
        for suffix in COUNTRY_SUFFIXES:
            if key.endswith(" " + suffix):
                variants.append(key[: -len(suffix) - 1].strip())
                break
        variants.extend(_UF_SUFFIX.sub("", v) for v in list(variants) if _UF_SUFFIX.search(v))
        for v in variants:
            if v and v not in keys:
                keys.append(v)
    return keys


class IataResolver:
    """Free-text place -> IATA code (metro code preferred)."""

    def __init__(
        self,
        autocomplete_url: str = AUTOCOMPLETE_URL,
        *,
        timeout: float = 10,
        locale: str = "pt",
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.autocomplete_url = autocomplete_url
        self.timeout = timeout
        self.locale = locale
        self.log = log or logger

    # ──────────────────────────────────────────────────────────

    def resolve(self, term: str | None) -> Optional[str]:
        if not term or not term.strip():
            return None

        hit = try_in_order(
            [
                ("direct", lambda: self._direct_code(term)),
                ("alias", lambda: self._alias_code(term)),
                ("autocomplete", lambda: self._autocomplete_code(term)),
            ],
            log=self.log,
            label=f"IATA '{term}'",
        )
        if hit is None:
            self.log.info("IATA unresolved for %r", term)
            return None

        step, code = hit
        city = prefer_city_code(code)
        self.log.info("IATA %r -> %s (%s%s)", term, city, step, f", via {code}" if city != code else "")
        return city

    # ──────────────────────────────────────────────────────────

    @staticmethod
    def _direct_code(term: str) -> Optional[str]:
        for segment in term.split(","):
            # "LOS ANGELES" is a place name, not LOS + text
            if normalize_key(segment) in PLACE_ALIASES:
                continue
            for token in _IATA_TOKEN.findall(segment):
                # "EUA", "USA", "RIO" … are place names first
                if token.lower() in PLACE_ALIASES:
                    continue
                return token
        return None

    @staticmethod
    def _alias_code(term: str) -> Optional[str]:
        for key in candidate_keys(term):
            code = PLACE_ALIASES.get(key)
            if code:
                return code
        return None

    def _autocomplete_code(self, term: str) -> Optional[str]:
        resp = requests.get(
            self.autocomplete_url,
            params={
                "term": term.strip(),
                "locale": self.locale,
                "types[]": ["city", "airport"],
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        places = resp.json()
        if not isinstance(places, list):
            return None
        return self._pick_code(places)

    @staticmethod
    def _pick_code(places: list) -> Optional[str]:
        def valid(code) -> Optional[str]:
            if isinstance(code, str) and _IATA_CODE.match(code.upper()):
                return code.upper()
            return None

        for place in places:
            if isinstance(place, dict) and place.get("type") == "city":
                code = valid(place.get("code"))
                if code:
                    return code
        for place in places:
            if isinstance(place, dict) and place.get("type") == "airport":
                code = valid(place.get("city_code")) or valid(place.get("code"))
                if code:
                    return code
        return None


__all__ = ["IataResolver", "candidate_keys", "AUTOCOMPLETE_URL"]

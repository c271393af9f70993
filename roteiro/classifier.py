from __future__ import annotations

import json
import logging
import re
from typing import Any

import requests

from .models import REGION_TYPES, DestinationMeta
from .places import guess_currency

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")

CLASSIFIER_SYSTEM_PROMPT = """Você extrai metadados geográficos e de moeda. Responda SOMENTE com JSON válido.
Dado um destino (país, estado, região ou cidade), retorne:
{
  "normalized_name": string,
  "region_type": "country" | "state" | "city" | "region",
  "country_name": string,
  "country_code": string,
  "currency_code": string,
  "currency_name": string
}
country_code segue ISO-3166-1 alfa-2 e currency_code segue ISO 4217 (moeda principal do local)."""

_CURRENCY_NAMES = {
    "BRL": "Real",
    "USD": "Dólar",
    "EUR": "Euro",
    "GBP": "Libra esterlina",
    "ARS": "Peso argentino",
    "CLP": "Peso chileno",
    "JPY": "Iene",
}


class ConfigurationError(RuntimeError):
    """A credential required by the requested feature is missing."""


class ClassifierError(RuntimeError):
    """The classifier service was unreachable or answered with an error."""

    def __init__(self, message: str, *, status: int | None = None, raw: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.raw = raw


def default_meta(text: str) -> DestinationMeta:
    """Conservative metadata used when the classifier answer is unusable."""
    currency = guess_currency(text)
    return DestinationMeta(
        normalized_name=text.strip(),
        region_type="region",
        country_name="",
        country_code="",
        currency_code=currency,
        currency_name=_CURRENCY_NAMES.get(currency, ""),
    )


def meta_from_json(text: str, data: Any) -> DestinationMeta:
    """Build ``DestinationMeta`` from the parsed classifier JSON."""
    if not isinstance(data, dict):
        return default_meta(text)
    fallback = default_meta(text)

    currency = str(data.get("currency_code") or "").strip().upper()
    if not _CURRENCY_CODE.match(currency):
        currency = fallback.currency_code
    region_type = str(data.get("region_type") or "").strip().lower()
    if region_type not in REGION_TYPES:
        region_type = "region"

    return DestinationMeta(
        normalized_name=str(data.get("normalized_name") or text).strip(),
        region_type=region_type,
        country_name=str(data.get("country_name") or "").strip(),
        country_code=str(data.get("country_code") or "").strip().upper(),
        currency_code=currency,
        currency_name=str(data.get("currency_name") or _CURRENCY_NAMES.get(currency, "")).strip(),
    )


class DestinationClassifier:
    """Destination free text -> ``DestinationMeta`` using an OpenAI model."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o-mini",
        timeout: float = 25,
        url: str = OPENAI_CHAT_URL,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.url = url
        self.log = log or logger

    def classify(self, text: str) -> DestinationMeta:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY não configurada.")

        try:
            resp = requests.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "temperature": 0.0,
                    "response_format": {"type": "json_object"},
                    "messages": [
                        {"role": "system", "content": CLASSIFIER_SYSTEM_PROMPT},
                        {"role": "user", "content": f"Destino: {text}"},
                    ],
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ClassifierError(f"Falha ao classificar destino: {exc}") from exc
        if resp.status_code != 200:
            raise ClassifierError(
                "Falha ao classificar destino", status=resp.status_code, raw=resp.text[:500]
            )

        try:
            body = resp.json()
            content = body["choices"][0]["message"]["content"]
            data = json.loads(content) if isinstance(content, str) else content
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            self.log.warning("Classifier returned malformed content for %r: %s", text, exc)
            return default_meta(text)

        meta = meta_from_json(text, data)
        self.log.info(
            "Destination %r -> %s (%s, %s)", text, meta.label, meta.region_type, meta.currency_code
        )
        return meta


__all__ = [
    "DestinationClassifier",
    "ClassifierError",
    "ConfigurationError",
    "default_meta",
    "meta_from_json",
]

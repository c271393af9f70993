from __future__ import annotations

import logging
from typing import Any

import requests

from .classifier import OPENAI_CHAT_URL, ConfigurationError
from .formatting import describe_rate, fmt_money_brl
from .models import BudgetSpec, DestinationMeta, FxQuote

logger = logging.getLogger(__name__)

OPENAI_RESPONSES_URL = "https://api.openai.com/v1/responses"

SYSTEM_PROMPT = (
    "Você é um travel planner sênior. Responda sempre em PT-BR, "
    "em HTML limpo (sem <html>, <head> ou <body>), objetivo e prático."
)

STYLE_BRIEFS = {
    "casual": "Misture clássicos turísticos com tempo livre e opções flexíveis.",
    "aventura": "Priorize trilhas, natureza, esportes e experiências ao ar livre; inclua avisos de segurança.",
    "romântica": "Foque passeios cênicos, restaurantes charmosos e experiências a dois.",
}


class NarrativeError(RuntimeError):
    """The narrative generator failed or returned no content."""


def budget_brief(budget: BudgetSpec, pessoas: int) -> str:
    parts = [f"Grupo: {pessoas} pessoa(s)."]
    if budget.total:
        parts.append(f"Orçamento total: {fmt_money_brl(budget.total)}.")
    if budget.per_person:
        parts.append(f"≈ {fmt_money_brl(budget.per_person)} por pessoa.")
    if len(parts) == 1:
        parts.append("Sem orçamento declarado; use faixas típicas do destino.")
    return " ".join(parts)


def build_prompt(
    *,
    label: str,
    meta: DestinationMeta,
    dias: int,
    pessoas: int,
    perfil: str,
    estilo: str,
    budget: BudgetSpec,
    fx: FxQuote,
) -> str:
    code = meta.currency_code
    style = STYLE_BRIEFS.get((estilo or "").lower(), STYLE_BRIEFS["casual"])
    if fx.available and fx.quote != "BRL":
        money_rule = (
            f"Mostre valores em R$ e em {code}, usando somente esta taxa: {describe_rate(fx)} "
            f"Formato: R$ 120 (~{code} {120 * fx.rate:.2f})."
        )
    else:
        money_rule = "Mostre os valores apenas em R$."

    return f"""Gere um roteiro detalhado para {label}: {dias} dia(s), {pessoas} pessoa(s), perfil {perfil}, estilo {estilo}.
{budget_brief(budget, pessoas)}

Regras:
- {money_rule}
- Não invente preços exatos de voos, links, telefones nem endereços completos; use faixas típicas e sinalize estimativas.
- {style}
- O resumo do planejamento (tabela) já é montado pelo sistema: não o repita.

Seções em <h2> numerados, nesta ordem:
1. Visão geral (cidade-base, melhor época, clima, segurança, deslocamento).
2. Atrações imperdíveis (8–15) com bairro, descrição, tempo médio e faixa de preço.
3. Hospedagem recomendada (6–10) com bairro, categoria e diária média.
4. Transporte local com faixas de preço, incluindo aeroporto→centro.
5. Roteiro dia a dia (D1..D{dias}), 2–4 atividades por dia com custos.
6. Orçamento resumido em <table>: custos por dia e quadro do grupo (total, por pessoa, por dia, por pessoa/dia).
7. Dicas rápidas (etiqueta, chip/eSIM, gorjetas, tomada, apps úteis)."""


class NarrativeGenerator:
    """Itinerary prose as an HTML fragment, produced by an OpenAI model."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o-mini",
        timeout: float = 60,
        web_search: bool = False,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.web_search = web_search
        self.log = log or logger

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY não configurada.")
        try:
            if self.web_search:
                text = self._responses(prompt)
            else:
                text = self._chat(prompt)
        except requests.RequestException as exc:
            raise NarrativeError(f"Falha na geração do roteiro: {exc}") from exc
        if not text or not text.strip():
            raise NarrativeError("Resposta sem conteúdo.")
        self.log.info(
            "Narrative generated: %d chars (%s)", len(text), "web search" if self.web_search else "chat"
        )
        return text.strip()

    # ──────────────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        resp = requests.post(url, headers=self._headers(), json=payload, timeout=self.timeout)
        try:
            data = resp.json()
        except ValueError:
            data = {"_raw": resp.text[:500]}
        if resp.status_code != 200:
            message = None
            if isinstance(data, dict):
                err = data.get("error")
                message = err.get("message") if isinstance(err, dict) else data.get("_raw")
            raise NarrativeError(f"HTTP {resp.status_code}: {message or 'Falha na OpenAI'}")
        if not isinstance(data, dict):
            raise NarrativeError("Resposta inesperada da OpenAI.")
        return data

    def _chat(self, prompt: str) -> str:
        data = self._post(
            OPENAI_CHAT_URL,
            {
                "model": self.model,
                "temperature": 0.7,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            },
        )
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""

    def _responses(self, prompt: str) -> str:
        data = self._post(
            OPENAI_RESPONSES_URL,
            {
                "model": self.model,
                "instructions": SYSTEM_PROMPT,
                "input": prompt,
                "tools": [{"type": "web_search_preview"}],
            },
        )
        if isinstance(data.get("output_text"), str):
            return data["output_text"]
        chunks = []
        output = data.get("output")
        for item in output if isinstance(output, list) else []:
            if not isinstance(item, dict) or item.get("type") != "message":
                continue
            content = item.get("content")
            for part in content if isinstance(content, list) else []:
                if isinstance(part, dict) and part.get("type") == "output_text" and part.get("text"):
                    chunks.append(part["text"])
        return "\n".join(chunks)


__all__ = [
    "NarrativeGenerator",
    "NarrativeError",
    "build_prompt",
    "budget_brief",
    "STYLE_BRIEFS",
]

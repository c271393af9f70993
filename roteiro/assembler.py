from __future__ import annotations

import html
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .formatting import describe_rate, fmt_money, fmt_money_brl
from .models import BASE_CURRENCY, BudgetSpec, DestinationMeta, FlightResult, FxQuote

Row = Tuple[str, str]

NARRATIVE_CLASS = "roteiro"

_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)
_BODY = re.compile(r"<body[^>]*>(.*?)</body>", re.DOTALL | re.IGNORECASE)
_OUTER_WRAPPER = re.compile(
    r"^\s*<div[^>]*\bclass\s*=\s*[\"'][^\"']*\b" + NARRATIVE_CLASS + r"\b[^\"']*[\"'][^>]*>(.*)</div>\s*$",
    re.DOTALL | re.IGNORECASE,
)
_DIV_TAG = re.compile(r"</?div\b", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_BLOCK_END = re.compile(r"</(p|div|h[1-6]|li|tr|table|section)>|<br\s*/?>", re.IGNORECASE)


def unwrap_narrative(content: str) -> str:
    """Strip the wrappers a model tends to add around the fragment:
    a code fence, a full ``<html><body>`` document and an outer
    ``<div class="roteiro">`` (the assembler adds its own).
    """
    text = (content or "").strip()
    m = _FENCE.match(text)
    if m:
        text = m.group(1).strip()
    m = _BODY.search(text)
    if m:
        text = m.group(1).strip()
    m = _OUTER_WRAPPER.match(text)
    if m:
        inner = m.group(1)
        # only when that div really encloses everything
        if _balanced_divs(inner):
            text = inner.strip()
    return text


def _balanced_divs(fragment: str) -> bool:
    depth = 0
    for tag in _DIV_TAG.findall(fragment):
        depth += -1 if tag.startswith("</") else 1
        if depth < 0:
            return False
    return depth == 0


def html_to_text(fragment: str) -> str:
    """Plain-text alternative for e-mail clients."""
    text = _BLOCK_END.sub("\n", fragment)
    text = html.unescape(_TAG.sub("", text))
    lines = [" ".join(line.split()) for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


class ItineraryAssembler:
    """Deterministic summary block + externally generated narrative."""

    def __init__(self, brand_name: str = "Touristando IA", logo_url: str = "") -> None:
        self.brand_name = brand_name
        self.logo_url = logo_url

    # ──────────────────────────────────────────────────────────
    # Resumo

    @staticmethod
    def money_pair(amount_brl: Optional[float], fx: FxQuote) -> str:
        """``R$ 5.500 (~USD 1,012.00)`` or only the BRL part."""
        if amount_brl is None:
            return "não informado"
        brl = fmt_money_brl(amount_brl)
        local = fx.convert(amount_brl)
        if local is None or fx.quote == BASE_CURRENCY:
            return brl
        return f"{brl} (~{fmt_money(fx.quote, local)})"

    def summary_rows(
        self,
        *,
        label: str,
        dias: int,
        pessoas: int,
        perfil: str,
        estilo: str,
        meta: DestinationMeta,
        budget: BudgetSpec,
        fx: FxQuote,
    ) -> List[Row]:
        rows: List[Row] = [
            ("Destino", label),
            ("Dias", str(dias)),
            ("Pessoas", str(pessoas)),
            ("Perfil", perfil),
            ("Estilo", estilo),
            ("Moeda local", meta.currency_code or BASE_CURRENCY),
        ]
        if budget.total:
            rows.append(("Orçamento total", self.money_pair(budget.total, fx)))
        if budget.per_person:
            rows.append(("Orçamento por pessoa", self.money_pair(budget.per_person, fx)))
        rows.append(("Taxa usada", describe_rate(fx)))
        return rows

    @staticmethod
    def render_table(rows: Iterable[Row]) -> str:
        cells = "".join(
            "<tr>"
            f'<td style="padding:8px 10px;border:1px solid #eceff4;background:#f8fafc;font-weight:600;width:40%">{html.escape(k)}</td>'
            f'<td style="padding:8px 10px;border:1px solid #eceff4">{html.escape(v)}</td>'
            "</tr>"
            for k, v in rows
        )
        return (
            '<table role="presentation" width="100%" cellspacing="0" cellpadding="0" '
            'style="border-collapse:collapse;border:1px solid #eaeaea">'
            f"{cells}</table>"
        )

    def render_summary(self, rows: Sequence[Row]) -> str:
        return (
            '<section class="resumo"><h2>Resumo do planejamento</h2>'
            f"{self.render_table(rows)}</section>"
        )

    # ──────────────────────────────────────────────────────────
    # Voos

    @staticmethod
    def _link(url: Optional[str]) -> str:
        if not url:
            return ""
        return f'<a href="{html.escape(url, quote=True)}">ver</a>'

    def render_flights(self, flights: Optional[FlightResult]) -> str:
        if flights is None:
            return ""
        title = f"Voos {html.escape(flights.origin)} → {html.escape(flights.destination)}"
        if flights.error:
            msg = html.escape(flights.message or flights.error)
            return f'<section class="voos"><h2>{title}</h2><p>{msg}</p></section>'

        head = "<tr><th>Ida</th><th>Volta</th><th>Cia</th><th>Paradas</th><th>Duração</th><th>Preço</th><th></th></tr>"
        rows: List[str] = []
        if flights.items:
            for off in flights.items:
                rows.append(
                    "<tr>"
                    f"<td>{off.depart_date:%d/%m}</td>"
                    f"<td>{off.return_date.strftime('%d/%m') if off.return_date else '—'}</td>"
                    f"<td>{html.escape(off.airline or '—')}</td>"
                    f"<td>{off.stops}</td>"
                    f"<td>{html.escape(off.duration_text or '—')}</td>"
                    f"<td>{html.escape(off.price_text)}</td>"
                    f"<td>{self._link(off.deep_link)}</td>"
                    "</tr>"
                )
        else:
            for pair in flights.items_combined:
                out, back = pair.outbound, pair.inbound
                airlines = " / ".join(a for a in (out.airline, back.airline) if a) or "—"
                rows.append(
                    "<tr>"
                    f"<td>{out.depart_date:%d/%m}</td>"
                    f"<td>{back.depart_date:%d/%m}</td>"
                    f"<td>{html.escape(airlines)}</td>"
                    f"<td>{pair.stops}</td>"
                    f"<td>{html.escape(pair.duration_text or '—')}</td>"
                    f"<td>{html.escape(pair.price_text)}</td>"
                    f"<td>{self._link(out.deep_link)} {self._link(back.deep_link)}</td>"
                    "</tr>"
                )
            if not rows:
                for off in flights.items_outbound:
                    rows.append(
                        "<tr>"
                        f"<td>{off.depart_date:%d/%m}</td><td>—</td>"
                        f"<td>{html.escape(off.airline or '—')}</td>"
                        f"<td>{off.stops}</td>"
                        f"<td>{html.escape(off.duration_text or '—')}</td>"
                        f"<td>{html.escape(off.price_text)}</td>"
                        f"<td>{self._link(off.deep_link)}</td>"
                        "</tr>"
                    )
        if not rows:
            return f'<section class="voos"><h2>{title}</h2><p>Nenhuma tarifa encontrada.</p></section>'
        note = "<p><small>Preços de referência em R$; podem mudar até a compra.</small></p>"
        return (
            f'<section class="voos"><h2>{title}</h2>'
            f"<table>{head}{''.join(rows)}</table>{note}</section>"
        )

    # ──────────────────────────────────────────────────────────
    # Documento

    def compose(self, summary_html: str, narrative: str, flights_html: str = "") -> str:
        body = unwrap_narrative(narrative)
        return (
            '<div class="roteiro-doc">'
            f"{summary_html}{flights_html}"
            f'<div class="{NARRATIVE_CLASS}">{body}</div>'
            "</div>"
        )

    def render_email(self, document_html: str, label: str) -> str:
        brand = html.escape(self.brand_name)
        logo = (
            f'<img src="{html.escape(self.logo_url, quote=True)}" alt="{brand}" height="28" '
            'style="vertical-align:middle;border-radius:6px;background:#fff;padding:3px;margin-right:8px">'
            if self.logo_url
            else ""
        )
        return (
            '<div style="font-family:Arial,Helvetica,sans-serif;padding:24px;background:#f6f9fc">'
            '<table role="presentation" width="100%" cellspacing="0" cellpadding="0" '
            'style="max-width:760px;margin:0 auto;background:#fff;border:1px solid #eaeaea;border-radius:12px">'
            f'<tr><td style="background:#0d6efd;color:#fff;padding:16px 20px">{logo}'
            f'<strong style="font-size:16px;vertical-align:middle">{brand}</strong></td></tr>'
            f'<tr><td style="padding:18px 20px"><h1 style="font-size:20px">Roteiro: {html.escape(label)}</h1>'
            f"{document_html}"
            f'<p style="color:#667085;font-size:12px;margin-top:14px">Gerado automaticamente por {brand}. '
            "Valores são estimativas e podem variar conforme data e disponibilidade.</p>"
            "</td></tr></table></div>"
        )


__all__ = ["ItineraryAssembler", "unwrap_narrative", "html_to_text", "NARRATIVE_CLASS"]

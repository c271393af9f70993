"""pt-BR display helpers shared by the fetcher and the assembler."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Union

from .models import BASE_CURRENCY, FxQuote

Number = Union[int, float, Decimal]

_MONTHS_ABBR = (
    "jan.", "fev.", "mar.", "abr.", "mai.", "jun.",
    "jul.", "ago.", "set.", "out.", "nov.", "dez.",
)


def fmt_number_br(value: Number, decimals: int = 2) -> str:
    """``1234.5`` -> ``"1.234,50"``."""
    text = f"{float(value):,.{decimals}f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def fmt_money_brl(value: Number) -> str:
    """Valores "vitrine" sem centavos: ``5500`` -> ``"R$ 5.500"``."""
    return f"R$ {fmt_number_br(value, 0)}"


def fmt_money(code: str, value: Number, decimals: int = 2) -> str:
    return f"{code} {float(value):,.{decimals}f}"


def fmt_date_br(d: date) -> str:
    """``date(2026, 10, 19)`` -> ``"19 de out. de 2026"``."""
    return f"{d.day} de {_MONTHS_ABBR[d.month - 1]} de {d.year}"


def fmt_duration(minutes: Number | None) -> str | None:
    if minutes is None:
        return None
    try:
        total = int(minutes)
    except (TypeError, ValueError, OverflowError):
        return None
    if total <= 0:
        return None
    hours, mins = divmod(total, 60)
    return f"{hours}h {mins:02d}m"


def describe_rate(fx: FxQuote) -> str:
    """Texto da taxa usada, com provedor e data."""
    if fx.quote == BASE_CURRENCY:
        return "Moeda local: BRL (sem conversão)."
    if not fx.available:
        return f"Câmbio BRL/{fx.quote} indisponível: valores apenas em R$."
    return (
        f"1 BRL = {fx.rate:.4f} {fx.quote} "
        f"(1 {fx.quote} ≈ R$ {fmt_number_br(fx.inverse)}) · "
        f"{fx.provider}, {fmt_date_br(fx.as_of)}"
    )


__all__ = [
    "fmt_number_br",
    "fmt_money_brl",
    "fmt_money",
    "fmt_date_br",
    "fmt_duration",
    "describe_rate",
]

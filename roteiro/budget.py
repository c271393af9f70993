# -*- coding: utf-8 -*-
"""
budget – leitura de orçamento em formato pt-BR e conciliação total/por pessoa.

Formulários preenchidos à mão costumam trocar vírgula por ponto, o que gera um
valor ×10. ``reconcile_budget`` detecta esse caso (tolerância de 2 %) e corrige
o maior dos dois valores.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Optional, Union

from .models import BudgetSpec

RawAmount = Union[str, int, float, Decimal, None]

TEN_X_TOLERANCE = 0.02

_CURRENCY_PREFIX = re.compile(r"^(?:r\$|brl|\$)\s*", re.IGNORECASE)
_MULTIPLIER_SUFFIX = re.compile(r"\s*(mil|k)\.?$", re.IGNORECASE)
_THOUSANDS_ONLY = re.compile(r"^\d{1,3}(?:\.\d{3})+$")
_NUMBER = re.compile(r"^\d+(?:\.\d+)?$")


def _finite(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def parse_budget_amount(value: RawAmount) -> Optional[float]:
    """Return the numeric value of *value* or ``None``.

    Accepts ``"R$ 5.500"``, ``"5.500,50"``, ``"5,5 mil"``, ``"10k"`` and plain
    numbers. Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return _finite(float(value))
        except (OverflowError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip().replace("\u00a0", " ")
    text = _CURRENCY_PREFIX.sub("", text)

    multiplier = 1
    m = _MULTIPLIER_SUFFIX.search(text)
    if m:
        multiplier = 1000
        text = text[: m.start()]
    text = text.replace(" ", "")
    if not text:
        return None

    if "," in text:
        # pt-BR: ponto = milhar, vírgula = decimal
        text = text.replace(".", "").replace(",", ".", 1)
    elif _THOUSANDS_ONLY.match(text):
        text = text.replace(".", "")

    if not _NUMBER.match(text):
        return None
    return _finite(float(text) * multiplier)


def _is_ten_x(big: float, small: float) -> bool:
    if small <= 0:
        return False
    return abs(big / (small * 10) - 1) <= TEN_X_TOLERANCE


def reconcile_budget(
    total: Optional[float],
    per_person: Optional[float],
    party_size: int | float | None,
) -> BudgetSpec:
    """Fill in the missing side of the budget and undo ×10 entry slips.

    Known false positive: a genuine total that happens to be 9.8–10.2× the
    per-person amount gets corrected as well.
    """
    people = max(1, int(party_size or 1))
    total = total if total and total > 0 else None
    per_person = per_person if per_person and per_person > 0 else None

    if total is not None and per_person is not None:
        computed_total = per_person * people
        if _is_ten_x(total, computed_total):
            total = computed_total
        elif _is_ten_x(computed_total, total):
            per_person = total / people
        return BudgetSpec(total=total, per_person=per_person)

    if total is not None:
        return BudgetSpec(total=total, per_person=total / people)
    if per_person is not None:
        return BudgetSpec(total=per_person * people, per_person=per_person)
    return BudgetSpec(total=None, per_person=None)


__all__ = ["parse_budget_amount", "reconcile_budget", "TEN_X_TOLERANCE"]

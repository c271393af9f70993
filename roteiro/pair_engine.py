# -*- coding: utf-8 -*-
"""
pair_engine – pareamento de dois trechos só de ida em um pseudo ida-e-volta.

Usado quando a API não precifica o ida-e-volta real (intervalo de datas longo
demais ou voo sem data de volta informada no request original).
"""

from __future__ import annotations

import logging
from itertools import product
from typing import Iterable, List, Optional

from .formatting import fmt_money_brl
from .models import CombinedFlightOffer, FlightOffer

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 3


def cheapest(offers: Iterable[FlightOffer], n: int) -> List[FlightOffer]:
    return sorted(offers, key=lambda o: o.price_brl)[:n]


def pair_one_ways(
    outbound: Iterable[FlightOffer],
    inbound: Iterable[FlightOffer],
    *,
    top_n: int = DEFAULT_TOP_N,
    limit: Optional[int] = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> List[CombinedFlightOffer]:
    """Monta pares a partir dos *top_n* mais baratos de cada trecho.

    Retorno ordenado pelo preço total, cortado em *limit*.
    """
    log = log or logger
    pairs: List[CombinedFlightOffer] = []

    for out_offer, in_offer in product(cheapest(outbound, top_n), cheapest(inbound, top_n)):
        # volta antes da ida não faz sentido
        if in_offer.depart_date < out_offer.depart_date:
            continue
        total = out_offer.price_brl + in_offer.price_brl
        pairs.append(
            CombinedFlightOffer(
                outbound=out_offer,
                inbound=in_offer,
                price_text=fmt_money_brl(total),
            )
        )
        log.debug(
            "PAIR %s-%s %s→%s total=%.0f",
            out_offer.origin,
            out_offer.destination,
            out_offer.depart_date,
            in_offer.depart_date,
            total,
        )

    pairs.sort(key=lambda p: p.price_brl)
    if limit is not None:
        pairs = pairs[:limit]
    return pairs


__all__ = ["pair_one_ways", "cheapest", "DEFAULT_TOP_N"]

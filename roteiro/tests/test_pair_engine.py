from datetime import date
from decimal import Decimal

from roteiro.models import FlightOffer
from roteiro.pair_engine import cheapest, pair_one_ways


def offer(origin, destination, day, price):
    return FlightOffer(
        origin=origin,
        destination=destination,
        depart_date=day,
        return_date=None,
        price_brl=Decimal(price),
        price_text=f"R$ {price}",
        airline="G3",
        stops=0,
        duration_text="3h 00m",
        deep_link=None,
    )


def test_cheapest():
    offers = [offer("SAO", "LIS", date(2026, 11, 1), p) for p in (900, 300, 500, 700)]
    assert [o.price_brl for o in cheapest(offers, 2)] == [Decimal(300), Decimal(500)]


def test_pairs_top_three_of_each_sorted_by_total():
    out = [offer("SAO", "LIS", date(2026, 11, 1), p) for p in (2000, 1500, 1800, 2500)]
    back = [offer("LIS", "SAO", date(2027, 1, 10), p) for p in (2100, 1900, 2600, 1700)]

    pairs = pair_one_ways(out, back)

    assert len(pairs) == 9
    totals = [p.price_brl for p in pairs]
    assert totals == sorted(totals)
    assert totals[0] == Decimal(1500 + 1700)
    assert pairs[0].price_text == "R$ 3.200"
    # 2500 and 2600 are outside the top three
    assert all(p.outbound.price_brl != 2500 for p in pairs)
    assert all(p.inbound.price_brl != 2600 for p in pairs)


def test_pair_fields():
    pair = pair_one_ways(
        [offer("SAO", "LIS", date(2026, 11, 1), 1000)],
        [offer("LIS", "SAO", date(2026, 12, 20), 1100)],
    )[0]
    assert pair.stops == 0
    assert pair.duration_text == "3h 00m + 3h 00m"
    data = pair.to_dict()
    assert data["depart_date"] == "2026-11-01"
    assert data["return_date"] == "2026-12-20"
    assert data["price"] == 2100.0
    assert data["outbound"]["from"] == "SAO"
    assert data["inbound"]["from"] == "LIS"


def test_inbound_before_outbound_is_skipped():
    out = [offer("SAO", "LIS", date(2026, 11, 10), 1000)]
    back = [
        offer("LIS", "SAO", date(2026, 11, 5), 500),
        offer("LIS", "SAO", date(2026, 11, 20), 800),
    ]
    pairs = pair_one_ways(out, back)
    assert len(pairs) == 1
    assert pairs[0].inbound.depart_date == date(2026, 11, 20)


def test_limit_and_empty_leg():
    out = [offer("SAO", "LIS", date(2026, 11, 1), p) for p in (1, 2, 3)]
    back = [offer("LIS", "SAO", date(2026, 12, 1), p) for p in (1, 2, 3)]
    assert len(pair_one_ways(out, back, limit=4)) == 4
    assert pair_one_ways(out, []) == []

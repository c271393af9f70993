import pytest

from roteiro.budget import parse_budget_amount, reconcile_budget


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("R$ 5.500", 5500.0),
        ("5.500,50", 5500.5),
        ("R$ 1.234.567,89", 1234567.89),
        ("3000", 3000.0),
        ("1234.56", 1234.56),
        ("5,5 mil", 5500.0),
        ("10k", 10000.0),
        ("BRL 800", 800.0),
        (2500, 2500.0),
        (1999.9, 1999.9),
    ],
)
def test_parse_budget_amount(raw, expected):
    assert parse_budget_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "R$", "1.2.3,4,5", True, float("nan"), float("inf")])
def test_parse_budget_amount_rejects_garbage(raw):
    assert parse_budget_amount(raw) is None


def test_total_only_derives_per_person():
    b = reconcile_budget(5500.0, None, 2)
    assert b.total == 5500.0
    assert b.per_person == 2750.0


def test_per_person_only_derives_total():
    b = reconcile_budget(None, 1500.0, 3)
    assert b.total == 4500.0
    assert b.per_person == 1500.0


def test_total_ten_times_too_big_is_corrected():
    b = reconcile_budget(55000.0, 2750.0, 2)
    assert b.total == 5500.0
    assert b.per_person == 2750.0


def test_per_person_ten_times_too_big_is_corrected():
    b = reconcile_budget(5500.0, 27500.0, 2)
    assert b.total == 5500.0
    assert b.per_person == 2750.0


def test_ten_x_tolerance_two_percent():
    # 10.1x is still a slip, 10.5x is taken as intended
    assert reconcile_budget(55550.0, 2750.0, 2).total == 5500.0
    assert reconcile_budget(57750.0, 2750.0, 2).total == 57750.0


def test_ten_people_total_typed_with_extra_zero():
    b = reconcile_budget(110000.0, 1100.0, 10)
    assert b.total == 11000.0
    assert b.per_person == 1100.0


def test_consistent_pair_untouched():
    b = reconcile_budget(6000.0, 2000.0, 2)
    assert (b.total, b.per_person) == (6000.0, 2000.0)


def test_party_size_floor_and_non_positive_amounts():
    b = reconcile_budget(1000.0, None, 0)
    assert b.per_person == 1000.0
    b = reconcile_budget(-5.0, 0.0, 2)
    assert b.total is None and b.per_person is None


def test_none_everywhere():
    b = reconcile_budget(None, None, None)
    assert b.to_dict() == {"total": None, "per_person": None}

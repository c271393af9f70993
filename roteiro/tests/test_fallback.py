import logging

import pytest

from roteiro.fallback import is_present, try_in_order


def test_first_acceptable_wins():
    calls = []

    def attempt(name, value):
        def run():
            calls.append(name)
            return value
        return run

    hit = try_in_order([("a", attempt("a", None)), ("b", attempt("b", "X")), ("c", attempt("c", "Y"))])
    assert hit == ("b", "X")
    assert calls == ["a", "b"]


def test_errors_are_logged_and_skipped(caplog):
    def boom():
        raise ValueError("nope")

    caplog.set_level(logging.WARNING)
    hit = try_in_order([("boom", boom), ("ok", lambda: 1)], label="demo")
    assert hit == ("ok", 1)
    assert "demo boom failed: nope" in caplog.text


def test_unlisted_errors_propagate():
    def boom():
        raise KeyError("k")

    with pytest.raises(KeyError):
        try_in_order([("boom", boom)], errors=(ValueError,))


def test_exhausted_returns_none():
    assert try_in_order([("a", lambda: ""), ("b", lambda: None)]) is None
    assert try_in_order([]) is None


def test_custom_accept():
    hit = try_in_order([("neg", lambda: -1), ("pos", lambda: 2)], accept=lambda v: v > 0)
    assert hit == ("pos", 2)


def test_is_present():
    assert is_present(0)
    assert not is_present("")
    assert not is_present(None)

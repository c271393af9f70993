import logging
from unittest.mock import Mock, patch

import requests

from roteiro.iata_resolver import IataResolver, candidate_keys
from roteiro.normalize import normalize_key
from roteiro.places import guess_currency, prefer_city_code


def test_normalize_key():
    assert normalize_key("  São   Paulo!! ") == "sao paulo"
    assert normalize_key("Armação dos Búzios") == "armacao dos buzios"
    assert normalize_key(None) == ""
    once = normalize_key("Foz do Iguaçu - PR")
    assert normalize_key(once) == once


def test_candidate_keys_strip_country_and_state():
    assert candidate_keys("Lisboa, Portugal") == ["lisboa portugal", "lisboa"]
    assert "gramado" in candidate_keys("Gramado RS")
    assert "orlando" in candidate_keys("Orlando EUA")


def test_prefer_city_code():
    assert prefer_city_code("GRU") == "SAO"
    assert prefer_city_code("jfk") == "NYC"
    assert prefer_city_code("MCZ") == "MCZ"


def test_guess_currency():
    assert guess_currency("Argentina") == "ARS"
    assert guess_currency("Roma, Itália") == "EUR"
    assert guess_currency("Maragogi") == "BRL"
    assert guess_currency("Lugar Nenhum") == "USD"


@patch("requests.get")
def test_direct_code_wins(mock_get):
    resolver = IataResolver()
    assert resolver.resolve("São Paulo, GRU") == "SAO"
    assert resolver.resolve("Voo para CDG") == "PAR"
    mock_get.assert_not_called()


@patch("requests.get")
def test_country_abbreviation_is_not_a_code(mock_get):
    resolver = IataResolver()
    assert resolver.resolve("Orlando, EUA") == "ORL"
    mock_get.assert_not_called()


@patch("requests.get")
def test_all_caps_city_name_is_not_a_code(mock_get):
    mock_get.side_effect = requests.ConnectionError("offline")
    resolver = IataResolver()
    assert resolver.resolve("LOS ANGELES") == "LAX"
    assert resolver.resolve("SAN FRANCISCO") == "SFO"
    assert resolver.resolve("SAO PAULO, GRU") == "SAO"


@patch("requests.get")
def test_alias_table(mock_get):
    resolver = IataResolver()
    assert resolver.resolve("Maragogi") == "MCZ"
    assert resolver.resolve("são paulo") == "SAO"
    assert resolver.resolve("Búzios") == "RIO"
    mock_get.assert_not_called()


@patch("requests.get")
def test_autocomplete_prefers_city(mock_get):
    mock_resp = Mock(status_code=200)
    mock_resp.json.return_value = [
        {"type": "airport", "code": "XYA", "city_code": "XYZ"},
        {"type": "city", "code": "qwe"},
    ]
    mock_get.return_value = mock_resp

    assert IataResolver(timeout=3).resolve("Cidadezinha") == "QWE"
    _, kwargs = mock_get.call_args
    assert kwargs["params"]["term"] == "Cidadezinha"
    assert kwargs["params"]["types[]"] == ["city", "airport"]
    assert kwargs["timeout"] == 3


@patch("requests.get")
def test_autocomplete_airport_city_code(mock_get):
    mock_resp = Mock(status_code=200)
    mock_resp.json.return_value = [{"type": "airport", "code": "XYA", "city_code": "XYZ"}]
    mock_get.return_value = mock_resp

    assert IataResolver().resolve("Aeroportolândia") == "XYZ"


@patch("requests.get")
def test_autocomplete_failure_is_unresolved(mock_get, caplog):
    mock_get.side_effect = requests.ConnectionError("boom")
    caplog.set_level(logging.INFO)

    assert IataResolver().resolve("Cidadezinha") is None
    assert any("unresolved" in r.getMessage() for r in caplog.records)


@patch("requests.get")
def test_autocomplete_empty_list(mock_get):
    mock_resp = Mock(status_code=200)
    mock_resp.json.return_value = []
    mock_get.return_value = mock_resp

    assert IataResolver().resolve("Cidadezinha") is None


def test_blank_term():
    assert IataResolver().resolve("   ") is None
    assert IataResolver().resolve(None) is None

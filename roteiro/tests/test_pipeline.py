import logging
import smtplib
from datetime import date
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests
from pydantic import ValidationError

from roteiro.assembler import ItineraryAssembler
from roteiro.aviasales_fetcher import AviasalesFetcher
from roteiro.classifier import ClassifierError, DestinationClassifier
from roteiro.config import Settings
from roteiro.flight_search import FlightSearchOrchestrator
from roteiro.fx import FxResolver
from roteiro.iata_resolver import IataResolver
from roteiro.mailer import send_itinerary_email
from roteiro.models import DestinationMeta, FlightOffer
from roteiro.narrative import NarrativeError, NarrativeGenerator
from roteiro.pipeline import TripPlanner, TripRequest, request_logger

MARAGOGI = DestinationMeta("Maragogi", "city", "Brasil", "BR", "BRL", "Real")


def make_offer():
    return FlightOffer(
        origin="SAO",
        destination="MCZ",
        depart_date=date(2026, 11, 10),
        return_date=date(2026, 11, 15),
        price_brl=Decimal("1450"),
        price_text="R$ 1.450",
        airline="G3",
        stops=0,
        duration_text="3h 05m",
        deep_link="https://www.aviasales.com/search/SAO1011MCZ15111",
    )


def make_planner(settings=None, *, meta=MARAGOGI, offers=None, narrative="<h2>1. Visão geral</h2><p>Praias</p>", send_email=None):
    settings = settings or Settings(openai_api_key="sk-test", tp_token="tok", _env_file=None)
    classifier = Mock(spec=DestinationClassifier)
    classifier.classify.return_value = meta
    fetcher = Mock(spec=AviasalesFetcher)
    fetcher.configured = True
    fetcher.search_prices.return_value = offers if offers is not None else [make_offer()]
    generator = Mock(spec=NarrativeGenerator)
    if isinstance(narrative, Exception):
        generator.generate.side_effect = narrative
    else:
        generator.generate.return_value = narrative
    planner = TripPlanner(
        settings,
        classifier=classifier,
        fx=FxResolver(),
        iata=IataResolver(),
        flight_search=FlightSearchOrchestrator(fetcher),
        narrative=generator,
        assembler=ItineraryAssembler(settings.brand_name),
        send_email=send_email or Mock(),
    )
    return planner, fetcher


# ──────────────────────────────────────────────────────────
# TripRequest


def test_request_defaults_and_aliases():
    req = TripRequest.model_validate({"destino": "  Maragogi  ", "emailDestino": " ana@example.com "})
    assert req.destino == "Maragogi"
    assert req.dias == 5
    assert req.pessoas == 1
    assert req.email_destino == "ana@example.com"
    assert req.return_date is None


def test_request_legacy_destination_fields():
    assert TripRequest.model_validate({"pais": "Portugal"}).destino == "Portugal"
    assert TripRequest.model_validate({"destino": "", "cidade": "Gramado"}).destino == "Gramado"


def test_request_validation_errors():
    with pytest.raises(ValidationError, match="destino"):
        TripRequest.model_validate({})
    with pytest.raises(ValidationError, match="dias"):
        TripRequest.model_validate({"destino": "Lisboa", "dias": 0})


def test_request_pessoas_floor_and_blank_values():
    req = TripRequest.model_validate(
        {"destino": "Lisboa", "pessoas": 0, "dias": "", "orcamento": "", "origem": "  "}
    )
    assert req.pessoas == 1
    assert req.dias == 5
    assert req.orcamento is None
    assert req.origem is None


def test_request_return_date_derivation():
    req = TripRequest.model_validate({"destino": "Lisboa", "dias": 7, "data_ida": "2026-11-10"})
    assert req.return_date == date(2026, 11, 17)
    req = TripRequest.model_validate(
        {"destino": "Lisboa", "data_ida": "2026-11-10", "data_volta": "2026-11-12"}
    )
    assert req.return_date == date(2026, 11, 12)
    req = TripRequest.model_validate({"destino": "Lisboa", "data_ida": "2026-11-10", "somente_ida": True})
    assert req.return_date is None


# ──────────────────────────────────────────────────────────
# TripPlanner


def test_maragogi_from_sao_paulo():
    planner, fetcher = make_planner()
    req = TripRequest.model_validate(
        {
            "destino": "Maragogi",
            "origem": "São Paulo",
            "dias": 5,
            "pessoas": 2,
            "orcamento": "R$ 5.500",
            "data_ida": "2026-11-10",
        }
    )

    payload = planner.plan(req)

    assert payload["ok"] is True
    assert payload["meta"]["orcamento"] == 5500.0
    assert payload["meta"]["orcamento_por_pessoa"] == 2750.0
    assert payload["meta"]["currency_code"] == "BRL"
    assert payload["meta"]["fx"]["provider"] == "none"
    assert payload["budget"] == {"total": 5500.0, "per_person": 2750.0}

    fetcher.search_prices.assert_called_once()
    args, kwargs = fetcher.search_prices.call_args
    assert args[:2] == ("SAO", "MCZ")
    assert kwargs["return_at"] == "2026-11-15"

    flights = payload["flights"]
    assert flights["origin"] == "SAO" and flights["destination"] == "MCZ"
    assert flights["items"][0]["price_text"] == "R$ 1.450"

    html = payload["html"]
    assert html.index("Resumo do planejamento") < html.index("Voos SAO → MCZ") < html.index("Praias")
    assert "Maragogi, Brasil" in html
    assert "Orçamento total" in payload["texto"]
    assert "narrative_error" not in payload
    assert "email" not in payload


def test_without_origin_skips_flights():
    planner, fetcher = make_planner()
    payload = planner.plan(TripRequest(destino="Maragogi"))
    assert payload["flights"] is None
    fetcher.search_prices.assert_not_called()
    assert "Voos" not in payload["html"]


def test_origin_without_dates():
    planner, fetcher = make_planner()
    payload = planner.plan(TripRequest(destino="Maragogi", origem="São Paulo"))
    assert payload["flights"]["error"] == "missing_dates"
    fetcher.search_prices.assert_not_called()


@patch("requests.get")
def test_unresolved_iata(mock_get):
    mock_get.side_effect = requests.ConnectionError("offline")
    planner, fetcher = make_planner()
    payload = planner.plan(
        TripRequest(destino="Maragogi", origem="Cidadezinha", data_ida=date(2026, 11, 10))
    )
    assert payload["flights"]["error"] == "iata_unresolved"
    fetcher.search_prices.assert_not_called()


@patch("requests.get")
def test_destination_falls_back_to_normalized_name(mock_get):
    mock_get.side_effect = requests.ConnectionError("offline")
    meta = DestinationMeta("Lisboa", "city", "Portugal", "PT", "BRL", "")
    planner, fetcher = make_planner(meta=meta)
    planner.plan(
        TripRequest(destino="capital portuguesa", origem="São Paulo", data_ida=date(2026, 11, 10))
    )
    args, _ = fetcher.search_prices.call_args
    assert args[:2] == ("SAO", "LIS")


def test_flights_disabled_without_token():
    settings = Settings(openai_api_key="sk-test", tp_token="", _env_file=None)
    planner, fetcher = make_planner(settings)
    payload = planner.plan(
        TripRequest(destino="Maragogi", origem="São Paulo", data_ida=date(2026, 11, 10))
    )
    assert payload["flights"]["error"] == "not_configured"
    fetcher.search_prices.assert_not_called()


def test_same_city_is_not_searched():
    planner, fetcher = make_planner()
    payload = planner.plan(
        TripRequest(destino="São Paulo", origem="sao paulo", data_ida=date(2026, 11, 10))
    )
    assert payload["flights"]["error"] == "same_city"
    fetcher.search_prices.assert_not_called()


def test_narrative_failure_degrades(caplog):
    planner, _ = make_planner(narrative=NarrativeError("HTTP 500: boom"))
    caplog.set_level(logging.WARNING)
    payload = planner.plan(TripRequest(destino="Maragogi"))
    assert payload["ok"] is True
    assert payload["narrative_error"] == "HTTP 500: boom"
    assert "(sem conteúdo)" in payload["html"]
    assert "Resumo do planejamento" in payload["html"]


def test_classifier_failure_propagates():
    planner, _ = make_planner()
    planner.classifier.classify.side_effect = ClassifierError("down", status=503)
    with pytest.raises(ClassifierError):
        planner.plan(TripRequest(destino="Maragogi"))


def test_email_sent():
    settings = Settings(
        openai_api_key="sk-test",
        smtp_host="smtp.example.com",
        mail_from="noreply@example.com",
        _env_file=None,
    )
    sender = Mock()
    planner, _ = make_planner(settings, send_email=sender)
    payload = planner.plan(TripRequest(destino="Maragogi", emailDestino="ana@example.com"))

    assert payload["email"] == {"enviado": True, "para": "ana@example.com"}
    args, kwargs = sender.call_args
    assert args[2] == "Roteiro • Maragogi, Brasil • Touristando IA"
    assert args[3] == "ana@example.com"
    assert kwargs["smtp_host"] == "smtp.example.com"
    assert "Roteiro: Maragogi, Brasil" in args[0]


def test_email_failure_is_reported():
    settings = Settings(
        openai_api_key="sk-test",
        smtp_host="smtp.example.com",
        mail_from="noreply@example.com",
        _env_file=None,
    )
    sender = Mock(side_effect=smtplib.SMTPAuthenticationError(535, b"bad credentials"))
    planner, _ = make_planner(settings, send_email=sender)
    payload = planner.plan(TripRequest(destino="Maragogi", emailDestino="ana@example.com"))
    assert payload["ok"] is True
    assert payload["email"]["enviado"] is False


@patch("smtplib.SMTP_SSL")
def test_email_header_injection_is_reported(mock_smtp):
    settings = Settings(
        openai_api_key="sk-test",
        smtp_host="smtp.example.com",
        mail_from="noreply@example.com",
        _env_file=None,
    )
    planner, _ = make_planner(settings, send_email=send_itinerary_email)
    payload = planner.plan(
        TripRequest(destino="Maragogi", emailDestino="ana@example.com\nBcc: x@evil.com")
    )
    assert payload["ok"] is True
    assert "Resumo do planejamento" in payload["html"]
    assert payload["email"]["enviado"] is False
    mock_smtp.assert_not_called()


def test_email_not_configured(monkeypatch):
    monkeypatch.delenv("SMTP_HOST", raising=False)
    monkeypatch.delenv("MAIL_FROM", raising=False)
    sender = Mock()
    planner, _ = make_planner(send_email=sender)
    payload = planner.plan(TripRequest(destino="Maragogi", emailDestino="ana@example.com"))
    assert payload["email"]["enviado"] is False
    sender.assert_not_called()


def test_request_logger_prefix(caplog):
    caplog.set_level(logging.INFO)
    request_logger("abc123").info("hello %s", "world")
    assert "[abc123] hello world" in caplog.text

import logging

import pytest
from pydantic import ValidationError

from roteiro.config import Settings, configure_logging, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", '"sk-abc"')
    monkeypatch.setenv("TP_TOKEN", "tok")
    monkeypatch.setenv("FLIGHT_MAX_SPAN_DAYS", "45")
    monkeypatch.setenv("NARRATIVE_WEB_SEARCH", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = get_settings()
    assert isinstance(cfg, Settings)
    assert cfg.openai_api_key == "sk-abc"
    assert cfg.flights_enabled
    assert cfg.flight_max_span_days == 45
    assert cfg.narrative_web_search is True
    assert cfg.log_level == "DEBUG"
    assert get_settings() is cfg


def test_defaults(monkeypatch):
    for name in ("TP_TOKEN", "SMTP_HOST", "MAIL_FROM", "NARRATIVE_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)
    cfg = Settings(_env_file=None)
    assert cfg.narrative_timeout_s == 60
    assert cfg.flight_result_limit == 10
    assert not cfg.flights_enabled
    assert not cfg.email_enabled


def test_email_enabled_needs_host_and_sender():
    assert Settings(smtp_host="smtp.example.com", mail_from="noreply@example.com").email_enabled
    assert not Settings(smtp_host="smtp.example.com", mail_from="").email_enabled


def test_rejects_non_positive_timeout(monkeypatch):
    monkeypatch.setenv("FX_TIMEOUT_S", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_configure_logging(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    configure_logging(Settings(log_level="warning"))
    assert calls["level"] == logging.WARNING
    assert "%(name)s" in calls["format"]

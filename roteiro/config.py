from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    # OpenAI (classificação do destino + roteiro)
    openai_api_key: str = Field("", alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o-mini", alias="OPENAI_MODEL")
    narrative_web_search: bool = Field(False, alias="NARRATIVE_WEB_SEARCH")

    # Travelpayouts (voos + autocomplete)
    tp_token: str = Field("", alias="TP_TOKEN")
    tp_marker: str = Field("", alias="TP_MARKER")
    flight_max_span_days: int = Field(30, alias="FLIGHT_MAX_SPAN_DAYS")
    flight_result_limit: int = Field(10, alias="FLIGHT_RESULT_LIMIT")

    fx_host_access_key: str = Field("", alias="FX_HOST_ACCESS_KEY")

    # E-mail (opcional)
    smtp_host: str = Field("", alias="SMTP_HOST")
    smtp_port: int = Field(465, alias="SMTP_PORT")
    smtp_user: str = Field("", alias="SMTP_USER")
    smtp_pass: str = Field("", alias="SMTP_PASS")
    smtp_tls: bool = Field(False, alias="SMTP_TLS")
    mail_from: str = Field("", alias="MAIL_FROM")
    brand_name: str = Field("Touristando IA", alias="BRAND_NAME")
    logo_url: str = Field("", alias="LOGO_URL")

    # Timeouts (seconds)
    classifier_timeout_s: float = Field(25, alias="CLASSIFIER_TIMEOUT_S")
    narrative_timeout_s: float = Field(60, alias="NARRATIVE_TIMEOUT_S")
    fx_timeout_s: float = Field(15, alias="FX_TIMEOUT_S")
    autocomplete_timeout_s: float = Field(10, alias="AUTOCOMPLETE_TIMEOUT_S")
    flight_timeout_s: float = Field(20, alias="FLIGHT_TIMEOUT_S")
    smtp_timeout_s: float = Field(20, alias="SMTP_TIMEOUT_S")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator(
        "openai_api_key",
        "openai_model",
        "tp_token",
        "tp_marker",
        "fx_host_access_key",
        "smtp_host",
        "smtp_user",
        "smtp_pass",
        "mail_from",
        "brand_name",
        "logo_url",
        mode="before",
    )
    @classmethod
    def _strip_quotes(cls, v):
        # Vercel-style dashboards often keep the quotes typed by the user
        if isinstance(v, str):
            return v.strip().strip("'\"")
        return v

    @field_validator(
        "classifier_timeout_s",
        "narrative_timeout_s",
        "fx_timeout_s",
        "autocomplete_timeout_s",
        "flight_timeout_s",
        "smtp_timeout_s",
    )
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be greater than 0")
        return v

    @field_validator("flight_max_span_days", "flight_result_limit")
    @classmethod
    def _int_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @property
    def flights_enabled(self) -> bool:
        return bool(self.tp_token)

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.mail_from)


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


def configure_logging(settings: Settings | None = None) -> None:
    """Install the root handler used by the CLI and the API server."""
    level = (settings or get_settings()).log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        handlers=[logging.StreamHandler()],
        format=LOG_FORMAT,
    )


__all__ = ["Settings", "get_settings", "configure_logging", "LOG_FORMAT"]

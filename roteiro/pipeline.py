from __future__ import annotations

import logging
import smtplib
import uuid
from datetime import date, timedelta
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .assembler import ItineraryAssembler, html_to_text
from .aviasales_fetcher import AviasalesFetcher
from .budget import parse_budget_amount, reconcile_budget
from .classifier import DestinationClassifier
from .config import Settings, get_settings
from .flight_search import FlightSearchOrchestrator
from .fx import FxResolver
from .iata_resolver import IataResolver
from .mailer import send_itinerary_email
from .models import DestinationMeta, FlightResult
from .narrative import NarrativeError, NarrativeGenerator, build_prompt

logger = logging.getLogger(__name__)

PLACEHOLDER_NARRATIVE = "<p>(sem conteúdo)</p>"


class RequestLogger(logging.LoggerAdapter):
    """Prefixes every record with the request id."""

    def process(self, msg, kwargs):
        return f"[{self.extra['request_id']}] {msg}", kwargs


def request_logger(request_id: str | None = None) -> RequestLogger:
    return RequestLogger(logger, {"request_id": request_id or uuid.uuid4().hex[:8]})


def validation_message(exc: ValidationError) -> str:
    """First error of *exc* as a user-facing sentence."""
    err = exc.errors()[0]
    msg = str(err.get("msg", "Requisição inválida."))
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"Campo inválido {field!r}: {msg}" if field else msg


class TripRequest(BaseModel):
    """Body of ``POST /api/roteiro``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    destino: str = Field("", validate_default=True)
    origem: Optional[str] = None
    dias: int = 5
    pessoas: int = 1
    perfil: str = "normal"
    estilo: str = "casual"
    orcamento: Union[float, str, None] = None
    orcamento_por_pessoa: Union[float, str, None] = None
    email_destino: Optional[str] = Field(None, alias="emailDestino")
    data_ida: Optional[date] = None
    data_volta: Optional[date] = None
    somente_ida: bool = False

    @model_validator(mode="before")
    @classmethod
    def _legacy_destination(cls, data: Any) -> Any:
        # formulários antigos mandam "pais", "estado" ou "cidade"
        if isinstance(data, dict) and not str(data.get("destino") or "").strip():
            legacy = (str(data.get(k) or "").strip() for k in ("pais", "estado", "cidade"))
            data = {**data, "destino": next((v for v in legacy if v), "")}
        return data

    @field_validator("destino")
    @classmethod
    def _destino_non_empty(cls, v: str) -> str:
        v = " ".join(v.split())
        if not v:
            raise ValueError('Informe o destino (país/estado/cidade) no campo "destino".')
        return v

    @field_validator("origem", "email_destino", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("orcamento", "orcamento_por_pessoa", "data_ida", "data_volta", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("perfil", "estilo", mode="before")
    @classmethod
    def _text_default(cls, v, info):
        if v is None or not str(v).strip():
            return cls.model_fields[info.field_name].default
        return str(v).strip()

    @field_validator("dias", mode="before")
    @classmethod
    def _dias_default(cls, v):
        return 5 if v is None or v == "" else v

    @field_validator("dias")
    @classmethod
    def _dias_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError('O campo "dias" deve ser um número > 0.')
        return v

    @field_validator("pessoas", mode="before")
    @classmethod
    def _pessoas_default(cls, v):
        return 1 if v is None or v == "" else v

    @field_validator("pessoas")
    @classmethod
    def _pessoas_min_one(cls, v: int) -> int:
        return max(1, v)

    @property
    def return_date(self) -> Optional[date]:
        """Explicit return date, else ``data_ida + dias``; ``None`` one way."""
        if self.somente_ida or self.data_ida is None:
            return None
        return self.data_volta or self.data_ida + timedelta(days=self.dias)


class TripPlanner:
    """One request, start to finish. Build a new planner per request."""

    def __init__(
        self,
        settings: Settings,
        *,
        classifier: DestinationClassifier,
        fx: FxResolver,
        iata: IataResolver,
        flight_search: FlightSearchOrchestrator,
        narrative: NarrativeGenerator,
        assembler: ItineraryAssembler,
        send_email: Callable[..., None] = send_itinerary_email,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.settings = settings
        self.classifier = classifier
        self.fx = fx
        self.iata = iata
        self.flight_search = flight_search
        self.narrative = narrative
        self.assembler = assembler
        self.send_email = send_email
        self.log = log or logger

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> "TripPlanner":
        s = settings or get_settings()
        log = log or request_logger()
        fetcher = AviasalesFetcher(s.tp_token, s.tp_marker, timeout=s.flight_timeout_s)
        return cls(
            s,
            classifier=DestinationClassifier(
                s.openai_api_key, model=s.openai_model, timeout=s.classifier_timeout_s, log=log
            ),
            fx=FxResolver(
                timeout=s.fx_timeout_s, exchangerate_host_key=s.fx_host_access_key, log=log
            ),
            iata=IataResolver(timeout=s.autocomplete_timeout_s, log=log),
            flight_search=FlightSearchOrchestrator(
                fetcher, max_span_days=s.flight_max_span_days, log=log
            ),
            narrative=NarrativeGenerator(
                s.openai_api_key,
                model=s.openai_model,
                timeout=s.narrative_timeout_s,
                web_search=s.narrative_web_search,
                log=log,
            ),
            assembler=ItineraryAssembler(s.brand_name, s.logo_url),
            log=log,
        )

    # ──────────────────────────────────────────────────────────

    def plan(self, req: TripRequest) -> dict[str, Any]:
        """Run the whole pipeline.

        Only the classifier step may raise (``ConfigurationError`` or
        ``ClassifierError``); every later step degrades to a partial result.
        """
        self.log.info("Planning %r (%s dias, %s pessoas)", req.destino, req.dias, req.pessoas)

        budget = reconcile_budget(
            parse_budget_amount(req.orcamento),
            parse_budget_amount(req.orcamento_por_pessoa),
            req.pessoas,
        )
        meta = self.classifier.classify(req.destino)
        label = meta.label or req.destino
        fx = self.fx.get_rate(meta.currency_code)
        flights = self._search_flights(req, meta)

        prompt = build_prompt(
            label=label,
            meta=meta,
            dias=req.dias,
            pessoas=req.pessoas,
            perfil=req.perfil,
            estilo=req.estilo,
            budget=budget,
            fx=fx,
        )
        narrative_error = None
        try:
            narrative = self.narrative.generate(prompt)
        except NarrativeError as exc:
            self.log.warning("Narrative unavailable: %s", exc)
            narrative, narrative_error = PLACEHOLDER_NARRATIVE, str(exc)

        rows = self.assembler.summary_rows(
            label=label,
            dias=req.dias,
            pessoas=req.pessoas,
            perfil=req.perfil,
            estilo=req.estilo,
            meta=meta,
            budget=budget,
            fx=fx,
        )
        document = self.assembler.compose(
            self.assembler.render_summary(rows),
            narrative,
            self.assembler.render_flights(flights),
        )

        payload: dict[str, Any] = {
            "ok": True,
            "html": document,
            "texto": html_to_text(document),
            "meta": {
                "destino": label,
                "region_type": meta.region_type,
                "country": meta.country_name or None,
                "country_code": meta.country_code or None,
                "currency_code": meta.currency_code,
                "currency_name": meta.currency_name or None,
                "pessoas": req.pessoas,
                "dias": req.dias,
                "orcamento": budget.total,
                "orcamento_por_pessoa": budget.per_person,
                "estilo": req.estilo,
                "perfil": req.perfil,
                "fx": fx.to_dict(),
            },
            "budget": budget.to_dict(),
            "flights": flights.to_dict() if flights is not None else None,
        }
        if narrative_error:
            payload["narrative_error"] = narrative_error
        if req.email_destino:
            payload["email"] = self._send_email(req.email_destino, document, label)
        return payload

    # ──────────────────────────────────────────────────────────

    def _search_flights(self, req: TripRequest, meta: DestinationMeta) -> Optional[FlightResult]:
        if not req.origem:
            return None
        if not self.settings.flights_enabled:
            return FlightResult(
                req.origem,
                req.destino,
                error="not_configured",
                message="Busca de voos desativada: TP_TOKEN não configurado.",
            )

        origin = self.iata.resolve(req.origem)
        destination = self.iata.resolve(req.destino)
        if destination is None and meta.normalized_name and meta.normalized_name != req.destino:
            destination = self.iata.resolve(meta.normalized_name)

        if not origin or not destination:
            missing = req.origem if not origin else req.destino
            return FlightResult(
                origin or req.origem,
                destination or req.destino,
                error="iata_unresolved",
                message=f"Não foi possível identificar o aeroporto de {missing!r}.",
            )
        if origin == destination:
            return FlightResult(
                origin,
                destination,
                error="same_city",
                message="Origem e destino usam o mesmo aeroporto.",
            )
        if req.data_ida is None:
            return FlightResult(
                origin,
                destination,
                error="missing_dates",
                message="Informe data_ida para buscar voos.",
            )
        return self.flight_search.search(
            origin,
            destination,
            req.data_ida,
            req.return_date,
            self.settings.flight_result_limit,
        )

    def _send_email(self, to_addr: str, document: str, label: str) -> dict[str, Any]:
        s = self.settings
        if not s.email_enabled:
            return {"enviado": False, "erro": "E-mail não configurado (SMTP_HOST/MAIL_FROM)."}
        try:
            self.send_email(
                self.assembler.render_email(document, label),
                html_to_text(document),
                f"Roteiro • {label} • {s.brand_name}",
                to_addr,
                smtp_host=s.smtp_host,
                mail_from=s.mail_from,
                smtp_user=s.smtp_user,
                smtp_pass=s.smtp_pass,
                port=s.smtp_port,
                use_tls=s.smtp_tls,
                timeout=s.smtp_timeout_s,
            )
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            self.log.warning("E-mail to %s failed: %s", to_addr, exc)
            return {"enviado": False, "erro": str(exc)}
        return {"enviado": True, "para": to_addr}


__all__ = ["TripRequest", "TripPlanner", "RequestLogger", "request_logger", "validation_message"]

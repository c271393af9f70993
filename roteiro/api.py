"""HTTP boundary: ``POST /api/roteiro`` and ``GET /health``."""

from __future__ import annotations

import json
from typing import Any, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from .classifier import ClassifierError, ConfigurationError
from .config import get_settings
from .pipeline import TripPlanner, TripRequest, request_logger, validation_message

PlannerFactory = Callable[..., TripPlanner]

app = FastAPI(title="roteiro", version="1.0.0", docs_url=None, redoc_url=None)


class NoStoreMiddleware(BaseHTTPMiddleware):
    """Itineraries are per request; never cache them."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store"
        return response


app.add_middleware(NoStoreMiddleware)


def get_planner_factory() -> PlannerFactory:
    settings = get_settings()
    return lambda log: TripPlanner.from_settings(settings, log=log)


def parse_body(raw: bytes) -> dict[str, Any]:
    """Malformed or non-object bodies count as an empty request."""
    text = raw.decode("utf-8", errors="replace").strip() if raw else ""
    if not text:
        return {}
    try:
        data = json.loads(text)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error(status: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message, **extra})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/roteiro")
async def roteiro(request: Request, factory: PlannerFactory = Depends(get_planner_factory)):
    body = parse_body(await request.body())
    log = request_logger()
    try:
        trip = TripRequest.model_validate(body)
    except ValidationError as exc:
        log.info("Rejected request: %s", exc.errors()[0].get("msg"))
        return _error(400, validation_message(exc))

    try:
        planner = factory(log)
        payload = await _run(planner, trip)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        return _error(500, str(exc))
    except ClassifierError as exc:
        log.warning("Classifier failed: %s (status=%s)", exc, exc.status)
        return _error(exc.status or 502, "Falha ao classificar destino", raw=exc.raw)
    except Exception:
        log.exception("Unhandled error while planning %r", trip.destino)
        return _error(500, "Falha interna.")
    return JSONResponse(content=payload)


async def _run(planner: TripPlanner, trip: TripRequest) -> dict[str, Any]:
    return await run_in_threadpool(planner.plan, trip)


__all__ = ["app", "get_planner_factory", "parse_body"]

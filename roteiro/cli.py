from __future__ import annotations

import json
import logging
from typing import Optional

import click
import uvicorn
from pydantic import ValidationError

from .aviasales_fetcher import AviasalesFetcher
from .classifier import ClassifierError, ConfigurationError
from .config import configure_logging, get_settings
from .flight_search import FlightSearchOrchestrator
from .fx import FxResolver
from .iata_resolver import IataResolver
from .pipeline import TripPlanner, TripRequest, request_logger, validation_message

logger = logging.getLogger(__name__)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))


@click.group()
def cli() -> None:
    """Touristando: roteiros de viagem na linha de comando."""
    configure_logging()


@cli.command()
@click.argument("destino")
@click.option("--origem", help="Cidade/aeroporto de origem (ativa a busca de voos)")
@click.option("--dias", type=int, default=5, show_default=True)
@click.option("--pessoas", type=int, default=1, show_default=True)
@click.option("--perfil", default="normal", show_default=True)
@click.option("--estilo", default="casual", show_default=True)
@click.option("--orcamento", help='Orçamento total, ex. "R$ 5.500"')
@click.option("--orcamento-por-pessoa")
@click.option("--data-ida", help="YYYY-MM-DD")
@click.option("--data-volta", help="YYYY-MM-DD")
@click.option("--somente-ida", is_flag=True)
@click.option("--email", "email_destino", help="Envia o roteiro para este e-mail")
@click.option("--html", "as_html", is_flag=True, help="Imprime só o HTML")
def plan(as_html: bool, **fields) -> None:
    """Generate an itinerary and print the JSON payload."""
    try:
        trip = TripRequest.model_validate({k: v for k, v in fields.items() if v is not None})
    except ValidationError as exc:
        raise click.BadParameter(validation_message(exc))

    try:
        payload = TripPlanner.from_settings(get_settings(), log=request_logger()).plan(trip)
    except (ConfigurationError, ClassifierError) as exc:
        raise click.ClickException(str(exc))

    if as_html:
        click.echo(payload["html"])
    else:
        _echo_json(payload)


@cli.command()
@click.argument("terms", nargs=-1, required=True)
def iata(terms) -> None:
    """Resolve place names to IATA codes."""
    resolver = IataResolver(timeout=get_settings().autocomplete_timeout_s)
    for term in terms:
        click.echo(f"{term}\t{resolver.resolve(term) or '-'}")


@cli.command()
@click.argument("currency")
def fx(currency: str) -> None:
    """Show the BRL -> CURRENCY rate and the provider that answered."""
    s = get_settings()
    quote = FxResolver(timeout=s.fx_timeout_s, exchangerate_host_key=s.fx_host_access_key).get_rate(
        currency
    )
    _echo_json(quote.to_dict())


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.option("--date", "depart", required=True, help="Departure date (YYYY-MM-DD)")
@click.option("--return", "return_", help="Return date (YYYY-MM-DD); omit for one way")
@click.option("--limit", type=int, help="Max results per list")
def flights(origin: str, destination: str, depart: str, return_: Optional[str], limit: Optional[int]) -> None:
    """Search fares between two IATA codes."""
    s = get_settings()

    fetcher = AviasalesFetcher(s.tp_token, s.tp_marker, timeout=s.flight_timeout_s)
    search = FlightSearchOrchestrator(fetcher, max_span_days=s.flight_max_span_days)
    result = search.search(
        origin.upper(), destination.upper(), depart, return_, limit or s.flight_result_limit
    )
    if result.error:
        logger.warning("Flight search failed: %s", result.message or result.error)
    _echo_json(result.to_dict())


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
@click.option("--reload", is_flag=True)
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    uvicorn.run("roteiro.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()

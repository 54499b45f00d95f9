"""
Command line entry point
Parses flags, configures logging and serves the exporter with uvicorn
"""
import logging
from typing import Optional

import typer
import uvicorn
from prometheus_client import disable_created_metrics

from .config import load_settings
from .exceptions import ConfigurationError
from .logging_config import setup_logging
from .main import create_app

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="A Prometheus exporter for Nature Remo smart devices.\n\n"
         "Collects sensor readings from the Nature Remo Cloud API and exposes "
         "them in a format that Prometheus can scrape.",
    add_completion=False,
)


@app.command()
def serve(
    token: Optional[str] = typer.Option(None, "--token", help="Nature Remo access token [env: NATURE_REMO_TOKEN]"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on [default: 9199, env: NATURE_REMO_PORT]"),
    host: Optional[str] = typer.Option(None, "--host", help="Address to bind [default: 0.0.0.0, env: NATURE_REMO_HOST]"),
    interval: Optional[str] = typer.Option(
        None, "--interval", help="Interval between metrics refresh, e.g. 30s or 1m [default: 30s, env: NATURE_REMO_INTERVAL]"
    ),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Nature Remo Cloud API base URL [env: NATURE_REMO_API_URL]"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL [env: LOG_LEVEL]"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="json or text [env: LOG_FORMAT]"),
    stop_on_error: bool = typer.Option(
        False, "--stop-on-error/--continue-on-error",
        help="Stop refreshing after a failed cycle instead of retrying on the next tick"
    ),
):
    """Serve Nature Remo sensor metrics on /metrics"""
    try:
        settings = load_settings(
            token=token,
            port=port,
            host=host,
            interval=interval,
            api_base_url=api_url,
            log_level=log_level,
            log_format=log_format,
            stop_on_error=stop_on_error,
        )
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    setup_logging(settings.log_level, settings.log_format)
    disable_created_metrics()

    application = create_app(settings)

    logger.info(f"Listening on port {settings.port}")
    # Bind failures exit the process with a non-zero status
    uvicorn.run(application, host=settings.host, port=settings.port, log_config=None)


def main():
    app()


if __name__ == "__main__":
    main()

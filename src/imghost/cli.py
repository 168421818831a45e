from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from imghost.app.core.logging import setup_logging
from imghost.app.settings import HostSettings, load_settings
from imghost.exceptions import ConfigError

app = typer.Typer(no_args_is_help=True, add_completion=False)
logger = logging.getLogger(__name__)

ConfigOption = typer.Option(
    None, "--config", "-c", envvar="IMGHOST_CONFIG",
    help="KEY=value file with IMGHOST_* settings",
)


def _load_or_exit(config: Optional[Path], **overrides) -> HostSettings:
    try:
        return load_settings(config, **overrides)
    except ConfigError as exc:
        logger.critical("%s", exc)
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
        config: Optional[Path] = ConfigOption,
        host: Optional[str] = typer.Option(None, help="Listen address (overrides config)"),
        port: Optional[int] = typer.Option(None, help="Listen port (overrides config)"),
        graceful_timeout: Optional[float] = typer.Option(
            None, help="Seconds to wait for in-flight requests on shutdown, e.g. 15"
        ),
):
    """Run the HTTP server until interrupted, then drain connections."""
    setup_logging()
    settings = _load_or_exit(config, host=host, port=port, graceful_timeout=graceful_timeout)

    from imghost.api.fastapi import create_app

    api = create_app(settings)
    logger.info("Server is running on %s:%d", settings.host, settings.port)
    uvicorn.run(
        api,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=math.ceil(settings.idle_timeout),
        timeout_graceful_shutdown=math.ceil(settings.graceful_timeout),
        log_config=None,  # keep our dictConfig
    )


@app.command("config")
def show_config(config: Optional[Path] = ConfigOption):
    """Print the effective settings as JSON."""
    settings = _load_or_exit(config)
    typer.echo(settings.model_dump_json(indent=2))


def main() -> None:
    app()

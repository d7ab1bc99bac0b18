"""Typer entrypoint that builds and pushes the repository image."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from .config import load_config
from .errors import ConfigurationError, ExternalToolFailure
from .logging import configure_logging, get_logger
from .publisher import publish

LOGGER = get_logger(__name__)

CONFIG_ERROR_EXIT = 2

app = typer.Typer(help="Build the repository container image and push it to its registry.")


def _exit_status(returncode: int) -> int:
    # Negative return codes mean the tool was killed by a signal.
    return returncode if returncode > 0 else 128 - returncode


@app.command()
def push(
    config: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, help="YAML file with publisher settings."),
    overrides: Optional[List[str]] = typer.Option(None, "--set", help="Override a setting, e.g. build_args.VERSION=1.2."),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar="IMAGE_PUBLISHER_LOG_LEVEL",
        help="Logging level for diagnostic records.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        envvar="IMAGE_PUBLISHER_JSON_LOGS",
        help="Emit diagnostic records as JSON lines.",
    ),
) -> None:
    """Build the image named by IMAGE_URL and push it."""
    configure_logging(log_level, json_logs=json_logs)

    try:
        settings = load_config(config, overrides)
    except (ConfigurationError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc

    LOGGER.debug("Resolved configuration: %s", settings.model_dump(mode="json"))

    try:
        publish(settings, echo=typer.echo)
    except ExternalToolFailure as exc:
        if isinstance(exc.__cause__, OSError):
            typer.echo(exc.message, err=True)
        raise typer.Exit(code=_exit_status(exc.returncode)) from exc


def main() -> None:
    app()


__all__ = ["app", "main"]

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NoReturn, Optional

import typer

from cli.render import render_devices, render_result
from logging_config import configure_logging
from services.errors import ConfigError, RelayError
from services.pipeline import RelayPipeline, build_default_pipeline
from settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class CLIState:
    settings: Settings
    pipeline: RelayPipeline


app = typer.Typer(
    help="Relay the mean of a property's recent readings to a form endpoint.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _abort(exc: Exception) -> NoReturn:
    logger.error("%s", exc, extra={"reason": type(exc).__name__})
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    window_minutes: Optional[int] = typer.Option(
        None,
        "--window-minutes",
        "-w",
        help="Minutes of history to aggregate (defaults to TIMESERIES_WINDOW_MINUTES env or 100).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds (defaults to HTTP_TIMEOUT env or 30).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    try:
        settings = load_settings(
            window_minutes=window_minutes,
            http_timeout=timeout,
            log_level=log_level,
        )
    except ConfigError as exc:
        configure_logging("INFO")
        _abort(exc)
    configure_logging(settings.log_level)
    ctx.obj = CLIState(settings=settings, pipeline=build_default_pipeline(settings))


@app.command("run")
def run_command(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Fetch and aggregate but print the form fields instead of posting them.",
    ),
) -> None:
    """Fetch recent readings, average them and forward the result."""
    state = _get_state(ctx)
    try:
        result = state.pipeline.run(dry_run=dry_run)
    except RelayError as exc:
        _abort(exc)
    render_result(result)


@app.command("devices")
def devices_command(ctx: typer.Context) -> None:
    """List the devices visible to the configured client."""
    state = _get_state(ctx)
    try:
        devices = state.pipeline.list_devices()
    except RelayError as exc:
        _abort(exc)
    render_devices(devices)


if __name__ == "__main__":
    app()

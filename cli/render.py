from __future__ import annotations

from typing import Any, Iterable, Sequence

import typer

from models.records import FormSubmission, RelayResult
from models.schemas import Device


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_devices(devices: Sequence[Device]) -> None:
    echo_heading("Devices")
    if not devices:
        typer.echo("No device found.")
        return
    for device in devices:
        typer.echo(f"  - {device.name} ({device.id})")


def render_submission(submission: FormSubmission) -> None:
    echo_heading("Form Fields")
    echo_key_values(submission.fields)


def render_result(result: RelayResult) -> None:
    echo_heading("Relay Result")
    echo_key_values(
        [
            ("thing_id", result.thing_id),
            ("token_expires_at", result.token_expires_at.isoformat()),
            ("devices", ", ".join(result.device_names) or "none"),
            ("sample_count", result.sample_count),
            ("mean_value", result.mean_value),
        ]
    )

    typer.echo()
    render_submission(result.submission)

    typer.echo()
    echo_heading("Submission")
    if result.forward is None:
        typer.echo("Not sent (dry run).")
    elif result.forward.is_success:
        typer.secho(f"Response status: {result.forward.status_line}", fg=typer.colors.GREEN)
    else:
        typer.secho(f"Response status: {result.forward.status_line}", fg=typer.colors.YELLOW)

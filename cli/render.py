from __future__ import annotations

from typing import Any, Iterable

import typer

from models.records import NormalizedSeries
from services.admin import ActionResult


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_series(series: NormalizedSeries) -> None:
    echo_heading("Temperature History")
    if not len(series):
        typer.echo("No samples recorded.")
        return

    width = max(len("date"), *(len(category) for category in series.categories))
    typer.echo(f"{'date'.ljust(width)}  temperature")
    for category, value in zip(series.categories, series.values):
        typer.echo(f"{category.ljust(width)}  {value:.2f}")
    typer.echo()
    echo_key_values(
        [
            ("samples", len(series)),
            ("min", f"{min(series.values):.2f}"),
            ("max", f"{max(series.values):.2f}"),
        ]
    )


def render_action_result(result: ActionResult) -> None:
    if result.succeeded:
        typer.secho(f"{result.action.value}: done ({result.detail})", fg=typer.colors.GREEN)
        return
    typer.secho(
        f"{result.action.value}: FAILED ({result.detail})",
        fg=typer.colors.RED,
        err=True,
    )

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import DeviceClient
from cli.config import CLIConfig, load_config
from cli.render import render_action_result, render_series
from logging_config import configure_logging
from services.admin import AdminAction
from services.history import HistoryFetchError
from services.live import ListenerState


@dataclass
class CLIState:
    config: CLIConfig
    client: DeviceClient


app = typer.Typer(
    help="Inspect and administer a networked temperature sensor.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    device_url: Optional[str] = typer.Option(
        None,
        "--device-url",
        "-d",
        help="Device base URL (defaults to DEVICE_BASE_URL env or http://ddev-esp32.local).",
    ),
    live_url: Optional[str] = typer.Option(
        None,
        "--live-url",
        help="Live WebSocket URL (defaults to DEVICE_LIVE_URL env or <device-url>/wsden).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a device request times out.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging("WARNING")
    config = load_config(device_url=device_url, live_url=live_url, timeout=timeout)
    client = DeviceClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("history")
def history_command(ctx: typer.Context) -> None:
    """Print the device's historical temperature log."""
    state = _get_state(ctx)
    try:
        series = state.client.fetch_series()
    except HistoryFetchError as exc:
        typer.secho(f"Could not load history: {exc.reason}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_series(series)


@app.command("live")
def live_command(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Stop after this many readings.",
    ),
) -> None:
    """Print live readings as the device pushes them."""
    state = _get_state(ctx)
    typer.echo(f"Listening on {state.config.live_url} ...")
    final_state = state.client.stream_live(typer.echo, count=count)
    if final_state is ListenerState.error:
        typer.secho("Live channel failed.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _run_action(ctx: typer.Context, action: AdminAction) -> None:
    state = _get_state(ctx)
    result = state.client.run_action(action)
    render_action_result(result)
    if not result.succeeded:
        raise typer.Exit(code=1)


@app.command("clear-network")
def clear_network_command(ctx: typer.Context) -> None:
    """Erase the network configuration stored on the device."""
    _run_action(ctx, AdminAction.clear_network_config)


@app.command("clear-datalog")
def clear_datalog_command(ctx: typer.Context) -> None:
    """Erase the device's historical data log."""
    _run_action(ctx, AdminAction.clear_data_log)

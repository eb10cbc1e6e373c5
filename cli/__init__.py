"""Command line client for a networked temperature sensor."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# ``cli.app`` must keep resolving to the module rather than the Typer
# instance; tests patch ``cli.app.DeviceClient`` through that path.

__all__ = []

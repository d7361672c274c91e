"""CLI package for interacting with the sensor reading service."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer application lives in ``cli.app``; exporting it here would shadow
# the module path that tests patch (``cli.app.ApiClient``).

__all__ = []

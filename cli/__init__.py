"""Command-line entry point for the WebTrak noise downloader."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer application lives in ``cli.app``; tests patch collaborators on
# that module path, so the package root must not shadow it.

__all__ = []

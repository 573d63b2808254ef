"""Helpers shared by CLI command modules."""

import asyncio
from collections.abc import Coroutine
from datetime import date, datetime
from typing import Any, TypeVar

import typer

from spacedrill.application.config import AppConfig, resolve_config
from spacedrill.domain.errors import SpacedrillError

T = TypeVar("T")


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    """Resolve config, letting explicitly passed CLI options win."""
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def _as_date(value: datetime | None, default: date | None = None) -> date:
    if value is None:
        return default or date.today()
    return value.date()


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning domain/store errors into a red message and exit code 1."""
    try:
        return asyncio.run(coro)
    except SpacedrillError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

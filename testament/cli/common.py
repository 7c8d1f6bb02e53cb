"""Shared I/O helpers for the CLI commands."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import typer

from ..errors import TestamentError
from ..utils.bytes import from_hex


def emit(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def fail(err: TestamentError, exit_code: int = 1) -> NoReturn:
    typer.echo(json.dumps({"error": err.to_dict()}), err=True)
    raise typer.Exit(exit_code)


def read_source(source: str) -> str:
    """Read a file argument, ``-`` meaning stdin."""
    if source == "-":
        return sys.stdin.read()
    try:
        with open(source, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        typer.echo(f"Cannot read {source}: {e}", err=True)
        raise typer.Exit(1)


def load_json(source: str) -> Any:
    try:
        return json.loads(read_source(source))
    except json.JSONDecodeError as e:
        typer.echo(f"Invalid JSON in {source}: {e}", err=True)
        raise typer.Exit(1)


def parse_hex(value: str, name: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError:
        typer.echo(f"Error: {name} is not valid hex", err=True)
        raise typer.Exit(1)

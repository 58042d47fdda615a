"""
User-facing output.

Human readable messages and tables go through rich consoles; ``json`` writes
machine readable output to stdout. Errors go to stderr.
"""

from __future__ import annotations

import json as _json
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def success(message: str) -> None:
    console.print(Text.assemble(("✓ ", "green"), message), soft_wrap=True)


def info(message: str) -> None:
    console.print(message, markup=False, soft_wrap=True)


def error(message: str) -> None:
    err_console.print(Text.assemble(("✗ ", "red"), message), soft_wrap=True)


def transcode_progress(attempt: int, max_attempts: int) -> None:
    """Poll progress on stderr so ``--json`` output stays clean."""
    if attempt == 1:
        err_console.print("Waiting for transcoding...", markup=False)
    elif attempt % 12 == 0:
        err_console.print(f"Still transcoding (check {attempt}/{max_attempts})...", markup=False)


def table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    t = Table(*headers)
    for row in rows:
        t.add_row(*(Text("" if cell is None else str(cell)) for cell in row))
    console.print(t)


def json(data: Any) -> None:
    console.print(_json.dumps(data, indent=2, default=str), markup=False, soft_wrap=True)


def format_duration(seconds: float) -> str:
    """``m:ss`` rendering of a duration in seconds."""
    total = round(seconds)
    return f"{total // 60}:{total % 60:02d}"

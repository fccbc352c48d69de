"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any

import typer


def print_table(headers: list[str], rows: list[list[Any]], *, json_mode: bool = False) -> None:
    """Print rows as aligned text columns, or as a JSON array of objects."""
    if json_mode:
        print(json.dumps([dict(zip(headers, row)) for row in rows], indent=2, default=str))
        return

    cells = [headers] + [[str(v) for v in row] for row in rows]
    widths = [max(len(line[i]) for line in cells) for i in range(len(headers))]
    for n, line in enumerate(cells):
        print("  ".join(v.ljust(w) for v, w in zip(line, widths)).rstrip())
        if n == 0:
            print("  ".join("-" * w for w in widths))


def print_object(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print a single object as JSON or key-value pairs."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return

    for k, v in data.items():
        print(f"{k}: {v}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)


def parse_pairs(items: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated KEY=VALUE options."""
    result: dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"Invalid {option} (expected KEY=VALUE): {item}")
        k, v = item.split("=", 1)
        result[k.strip()] = v
    return result

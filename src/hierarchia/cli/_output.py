"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable, Mapping
from typing import Any


def _dump(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _joined(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def print_table(headers: list[str], rows: list[list[Any]], *, json_mode: bool = False) -> None:
    """Print rows as aligned columns (text) or a JSON array of objects."""
    if json_mode:
        _dump([dict(zip(headers, row)) for row in rows])
        return
    if not rows:
        return

    cells = [[str(v) for v in row] for row in rows]
    widths = [max(len(h), *(len(row[i]) for row in cells)) for i, h in enumerate(headers)]

    def line(values: list[str]) -> str:
        return "  ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

    print(line(headers))
    print(line(["-" * w for w in widths]))
    for row in cells:
        print(line(row))


def print_object(data: dict[str, Any] | list[Any], *, json_mode: bool = False) -> None:
    """Print a single object or list as JSON or key-value pairs."""
    if json_mode:
        _dump(data)
        return

    if isinstance(data, list):
        for item in data:
            print(f"  {item}")
        return

    for k, v in data.items():
        print(f"{k}: {_joined(v)}")


def print_values(values: Iterable[Any]) -> None:
    """One value per line, for piping into other tools."""
    for value in values:
        print(value)


def print_item(item_id: str, fields: Mapping[str, list[Any]]) -> None:
    """An index item followed by its indented field values."""
    print(item_id)
    for field_id, values in fields.items():
        print(f"  {field_id}: {_joined(values)}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)

"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any


def print_object(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print a mapping as JSON or ``key: value`` lines."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return
    for k, v in data.items():
        print(f"{k}: {v}")


def print_documents(docs: list[dict[str, Any]], *, json_mode: bool = False) -> None:
    """Print documents as a JSON array, or one compact JSON line per document."""
    if json_mode:
        print(json.dumps(docs, indent=2, default=str))
        return
    for doc in docs:
        print(json.dumps(doc, default=str, sort_keys=True))


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)

"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import pytest
from typer.testing import CliRunner

from docshelf import Shelf
from docshelf.cli import app

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_db(tmp_path):
    """Create a temp DB path for the CLI to open."""
    return str(tmp_path / "cli_test.db")


@pytest.fixture
def seeded_db(cli_db):
    """Create a DB with a few people documents."""
    with Shelf(cli_db) as shelf:
        people = shelf.collection("people")
        people.update("p1", {"name": "Alice", "age": 30, "tier": "gold"})
        people.update("p2", {"name": "Bob", "age": 25, "tier": "silver"})
        people.update("p3", {"name": "Carol", "age": 41, "tier": "gold"})
    return cli_db


@pytest.fixture
def invoke(runner) -> Callable[..., "Result"]:
    """Invoke the CLI against a database path."""

    def _invoke(args: list[str], db_path: str | None = None) -> "Result":
        if db_path:
            # Inject --db before subcommand
            args = ["--db", db_path] + args
        return runner.invoke(app, args, catch_exceptions=False)

    return _invoke

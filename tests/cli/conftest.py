"""Shared fixtures for CLI tests."""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from hierarchia import SchemaRegistry, SqliteEntityStore
from hierarchia.cli import app
from tests.models import ALL_TYPES, Collection

if TYPE_CHECKING:
    from click.testing import Result

MODELS = ["--models", "tests.models"]


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def index_file(tmp_path):
    path = tmp_path / "collections.yaml"
    path.write_text(
        textwrap.dedent("""\
        id: collections
        label: Collections
        datasource: Collection
        fields:
          ancestors:
            label: Ancestors
            property_path: member_of
          title:
            label: Title
    """)
    )
    return str(path)


@pytest.fixture
def cli_db(tmp_path):
    """Temp DB path for the entity store."""
    return str(tmp_path / "cli_test.db")


@pytest.fixture
def seeded_db(cli_db):
    """A DB holding the A/B/C/D collections."""
    with SqliteEntityStore(cli_db, SchemaRegistry(ALL_TYPES)) as store:
        store.put_many(
            [
                Collection(id="A", title="Root"),
                Collection(id="B", member_of=["A"]),
                Collection(id="C", additional_member_of=["A"]),
                Collection(id="D", member_of=["C"]),
            ]
        )
    return cli_db


def invoke(runner: CliRunner, args: list[str], *, json_output: bool = False) -> "Result":
    """Invoke the CLI with the test models, optionally in JSON mode."""
    prefix = ["--json"] if json_output else []
    return runner.invoke(app, prefix + args + MODELS, catch_exceptions=False)

"""CLI helpers for loading models, indexes and stores."""

from __future__ import annotations

import os

import typer

from hierarchia.cli import _exitcodes as ec
from hierarchia.cli._loader import load_models
from hierarchia.cli._output import print_error
from hierarchia.errors import HierarchiaError
from hierarchia.index import Index, load_index
from hierarchia.schema import SchemaRegistry
from hierarchia.store import SqliteEntityStore

MODELS_HELP = "Python import path for entity models"
MODELS_PATH_HELP = "Filesystem path to entity models"


def registry_or_exit(models: str | None, models_path: str | None) -> SchemaRegistry:
    try:
        return load_models(models, models_path)
    except Exception as e:
        print_error(f"Failed to load models: {e}")
        raise typer.Exit(ec.USAGE_ERROR)


def index_or_exit(path: str, registry: SchemaRegistry) -> Index:
    try:
        return load_index(path, registry)
    except (OSError, HierarchiaError) as e:
        print_error(f"Failed to load index: {e}")
        raise typer.Exit(ec.USAGE_ERROR)


def store_or_exit(
    db: str, registry: SchemaRegistry, *, must_exist: bool = True
) -> SqliteEntityStore:
    if must_exist and db != ":memory:" and not os.path.exists(db):
        print_error(f"Database not found: {db}")
        raise typer.Exit(ec.DATABASE_ERROR)
    try:
        return SqliteEntityStore(db, registry)
    except Exception as e:
        print_error(f"Cannot open entity store: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)

"""hierarchia load — import entities into a SQLite entity store."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from hierarchia.cli import _exitcodes as ec
from hierarchia.cli._output import print_error, print_object
from hierarchia.cli._runtime import MODELS_HELP, MODELS_PATH_HELP, registry_or_exit, store_or_exit
from hierarchia.errors import UnknownEntityTypeError
from hierarchia.schema import SchemaRegistry
from hierarchia.types import Entity


def _build_entities(records: list[Any], registry: SchemaRegistry) -> list[Entity]:
    entities = []
    for i, record in enumerate(records):
        if not isinstance(record, dict) or "type" not in record:
            raise ValueError(f"Record {i} must be a mapping with a 'type' key")
        data = dict(record)
        cls = registry.entity_type(str(data.pop("type")))
        entities.append(cls(**data))
    return entities


def load_cmd(
    source: str = typer.Argument(..., help="YAML or JSON list of entity records"),
    db: str = typer.Option("hierarchia.db", "--db", help="SQLite entity store"),
    models: Optional[str] = typer.Option(None, "--models", help=MODELS_HELP),
    models_path: Optional[str] = typer.Option(None, "--models-path", help=MODELS_PATH_HELP),
) -> None:
    """Load entity records (each with a 'type' key) into the store."""
    from hierarchia.cli import state

    registry = registry_or_exit(models, models_path)
    try:
        records = yaml.safe_load(Path(source).read_text(encoding="utf-8")) or []
        if not isinstance(records, list):
            raise ValueError(f"{source} must contain a list of records")
        entities = _build_entities(records, registry)
    except (OSError, ValueError, ValidationError, UnknownEntityTypeError, yaml.YAMLError) as e:
        print_error(f"Failed to read {source}: {e}")
        raise typer.Exit(ec.GENERAL_ERROR)

    store = store_or_exit(db, registry, must_exist=False)
    try:
        count = store.put_many(entities)
    finally:
        store.close()
    print_object({"loaded": count, "db": db}, json_mode=state.json_output)

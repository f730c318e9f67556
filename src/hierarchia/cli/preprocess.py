"""hierarchia preprocess — build index items and add ancestors to them."""

from __future__ import annotations

from typing import Optional

import typer

from hierarchia.cli import _exitcodes as ec
from hierarchia.cli._output import print_error, print_item, print_object
from hierarchia.cli._runtime import (
    MODELS_HELP,
    MODELS_PATH_HELP,
    index_or_exit,
    registry_or_exit,
    store_or_exit,
)
from hierarchia.configuration import YamlConfigurationStore
from hierarchia.errors import HierarchiaError
from hierarchia.processor import AncestorsProcessor


def preprocess_cmd(
    index_file: str = typer.Option(..., "--index", help="Index description (YAML)"),
    hierarchy: str = typer.Option(
        "hierarchy.yaml", "--hierarchy", help="Saved hierarchy configuration"
    ),
    db: str = typer.Option("hierarchia.db", "--db", help="SQLite entity store"),
    models: Optional[str] = typer.Option(None, "--models", help=MODELS_HELP),
    models_path: Optional[str] = typer.Option(None, "--models-path", help=MODELS_PATH_HELP),
) -> None:
    """Print the field values of every datasource entity after ancestor merging."""
    from hierarchia.cli import state

    registry = registry_or_exit(models, models_path)
    index = index_or_exit(index_file, registry)
    try:
        configuration = YamlConfigurationStore(hierarchy).load()
    except Exception as e:
        print_error(f"Failed to load hierarchy configuration: {e}")
        raise typer.Exit(ec.USAGE_ERROR)
    if configuration.is_empty():
        print_error(f"No hierarchy fields configured in {hierarchy}")
        raise typer.Exit(ec.USAGE_ERROR)

    store = store_or_exit(db, registry)
    try:
        processor = AncestorsProcessor(index, store, configuration, config=state.config)
        items = [index.create_item(e, store) for e in store.iter_entities(index.datasource)]
        processor.preprocess_index_items(items)
    except HierarchiaError as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()

    if state.json_output:
        print_object([{"id": i.item_id, "fields": i.values()} for i in items], json_mode=True)
    else:
        for item in items:
            print_item(item.item_id, item.values())

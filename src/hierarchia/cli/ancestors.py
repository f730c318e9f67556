"""hierarchia ancestors — resolve the ancestors of a single entity."""

from __future__ import annotations

from typing import Optional

import typer

from hierarchia.cli import _exitcodes as ec
from hierarchia.cli._output import print_error, print_object, print_values
from hierarchia.cli._runtime import MODELS_HELP, MODELS_PATH_HELP, registry_or_exit, store_or_exit
from hierarchia.errors import HierarchiaError
from hierarchia.resolver import AncestorResolver


def ancestors_cmd(
    entity_type: str = typer.Option(..., "--type", help="Entity type of the start entity"),
    entity_id: str = typer.Option(..., "--id", help="Identifier of the start entity"),
    properties: list[str] = typer.Option(
        ..., "--property", "-p", help="Relation property to follow (repeatable)"
    ),
    db: str = typer.Option("hierarchia.db", "--db", help="SQLite entity store"),
    models: Optional[str] = typer.Option(None, "--models", help=MODELS_HELP),
    models_path: Optional[str] = typer.Option(None, "--models-path", help=MODELS_PATH_HELP),
) -> None:
    """Print every ancestor reachable through any of the given relation properties."""
    from hierarchia.cli import state

    registry = registry_or_exit(models, models_path)
    store = store_or_exit(db, registry)
    try:
        start = store.resolve_entity(registry.canonical_type_id(entity_type), entity_id)
        if start is None:
            print_error(f"Entity '{entity_type}:{entity_id}' not found")
            raise typer.Exit(ec.GENERAL_ERROR)
        found = AncestorResolver(store, state.config).iter_ancestors(start, properties)
    except HierarchiaError as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()

    if state.json_output:
        print_object({"entity": entity_id, "ancestors": found}, json_mode=True)
    else:
        print_values(found)

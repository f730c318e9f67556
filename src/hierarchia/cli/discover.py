"""hierarchia discover — list hierarchy candidate fields of an index."""

from __future__ import annotations

from typing import Optional

import typer

from hierarchia.cli import _exitcodes as ec
from hierarchia.cli._output import print_error, print_table
from hierarchia.cli._runtime import MODELS_HELP, MODELS_PATH_HELP, index_or_exit, registry_or_exit
from hierarchia.inspector import SchemaInspector


def discover_cmd(
    index_file: str = typer.Option(..., "--index", help="Index description (YAML)"),
    models: Optional[str] = typer.Option(None, "--models", help=MODELS_HELP),
    models_path: Optional[str] = typer.Option(None, "--models-path", help=MODELS_PATH_HELP),
) -> None:
    """Show fields that could carry hierarchy data and their relation properties."""
    from hierarchia.cli import state

    registry = registry_or_exit(models, models_path)
    index = index_or_exit(index_file, registry)

    options = SchemaInspector(state.config).discover(index)
    if not options:
        print_error(f"Index '{index.index_id}' has no hierarchical fields")
        raise typer.Exit(ec.GENERAL_ERROR)

    rows = [
        [field_id, key, label]
        for field_id, field_options in options.items()
        for key, label in field_options.items()
    ]
    print_table(["field", "property", "label"], rows, json_mode=state.json_output)

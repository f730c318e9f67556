"""hierarchia configure — validate and save a hierarchy configuration."""

from __future__ import annotations

from typing import Any, Optional

import typer

from hierarchia.cli import _exitcodes as ec
from hierarchia.cli._output import print_error, print_object
from hierarchia.cli._runtime import MODELS_HELP, MODELS_PATH_HELP, index_or_exit, registry_or_exit
from hierarchia.configuration import YamlConfigurationStore, validate_configuration
from hierarchia.errors import ConfigurationValidationError
from hierarchia.inspector import SchemaInspector


def _parse_selections(select: list[str]) -> dict[str, list[str]]:
    selections: dict[str, list[str]] = {}
    for raw in select:
        field_id, sep, key = raw.partition("=")
        if not sep or not field_id or not key:
            raise typer.BadParameter(f"--select expects FIELD=PROPERTY, got '{raw}'")
        selections.setdefault(field_id, []).append(key)
    return selections


def configure_cmd(
    index_file: str = typer.Option(..., "--index", help="Index description (YAML)"),
    output: str = typer.Option(
        "hierarchy.yaml", "--output", "-o", help="Where to save the configuration"
    ),
    select: list[str] = typer.Option(
        [], "--select", help="FIELD=PROPERTY to walk for FIELD (repeatable)"
    ),
    enable: list[str] = typer.Option([], "--enable", help="Enable FIELD (repeatable)"),
    models: Optional[str] = typer.Option(None, "--models", help=MODELS_HELP),
    models_path: Optional[str] = typer.Option(None, "--models-path", help=MODELS_PATH_HELP),
) -> None:
    """Enable hierarchy fields and choose the relation properties they combine."""
    from hierarchia.cli import state

    selections = _parse_selections(select)
    registry = registry_or_exit(models, models_path)
    index = index_or_exit(index_file, registry)
    options = SchemaInspector(state.config).discover(index)

    submission: dict[str, dict[str, Any]] = {
        field_id: {"enabled": True, "selected": selections.get(field_id, [])}
        for field_id in dict.fromkeys([*enable, *selections])
    }
    try:
        configuration = validate_configuration(options, submission)
    except ConfigurationValidationError as e:
        for error in e.errors:
            print_error(f"{error.field_id}: {error.message}" if error.field_id else error.message)
        raise typer.Exit(ec.VALIDATION_ERROR)

    YamlConfigurationStore(output).save(configuration)
    print_object(
        {"saved": output, **{f"fields.{k}": v for k, v in configuration.fields.items()}},
        json_mode=state.json_output,
    )

"""Hierarchia CLI: operator console for hierarchy discovery and ancestor indexing."""

from __future__ import annotations

from typing import Optional

import typer

from hierarchia.cli import ancestors, configure, discover, load, preprocess
from hierarchia.config import HierarchiaConfig
from hierarchia.observability import setup_logging

app = typer.Typer(
    name="hierarchia",
    help="Hierarchia CLI — discover hierarchy fields and index entity ancestors.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    config: HierarchiaConfig = HierarchiaConfig()
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("hierarchia")
        except Exception:
            v = "unknown"
        print(f"hierarchia {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar="HIERARCHIA_CONFIG",
        help="Runtime config file (YAML)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all hierarchia commands."""
    try:
        if config:
            runtime_config = HierarchiaConfig.from_yaml(config)
        else:
            runtime_config = HierarchiaConfig.from_env()
    except (OSError, ValueError, TypeError) as e:
        raise typer.BadParameter(str(e))

    setup_logging("DEBUG" if verbose else runtime_config.log_level)
    state.config = runtime_config
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="discover")(discover.discover_cmd)
app.command(name="configure")(configure.configure_cmd)
app.command(name="ancestors")(ancestors.ancestors_cmd)
app.command(name="preprocess")(preprocess.preprocess_cmd)
app.command(name="load")(load.load_cmd)


def main() -> None:
    """Entry point for the hierarchia CLI."""
    app()

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from buildmeta_core.config import (
    default_config,
    dump_config,
    load_config,
    merge_defaults,
    property_prefixes,
    validate_config,
)
from buildmeta_core.errors import ConfigError

app = typer.Typer(help="Configuration inspection and validation")


@app.command("show")
def config_show(
    path: Path = typer.Option(Path("."), "--path", "-C", help="Project directory to resolve config from"),
    config: Optional[str] = typer.Option(None, "--config", help="Explicit config file"),
    output_format: str = typer.Option("toml", "--format", help="Output format: toml|json"),
):
    """Print the effective config (defaults merged with the config file)."""
    try:
        effective = merge_defaults(default_config(), load_config(path.resolve(), config))
    except ConfigError as e:
        typer.echo(f"ConfigError: {e}")
        raise typer.Exit(1)

    if output_format == "json":
        typer.echo(json.dumps({"config": effective, "prefixes": property_prefixes(effective)}, indent=2))
    else:
        typer.echo(dump_config(effective), nl=False)


@app.command("validate")
def config_validate(
    path: Path = typer.Option(Path("."), "--path", "-C", help="Project directory to resolve config from"),
    config: Optional[str] = typer.Option(None, "--config", help="Explicit config file"),
):
    """Validate the config; exit 0 if ok, 1 otherwise."""
    try:
        effective = merge_defaults(default_config(), load_config(path.resolve(), config))
    except ConfigError as e:
        typer.echo(f"ConfigError: {e}")
        raise typer.Exit(1)

    errors = validate_config(effective)
    if errors:
        typer.echo("Validation failed:")
        for err in errors:
            typer.echo(f"- {err}")
        raise typer.Exit(1)
    typer.echo("Config is valid")

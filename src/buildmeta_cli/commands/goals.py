"""
goals.py - Commands publishing branch and describe properties.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console

from buildmeta_core.config import get_config_value, load_effective_config, property_prefixes
from buildmeta_core.errors import BuildMetaError
from buildmeta_core.log import configure_logging
from buildmeta_ops.goals import BRANCH, DESCRIBE, GOALS, collect_properties
from buildmeta_ops.properties import OUTPUT_FORMATS, render_properties, write_properties

console = Console()
err_console = Console(stderr=True)


def _run_goals(
    goals: Sequence[str],
    path: Path,
    head: Optional[str],
    prefix: Optional[List[str]],
    abbrev: Optional[int],
    output_format: str,
    out: Optional[Path],
    config: Optional[str],
    log_level: Optional[str],
) -> None:
    if output_format not in OUTPUT_FORMATS:
        err_console.print(f"[red]error:[/red] unknown format {output_format!r}", soft_wrap=True)
        raise typer.Exit(2)

    project_dir = path.resolve()
    try:
        effective = load_effective_config(project_dir, config)
        configure_logging(log_level or get_config_value(effective, "log.verbosity", "info"))
        properties, _ = collect_properties(
            project_dir / get_config_value(effective, "git.dir", "."),
            prefixes=property_prefixes(effective, prefix),
            goals=goals,
            head=head or get_config_value(effective, "git.head", "HEAD"),
            abbrev_length=abbrev or get_config_value(effective, "describe.abbrev", 7),
        )
    except BuildMetaError as exc:
        err_console.print(f"[red]error:[/red] {exc}", soft_wrap=True)
        raise typer.Exit(1)

    if out is None:
        typer.echo(render_properties(properties, output_format), nl=False)
        return
    write_properties(properties, out, output_format)
    console.print(f"[green]Wrote {len(properties)} properties to {out}[/green]", soft_wrap=True)


def branch(
    path: Path = typer.Option(Path("."), "--path", "-C", help="Project directory (inside the Git work tree)"),
    prefix: Optional[List[str]] = typer.Option(None, "--prefix", help="Additional property prefix (repeatable)"),
    output_format: str = typer.Option("properties", "--format", "-f", help="Output format: properties|json|env"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write to this file instead of stdout"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file (default: buildmeta.toml or pyproject.toml)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="debug|info|warning|error|off"),
):
    """Publish the checked out branch as <prefix>.branch."""
    _run_goals((BRANCH,), path, None, prefix, None, output_format, out, config, log_level)


def describe(
    path: Path = typer.Option(Path("."), "--path", "-C", help="Project directory (inside the Git work tree)"),
    head: Optional[str] = typer.Option(None, "--head", help="Ref expression to describe, e.g. HEAD~1"),
    prefix: Optional[List[str]] = typer.Option(None, "--prefix", help="Additional property prefix (repeatable)"),
    abbrev: Optional[int] = typer.Option(None, "--abbrev", min=4, max=40, help="Minimum abbreviated id length"),
    output_format: str = typer.Option("properties", "--format", "-f", help="Output format: properties|json|env"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write to this file instead of stdout"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file (default: buildmeta.toml or pyproject.toml)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="debug|info|warning|error|off"),
):
    """Publish the nearest tag as <prefix>.tag.name and <prefix>.tag.describe."""
    _run_goals((DESCRIBE,), path, head, prefix, abbrev, output_format, out, config, log_level)


def run(
    path: Path = typer.Option(Path("."), "--path", "-C", help="Project directory (inside the Git work tree)"),
    head: Optional[str] = typer.Option(None, "--head", help="Ref expression to describe, e.g. HEAD~1"),
    prefix: Optional[List[str]] = typer.Option(None, "--prefix", help="Additional property prefix (repeatable)"),
    abbrev: Optional[int] = typer.Option(None, "--abbrev", min=4, max=40, help="Minimum abbreviated id length"),
    output_format: str = typer.Option("properties", "--format", "-f", help="Output format: properties|json|env"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write to this file instead of stdout"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file (default: buildmeta.toml or pyproject.toml)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="debug|info|warning|error|off"),
):
    """Run every goal; nothing is published unless all of them succeed."""
    _run_goals(GOALS, path, head, prefix, abbrev, output_format, out, config, log_level)

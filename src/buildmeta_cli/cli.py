from __future__ import annotations

import typer

from .commands import config_cmd
from .commands import goals as goals_cmd

app = typer.Typer(help="buildmeta: publish Git branch and describe metadata as build properties")

app.command(name="branch")(goals_cmd.branch)
app.command(name="describe")(goals_cmd.describe)
app.command(name="run")(goals_cmd.run)
app.add_typer(config_cmd.app, name="config", help="Configuration inspection and validation")


def main():
    app()

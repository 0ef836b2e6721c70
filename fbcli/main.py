"""CLI entry-point."""

from __future__ import annotations

import sys

import typer

from fbcli import __version__
from fbcli.commands import plugin, repo
from fbcli.utils.logging import setup_logging

app = typer.Typer(
    no_args_is_help=True,
    help="Far Beyond developer CLI: repository fleet management and plugin deployment.",
)
app.add_typer(repo.app, name="repo")
app.add_typer(plugin.app, name="plugin")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines."),
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show the version and exit.",
    ),
) -> None:
    setup_logging("DEBUG" if verbose else None, json_logs or None)


def run() -> None:
    # Windows consoles default to a legacy code page
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()


if __name__ == "__main__":
    run()

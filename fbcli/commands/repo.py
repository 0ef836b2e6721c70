"""``fbcli repo``: fleet list, status, update and clone."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from fbcli.commands.render import handle_errors, print_report
from fbcli.models.repos import FleetReport
from fbcli.services.clone import RepositoryCloner
from fbcli.services.fleet import FleetSyncEngine

app = typer.Typer(no_args_is_help=True, help="Repository fleet management.")

_console = Console()
_err_console = Console(stderr=True)

ROOT_HELP = "Directory holding the working copies (default: current directory)."


def _finish(report: FleetReport) -> None:
    print_report(_console, report)
    raise typer.Exit(report.exit_code)


@app.command("list")
def list_repos(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
    public_only: bool = typer.Option(False, "--public-only", help="Only repositories on public hosts."),
) -> None:
    """List the organization's working copies."""
    with handle_errors(_err_console):
        report = FleetSyncEngine().list(root or Path.cwd(), public_only=public_only)
    _finish(report)


@app.command()
def status(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
) -> None:
    """Show branch, cleanliness and ahead/behind for every repository."""
    with handle_errors(_err_console):
        report = FleetSyncEngine().status(root or Path.cwd())
    _finish(report)


@app.command()
def update(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help=ROOT_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change without touching anything."),
) -> None:
    """Fast-forward every clean, non-diverged repository to its upstream."""
    with handle_errors(_err_console):
        report = FleetSyncEngine().update(root or Path.cwd(), dry_run=dry_run)
    _finish(report)


@app.command()
def clone(
    name: str = typer.Argument(..., help="Repository name inside the organization."),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Target directory (default: ./NAME)."),
    ssh: bool = typer.Option(False, "--ssh", help="Clone over SSH instead of HTTPS."),
    token: Optional[str] = typer.Option(None, "--token", help="Access token for private repositories."),
) -> None:
    """Clone one organization repository."""
    with handle_errors(_err_console):
        handle = RepositoryCloner().clone(name, path, ssh=ssh, token=token)
    _console.print(f"[green]Cloned[/green] {handle.remote_url} into {handle.path}")

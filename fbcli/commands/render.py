"""Rich rendering of fleet reports and build results."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer
from rich.console import Console
from rich.table import Table

from fbcli.errors import FbcliError
from fbcli.models.artifacts import BuildResult, DeploymentResult
from fbcli.models.repos import FleetReport, OutcomeKind

_KIND_STYLES: dict[OutcomeKind, str] = {
    OutcomeKind.listed: "white",
    OutcomeKind.ok: "green",
    OutcomeKind.up_to_date: "blue",
    OutcomeKind.updated: "green",
    OutcomeKind.would_update: "cyan",
    OutcomeKind.skipped_dirty: "yellow",
    OutcomeKind.skipped_diverged: "yellow",
    OutcomeKind.no_upstream: "dim",
    OutcomeKind.error: "red",
}


def build_report_table(report: FleetReport) -> Table:
    title = f"{report.operation}: {report.root}"
    if report.dry_run:
        title += " (dry run)"
    table = Table(title=title)
    table.add_column("Repository", style="cyan", no_wrap=True)
    if report.operation == "list":
        table.add_column("Visibility", style="white")
        table.add_column("Remote", style="magenta")
        for e in report.entries:
            if e.is_error:
                table.add_row(e.name, "[red]error[/red]", e.error)
                continue
            table.add_row(e.name, "public" if e.public else "private/unknown", e.detail)
        return table

    table.add_column("Branch", style="green")
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Details", style="dim")
    for e in report.entries:
        style = _KIND_STYLES[e.kind]
        branch = e.status.branch if e.status and not e.is_error else ""
        table.add_row(
            e.name,
            branch,
            f"[{style}]{e.kind.value}[/{style}]",
            e.error or e.detail,
        )
    return table


def print_report(console: Console, report: FleetReport) -> None:
    if not report.entries:
        console.print(f"[yellow]No repositories found in {report.root}[/yellow]")
        return
    console.print(build_report_table(report))
    summary = f"{report.succeeded} ok, {report.failed} failed"
    console.print(f"[green]{summary}[/green]" if report.ok else f"[red]{summary}[/red]")


def print_deployment(console: Console, result: DeploymentResult) -> None:
    verb = "Replaced" if result.overwritten else "Deployed"
    console.print(
        f"[green]{verb}[/green] {result.destination} ({result.bytes_copied} bytes)",
    )


def print_build(console: Console, result: BuildResult) -> None:
    console.print(f"[green]Built[/green] {result.package_name} -> {result.artifact.path}")
    if result.deployment is not None:
        print_deployment(console, result.deployment)


@contextmanager
def handle_errors(console: Console) -> Iterator[None]:
    """Map core errors to exit status 1 and operator interrupts to 130."""
    try:
        yield
    except FbcliError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(130) from None

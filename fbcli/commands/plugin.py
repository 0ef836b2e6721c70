"""``fbcli plugin``: build and deploy host plugins."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from fbcli.commands.render import handle_errors, print_build, print_deployment
from fbcli.config import settings
from fbcli.services.artifacts import ArtifactResolver
from fbcli.services.builder import PluginBuilder
from fbcli.services.deployer import PluginDeployer

app = typer.Typer(no_args_is_help=True, help="Plugin build and deployment.")

_console = Console()
_err_console = Console(stderr=True)


@app.command()
def build(
    plugin: Optional[str] = typer.Argument(None, help="Plugin name (required in the host repository root)."),
    horizon_path: Optional[Path] = typer.Option(
        None, "--horizon-path", help="Host server path (default: ../Horizon next to the plugin).",
    ),
    no_copy: bool = typer.Option(False, "--no-copy", help="Skip copying into the host plugins directory."),
) -> None:
    """Release-build a plugin and deploy it to the host."""
    with handle_errors(_err_console):
        result = PluginBuilder().build(Path.cwd(), plugin, host_path=horizon_path, no_copy=no_copy)
    print_build(_console, result)


@app.command()
def deploy(
    build_dir: Path = typer.Argument(..., help="Build output directory, e.g. target/release."),
    horizon_path: Optional[Path] = typer.Option(
        None, "--horizon-path", help="Host server path (default: ../Horizon from the current directory).",
    ),
    package: Optional[str] = typer.Option(None, "--package", help="Only consider this package's library."),
) -> None:
    """Deploy an already-built plugin library."""
    with handle_errors(_err_console):
        artifact = ArtifactResolver().resolve(build_dir, package_name=package)
        host = horizon_path or Path("..") / settings.fbcli_host_name
        result = PluginDeployer().deploy(artifact, host)
    print_deployment(_console, result)

"""Atomic deployment of a plugin library into ``<host>/plugins``.

The library is written to a temporary file in the destination directory and
renamed into place, so a host watching the directory only ever sees the old
complete file or the new complete file.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator

from fbcli.errors import DestinationUnavailable, IoError
from fbcli.models.artifacts import BuildArtifact, DeploymentResult
from fbcli.utils.logging import get_logger

log = get_logger(__name__)

PLUGINS_DIR = "plugins"


@contextlib.contextmanager
def staging_file(directory: Path, final_name: str) -> Iterator[tuple[BinaryIO, Path]]:
    """Temporary file next to the destination, removed unless renamed away."""
    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{final_name}.", suffix=".partial")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            yield fh, tmp_path
    finally:
        with contextlib.suppress(FileNotFoundError):
            tmp_path.unlink()


class PluginDeployer:
    def plugins_dir(self, host_path: Path | str) -> Path:
        return Path(host_path).expanduser() / PLUGINS_DIR

    def check_destination(self, plugins_dir: Path) -> None:
        if not plugins_dir.exists():
            raise DestinationUnavailable(
                plugins_dir, "plugins directory does not exist; create it or pass the correct host path",
            )
        if not plugins_dir.is_dir():
            raise DestinationUnavailable(plugins_dir, "exists but is not a directory")
        if not os.access(plugins_dir, os.W_OK | os.X_OK):
            raise DestinationUnavailable(plugins_dir, "plugins directory is not writable")

    def deploy(self, artifact: BuildArtifact, host_path: Path | str) -> DeploymentResult:
        """Copy *artifact* to ``<host_path>/plugins/<filename>``, replacing any old copy."""
        plugins = self.plugins_dir(host_path)
        self.check_destination(plugins)
        destination = plugins / artifact.filename
        overwritten = destination.exists()

        try:
            src = artifact.path.open("rb")
        except OSError as exc:
            raise IoError(artifact.path, f"cannot read build artifact: {exc.strerror or exc}") from exc

        with src:
            try:
                with staging_file(plugins, artifact.filename) as (out, tmp_path):
                    shutil.copyfileobj(src, out)
                    out.flush()
                    os.fsync(out.fileno())
                    copied = out.tell()
                    out.close()
                    shutil.copymode(artifact.path, tmp_path)
                    os.replace(tmp_path, destination)
            except PermissionError as exc:
                raise DestinationUnavailable(plugins, f"write failed: {exc.strerror or exc}") from exc
            except OSError as exc:
                raise IoError(destination, f"copy failed: {exc.strerror or exc}") from exc

        if overwritten:
            log.warning("deploy.overwritten", destination=str(destination))
        log.info("deploy.done", source=str(artifact.path), destination=str(destination), bytes=copied)
        return DeploymentResult(
            source=artifact.path,
            destination=destination,
            bytes_copied=copied,
            overwritten=overwritten,
        )

"""Locate the single compiled plugin library in a build-output directory."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from fbcli.errors import ArtifactAmbiguous, ArtifactNotFound, IoError
from fbcli.models.artifacts import ArtifactClass, BuildArtifact
from fbcli.utils.logging import get_logger

log = get_logger(__name__)


def _normalise(name: str) -> str:
    return name.replace("-", "_").lower()


def _matches_package(path: Path, package_name: str) -> bool:
    stem = _normalise(path.stem)
    pkg = _normalise(package_name)
    return stem in (pkg, f"lib{pkg}")


class ArtifactResolver:
    """Strict single-match resolver: zero or several candidates is an error."""

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    @property
    def artifact_class(self) -> ArtifactClass:
        return ArtifactClass.for_platform(self.platform)

    def candidates(self, build_dir: Path, package_name: Optional[str] = None) -> list[Path]:
        ext = self.artifact_class.extension
        try:
            files = [p for p in build_dir.iterdir() if p.is_file()]
        except OSError as exc:
            raise IoError(build_dir, f"cannot list build directory: {exc.strerror or exc}") from exc
        found = [p for p in files if p.suffix.lower() == ext]
        if package_name:
            found = [p for p in found if _matches_package(p, package_name)]
        return sorted(found)

    def resolve(self, build_dir: Path | str, package_name: Optional[str] = None) -> BuildArtifact:
        build_path = Path(build_dir)
        if not build_path.is_dir():
            raise ArtifactNotFound(build_path, "build output directory not found")

        found = self.candidates(build_path, package_name)
        wanted = f"*{self.artifact_class.extension}"
        if package_name:
            wanted = f"{package_name} {wanted}"
        if not found:
            raise ArtifactNotFound(build_path, f"no {wanted} library found")
        if len(found) > 1:
            raise ArtifactAmbiguous(build_path, found)

        artifact = BuildArtifact(path=found[0].resolve(), artifact_class=self.artifact_class)
        log.info("artifact.resolved", path=str(artifact.path), kind=artifact.artifact_class.value)
        return artifact

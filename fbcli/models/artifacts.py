"""Build artifact and deployment models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ArtifactClass(str, Enum):
    windows = "dynamic-library-windows"
    unix = "dynamic-library-unix"
    macos = "dynamic-library-macos"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @classmethod
    def for_platform(cls, platform: str) -> ArtifactClass:
        """Map a ``sys.platform`` style identifier to its library convention."""
        if platform.startswith(("win32", "cygwin", "msys")):
            return cls.windows
        if platform.startswith("darwin"):
            return cls.macos
        return cls.unix


_EXTENSIONS = {
    ArtifactClass.windows: ".dll",
    ArtifactClass.unix: ".so",
    ArtifactClass.macos: ".dylib",
}


class BuildArtifact(BaseModel):
    """The single canonical compiled plugin library of a build directory."""

    model_config = ConfigDict(frozen=True)

    path: Path
    artifact_class: ArtifactClass

    @property
    def filename(self) -> str:
        return self.path.name


class DeploymentResult(BaseModel):
    source: Path
    destination: Path
    bytes_copied: int = Field(ge=0)
    overwritten: bool = False


class BuildResult(BaseModel):
    """Result of building (and optionally deploying) one plugin crate."""

    crate_dir: Path
    package_name: str
    target_dir: Path
    artifact: BuildArtifact
    deployment: Optional[DeploymentResult] = None

"""Error kinds raised by the core.

Every message names the path, repository or executable involved so the
operator can act on it without re-running in a debug mode.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class FbcliError(Exception):
    """Base class for all errors the CLI reports to the operator."""


class IoError(FbcliError):
    """A filesystem location could not be read or used."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class ProcessFailure(FbcliError):
    """A subprocess could not be launched or exited non-zero."""

    def __init__(
        self,
        args: Sequence[str],
        reason: str,
        *,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        self.argv = list(args)
        self.reason = reason
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"{' '.join(self.argv)}: {reason}"
        if stderr.strip():
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class ProcessTimeout(ProcessFailure):
    """A subprocess ran longer than its timeout and was killed."""

    def __init__(self, args: Sequence[str], timeout: float) -> None:
        self.timeout = timeout
        super().__init__(args, f"timed out after {timeout:g}s and was killed")


class ArtifactNotFound(FbcliError):
    """No build artifact matches the platform convention."""

    def __init__(self, build_dir: Path | str, reason: str) -> None:
        self.build_dir = Path(build_dir)
        super().__init__(f"{self.build_dir}: {reason}")


class ArtifactAmbiguous(FbcliError):
    """More than one build artifact matches; the caller must clean up."""

    def __init__(self, build_dir: Path | str, candidates: Sequence[Path]) -> None:
        self.build_dir = Path(build_dir)
        self.candidates = list(candidates)
        names = ", ".join(sorted(p.name for p in self.candidates))
        super().__init__(
            f"{self.build_dir}: {len(self.candidates)} candidate artifacts ({names}); "
            "remove stale build output and retry",
        )


class DestinationUnavailable(FbcliError):
    """The deployment directory is missing or not writable."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {reason}")


class PluginNotFound(FbcliError):
    """The plugin crate to build could not be located."""

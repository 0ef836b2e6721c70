"""Blocking subprocess runner with timeouts.

The child is always reaped before control returns: on timeout or on any
interruption (KeyboardInterrupt included) it is killed first.
"""

from __future__ import annotations

import subprocess
import time
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

from fbcli.config import Settings, settings
from fbcli.errors import ProcessFailure, ProcessTimeout
from fbcli.models.commands import CommandResult
from fbcli.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class ProcessRunner(Protocol):
    """Capability to run an external executable and capture its output."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        check: bool = False,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        ...


class SubprocessRunner:
    """ProcessRunner backed by :func:`subprocess.run`."""

    def __init__(self, cfg: Settings | None = None) -> None:
        self._cfg = cfg or settings

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        check: bool = False,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        limit = timeout if timeout is not None else self._cfg.fbcli_process_timeout_seconds
        started = time.monotonic()
        try:
            # subprocess.run kills the child on timeout and on any exception
            proc = subprocess.run(
                argv,
                cwd=str(cwd) if cwd is not None else None,
                env=dict(env) if env is not None else None,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=limit,
            )
        except subprocess.TimeoutExpired as exc:
            log.warning("process.timeout", args=argv, timeout=limit)
            raise ProcessTimeout(argv, limit) from exc
        except FileNotFoundError as exc:
            raise ProcessFailure(argv, f"executable {argv[0]!r} not found") from exc
        except OSError as exc:
            raise ProcessFailure(argv, f"could not be launched: {exc}") from exc

        result = CommandResult(
            args=argv,
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            elapsed_time=time.monotonic() - started,
        )
        log.debug("process.exec", args=argv, rc=result.exit_code, out=result.stdout[:200])
        if check and result.failed:
            raise ProcessFailure(
                argv,
                f"exited with status {result.exit_code}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result

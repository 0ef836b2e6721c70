"""Command-related data structures."""

from __future__ import annotations

from pydantic import BaseModel


class CommandResult(BaseModel):
    """Captured outcome of one external process invocation."""

    args: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    elapsed_time: float = 0.0

    @property
    def failed(self) -> bool:
        return self.exit_code != 0

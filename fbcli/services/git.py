"""Typed git queries and actions on top of a ProcessRunner."""

from __future__ import annotations

import base64
import os
from pathlib import Path
from typing import Optional

from fbcli.config import Settings, settings
from fbcli.errors import ProcessFailure
from fbcli.models.commands import CommandResult
from fbcli.services.process_runner import ProcessRunner, SubprocessRunner
from fbcli.utils.logging import get_logger

log = get_logger(__name__)


class GitClient:
    """Runs git inside one working copy at a time."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self._runner = runner or SubprocessRunner(self._cfg)

    # ── helpers ───────────────────────────────────────────────────────

    def _git(self, repo: Path, *args: str, check: bool = True) -> CommandResult:
        """Run a git command inside *repo*.

        The parent directory is a ceiling so a broken *repo* never resolves
        to an enclosing working copy.
        """
        env = os.environ.copy()
        env["GIT_CEILING_DIRECTORIES"] = str(Path(repo).resolve().parent)
        return self._runner.run(
            [self._cfg.fbcli_git_executable, *args],
            cwd=repo,
            check=check,
            env=env,
        )

    # ── queries ───────────────────────────────────────────────────────

    def current_branch(self, repo: Path) -> Optional[str]:
        """Return the checked-out branch, or None on a detached HEAD."""
        out = self._git(repo, "branch", "--show-current").stdout.strip()
        return out or None

    def porcelain_status(self, repo: Path) -> list[str]:
        """Changed paths; untracked files are included."""
        out = self._git(
            repo, "status", "--porcelain", "--untracked-files=normal",
        ).stdout
        return [line for line in out.splitlines() if line.strip()]

    def upstream(self, repo: Path) -> Optional[str]:
        """Short name of the upstream ref (``origin/main``) or None."""
        result = self._git(
            repo, "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}",
            check=False,
        )
        if result.failed:
            return None
        return result.stdout.strip() or None

    def toplevel(self, repo: Path) -> Path:
        """Root of the working copy git resolves for *repo*."""
        return Path(self._git(repo, "rev-parse", "--show-toplevel").stdout.strip())

    def config_value(self, repo: Path, key: str) -> Optional[str]:
        """Value of *key*, or None when unset; an unreadable config raises."""
        result = self._git(repo, "config", "--get", key, check=False)
        if result.exit_code == 1:
            return None
        if result.failed:
            raise ProcessFailure(
                result.args,
                f"exited with status {result.exit_code}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result.stdout.strip() or None

    def remote_url(self, repo: Path, remote: str = "origin") -> Optional[str]:
        return self.config_value(repo, f"remote.{remote}.url")

    def upstream_remote(self, repo: Path, branch: str) -> tuple[str, str]:
        """Remote name and merge ref configured for *branch*."""
        remote = self.config_value(repo, f"branch.{branch}.remote") or "origin"
        merge = self.config_value(repo, f"branch.{branch}.merge") or f"refs/heads/{branch}"
        return remote, merge

    def ahead_behind(self, repo: Path, local: str, other: str) -> tuple[int, int]:
        """Commits only in *local* and only in *other*."""
        out = self._git(
            repo, "rev-list", "--left-right", "--count", f"{local}...{other}",
        ).stdout.split()
        if len(out) != 2:
            raise ProcessFailure(
                ["git", "rev-list", "--left-right", "--count", f"{local}...{other}"],
                f"unexpected output {' '.join(out)!r} in {repo}",
            )
        return int(out[0]), int(out[1])

    def remote_tip(self, repo: Path, remote: str, ref: str) -> Optional[str]:
        """Commit id of *ref* on *remote*, asked read-only via ls-remote."""
        out = self._git(repo, "ls-remote", remote, ref).stdout
        for line in out.splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1] == ref:
                return parts[0]
        return None

    def has_commit(self, repo: Path, sha: str) -> bool:
        result = self._git(repo, "cat-file", "-e", f"{sha}^{{commit}}", check=False)
        return not result.failed

    # ── actions ───────────────────────────────────────────────────────

    def fetch(self, repo: Path, remote: str) -> None:
        self._git(repo, "fetch", "--quiet", remote)
        log.debug("git.fetched", repo=str(repo), remote=remote)

    def merge_ff_only(self, repo: Path, ref: str = "@{upstream}") -> None:
        self._git(repo, "merge", "--ff-only", "--quiet", ref)

    def clone(self, url: str, target: Path, token: str = "") -> None:
        """Clone *url* into *target*; a token is sent as an HTTP header only."""
        env = None
        if token:
            basic = base64.b64encode(f"x-access-token:{token}".encode()).decode()
            env = os.environ.copy()
            env["GIT_CONFIG_COUNT"] = "1"
            env["GIT_CONFIG_KEY_0"] = "http.extraHeader"
            env["GIT_CONFIG_VALUE_0"] = f"Authorization: Basic {basic}"
        self._runner.run(
            [self._cfg.fbcli_git_executable, "clone", "--quiet", url, str(target)],
            cwd=target.parent,
            check=True,
            env=env,
        )


"""Find the organization's working copies directly under a root directory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from fbcli.config import Settings, settings
from fbcli.errors import IoError, ProcessFailure
from fbcli.models.repos import RepositoryHandle
from fbcli.services.git import GitClient
from fbcli.utils.logging import get_logger

log = get_logger(__name__)

GIT_MARKER = ".git"


def is_git_repository(path: Path) -> bool:
    """A ``.git`` directory, or a ``.git`` file for worktrees and submodules."""
    return (path / GIT_MARKER).exists()


def belongs_to_org(remote_url: str | None, org: str) -> bool:
    if not org:
        return True
    if not remote_url:
        return False
    return org.lower() in remote_url.lower()


def discover_repositories(
    root: Path | str,
    *,
    git: GitClient | None = None,
    cfg: Settings | None = None,
) -> Iterator[RepositoryHandle]:
    """Lazily yield a handle per organization working copy under *root*.

    The root is listed eagerly so an unreadable root raises ``IoError``
    at call time. A marked directory git cannot read is still yielded,
    with ``error`` set. Order follows the directory listing and is
    unspecified.
    """
    _cfg = cfg or settings
    _git = git or GitClient(cfg=_cfg)
    root_path = Path(root).expanduser().resolve()

    if not root_path.is_dir():
        raise IoError(root_path, "fleet root does not exist or is not a directory")
    try:
        with os.scandir(root_path) as it:
            entries = [Path(e.path) for e in it if e.is_dir()]
    except OSError as exc:
        raise IoError(root_path, f"cannot list fleet root: {exc.strerror or exc}") from exc

    return _iter_handles(entries, _git, _cfg.fbcli_org)


def _iter_handles(
    entries: list[Path],
    git: GitClient,
    org: str,
) -> Iterator[RepositoryHandle]:
    for path in entries:
        if not is_git_repository(path):
            continue
        try:
            toplevel = git.toplevel(path)
            if toplevel.resolve() != path.resolve():
                raise ProcessFailure(
                    ["git", "rev-parse", "--show-toplevel"],
                    f"resolves to {toplevel}, not to this directory",
                )
            remote_url = git.remote_url(path)
        except ProcessFailure as exc:
            # Reported as this repository's error entry
            log.warning("discovery.unreadable", repo=path.name, error=str(exc))
            yield RepositoryHandle(path=path, name=path.name, error=f"{path.name}: {exc}")
            continue
        if not belongs_to_org(remote_url, org):
            log.debug("discovery.skipped_foreign", repo=path.name, remote=remote_url)
            continue
        yield RepositoryHandle(path=path, name=path.name, remote_url=remote_url)

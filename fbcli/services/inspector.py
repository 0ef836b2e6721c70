"""Per-repository status: branch, working-tree cleanliness, upstream divergence."""

from __future__ import annotations

from fbcli.config import Settings, settings
from fbcli.errors import ProcessFailure
from fbcli.models.repos import DETACHED_HEAD, RepositoryHandle, RepositoryStatus
from fbcli.services.git import GitClient
from fbcli.utils.logging import get_logger

log = get_logger(__name__)


class RepositoryStatusInspector:
    """Builds a fresh RepositoryStatus for one handle; never raises for git failures."""

    def __init__(
        self,
        git: GitClient | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self._git = git or GitClient(cfg=self._cfg)

    def inspect(self, handle: RepositoryHandle) -> RepositoryStatus:
        """Query branch, dirtiness and ahead/behind for *handle*.

        A missing upstream (including a detached HEAD or an unborn branch)
        is reported through ``no_upstream`` with zero counts. Subprocess
        failures are captured into ``error`` so one broken repository does
        not abort a fleet scan.
        """
        if handle.error:
            return RepositoryStatus(handle=handle, error=handle.error)
        try:
            return self._inspect(handle)
        except ProcessFailure as exc:
            log.warning("inspect.failed", repo=handle.name, error=str(exc))
            return RepositoryStatus(
                handle=handle,
                error=f"{handle.name}: {exc}",
            )

    def _inspect(self, handle: RepositoryHandle) -> RepositoryStatus:
        repo = handle.path
        branch = self._git.current_branch(repo)
        dirty = bool(self._git.porcelain_status(repo))

        upstream = self._git.upstream(repo) if branch else None
        if upstream is None:
            return RepositoryStatus(
                handle=handle,
                branch=branch or DETACHED_HEAD,
                dirty=dirty,
                no_upstream=True,
            )

        ahead, behind = self._git.ahead_behind(repo, "HEAD", "@{upstream}")
        status = RepositoryStatus(
            handle=handle,
            branch=branch,
            dirty=dirty,
            ahead=ahead,
            behind=behind,
            upstream=upstream,
        )
        log.debug(
            "inspect.done",
            repo=handle.name,
            branch=status.branch,
            dirty=dirty,
            ahead=ahead,
            behind=behind,
        )
        return status

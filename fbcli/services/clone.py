"""Clone a single organization repository."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fbcli.config import Settings, settings
from fbcli.errors import IoError
from fbcli.models.repos import RepositoryHandle
from fbcli.services.git import GitClient
from fbcli.services.process_runner import ProcessRunner
from fbcli.utils.logging import get_logger

log = get_logger(__name__)


class RepositoryCloner:
    def __init__(
        self,
        runner: ProcessRunner | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self._git = GitClient(runner, self._cfg)

    def clone_url(self, name: str, ssh: bool = False) -> str:
        host = self._cfg.fbcli_git_host
        org = self._cfg.fbcli_org
        if ssh:
            return f"git@{host}:{org}/{name}.git"
        return f"https://{host}/{org}/{name}.git"

    def clone(
        self,
        name: str,
        target: Optional[Path] = None,
        *,
        ssh: bool = False,
        token: Optional[str] = None,
    ) -> RepositoryHandle:
        """Clone *name* into *target* (default ``./<name>``).

        A token only applies to HTTPS and is never written into the
        clone's configuration.
        """
        target_dir = Path(target or Path.cwd() / name).expanduser().resolve()
        if target_dir.exists():
            raise IoError(target_dir, "target directory already exists")
        if not target_dir.parent.is_dir():
            raise IoError(target_dir.parent, "parent directory does not exist")

        url = self.clone_url(name, ssh=ssh)
        auth_token = "" if ssh else (token if token is not None else self._cfg.fbcli_github_token)
        log.info("clone.start", repo=name, url=url, target=str(target_dir), token=bool(auth_token))
        self._git.clone(url, target_dir, token=auth_token)
        log.info("clone.done", repo=name)
        return RepositoryHandle(path=target_dir, name=target_dir.name, remote_url=url)

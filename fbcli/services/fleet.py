"""Fleet-wide list / status / update over the working copies under a root.

Repositories are processed sequentially in name order. A failure scoped to
one repository becomes that repository's ``error`` entry; only failures with
no per-repository scope (an unreadable root) abort the command.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from fbcli.config import Settings, settings
from fbcli.errors import FbcliError
from fbcli.models.repos import (
    FleetReport,
    OutcomeKind,
    RepositoryHandle,
    RepositoryOutcome,
    RepositoryStatus,
)
from fbcli.services.discovery import discover_repositories
from fbcli.services.git import GitClient
from fbcli.services.inspector import RepositoryStatusInspector
from fbcli.services.process_runner import ProcessRunner
from fbcli.utils.logging import get_logger

log = get_logger(__name__)


def remote_host(url: Optional[str]) -> Optional[str]:
    """Host part of an HTTPS, ssh:// or scp-style (``git@host:path``) remote."""
    if not url:
        return None
    if "://" in url:
        return (urlsplit(url).hostname or "").lower() or None
    head, sep, _ = url.partition(":")
    if not sep:
        return None
    return head.rsplit("@", 1)[-1].lower() or None


def is_public_remote(url: Optional[str], public_hosts: list[str]) -> bool:
    host = remote_host(url)
    return host is not None and host in {h.lower() for h in public_hosts}


class FleetSyncEngine:
    """Implements ``list``, ``status`` and ``update`` for one command run."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self._git = GitClient(runner, self._cfg)
        self._inspector = RepositoryStatusInspector(self._git, self._cfg)

    def _handles(self, root: Path | str) -> list[RepositoryHandle]:
        handles = discover_repositories(root, git=self._git, cfg=self._cfg)
        return sorted(handles, key=lambda h: (h.name.lower(), h.name))

    # ── list ──────────────────────────────────────────────────────────

    def list(self, root: Path | str, public_only: bool = False) -> FleetReport:
        """Enumerate the fleet; visibility is inferred from the remote host only."""
        entries: list[RepositoryOutcome] = []
        for handle in self._handles(root):
            if handle.error:
                entries.append(
                    RepositoryOutcome(handle=handle, kind=OutcomeKind.error, error=handle.error),
                )
                continue
            public = is_public_remote(handle.remote_url, self._cfg.fbcli_public_hosts)
            if public_only and not public:
                continue
            entries.append(
                RepositoryOutcome(
                    handle=handle,
                    kind=OutcomeKind.listed,
                    public=public,
                    detail=handle.remote_url or "no origin remote",
                ),
            )
        report = FleetReport(operation="list", root=Path(root), entries=entries)
        log.info("fleet.list", root=str(root), count=len(entries), failed=report.failed, public_only=public_only)
        return report

    # ── status ────────────────────────────────────────────────────────

    def status(self, root: Path | str) -> FleetReport:
        entries: list[RepositoryOutcome] = []
        for handle in self._handles(root):
            st = self._inspector.inspect(handle)
            if st.error:
                entries.append(
                    RepositoryOutcome(
                        handle=handle,
                        kind=OutcomeKind.error,
                        status=st,
                        error=st.error,
                    ),
                )
            else:
                entries.append(
                    RepositoryOutcome(
                        handle=handle,
                        kind=OutcomeKind.ok,
                        status=st,
                        detail=_describe(st),
                    ),
                )
        report = FleetReport(operation="status", root=Path(root), entries=entries)
        log.info("fleet.status", root=str(root), ok=report.succeeded, failed=report.failed)
        return report

    # ── update ────────────────────────────────────────────────────────

    def update(self, root: Path | str, dry_run: bool = False) -> FleetReport:
        """Fast-forward every clean, non-diverged repository to its upstream.

        With *dry_run* nothing is fetched or merged: the remote tip is read
        with ``ls-remote`` and the would-be change is reported instead.
        """
        entries: list[RepositoryOutcome] = []
        for handle in self._handles(root):
            try:
                outcome = self._update_one(handle, dry_run)
            except FbcliError as exc:
                log.warning("fleet.update.failed", repo=handle.name, error=str(exc))
                outcome = RepositoryOutcome(
                    handle=handle,
                    kind=OutcomeKind.error,
                    error=f"{handle.name}: {exc}",
                )
            entries.append(outcome)
        report = FleetReport(
            operation="update", root=Path(root), dry_run=dry_run, entries=entries,
        )
        log.info(
            "fleet.update",
            root=str(root),
            dry_run=dry_run,
            ok=report.succeeded,
            failed=report.failed,
        )
        return report

    def _update_one(self, handle: RepositoryHandle, dry_run: bool) -> RepositoryOutcome:
        st = self._inspector.inspect(handle)
        if st.error:
            return RepositoryOutcome(
                handle=handle, kind=OutcomeKind.error, status=st, error=st.error,
            )
        if st.dirty:
            log.info("fleet.update.skipped_dirty", repo=handle.name)
            return RepositoryOutcome(
                handle=handle,
                kind=OutcomeKind.skipped_dirty,
                status=st,
                detail="uncommitted changes; commit or stash them first",
            )
        if st.no_upstream:
            return RepositoryOutcome(
                handle=handle,
                kind=OutcomeKind.no_upstream,
                status=st,
                detail=f"branch {st.branch} has no upstream",
            )
        if st.diverged:
            return _diverged(handle, st)

        remote, merge_ref = self._git.upstream_remote(handle.path, st.branch)
        if dry_run:
            return self._plan_update(handle, st, remote, merge_ref)

        self._git.fetch(handle.path, remote)
        fetched = self._inspector.inspect(handle)
        if fetched.error:
            return RepositoryOutcome(
                handle=handle, kind=OutcomeKind.error, status=fetched, error=fetched.error,
            )
        if fetched.diverged:
            return _diverged(handle, fetched)
        if fetched.behind == 0:
            return _up_to_date(handle, fetched)

        self._git.merge_ff_only(handle.path)
        final = self._inspector.inspect(handle)
        log.info("fleet.update.updated", repo=handle.name, commits=fetched.behind)
        return RepositoryOutcome(
            handle=handle,
            kind=OutcomeKind.updated if not final.error else OutcomeKind.error,
            status=final,
            detail=f"fast-forwarded {fetched.behind} commit(s) from {fetched.upstream}",
            error=final.error,
        )

    def _plan_update(
        self,
        handle: RepositoryHandle,
        st: RepositoryStatus,
        remote: str,
        merge_ref: str,
    ) -> RepositoryOutcome:
        tip = self._git.remote_tip(handle.path, remote, merge_ref)
        if tip is None:
            return RepositoryOutcome(
                handle=handle,
                kind=OutcomeKind.error,
                status=st,
                error=f"{handle.name}: {merge_ref} not found on remote {remote}",
            )

        unfetched = not self._git.has_commit(handle.path, tip)
        if unfetched:
            ahead, behind = st.ahead, st.behind
        else:
            ahead, behind = self._git.ahead_behind(handle.path, "HEAD", tip)
        planned = st.model_copy(update={"ahead": ahead, "behind": behind})

        if ahead > 0 and (behind > 0 or unfetched):
            return _diverged(handle, planned)
        if unfetched:
            return RepositoryOutcome(
                handle=handle,
                kind=OutcomeKind.would_update,
                status=planned,
                detail=f"remote {remote} has unfetched commits (at least {max(behind, 1)})",
            )
        if behind > 0:
            return RepositoryOutcome(
                handle=handle,
                kind=OutcomeKind.would_update,
                status=planned,
                detail=f"would fast-forward {behind} commit(s)",
            )
        return _up_to_date(handle, planned)


def _diverged(handle: RepositoryHandle, st: RepositoryStatus) -> RepositoryOutcome:
    log.info("fleet.update.skipped_diverged", repo=handle.name, ahead=st.ahead, behind=st.behind)
    return RepositoryOutcome(
        handle=handle,
        kind=OutcomeKind.skipped_diverged,
        status=st,
        detail=f"diverged ({st.ahead} ahead, {st.behind} behind); merge manually",
    )


def _up_to_date(handle: RepositoryHandle, st: RepositoryStatus) -> RepositoryOutcome:
    detail = "up to date"
    if st.ahead:
        detail = f"up to date, {st.ahead} local commit(s) not pushed"
    return RepositoryOutcome(
        handle=handle, kind=OutcomeKind.up_to_date, status=st, detail=detail,
    )


def _describe(st: RepositoryStatus) -> str:
    parts = ["dirty" if st.dirty else "clean"]
    if st.no_upstream:
        parts.append("no upstream")
    elif st.ahead or st.behind:
        parts.append(f"{st.ahead} ahead, {st.behind} behind")
    else:
        parts.append("in sync")
    return ", ".join(parts)

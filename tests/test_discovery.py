"""Tests for repository discovery under a fleet root."""

from __future__ import annotations

import pytest

from fbcli.errors import IoError, ProcessFailure
from fbcli.services.discovery import belongs_to_org, discover_repositories, is_git_repository
from fbcli.services.git import GitClient
from tests.helpers import make_repos


@pytest.fixture
def git_client(fake_runner, cfg):
    return GitClient(fake_runner, cfg)


def test_yields_only_git_working_copies(fleet_root, git_client, cfg):
    make_repos(fleet_root, "Horizon", "fbcli")
    (fleet_root / "notes").mkdir()
    (fleet_root / "loose-file.txt").write_text("x")

    handles = list(discover_repositories(fleet_root, git=git_client, cfg=cfg))

    assert sorted(h.name for h in handles) == ["Horizon", "fbcli"]
    for h in handles:
        assert h.path.is_absolute()
        assert h.remote_url == f"https://github.com/Far-Beyond-Dev/{h.name}.git"


def test_git_file_marker_counts(fleet_root, git_client, cfg):
    worktree = fleet_root / "worktree"
    worktree.mkdir()
    (worktree / ".git").write_text("gitdir: /elsewhere/.git/worktrees/worktree\n")
    assert is_git_repository(worktree)
    assert [h.name for h in discover_repositories(fleet_root, git=git_client, cfg=cfg)] == ["worktree"]


def test_foreign_organization_skipped(fleet_root, fake_runner, git_client, cfg):
    make_repos(fleet_root, "ours", "theirs", "local-only")
    fake_runner.on("config", "--get", "remote.origin.url", repo="theirs",
                   stdout="git@github.com:someone-else/theirs.git\n")
    fake_runner.on("config", "--get", "remote.origin.url", repo="local-only", exit_code=1)

    names = [h.name for h in discover_repositories(fleet_root, git=git_client, cfg=cfg)]
    assert names == ["ours"]


def test_no_org_yields_every_working_copy(fleet_root, fake_runner, cfg):
    make_repos(fleet_root, "a", "b")
    fake_runner.on("config", "--get", "remote.origin.url", repo="b", exit_code=1)
    open_cfg = cfg.model_copy(update={"fbcli_org": ""})

    handles = {h.name: h for h in discover_repositories(fleet_root, git=GitClient(fake_runner, open_cfg), cfg=open_cfg)}

    assert set(handles) == {"a", "b"}
    assert handles["b"].remote_url is None


def test_remote_lookup_failure_keeps_the_repository(fleet_root, fake_runner, git_client, cfg):
    make_repos(fleet_root, "good", "broken")
    fake_runner.on("config", repo="broken", raises=ProcessFailure(["git", "config"], "boom"))

    handles = {h.name: h for h in discover_repositories(fleet_root, git=git_client, cfg=cfg)}

    assert set(handles) == {"good", "broken"}
    assert handles["good"].error is None
    assert handles["broken"].error.startswith("broken: ")
    assert "boom" in handles["broken"].error


def test_unreadable_config_is_not_an_unset_remote(fleet_root, fake_runner, git_client, cfg):
    make_repos(fleet_root, "corrupt")
    fake_runner.on("config", "--get", "remote.origin.url", repo="corrupt", exit_code=128,
                   stderr="fatal: bad config line 1 in file .git/config\n")

    [handle] = discover_repositories(fleet_root, git=git_client, cfg=cfg)

    assert handle.name == "corrupt"
    assert "bad config line" in handle.error


def test_directory_git_does_not_recognise(fleet_root, fake_runner, git_client, cfg):
    make_repos(fleet_root, "empty-marker")
    fake_runner.on("rev-parse", "--show-toplevel", repo="empty-marker", exit_code=128,
                   stderr="fatal: not a git repository (or any of the parent directories): .git\n")

    [handle] = discover_repositories(fleet_root, git=git_client, cfg=cfg)

    assert handle.error is not None
    assert handle.remote_url is None
    assert not fake_runner.called("config", repo="empty-marker")


def test_toplevel_elsewhere_is_an_error(fleet_root, fake_runner, git_client, cfg):
    make_repos(fleet_root, "nested")
    fake_runner.on("rev-parse", "--show-toplevel", repo="nested", stdout=f"{fleet_root.parent}\n")

    [handle] = discover_repositories(fleet_root, git=git_client, cfg=cfg)

    assert "not to this directory" in handle.error


def test_git_runs_below_a_ceiling(fleet_root, fake_runner, git_client, cfg):
    make_repos(fleet_root, "a")
    list(discover_repositories(fleet_root, git=git_client, cfg=cfg))

    assert fake_runner.calls
    for call in fake_runner.calls:
        assert call.env["GIT_CEILING_DIRECTORIES"] == str(fleet_root.resolve())


def test_missing_root_raises_before_iteration(tmp_path, git_client, cfg):
    missing = tmp_path / "nope"
    with pytest.raises(IoError) as exc_info:
        discover_repositories(missing, git=git_client, cfg=cfg)
    assert str(missing) in str(exc_info.value)


def test_root_that_is_a_file_raises(tmp_path, git_client, cfg):
    f = tmp_path / "file"
    f.write_text("")
    with pytest.raises(IoError):
        discover_repositories(f, git=git_client, cfg=cfg)


def test_belongs_to_org_is_case_insensitive():
    assert belongs_to_org("https://github.com/far-beyond-dev/x.git", "Far-Beyond-Dev")
    assert not belongs_to_org(None, "Far-Beyond-Dev")
    assert belongs_to_org(None, "")

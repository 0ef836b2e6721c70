"""End-to-end tests of the command line surface via typer's CliRunner."""

from __future__ import annotations

import shutil
import sys

import pytest
from typer.testing import CliRunner

from fbcli import __version__
from fbcli.config import settings
from fbcli.main import app
from fbcli.models.artifacts import ArtifactClass
from fbcli.services.fleet import FleetSyncEngine

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_no_args_shows_help():
    result = runner.invoke(app, [])
    assert "repo" in result.output
    assert "plugin" in result.output


class TestRepoCommands:
    def test_empty_root(self, tmp_path):
        result = runner.invoke(app, ["repo", "status", "--root", str(tmp_path)])
        assert result.exit_code == 0
        assert "No repositories found" in result.output

    def test_missing_root_exits_1(self, tmp_path):
        result = runner.invoke(app, ["repo", "list", "--root", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_interrupt_exits_130(self, tmp_path, monkeypatch):
        def interrupted(self, root):
            raise KeyboardInterrupt

        monkeypatch.setattr(FleetSyncEngine, "status", interrupted)
        result = runner.invoke(app, ["repo", "status", "--root", str(tmp_path)])
        assert result.exit_code == 130
        assert "Interrupted" in result.output

    def test_failed_repository_exits_1(self, git_fleet):
        git_fleet.add("alpha")
        broken = git_fleet.add("broken")
        shutil.rmtree(broken / ".git" / "objects")
        (broken / ".git" / "objects").mkdir()

        result = runner.invoke(app, ["repo", "status", "--root", str(git_fleet.root)])

        assert result.exit_code == 1
        assert "1 ok, 1 failed" in result.output

    def test_clone_into_existing_target(self, tmp_path):
        (tmp_path / "Horizon").mkdir()
        result = runner.invoke(app, ["repo", "clone", "Horizon", "--path", str(tmp_path / "Horizon")])
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestPluginCommands:
    @pytest.fixture
    def build_dir(self, tmp_path):
        ext = ArtifactClass.for_platform(sys.platform).extension
        out = tmp_path / "target" / "release"
        out.mkdir(parents=True)
        (out / f"libplugin_greeter{ext}").write_bytes(b"\x7fELF")
        return out

    def test_deploy(self, tmp_path, build_dir):
        host = tmp_path / "Horizon"
        (host / "plugins").mkdir(parents=True)
        result = runner.invoke(
            app, ["plugin", "deploy", str(build_dir), "--horizon-path", str(host)],
        )
        assert result.exit_code == 0, result.output
        assert "Deployed" in result.output
        assert len(list((host / "plugins").iterdir())) == 1

    def test_deploy_twice_reports_replacement(self, tmp_path, build_dir):
        host = tmp_path / "Horizon"
        (host / "plugins").mkdir(parents=True)
        args = ["plugin", "deploy", str(build_dir), "--horizon-path", str(host)]
        runner.invoke(app, args)
        result = runner.invoke(app, args)
        assert result.exit_code == 0
        assert "Replaced" in result.output

    def test_deploy_default_host_follows_settings(self, tmp_path, build_dir, monkeypatch):
        monkeypatch.setattr(settings, "fbcli_host_name", "Server")
        (tmp_path / "Server" / "plugins").mkdir(parents=True)
        work = tmp_path / "work"
        work.mkdir()
        monkeypatch.chdir(work)

        result = runner.invoke(app, ["plugin", "deploy", str(build_dir)])

        assert result.exit_code == 0, result.output
        assert [p.name for p in (tmp_path / "Server" / "plugins").iterdir()] == [
            next(build_dir.iterdir()).name,
        ]

    def test_deploy_without_plugins_dir(self, tmp_path, build_dir):
        result = runner.invoke(
            app, ["plugin", "deploy", str(build_dir), "--horizon-path", str(tmp_path / "nowhere")],
        )
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_build_outside_crate(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["plugin", "build", "--no-copy"])
        assert result.exit_code == 1
        assert "Error:" in result.output

"""Shared pytest fixtures."""

from __future__ import annotations

import os
import shutil

# Keep test runs independent of a developer's environment
os.environ.setdefault("FBCLI_LOG_LEVEL", "WARNING")
os.environ.setdefault("FBCLI_GITHUB_TOKEN", "")

import pytest
import structlog

from fbcli.config import Settings
from tests.helpers import ORG, GitFleet
from tests.mock_runner import FakeRunner


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI invocations configure structlog against CliRunner's temporary
    stderr; restore defaults so later tests don't log to a closed stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def cfg():
    return Settings(fbcli_org=ORG, fbcli_process_timeout_seconds=30)


@pytest.fixture
def fake_runner():
    """Provide a fresh FakeRunner."""
    return FakeRunner()


@pytest.fixture
def fleet_root(tmp_path):
    root = tmp_path / "fleet"
    root.mkdir()
    return root


@pytest.fixture
def git_fleet(tmp_path):
    """Real bare remotes and clones; needs the git executable."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    return GitFleet(tmp_path)

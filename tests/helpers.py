"""Helpers for building working copies on disk."""

from __future__ import annotations

import subprocess
from pathlib import Path

ORG = "Far-Beyond-Dev"


def make_repos(root: Path, *names: str) -> None:
    """Empty ``.git`` markers; enough for tests that script git output."""
    for name in names:
        (root / name / ".git").mkdir(parents=True)


# ── real git ──────────────────────────────────────────────────────────────

def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-c", "user.email=test@test.local", "-c", "user.name=Test", *args],
        cwd=str(cwd), check=True, capture_output=True, text=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str = "") -> str:
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-m", message or f"update {name}")
    return git(repo, "rev-parse", "HEAD")


class GitFleet:
    """Bare remotes under ``remotes/<org>/`` with clones in ``fleet/``."""

    def __init__(self, base: Path) -> None:
        self.base = base
        self.remotes = base / "remotes" / ORG
        self.seeds = base / "seeds"
        self.root = base / "fleet"
        for d in (self.remotes, self.seeds, self.root):
            d.mkdir(parents=True)

    def add(self, name: str) -> Path:
        bare = self.remotes / f"{name}.git"
        git(self.base, "init", "--bare", "-b", "main", str(bare))
        seed = self.seeds / name
        git(self.base, "init", "-b", "main", str(seed))
        commit_file(seed, "README.md", f"# {name}\n", "init")
        git(seed, "remote", "add", "origin", str(bare))
        git(seed, "push", "-u", "origin", "main")
        git(self.root, "clone", str(bare), name)
        return self.root / name

    def push_upstream(self, name: str, count: int = 1) -> None:
        """Add *count* commits to the remote through the seed clone."""
        seed = self.seeds / name
        git(seed, "pull", "--ff-only")
        start = len(list(seed.glob("upstream-*.txt")))
        for i in range(start, start + count):
            commit_file(seed, f"upstream-{i}.txt", f"{i}\n")
        git(seed, "push", "origin", "main")


def head_snapshot(repo: Path) -> dict[str, bytes]:
    """Contents of HEAD and every ref file, for before/after comparisons."""
    git_dir = repo / ".git"
    snap = {"HEAD": (git_dir / "HEAD").read_bytes()}
    for ref in sorted((git_dir / "refs").rglob("*")):
        if ref.is_file():
            snap[str(ref.relative_to(git_dir))] = ref.read_bytes()
    packed = git_dir / "packed-refs"
    if packed.exists():
        snap["packed-refs"] = packed.read_bytes()
    return snap

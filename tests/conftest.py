from __future__ import annotations

import io
import shutil
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

from mw_fleet.core import OutputSink

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

GIT_IDENTITY = ("-c", "user.name=Test", "-c", "user.email=test@test.com")


def git(*args: str, cwd: Path) -> str:
    result = subprocess.run(
        ["git", *GIT_IDENTITY, *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def make_origin(root: Path, name: str, branch: str = "master") -> Path:
    """Create a bare repository with one commit on `branch`."""
    origin = root / f"{name}.git"
    origin.mkdir(parents=True)
    git("init", "--bare", "-b", branch, cwd=origin)

    seed = root / f"{name}-seed"
    seed.mkdir()
    git("init", "-b", branch, cwd=seed)
    (seed / "README.md").write_text(f"# {name}\n")
    git("add", "README.md", cwd=seed)
    git("commit", "-m", "Initial commit", cwd=seed)
    git("remote", "add", "origin", str(origin), cwd=seed)
    git("push", "-u", "origin", branch, cwd=seed)
    return origin


def clone(origin: Path, dest: Path) -> Path:
    git("clone", str(origin), str(dest), cwd=origin.parent)
    git("config", "pull.rebase", "false", cwd=dest)
    return dest


def push_commit(origin: Path, filename: str = "CHANGES.txt") -> None:
    """Advance origin by one commit made in a throwaway clone."""
    counter = len(list(origin.parent.glob(f"{origin.stem}-push*")))
    work = clone(origin, origin.parent / f"{origin.stem}-push{counter}")
    target = work / filename
    target.write_text(target.read_text() + "more\n" if target.exists() else "first\n")
    git("add", filename, cwd=work)
    git("commit", "-m", f"Update {filename}", cwd=work)
    git("push", cwd=work)


def make_installation(root: Path) -> Path:
    """Lay out the files a MediaWiki install is recognised by."""
    install = root / "mediawiki"
    (install / "includes").mkdir(parents=True)
    (install / "extensions").mkdir()
    (install / "skins").mkdir()
    (install / "index.php").write_text("<?php\n")
    (install / "api.php").write_text("<?php\n")
    return install


@pytest.fixture()
def sink() -> OutputSink:
    return OutputSink(Console(file=io.StringIO(), width=120), verbose=False)


@pytest.fixture()
def verbose_sink() -> OutputSink:
    return OutputSink(Console(file=io.StringIO(), width=120), verbose=True)


def output_of(sink: OutputSink) -> str:
    return sink.console.file.getvalue()


@pytest.fixture()
def behind_repo(tmp_path: Path) -> tuple[Path, Path]:
    """A clone on master that is one commit behind its origin."""
    origin = make_origin(tmp_path / "remotes", "Vector")
    work = clone(origin, tmp_path / "work" / "Vector")
    push_commit(origin)
    return origin, work

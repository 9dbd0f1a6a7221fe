from __future__ import annotations

import threading
from pathlib import Path

import pytest
from conftest import clone, make_origin, push_commit, requires_git

from mw_fleet.core import (
    EvaluationState,
    FleetScanner,
    OutputSink,
    RepositoryEvaluator,
    RepositoryKind,
    RepositoryStatus,
    ScanPolicy,
    count_directories,
    list_repository_dirs,
)


class CountingEvaluator:
    """Records how many evaluations overlap."""

    def __init__(self, delay: float = 0.02, fail_on: str = ""):
        self.delay = delay
        self.fail_on = fail_on
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def evaluate(self, path: Path, kind: RepositoryKind) -> RepositoryStatus:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        threading.Event().wait(self.delay)
        with self._lock:
            self.active -= 1
        if path.name == self.fail_on:
            return RepositoryStatus(
                path=path, name=path.name, kind=kind, error="Not a git repository"
            )
        return RepositoryStatus(
            path=path,
            name=path.name,
            kind=kind,
            is_repository=True,
            branch="master",
            commits_behind=0,
            state=EvaluationState.UP_TO_DATE,
        )


def make_dirs(parent: Path, count: int) -> list[str]:
    names = [f"Ext{i:02d}" for i in range(count)]
    for name in names:
        (parent / name).mkdir(parents=True)
    return names


class TestDirectoryListing:
    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        scanner = FleetScanner(CountingEvaluator(), max_workers=4)
        assert scanner.scan(tmp_path / "extensions", RepositoryKind.EXTENSION) == []
        assert count_directories(tmp_path / "extensions") == 0

    def test_file_instead_of_directory_is_empty(self, tmp_path: Path) -> None:
        (tmp_path / "skins").write_text("not a dir")
        scanner = FleetScanner(CountingEvaluator(), max_workers=4)
        assert scanner.scan(tmp_path / "skins", RepositoryKind.SKIN) == []

    def test_files_and_hidden_entries_are_ignored(self, tmp_path: Path) -> None:
        make_dirs(tmp_path, 2)
        (tmp_path / ".cache").mkdir()
        (tmp_path / "README").write_text("hi")
        assert [p.name for p in list_repository_dirs(tmp_path)] == ["Ext00", "Ext01"]
        assert count_directories(tmp_path) == 2


class TestBoundedScan:
    @pytest.mark.parametrize("workers, count", [(1, 5), (2, 9), (4, 12), (16, 3)])
    def test_never_exceeds_worker_limit(self, tmp_path: Path, workers: int, count: int) -> None:
        names = make_dirs(tmp_path, count)
        evaluator = CountingEvaluator()
        results = FleetScanner(evaluator, max_workers=workers).scan(
            tmp_path, RepositoryKind.EXTENSION
        )

        assert evaluator.peak <= workers
        assert len(results) == count
        assert [r.name for r in results] == names

    def test_runs_in_parallel_when_allowed(self, tmp_path: Path) -> None:
        make_dirs(tmp_path, 8)
        evaluator = CountingEvaluator(delay=0.05)
        FleetScanner(evaluator, max_workers=4).scan(tmp_path, RepositoryKind.EXTENSION)
        assert evaluator.peak > 1

    def test_failed_repository_keeps_its_slot(self, tmp_path: Path) -> None:
        make_dirs(tmp_path, 4)
        evaluator = CountingEvaluator(fail_on="Ext01")
        results = FleetScanner(evaluator, max_workers=2).scan(tmp_path, RepositoryKind.SKIN)

        assert len(results) == 4
        assert results[1].error == "Not a git repository"
        assert all(r.kind == RepositoryKind.SKIN for r in results)

    def test_worker_limit_has_floor_of_one(self) -> None:
        assert FleetScanner(CountingEvaluator(), max_workers=0).max_workers >= 1


@requires_git
class TestScanWithGit:
    def test_report_only_scan_is_repeatable(self, tmp_path: Path, sink: OutputSink) -> None:
        extensions = tmp_path / "extensions"
        for name in ("Echo", "Math"):
            origin = make_origin(tmp_path / "remotes", name)
            clone(origin, extensions / name)
            push_commit(origin)
        (extensions / "Untracked").mkdir()
        (extensions / "Math" / "local.txt").write_text("wip\n")

        evaluator = RepositoryEvaluator(ScanPolicy(report_only=True), sink)
        scanner = FleetScanner(evaluator, max_workers=2)
        first = scanner.scan(extensions, RepositoryKind.EXTENSION)
        second = scanner.scan(extensions, RepositoryKind.EXTENSION)

        assert [(s.name, s.commits_behind, s.has_uncommitted_changes) for s in first] == [
            ("Echo", 1, False),
            ("Math", 1, True),
            ("Untracked", -1, False),
        ]
        assert [(s.commits_behind, s.has_uncommitted_changes) for s in first] == [
            (s.commits_behind, s.has_uncommitted_changes) for s in second
        ]
        assert first[2].error == "Not a git repository"

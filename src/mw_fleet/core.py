"""
mw-fleet: Audit and update every repository of a MediaWiki installation.

Checks MediaWiki core plus each extension and skin checkout against its
remote, reports how far behind each one is, and pulls updates for
master/main branches when policy allows.
"""

from __future__ import annotations

import os
import subprocess
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import Any, TextIO

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from ._version import __version__
from .formatters import OutputFormatter

UNKNOWN_BEHIND = -1
PULLABLE_BRANCHES = ("master", "main")
ERROR_MARKERS = ("error", "fatal")

# =============================================================================
# Domain Models
# =============================================================================


class RepositoryKind(StrEnum):
    """Role a repository plays within the installation."""

    CORE = "core"
    EXTENSION = "extension"
    SKIN = "skin"


class EvaluationState(StrEnum):
    """Terminal state a repository evaluation ended in."""

    NOT_A_REPOSITORY = "not_a_repository"
    BRANCH_UNKNOWN = "branch_unknown"
    FETCH_FAILED = "fetch_failed"
    BEHIND_UNKNOWN = "behind_unknown"
    UP_TO_DATE = "up_to_date"
    UPDATES_AVAILABLE = "updates_available"
    PULL_SKIPPED = "pull_skipped"
    PULL_DECLINED = "pull_declined"
    PULL_SUCCEEDED = "pull_succeeded"
    PULL_FAILED = "pull_failed"


@dataclass(frozen=True)
class RepositoryStatus:
    """Point-in-time status of one repository."""

    path: Path
    name: str
    kind: RepositoryKind
    is_repository: bool = False
    branch: str = ""
    commits_behind: int = UNKNOWN_BEHIND
    has_uncommitted_changes: bool = False
    pulled: bool = False
    pull_error: str = ""
    error: str = ""
    state: EvaluationState = EvaluationState.NOT_A_REPOSITORY

    @property
    def is_error(self) -> bool:
        return not self.is_repository or bool(self.error)

    @property
    def has_updates(self) -> bool:
        """Remote had commits we lacked (stays true after a pull)."""
        return self.commits_behind > 0

    @property
    def displayed_behind(self) -> int | None:
        """Behind-count for display; None when it was never determined."""
        if self.is_error or self.commits_behind < 0:
            return None
        if self.pulled:
            return 0
        return self.commits_behind

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "path": str(self.path),
            "name": self.name,
            "kind": self.kind.value,
            "is_repository": self.is_repository,
            "branch": self.branch,
            "commits_behind": self.displayed_behind,
            "has_uncommitted_changes": self.has_uncommitted_changes,
            "pulled": self.pulled,
            "pull_error": self.pull_error,
            "error": self.error,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class UpdateTarget:
    """Single repository selected for update mode."""

    kind: str
    name: str = ""


@dataclass(frozen=True)
class ScanPolicy:
    """Run-wide options, fixed once the command line is parsed."""

    verbose: bool = False
    report_only: bool = False
    auto_yes: bool = False
    update_target: UpdateTarget | None = None

    @property
    def single_update_mode(self) -> bool:
        return self.update_target is not None

    @property
    def interactive(self) -> bool:
        """Whether a confirmation prompt may be shown during this run."""
        return not self.report_only and not self.auto_yes


@dataclass
class FleetSummary:
    """Summary counts over one or more status lists."""

    total: int = 0
    up_to_date: int = 0
    has_updates: int = 0
    errors: int = 0
    pulled: int = 0
    pull_failed: int = 0
    dirty: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "up_to_date": self.up_to_date,
            "has_updates": self.has_updates,
            "errors": self.errors,
            "pulled": self.pulled,
            "pull_failed": self.pull_failed,
            "dirty": self.dirty,
        }

    @classmethod
    def from_statuses(cls, *groups: list[RepositoryStatus]) -> FleetSummary:
        """Fold any number of status lists into one summary."""
        summary = cls()
        for statuses in groups:
            for status in statuses:
                summary.total += 1
                if status.is_error:
                    summary.errors += 1
                elif status.has_updates:
                    summary.has_updates += 1
                else:
                    summary.up_to_date += 1

                if status.pulled:
                    summary.pulled += 1
                if status.pull_error:
                    summary.pull_failed += 1
                if status.has_uncommitted_changes:
                    summary.dirty += 1
        return summary


# =============================================================================
# Console Output
# =============================================================================


class OutputSink:
    """Single shared output destination guarded by one process-wide lock.

    Every console write (and its mirror into the optional report file) takes
    the lock for the duration of that write only.
    """

    def __init__(self, console: Console, verbose: bool = False):
        self.console = console
        self.verbose = verbose
        self._lock = threading.RLock()
        self._report: Console | None = None
        self._report_handle: TextIO | None = None

    def print(self, *objects: Any, report: bool = True, **kwargs: Any) -> None:
        """Print to the console and, unless report=False, to the report file."""
        with self._lock:
            self.console.print(*objects, **kwargs)
            if report and self._report is not None:
                self._report.print(*objects, **kwargs)

    def error(self, message: str) -> None:
        """Print an error line, never mirrored into the report."""
        self.print(f"[red]{escape(message)}[/]", report=False)

    def trace(self, message: str) -> None:
        """Print a verbose trace line, verbatim."""
        if not self.verbose:
            return
        with self._lock:
            self.console.print(message.rstrip("\n"), markup=False, highlight=False)

    @contextmanager
    def exclusive(self) -> Iterator[Console]:
        """Hold the output lock across a prompt and its answer."""
        with self._lock:
            yield self.console

    @property
    def reporting(self) -> bool:
        return self._report is not None

    def open_report(self, path: Path, header: str) -> bool:
        """Start mirroring output into a plain-text report file."""
        try:
            handle = open(path, "w", encoding="utf-8")
        except OSError:
            return False
        with self._lock:
            self._report_handle = handle
            self._report = Console(
                file=handle,
                width=120,
                force_terminal=False,
                color_system=None,
                highlight=False,
            )
            handle.write(f"{header}\n")
        return True

    def close_report(self) -> None:
        with self._lock:
            if self._report_handle is not None:
                self._report_handle.close()
            self._report_handle = None
            self._report = None


# =============================================================================
# Git Operations (Low-level)
# =============================================================================


def has_error_marker(output: str) -> bool:
    """Failure heuristic: git output mentioning "error" or "fatal"."""
    return any(marker in output for marker in ERROR_MARKERS)


class GitOperations:
    """Low-level Git operations for a single repository.

    Each method runs exactly one git command and reports its raw result;
    retry and policy decisions belong to the caller.
    """

    def __init__(
        self,
        repo_path: Path,
        timeout: float | None = None,
        trace: Callable[[str], None] | None = None,
    ):
        self.repo_path = repo_path
        self.timeout = timeout
        self._trace = trace

    def _run(self, *args: str, merge_stderr: bool = False) -> str:
        """Run a git command in the repository and return its output."""
        command = ["git", *args]
        if self._trace:
            self._trace(f"  [CMD] {' '.join(command)} (in {self.repo_path})")
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.DEVNULL,
                text=True,
                check=False,
                timeout=self.timeout,
            )
            output = result.stdout or ""
        except subprocess.TimeoutExpired:
            # Like any other stderr, the timeout notice only reaches merged output
            if not merge_stderr:
                return ""
            output = f"fatal: git {args[0]} timed out after {self.timeout}s\n"
        except OSError as e:
            if self._trace:
                self._trace(f"  [ERROR] Failed to execute command: {e}")
            return ""
        if self._trace and output:
            self._trace(f"  [OUTPUT] {output}")
        return output

    def is_repository(self) -> bool:
        return (self.repo_path / ".git").exists()

    def get_current_branch(self) -> str:
        """Get current branch name, empty on failure."""
        return self._run("rev-parse", "--abbrev-ref", "HEAD").strip()

    def fetch(self) -> bool:
        """Fetch from the default remote."""
        output = self._run("fetch", merge_stderr=True)
        return not has_error_marker(output)

    def get_commits_behind(self, branch: str) -> int:
        """Count commits on origin/<branch> missing locally.

        Returns UNKNOWN_BEHIND when git printed no count, whether because the
        remote branch does not exist or the query failed.
        """
        output = self._run("rev-list", "--count", f"HEAD..origin/{branch}").strip()
        try:
            return int(output.split()[0])
        except (IndexError, ValueError):
            return UNKNOWN_BEHIND

    def has_local_modifications(self) -> bool:
        """Check for any uncommitted or untracked change."""
        output = self._run("status", "--porcelain")
        return any(line.strip() for line in output.splitlines())

    def pull(self) -> tuple[bool, str]:
        """Pull from remote."""
        output = self._run("pull", merge_stderr=True)
        if has_error_marker(output):
            return False, output.strip()
        return True, output.strip()


# =============================================================================
# Confirmation Gate
# =============================================================================


@dataclass(frozen=True)
class PullPrompt:
    """What the operator is asked before a pull."""

    name: str
    kind: RepositoryKind
    commits_behind: int
    has_uncommitted_changes: bool = False
    single: bool = False

    def render(self) -> str:
        """Prompt text as rich markup."""
        plural = "s" if self.commits_behind > 1 else ""
        if self.single:
            text = f"\nPull {self.commits_behind} commit{plural}?"
            warning = "WARNING: Repository has uncommitted changes!"
        else:
            text = (
                f"\nPull updates for '{escape(self.name)}' ({self.kind}, "
                f"{self.commits_behind} commit{plural} behind)"
            )
            warning = "WARNING: Has uncommitted changes!"
        if self.has_uncommitted_changes:
            text += f"\n  [bold yellow]⚠️  {warning}[/]"
        return text + "\n   \\[y/N]: "


class ConfirmationGate:
    """Decide whether a pull may go ahead, asking the operator if needed."""

    def __init__(self, policy: ScanPolicy, sink: OutputSink):
        self.policy = policy
        self.sink = sink

    def confirm(self, prompt: PullPrompt) -> bool:
        if self.policy.report_only:
            return False
        if self.policy.auto_yes:
            return True

        # The sink lock keeps one question open at a time
        with self.sink.exclusive() as console:
            try:
                response = console.input(prompt.render())
            except (EOFError, KeyboardInterrupt):
                console.print()
                return False
        return response[:1] in ("y", "Y")


# =============================================================================
# Repository Evaluator
# =============================================================================


class RepositoryEvaluator:
    """Drive one repository through branch, fetch, behind and dirty checks."""

    def __init__(
        self,
        policy: ScanPolicy,
        sink: OutputSink,
        gate: ConfirmationGate | None = None,
        ops_factory: Callable[[Path], GitOperations] | None = None,
        timeout: float | None = None,
    ):
        self.policy = policy
        self.sink = sink
        self.gate = gate or ConfirmationGate(policy, sink)
        self._ops_factory = ops_factory
        self.timeout = timeout

    def _ops(self, path: Path) -> GitOperations:
        if self._ops_factory is not None:
            return self._ops_factory(path)
        return GitOperations(path, timeout=self.timeout, trace=self.sink.trace)

    def evaluate(self, path: Path, kind: RepositoryKind) -> RepositoryStatus:
        """Get complete repository status, pulling when policy allows."""
        self.sink.trace(f"\n[CHECKING] {path.name} ({kind})\n  Path: {path}")
        try:
            status = self._inspect(path, kind)
        except OSError as e:
            return RepositoryStatus(
                path=path, name=path.name, kind=kind, is_repository=True, error=str(e)
            )

        # Update mode leaves the pull decision to update_single_repository
        if status.state != EvaluationState.UPDATES_AVAILABLE or self.policy.single_update_mode:
            return status
        if self._pull_allowed(status):
            return self.attempt_pull(status)
        return replace(status, state=EvaluationState.PULL_SKIPPED)

    def _inspect(self, path: Path, kind: RepositoryKind) -> RepositoryStatus:
        ops = self._ops(path)
        status = RepositoryStatus(path=path, name=path.name, kind=kind)

        if not ops.is_repository():
            self.sink.trace("  [SKIP] Not a git repository")
            return replace(status, error="Not a git repository")
        status = replace(status, is_repository=True)

        self.sink.trace("  [STEP] Getting current branch...")
        branch = ops.get_current_branch()
        if not branch:
            self.sink.trace("  [ERROR] Could not determine branch")
            return replace(
                status,
                error="Could not determine branch",
                state=EvaluationState.BRANCH_UNKNOWN,
            )
        status = replace(status, branch=branch)
        self.sink.trace(f"  [INFO] Current branch: {branch}")

        self.sink.trace("  [STEP] Fetching updates from remote...")
        if not ops.fetch():
            self.sink.trace("  [ERROR] Failed to fetch updates")
            return replace(
                status,
                error="Failed to fetch updates",
                state=EvaluationState.FETCH_FAILED,
            )

        self.sink.trace("  [STEP] Checking commits behind remote...")
        behind = ops.get_commits_behind(branch)

        # Dirtiness is reported whatever the behind-count turns out to be
        self.sink.trace("  [STEP] Checking for uncommitted changes...")
        dirty = ops.has_local_modifications()
        if dirty:
            self.sink.trace("  [WARNING] Repository has uncommitted changes!")
        status = replace(status, commits_behind=behind, has_uncommitted_changes=dirty)

        if behind < 0:
            self.sink.trace("  [WARNING] No tracking branch or error checking")
            return replace(
                status,
                commits_behind=UNKNOWN_BEHIND,
                error="No tracking branch or error checking",
                state=EvaluationState.BEHIND_UNKNOWN,
            )
        if behind == 0:
            self.sink.trace("  [RESULT] Up to date")
            return replace(status, state=EvaluationState.UP_TO_DATE)

        self.sink.trace(f"  [RESULT] Behind by {behind} commit(s)")
        return replace(status, state=EvaluationState.UPDATES_AVAILABLE)

    def _pull_allowed(self, status: RepositoryStatus) -> bool:
        return (
            not self.policy.report_only
            and not self.policy.single_update_mode
            and status.branch in PULLABLE_BRANCHES
        )

    def attempt_pull(self, status: RepositoryStatus, single: bool = False) -> RepositoryStatus:
        """Ask the gate, then pull. Used by both the scan and update mode."""
        if not status.has_updates or status.is_error:
            return status

        prompt = PullPrompt(
            name=status.name,
            kind=status.kind,
            commits_behind=status.commits_behind,
            has_uncommitted_changes=status.has_uncommitted_changes,
            single=single,
        )
        if not self.gate.confirm(prompt):
            self.sink.trace("  [INFO] User declined pull")
            return replace(status, state=EvaluationState.PULL_DECLINED)

        self.sink.trace("  [STEP] Performing git pull...")
        success, output = self._ops(status.path).pull()
        if success:
            self.sink.trace("  [SUCCESS] Git pull completed")
            return replace(status, pulled=True, state=EvaluationState.PULL_SUCCEEDED)

        self.sink.trace(f"  [ERROR] Git pull failed: {output}")
        return replace(
            status,
            pull_error=output or "git pull failed",
            state=EvaluationState.PULL_FAILED,
        )


# =============================================================================
# Fleet Scanner
# =============================================================================


def default_worker_count() -> int:
    return max(1, os.cpu_count() or 1)


def list_repository_dirs(directory: Path) -> list[Path]:
    """Immediate, non-hidden subdirectories in name order."""
    if not directory.is_dir():
        return []
    entries = [
        entry
        for entry in directory.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    ]
    return sorted(entries, key=lambda p: p.name)


class FleetScanner:
    """Evaluate every repository directory under a parent, K at a time."""

    def __init__(self, evaluator: RepositoryEvaluator, max_workers: int | None = None):
        self.evaluator = evaluator
        self.max_workers = max(1, max_workers or default_worker_count())

    def scan(self, directory: Path, kind: RepositoryKind) -> list[RepositoryStatus]:
        """Return one status per subdirectory, in directory name order.

        A missing directory is not an error and yields an empty list.
        """
        entries = list_repository_dirs(directory)
        if not entries:
            return []

        if self.max_workers == 1 or len(entries) == 1:
            return [self.evaluator.evaluate(entry, kind) for entry in entries]

        # The pool never runs more than max_workers evaluations at once
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.evaluator.evaluate, entry, kind) for entry in entries]
            return [future.result() for future in futures]


def is_mediawiki_installation(path: Path) -> bool:
    """Check for the files and directories every MediaWiki install has."""
    return (
        (path / "index.php").exists()
        and (path / "api.php").exists()
        and (path / "includes").is_dir()
        and (path / "extensions").is_dir()
        and (path / "skins").is_dir()
    )


def count_directories(directory: Path) -> int:
    return len(list_repository_dirs(directory))


# =============================================================================
# Single Repository Update
# =============================================================================


def resolve_update_target(base_path: Path, target: UpdateTarget) -> tuple[Path, str]:
    """Map an update target to its checkout path and a display name.

    Raises ValueError for an unknown kind or a missing name.
    """
    if target.kind == RepositoryKind.CORE:
        return base_path, "MediaWiki core"
    if target.kind not in (RepositoryKind.EXTENSION, RepositoryKind.SKIN):
        raise ValueError(
            f"Invalid type '{target.kind}'. Must be 'core', 'extension', or 'skin'."
        )
    if not target.name:
        raise ValueError(f"update {target.kind} requires NAME argument")
    subdir = "extensions" if target.kind == RepositoryKind.EXTENSION else "skins"
    return base_path / subdir / target.name, f"{target.kind} '{target.name}'"


def update_single_repository(
    base_path: Path,
    target: UpdateTarget,
    evaluator: RepositoryEvaluator,
    sink: OutputSink,
) -> int:
    """Check one repository and pull it after confirmation. Returns exit code."""
    try:
        repo_path, display_name = resolve_update_target(base_path, target)
    except ValueError as e:
        sink.error(f"Error: {e}")
        return 1

    if not repo_path.exists():
        sink.error(f"Error: {display_name} not found at: {repo_path}")
        return 1
    if not repo_path.is_dir():
        sink.error(f"Error: Path exists but is not a directory: {repo_path}")
        return 1

    sink.print(f"Checking {display_name} at: {repo_path}")
    status = evaluator.evaluate(repo_path, RepositoryKind(target.kind))

    if not status.is_repository:
        sink.error("Error: Not a git repository")
        return 1
    if status.error:
        sink.error(f"Error: {status.error}")
        return 1

    sink.print("\n[bold]Repository Status:[/]")
    sink.print(f"  Branch: {status.branch}")
    sink.print(f"  Uncommitted changes: {'Yes' if status.has_uncommitted_changes else 'No'}")
    sink.print(f"  Commits behind: {status.commits_behind}")

    if status.commits_behind <= 0:
        sink.print("\n[green]✅ Already up to date![/]")
        return 0

    result = evaluator.attempt_pull(status, single=True)
    if result.state == EvaluationState.PULL_DECLINED:
        sink.print("Update cancelled.")
        return 0
    if result.pulled:
        sink.print("\n[green]✅ Successfully updated![/]")
        return 0

    sink.error("\n❌ Pull failed:")
    sink.print(result.pull_error, markup=False, report=False)
    return 1


# =============================================================================
# CLI Application
# =============================================================================


app = typer.Typer(
    name="mw-fleet",
    help="Check a MediaWiki installation's core, extensions and skins for updates.",
    no_args_is_help=True,
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        print(f"mw-fleet {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """mw-fleet: keep a local MediaWiki checkout and its extensions current."""


def get_console_and_formatter(
    json_output: bool, verbose: bool = False
) -> tuple[OutputSink, OutputFormatter]:
    """Create the shared output sink and formatter."""
    sink = OutputSink(Console(), verbose=verbose)
    formatter = OutputFormatter(sink, use_json=json_output)
    return sink, formatter


def resolve_installation_path(path: Path | None, sink: OutputSink) -> Path:
    """Validate (prompting for, if needed) the MediaWiki installation path."""
    if path is None:
        try:
            entered = sink.console.input("Enter MediaWiki installation path: ").strip()
        except EOFError:
            entered = ""
        if not entered:
            sink.error("Error: No MediaWiki installation path given")
            raise typer.Exit(1)
        path = Path(entered).expanduser()

    if not path.is_dir():
        sink.error(f"Error: Invalid MediaWiki installation path: {path}")
        raise typer.Exit(1)

    if not is_mediawiki_installation(path):
        sink.error("Error: Directory does not appear to be a MediaWiki installation.")
        sink.error(
            "Expected files/directories not found "
            "(index.php, api.php, includes/, extensions/, skins/)."
        )
        raise typer.Exit(1)
    return path


def announce_policy(sink: OutputSink, policy: ScanPolicy, json_output: bool = False) -> None:
    if json_output:
        return
    if policy.verbose:
        sink.print("Verbose mode enabled", report=False)
    if policy.report_only:
        sink.print("Report-only mode enabled (no automatic pulls)", report=False)
    if policy.auto_yes:
        sink.print("Auto-yes mode enabled (no prompts)", report=False)


@app.command()
def check(
    path: Path = typer.Argument(
        None,
        envvar="MW_FLEET_PATH",
        help="Path to the MediaWiki installation (prompted for if omitted)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Trace every git command and its output",
    ),
    report_only: bool = typer.Option(
        False,
        "--report-only",
        help="Only report status, never pull",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Auto-confirm all pull prompts",
    ),
    report_file: Path = typer.Option(
        None,
        "--report-file",
        help="Save results and summary to a file",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Repositories checked in parallel (default: CPU count)",
    ),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        "-s",
        help="Check repositories one at a time",
    ),
    timeout: float = typer.Option(
        None,
        "--timeout",
        min=1,
        help="Give up on a single git command after this many seconds",
    ),
):
    """Check core, extensions and skins; pull master/main branches that are behind.

    Repositories on master or main with updates are pulled after a prompt
    (skipped with --yes). Use --report-only to never pull.
    """
    policy = ScanPolicy(verbose=verbose, report_only=report_only, auto_yes=yes)
    sink, formatter = get_console_and_formatter(json_output, verbose=verbose)
    announce_policy(sink, policy, json_output)
    if report_file is not None and not json_output:
        sink.print(f"Report will be saved to: {report_file}", report=False)

    base_path = resolve_installation_path(path, sink)

    evaluator = RepositoryEvaluator(policy, sink, timeout=timeout)
    scanner = FleetScanner(evaluator, max_workers=1 if sequential else workers)
    extensions_path = base_path / "extensions"
    skins_path = base_path / "skins"

    if not json_output:
        sink.print(f"Checking MediaWiki installation at: {base_path}", report=False)
        if not report_only:
            sink.print("Auto-pull enabled for master/main branches with updates", report=False)
        sink.print("This may take a moment...", report=False)

    def run_scan() -> tuple[list[RepositoryStatus], list[RepositoryStatus], list[RepositoryStatus]]:
        if not json_output:
            sink.print("Checking MediaWiki core...", report=False)
        core_results = [evaluator.evaluate(base_path, RepositoryKind.CORE)]

        if not json_output:
            extension_count = count_directories(extensions_path)
            sink.print(f"Checking extensions ({extension_count})...", report=False)
        formatter.print_directory_header("extensions", extensions_path)
        extension_results = scanner.scan(extensions_path, RepositoryKind.EXTENSION)

        if not json_output:
            sink.print(f"Checking skins ({count_directories(skins_path)})...", report=False)
        formatter.print_directory_header("skins", skins_path)
        skin_results = scanner.scan(skins_path, RepositoryKind.SKIN)
        return core_results, extension_results, skin_results

    # A live spinner would fight with prompts and verbose traces
    if not json_output and not policy.interactive and not policy.verbose:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=sink.console,
            transient=True,
        ) as progress:
            progress.add_task("Fetching and analyzing...", total=None)
            core_results, extension_results, skin_results = run_scan()
    else:
        core_results, extension_results, skin_results = run_scan()

    summary = FleetSummary.from_statuses(core_results, extension_results, skin_results)

    if report_file is not None:
        if not formatter.open_report(report_file):
            sink.print(
                f"[yellow]Warning: Could not open report file: {report_file}[/]", report=False
            )

    formatter.print_fleet(core_results, extension_results, skin_results, summary)

    if sink.reporting:
        sink.close_report()
        if not json_output:
            sink.print(f"Report saved to: {report_file}")


@app.command()
def update(
    kind: str = typer.Argument(
        ...,
        help="What to update: core, extension or skin",
    ),
    name: str = typer.Argument(
        None,
        help="Extension or skin directory name (not used for core)",
    ),
    path: Path = typer.Option(
        None,
        "--path",
        "-p",
        envvar="MW_FLEET_PATH",
        help="Path to the MediaWiki installation (prompted for if omitted)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Trace every git command and its output",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Pull without asking",
    ),
    timeout: float = typer.Option(
        None,
        "--timeout",
        min=1,
        help="Give up on a single git command after this many seconds",
    ),
):
    """Update a single repository: core, or one extension or skin.

    Examples: update core | update extension WikimediaEvents | update skin Vector
    """
    target = UpdateTarget(kind=kind, name=name or "")
    policy = ScanPolicy(verbose=verbose, auto_yes=yes, update_target=target)
    sink, _ = get_console_and_formatter(False, verbose=verbose)
    announce_policy(sink, policy)

    # Argument problems are reported before asking for a path
    try:
        resolve_update_target(Path("."), target)
    except ValueError as e:
        sink.error(f"Error: {e}")
        raise typer.Exit(1)

    base_path = resolve_installation_path(path, sink)
    evaluator = RepositoryEvaluator(policy, sink, timeout=timeout)
    exit_code = update_single_repository(base_path, target, evaluator, sink)
    if exit_code:
        raise typer.Exit(exit_code)

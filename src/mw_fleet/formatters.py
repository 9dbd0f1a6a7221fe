"""Output formatters for console, report file and JSON display."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from .core import FleetSummary, OutputSink, RepositoryStatus

SECTIONS = (
    ("core", "MEDIAWIKI CORE", ""),
    ("extensions", "EXTENSIONS", "No extensions found or extensions directory doesn't exist."),
    ("skins", "SKINS", "No skins found or skins directory doesn't exist."),
)


class OutputFormatter:
    """Format scan results for the console (and report file) or as JSON."""

    def __init__(self, sink: OutputSink, use_json: bool = False):
        self.sink = sink
        self.use_json = use_json

    def open_report(self, path: Path) -> bool:
        """Mirror everything printed from now on into a report file.

        The file starts with the generation timestamp.
        """
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return self.sink.open_report(path, header=timestamp)

    def print_directory_header(self, dir_type: str, dir_path: Path):
        """Print the verbose banner shown before a directory scan."""
        if self.use_json:
            return
        rule = "=" * 80
        self.sink.trace(f"\n{rule}\nScanning {dir_type} directory: {dir_path}\n{rule}")

    def print_fleet(
        self,
        core: list[RepositoryStatus],
        extensions: list[RepositoryStatus],
        skins: list[RepositoryStatus],
        summary: FleetSummary,
    ):
        """Print all three sections and the summary."""
        if self.use_json:
            self._print_fleet_json(core, extensions, skins, summary)
            return

        for (_, title, empty_message), statuses in zip(SECTIONS, (core, extensions, skins)):
            self._print_section(title, statuses, empty_message)
        self._print_summary(summary)

    def _print_section(self, title: str, statuses: list[RepositoryStatus], empty_message: str):
        self.sink.print(f"\n[bold]{title}:[/]")
        if statuses:
            self._print_status_table(statuses)
        elif empty_message:
            self.sink.print(f"[dim]{empty_message}[/]")

    def _print_status_table(self, statuses: list[RepositoryStatus]):
        """Print rich table output."""
        table = Table()

        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Type")
        table.add_column("Branch")
        table.add_column("Behind", justify="right")
        table.add_column("Uncommitted", justify="center")
        table.add_column("Status")

        for status in statuses:
            table.add_row(
                escape(status.name),
                status.kind.value,
                escape(status.branch) if status.branch else "[dim]N/A[/]",
                self._get_behind_display(status),
                self._get_uncommitted_display(status),
                self._get_status_display(status),
            )

        self.sink.print(table)

    def _get_behind_display(self, status: RepositoryStatus) -> str:
        behind = status.displayed_behind
        if behind is None:
            return "[dim]N/A[/]"
        if behind > 0:
            return f"[blue]{behind}[/]"
        return "0"

    def _get_uncommitted_display(self, status: RepositoryStatus) -> str:
        if status.is_error:
            return "[dim]N/A[/]"
        if status.has_uncommitted_changes:
            return "[yellow]Yes[/]"
        return "No"

    def _get_status_display(self, status: RepositoryStatus) -> str:
        """Get status text, mirroring the order the evaluator resolves states."""
        if not status.is_repository:
            return "[yellow]⚠️  Not a git repo[/]"
        if status.error:
            return f"[yellow]⚠️  {escape(status.error)}[/]"
        if status.pulled:
            if status.has_uncommitted_changes:
                return "[green]✅ Pulled[/] [yellow](⚠️  had uncommitted changes)[/]"
            return "[green]✅ Pulled and up to date[/]"
        if status.pull_error:
            return f"[red]❌ Pull failed: {escape(status.pull_error)}[/]"
        if status.has_updates:
            return "[red]🔴 Updates available[/]"
        return "[green]✅ Up to date[/]"

    def _print_summary(self, summary: FleetSummary):
        """Print summary."""
        lines = [
            "\n[bold]SUMMARY:[/]",
            f"  Total repositories: {summary.total}",
            f"  Up to date: {summary.up_to_date}",
            f"  Updates available: {summary.has_updates}",
            f"  Errors/Warnings: {summary.errors}",
        ]
        if summary.pulled > 0:
            lines.append(f"  Pulled: {summary.pulled}")
        if summary.pull_failed > 0:
            lines.append(f"  Pull failed: {summary.pull_failed}")

        for line in lines:
            self.sink.print(line, highlight=False)
        self.sink.print()

    def _print_fleet_json(
        self,
        core: list[RepositoryStatus],
        extensions: list[RepositoryStatus],
        skins: list[RepositoryStatus],
        summary: FleetSummary,
    ):
        """Print JSON output."""
        output = {
            key: [s.to_dict() for s in statuses]
            for (key, _, _), statuses in zip(SECTIONS, (core, extensions, skins))
        }
        output["summary"] = summary.to_dict()
        self.sink.print(
            json.dumps(output, indent=2), soft_wrap=True, markup=False, highlight=False, emoji=False
        )

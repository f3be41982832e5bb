"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
colored status lines, a spinner while a pass runs, the yes/no prompt for the
notes folder, and the end-of-pass summary. Supports verbosity levels and the
--no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List, Tuple

from rich.console import Console
from rich.live import Live
from rich.prompt import Confirm
from rich.spinner import Spinner

from project_notes.note_mapper.models import SyncReport


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Notes updated")
        >>> with handler.spinner("Syncing project notes..."):
        ...     report = engine.run_pass()
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message)

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; the default answer is no."""
        return Confirm.ask(question, console=self.console, default=False)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner while a single operation runs.

        Example:
            >>> with handler.spinner("Fetching projects..."):
            ...     tree = builder.build_tree()
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_sync_summary(self, report: SyncReport, dry_run: bool = False) -> None:
        """Display the outcome of one pass with color coding.

        Args:
            report: Report of the finished pass
            dry_run: Word the summary as a preview
        """
        title = "Dry Run - Changes Preview:" if dry_run else "Sync Summary:"
        verb = "Would " if dry_run else ""
        self.console.print(f"\n[bold]{title}[/bold]")

        self._print_paths(f"{verb}create", "green", "+", report.created)
        self._print_moves(f"{verb}move", "blue", "↔", report.moved)
        self._print_moves(f"{verb}archive", "yellow", "⊘", report.archived)
        self._print_paths(f"{verb}delete", "red", "✗", report.deleted)

        if report.unchanged_count > 0:
            self.console.print(f"  [dim]─[/dim] Unchanged: {report.unchanged_count} note(s)")

        if report.linked_tasks > 0:
            label = "Would link" if dry_run else "Linked"
            self.console.print(f"  [green]🔗[/green] {label}: {report.linked_tasks} task(s)")

        for message in report.collisions:
            self.warning(message)
        if report.orphaned_ids:
            self.warning(
                f"{len(report.orphaned_ids)} project(s) skipped, parent not found: "
                f"{', '.join(report.orphaned_ids)}"
            )
        for message in report.conflicts:
            self.console.print(f"  [red]⚡[/red] {message}")
        for message in report.errors + report.link_errors:
            self.error(message)

        if report.errors or report.link_errors:
            self.console.print("\n[red]Sync completed with errors[/red]")
        elif report.conflicts:
            self.console.print("\n[red]Sync completed with conflicts[/red]")
        elif report.change_count == 0:
            self.console.print("\n[green]Already in sync. No changes detected.[/green]")
        elif dry_run:
            self.console.print("\n[green]Dry run complete. No changes applied.[/green]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")

    def _print_paths(self, label: str, color: str, symbol: str, paths: List[str]) -> None:
        if not paths:
            return
        self.console.print(f"  [{color}]{symbol}[/{color}] {label.capitalize()}: {len(paths)} note(s)")
        if self.verbosity >= 1:
            for path in paths:
                self.console.print(f"      {path}")

    def _print_moves(self, label: str, color: str, symbol: str, moves: List[Tuple[str, str]]) -> None:
        if not moves:
            return
        self.console.print(f"  [{color}]{symbol}[/{color}] {label.capitalize()}: {len(moves)} note(s)")
        if self.verbosity >= 1:
            for old_path, new_path in moves:
                self.console.print(f"      {old_path} → {new_path}")

"""Unit tests for cli.output module."""

from unittest.mock import patch

import pytest
from rich.console import Console

from project_notes.cli.output import OutputHandler
from project_notes.note_mapper.models import SyncReport


def make_handler(verbosity=0):
    handler = OutputHandler(verbosity=verbosity, no_color=True)
    handler.console = Console(record=True, no_color=True, width=200)
    return handler


class TestOutputHandlerInit:
    """Test cases for OutputHandler initialization."""

    def test_init_default_verbosity_and_color(self):
        handler = OutputHandler()

        assert handler.verbosity == 0
        assert handler.console.no_color is False

    def test_init_no_color_true(self):
        handler = OutputHandler(no_color=True)

        assert handler.console.no_color is True


class TestOutputHandlerMessages:
    """Test cases for the message helpers."""

    def test_success_error_warning_always_shown(self):
        handler = make_handler()

        handler.success("done")
        handler.error("failed")
        handler.warning("careful")

        text = handler.console.export_text()
        assert "✓ done" in text
        assert "✗ failed" in text
        assert "⚠ careful" in text

    @pytest.mark.parametrize("verbosity, shown", [(0, False), (1, True), (2, True)])
    def test_info_depends_on_verbosity(self, verbosity, shown):
        handler = make_handler(verbosity)

        handler.info("details")

        assert ("details" in handler.console.export_text()) is shown

    @pytest.mark.parametrize("verbosity, shown", [(1, False), (2, True)])
    def test_debug_depends_on_verbosity(self, verbosity, shown):
        handler = make_handler(verbosity)

        handler.debug("internals")

        assert ("internals" in handler.console.export_text()) is shown

    def test_confirm_defaults_to_no(self):
        handler = make_handler()

        with patch("project_notes.cli.output.Confirm.ask", return_value=False) as mock_ask:
            assert handler.confirm("Use the root folder?") is False

        mock_ask.assert_called_once_with(
            "Use the root folder?", console=handler.console, default=False
        )

    def test_spinner_runs_body(self):
        handler = make_handler()
        ran = []

        with handler.spinner("Working..."):
            ran.append(True)

        assert ran == [True]


class TestPrintSyncSummary:
    """Test cases for print_sync_summary."""

    def test_counts_and_success_line(self):
        handler = make_handler()
        report = SyncReport(
            created=["Projects/Work.md", "Projects/Home.md"],
            moved=[("Projects/Site.md", "Projects/Work/Site.md")],
            unchanged_count=3,
            linked_tasks=4,
        )

        handler.print_sync_summary(report)

        text = handler.console.export_text()
        assert "Sync Summary:" in text
        assert "Create: 2 note(s)" in text
        assert "Move: 1 note(s)" in text
        assert "Unchanged: 3 note(s)" in text
        assert "Linked: 4 task(s)" in text
        assert "Sync completed successfully" in text
        assert "Projects/Work.md" not in text

    def test_paths_listed_when_verbose(self):
        handler = make_handler(verbosity=1)
        report = SyncReport(
            created=["Projects/Work.md"],
            archived=[("Projects/Old.md", "Projects/__ArchivedNotes/9-Old.md")],
        )

        handler.print_sync_summary(report)

        text = handler.console.export_text()
        assert "Projects/Work.md" in text
        assert "Projects/Old.md → Projects/__ArchivedNotes/9-Old.md" in text

    def test_dry_run_wording(self):
        handler = make_handler()
        report = SyncReport(created=["Projects/Work.md"], deleted=["Projects/Old.md"])

        handler.print_sync_summary(report, dry_run=True)

        text = handler.console.export_text()
        assert "Dry Run - Changes Preview:" in text
        assert "Would create: 1 note(s)" in text
        assert "Would delete: 1 note(s)" in text
        assert "Dry run complete. No changes applied." in text

    def test_no_changes(self):
        handler = make_handler()

        handler.print_sync_summary(SyncReport(unchanged_count=5))

        assert "Already in sync. No changes detected." in handler.console.export_text()

    def test_conflicts_and_warnings(self):
        handler = make_handler()
        report = SyncReport(
            conflicts=["Multiple notes contain project 7"],
            collisions=["Renamed duplicate 'Ops' to 'Ops (4)'"],
            orphaned_ids=["8", "9"],
        )

        handler.print_sync_summary(report)

        text = handler.console.export_text()
        assert "Multiple notes contain project 7" in text
        assert "Renamed duplicate 'Ops' to 'Ops (4)'" in text
        assert "2 project(s) skipped, parent not found: 8, 9" in text
        assert "Sync completed with conflicts" in text

    def test_errors_take_precedence(self):
        handler = make_handler()
        report = SyncReport(conflicts=["c"], link_errors=["Error updating task 'Call Bob'."])

        handler.print_sync_summary(report)

        text = handler.console.export_text()
        assert "Error updating task 'Call Bob'." in text
        assert "Sync completed with errors" in text
        assert "with conflicts" not in text

    def test_dry_run_task_links_worded_as_preview(self):
        handler = make_handler()

        handler.print_sync_summary(SyncReport(linked_tasks=2), dry_run=True)

        assert "Would link: 2 task(s)" in handler.console.export_text()

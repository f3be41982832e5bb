"""Data models for CLI operations."""

from enum import IntEnum

from project_notes.note_mapper.models import SyncReport


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Pass completed without errors or conflicts
    - GENERAL_ERROR (1): Configuration problems, aborted passes, or per-note
      and per-task errors reported during a pass
    - CONFLICTS (2): The pass finished but reported conflicts to resolve manually
    - AUTH_ERROR (3): The Todoist API token is missing or rejected
    - NETWORK_ERROR (4): The Todoist API is unreachable or keeps failing

    Example:
        >>> exit_code = ExitCode.from_report(report)
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFLICTS = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4

    @classmethod
    def from_report(cls, report: SyncReport) -> "ExitCode":
        """Errors outrank conflicts; a clean pass is SUCCESS."""
        if report.errors or report.link_errors:
            return cls.GENERAL_ERROR
        if report.conflicts:
            return cls.CONFLICTS
        return cls.SUCCESS

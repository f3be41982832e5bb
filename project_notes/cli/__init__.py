"""Command-line interface for Todoist project notes.

This package provides the `project-notes` CLI tool that runs sync passes
between the Todoist project tree and a folder of markdown notes, with a dry
run preview, a watch mode and readable summaries.
"""

from .sync_command import SyncCommand
from .init_command import InitCommand
from .models import ExitCode
from .errors import (
    CLIError,
    ConfigNotFoundError,
    InitError,
)

__all__ = [
    'SyncCommand',
    'InitCommand',
    'ExitCode',
    'CLIError',
    'ConfigNotFoundError',
    'InitError',
]

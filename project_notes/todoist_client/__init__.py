"""Todoist client library for project note sync.

This package provides a thin Python layer over the Todoist REST API covering
the three calls the sync engine needs: listing projects, listing tasks and
updating a task's description.
"""

from .errors import (
    SyncError,
    TodoistError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    APIUnreachableError,
    APIAccessError,
)

__all__ = [
    "SyncError",
    "TodoistError",
    "InvalidCredentialsError",
    "ResourceNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
]

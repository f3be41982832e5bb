"""Typed exception hierarchy for Todoist-related errors.

This module defines all custom exceptions used by the Todoist client library.
All exceptions inherit from TodoistError so callers can catch any remote
failure in one place.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all project-notes errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class TodoistError(SyncError):
    """Base exception for all Todoist-related errors."""
    pass


class InvalidCredentialsError(TodoistError):
    """Raised when the API token is missing or rejected."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"API token is invalid (endpoint: {endpoint})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class ResourceNotFoundError(TodoistError):
    """Raised when a requested project or task does not exist."""

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class APIUnreachableError(TodoistError):
    """Raised when the Todoist API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(TodoistError):
    """Raised when API access fails after retries or for an unexpected status."""

    def __init__(self, message: str = "Todoist API failure (after 3 retries)"):
        super().__init__(message)

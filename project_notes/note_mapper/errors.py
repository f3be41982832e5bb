"""Typed exception hierarchy for note mapper errors.

This module defines all custom exceptions used by the note mapper library.
All exceptions inherit from NoteMapperError and include descriptive messages
with context to help with debugging.
"""

from typing import Optional

from project_notes.todoist_client.errors import SyncError


class NoteMapperError(SyncError):
    """Base exception for all note mapper errors."""
    pass


class FilesystemError(NoteMapperError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(NoteMapperError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class FrontmatterError(NoteMapperError):
    """Raised when YAML frontmatter parsing fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message


class NoteRootNotFoundError(NoteMapperError):
    """Raised when the configured notes folder does not exist in the vault."""

    def __init__(self, note_folder: str):
        super().__init__(
            f"The specified notes folder '{note_folder}' does not exist"
        )
        self.note_folder = note_folder


class TemplateNotFoundError(NoteMapperError):
    """Raised when the configured template file cannot be found."""

    def __init__(self, template_file: str):
        super().__init__(
            f"Template file '{template_file}' does not exist"
        )
        self.template_file = template_file


class ArchiveFolderError(NoteMapperError):
    """Raised when the archive folder cannot be created."""

    def __init__(self, archive_path: str, reason: Optional[str] = None):
        message = f"Error creating archive folder '{archive_path}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.archive_path = archive_path
        self.reason = reason

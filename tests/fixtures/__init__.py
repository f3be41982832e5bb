"""Test fixtures shared by unit and integration tests."""

from .todoist_fixtures import FakeTodoistAPI, SAMPLE_PROJECTS, SAMPLE_TASKS

__all__ = [
    "FakeTodoistAPI",
    "SAMPLE_PROJECTS",
    "SAMPLE_TASKS",
]

"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_project_notes_logger():
    """Undo logger configuration done by CLI tests (level and handlers)."""
    yield
    root = logging.getLogger("project_notes")
    root.setLevel(logging.NOTSET)
    root.handlers.clear()
    root.propagate = True

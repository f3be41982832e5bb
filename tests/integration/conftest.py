"""Pytest configuration and fixtures for integration tests."""

from pathlib import Path

import pytest

from project_notes.note_mapper.models import NotesConfig
from project_notes.note_mapper.sync_engine import SyncEngine
from project_notes.note_mapper.vault import Vault
from tests.fixtures.todoist_fixtures import FakeTodoistAPI, SAMPLE_PROJECTS, SAMPLE_TASKS


@pytest.fixture
def vault_dir(tmp_path) -> Path:
    """Temporary vault with an empty Projects folder."""
    (tmp_path / "Projects").mkdir()
    return tmp_path


@pytest.fixture
def fake_api() -> FakeTodoistAPI:
    return FakeTodoistAPI(SAMPLE_PROJECTS, SAMPLE_TASKS)


@pytest.fixture
def make_engine(vault_dir, fake_api):
    """Factory for engines over the temporary vault.

    Example:
        >>> engine = make_engine(nested=False)
        >>> report = engine.run_pass()
    """
    def _make(dry_run: bool = False, **overrides) -> SyncEngine:
        values = dict(vault_path=str(vault_dir), note_folder="Projects")
        values.update(overrides)
        return SyncEngine(NotesConfig(**values), fake_api, Vault(vault_dir, dry_run=dry_run))
    return _make

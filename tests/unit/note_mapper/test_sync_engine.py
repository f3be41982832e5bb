"""Unit tests for note_mapper.sync_engine module."""

import pytest
from unittest.mock import Mock

from project_notes.note_mapper.errors import NoteRootNotFoundError, TemplateNotFoundError
from project_notes.note_mapper.models import DeletedProjectHandling, NotesConfig
from project_notes.note_mapper.note_index import NoteIndex
from project_notes.note_mapper.sync_engine import SyncEngine
from project_notes.note_mapper.vault import Vault
from project_notes.todoist_client.errors import InvalidCredentialsError


def make_api(projects, tasks=None):
    api = Mock()
    api.list_projects.return_value = projects
    api.list_tasks.return_value = tasks or []
    return api


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Projects").mkdir()
    return Vault(tmp_path)


def make_config(tmp_path, **overrides):
    values = dict(vault_path=str(tmp_path), note_folder="Projects")
    values.update(overrides)
    return NotesConfig(**values)


class TestRunPass:

    def test_missing_note_root(self, tmp_path):
        engine = SyncEngine(make_config(tmp_path, note_folder="Nope"), make_api([]), Vault(tmp_path))

        with pytest.raises(NoteRootNotFoundError, match="Nope"):
            engine.run_pass()

    def test_creates_notes_and_reports_orphans(self, tmp_path, vault):
        api = make_api([
            {'id': '1', 'name': 'Work'},
            {'id': '2', 'name': 'Website', 'parent_id': '1'},
            {'id': '7', 'name': 'Lost', 'parent_id': 'gone'},
        ])

        report = SyncEngine(make_config(tmp_path), api, vault).run_pass()

        assert report.created == ['Projects/Work.md', 'Projects/Work/Website.md']
        assert report.orphaned_ids == ['7']
        api.list_tasks.assert_not_called()

    def test_auth_failure_propagates(self, tmp_path, vault):
        api = Mock()
        api.list_projects.side_effect = InvalidCredentialsError("https://api.todoist.com")

        with pytest.raises(InvalidCredentialsError):
            SyncEngine(make_config(tmp_path), api, vault).run_pass()

    def test_uses_given_index_snapshot(self, tmp_path, vault):
        (tmp_path / "Projects/Renamed.md").write_text("---\ntodoist-project-id: '1'\n---\nkeep")
        index = NoteIndex({'1': ['Projects/Renamed.md']})

        report = SyncEngine(make_config(tmp_path), make_api([{'id': '1', 'name': 'Work'}]), vault).run_pass(index)

        assert report.moved == [('Projects/Renamed.md', 'Projects/Work.md')]
        assert index.paths_for('1') == ['Projects/Work.md']

    def test_links_tasks_when_enabled(self, tmp_path, vault):
        api = make_api(
            [{'id': '1', 'name': 'Work'}],
            tasks=[{'id': 't1', 'project_id': '1', 'content': 'x', 'description': ''}],
        )

        report = SyncEngine(make_config(tmp_path, link_tasks=True), api, vault).run_pass()

        api.update_task.assert_called_once_with('t1', "Project note: [[Work]]\n")
        assert report.linked_tasks == 1

    def test_archive_failure_ends_pass_before_linking(self, tmp_path, vault):
        (tmp_path / "Projects/Old.md").write_text("---\ntodoist-project-id: '9'\n---\n")
        (tmp_path / "Projects/__ArchivedNotes").write_text("a file in the way")
        api = make_api([{'id': '1', 'name': 'Work'}])
        config = make_config(
            tmp_path, link_tasks=True, deleted_project_handling=DeletedProjectHandling.ARCHIVE
        )

        report = SyncEngine(config, api, vault).run_pass()

        assert any("archive folder" in e for e in report.errors)
        assert (tmp_path / "Projects/Old.md").exists()
        api.list_tasks.assert_not_called()


class TestTemplate:

    def test_template_without_extension_is_found(self, tmp_path, vault):
        (tmp_path / "Templates").mkdir()
        (tmp_path / "Templates/Project.md").write_text("---\nstatus: active\n---\n## Notes\n")
        config = make_config(tmp_path, template_file="Templates/Project")

        SyncEngine(config, make_api([{'id': '1', 'name': 'Work'}]), vault).run_pass()

        content = (tmp_path / "Projects/Work.md").read_text()
        assert "status: active" in content
        assert content.endswith("## Notes\n")

    def test_missing_template_aborts(self, tmp_path, vault):
        config = make_config(tmp_path, template_file="Templates/Missing.md")

        with pytest.raises(TemplateNotFoundError):
            SyncEngine(config, make_api([{'id': '1', 'name': 'Work'}]), vault).run_pass()

        assert not (tmp_path / "Projects/Work.md").exists()

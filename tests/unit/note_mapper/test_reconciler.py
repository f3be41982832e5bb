"""Unit tests for note_mapper.reconciler module."""

import pytest
from unittest.mock import patch

from project_notes.note_mapper.errors import FilesystemError
from project_notes.note_mapper.frontmatter_handler import FrontmatterHandler
from project_notes.note_mapper.models import NoteTemplate, ProjectNode, SyncContext
from project_notes.note_mapper.note_index import NoteIndex
from project_notes.note_mapper.path_planner import PathPlanner
from project_notes.note_mapper.reconciler import Reconciler
from project_notes.note_mapper.tree_builder import TreeBuilder
from project_notes.note_mapper.vault import Vault


def write_note(root, rel_path, project_id, body=""):
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\ntodoist-project-id: '{project_id}'\n---\n{body}", encoding="utf-8")


def make_context(vault, nodes, index=None, template=None):
    tree = TreeBuilder.build_from_nodes(nodes)
    context = SyncContext(tree=tree, index=index or NoteIndex(), template=template)
    context.note_paths = PathPlanner(vault, "Projects").plan(tree, context.report)
    return context


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Projects").mkdir()
    return Vault(tmp_path)


class TestCreate:
    """Projects without a note get one."""

    def test_creates_missing_notes(self, vault, tmp_path):
        context = make_context(vault, [ProjectNode('1', 'Work'), ProjectNode('2', 'Website', '1')])

        Reconciler(vault, "Projects").reconcile(context)

        assert context.report.created == ['Projects/Work.md', 'Projects/Work/Website.md']
        content = (tmp_path / "Projects/Work/Website.md").read_text()
        assert FrontmatterHandler.get_project_id(content) == '2'
        assert context.index.paths_for('2') == ['Projects/Work/Website.md']

    def test_template_applied(self, vault, tmp_path):
        template = NoteTemplate(fields={'tags': ['project']}, body="## Log\n")
        context = make_context(vault, [ProjectNode('1', 'Work')], template=template)

        Reconciler(vault, "Projects").reconcile(context)

        content = (tmp_path / "Projects/Work.md").read_text()
        assert content.endswith("## Log\n")
        assert "tags:" in content

    def test_create_failure_reported_and_pass_continues(self, vault):
        context = make_context(vault, [ProjectNode('1', 'Work'), ProjectNode('2', 'Home')])
        original = vault.create_file

        def flaky_create(path, content):
            if path == 'Projects/Work.md':
                raise FilesystemError(path, 'create', 'disk full')
            original(path, content)

        with patch.object(vault, 'create_file', side_effect=flaky_create):
            Reconciler(vault, "Projects").reconcile(context)

        assert context.report.created == ['Projects/Home.md']
        assert len(context.report.errors) == 1
        assert "Projects/Work" in context.report.errors[0]


class TestMove:
    """Notes that are in the wrong place follow their project."""

    def test_renamed_project_moves_note_and_keeps_content(self, vault, tmp_path):
        write_note(tmp_path, "Projects/Old name.md", '1', body="my notes")
        index = NoteIndex({'1': ['Projects/Old name.md']})
        context = make_context(vault, [ProjectNode('1', 'New name')], index=index)

        Reconciler(vault, "Projects").reconcile(context)

        assert context.report.moved == [('Projects/Old name.md', 'Projects/New name.md')]
        assert not (tmp_path / "Projects/Old name.md").exists()
        assert (tmp_path / "Projects/New name.md").read_text().endswith("my notes")
        assert context.index.paths_for('1') == ['Projects/New name.md']

    def test_reparented_project_moves_and_cleans_empty_folder(self, vault, tmp_path):
        write_note(tmp_path, "Projects/Home/Garden.md", '3')
        index = NoteIndex({'3': ['Projects/Home/Garden.md']})
        context = make_context(vault, [ProjectNode('1', 'Work'), ProjectNode('3', 'Garden', '1')], index=index)

        Reconciler(vault, "Projects").reconcile(context)

        assert (tmp_path / "Projects/Work/Garden.md").exists()
        assert not (tmp_path / "Projects/Home").exists()

    def test_planned_folders_survive_cleanup(self, vault, tmp_path):
        """A move out of a folder that is still a planned parent keeps it."""
        write_note(tmp_path, "Projects/Work/Website.md", '2')
        index = NoteIndex({'2': ['Projects/Work/Website.md']})
        context = make_context(
            vault,
            [ProjectNode('2', 'Website'), ProjectNode('1', 'Work'), ProjectNode('5', 'Ops', '1')],
            index=index,
        )

        Reconciler(vault, "Projects").reconcile(context)

        assert (tmp_path / "Projects/Website.md").exists()
        assert (tmp_path / "Projects/Work").is_dir()


class TestConflicts:
    """Conflicts are reported and nothing is touched."""

    def test_multiple_notes_with_same_id(self, vault, tmp_path):
        write_note(tmp_path, "Projects/A.md", '1')
        write_note(tmp_path, "Projects/B.md", '1')
        index = NoteIndex({'1': ['Projects/A.md', 'Projects/B.md']})
        context = make_context(vault, [ProjectNode('1', 'Work')], index=index)

        Reconciler(vault, "Projects").reconcile(context)

        assert len(context.report.conflicts) == 1
        assert "Multiple notes" in context.report.conflicts[0]
        assert not (tmp_path / "Projects/Work.md").exists()
        assert context.report.created == []

    def test_target_taken_by_other_project(self, vault, tmp_path):
        write_note(tmp_path, "Projects/Work.md", '99', body="someone else")
        context = make_context(vault, [ProjectNode('1', 'Work')])

        Reconciler(vault, "Projects").reconcile(context)

        assert "different Todoist project ID" in context.report.conflicts[0]
        assert (tmp_path / "Projects/Work.md").read_text().endswith("someone else")

    def test_target_taken_by_note_without_id(self, vault, tmp_path):
        (tmp_path / "Projects/Work.md").write_text("plain note")
        context = make_context(vault, [ProjectNode('1', 'Work')])

        Reconciler(vault, "Projects").reconcile(context)

        assert len(context.report.conflicts) == 1
        assert (tmp_path / "Projects/Work.md").read_text() == "plain note"


class TestIdempotence:
    """A second pass over an unchanged tree changes nothing."""

    def test_second_pass_is_a_no_op(self, vault, tmp_path):
        nodes = [ProjectNode('1', 'Work'), ProjectNode('2', 'Website', '1')]
        first = make_context(vault, nodes)
        Reconciler(vault, "Projects").reconcile(first)

        second = make_context(vault, nodes, index=first.index.copy())
        Reconciler(vault, "Projects").reconcile(second)

        assert second.report.created == []
        assert second.report.moved == []
        assert second.report.unchanged_count == 2

"""Unit tests for note_mapper.vault module."""

import pytest

from project_notes.note_mapper.errors import FilesystemError
from project_notes.note_mapper.vault import Vault, basename, is_within, join_path, normalize_path


class TestPathHelpers:
    """Test cases for the vault path helpers."""

    @pytest.mark.parametrize("raw,expected", [
        ("/Projects//Work/", "Projects/Work"),
        ("Projects\\Work", "Projects/Work"),
        ("", "/"),
        ("/", "/"),
        ("Café", "Café"),
    ])
    def test_normalize_path(self, raw, expected):
        assert normalize_path(raw) == expected

    def test_join_path_skips_root(self):
        assert join_path("/", "Work") == "Work"
        assert join_path("Projects", "", "Work") == "Projects/Work"
        assert join_path("/", "") == "/"

    def test_basename(self):
        assert basename("Projects/Work ~ Website.md") == "Work ~ Website"

    def test_is_within(self):
        assert is_within("Projects/Work.md", "Projects")
        assert is_within("Projects", "Projects")
        assert not is_within("ProjectsOld/Work.md", "Projects")
        assert is_within("anything.md", "/")


class TestVault:
    """Test cases for Vault file-store primitives."""

    @pytest.fixture
    def vault(self, tmp_path):
        return Vault(tmp_path)

    def test_create_and_read(self, vault, tmp_path):
        vault.create_folder("Projects/Work")
        vault.create_file("Projects/Work/Website.md", "hello")

        assert (tmp_path / "Projects/Work/Website.md").read_text() == "hello"
        assert vault.read("Projects/Work/Website.md") == "hello"
        assert vault.get_file("Projects/Work/Website.md") == "Projects/Work/Website.md"
        assert vault.get_folder("Projects/Work") == "Projects/Work"
        assert vault.get_file("Projects/Work") is None
        assert vault.get_abstract_entry("Projects/Missing") is None

    def test_create_file_refuses_to_overwrite(self, vault, tmp_path):
        (tmp_path / "Work.md").write_text("mine")

        with pytest.raises(FilesystemError):
            vault.create_file("Work.md", "other")
        assert (tmp_path / "Work.md").read_text() == "mine"

    def test_rename_moves_content(self, vault, tmp_path):
        (tmp_path / "Old.md").write_text("body")
        (tmp_path / "Work").mkdir()

        vault.rename("Old.md", "Work/New.md")

        assert not (tmp_path / "Old.md").exists()
        assert (tmp_path / "Work/New.md").read_text() == "body"

    def test_rename_refuses_existing_destination(self, vault, tmp_path):
        (tmp_path / "A.md").write_text("a")
        (tmp_path / "B.md").write_text("b")

        with pytest.raises(FilesystemError):
            vault.rename("A.md", "B.md")
        assert (tmp_path / "B.md").read_text() == "b"

    def test_rename_does_not_create_parents(self, vault, tmp_path):
        (tmp_path / "A.md").write_text("a")

        with pytest.raises(FilesystemError):
            vault.rename("A.md", "Missing/A.md")

    def test_delete(self, vault, tmp_path):
        (tmp_path / "A.md").write_text("a")
        vault.delete("A.md")
        assert not (tmp_path / "A.md").exists()

    def test_path_traversal_rejected(self, vault):
        with pytest.raises(FilesystemError, match="traversal"):
            vault.read("../outside.md")

    def test_walk_files_excludes_folder(self, vault, tmp_path):
        (tmp_path / "Projects/__ArchivedNotes").mkdir(parents=True)
        (tmp_path / "Projects/Work.md").write_text("")
        (tmp_path / "Projects/notes.txt").write_text("")
        (tmp_path / "Projects/__ArchivedNotes/1-Old.md").write_text("")

        files = list(vault.walk_files("Projects", exclude="Projects/__ArchivedNotes"))

        assert files == ["Projects/Work.md"]

    def test_dry_run_changes_nothing(self, tmp_path, caplog):
        (tmp_path / "A.md").write_text("a")
        vault = Vault(tmp_path, dry_run=True)

        with caplog.at_level("INFO"):
            vault.create_folder("New")
            vault.create_file("New/B.md", "b")
            vault.rename("A.md", "C.md")
            vault.delete("A.md")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["A.md"]
        assert "[DRYRUN] Would create: New/B.md" in caplog.text

    def test_remove_empty_folders_stops_at_root(self, vault, tmp_path):
        (tmp_path / "Projects/Work/Website").mkdir(parents=True)

        vault.remove_empty_folders("Projects/Work/Website", "Projects")

        assert not (tmp_path / "Projects/Work").exists()
        assert (tmp_path / "Projects").is_dir()

    def test_remove_empty_folders_keeps_listed(self, vault, tmp_path):
        (tmp_path / "Projects/Work/Website").mkdir(parents=True)

        vault.remove_empty_folders("Projects/Work/Website", "Projects", keep={"Projects/Work"})

        assert not (tmp_path / "Projects/Work/Website").exists()
        assert (tmp_path / "Projects/Work").is_dir()

    def test_remove_empty_folders_leaves_non_empty(self, vault, tmp_path):
        (tmp_path / "Projects/Work").mkdir(parents=True)
        (tmp_path / "Projects/Work/Other.md").write_text("")

        vault.remove_empty_folders("Projects/Work", "Projects")

        assert (tmp_path / "Projects/Work/Other.md").exists()

    def test_to_vault_path(self, vault, tmp_path):
        assert vault.to_vault_path(tmp_path / "Projects" / "Work.md") == "Projects/Work.md"
        assert vault.to_vault_path(tmp_path.parent / "elsewhere.md") is None

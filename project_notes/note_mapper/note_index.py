"""Index of existing project notes keyed by embedded project ID.

The index maps each Todoist project ID found in a note's frontmatter to the
ordered list of vault paths carrying it. More than one path for an ID is a
conflict the user has to resolve; the index just records it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from .errors import FilesystemError, FrontmatterError
from .frontmatter_handler import FrontmatterHandler
from .vault import Vault, is_within, normalize_path

logger = logging.getLogger(__name__)

# Parallel header reads during a full scan
MAX_WORKERS = 8


class NoteIndex:
    """Mapping of project ID -> note paths.

    Paths are vault-relative and normalized. The same path never appears
    twice, neither under one ID nor under two different IDs.

    Example:
        >>> index = NoteIndex.scan(vault, "Projects", "Projects/__ArchivedNotes")
        >>> index.paths_for("2203306141")
        ['Projects/Work.md']
    """

    def __init__(self, entries: Optional[Dict[str, List[str]]] = None):
        self._notes: Dict[str, List[str]] = {}
        for project_id, paths in (entries or {}).items():
            for path in paths:
                self.update_file(path, project_id)

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, project_id: str) -> bool:
        return project_id in self._notes

    def ids(self) -> List[str]:
        return list(self._notes)

    def paths_for(self, project_id: str) -> List[str]:
        return list(self._notes.get(project_id, []))

    def as_dict(self) -> Dict[str, List[str]]:
        return {pid: list(paths) for pid, paths in self._notes.items()}

    def copy(self) -> "NoteIndex":
        """Independent snapshot owned by a single sync pass."""
        return NoteIndex(self.as_dict())

    def conflicts(self) -> Dict[str, List[str]]:
        """IDs carried by more than one note."""
        return {pid: list(paths) for pid, paths in self._notes.items() if len(paths) > 1}

    def id_for_path(self, path: str) -> Optional[str]:
        path = normalize_path(path)
        for project_id, paths in self._notes.items():
            if path in paths:
                return project_id
        return None

    def add(self, project_id: str, path: str) -> None:
        """Record path under project_id, keeping insertion order."""
        path = normalize_path(path)
        paths = self._notes.setdefault(project_id, [])
        if path not in paths:
            paths.append(path)

    def update_file(self, path: str, project_id: Optional[str]) -> None:
        """Record the current project ID of a file.

        A stale association under a different ID is dropped first. A None
        project_id means the file no longer carries one.
        """
        path = normalize_path(path)
        current = self.id_for_path(path)
        if current is not None and current != project_id:
            self.remove_file(path)
        if project_id:
            self.add(project_id, path)

    def remove_file(self, path: str) -> Optional[str]:
        """Forget a file; returns the ID it was recorded under, if any.

        An ID whose list becomes empty is removed from the index.
        """
        path = normalize_path(path)
        for project_id, paths in list(self._notes.items()):
            if path in paths:
                paths.remove(path)
                if not paths:
                    del self._notes[project_id]
                return project_id
        return None

    def move_file(self, path: str, new_path: str) -> None:
        """Replace path by new_path in place, keeping the ID's list order."""
        path = normalize_path(path)
        new_path = normalize_path(new_path)
        for paths in self._notes.values():
            if path in paths:
                paths[paths.index(path)] = new_path
                return

    def remove_folder(self, folder: str) -> List[str]:
        """Forget every file under folder; returns the removed paths."""
        removed = [
            path for paths in self._notes.values() for path in paths
            if is_within(path, folder)
        ]
        for path in removed:
            self.remove_file(path)
        return removed

    def move_folder(self, folder: str, new_folder: str) -> None:
        """Rewrite paths after folder was renamed to new_folder."""
        folder = normalize_path(folder)
        new_folder = normalize_path(new_folder)
        for paths in self._notes.values():
            for i, path in enumerate(paths):
                if is_within(path, folder) and path != folder:
                    paths[i] = new_folder + path[len(folder):]

    @classmethod
    def scan(cls, vault: Vault, root: str, archive_folder: str) -> "NoteIndex":
        """Build the index by reading every note below root.

        The archive folder is skipped. Unreadable notes and notes with broken
        frontmatter are logged and left out; the scan itself never fails for
        a single file.

        Args:
            vault: File store to read from
            root: Folder holding the project notes
            archive_folder: Folder excluded from the scan

        Returns:
            NoteIndex for the current state of the vault
        """
        paths = list(vault.walk_files(root, exclude=archive_folder))
        logger.info(f"Scanning {len(paths)} note(s) under '{root}'")

        index = cls()
        if not paths:
            return index

        with ThreadPoolExecutor(max_workers=MAX_WORKERS) as executor:
            results = executor.map(lambda p: cls.read_project_id(vault, p), paths)
            # Results come back in walk order, so list order stays deterministic
            for path, project_id in results:
                if project_id:
                    index.add(project_id, path)

        for project_id, duplicates in index.conflicts().items():
            logger.warning(
                f"Project ID {project_id} appears in {len(duplicates)} notes: "
                f"{', '.join(duplicates)}"
            )

        logger.debug(f"Indexed {len(index)} project ID(s)")
        return index

    @staticmethod
    def read_project_id(vault: Vault, path: str) -> Tuple[str, Optional[str]]:
        try:
            content = vault.read(path)
            return path, FrontmatterHandler.get_project_id(content, path)
        except (FilesystemError, FrontmatterError) as e:
            logger.warning(f"Skipping {path}: {e}")
            return path, None

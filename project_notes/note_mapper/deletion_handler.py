"""Disposition of notes whose Todoist project no longer exists.

Runs once per pass, after every live project has been reconciled, so that a
project that was only renamed is never mistaken for a deleted one.
"""

import logging
import posixpath
from typing import Callable, Dict, List

from .errors import ArchiveFolderError, FilesystemError
from .models import DeletedProjectHandling, SyncContext
from .vault import NOTE_EXTENSION, Vault, basename, join_path

logger = logging.getLogger(__name__)


class DeletionHandler:
    """Applies the configured DeletedProjectHandling to orphaned notes.

    Per-file failures are reported and do not stop the remaining files.

    Example:
        >>> handler = DeletionHandler(vault, "Projects", "__ArchivedNotes",
        ...                           DeletedProjectHandling.ARCHIVE)
        >>> handler.apply(context)
    """

    def __init__(
        self,
        vault: Vault,
        note_folder: str,
        archive_folder: str,
        policy: DeletedProjectHandling,
    ):
        self.vault = vault
        self.note_folder = note_folder
        self.archive_path = join_path(note_folder, archive_folder)
        self.policy = policy

        self._handlers: Dict[DeletedProjectHandling, Callable[[SyncContext, Dict[str, List[str]]], None]] = {
            DeletedProjectHandling.IGNORE: self._ignore,
            DeletedProjectHandling.ARCHIVE: self._archive,
            DeletedProjectHandling.DELETE: self._delete,
        }
        missing = set(DeletedProjectHandling) - set(self._handlers)
        if missing:
            raise ValueError(f"No handler for deleted project handling: {sorted(m.value for m in missing)}")

    @staticmethod
    def deleted_notes(context: SyncContext) -> Dict[str, List[str]]:
        """Indexed project IDs absent from the current tree, with their notes."""
        return {
            project_id: context.index.paths_for(project_id)
            for project_id in context.index.ids()
            if project_id not in context.tree.nodes_by_id
        }

    def apply(self, context: SyncContext) -> None:
        """Run the deletion sub-phase.

        Raises:
            ArchiveFolderError: If the archive folder is needed but cannot be
                created; nothing is archived in that case
        """
        deleted = self.deleted_notes(context)
        logger.info(
            f"{len(deleted)} project(s) no longer exist in Todoist "
            f"(handling: {self.policy.value})"
        )
        if not deleted:
            return
        self._handlers[self.policy](context, deleted)

    def _ignore(self, context: SyncContext, deleted: Dict[str, List[str]]) -> None:
        for project_id, paths in deleted.items():
            logger.debug(f"Ignoring note(s) of deleted project {project_id}: {', '.join(paths)}")

    def _archive(self, context: SyncContext, deleted: Dict[str, List[str]]) -> None:
        try:
            if self.vault.get_folder(self.archive_path) is None:
                self.vault.create_folder(self.archive_path)
        except FilesystemError as e:
            raise ArchiveFolderError(self.archive_path, str(e)) from e

        for project_id, paths in deleted.items():
            for path in paths:
                # Prefix with the ID: notes of different parents may share a name
                new_path = join_path(
                    self.archive_path, f"{project_id}-{basename(path)}{NOTE_EXTENSION}"
                )
                try:
                    if posixpath.dirname(new_path) != self.archive_path:
                        raise FilesystemError(
                            new_path, 'archive', f"Archive name leaves {self.archive_path}"
                        )
                    self.vault.rename(path, new_path)
                except FilesystemError as e:
                    message = f"Error archiving '{path}': {e}"
                    logger.error(message)
                    context.report.errors.append(message)
                    continue
                context.index.remove_file(path)
                context.report.archived.append((path, new_path))
                logger.info(f"Archived {path} -> {new_path}")
                self._prune(path, context)

    def _delete(self, context: SyncContext, deleted: Dict[str, List[str]]) -> None:
        for project_id, paths in deleted.items():
            for path in paths:
                try:
                    self.vault.delete(path)
                except FilesystemError as e:
                    message = f"Error deleting '{path}': {e}"
                    logger.error(message)
                    context.report.errors.append(message)
                    continue
                context.index.remove_file(path)
                context.report.deleted.append(path)
                logger.info(f"Deleted {path} (project {project_id})")
                self._prune(path, context)

    def _prune(self, path: str, context: SyncContext) -> None:
        keep = {posixpath.dirname(p) for p in context.note_paths.values()}
        keep.add(self.archive_path)
        self.vault.remove_empty_folders(posixpath.dirname(path), self.note_folder, keep=keep)

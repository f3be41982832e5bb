"""Reconciliation of planned note paths against existing notes.

For each project the reconciler compares the planned path with what is in
the vault and the note index, and then creates, moves or leaves the note
alone. Conflicts are reported and never resolved automatically. A failed
create or move is reported for that project only; the rest of the tree is
still processed.
"""

import logging
import posixpath
from typing import Set

from .errors import FilesystemError, FrontmatterError
from .frontmatter_handler import FrontmatterHandler
from .models import ProjectNode, SyncContext
from .vault import NOTE_EXTENSION, Vault

logger = logging.getLogger(__name__)


class Reconciler:
    """Creates and moves project notes so they sit at their planned paths.

    Example:
        >>> reconciler = Reconciler(vault, "Projects")
        >>> reconciler.reconcile(context)
        >>> print(f"Created {len(context.report.created)} note(s)")
    """

    def __init__(self, vault: Vault, note_folder: str):
        """Initialize the reconciler.

        Args:
            vault: File store holding the notes
            note_folder: Folder under which notes live (empty folders left
                behind by moves are pruned up to, not including, this folder)
        """
        self.vault = vault
        self.note_folder = note_folder

    def reconcile(self, context: SyncContext) -> None:
        """Bring every reachable project's note to its planned path.

        Commits (creates and moves) are recorded in ``context.index`` so later
        stages see the reconciled state.

        Args:
            context: State of the current pass; ``note_paths`` must be filled
        """
        planned_folders: Set[str] = {
            posixpath.dirname(path) for path in context.note_paths.values()
        }

        for node in context.tree.walk_depth_first():
            target = context.note_paths.get(node.project_id)
            if target is None:
                continue
            try:
                self._reconcile_node(node, target, context, planned_folders)
            except FilesystemError as e:
                # A name like '..' plans a path outside the vault
                message = f"Error placing note for '{target}': {e}"
                logger.error(message)
                context.report.errors.append(message)

        logger.info(
            f"Reconciled notes: {len(context.report.created)} created, "
            f"{len(context.report.moved)} moved, "
            f"{context.report.unchanged_count} unchanged, "
            f"{len(context.report.conflicts)} conflict(s)"
        )

    def _reconcile_node(
        self,
        node: ProjectNode,
        target: str,
        context: SyncContext,
        planned_folders: Set[str],
    ) -> None:
        note_path = target + NOTE_EXTENSION
        report = context.report

        if self.vault.get_file(note_path) is not None:
            self._verify_existing(node, note_path, context)
            return

        existing = context.index.paths_for(node.project_id)

        if len(existing) > 1:
            message = (
                f"Multiple notes containing the same Project ID as '{target}' exist "
                f"({', '.join(existing)}). Please deal with this manually."
            )
            logger.warning(message)
            report.conflicts.append(message)
            return

        if len(existing) == 1:
            old_path = existing[0]
            try:
                self.vault.rename(old_path, note_path)
            except FilesystemError as e:
                message = f"Error moving note to '{target}'. Does it already exist somewhere? ({e})"
                logger.error(message)
                report.errors.append(message)
                return
            context.index.move_file(old_path, note_path)
            report.moved.append((old_path, note_path))
            logger.info(f"Moved {old_path} -> {note_path}")
            self.vault.remove_empty_folders(
                posixpath.dirname(old_path), self.note_folder, keep=planned_folders
            )
            return

        content = FrontmatterHandler.build_note(node.project_id, context.template)
        try:
            self.vault.create_file(note_path, content)
        except FilesystemError as e:
            message = f"Error creating note '{target}'. Does it already exist somewhere? ({e})"
            logger.error(message)
            report.errors.append(message)
            return
        context.index.add(node.project_id, note_path)
        report.created.append(note_path)
        logger.info(f"Created {note_path}")

    def _verify_existing(self, node: ProjectNode, note_path: str, context: SyncContext) -> None:
        """A file already sits at the planned path: it must be this project's note."""
        report = context.report
        try:
            found_id = FrontmatterHandler.get_project_id(self.vault.read(note_path), note_path)
        except (FilesystemError, FrontmatterError) as e:
            message = f"Could not read '{note_path}' to check its project ID: {e}"
            logger.error(message)
            report.errors.append(message)
            return

        if found_id != node.project_id:
            message = (
                f"A note with the name '{note_path}' already exists, but with a different "
                f"Todoist project ID ({found_id or 'none'}). "
                f"Please rename or move the note manually."
            )
            logger.warning(message)
            report.conflicts.append(message)
            return

        report.unchanged_count += 1
        logger.debug(f"Unchanged: {note_path}")

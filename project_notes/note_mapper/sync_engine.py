"""Orchestration of one synchronization pass.

A pass runs these stages in order:

1. Fetch the project tree and index existing notes (concurrently)
2. Plan target paths, creating folders level by level
3. Create or move notes of live projects
4. Archive, delete or ignore notes of deleted projects
5. Optionally link tasks to their project notes

Stage 4 only starts once every live project has been reconciled, so a
renamed project is never mistaken for a deleted one.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from project_notes.todoist_client.api_wrapper import APIWrapper
from .deletion_handler import DeletionHandler
from .errors import ArchiveFolderError, FilesystemError, NoteRootNotFoundError, TemplateNotFoundError
from .frontmatter_handler import FrontmatterHandler
from .models import NotesConfig, NoteTemplate, SyncContext, SyncReport
from .note_index import NoteIndex
from .path_planner import PathPlanner
from .reconciler import Reconciler
from .task_linker import TaskLinker
from .tree_builder import TreeBuilder
from .vault import NOTE_EXTENSION, Vault, join_path, normalize_path

logger = logging.getLogger(__name__)


class SyncEngine:
    """Runs synchronization passes for one vault and one Todoist account.

    Example:
        >>> engine = SyncEngine(config, api, Vault(config.vault_path))
        >>> report = engine.run_pass()
        >>> print(f"{len(report.created)} created, {len(report.moved)} moved")
    """

    def __init__(self, config: NotesConfig, api: APIWrapper, vault: Vault):
        self.config = config
        self.api = api
        self.vault = vault
        self.note_folder = normalize_path(config.note_folder)
        self.archive_path = join_path(self.note_folder, config.archive_folder)

    def run_pass(self, index: Optional[NoteIndex] = None) -> SyncReport:
        """Run one full pass.

        Args:
            index: Snapshot of an incrementally maintained index; when None
                the notes are scanned from scratch

        Returns:
            SyncReport with everything that was done, skipped or refused

        Raises:
            NoteRootNotFoundError: If the notes folder does not exist
            TemplateNotFoundError: If a configured template is missing
            InvalidCredentialsError: If the API token is rejected
            APIUnreachableError: If the API is unreachable
            APIAccessError: If the project listing fails after retries
        """
        if not self.vault.exists() or self.vault.get_folder(self.note_folder) is None:
            raise NoteRootNotFoundError(self.note_folder)

        logger.info(f"Starting sync pass for notes folder '{self.note_folder}'")

        tree_builder = TreeBuilder(self.api)
        if index is None:
            with ThreadPoolExecutor(max_workers=2) as executor:
                tree_future = executor.submit(tree_builder.build_tree)
                index_future = executor.submit(
                    NoteIndex.scan, self.vault, self.note_folder, self.archive_path
                )
                tree = tree_future.result()
                index = index_future.result()
        else:
            tree = tree_builder.build_tree()

        context = SyncContext(tree=tree, index=index, template=self._load_template())
        report = context.report

        planner = PathPlanner(
            self.vault,
            self.note_folder,
            nested=self.config.nested,
            separator=self.config.separator,
        )
        context.note_paths = planner.plan(tree, report)

        Reconciler(self.vault, self.note_folder).reconcile(context)

        handler = DeletionHandler(
            self.vault,
            self.note_folder,
            self.config.archive_folder,
            self.config.deleted_project_handling,
        )
        try:
            handler.apply(context)
        except ArchiveFolderError as e:
            logger.error(str(e))
            report.errors.append(str(e))
            report.orphaned_ids = tree.orphaned_ids()
            return report

        if self.config.link_tasks:
            TaskLinker(self.api, dry_run=self.vault.dry_run).link(context)

        report.orphaned_ids = tree.orphaned_ids()
        logger.info(
            f"Sync pass finished: {report.change_count} change(s), "
            f"{len(report.conflicts)} conflict(s), {len(report.errors)} error(s)"
        )
        return report

    def _load_template(self) -> Optional[NoteTemplate]:
        """Read the configured template, trying the note extension as well.

        Raises:
            TemplateNotFoundError: If a template is configured but missing
        """
        template_file = self.config.template_file.strip()
        if not template_file:
            return None

        path = self.vault.get_file(template_file)
        if path is None and not template_file.endswith(NOTE_EXTENSION):
            path = self.vault.get_file(template_file + NOTE_EXTENSION)
        if path is None:
            raise TemplateNotFoundError(template_file)

        try:
            content = self.vault.read(path)
        except FilesystemError as e:
            raise TemplateNotFoundError(template_file) from e
        logger.debug(f"Using template {path}")
        return FrontmatterHandler.parse_template(content, path)

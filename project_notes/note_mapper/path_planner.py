"""Target path planning for project notes.

Every reachable project gets a canonical vault path (without extension):

- nested mode: one folder per ancestor, e.g. ``Projects/Work/Website/Launch``;
  a project with children also gets a folder of its own name
- flat mode: ancestor names joined by the separator into a single file name,
  e.g. ``Projects/Work ~ Website ~ Launch``

Paths are computed breadth first. All folders of one level are created before
the next level is planned, since child paths live inside them.
"""

import logging
import posixpath
from typing import Dict, List, Optional, Set, Tuple

from .errors import FilesystemError
from .models import ProjectNode, ProjectTree, SyncReport
from .vault import Vault, join_path

logger = logging.getLogger(__name__)


class PathPlanner:
    """Computes note paths and materializes the folders they need.

    Two projects that would end up at the same path (siblings with the same
    name, or flat names that happen to concatenate identically) are told
    apart deterministically: the first one in breadth-first order keeps the
    plain name and later ones get `` (<project id>)`` appended to their own
    segment. The comparison ignores case, as macOS and Windows file systems
    do.

    Example:
        >>> planner = PathPlanner(vault, "Projects", nested=False, separator=" ~ ")
        >>> paths = planner.plan(tree)
        >>> paths["2203306141"]
        'Projects/Work ~ Website ~ Launch'
    """

    def __init__(self, vault: Vault, note_folder: str, nested: bool = True, separator: str = " ~ "):
        """Initialize the planner.

        Args:
            vault: File store in which folders are created
            note_folder: Folder under which all notes live
            nested: Nested (folder per level) or flat naming
            separator: Joins ancestor names in flat mode
        """
        self.vault = vault
        self.note_folder = note_folder
        self.nested = nested
        self.separator = separator

    def plan(self, tree: ProjectTree, report: Optional[SyncReport] = None) -> Dict[str, str]:
        """Compute the target path of every reachable project.

        Args:
            tree: Project tree of this pass
            report: Receives collision notices and folder creation errors

        Returns:
            Mapping project ID -> normalized vault path without extension
        """
        if report is None:
            report = SyncReport()

        note_paths: Dict[str, str] = {}
        # Path relative to the note folder, before joining with it
        relative: Dict[str, str] = {}
        claimed: Set[str] = set()

        level: List[Tuple[ProjectNode, str]] = [
            (tree.nodes_by_id[pid], '') for pid in tree.roots if pid in tree.nodes_by_id
        ]
        seen: Set[str] = set()
        depth = 0

        while level:
            next_level: List[Tuple[ProjectNode, str]] = []
            folders_needed: List[str] = []

            for node, parent_relative in level:
                if node.project_id in seen:
                    continue
                seen.add(node.project_id)

                rel = self._child_path(parent_relative, node.name)
                if join_path(self.note_folder, rel).casefold() in claimed:
                    rel = self._child_path(parent_relative, f"{node.name} ({node.project_id})")
                    message = (
                        f"Project '{node.name}' ({node.project_id}) collides with another "
                        f"project at the same path; using '{posixpath.basename(rel)}'"
                    )
                    logger.warning(message)
                    report.collisions.append(message)

                path = join_path(self.note_folder, rel)
                claimed.add(path.casefold())
                relative[node.project_id] = rel
                note_paths[node.project_id] = path

                children = tree.children(node.project_id)
                if children and self.nested:
                    folders_needed.append(path)
                for child_id in children:
                    child = tree.nodes_by_id.get(child_id)
                    if child is not None:
                        next_level.append((child, rel))

            self._create_folders(folders_needed, report)
            logger.debug(f"Planned level {depth}: {len(level)} project(s)")
            level = next_level
            depth += 1

        return note_paths

    def _child_path(self, parent_relative: str, name: str) -> str:
        if not parent_relative:
            return name
        if self.nested:
            return f"{parent_relative}/{name}"
        return f"{parent_relative}{self.separator}{name}"

    def _create_folders(self, folders: List[str], report: SyncReport) -> None:
        """Create the folders for one level; failures are reported per folder."""
        for folder in folders:
            try:
                if self.vault.get_abstract_entry(folder) is not None:
                    continue
                self.vault.create_folder(folder)
                logger.info(f"Created folder {folder}")
            except FilesystemError as e:
                message = f"Error creating folder '{folder}': {e}"
                logger.error(message)
                report.errors.append(message)

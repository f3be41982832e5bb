"""Data models for the note mapper.

This module defines all data models used by the note mapper library.
All models use dataclasses for clean, type-safe data structures.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Set, Tuple

if TYPE_CHECKING:
    from .note_index import NoteIndex


class DeletedProjectHandling(str, Enum):
    """What to do with notes whose Todoist project no longer exists."""
    IGNORE = 'ignore'
    ARCHIVE = 'archive'
    DELETE = 'delete'


@dataclass
class ProjectNode:
    """A Todoist project as returned by the projects listing.

    Attributes:
        project_id: Stable Todoist project ID
        name: Display name, used verbatim as a path segment
        parent_id: Parent project ID (None for a root project)
    """
    project_id: str
    name: str
    parent_id: Optional[str] = None


@dataclass
class ProjectTree:
    """Project forest rebuilt from scratch on every sync pass.

    Children and roots keep the order in which projects arrived from the API.

    Attributes:
        nodes_by_id: Every project of the listing keyed by ID
        children_of: Parent ID -> ordered child IDs (parent may be absent)
        roots: Ordered IDs of projects without a parent
    """
    nodes_by_id: Dict[str, ProjectNode] = field(default_factory=dict)
    children_of: Dict[str, List[str]] = field(default_factory=dict)
    roots: List[str] = field(default_factory=list)

    def children(self, project_id: str) -> List[str]:
        return self.children_of.get(project_id, [])

    def walk_breadth_first(self) -> Iterator[Tuple[ProjectNode, int]]:
        """Yield (node, depth) level by level, starting at the roots.

        Uses an explicit queue, so deep hierarchies never hit the recursion
        limit. A node is yielded at most once even if the input was malformed.
        """
        queue = deque((root_id, 0) for root_id in self.roots)
        seen: Set[str] = set()
        while queue:
            project_id, depth = queue.popleft()
            node = self.nodes_by_id.get(project_id)
            if node is None or project_id in seen:
                continue
            seen.add(project_id)
            yield node, depth
            queue.extend((child_id, depth + 1) for child_id in self.children(project_id))

    def walk_depth_first(self) -> Iterator[ProjectNode]:
        """Yield nodes in pre-order (parent before its children)."""
        stack = list(reversed(self.roots))
        seen: Set[str] = set()
        while stack:
            project_id = stack.pop()
            node = self.nodes_by_id.get(project_id)
            if node is None or project_id in seen:
                continue
            seen.add(project_id)
            yield node
            stack.extend(reversed(self.children(project_id)))

    def reachable_ids(self) -> Set[str]:
        return {node.project_id for node, _ in self.walk_breadth_first()}

    def orphaned_ids(self) -> List[str]:
        """IDs registered in the tree but not reachable from any root."""
        reachable = self.reachable_ids()
        return [pid for pid in self.nodes_by_id if pid not in reachable]


@dataclass
class TaskRecord:
    """A Todoist task, reduced to the fields the task linker needs."""
    task_id: str
    project_id: str
    content: str = ""
    description: str = ""


@dataclass
class NoteTemplate:
    """Template applied to newly created project notes.

    Attributes:
        fields: Extra frontmatter fields merged after the project ID
        body: Body text appended verbatim after the frontmatter
    """
    fields: Dict[str, object] = field(default_factory=dict)
    body: str = ""


@dataclass
class NotesConfig:
    """Persisted configuration of the project notes sync.

    Attributes:
        vault_path: Directory acting as the root of the file store
        note_folder: Vault-relative folder for project notes ('/' = vault root)
        nested: One folder per hierarchy level when True, flat names otherwise
        separator: Joins ancestor names in flat mode
        deleted_project_handling: Disposition of notes of deleted projects
        archive_folder: Archive sub-folder, relative to note_folder
        template_file: Vault-relative template for new notes ('' = none)
        link_tasks: Insert a link to the project note into task descriptions
        api_token: Todoist API token ('' = read from environment)
        api_url: Base URL of the Todoist REST API
    """
    vault_path: str = "."
    note_folder: str = ""
    nested: bool = True
    separator: str = " ~ "
    deleted_project_handling: DeletedProjectHandling = DeletedProjectHandling.ARCHIVE
    archive_folder: str = "__ArchivedNotes"
    template_file: str = ""
    link_tasks: bool = False
    api_token: str = ""
    api_url: str = "https://api.todoist.com/api/v1"


@dataclass
class SyncReport:
    """Outcome of one synchronization pass.

    Conflicts and errors are kept as human-readable messages; they are shown
    to the user and are never raised.
    """
    created: List[str] = field(default_factory=list)
    moved: List[Tuple[str, str]] = field(default_factory=list)
    unchanged_count: int = 0
    conflicts: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    archived: List[Tuple[str, str]] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    orphaned_ids: List[str] = field(default_factory=list)
    collisions: List[str] = field(default_factory=list)
    linked_tasks: int = 0
    link_errors: List[str] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.created) + len(self.moved) + len(self.archived) + len(self.deleted)


@dataclass
class SyncContext:
    """State of one pass, threaded explicitly through every pipeline stage.

    Built fresh at the start of each pass and discarded afterwards. The index
    held here is owned by the pass (a snapshot when a live watcher exists).
    """
    tree: ProjectTree
    index: "NoteIndex"
    note_paths: Dict[str, str] = field(default_factory=dict)
    template: Optional[NoteTemplate] = None
    report: SyncReport = field(default_factory=SyncReport)

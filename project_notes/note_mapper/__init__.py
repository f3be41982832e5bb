"""Note mapper library for Todoist project notes.

This package keeps a folder of markdown notes in step with the Todoist
project hierarchy: every project gets exactly one note, identified by the
project ID in its YAML frontmatter, at a path derived from the project's
position in the tree.
"""

from .sync_engine import SyncEngine
from .models import (
    DeletedProjectHandling,
    ProjectNode,
    ProjectTree,
    TaskRecord,
    NoteTemplate,
    NotesConfig,
    SyncReport,
    SyncContext,
)
from .errors import (
    NoteMapperError,
    FilesystemError,
    ConfigError,
    FrontmatterError,
    NoteRootNotFoundError,
    TemplateNotFoundError,
    ArchiveFolderError,
)
from .config_loader import ConfigLoader
from .frontmatter_handler import FrontmatterHandler
from .index_watcher import IndexWatcher
from .note_index import NoteIndex
from .tree_builder import TreeBuilder
from .vault import Vault

__all__ = [
    'SyncEngine',
    'DeletedProjectHandling',
    'ProjectNode',
    'ProjectTree',
    'TaskRecord',
    'NoteTemplate',
    'NotesConfig',
    'SyncReport',
    'SyncContext',
    'NoteMapperError',
    'FilesystemError',
    'ConfigError',
    'FrontmatterError',
    'NoteRootNotFoundError',
    'TemplateNotFoundError',
    'ArchiveFolderError',
    'ConfigLoader',
    'FrontmatterHandler',
    'IndexWatcher',
    'NoteIndex',
    'TreeBuilder',
    'Vault',
]

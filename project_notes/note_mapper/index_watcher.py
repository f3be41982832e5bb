"""Incrementally maintained note index driven by filesystem events.

watchdog delivers create/modify/move/delete notifications on its observer
thread. The handler here does nothing but enqueue them; a single consumer
thread owns the live NoteIndex and applies events in arrival order, so no two
threads ever mutate the index at the same time.

The watched root is fixed when the watcher is created. Changing note_folder
in the configuration afterwards leaves this index stale until the watcher is
restarted.
"""

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .models import SyncReport
from .note_index import NoteIndex
from .vault import NOTE_EXTENSION, Vault, is_within, normalize_path

logger = logging.getLogger(__name__)


@dataclass
class IndexEvent:
    """A filesystem change expressed in vault paths.

    Attributes:
        kind: 'created', 'modified', 'moved' or 'deleted'
        path: Vault path the event refers to (source path for moves)
        dest_path: Destination vault path for moves
        is_directory: True if the event concerns a folder
    """
    kind: str
    path: str
    dest_path: Optional[str] = None
    is_directory: bool = False


class _QueueingEventHandler(FileSystemEventHandler):
    """Translates watchdog events to IndexEvents and hands them over."""

    def __init__(self, watcher: "IndexWatcher"):
        super().__init__()
        self._watcher = watcher

    def _forward(self, event: FileSystemEvent) -> None:
        vault = self._watcher.vault
        path = vault.to_vault_path(os.fsdecode(event.src_path))
        dest = getattr(event, 'dest_path', None)
        dest_path = vault.to_vault_path(os.fsdecode(dest)) if dest else None
        if path is None and dest_path is None:
            return
        self._watcher.submit(IndexEvent(
            kind=event.event_type,
            path=path or '',
            dest_path=dest_path,
            is_directory=event.is_directory,
        ))

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(event)


class IndexWatcher:
    """Owns a live NoteIndex and keeps it current from vault events.

    Example:
        >>> watcher = IndexWatcher(vault, "Projects", "Projects/__ArchivedNotes")
        >>> watcher.start()
        >>> index = watcher.snapshot()  # consistent copy for one sync pass
        >>> watcher.stop()
    """

    def __init__(
        self,
        vault: Vault,
        root: str,
        archive_folder: str,
        index: Optional[NoteIndex] = None,
    ):
        """Initialize the watcher.

        Args:
            vault: File store being watched
            root: Note folder; fixed for the lifetime of the watcher
            archive_folder: Folder whose files are never indexed
            index: Initial index; a full scan is done when omitted
        """
        self.vault = vault
        self.root = normalize_path(root)
        self.archive_folder = normalize_path(archive_folder)
        self._index = index if index is not None else NoteIndex.scan(
            vault, self.root, self.archive_folder
        )
        self._queue: "queue.Queue[Optional[IndexEvent]]" = queue.Queue()
        self._lock = threading.Lock()
        self._observer: Optional[Observer] = None
        self._consumer: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the observer and the consumer thread."""
        if self._consumer is not None:
            return
        self._consumer = threading.Thread(
            target=self._consume, name="note-index-consumer", daemon=True
        )
        self._consumer.start()

        self._observer = Observer()
        self._observer.schedule(
            _QueueingEventHandler(self), str(self.vault.root), recursive=True
        )
        self._observer.start()
        logger.info(f"Watching '{self.root}' for note changes")

    def stop(self) -> None:
        """Stop watching; events already queued are still applied."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._consumer is not None:
            self._queue.put(None)
            self._consumer.join()
            self._consumer = None

    def submit(self, event: IndexEvent) -> None:
        self._queue.put(event)

    def record_report(self, report: SyncReport) -> None:
        """Queue the changes a pass made itself.

        Observer events for the same writes may arrive later; applying a change
        twice leaves the index as it was.
        """
        for path in report.created:
            self.submit(IndexEvent(kind='created', path=path))
        for old_path, new_path in report.moved + report.archived:
            self.submit(IndexEvent(kind='moved', path=old_path, dest_path=new_path))
        for path in report.deleted:
            self.submit(IndexEvent(kind='deleted', path=path))

    def drain(self) -> None:
        """Block until every queued event has been applied."""
        self._queue.join()

    def snapshot(self) -> NoteIndex:
        """Copy of the index after all pending events are applied."""
        self.drain()
        with self._lock:
            return self._index.copy()

    def _consume(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                self.apply(event)
            except Exception:
                logger.exception(f"Failed to apply {event}")
            finally:
                self._queue.task_done()

    def _in_scope(self, path: Optional[str]) -> bool:
        return bool(path) and is_within(path, self.root) and not is_within(path, self.archive_folder)

    def apply(self, event: IndexEvent) -> None:
        """Apply one event to the index.

        Only the consumer thread calls this while the watcher is running.
        """
        with self._lock:
            if event.is_directory:
                self._apply_directory_event(event)
            else:
                self._apply_file_event(event)

    def _apply_file_event(self, event: IndexEvent) -> None:
        if event.kind == 'deleted':
            if is_within(event.path, self.root):
                self._index.remove_file(event.path)
            return

        if event.kind == 'moved':
            if event.path:
                self._index.remove_file(event.path)
            target = event.dest_path
        elif event.kind in ('created', 'modified'):
            target = event.path
        else:
            return

        if not target or not target.endswith(NOTE_EXTENSION) or not self._in_scope(target):
            return

        # The file may be gone again by the time we read it
        if self.vault.get_file(target) is None:
            self._index.remove_file(target)
            return

        _, project_id = NoteIndex.read_project_id(self.vault, target)
        self._index.update_file(target, project_id)
        logger.debug(f"Index: {target} -> {project_id}")

    def _apply_directory_event(self, event: IndexEvent) -> None:
        if event.kind == 'deleted' and event.path:
            self._index.remove_folder(event.path)
        elif event.kind == 'moved':
            if event.path and event.dest_path:
                self._index.move_folder(event.path, event.dest_path)
                if not self._in_scope(event.dest_path):
                    self._index.remove_folder(event.dest_path)
            elif event.path:
                self._index.remove_folder(event.path)

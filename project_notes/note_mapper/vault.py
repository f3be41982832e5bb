"""Local file store with vault-relative paths.

The sync engine addresses every file by a normalized, '/'-separated path
relative to the vault directory, the way note-taking apps do. This module
maps those paths onto the real filesystem and converts OS failures into
FilesystemError.
"""

import logging
import os
import posixpath
import re
import shutil
import unicodedata
from pathlib import Path
from typing import Collection, Iterator, Optional, Union

from .errors import FilesystemError

logger = logging.getLogger(__name__)

NOTE_EXTENSION = ".md"


def normalize_path(path: str) -> str:
    """Normalize a vault-relative path.

    Backslashes become '/', runs of slashes collapse, leading and trailing
    slashes are dropped and the result is NFC-normalized. The vault root is
    represented as '/'.

    Examples:
        >>> normalize_path('/Projects//Work/')
        'Projects/Work'
        >>> normalize_path('')
        '/'
    """
    path = path.replace('\\', '/').replace('\u00a0', ' ')
    path = re.sub(r'/+', '/', path).strip('/')
    path = unicodedata.normalize('NFC', path)
    return path or '/'


def join_path(*parts: str) -> str:
    """Join vault-relative path parts and normalize the result."""
    cleaned = [p for p in parts if p and p != '/']
    if not cleaned:
        return '/'
    return normalize_path(posixpath.join(*cleaned))


def basename(path: str) -> str:
    """File name without extension ('Work/Website.md' -> 'Website')."""
    return posixpath.splitext(posixpath.basename(path))[0]


def is_within(path: str, folder: str) -> bool:
    """True if the vault path lies inside folder (or is folder itself)."""
    folder = normalize_path(folder)
    path = normalize_path(path)
    if folder == '/':
        return True
    return path == folder or path.startswith(folder + '/')


class Vault:
    """File-store primitives over a local directory.

    Mutating operations honour ``dry_run``: they are logged with a
    ``[DRYRUN]`` prefix and nothing touches the disk.

    Example:
        >>> vault = Vault("/home/me/notes")
        >>> vault.create_folder("Projects/Work")
        >>> vault.create_file("Projects/Work.md", "---\\n...")
    """

    def __init__(self, root: Union[str, Path], dry_run: bool = False):
        self.root = Path(root).expanduser().resolve()
        self.dry_run = dry_run

    def _abs(self, path: str) -> Path:
        path = normalize_path(path)
        if path == '/':
            return self.root
        resolved = (self.root / path).resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise FilesystemError(
                path,
                'validate',
                f'Path traversal detected: {path} is outside vault {self.root}'
            )
        return resolved

    def _rel(self, absolute: Path) -> str:
        return normalize_path(absolute.relative_to(self.root).as_posix())

    def exists(self) -> bool:
        return self.root.is_dir()

    def get_file(self, path: str) -> Optional[str]:
        """Return the normalized path if it names an existing file."""
        target = self._abs(path)
        return normalize_path(path) if target.is_file() else None

    def get_folder(self, path: str) -> Optional[str]:
        """Return the normalized path if it names an existing folder."""
        target = self._abs(path)
        return normalize_path(path) if target.is_dir() else None

    def get_abstract_entry(self, path: str) -> Optional[str]:
        """Return the normalized path if anything exists there."""
        target = self._abs(path)
        return normalize_path(path) if target.exists() else None

    def read(self, path: str) -> str:
        try:
            return self._abs(path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise FilesystemError(path, 'read', str(e))

    def create_folder(self, path: str) -> None:
        """Create a folder (and missing parents)."""
        if self.dry_run:
            logger.info(f"[DRYRUN] Would create folder: {path}")
            return
        try:
            self._abs(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(path, 'create_folder', str(e))
        logger.debug(f"Created folder {path}")

    def create_file(self, path: str, content: str) -> None:
        """Create a new file; fails if anything already exists at path."""
        if self.dry_run:
            logger.info(f"[DRYRUN] Would create: {path}")
            return
        try:
            with open(self._abs(path), 'x', encoding='utf-8') as f:
                f.write(content)
        except FileExistsError:
            raise FilesystemError(path, 'create', 'File already exists')
        except OSError as e:
            raise FilesystemError(path, 'create', str(e))
        logger.debug(f"Created file {path}")

    def rename(self, path: str, new_path: str) -> None:
        """Move a file, preserving its content.

        The destination folder must already exist and the destination must
        not; this mirrors the host app's rename semantics.
        """
        if self.dry_run:
            logger.info(f"[DRYRUN] Would move: {path} -> {new_path}")
            return
        source = self._abs(path)
        target = self._abs(new_path)
        if target.exists():
            raise FilesystemError(new_path, 'rename', 'Destination already exists')
        if not target.parent.is_dir():
            raise FilesystemError(new_path, 'rename', 'Destination folder does not exist')
        try:
            shutil.move(str(source), str(target))
        except OSError as e:
            raise FilesystemError(path, 'rename', str(e))
        logger.debug(f"Moved {path} -> {new_path}")

    def delete(self, path: str) -> None:
        if self.dry_run:
            logger.info(f"[DRYRUN] Would delete: {path}")
            return
        try:
            os.unlink(self._abs(path))
        except OSError as e:
            raise FilesystemError(path, 'delete', str(e))
        logger.debug(f"Deleted {path}")

    def walk_files(self, folder: str, exclude: Optional[str] = None) -> Iterator[str]:
        """Yield vault paths of every note below folder.

        Args:
            folder: Folder to walk recursively
            exclude: Folder whose subtree is skipped entirely
        """
        start = self._abs(folder)
        exclude_abs = self._abs(exclude) if exclude else None
        for dirpath, dirnames, filenames in os.walk(start):
            current = Path(dirpath)
            if exclude_abs is not None:
                dirnames[:] = [d for d in dirnames if current / d != exclude_abs]
            dirnames.sort()
            for name in sorted(filenames):
                if name.endswith(NOTE_EXTENSION):
                    yield self._rel(current / name)

    def remove_empty_folders(self, folder: str, stop_at: str, keep: Collection[str] = ()) -> None:
        """Remove folder and its empty ancestors, never going above stop_at.

        Args:
            folder: First folder to try
            stop_at: Folder that is kept even when empty
            keep: Folders that must survive even when empty
        """
        if self.dry_run:
            return
        stop = normalize_path(stop_at)
        current = normalize_path(folder)
        while current != stop and current != '/' and is_within(current, stop):
            if current in keep:
                return
            target = self._abs(current)
            try:
                if not target.is_dir() or any(target.iterdir()):
                    return
                target.rmdir()
            except OSError as e:
                logger.debug(f"Could not remove folder {current}: {e}")
                return
            logger.debug(f"Removed empty folder {current}")
            current = normalize_path(posixpath.dirname(current))

    def to_vault_path(self, absolute: Union[str, Path]) -> Optional[str]:
        """Convert an absolute OS path to a vault path (None if outside)."""
        try:
            return self._rel(Path(os.fsdecode(absolute)).resolve())
        except ValueError:
            return None

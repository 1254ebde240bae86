"""
Filesystem walker for filequery.

This module provides the default walk provider: a depth-first traversal
built on ``os.scandir`` that honours depth bounds and the symlink policy, and
reports unreadable entries as ``WalkError`` values instead of raising.
"""

import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol, Tuple, Union
import logging

from ..models.entry import FileEntry, FileStat
from ..models.errors import WalkError


logger = logging.getLogger(__name__)

WalkItem = Union[FileEntry, WalkError]


class WalkProvider(Protocol):
    """
    Source of directory entries for the find engine.

    ``walk`` returns a lazy, single-use iterator. Entries directly inside a
    directory root have depth 0. A directory root is not yielded itself; any
    other root is yielded as the only entry, at depth 0. Failures are yielded
    as ``WalkError`` values.
    """

    def walk(self, root: Union[str, Path], max_depth: Optional[int] = None,
             min_depth: int = 0, follow_symlinks: bool = False) -> Iterator[WalkItem]: ...


@dataclass(frozen=True)
class WalkEntry:
    """
    A directory entry produced by FSWalker.

    The entry's type is taken from the directory listing; metadata is read
    from the filesystem on every ``metadata()`` call.

    Attributes:
        path: Path of the entry (the root joined with its relative path)
        depth: Depth below the root
        file_type_is_dir: Whether the entry is a directory
        file_type_is_file: Whether the entry is a regular file
        file_type_is_symlink: Whether the entry itself is a symlink
        follow_symlinks: Whether metadata is read through symlinks
    """

    path: Path
    depth: int
    file_type_is_dir: bool = False
    file_type_is_file: bool = False
    file_type_is_symlink: bool = False
    follow_symlinks: bool = field(default=False, repr=False)

    def is_dir(self) -> bool:
        return self.file_type_is_dir

    def is_file(self) -> bool:
        return self.file_type_is_file

    def is_symlink(self) -> bool:
        return self.file_type_is_symlink

    def metadata(self) -> FileStat:
        return FileStat.from_stat_result(os.stat(self.path, follow_symlinks=self.follow_symlinks))


class FSWalker:
    """
    Filesystem walker that traverses directories depth first.

    This class provides:
    - Depth bounds (``min_depth``/``max_depth``)
    - Symlink following with loop detection
    - Optional sorted directory order for reproducible traversal
    - Statistics about the last traversals
    """

    def __init__(self, sort: bool = False):
        """
        Initialize the filesystem walker.

        Args:
            sort: Visit directory contents sorted by name instead of in the
                order the operating system returns them
        """
        self.sort = sort
        self.reset_stats()

    def walk(self, root: Union[str, Path], max_depth: Optional[int] = None,
             min_depth: int = 0, follow_symlinks: bool = False) -> Iterator[WalkItem]:
        """
        Walk a single root and yield its entries.

        Args:
            root: Root path to walk
            max_depth: Deepest level yielded and descended into, None for unlimited
            min_depth: Entries shallower than this are not yielded
            follow_symlinks: Descend into symlinked directories

        Yields:
            WalkEntry objects, or WalkError values for unreadable entries
        """
        root_path = Path(root)

        try:
            root_stat = root_path.stat()
        except OSError as e:
            logger.warning(f"Cannot access root {root_path}: {e}")
            self._stats['errors'] += 1
            yield WalkError.from_os_error(root_path, 0, e)
            return

        if not stat.S_ISDIR(root_stat.st_mode):
            if min_depth == 0:
                self._stats['entries_yielded'] += 1
                yield WalkEntry(
                    path=root_path,
                    depth=0,
                    file_type_is_file=stat.S_ISREG(root_stat.st_mode),
                    follow_symlinks=True,
                )
            return

        logger.debug(f"Walking directory tree: {root_path}")
        ancestors = {(root_stat.st_dev, root_stat.st_ino): root_path}
        yield from self._walk_directory(root_path, 0, max_depth, min_depth, follow_symlinks, ancestors)

    def _walk_directory(self, directory: Path, depth: int, max_depth: Optional[int], min_depth: int,
                        follow_symlinks: bool, ancestors: Dict[Tuple[int, int], Path]) -> Iterator[WalkItem]:
        """
        Recursively walk one directory.

        Args:
            directory: Directory to list
            depth: Depth of the entries inside ``directory``
            max_depth: Deepest level yielded
            min_depth: Shallowest level yielded
            follow_symlinks: Descend into symlinked directories
            ancestors: Directories on the current branch, keyed by (device, inode)

        Yields:
            WalkEntry objects and WalkError values
        """
        try:
            with os.scandir(directory) as it:
                dir_entries = list(it)
        except OSError as e:
            logger.debug(f"Error listing directory {directory}: {e}")
            self._stats['errors'] += 1
            yield WalkError.from_os_error(directory, depth, e)
            return

        self._stats['directories_traversed'] += 1

        if self.sort:
            dir_entries.sort(key=lambda d: d.name)

        for dir_entry in dir_entries:
            path = Path(dir_entry.path)
            try:
                is_symlink = dir_entry.is_symlink()
                is_dir = dir_entry.is_dir(follow_symlinks=follow_symlinks)
                is_file = dir_entry.is_file(follow_symlinks=follow_symlinks)
            except OSError as e:
                self._stats['errors'] += 1
                yield WalkError.from_os_error(path, depth, e)
                continue

            if depth >= min_depth:
                self._stats['entries_yielded'] += 1
                yield WalkEntry(
                    path=path,
                    depth=depth,
                    file_type_is_dir=is_dir,
                    file_type_is_file=is_file,
                    file_type_is_symlink=is_symlink,
                    follow_symlinks=follow_symlinks,
                )

            if not is_dir or (max_depth is not None and depth >= max_depth):
                continue

            key = None
            if follow_symlinks:
                # Loops can only form through followed symlinks
                try:
                    target = dir_entry.stat(follow_symlinks=True)
                except OSError as e:
                    self._stats['errors'] += 1
                    yield WalkError.from_os_error(path, depth, e)
                    continue
                key = (target.st_dev, target.st_ino)
                if key in ancestors:
                    self._stats['errors'] += 1
                    yield WalkError.loop(path, ancestors[key], depth)
                    continue

            if key is not None:
                ancestors[key] = path
            try:
                yield from self._walk_directory(path, depth + 1, max_depth, min_depth, follow_symlinks, ancestors)
            finally:
                if key is not None:
                    ancestors.pop(key, None)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walks since the last reset.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'entries_yielded': 0,
            'directories_traversed': 0,
            'errors': 0
        }

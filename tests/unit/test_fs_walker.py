"""
Unit tests for the filesystem walker module.

Tests directory traversal order, depth bounds, symlink handling, error
reporting and statistics of the FSWalker class.
"""

import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

from filequery.models.entry import FileEntry, FileStat
from filequery.models.errors import WalkError
from filequery.tools.fs_walker import FSWalker, WalkEntry


class TestFSWalker:
    """Test cases for the FSWalker class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self._create_test_structure()
        self.walker = FSWalker(sort=True)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _create_test_structure(self):
        """Create a small tree three levels deep."""
        (self.test_root / "docs" / "old").mkdir(parents=True)
        (self.test_root / "src").mkdir()
        (self.test_root / "a.txt").write_text("hello")
        (self.test_root / "docs" / "guide.md").write_text("guide")
        (self.test_root / "docs" / "old" / "notes.txt").write_text("notes")
        (self.test_root / "src" / "main.py").write_text("print()")

    def _relative(self, items):
        return [(item.path.relative_to(self.test_root).as_posix(), item.depth) for item in items]

    def test_walk_sorted(self):
        """Test full depth-first traversal in sorted order."""
        items = list(self.walker.walk(self.test_root))

        assert self._relative(items) == [
            ("a.txt", 0),
            ("docs", 0),
            ("docs/guide.md", 1),
            ("docs/old", 1),
            ("docs/old/notes.txt", 2),
            ("src", 0),
            ("src/main.py", 1),
        ]

    def test_root_not_yielded(self):
        paths = [item.path for item in self.walker.walk(self.test_root)]
        assert self.test_root not in paths

    def test_entry_types(self):
        items = {item.path.name: item for item in self.walker.walk(self.test_root)}

        assert items["docs"].is_dir()
        assert not items["docs"].is_file()
        assert items["a.txt"].is_file()
        assert not items["a.txt"].is_symlink()
        assert isinstance(items["a.txt"], FileEntry)

    def test_metadata(self):
        entry = next(item for item in self.walker.walk(self.test_root) if item.path.name == "a.txt")
        stat = entry.metadata()
        assert isinstance(stat, FileStat)
        assert stat.size == 5

    def test_metadata_is_fresh(self):
        entry = next(item for item in self.walker.walk(self.test_root) if item.path.name == "a.txt")
        (self.test_root / "a.txt").write_text("hello world")
        assert entry.metadata().size == 11

    def test_metadata_error_raises_os_error(self):
        entry = next(item for item in self.walker.walk(self.test_root) if item.path.name == "a.txt")
        (self.test_root / "a.txt").unlink()
        with pytest.raises(OSError):
            entry.metadata()

    def test_max_depth(self):
        items = list(self.walker.walk(self.test_root, max_depth=0))
        assert self._relative(items) == [("a.txt", 0), ("docs", 0), ("src", 0)]

    def test_min_depth(self):
        items = list(self.walker.walk(self.test_root, min_depth=2))
        assert self._relative(items) == [("docs/old/notes.txt", 2)]

    def test_depth_window(self):
        items = list(self.walker.walk(self.test_root, min_depth=1, max_depth=1))
        assert self._relative(items) == [("docs/guide.md", 1), ("docs/old", 1), ("src/main.py", 1)]

    def test_file_root(self):
        root = self.test_root / "a.txt"
        items = list(self.walker.walk(root))

        assert len(items) == 1
        assert items[0].path == root
        assert items[0].depth == 0
        assert items[0].is_file()

    def test_file_root_below_min_depth(self):
        assert list(self.walker.walk(self.test_root / "a.txt", min_depth=1)) == []

    def test_missing_root(self):
        items = list(self.walker.walk(self.test_root / "missing"))

        assert len(items) == 1
        assert isinstance(items[0], WalkError)
        assert isinstance(items[0].cause, FileNotFoundError)
        assert self.walker.get_stats()['errors'] == 1

    def test_accepts_string_root(self):
        items = list(self.walker.walk(str(self.test_root), max_depth=0))
        assert len(items) == 3

    def test_walk_is_lazy(self):
        iterator = self.walker.walk(self.test_root)
        first = next(iterator)
        assert first.path.name == "a.txt"
        assert self.walker.get_stats()['directories_traversed'] == 1

    def test_unsorted_walk_yields_same_entries(self):
        unsorted = FSWalker().walk(self.test_root)
        assert sorted(self._relative(unsorted)) == sorted(self._relative(self.walker.walk(self.test_root)))

    def test_stats(self):
        list(self.walker.walk(self.test_root))
        stats = self.walker.get_stats()

        assert stats['entries_yielded'] == 7
        assert stats['directories_traversed'] == 4
        assert stats['errors'] == 0

        self.walker.reset_stats()
        assert self.walker.get_stats() == {'entries_yielded': 0, 'directories_traversed': 0, 'errors': 0}

    @pytest.mark.skipif(sys.platform == "win32", reason="requires POSIX permissions")
    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions")
    def test_unreadable_directory(self):
        locked = self.test_root / "docs" / "old"
        locked.chmod(0)
        try:
            items = list(self.walker.walk(self.test_root))
        finally:
            locked.chmod(0o755)

        errors = [item for item in items if isinstance(item, WalkError)]
        assert len(errors) == 1
        assert errors[0].path == locked
        assert ("src/main.py", 1) in self._relative(i for i in items if not isinstance(i, WalkError))


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
class TestFSWalkerSymlinks:
    """Test cases for symlink handling."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        (self.test_root / "real").mkdir()
        (self.test_root / "real" / "file.txt").write_text("content")
        (self.test_root / "link").symlink_to(self.test_root / "real", target_is_directory=True)
        self.walker = FSWalker(sort=True)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_symlinks_not_followed_by_default(self):
        items = {item.path.name: item for item in self.walker.walk(self.test_root)}

        assert items["link"].is_symlink()
        assert not items["link"].is_dir()
        assert "file.txt" in items
        assert len(items) == 3

    def test_follow_symlinks(self):
        items = list(self.walker.walk(self.test_root, follow_symlinks=True))
        paths = [item.path.relative_to(self.test_root).as_posix() for item in items]

        assert paths == ["link", "link/file.txt", "real", "real/file.txt"]
        assert items[0].is_dir()

    def test_symlink_metadata_follows_policy(self):
        target_size = (self.test_root / "real").stat().st_size
        link_size = (self.test_root / "link").lstat().st_size

        not_followed = next(i for i in self.walker.walk(self.test_root) if i.path.name == "link")
        followed = next(i for i in self.walker.walk(self.test_root, follow_symlinks=True) if i.path.name == "link")

        assert not_followed.metadata().size == link_size
        assert followed.metadata().size == target_size

    def test_loop_detected(self):
        (self.test_root / "real" / "back").symlink_to(self.test_root, target_is_directory=True)

        items = list(self.walker.walk(self.test_root, follow_symlinks=True))
        errors = [item for item in items if isinstance(item, WalkError)]

        assert errors
        assert all("loop" in str(error) for error in errors)
        assert all(error.path.name == "back" for error in errors)

    def test_broken_symlink_without_follow(self):
        (self.test_root / "dangling").symlink_to(self.test_root / "nowhere")
        items = {item.path.name: item for item in self.walker.walk(self.test_root)}
        assert items["dangling"].is_symlink()
        assert not items["dangling"].is_file()


class TestWalkEntry:
    """Test cases for WalkEntry."""

    def test_is_frozen(self):
        entry = WalkEntry(path=Path("/x"), depth=0)
        with pytest.raises(AttributeError):
            entry.depth = 1

    def test_defaults(self):
        entry = WalkEntry(path=Path("/x"), depth=2)
        assert not entry.is_dir()
        assert not entry.is_file()
        assert not entry.is_symlink()

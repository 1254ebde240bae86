"""
Shared fixtures for the filequery test suite.

Provides in-memory entries and walk providers so the condition tree and the
find engine can be tested without touching the filesystem.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

import pytest

from filequery.models.entry import FileStat
from filequery.models.errors import EvalError, WalkError


@dataclass
class FakeEntry:
    """In-memory entry implementing the FileEntry protocol."""

    path: Union[str, Path]
    depth: int = 0
    size: int = 0
    modified: int = 0
    accessed: int = 0
    created: Optional[int] = None
    kind: str = "file"
    metadata_error: Optional[OSError] = None
    metadata_calls: int = field(default=0, compare=False)

    def is_file(self) -> bool:
        return self.kind == "file"

    def is_dir(self) -> bool:
        return self.kind == "dir"

    def metadata(self) -> FileStat:
        self.metadata_calls += 1
        if self.metadata_error is not None:
            raise self.metadata_error
        return FileStat(size=self.size, modified=self.modified, accessed=self.accessed, created=self.created)


class FakeWalker:
    """Walk provider serving a fixed list of items per root."""

    def __init__(self, tree: dict):
        self.tree = tree
        self.calls: List[dict] = []
        self.consumed = 0

    def walk(self, root, max_depth=None, min_depth=0, follow_symlinks=False) -> Iterator:
        self.calls.append({'root': root, 'max_depth': max_depth, 'min_depth': min_depth,
                           'follow_symlinks': follow_symlinks})
        for item in self.tree.get(root, []):
            if isinstance(item, WalkError):
                self.consumed += 1
                yield item
                continue
            if item.depth < min_depth or (max_depth is not None and item.depth > max_depth):
                continue
            self.consumed += 1
            yield item


class RecordingLeaf:
    """Leaf predicate returning a fixed result and counting calls."""

    def __init__(self, result: bool = True, error: Optional[EvalError] = None):
        self.result = result
        self.error = error
        self.calls = 0

    def evaluate(self, entry) -> bool:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class ExplodingLeaf:
    """Leaf predicate that fails the test if it is ever evaluated."""

    def evaluate(self, entry) -> bool:
        pytest.fail(f"Leaf should not have been evaluated for {entry.path}")


@pytest.fixture
def entry():
    return FakeEntry(path=Path("/data/report.txt"), size=500)

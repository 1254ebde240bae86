"""
Entry and metadata models for the filequery engine.

Criteria never depend on a concrete filesystem type. They only need the small
capability set described by ``FileEntry``: the entry's path, its depth, its
type, and a way to read its metadata. Walk providers and tests supply their
own implementations.
"""

import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable
from pydantic import BaseModel, ConfigDict, Field


class FileStat(BaseModel):
    """
    Metadata snapshot of a single entry.

    Times are whole seconds relative to the Unix epoch and may be negative.

    Attributes:
        size: Size in bytes
        modified: Last modification time (``mtime``)
        accessed: Last access time (``atime``)
        created: Creation time (``birthtime``), None when the platform does not report it
    """

    model_config = ConfigDict(frozen=True)

    size: int = Field(..., ge=0, description="Size in bytes")
    modified: int = Field(..., description="Last modification time, epoch seconds")
    accessed: int = Field(..., description="Last access time, epoch seconds")
    created: Optional[int] = Field(None, description="Creation time, epoch seconds")

    @classmethod
    def from_stat_result(cls, stat_result: Any) -> 'FileStat':
        """
        Build a FileStat from an ``os.stat_result``.

        Only platforms exposing ``st_birthtime`` (macOS, BSDs, recent Windows
        builds) report a creation time. ``st_ctime`` is the inode change time
        on Linux and is never read.

        Args:
            stat_result: Result of ``os.stat``/``os.lstat`` or a compatible object

        Returns:
            FileStat with times truncated towards negative infinity
        """
        birthtime = getattr(stat_result, 'st_birthtime', None)
        return cls(
            size=stat_result.st_size,
            modified=math.floor(stat_result.st_mtime),
            accessed=math.floor(stat_result.st_atime),
            created=math.floor(birthtime) if birthtime is not None else None,
        )

    def has_creation_time(self) -> bool:
        """Check if the creation time is known."""
        return self.created is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary representation with ISO timestamps."""
        data = self.model_dump()
        for key in ('modified', 'accessed', 'created'):
            if data[key] is not None:
                data[f'{key}_iso'] = datetime.fromtimestamp(data[key], tz=timezone.utc).isoformat()
        return data


@runtime_checkable
class FileEntry(Protocol):
    """
    Capabilities a criteria needs from a filesystem entry.

    ``metadata()`` must read fresh metadata on every call and raise ``OSError``
    when that fails.
    """

    @property
    def path(self) -> Union[str, Path]: ...

    @property
    def depth(self) -> int: ...

    def is_file(self) -> bool: ...

    def is_dir(self) -> bool: ...

    def metadata(self) -> FileStat: ...

"""
Search criteria for the filequery engine.

A search criteria is a leaf predicate comparing exactly one attribute of an
entry (name, size, path, name regex, or one of its timestamps) against an
operand. Criteria are immutable and hold no filesystem state, so a single
instance can be evaluated against any number of entries.
"""

import re
from enum import Enum
from pathlib import Path
from re import Pattern
from typing import Callable, ClassVar, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .entry import FileEntry, FileStat
from .errors import (
    EntryIOError,
    FilenameEncodingError,
    NoFilenameError,
    ParseErrorReason,
    SearchCriteriaParseError,
    UnsupportedFieldError,
)


U64_MAX = 2 ** 64 - 1
I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1


class TextMatch(Enum):
    """Comparison modes for text attributes."""
    EXACT = "exact"
    CONTAINS = "contains"


class SizeMatch(Enum):
    """Comparison modes for sizes. OVER and UNDER are exclusive."""
    EXACT = "exact"
    OVER = "over"
    UNDER = "under"


class TimeMatch(Enum):
    """Comparison modes for timestamps. BEFORE and AFTER are exclusive."""
    AT = "at"
    BEFORE = "before"
    AFTER = "after"


def _require_text(value: str, path, what: str) -> str:
    # Undecodable bytes survive in str as lone surrogates and fail here
    try:
        value.encode('utf-8')
    except UnicodeEncodeError:
        raise FilenameEncodingError(path, what)
    return value


def entry_name(entry: FileEntry) -> str:
    """
    Get the final path component of an entry as text.

    Args:
        entry: Entry to inspect

    Returns:
        The entry's filename

    Raises:
        NoFilenameError: If the path has no final component
        FilenameEncodingError: If the filename is not valid UTF-8
    """
    name = Path(entry.path).name
    if not name or name == '..':
        raise NoFilenameError(entry.path)
    return _require_text(name, entry.path, "filename")


def entry_path_text(entry: FileEntry) -> str:
    """Get the full path of an entry as text, raising FilenameEncodingError if it is not UTF-8."""
    return _require_text(str(entry.path), entry.path, "path")


def entry_metadata(entry: FileEntry) -> FileStat:
    """Read fresh metadata for an entry, wrapping OS failures in EntryIOError."""
    try:
        return entry.metadata()
    except OSError as e:
        raise EntryIOError(entry.path, e) from e


class SearchCriteria(BaseModel):
    """
    Base class of all leaf predicates.

    Subclasses implement ``evaluate`` which returns True or False, or raises
    an ``EvalError`` when the entry cannot be examined.
    """

    model_config = ConfigDict(frozen=True)

    criteria_name: ClassVar[str] = ""

    def evaluate(self, entry: FileEntry) -> bool:
        raise NotImplementedError

    def to_criteria_string(self) -> str:
        """Render this criteria in the ``<name>="<value>"`` text syntax."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_criteria_string()


class Filename(SearchCriteria):
    """Matches the entry's filename exactly or by substring."""

    criteria_name: ClassVar[str] = "filename"

    mode: TextMatch = Field(..., description="Comparison mode")
    value: str = Field(..., description="Name or substring to compare against")

    @classmethod
    def exact(cls, value: str) -> 'Filename':
        return cls(mode=TextMatch.EXACT, value=value)

    @classmethod
    def contains(cls, value: str) -> 'Filename':
        return cls(mode=TextMatch.CONTAINS, value=value)

    def evaluate(self, entry: FileEntry) -> bool:
        name = entry_name(entry)
        if self.mode is TextMatch.EXACT:
            return name == self.value
        return self.value in name

    def to_criteria_string(self) -> str:
        return f'filename_{self.mode.value}="{self.value}"'


class FilePath(SearchCriteria):
    """Matches the string form of the entry's full path."""

    criteria_name: ClassVar[str] = "filepath"

    mode: TextMatch = Field(..., description="Comparison mode")
    value: str = Field(..., description="Path or substring to compare against")

    @classmethod
    def exact(cls, value: str) -> 'FilePath':
        return cls(mode=TextMatch.EXACT, value=value)

    @classmethod
    def contains(cls, value: str) -> 'FilePath':
        return cls(mode=TextMatch.CONTAINS, value=value)

    def evaluate(self, entry: FileEntry) -> bool:
        path = entry_path_text(entry)
        if self.mode is TextMatch.EXACT:
            return path == self.value
        return self.value in path

    def to_criteria_string(self) -> str:
        return f'filepath_{self.mode.value}="{self.value}"'


class FilenameRegex(SearchCriteria):
    """Matches when the regex is found anywhere in the entry's filename."""

    criteria_name: ClassVar[str] = "filenameregex"

    pattern: Pattern[str] = Field(..., description="Compiled regular expression")

    @classmethod
    def compile(cls, pattern: str, flags: int = 0) -> 'FilenameRegex':
        return cls(pattern=re.compile(pattern, flags))

    def evaluate(self, entry: FileEntry) -> bool:
        return self.pattern.search(entry_name(entry)) is not None

    def to_criteria_string(self) -> str:
        return f'filenameregex="{self.pattern.pattern}"'


class Filesize(SearchCriteria):
    """Compares the entry's size in bytes."""

    criteria_name: ClassVar[str] = "filesize"

    mode: SizeMatch = Field(..., description="Comparison mode")
    size: int = Field(..., ge=0, le=U64_MAX, description="Size in bytes")

    @classmethod
    def exact(cls, size: int) -> 'Filesize':
        return cls(mode=SizeMatch.EXACT, size=size)

    @classmethod
    def over(cls, size: int) -> 'Filesize':
        return cls(mode=SizeMatch.OVER, size=size)

    @classmethod
    def under(cls, size: int) -> 'Filesize':
        return cls(mode=SizeMatch.UNDER, size=size)

    def evaluate(self, entry: FileEntry) -> bool:
        actual = entry_metadata(entry).size
        if self.mode is SizeMatch.EXACT:
            return actual == self.size
        if self.mode is SizeMatch.OVER:
            return actual > self.size
        return actual < self.size

    def to_criteria_string(self) -> str:
        return f'filesize_{self.mode.value}="{self.size}"'


class TimeCriteria(SearchCriteria):
    """
    Shared behaviour of the timestamp criteria.

    Timestamps are signed seconds relative to the Unix epoch
    (1970-01-01T00:00:00Z).
    """

    mode: TimeMatch = Field(..., description="Comparison mode")
    timestamp: int = Field(..., ge=I64_MIN, le=I64_MAX, description="Epoch seconds")

    @classmethod
    def at(cls, timestamp: int):
        return cls(mode=TimeMatch.AT, timestamp=timestamp)

    @classmethod
    def before(cls, timestamp: int):
        return cls(mode=TimeMatch.BEFORE, timestamp=timestamp)

    @classmethod
    def after(cls, timestamp: int):
        return cls(mode=TimeMatch.AFTER, timestamp=timestamp)

    def read_time(self, entry: FileEntry, stat: FileStat) -> int:
        raise NotImplementedError

    def evaluate(self, entry: FileEntry) -> bool:
        actual = self.read_time(entry, entry_metadata(entry))
        if self.mode is TimeMatch.AT:
            return actual == self.timestamp
        if self.mode is TimeMatch.BEFORE:
            return actual < self.timestamp
        return actual > self.timestamp

    def to_criteria_string(self) -> str:
        return f'{self.criteria_name}_{self.mode.value}="{self.timestamp}"'


class Modified(TimeCriteria):
    """Compares the last modification time (``mtime``)."""

    criteria_name: ClassVar[str] = "modified"

    def read_time(self, entry: FileEntry, stat: FileStat) -> int:
        return stat.modified


class Accessed(TimeCriteria):
    """Compares the last access time (``atime``)."""

    criteria_name: ClassVar[str] = "accessed"

    def read_time(self, entry: FileEntry, stat: FileStat) -> int:
        return stat.accessed


class Created(TimeCriteria):
    """Compares the creation time (``birthtime``); raises UnsupportedFieldError where unavailable."""

    criteria_name: ClassVar[str] = "created"

    def read_time(self, entry: FileEntry, stat: FileStat) -> int:
        if stat.created is None:
            raise UnsupportedFieldError(entry.path, "created")
        return stat.created


def _parse_size(text: str, raw: str) -> int:
    try:
        size = int(text)
    except ValueError:
        raise SearchCriteriaParseError(ParseErrorReason.MALFORMED_NUMBER, raw)
    if not 0 <= size <= U64_MAX:
        raise SearchCriteriaParseError(ParseErrorReason.MALFORMED_NUMBER, raw, "size out of range")
    return size


def _parse_timestamp(text: str, raw: str) -> int:
    try:
        timestamp = int(text)
    except ValueError:
        raise SearchCriteriaParseError(ParseErrorReason.MALFORMED_NUMBER, raw)
    if not I64_MIN <= timestamp <= I64_MAX:
        raise SearchCriteriaParseError(ParseErrorReason.MALFORMED_NUMBER, raw, "timestamp out of range")
    return timestamp


def _parse_regex(text: str, raw: str) -> Pattern[str]:
    try:
        return re.compile(text)
    except re.error as e:
        raise SearchCriteriaParseError(ParseErrorReason.MALFORMED_REGEX, raw, str(e)) from e


_Factory = Callable[[str, str], SearchCriteria]

CRITERIA_PARSERS: Dict[str, _Factory] = {
    'filename_exact': lambda v, raw: Filename.exact(v),
    'filename_contains': lambda v, raw: Filename.contains(v),
    'filesize_exact': lambda v, raw: Filesize.exact(_parse_size(v, raw)),
    'filesize_over': lambda v, raw: Filesize.over(_parse_size(v, raw)),
    'filesize_under': lambda v, raw: Filesize.under(_parse_size(v, raw)),
    'filepath_exact': lambda v, raw: FilePath.exact(v),
    'filepath_contains': lambda v, raw: FilePath.contains(v),
    'filenameregex': lambda v, raw: FilenameRegex(pattern=_parse_regex(v, raw)),
    'modified_at': lambda v, raw: Modified.at(_parse_timestamp(v, raw)),
    'modified_before': lambda v, raw: Modified.before(_parse_timestamp(v, raw)),
    'modified_after': lambda v, raw: Modified.after(_parse_timestamp(v, raw)),
    'accessed_at': lambda v, raw: Accessed.at(_parse_timestamp(v, raw)),
    'accessed_before': lambda v, raw: Accessed.before(_parse_timestamp(v, raw)),
    'accessed_after': lambda v, raw: Accessed.after(_parse_timestamp(v, raw)),
    'created_at': lambda v, raw: Created.at(_parse_timestamp(v, raw)),
    'created_before': lambda v, raw: Created.before(_parse_timestamp(v, raw)),
    'created_after': lambda v, raw: Created.after(_parse_timestamp(v, raw)),
}


def _split_criteria(text: str) -> Tuple[str, str]:
    parts = text.strip().split('=', 1)
    if len(parts) == 1:
        raise SearchCriteriaParseError(ParseErrorReason.NO_VALUE, text)

    name, value = parts[0].strip(), parts[1].strip()
    if len(value) < 2 or not value.startswith('"') or not value.endswith('"'):
        raise SearchCriteriaParseError(ParseErrorReason.MISSING_DOUBLE_QUOTES, text)

    return name, value[1:-1]


def parse_search_criteria(text: str) -> SearchCriteria:
    """
    Parse a single criteria written as ``<criteria_name>="<value>"``.

    Possible criteria names are the keys of ``CRITERIA_PARSERS``:

    * ``filename_exact``, ``filename_contains``, ``filepath_exact`` and
      ``filepath_contains`` take any string
    * ``filesize_*`` take a whole number of bytes >= 0
    * ``filenameregex`` takes a regular expression
    * ``modified_*``, ``accessed_*`` and ``created_*`` take a timestamp in
      seconds relative to the Unix epoch, which may be negative

    Only single criteria are understood; there is no syntax for combining
    them with and/or/not.

    Args:
        text: Criteria string, e.g. ``filesize_over="1024"``

    Returns:
        The parsed SearchCriteria

    Raises:
        SearchCriteriaParseError: If the text is malformed
    """
    name, value = _split_criteria(text)

    factory = CRITERIA_PARSERS.get(name)
    if factory is None:
        raise SearchCriteriaParseError(ParseErrorReason.UNKNOWN_CRITERIA, text)

    return factory(value, text)

"""
Error types for the filequery engine.

Two independent channels exist: evaluation errors (``EvalError``) raised while
a condition tree is checked against one entry, and traversal errors
(``WalkError``) produced by a walk provider when an entry cannot be read at
all. Both are recorded on the result object by the engine.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union


PathLike = Union[str, Path]


class EvalErrorKind(Enum):
    """Kinds of per-entry evaluation failures."""
    NO_FILENAME = "no_filename"
    ENCODING_ERROR = "encoding_error"
    IO_ERROR = "io_error"
    UNSUPPORTED_FIELD = "unsupported_field"


class EvalError(Exception):
    """
    Base class for failures while evaluating a criteria against an entry.

    These are recoverable: the engine records them next to the entry's path
    and treats the entry as a non-match.

    Attributes:
        path: Path of the entry that could not be evaluated
        kind: Category of the failure
    """

    kind: EvalErrorKind

    def __init__(self, path: PathLike, message: str):
        super().__init__(message)
        self.path = path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self.path)!r}, {str(self)!r})"


class NoFilenameError(EvalError):
    """The entry's path has no final component to compare against."""
    kind = EvalErrorKind.NO_FILENAME

    def __init__(self, path: PathLike):
        super().__init__(path, f"Failed to get filename of {path}")


class FilenameEncodingError(EvalError):
    """The entry's name or path cannot be represented as UTF-8 text."""
    kind = EvalErrorKind.ENCODING_ERROR

    def __init__(self, path: PathLike, what: str = "filename"):
        super().__init__(path, f"Failed to convert {what} of {path!r} to UTF-8")
        self.what = what


class EntryIOError(EvalError):
    """Reading the entry's metadata failed."""
    kind = EvalErrorKind.IO_ERROR

    def __init__(self, path: PathLike, cause: OSError):
        super().__init__(path, f"Failed to get metadata of {path}: {cause}")
        self.cause = cause


class UnsupportedFieldError(EvalError):
    """The platform cannot report the requested attribute (e.g. birth time)."""
    kind = EvalErrorKind.UNSUPPORTED_FIELD

    def __init__(self, path: PathLike, field: str):
        super().__init__(path, f"Field '{field}' is not supported on this platform for {path}")
        self.field = field


class WalkError(Exception):
    """
    A walk provider could not read a directory entry.

    Walk providers yield instances of this class instead of raising, so a
    single unreadable directory never ends the traversal.

    Attributes:
        path: Path that failed, if known
        depth: Depth at which the failure happened
        cause: Underlying OS error, if any
    """

    def __init__(self, path: Optional[PathLike], depth: int, message: str,
                 cause: Optional[OSError] = None):
        super().__init__(message)
        self.path = path
        self.depth = depth
        self.cause = cause

    @classmethod
    def from_os_error(cls, path: PathLike, depth: int, error: OSError) -> 'WalkError':
        """Wrap an ``OSError`` raised while reading ``path``."""
        return cls(path, depth, f"Error accessing {path}: {error}", cause=error)

    @classmethod
    def loop(cls, path: PathLike, ancestor: PathLike, depth: int) -> 'WalkError':
        """Build the error reported for a symlink pointing at one of its ancestors."""
        return cls(path, depth, f"Filesystem loop found: {path} points to ancestor {ancestor}")


class ParseErrorReason(Enum):
    """Reasons a criteria string can be rejected."""
    NO_VALUE = "no_value"
    MISSING_DOUBLE_QUOTES = "missing_double_quotes"
    UNKNOWN_CRITERIA = "unknown_criteria"
    MALFORMED_NUMBER = "malformed_number"
    MALFORMED_REGEX = "malformed_regex"


class SearchCriteriaParseError(ValueError):
    """Raised when a ``<name>="<value>"`` criteria string cannot be parsed."""

    _MESSAGES = {
        ParseErrorReason.NO_VALUE: 'The criteria is missing the ="<value>" part',
        ParseErrorReason.MISSING_DOUBLE_QUOTES: "There is at least one missing double quote at the start or the end of the value",
        ParseErrorReason.UNKNOWN_CRITERIA: "The criteria passed isn't known",
        ParseErrorReason.MALFORMED_NUMBER: "Error parsing the value to a number",
        ParseErrorReason.MALFORMED_REGEX: "Error parsing the regex",
    }

    def __init__(self, reason: ParseErrorReason, text: str, detail: Optional[str] = None):
        message = f"{self._MESSAGES[reason]}: {text!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.reason = reason
        self.text = text

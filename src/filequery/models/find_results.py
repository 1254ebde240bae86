"""
Result models for the filequery engine.

A find call produces an ordered list of matching paths plus two separate
error lists: entries whose conditions could not be evaluated, and entries the
walk provider could not read at all.
"""

from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import EvalError, EvalErrorKind, WalkError


class EvaluationFailure(BaseModel):
    """
    An entry whose conditions raised an evaluation error.

    The entry is never part of the matches, even if it could have matched.

    Attributes:
        path: Path of the entry
        error: The error raised by the failing criteria
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: Path = Field(..., description="Path of the entry")
    error: EvalError = Field(..., description="Evaluation error")

    @property
    def kind(self) -> EvalErrorKind:
        return self.error.kind

    def to_dict(self) -> Dict[str, Any]:
        return {'path': str(self.path), 'kind': self.kind.value, 'message': str(self.error)}


class TraversalFailure(BaseModel):
    """An entry the walk provider could not read."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: Optional[Path] = Field(None, description="Path that failed, if known")
    error: WalkError = Field(..., description="Traversal error")

    def to_dict(self) -> Dict[str, Any]:
        return {'path': str(self.path) if self.path else None, 'depth': self.error.depth, 'message': str(self.error)}


class FindResults(BaseModel):
    """
    Complete results of a find call.

    Attributes:
        matches: Matching paths in root order, then traversal order
        errors: Evaluation failures in the order they happened
        traversal_errors: Walk failures in the order they happened
        entries_evaluated: Number of entries the conditions were checked against
        truncated: Whether the result cap stopped the search early
    """

    matches: List[Path] = Field(default_factory=list, description="Matching paths")
    errors: List[EvaluationFailure] = Field(default_factory=list, description="Evaluation failures")
    traversal_errors: List[TraversalFailure] = Field(default_factory=list, description="Traversal failures")
    entries_evaluated: int = Field(0, ge=0, description="Number of entries evaluated")
    truncated: bool = Field(False, description="Whether the result cap was reached")

    def get_match_count(self) -> int:
        return len(self.matches)

    def has_errors(self) -> bool:
        """Check if any evaluation or traversal errors occurred."""
        return bool(self.errors) or bool(self.traversal_errors)

    def add_match(self, path: Path) -> None:
        self.matches.append(Path(path))

    def add_error(self, path: Path, error: EvalError) -> None:
        self.errors.append(EvaluationFailure(path=path, error=error))

    def add_traversal_error(self, error: WalkError) -> None:
        self.traversal_errors.append(TraversalFailure(path=error.path, error=error))

    def get_errors_by_kind(self, kind: EvalErrorKind) -> List[EvaluationFailure]:
        return [failure for failure in self.errors if failure.kind == kind]

    def get_error_counts(self) -> Dict[str, int]:
        """Count evaluation errors per kind."""
        return dict(Counter(failure.kind.value for failure in self.errors))

    def format_matches(self, separator: str = "\n") -> str:
        """Join the matching paths with ``separator``."""
        return separator.join(str(path) for path in self.matches)

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary representation."""
        return {
            'matches': [str(path) for path in self.matches],
            'match_count': self.get_match_count(),
            'errors': [failure.to_dict() for failure in self.errors],
            'error_counts': self.get_error_counts(),
            'traversal_errors': [failure.to_dict() for failure in self.traversal_errors],
            'entries_evaluated': self.entries_evaluated,
            'truncated': self.truncated,
        }

    def __str__(self) -> str:
        parts = [f"Found {self.get_match_count()} matches"]
        parts.append(f"Evaluated {self.entries_evaluated} entries")

        if self.errors:
            parts.append(f"Errors: {len(self.errors)}")

        if self.traversal_errors:
            parts.append(f"Traversal errors: {len(self.traversal_errors)}")

        if self.truncated:
            parts.append("Truncated")

        return " | ".join(parts)

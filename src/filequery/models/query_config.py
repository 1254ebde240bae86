"""
Declarative query configuration for filequery.

A query file names the roots to search, groups of criteria in the
``<name>="<value>"`` syntax, and the search switches. ``QueryConfig`` validates
that data and turns it into ``FindOptions``.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import SearchCriteriaParseError
from .find_options import FindOptions, FindOptionsBuilder, Ignore
from .search_criteria import SearchCriteria, parse_search_criteria


class ConditionGroup(BaseModel):
    """
    One group of criteria strings.

    Each non-empty list becomes one condition: ``all_of`` requires every
    criteria, ``any_of`` at least one, ``none_of`` none of them. All
    conditions of a query have to hold.
    """

    all_of: List[str] = Field(default_factory=list, description="Criteria that must all match")
    any_of: List[str] = Field(default_factory=list, description="Criteria of which one must match")
    none_of: List[str] = Field(default_factory=list, description="Criteria that must not match")

    @field_validator('all_of', 'any_of', 'none_of', mode='before')
    @classmethod
    def validate_criteria(cls, v) -> List[str]:
        """Accept a single string and check that every criteria parses."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            raise ValueError(f"Expected a list of criteria strings, got {type(v).__name__}")
        for text in v:
            if not isinstance(text, str):
                raise ValueError(f"Criteria must be a string, got {text!r}")
            try:
                parse_search_criteria(text)
            except SearchCriteriaParseError as e:
                raise ValueError(str(e)) from e
        return v

    @model_validator(mode='after')
    def validate_not_empty(self):
        if not (self.all_of or self.any_of or self.none_of):
            raise ValueError("Condition group needs at least one of all_of, any_of or none_of")
        return self

    @staticmethod
    def _parse(texts: List[str]) -> List[SearchCriteria]:
        return [parse_search_criteria(text) for text in texts]

    def add_to(self, builder: FindOptionsBuilder) -> FindOptionsBuilder:
        """Add this group's conditions to ``builder``."""
        return (builder
                .add_all_of(self._parse(self.all_of))
                .add_any_of(self._parse(self.any_of))
                .add_none_of(self._parse(self.none_of)))


class QueryConfig(BaseModel):
    """
    A complete query: where to search and what to match.

    Attributes:
        roots: Root paths, searched in order
        conditions: Groups of criteria, all of which have to hold
        max_num_results: Maximum number of results, None for unlimited
        max_search_depth: Maximum search depth, None for unlimited
        min_depth_from_start: Minimum depth of reported entries
        ignore: Skip all files or all folders
        ignore_hidden_files: Skip entries starting with a dot
        follow_symlinks: Follow symbolic links
    """

    roots: List[str] = Field(..., min_length=1, description="Root paths to search")
    conditions: List[ConditionGroup] = Field(default_factory=list, description="Criteria groups")
    max_num_results: Optional[int] = Field(None, ge=0, description="Maximum number of results")
    max_search_depth: Optional[int] = Field(None, ge=0, description="Maximum search depth")
    min_depth_from_start: int = Field(0, ge=0, description="Minimum depth of reported entries")
    ignore: Optional[Ignore] = Field(None, description="Ignore all files or all folders")
    ignore_hidden_files: bool = Field(False, description="Ignore entries starting with a dot")
    follow_symlinks: bool = Field(False, description="Follow symbolic links")

    @field_validator('roots')
    @classmethod
    def validate_roots(cls, v: List[str]) -> List[str]:
        """Drop blank entries and expand ``~``."""
        normalized_roots = [str(Path(root.strip()).expanduser()) for root in v if root and root.strip()]
        if not normalized_roots:
            raise ValueError("No valid root paths provided")
        return normalized_roots

    @field_validator('ignore', mode='before')
    @classmethod
    def validate_ignore(cls, v) -> Optional[Ignore]:
        if isinstance(v, str):
            try:
                return Ignore(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid ignore value '{v}'. Must be one of: files, folders")
        return v

    @model_validator(mode='after')
    def validate_depth_range(self):
        if self.max_search_depth is not None and self.min_depth_from_start > self.max_search_depth:
            raise ValueError(
                f"min_depth_from_start ({self.min_depth_from_start}) must not exceed "
                f"max_search_depth ({self.max_search_depth})"
            )
        return self

    def to_find_options(self) -> FindOptions:
        """Build the FindOptions described by this query."""
        builder = FindOptionsBuilder()
        for group in self.conditions:
            group.add_to(builder)

        return (builder
                .set_max_num_results(self.max_num_results)
                .set_max_search_depth(self.max_search_depth)
                .set_min_depth_from_start(self.min_depth_from_start)
                .set_ignore(self.ignore)
                .set_ignore_hidden_files(self.ignore_hidden_files)
                .set_follow_symlinks(self.follow_symlinks)
                .build())

    def validate_configuration(self) -> List[str]:
        """
        Check for settings that are valid but probably not intended.

        Returns:
            List of warning messages
        """
        warnings = []

        if not self.conditions:
            warnings.append("No conditions configured - every entry will match")

        if self.follow_symlinks and self.max_search_depth is None:
            warnings.append("Following symlinks without max_search_depth may traverse very large trees")

        if len(self.roots) > 10:
            warnings.append(f"Large number of root paths ({len(self.roots)}) may impact performance")

        missing = [root for root in self.roots if not Path(root).exists()]
        for root in missing:
            warnings.append(f"Root path does not exist: {root}")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary suitable for YAML output."""
        data = self.model_dump(exclude_defaults=False)
        data['ignore'] = self.ignore.value if self.ignore else None
        data['conditions'] = [group.model_dump(exclude_defaults=True) for group in self.conditions]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QueryConfig':
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Roots: {len(self.roots)}"]
        parts.append(f"Conditions: {len(self.conditions)}")

        if self.max_num_results is not None:
            parts.append(f"Max results: {self.max_num_results}")

        if self.max_search_depth is not None:
            parts.append(f"Max depth: {self.max_search_depth}")

        return " | ".join(parts)

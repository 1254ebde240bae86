"""
Options for a find query and a builder to assemble them.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .condition import Condition, all_of, any_of, none_of
from .entry import FileEntry
from .search_criteria import SearchCriteria, parse_search_criteria


class Ignore(Enum):
    """Entry kinds that can be excluded from a query."""
    FILES = "files"
    FOLDERS = "folders"


class FindOptions(BaseModel):
    """
    Settings for a single ``find`` call.

    The default instance matches every entry at every depth.

    Attributes:
        options: Conditions that all have to hold (implicitly AND-ed)
        max_num_results: Maximum number of paths returned, None for unlimited
        max_search_depth: Deepest level searched, None for unlimited
        min_depth_from_start: Entries shallower than this are skipped
        ignore: Skip all files or all folders
        ignore_hidden_files: Skip entries whose name starts with a dot
        follow_symlinks: Descend into symlinked folders and evaluate criteria
            against symlink targets instead of the links themselves
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    options: List[Condition] = Field(default_factory=list, description="Conditions that must all match")
    max_num_results: Optional[int] = Field(None, ge=0, description="Maximum number of results")
    max_search_depth: Optional[int] = Field(None, ge=0, description="Maximum search depth")
    min_depth_from_start: int = Field(0, ge=0, description="Minimum depth of reported entries")
    ignore: Optional[Ignore] = Field(None, description="Ignore all files or all folders")
    ignore_hidden_files: bool = Field(False, description="Ignore entries starting with a dot")
    follow_symlinks: bool = Field(False, description="Follow symbolic links")

    @field_validator('ignore', mode='before')
    @classmethod
    def validate_ignore(cls, v) -> Optional[Ignore]:
        """Accept 'files'/'folders' strings in any case."""
        if isinstance(v, str):
            try:
                return Ignore(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid ignore value: {v}")
        return v

    @model_validator(mode='after')
    def validate_depth_range(self):
        """Reject depth bounds that can never yield an entry."""
        if self.max_search_depth is not None and self.min_depth_from_start > self.max_search_depth:
            raise ValueError(
                f"min_depth_from_start ({self.min_depth_from_start}) must not exceed "
                f"max_search_depth ({self.max_search_depth})"
            )
        return self

    def matches(self, entry: FileEntry) -> bool:
        """
        Check every condition in order, stopping at the first one that fails.

        Raises:
            EvalError: If a condition could not examine the entry
        """
        return all(condition.evaluate(entry) for condition in self.options)

    def is_unbounded(self) -> bool:
        """Check if neither the result count nor the depth is limited."""
        return self.max_num_results is None and self.max_search_depth is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump(exclude={'options'})
        data['ignore'] = self.ignore.value if self.ignore else None
        data['options'] = [repr(condition) for condition in self.options]
        return data


class FindOptionsBuilder:
    """
    Builder for ``FindOptions``.

    Every method returns the builder so calls can be chained::

        options = (FindOptionsBuilder()
                   .add_all_of([Filesize.over(100), Filesize.under(1000)])
                   .add_none_of([Filename.contains("draft")])
                   .set_max_num_results(10)
                   .build())
    """

    def __init__(self):
        self._options: List[Condition] = []
        self._settings: Dict[str, Any] = {}

    def build(self) -> FindOptions:
        """
        Build the FindOptions.

        Raises:
            pydantic.ValidationError: If the settings are inconsistent
        """
        return FindOptions(options=list(self._options), **self._settings)

    def add_condition(self, condition: Condition) -> 'FindOptionsBuilder':
        """Add a single condition to the list of conditions."""
        self._options.append(condition)
        return self

    def add_conditions(self, conditions: Iterable[Condition]) -> 'FindOptionsBuilder':
        """Add all ``conditions`` to the list of conditions."""
        self._options.extend(conditions)
        return self

    def add_all_of(self, criteria: Iterable[SearchCriteria]) -> 'FindOptionsBuilder':
        """Add a condition requiring every criteria to match. Does nothing if ``criteria`` is empty."""
        criteria = list(criteria)
        if criteria:
            self._options.append(all_of(criteria))
        return self

    def add_any_of(self, criteria: Iterable[SearchCriteria]) -> 'FindOptionsBuilder':
        """Add a condition requiring at least one criteria to match. Does nothing if ``criteria`` is empty."""
        criteria = list(criteria)
        if criteria:
            self._options.append(any_of(criteria))
        return self

    def add_none_of(self, criteria: Iterable[SearchCriteria]) -> 'FindOptionsBuilder':
        """Add a condition requiring no criteria to match. Does nothing if ``criteria`` is empty."""
        criteria = list(criteria)
        if criteria:
            self._options.append(none_of(criteria))
        return self

    def add_criteria_from_str(self, criteria_str: str) -> 'FindOptionsBuilder':
        """
        Parse a single ``<name>="<value>"`` criteria and add it as a condition.

        Raises:
            SearchCriteriaParseError: If the string is malformed
        """
        return self.add_all_of([parse_search_criteria(criteria_str)])

    def set_max_num_results(self, max_num_results: Optional[int]) -> 'FindOptionsBuilder':
        """Set the maximum number of paths returned. Default is unlimited."""
        self._settings['max_num_results'] = max_num_results
        return self

    def set_max_search_depth(self, max_search_depth: Optional[int]) -> 'FindOptionsBuilder':
        """Set how many folders deep the search goes at most. Default is unlimited."""
        self._settings['max_search_depth'] = max_search_depth
        return self

    def set_min_depth_from_start(self, min_depth_from_start: int) -> 'FindOptionsBuilder':
        """
        Set how many folders deep the search starts reporting entries.

        Must not exceed the maximum search depth. Default is 0.
        """
        self._settings['min_depth_from_start'] = min_depth_from_start
        return self

    def set_ignore(self, ignore: Optional[Ignore]) -> 'FindOptionsBuilder':
        """Ignore all files or all folders. ``None`` ignores nothing."""
        self._settings['ignore'] = ignore
        return self

    def set_ignore_hidden_files(self, ignore_hidden_files: bool) -> 'FindOptionsBuilder':
        """Set if entries starting with a ``.`` are skipped."""
        self._settings['ignore_hidden_files'] = ignore_hidden_files
        return self

    def set_follow_symlinks(self, follow_symlinks: bool) -> 'FindOptionsBuilder':
        """
        Set if symlinks are followed.

        When False, criteria are checked against the symlink itself rather
        than the file it points to.
        """
        self._settings['follow_symlinks'] = follow_symlinks
        return self

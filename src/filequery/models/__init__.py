"""
Data models for filequery.

This module contains the criteria, condition tree, options and result types
used throughout the system.
"""

from .errors import (
    EntryIOError,
    EvalError,
    EvalErrorKind,
    FilenameEncodingError,
    NoFilenameError,
    ParseErrorReason,
    SearchCriteriaParseError,
    UnsupportedFieldError,
    WalkError,
)
from .entry import FileEntry, FileStat
from .search_criteria import (
    Accessed,
    Created,
    FilePath,
    Filename,
    FilenameRegex,
    Filesize,
    Modified,
    SearchCriteria,
    SizeMatch,
    TextMatch,
    TimeMatch,
    parse_search_criteria,
)
from .condition import And, Condition, Not, Or, Value, all_of, any_of, none_of
from .find_options import FindOptions, FindOptionsBuilder, Ignore
from .find_results import EvaluationFailure, FindResults, TraversalFailure
from .query_config import ConditionGroup, QueryConfig

__all__ = [
    'Accessed', 'And', 'Condition', 'ConditionGroup', 'Created', 'EntryIOError',
    'EvalError', 'EvalErrorKind', 'EvaluationFailure', 'FileEntry', 'FilePath',
    'FileStat', 'Filename', 'FilenameEncodingError', 'FilenameRegex', 'Filesize',
    'FindOptions', 'FindOptionsBuilder', 'FindResults', 'Ignore', 'Modified',
    'NoFilenameError', 'Not', 'Or', 'ParseErrorReason', 'QueryConfig',
    'SearchCriteria', 'SearchCriteriaParseError', 'SizeMatch', 'TextMatch',
    'TimeMatch', 'TraversalFailure', 'UnsupportedFieldError', 'Value',
    'WalkError', 'all_of', 'any_of', 'none_of', 'parse_search_criteria',
]

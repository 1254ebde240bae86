"""
filequery - Core Package

A file-query engine: walks one or more filesystem trees and returns the
entries that satisfy a boolean expression of per-file search criteria.
"""

from .models import (
    Accessed,
    And,
    Condition,
    Created,
    EvalError,
    FilePath,
    Filename,
    FilenameRegex,
    Filesize,
    FindOptions,
    FindOptionsBuilder,
    FindResults,
    Ignore,
    Modified,
    Not,
    Or,
    Value,
    WalkError,
    all_of,
    any_of,
    none_of,
    parse_search_criteria,
)
from .tools import FSWalker, Finder, find

__version__ = "0.1.0"

__all__ = [
    'Accessed',
    'And',
    'Condition',
    'Created',
    'EvalError',
    'FilePath',
    'Filename',
    'FilenameRegex',
    'Filesize',
    'FindOptions',
    'FindOptionsBuilder',
    'FindResults',
    'FSWalker',
    'Finder',
    'Ignore',
    'Modified',
    'Not',
    'Or',
    'Value',
    'WalkError',
    'all_of',
    'any_of',
    'find',
    'none_of',
    'parse_search_criteria',
]

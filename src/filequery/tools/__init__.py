"""
Search tools for filequery.

This module contains the default filesystem walk provider and the find
engine that evaluates conditions against the walked entries.
"""

from .fs_walker import FSWalker, WalkEntry, WalkProvider
from .find import Finder, find

__all__ = ['FSWalker', 'Finder', 'WalkEntry', 'WalkProvider', 'find']

"""
Find engine for filequery.

Walks one or more roots, filters the entries, evaluates the configured
conditions against each one and collects the matching paths together with
the evaluation and traversal errors.
"""

from concurrent.futures import Executor, ThreadPoolExecutor
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union
import logging

from ..models.entry import FileEntry
from ..models.errors import EvalError, WalkError
from ..models.find_options import FindOptions, Ignore
from ..models.find_results import FindResults
from .fs_walker import FSWalker, WalkItem, WalkProvider


logger = logging.getLogger(__name__)

Outcome = Tuple[FileEntry, bool, Optional[EvalError]]


def is_hidden(entry: FileEntry) -> bool:
    """
    Check if an entry's name starts with a dot.

    Names that are not valid UTF-8 are treated as visible.
    """
    name = Path(entry.path).name
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return name.startswith('.')


class Finder:
    """
    Runs a find query.

    Entries are processed in walk order. For each entry the ``ignore`` and
    ``ignore_hidden_files`` filters run first, then the conditions. As soon
    as ``max_num_results`` matches are collected the walk stops, including
    for any remaining roots.

    With ``max_workers`` greater than 1, conditions are evaluated on a thread
    pool in order-preserving batches. Results are still aggregated in walk
    order, so matches, errors and the cap behave exactly as in sequential
    mode. Entries of the last batch past the cap may still be walked and
    evaluated; their outcomes are dropped, but traversal errors met while
    filling that batch are recorded.
    """

    def __init__(self, options: Optional[FindOptions] = None, walker: Optional[WalkProvider] = None,
                 max_workers: Optional[int] = None, batch_size: int = 64):
        """
        Initialize the finder.

        Args:
            options: Query options, defaults to matching everything
            walker: Walk provider, defaults to FSWalker
            max_workers: Number of evaluation threads; None or 1 evaluates sequentially
            batch_size: Entries per batch in parallel mode
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        self.options = options if options is not None else FindOptions()
        self.walker = walker if walker is not None else FSWalker()
        self.max_workers = max_workers
        self.batch_size = batch_size

    def run(self, roots: Iterable[Union[str, Path]]) -> FindResults:
        """
        Search all roots in the given order.

        Args:
            roots: Root paths to search

        Returns:
            FindResults with matches, evaluation errors and traversal errors
        """
        results = FindResults()
        cap = self.options.max_num_results

        if cap == 0:
            results.truncated = True
            return results

        executor = None
        if self.max_workers is not None and self.max_workers > 1:
            executor = ThreadPoolExecutor(max_workers=self.max_workers)

        try:
            for root in roots:
                logger.debug(f"Searching root {root}")
                if self._search_root(root, results, executor):
                    results.truncated = True
                    logger.debug(f"Max amount of results ({cap}) reached. Exiting early")
                    break
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        logger.debug(f"Found {results.get_match_count()} files")
        return results

    def _search_root(self, root: Union[str, Path], results: FindResults, executor: Optional[Executor]) -> bool:
        """
        Search a single root, appending to ``results``.

        Returns:
            True if the result cap was reached
        """
        items = self.walker.walk(
            root,
            max_depth=self.options.max_search_depth,
            min_depth=self.options.min_depth_from_start,
            follow_symlinks=self.options.follow_symlinks,
        )
        candidates = self._candidates(items, results)

        if executor is not None:
            outcomes = self._evaluate_batches(candidates, executor)
        else:
            outcomes = (self._evaluate(entry) for entry in candidates)

        cap = self.options.max_num_results
        for entry, matched, error in outcomes:
            results.entries_evaluated += 1
            if error is not None:
                results.add_error(entry.path, error)
            elif matched:
                results.add_match(entry.path)
                if cap is not None and results.get_match_count() >= cap:
                    return True

        return False

    def _candidates(self, items: Iterator[WalkItem], results: FindResults) -> Iterator[FileEntry]:
        """Record traversal errors and drop filtered entries."""
        for item in items:
            if isinstance(item, WalkError):
                results.add_traversal_error(item)
                continue
            if self.passes_filters(item):
                yield item

    def passes_filters(self, entry: FileEntry) -> bool:
        """
        Apply the metadata-free filters.

        Args:
            entry: Entry to check

        Returns:
            False if the entry is ignored by type or as a hidden file
        """
        ignore = self.options.ignore
        if ignore is Ignore.FILES and entry.is_file():
            return False
        if ignore is Ignore.FOLDERS and entry.is_dir():
            return False
        if self.options.ignore_hidden_files and is_hidden(entry):
            return False
        return True

    def _evaluate(self, entry: FileEntry) -> Outcome:
        try:
            return entry, self.options.matches(entry), None
        except EvalError as e:
            return entry, False, e

    def _evaluate_batches(self, candidates: Iterator[FileEntry], executor: Executor) -> Iterator[Outcome]:
        """Evaluate candidates on ``executor`` in batches, yielding outcomes in walk order."""
        while True:
            batch: List[FileEntry] = list(islice(candidates, self.batch_size))
            if not batch:
                return
            yield from executor.map(self._evaluate, batch)


def find(roots: Union[str, Path, Iterable[Union[str, Path]]], options: Optional[FindOptions] = None,
         walker: Optional[WalkProvider] = None, max_workers: Optional[int] = None) -> FindResults:
    """
    Find files or folders under ``roots`` that satisfy all conditions in ``options``.

    Entries whose conditions raise an evaluation error are reported in
    ``FindResults.errors`` and never in the matches, even though they might
    have matched. Unreadable entries are reported in
    ``FindResults.traversal_errors``. Neither kind of error stops the search.

    Args:
        roots: A root path or an iterable of root paths, searched in order
        options: Query options, defaults to matching everything
        walker: Walk provider, defaults to FSWalker
        max_workers: Number of evaluation threads

    Returns:
        FindResults for the query
    """
    if isinstance(roots, (str, Path)):
        roots = [roots]
    return Finder(options, walker=walker, max_workers=max_workers).run(roots)

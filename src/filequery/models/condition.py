"""
Boolean condition trees over leaf predicates.

A ``Condition`` is one of ``Not``, ``And``, ``Or`` or ``Value``. Trees are
built bottom-up and never mutated, so one tree can be evaluated against any
number of entries.

Evaluation is strictly left to right with short-circuiting: the right operand
of ``And`` is skipped once the left one is False, the right operand of ``Or``
is skipped once the left one is True, and an error raised by the left operand
stops evaluation immediately. Put cheap criteria (name, path, regex) on the
left and criteria that need metadata on the right to avoid ``stat`` calls.
"""

from functools import reduce
from typing import Generic, Iterable, List, Protocol, TypeVar

from .entry import FileEntry


class Predicate(Protocol):
    """Anything that can be wrapped in a ``Value`` node."""

    def evaluate(self, entry: FileEntry) -> bool: ...


T = TypeVar('T', bound=Predicate)


class Condition(Generic[T]):
    """
    Base class of all condition nodes.

    Nodes can be combined with ``&`` (And), ``|`` (Or) and ``~`` (Not).
    """

    __slots__ = ()

    def evaluate(self, entry: FileEntry) -> bool:
        """
        Check if ``entry`` satisfies this condition.

        Args:
            entry: Entry to check

        Returns:
            True if the entry matches, False otherwise

        Raises:
            EvalError: If a leaf could not examine the entry
        """
        raise NotImplementedError

    def children(self) -> List['Condition[T]']:
        """Get the direct child nodes."""
        return []

    def leaves(self) -> List[T]:
        """Get all leaf predicates in left-to-right order."""
        found: List[T] = []
        for child in self.children():
            found.extend(child.leaves())
        return found

    def __and__(self, other: 'Condition[T]') -> 'And[T]':
        return And(self, other)

    def __or__(self, other: 'Condition[T]') -> 'Or[T]':
        return Or(self, other)

    def __invert__(self) -> 'Not[T]':
        return Not(self)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    def _key(self) -> tuple:
        raise NotImplementedError


class Value(Condition[T]):
    """Leaf node delegating to a predicate."""

    __slots__ = ('value',)

    def __init__(self, value: T):
        self.value = value

    def evaluate(self, entry: FileEntry) -> bool:
        return self.value.evaluate(entry)

    def leaves(self) -> List[T]:
        return [self.value]

    def _key(self) -> tuple:
        return (self.value,)

    def __repr__(self) -> str:
        return f"Value({self.value!r})"


class Not(Condition[T]):
    """Negates its child; errors from the child propagate unchanged."""

    __slots__ = ('condition',)

    def __init__(self, condition: Condition[T]):
        self.condition = condition

    def evaluate(self, entry: FileEntry) -> bool:
        return not self.condition.evaluate(entry)

    def children(self) -> List[Condition[T]]:
        return [self.condition]

    def _key(self) -> tuple:
        return (self.condition,)

    def __repr__(self) -> str:
        return f"Not({self.condition!r})"


class And(Condition[T]):
    """True when both children are True. ``right`` runs only if ``left`` is True."""

    __slots__ = ('left', 'right')

    def __init__(self, left: Condition[T], right: Condition[T]):
        self.left = left
        self.right = right

    def evaluate(self, entry: FileEntry) -> bool:
        if not self.left.evaluate(entry):
            return False
        return self.right.evaluate(entry)

    def children(self) -> List[Condition[T]]:
        return [self.left, self.right]

    def _key(self) -> tuple:
        return (self.left, self.right)

    def __repr__(self) -> str:
        return f"And({self.left!r}, {self.right!r})"


class Or(Condition[T]):
    """True when either child is True. ``right`` runs only if ``left`` is False."""

    __slots__ = ('left', 'right')

    def __init__(self, left: Condition[T], right: Condition[T]):
        self.left = left
        self.right = right

    def evaluate(self, entry: FileEntry) -> bool:
        if self.left.evaluate(entry):
            return True
        return self.right.evaluate(entry)

    def children(self) -> List[Condition[T]]:
        return [self.left, self.right]

    def _key(self) -> tuple:
        return (self.left, self.right)

    def __repr__(self) -> str:
        return f"Or({self.left!r}, {self.right!r})"


def _require_items(criteria: Iterable[T], builder: str) -> List[T]:
    items = list(criteria)
    if not items:
        raise ValueError(f"{builder} needs at least one criteria")
    return items


def all_of(criteria: Iterable[T]) -> Condition[T]:
    """
    Build ``Value(c0) And Value(c1) And ...`` folded to the left.

    Raises:
        ValueError: If ``criteria`` is empty
    """
    items = _require_items(criteria, "all_of")
    return reduce(And, (Value(c) for c in items[1:]), Value(items[0]))


def any_of(criteria: Iterable[T]) -> Condition[T]:
    """
    Build ``Value(c0) Or Value(c1) Or ...`` folded to the left.

    Raises:
        ValueError: If ``criteria`` is empty
    """
    items = _require_items(criteria, "any_of")
    return reduce(Or, (Value(c) for c in items[1:]), Value(items[0]))


def none_of(criteria: Iterable[T]) -> Condition[T]:
    """
    Build ``Not(c0) And Not(c1) And ...`` folded to the left.

    Raises:
        ValueError: If ``criteria`` is empty
    """
    items = _require_items(criteria, "none_of")
    return reduce(And, (Not(Value(c)) for c in items[1:]), Not(Value(items[0])))

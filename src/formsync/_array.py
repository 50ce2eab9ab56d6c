"""Index-aware list transformations for array fields.

Every function is pure: it returns a new list and leaves its input alone.
All index arguments are clamped into range instead of raising, and an
operation that needs an element is a no-op on an empty list.

The store applies one :class:`ArrayOperation` to the value list and, with
``None`` placeholders in place of the new items, to every auxiliary list at
the same path.  Because the index arguments are identical, slot ``i`` of an
auxiliary list keeps describing item ``i`` of the value list.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

_logger = logging.getLogger(__name__)


def _clamp(index: int, low: int, high: int) -> int:
    clamped = max(low, min(index, high))
    if clamped != index:
        _logger.debug("Clamped array index %d into [%d, %d]", index, low, high)
    return clamped


def as_list(value: Any) -> list[Any]:
    """A single item becomes a one-element list."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def append_at(seq: Sequence[Any], items: Any) -> list[Any]:
    return [*seq, *as_list(items)]


def prepend_at(seq: Sequence[Any], items: Any) -> list[Any]:
    return [*as_list(items), *seq]


def insert_at(seq: Sequence[Any], index: int, items: Any) -> list[Any]:
    position = _clamp(index, 0, len(seq))
    return [*seq[:position], *as_list(items), *seq[position:]]


def remove_at(seq: Sequence[Any], index: int | Iterable[int] | None = None) -> list[Any]:
    """Remove one index, several indices in one pass, or everything.

    Indices outside the list are ignored.
    """
    if index is None:
        return []
    doomed = {index} if isinstance(index, int) else set(index)
    return [item for position, item in enumerate(seq) if position not in doomed]


def swap_at(seq: Sequence[Any], index_a: int, index_b: int) -> list[Any]:
    result = list(seq)
    if not result:
        return result
    last = len(result) - 1
    a = _clamp(index_a, 0, last)
    b = _clamp(index_b, 0, last)
    result[a], result[b] = result[b], result[a]
    return result


def move_at(seq: Sequence[Any], from_index: int, to_index: int) -> list[Any]:
    """Take the item at *from_index* out and reinsert it at *to_index*.

    *to_index* is interpreted in the list after removal.
    """
    result = list(seq)
    if not result:
        return result
    item = result.pop(_clamp(from_index, 0, len(result) - 1))
    result.insert(_clamp(to_index, 0, len(result)), item)
    return result


def replace_with(seq: Sequence[Any], items: Any) -> list[Any]:
    return as_list(items)


def pad_to(seq: Sequence[Any] | None, length: int) -> list[Any]:
    """Extend a sparse auxiliary list with ``None`` up to *length*."""
    result = list(seq or [])
    if len(result) < length:
        result.extend([None] * (length - len(result)))
    return result


def trim_trailing(seq: Sequence[Any]) -> list[Any]:
    result = list(seq)
    while result and result[-1] is None:
        result.pop()
    return result


class ArrayOpKind(StrEnum):
    APPEND = "append"
    PREPEND = "prepend"
    INSERT = "insert"
    REMOVE = "remove"
    SWAP = "swap"
    MOVE = "move"
    REPLACE = "replace"


@dataclass(frozen=True, slots=True)
class ArrayOperation:
    """One array mutation, replayable against any list at the same path.

    ``count`` is the number of new items; auxiliary lists receive that many
    ``None`` placeholders.  For ``REMOVE``, ``indices=None`` means "all".
    """

    kind: ArrayOpKind
    count: int = 0
    index: int = 0
    other: int = 0
    indices: tuple[int, ...] | None = None

    @classmethod
    def append(cls, count: int) -> ArrayOperation:
        return cls(ArrayOpKind.APPEND, count=count)

    @classmethod
    def prepend(cls, count: int) -> ArrayOperation:
        return cls(ArrayOpKind.PREPEND, count=count)

    @classmethod
    def insert(cls, index: int, count: int) -> ArrayOperation:
        return cls(ArrayOpKind.INSERT, count=count, index=index)

    @classmethod
    def remove(cls, index: int | Iterable[int] | None = None) -> ArrayOperation:
        if index is None:
            return cls(ArrayOpKind.REMOVE)
        indices = (index,) if isinstance(index, int) else tuple(sorted(set(index)))
        return cls(ArrayOpKind.REMOVE, indices=indices)

    @classmethod
    def swap(cls, index_a: int, index_b: int) -> ArrayOperation:
        return cls(ArrayOpKind.SWAP, index=index_a, other=index_b)

    @classmethod
    def move(cls, from_index: int, to_index: int) -> ArrayOperation:
        return cls(ArrayOpKind.MOVE, index=from_index, other=to_index)

    @classmethod
    def replace(cls, count: int) -> ArrayOperation:
        return cls(ArrayOpKind.REPLACE, count=count)

    def apply(self, seq: Sequence[Any], items: Sequence[Any] | None = None) -> list[Any]:
        """Run the operation on *seq*.

        *items* are the new items for inserting kinds; when omitted,
        ``count`` placeholders are used.
        """
        new_items = list(items) if items is not None else [None] * self.count
        if self.kind is ArrayOpKind.APPEND:
            return append_at(seq, new_items)
        if self.kind is ArrayOpKind.PREPEND:
            return prepend_at(seq, new_items)
        if self.kind is ArrayOpKind.INSERT:
            return insert_at(seq, self.index, new_items)
        if self.kind is ArrayOpKind.REMOVE:
            return remove_at(seq, self.indices)
        if self.kind is ArrayOpKind.SWAP:
            return swap_at(seq, self.index, self.other)
        if self.kind is ArrayOpKind.MOVE:
            return move_at(seq, self.index, self.other)
        return replace_with(seq, new_items)

    def index_map(self, length: int) -> list[int | None]:
        """Old index now living at each new position (``None`` for new items)."""
        return self.apply(list(range(length)))

"""Structural comparison against default values.

Containers are compared member by member.  A missing side of a container
comparison counts as an empty container of the same kind, and a member
holding ``None`` counts as absent, so ``[]`` against no default and
``{"a": None}`` against ``{}`` are both clean.  :func:`differs` and
:func:`dirty_tree` share these rules: ``differs(v, d)`` is exactly
``dirty_tree(v, d) is not None``, computed without building the tree.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from formsync._array import trim_trailing


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _as_mapping_pair(value: Any, default: Any) -> tuple[Mapping[Any, Any], Mapping[Any, Any]] | None:
    if not (isinstance(value, Mapping) or isinstance(default, Mapping)):
        return None
    if (value is None or isinstance(value, Mapping)) and (default is None or isinstance(default, Mapping)):
        return value or {}, default or {}
    return None


def _as_sequence_pair(value: Any, default: Any) -> tuple[list[Any], list[Any]] | None:
    if not (_is_sequence(value) or _is_sequence(default)):
        return None
    if (value is None or _is_sequence(value)) and (default is None or _is_sequence(default)):
        return list(value or []), list(default or [])
    return None


def _mapping_members(current: Mapping[Any, Any], baseline: Mapping[Any, Any]) -> Iterator[tuple[Any, Any, Any]]:
    for key in current:
        yield key, current[key], baseline.get(key)
    for key in baseline:
        if key not in current:
            yield key, None, baseline[key]


def _sequence_members(current: list[Any], baseline: list[Any]) -> Iterator[tuple[Any, Any]]:
    for index in range(max(len(current), len(baseline))):
        yield (
            current[index] if index < len(current) else None,
            baseline[index] if index < len(baseline) else None,
        )


def deep_equal(left: Any, right: Any) -> bool:
    """Strict structural equality that short-circuits on the first difference.

    Unlike ``==``, ``True`` and ``1`` are not equal, and a list equals a
    tuple with the same items.
    """
    if left is right:
        return True
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, Mapping) or isinstance(right, Mapping):
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return False
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)
    if _is_sequence(left) or _is_sequence(right):
        if not (_is_sequence(left) and _is_sequence(right)):
            return False
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right, strict=True))
    try:
        return bool(left == right)
    except Exception:  # noqa: BLE001
        return False


def differs(value: Any, default: Any) -> bool:
    """True when *value* is dirty against *default*."""
    mappings = _as_mapping_pair(value, default)
    if mappings is not None:
        return any(differs(v, d) for _, v, d in _mapping_members(*mappings))
    sequences = _as_sequence_pair(value, default)
    if sequences is not None:
        return any(differs(v, d) for v, d in _sequence_members(*sequences))
    return not deep_equal(value, default)


def dirty_tree(value: Any, default: Any) -> Any:
    """Sparse tree of ``True`` flags where *value* differs from *default*.

    Returns ``None`` when nothing differs, ``True`` for a differing leaf, or a
    dict/list mirroring the containers down to the differing leaves.
    """
    mappings = _as_mapping_pair(value, default)
    if mappings is not None:
        flags: dict[Any, Any] = {}
        for key, member, baseline in _mapping_members(*mappings):
            flag = dirty_tree(member, baseline)
            if flag is not None:
                flags[key] = flag
        return flags or None
    sequences = _as_sequence_pair(value, default)
    if sequences is not None:
        slots = trim_trailing([dirty_tree(v, d) for v, d in _sequence_members(*sequences)])
        return slots or None
    return None if deep_equal(value, default) else True

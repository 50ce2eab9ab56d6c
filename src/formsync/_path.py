"""Path-addressed access to nested value trees.

A field path is either a string (``"items[0].name"`` or ``"items.0.name"``)
or a sequence of segments.  In string form a segment made only of ASCII
digits is an array index; in sequence form ``int`` segments are indices and
``str`` segments are literal keys, even when they look numeric.  Sequence
form is therefore the way to address a mapping keyed by numeric strings
(``["accounts", "1042"]``) before that mapping exists.

Container inference when :func:`set_path` has to create a missing node: an
index segment creates a ``list``, anything else a ``dict``.  Existing
containers are never re-typed: a numeric segment on an existing ``dict`` is
a literal key and on an existing ``list`` an index.

``None`` is the "absent" marker inside lists, so a list hole and a removed
slot are the same thing.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from formsync.exceptions import FormSyncPathError

Segment = str | int
FieldPath = str | Sequence[Segment]

_SEGMENT_RE = re.compile(r"[^.\[\]]+")
_QUOTES = "'\""


def _is_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _is_index(segment: Segment) -> bool:
    return isinstance(segment, int) and not isinstance(segment, bool)


def parse_path(path: FieldPath) -> list[Segment]:
    """Split *path* into segments.

    Raises
    ------
    FormSyncPathError
        If the path is empty or contains unsupported segment types.
    """
    if isinstance(path, str):
        segments: list[Segment] = []
        for raw in _SEGMENT_RE.findall(path):
            part = raw.strip()
            if len(part) >= 2 and part[0] in _QUOTES and part[-1] == part[0]:
                # Quoted bracket keys (``a["0"]``) are literal keys.
                segments.append(part[1:-1])
            elif _is_digits(part):
                segments.append(int(part))
            elif part:
                segments.append(part)
        if not segments:
            raise FormSyncPathError("field path must be non-empty", path=path)
        return segments

    segments = list(path)
    if not segments:
        raise FormSyncPathError("field path must be non-empty", path=path)
    for segment in segments:
        if isinstance(segment, bool) or not isinstance(segment, (str, int)):
            raise FormSyncPathError(f"unsupported path segment {segment!r}", path=path)
        if isinstance(segment, int) and segment < 0:
            raise FormSyncPathError(f"negative index {segment} in path", path=path)
    return segments


def join_path(path: FieldPath) -> str:
    """Canonical dotted form of *path* (``"items.0.name"``)."""
    return ".".join(str(segment) for segment in parse_path(path))


def is_within(path: str, parent: str) -> bool:
    """Return ``True`` when canonical *path* equals or descends from *parent*."""
    return path == parent or path.startswith(parent + ".")


def _list_index(segment: Segment) -> int | None:
    if _is_index(segment):
        return int(segment)
    if isinstance(segment, str) and _is_digits(segment):
        return int(segment)
    return None


def _mapping_key(node: Mapping[Any, Any], segment: Segment) -> Segment:
    # Data keys are strings; an int segment falls back to its string form.
    if segment in node or not _is_index(segment):
        return segment
    return str(segment)


def _lookup(node: Any, segment: Segment) -> tuple[bool, Any]:
    if isinstance(node, Mapping):
        key = _mapping_key(node, segment)
        if key in node:
            return True, node[key]
        return False, None
    if isinstance(node, list):
        index = _list_index(segment)
        if index is not None and index < len(node):
            return True, node[index]
    return False, None


def _assign(node: Any, segment: Segment, value: Any, path: FieldPath) -> None:
    if isinstance(node, dict):
        node[_mapping_key(node, segment)] = value
        return
    if isinstance(node, list):
        index = _list_index(segment)
        if index is None:
            raise FormSyncPathError(f"cannot address a list with key {segment!r}", path=path)
        if index >= len(node):
            node.extend([None] * (index - len(node) + 1))
        node[index] = value
        return
    raise FormSyncPathError(f"cannot set {segment!r} on {type(node).__name__}", path=path)


def _remove(node: Any, segment: Segment) -> bool:
    if isinstance(node, dict):
        key = _mapping_key(node, segment)
        if key not in node:
            return False
        del node[key]
        return True
    if isinstance(node, list):
        index = _list_index(segment)
        if index is None or index >= len(node):
            return False
        node[index] = None
        return True
    return False


def is_empty_container(node: Any) -> bool:
    """``True`` for a dict without keys or a list whose every slot is ``None``."""
    if isinstance(node, dict):
        return not node
    if isinstance(node, list):
        return all(item is None for item in node)
    return False


def get_path(tree: Any, path: FieldPath, default: Any = None) -> Any:
    """Return the value at *path*, or *default* when any segment is missing."""
    node = tree
    for segment in parse_path(path):
        found, node = _lookup(node, segment)
        if not found:
            return default
    return default if node is None else node


def has_path(tree: Any, path: FieldPath) -> bool:
    """Return ``True`` when a non-``None`` value exists at *path*."""
    node = tree
    for segment in parse_path(path):
        found, node = _lookup(node, segment)
        if not found:
            return False
    return node is not None


def set_path(tree: Any, path: FieldPath, value: Any) -> Any:
    """Write *value* at *path*, creating intermediate containers on demand."""
    segments = parse_path(path)
    node = tree
    for position, segment in enumerate(segments[:-1]):
        found, child = _lookup(node, segment)
        if not found or not isinstance(child, (dict, list)):
            child = [] if _is_index(segments[position + 1]) else {}
            _assign(node, segment, child, path)
        node = child
    _assign(node, segments[-1], value, path)
    return tree


def unset_path(tree: Any, path: FieldPath) -> Any:
    """Remove the value at *path* and prune ancestors left empty.

    Pruning stops at the first non-empty ancestor; the root itself is never
    removed.  A missing path is a no-op.
    """
    segments = parse_path(path)
    parents: list[tuple[Any, Segment]] = []
    node = tree
    for segment in segments[:-1]:
        found, child = _lookup(node, segment)
        if not found or not isinstance(child, (dict, list)):
            return tree
        parents.append((node, segment))
        node = child
    if not _remove(node, segments[-1]):
        return tree
    while parents and is_empty_container(node):
        parent, segment = parents.pop()
        _remove(parent, segment)
        node = parent
    return tree


def _iter_leaf_paths(value: Any, path: str) -> Iterator[str]:
    if isinstance(value, Mapping) and value:
        for key, child in value.items():
            yield from _iter_leaf_paths(child, f"{path}.{key}" if path else str(key))
        return
    if isinstance(value, list) and value:
        for index, child in enumerate(value):
            yield from _iter_leaf_paths(child, f"{path}.{index}" if path else str(index))
        return
    if path:
        yield path


def field_paths(value: Any, prefix: FieldPath | None = None) -> list[str]:
    """Flatten *value* into the canonical paths of its leaves.

    Empty containers count as leaves so that an empty item still yields its
    own path.
    """
    root = join_path(prefix) if prefix is not None else ""
    return list(_iter_leaf_paths(value, root))

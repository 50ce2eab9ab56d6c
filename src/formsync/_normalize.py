"""Normalization of sparse auxiliary trees.

Errors, touched flags, dirty flags and the validity cache are sparse: a
missing path means "nothing to report".  Everything written into those trees
goes through :func:`prune_tree` first so presence-testing a path doubles as
"has any flagged sub-field".
"""

from __future__ import annotations

from typing import Any

from formsync._array import trim_trailing


def is_meaningful(value: Any) -> bool:
    """Return True if the value should be kept in a sparse tree."""

    if value is None:
        return False
    if value is False:
        return False
    if value == "":
        return False
    if isinstance(value, dict) and not value:
        return False
    return not (isinstance(value, (list, tuple)) and not value)


def prune_tree(data: Any) -> Any:
    """Recursively drop non-meaningful values.

    - Dicts: remove keys with non-meaningful values; recurse into nested dicts/lists.
    - Lists: non-meaningful items become ``None`` so indices stay aligned with
      the value list; trailing ``None`` slots are trimmed.
    - Scalars: returned as-is.

    The result may itself be non-meaningful (``{}``/``[]``); callers unset the
    path in that case.
    """

    if isinstance(data, dict):
        pruned: dict[Any, Any] = {}
        for key, value in data.items():
            cleaned = prune_tree(value)
            if is_meaningful(cleaned):
                pruned[key] = cleaned
        return pruned

    if isinstance(data, (list, tuple)):
        items = [prune_tree(item) for item in data]
        return trim_trailing([item if is_meaningful(item) else None for item in items])

    return data

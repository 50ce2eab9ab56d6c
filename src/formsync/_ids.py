"""Synthetic identity keys for array-field items."""

from __future__ import annotations

import itertools
import secrets
from collections.abc import Iterable
from typing import Any

from formsync._constants import DEFAULT_ID_PREFIX, ID_TOKEN_BYTES
from formsync.models.entry import ArrayFieldEntry

_counter = itertools.count(1)


def generate_id(prefix: str = DEFAULT_ID_PREFIX) -> str:
    """Return a key never handed out before in this process.

    The counter makes keys distinct; the random suffix keeps them from
    looking like anything a user would type.
    """
    return f"{prefix}{next(_counter):x}_{secrets.token_hex(ID_TOKEN_BYTES)}"


def append_id(item: Any, prefix: str = DEFAULT_ID_PREFIX) -> ArrayFieldEntry[Any]:
    """Wrap *item* in an entry with a fresh key.

    An item that already is an :class:`ArrayFieldEntry` keeps its key.
    """
    if isinstance(item, ArrayFieldEntry):
        return item
    return ArrayFieldEntry(key=generate_id(prefix), value=item)


def map_ids(items: Iterable[Any], prefix: str = DEFAULT_ID_PREFIX) -> list[ArrayFieldEntry[Any]]:
    return [append_id(item, prefix) for item in items]


def omit_key(entries: Iterable[ArrayFieldEntry[Any] | None]) -> list[Any]:
    """Strip synthetic keys, leaving the plain values."""
    return [entry.value if isinstance(entry, ArrayFieldEntry) else entry for entry in entries]

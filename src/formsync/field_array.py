"""Array-field API bound to a form-state store.

Usage::

    store = FormStateStore({"test": [{"x": "101"}, {"x": "102"}]})
    items = store.field_array("test", rules={"x": {"required": True}})
    items.append({"x": "103"})
    items.swap(0, 2)
    [entry.key for entry in items.fields]

Every method returns ``None``; results reach observers through the store's
subjects.  Keys travel with their items through swap/move/remove and are
minted fresh for every inserted or replacing item.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from formsync._array import ArrayOperation, as_list
from formsync._ids import map_ids, omit_key
from formsync._path import FieldPath, join_path
from formsync._subject import Subscription
from formsync.models.entry import ArrayFieldEntry
from formsync.state.events import FieldArrayEvent

if TYPE_CHECKING:
    from formsync.state.store import FormStateStore

_logger = logging.getLogger(__name__)


class FieldArray:
    """List-shaped section of a form, mutated as whole items.

    Parameters
    ----------
    store
        Owning store.
    name
        Path of the list inside the form values.
    rules
        Validation rules per item sub-path (``{"x": ...}`` registers
        ``<name>.<i>.x`` with those rules; ``""`` addresses the item itself).
    """

    def __init__(
        self,
        store: FormStateStore,
        name: FieldPath,
        *,
        rules: Mapping[str, Any] | None = None,
    ) -> None:
        self._store = store
        self._name = join_path(name)
        self._rules: dict[str, Any] = dict(rules or {})
        self._prefix = store.config.id_prefix
        self._keys: list[str] = [entry.key for entry in map_ids(self._current_values(), self._prefix)]
        self._unregister = store.register_field_array(self._name)
        self._subscription: Subscription[FieldArrayEvent] | None = store.subscribe_field_array(
            self._name, self._on_event
        )
        store.sync_field_array_registrations(self._name, item_rules=self._rules)

    def __enter__(self) -> FieldArray:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._subscription is None

    @property
    def fields(self) -> list[ArrayFieldEntry[Any]]:
        """Current items with their synthetic keys."""
        values = self._current_values()
        self._sync_keys(len(values))
        return [
            ArrayFieldEntry(key=key, value=value)
            for key, value in zip(self._keys, values, strict=True)
        ]

    @property
    def keys(self) -> list[str]:
        return [entry.key for entry in self.fields]

    def subscribe(self, deliver: Callable[[FieldArrayEvent], None]) -> Subscription[FieldArrayEvent]:
        """Observe this array's item list."""
        return self._store.subscribe_field_array(self._name, deliver)

    def append(self, value: Any) -> None:
        items = as_list(value)
        self._apply(ArrayOperation.append(len(items)), items)

    def prepend(self, value: Any) -> None:
        items = as_list(value)
        self._apply(ArrayOperation.prepend(len(items)), items)

    def insert(self, index: int, value: Any) -> None:
        items = as_list(value)
        self._apply(ArrayOperation.insert(index, len(items)), items)

    def remove(self, index: int | Iterable[int] | None = None) -> None:
        """Remove one item, several items in one pass, or (no argument) all of them."""
        self._apply(ArrayOperation.remove(index))

    def swap(self, index_a: int, index_b: int) -> None:
        self._apply(ArrayOperation.swap(index_a, index_b))

    def move(self, from_index: int, to_index: int) -> None:
        self._apply(ArrayOperation.move(from_index, to_index))

    def replace(self, value: Any) -> None:
        """Install new items with new keys; errors and touched state at the path are dropped."""
        items = as_list(value)
        self._apply(ArrayOperation.replace(len(items)), items)

    def update(self, index: int, value: Any) -> None:
        """Overwrite one item's value in place; its key is kept."""
        length = len(self._current_values())
        if not 0 <= index < length:
            _logger.debug("Ignoring update of %s[%d]: %d items", self._name, index, length)
            return
        self._store.set_value(f"{self._name}.{index}", value)

    def close(self) -> None:
        """Detach from the store.  Later mutations are ignored."""
        if self._subscription is None:
            return
        self._subscription.unsubscribe()
        self._subscription = None
        self._unregister()

    def _current_values(self) -> list[Any]:
        values = self._store.get_values(self._name)
        return values if isinstance(values, list) else []

    def _sync_keys(self, length: int) -> None:
        if len(self._keys) > length:
            del self._keys[length:]
        elif len(self._keys) < length:
            self._keys.extend(entry.key for entry in map_ids([None] * (length - len(self._keys)), self._prefix))

    def _apply(self, operation: ArrayOperation, items: list[Any] | None = None) -> None:
        if self._subscription is None:
            _logger.debug("Ignoring %s on closed field array %s", operation.kind, self._name)
            return
        entries = self.fields
        updated = operation.apply(entries, map_ids(items or [], self._prefix))
        self._keys = [entry.key for entry in updated]
        self._store.apply_array_operation(self._name, operation, omit_key(updated), item_rules=self._rules)

    def _on_event(self, event: FieldArrayEvent) -> None:
        if not event.is_reset:
            return
        values = self._current_values()
        self._keys = [entry.key for entry in map_ids(values, self._prefix)]
        self._store.sync_field_array_registrations(self._name, item_rules=self._rules)
        _logger.debug("Re-keyed %s after external replacement (%d items)", self._name, len(values))

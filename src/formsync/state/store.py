"""Form-state store.

This is the only component allowed to mutate the value tree and its
auxiliary trees (errors, touched flags, dirty flags, validity cache).  Every
mutation runs to completion, including notification, before it returns, so
an observer reading the store from inside its callback always sees the
post-mutation state.
"""

from __future__ import annotations

import copy
import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from formsync._array import ArrayOperation, ArrayOpKind, pad_to
from formsync._compare import differs, dirty_tree
from formsync._normalize import is_meaningful, prune_tree
from formsync._path import FieldPath, field_paths, get_path, has_path, is_within, join_path, set_path, unset_path
from formsync._subject import Subject, Subscription
from formsync.config import FormConfig, ValidationMode
from formsync.models.snapshot import FieldState, FormStateSnapshot
from formsync.state.events import ALL_STATE_KINDS, FieldArrayEvent, FormStateEvent, StateKind, WatchEvent
from formsync.state.policy import (
    KeepStateOptions,
    TrackingPolicy,
    combine_policies,
    should_validate_on_blur,
    should_validate_on_change,
)
from formsync.validation import Validator, run_validator

if TYPE_CHECKING:
    from formsync.field_array import FieldArray

_logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(slots=True)
class FieldRegistration:
    """A field declared by the binding layer."""

    name: str
    rules: Any = None

    @property
    def has_validation(self) -> bool:
        return self.rules is not None


def _names(name: FieldPath | Iterable[str] | None) -> list[str] | None:
    """Normalize a path or a collection of string paths to canonical names.

    A tuple is always one path in segment form (``("accounts", "1042")``).
    Any other collection made only of strings is several dotted names; a
    collection holding an ``int`` segment is one path.
    """
    if name is None:
        return None
    if isinstance(name, str):
        return [join_path(name)]
    if isinstance(name, tuple):
        return [join_path(name)]
    items = list(name)
    if items and all(isinstance(item, str) for item in items):
        return [join_path(item) for item in items]
    return [join_path(items)]


class FormStateStore:
    """Owner of one form's values and derived state.

    Parameters
    ----------
    default_values
        Initial values; also the baseline for dirty comparison.
    config
        Form configuration.
    validator
        Opaque validator (see :mod:`formsync.validation`).
    schema
        When given, the validator is called with the whole values tree and
        this schema instead of per field.
    tracking
        Base tracking policy, OR-ed with the interest of every live
        form-state subscription.
    """

    def __init__(
        self,
        default_values: Mapping[str, Any] | None = None,
        *,
        config: FormConfig | None = None,
        validator: Validator | None = None,
        schema: Any = None,
        tracking: TrackingPolicy | None = None,
    ) -> None:
        self._config = config or FormConfig()
        self._validator = validator
        self._schema = schema
        self._base_policy = tracking or TrackingPolicy()
        if ValidationMode.ON_TOUCHED in (self._config.mode, self._config.re_validate_mode):
            # on_touched revalidates changes based on the touched flags.
            self._base_policy = self._base_policy.union(TrackingPolicy(track_touched=True))
        self._interests: dict[int, TrackingPolicy] = {}
        self._tracking = self._base_policy

        self._default_values: dict[str, Any] = copy.deepcopy(dict(default_values or {}))
        self._values: dict[str, Any] = copy.deepcopy(self._default_values)
        self._errors: dict[str, Any] = {}
        self._touched: dict[str, Any] = {}
        self._dirty: dict[str, Any] = {}
        self._valid_fields: dict[str, Any] = {}
        self._schema_valid: bool | None = None

        self._fields: dict[str, FieldRegistration] = {}
        self._array_names: set[str] = set()
        self._is_submitted = False
        self._submit_count = 0
        self._snapshot: FormStateSnapshot | None = None

        self.form_state_subject: Subject[FormStateEvent] = Subject("form_state")
        self.watch_subject: Subject[WatchEvent] = Subject("watch")
        self.array_subject: Subject[FieldArrayEvent] = Subject("field_array")

        if self._tracking.track_dirty:
            self._rebuild_dirty()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def config(self) -> FormConfig:
        return self._config

    @property
    def tracking(self) -> TrackingPolicy:
        """Effective tracking policy (base policy plus live interest)."""
        return self._tracking

    @property
    def default_values(self) -> dict[str, Any]:
        return copy.deepcopy(self._default_values)

    @property
    def registered_names(self) -> list[str]:
        return list(self._fields)

    @property
    def field_array_names(self) -> set[str]:
        return set(self._array_names)

    def get_registration(self, name: FieldPath) -> FieldRegistration | None:
        return self._fields.get(join_path(name))

    def get_values(self, name: FieldPath | None = None) -> Any:
        """Deep copy of all values, or of the value at *name*."""
        if name is None:
            return copy.deepcopy(self._values)
        return copy.deepcopy(get_path(self._values, name))

    def get_default_value(self, name: FieldPath) -> Any:
        return copy.deepcopy(get_path(self._default_values, name))

    def get_is_dirty(self, name: FieldPath | None = None, candidate: Any = _UNSET) -> bool:
        """Compare *candidate* (or the current values) with the defaults.

        Without *name* the whole tree is compared; with *name* only the
        subtree at that path.  Comparison stops at the first difference.
        """
        if name is None:
            current = self._values if candidate is _UNSET else candidate
            return differs(current, self._default_values)
        current = get_path(self._values, name) if candidate is _UNSET else candidate
        return differs(current, get_path(self._default_values, name))

    @property
    def form_state(self) -> FormStateSnapshot:
        """Snapshot of the aggregate state.

        Built on first access after a mutation and shared by every reader
        until the next one.
        """
        if self._snapshot is None:
            tracking = self._tracking
            self._snapshot = FormStateSnapshot(
                values=copy.deepcopy(self._values),
                errors=copy.deepcopy(self._errors),
                touched_fields=copy.deepcopy(self._touched),
                dirty_fields=copy.deepcopy(self._dirty),
                is_dirty=self.get_is_dirty() if tracking.tracks_is_dirty else False,
                is_valid=self._compute_is_valid() if tracking.track_validity else not self._errors,
                is_submitted=self._is_submitted,
                submit_count=self._submit_count,
            )
        return self._snapshot

    def snapshot(self) -> FormStateSnapshot:
        return self.form_state

    def get_field_state(self, name: FieldPath) -> FieldState:
        path = join_path(name)
        error = get_path(self._errors, path)
        if self._tracking.track_dirty:
            is_dirty = has_path(self._dirty, path)
        else:
            is_dirty = self.get_is_dirty(path)
        return FieldState(
            invalid=error is not None,
            is_dirty=is_dirty,
            is_touched=has_path(self._touched, path),
            error=copy.deepcopy(error),
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe_form_state(
        self,
        deliver: Callable[[FormStateEvent], None],
        interest: TrackingPolicy | None = None,
        *,
        name: FieldPath | None = None,
    ) -> Subscription[FormStateEvent]:
        """Observe aggregate state.

        *interest* declares which derived state the observer reads; the store
        starts maintaining it (and stops again once no live subscription needs
        it).  Events that only touch state outside the interest are not
        delivered.  With *name*, only events concerning that path (or the
        whole form) are delivered.
        """
        policy = interest or TrackingPolicy()
        kinds = policy.kinds()
        scope = join_path(name) if name is not None else None

        def _wants(event: FormStateEvent) -> bool:
            return bool(event.changed & kinds) and event.concerns(scope)

        handle = self.form_state_subject.subscribe(deliver, _wants, on_close=self._drop_interest)
        self._interests[handle.id] = policy
        self._retrack()
        return handle

    def subscribe_watch(
        self,
        deliver: Callable[[WatchEvent], None],
        name: FieldPath | Iterable[str] | None = None,
    ) -> Subscription[WatchEvent]:
        """Observe value changes at one or more paths (all paths when *name* is None).

        A list of strings is several dotted paths; pass a tuple to address a
        single path in segment form, e.g. ``("accounts", "1042")``.
        """
        scopes = _names(name)

        def _wants(event: WatchEvent) -> bool:
            if scopes is None:
                return True
            return any(event.concerns(scope) for scope in scopes)

        return self.watch_subject.subscribe(deliver, _wants)

    def watch(
        self,
        name: FieldPath | Iterable[str] | None,
        callback: Callable[[Any, WatchEvent], None],
    ) -> Subscription[WatchEvent]:
        """Call ``callback(value, event)`` with the current value at *name* on every change."""

        names = _names(name)

        def _deliver(event: WatchEvent) -> None:
            if names is not None and len(names) == 1:
                callback(self.get_values(names[0]), event)
            else:
                callback(self.get_values(), event)

        return self.subscribe_watch(_deliver, name)

    def subscribe_field_array(
        self,
        name: FieldPath,
        deliver: Callable[[FieldArrayEvent], None],
    ) -> Subscription[FieldArrayEvent]:
        """Observe changes to the item list of the array field at *name*."""
        scope = join_path(name)

        def _wants(event: FieldArrayEvent) -> bool:
            return event.name is None or is_within(scope, event.name)

        return self.array_subject.subscribe(deliver, _wants)

    def _drop_interest(self, handle: Subscription[FormStateEvent]) -> None:
        if self._interests.pop(handle.id, None) is not None:
            self._retrack()

    def _retrack(self) -> None:
        previous = self._tracking
        current = combine_policies(self._interests.values(), self._base_policy)
        self._tracking = current
        if current.track_dirty and not previous.track_dirty:
            self._rebuild_dirty()
        elif previous.track_dirty and not current.track_dirty:
            self._dirty = {}
        if previous.track_validity and not current.track_validity:
            self._valid_fields = {}
            self._schema_valid = None
        if current != previous:
            _logger.debug("Tracking policy now %s", current)
            self._invalidate()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: FieldPath, rules: Any = None) -> Callable[[], None]:
        """Declare that a field exists; returns a callable that unregisters it.

        The value is seeded from the defaults when absent.  Registering an
        already registered path only updates its rules.
        """
        path = self._register(name, rules, seed=True)
        self._invalidate()
        return functools.partial(self.unregister, path)

    def _register(self, name: FieldPath, rules: Any, *, seed: bool) -> str:
        path = join_path(name)
        registration = self._fields.get(path)
        if registration is None:
            registration = FieldRegistration(path, rules)
            self._fields[path] = registration
            _logger.debug("Registered field %s", path)
        elif rules is not None:
            registration.rules = rules
        if seed and not has_path(self._values, path):
            default = get_path(self._default_values, path)
            if default is not None:
                set_path(self._values, path, copy.deepcopy(default))
        if registration.has_validation and self._tracking.track_validity:
            self._refresh_validity(path)
        return path

    def unregister(self, name: FieldPath) -> None:
        """Forget a field.

        With ``should_unregister`` configured the value and every auxiliary
        entry at the path are removed as well.
        """
        path = join_path(name)
        if self._fields.pop(path, None) is None:
            return
        _logger.debug("Unregistered field %s", path)
        if not self._config.should_unregister:
            self._invalidate()
            return
        for tree in (self._values, self._errors, self._touched, self._dirty, self._valid_fields):
            unset_path(tree, path)
        self._schema_valid = None
        self._invalidate()
        self._publish(
            path,
            {StateKind.VALUES, StateKind.ERRORS, StateKind.TOUCHED_FIELDS, StateKind.DIRTY_FIELDS, StateKind.IS_DIRTY},
        )

    def register_field_array(self, name: FieldPath) -> Callable[[], None]:
        path = join_path(name)
        self._array_names.add(path)
        return functools.partial(self.unregister_field_array, path)

    def unregister_field_array(self, name: FieldPath) -> None:
        self._array_names.discard(join_path(name))

    def field_array(self, name: FieldPath, *, rules: Mapping[str, Any] | None = None) -> FieldArray:
        """Bind a :class:`~formsync.field_array.FieldArray` to *name*."""
        from formsync.field_array import FieldArray

        return FieldArray(self, name, rules=rules)

    # ------------------------------------------------------------------
    # Field mutation
    # ------------------------------------------------------------------

    def set_value(
        self,
        name: FieldPath,
        value: Any,
        *,
        should_validate: bool | None = None,
        should_dirty: bool = True,
        should_touch: bool = False,
    ) -> None:
        """Write *value* at *name* and bring derived state up to date.

        ``should_validate=None`` lets the configured validation mode decide.
        Dirty flags are only computed while dirty state is tracked.
        """
        path = join_path(name)
        set_path(self._values, path, copy.deepcopy(value))
        self._schema_valid = None
        tracking = self._tracking
        changed = {StateKind.VALUES}

        if should_touch and tracking.track_touched and get_path(self._touched, path) is not True:
            set_path(self._touched, path, True)
            changed.add(StateKind.TOUCHED_FIELDS)
        if should_dirty and tracking.track_dirty:
            self._update_dirty(path)
            changed.add(StateKind.DIRTY_FIELDS)
        if tracking.tracks_is_dirty:
            changed.add(StateKind.IS_DIRTY)

        if should_validate is None:
            should_validate = self._validator is not None and should_validate_on_change(
                mode=self._config.mode,
                re_validate_mode=self._config.re_validate_mode,
                is_submitted=self._is_submitted,
                is_touched=has_path(self._touched, path),
            )
        if should_validate:
            self._validate([path])
            changed.update((StateKind.ERRORS, StateKind.IS_VALID))
        elif tracking.track_validity:
            self._refresh_validity(path)
            changed.add(StateKind.IS_VALID)

        self._invalidate()
        for array_name in sorted(self._array_names):
            if is_within(array_name, path):
                self._publish_array(array_name, is_reset=True)
            elif is_within(path, array_name):
                self._publish_array(array_name)
        self._publish(path, changed)

    def mark_touched(self, name: FieldPath) -> None:
        """Record that a field lost focus; may validate depending on the mode."""
        path = join_path(name)
        changed: set[StateKind] = set()
        if self._tracking.track_touched and get_path(self._touched, path) is not True:
            set_path(self._touched, path, True)
            changed.add(StateKind.TOUCHED_FIELDS)
        if self._validator is not None and should_validate_on_blur(
            mode=self._config.mode,
            re_validate_mode=self._config.re_validate_mode,
            is_submitted=self._is_submitted,
        ):
            self._validate([path])
            changed.update((StateKind.ERRORS, StateKind.IS_VALID))
        if changed:
            self._invalidate()
            self.form_state_subject.publish(FormStateEvent(name=path, changed=frozenset(changed)))

    def apply_array_operation(
        self,
        name: FieldPath,
        operation: ArrayOperation,
        values: list[Any],
        *,
        item_rules: Mapping[str, Any] | None = None,
    ) -> None:
        """Install the result of an array operation and realign auxiliary state.

        *values* is the value list after *operation*.  The same operation is
        replayed on each auxiliary list at the path (errors always; touched
        flags and the validity cache while tracked), on registrations under
        the path, and dirty flags are recomputed against the defaults.
        Newly inserted items are registered in bulk with *item_rules*.
        """
        path = join_path(name)
        previous = get_path(self._values, path)
        old_length = len(previous) if isinstance(previous, list) else 0
        set_path(self._values, path, copy.deepcopy(values))
        self._schema_valid = None

        tracking = self._tracking
        changed = {StateKind.VALUES, StateKind.ERRORS}
        self._realign(self._errors, path, operation, old_length)
        # Flags recorded while touched state was tracked must keep following their items.
        self._realign(self._touched, path, operation, old_length)
        if tracking.track_touched:
            changed.add(StateKind.TOUCHED_FIELDS)
        if tracking.track_dirty:
            self._update_dirty(path)
            changed.add(StateKind.DIRTY_FIELDS)
        if tracking.tracks_is_dirty:
            changed.add(StateKind.IS_DIRTY)

        if tracking.track_validity:
            self._realign(self._valid_fields, path, operation, old_length)
            changed.add(StateKind.IS_VALID)

        index_map = operation.index_map(old_length)
        self._reindex_registrations(path, index_map)
        new_positions = [position for position, old in enumerate(index_map) if old is None]
        self._register_items(path, values, new_positions, item_rules or {})

        _logger.debug("Applied %s to %s (%d -> %d items)", operation.kind, path, old_length, len(values))
        self._invalidate()
        self._publish_array(path)
        self._publish(path, changed)

    def _realign(self, tree: dict[str, Any], path: str, operation: ArrayOperation, length: int) -> None:
        current = get_path(tree, path)
        if current is None:
            return
        if not isinstance(current, list):
            # A whole-array entry (e.g. a "too few items" error) is not per item.
            if operation.kind is ArrayOpKind.REPLACE:
                unset_path(tree, path)
            return
        updated = prune_tree(operation.apply(pad_to(current, length)))
        if is_meaningful(updated):
            set_path(tree, path, updated)
        else:
            unset_path(tree, path)

    def _reindex_registrations(self, path: str, index_map: list[int | None]) -> None:
        prefix = path + "."
        old_to_new = {old: new for new, old in enumerate(index_map) if old is not None}
        moved: dict[str, FieldRegistration] = {}
        for registered in list(self._fields):
            if not registered.startswith(prefix):
                continue
            head, _, tail = registered[len(prefix) :].partition(".")
            if not head.isdigit():
                continue
            registration = self._fields.pop(registered)
            new_index = old_to_new.get(int(head))
            if new_index is None:
                _logger.debug("Unregistered removed item field %s", registered)
                continue
            registration.name = f"{prefix}{new_index}" + (f".{tail}" if tail else "")
            moved[registration.name] = registration
        self._fields.update(moved)

    def _register_items(
        self,
        path: str,
        values: list[Any],
        positions: Iterable[int],
        item_rules: Mapping[str, Any],
    ) -> None:
        for position in positions:
            if position >= len(values):
                continue
            item_path = f"{path}.{position}"
            leaves = set(field_paths(values[position], item_path))
            leaves.update(join_path(f"{item_path}.{sub}") if sub else item_path for sub in item_rules)
            for leaf in sorted(leaves):
                sub = leaf[len(item_path) + 1 :]
                self._register(leaf, item_rules.get(sub), seed=False)

    def sync_field_array_registrations(
        self,
        name: FieldPath,
        *,
        item_rules: Mapping[str, Any] | None = None,
    ) -> None:
        """Match registrations under an array path to its current items.

        Used after the whole list was replaced from outside the field array.
        """
        path = join_path(name)
        values = get_path(self._values, path, [])
        if not isinstance(values, list):
            values = []
        prefix = path + "."
        for registered in list(self._fields):
            head = registered[len(prefix) :].partition(".")[0] if registered.startswith(prefix) else ""
            if head.isdigit() and int(head) >= len(values):
                self._fields.pop(registered)
        self._register_items(path, values, range(len(values)), item_rules or {})
        self._invalidate()

    # ------------------------------------------------------------------
    # Validation and errors
    # ------------------------------------------------------------------

    def trigger(self, name: FieldPath | Iterable[str] | None = None) -> bool:
        """Validate one path, several paths, or the whole form; return validity."""
        valid = self._validate(_names(name))
        self._invalidate()
        self.form_state_subject.publish(
            FormStateEvent(name=None, changed=frozenset({StateKind.ERRORS, StateKind.IS_VALID}))
        )
        return valid

    def set_error(self, name: FieldPath, error: Any) -> None:
        """Store an error produced outside the validator (e.g. server-side)."""
        path = join_path(name)
        self._write_error(path, error)
        unset_path(self._valid_fields, path)
        self._invalidate()
        self.form_state_subject.publish(
            FormStateEvent(name=path, changed=frozenset({StateKind.ERRORS, StateKind.IS_VALID}))
        )

    def clear_errors(self, name: FieldPath | Iterable[str] | None = None) -> None:
        names = _names(name)
        if names is None:
            self._errors = {}
        else:
            for path in names:
                unset_path(self._errors, path)
        self._invalidate()
        self.form_state_subject.publish(
            FormStateEvent(name=None, changed=frozenset({StateKind.ERRORS, StateKind.IS_VALID}))
        )

    def _write_error(self, path: str, error: Any) -> None:
        cleaned = prune_tree(error)
        if is_meaningful(cleaned):
            set_path(self._errors, path, cleaned)
        else:
            unset_path(self._errors, path)

    def _targets(self, names: list[str] | None) -> list[FieldRegistration]:
        registrations = [reg for reg in self._fields.values() if reg.has_validation]
        if names is None:
            return registrations
        return [
            reg
            for reg in registrations
            if any(is_within(reg.name, name) or is_within(name, reg.name) for name in names)
        ]

    def _validate(self, names: list[str] | None) -> bool:
        """Run the validator and write errors for *names* (all fields when None)."""
        if self._validator is None:
            if names is None:
                return not self._errors
            return all(get_path(self._errors, name) is None for name in names)

        if self._schema is not None:
            tree = run_validator(self._validator, self._values, self._schema)
            self._schema_valid = tree is None
            if names is None:
                self._errors = tree if isinstance(tree, dict) else {}
            else:
                for name in names:
                    self._write_error(name, get_path(tree, name))
            self._update_validity_cache(tree)
            if names is None:
                return tree is None
            return all(get_path(tree, name) is None for name in names)

        valid = True
        for registration in self._targets(names):
            error = run_validator(
                self._validator,
                get_path(self._values, registration.name),
                registration.rules,
                path=registration.name,
            )
            self._write_error(registration.name, error)
            self._cache_validity(registration.name, error is None)
            valid = valid and error is None
        return valid

    def _cache_validity(self, path: str, valid: bool) -> None:
        if not self._tracking.track_validity:
            return
        if valid:
            set_path(self._valid_fields, path, True)
        else:
            unset_path(self._valid_fields, path)

    def _update_validity_cache(self, tree: Any) -> None:
        for registration in self._fields.values():
            self._cache_validity(registration.name, get_path(tree, registration.name) is None)

    def _refresh_validity(self, path: str) -> None:
        """Silently re-validate fields affected by a change at *path*.

        Updates the validity cache without touching the error tree.
        """
        if self._validator is None:
            return
        if self._schema is not None:
            self._refresh_schema_validity()
            return
        for registration in self._targets([path]):
            error = run_validator(
                self._validator,
                get_path(self._values, registration.name),
                registration.rules,
                path=registration.name,
            )
            self._cache_validity(registration.name, error is None)

    def _refresh_schema_validity(self) -> None:
        tree = run_validator(self._validator, self._values, self._schema)
        self._schema_valid = tree is None
        self._update_validity_cache(tree)

    def _compute_is_valid(self) -> bool:
        if self._errors:
            return False
        if self._validator is None:
            return True
        if self._schema is not None:
            if self._schema_valid is None:
                self._refresh_schema_validity()
            return bool(self._schema_valid)
        for registration in self._fields.values():
            if not registration.has_validation:
                continue
            if get_path(self._valid_fields, registration.name) is not True:
                self._refresh_validity(registration.name)
            if get_path(self._valid_fields, registration.name) is not True:
                return False
        return True

    # ------------------------------------------------------------------
    # Submit and reset
    # ------------------------------------------------------------------

    def handle_submit(
        self,
        on_valid: Callable[[dict[str, Any]], None],
        on_invalid: Callable[[dict[str, Any]], None] | None = None,
    ) -> bool:
        """Validate everything, count the submit, and hand over the values.

        *on_valid* receives a deep copy of the values; *on_invalid* a deep
        copy of the errors.  Exceptions raised by either callback propagate.
        """
        valid = self._validate(None)
        self._is_submitted = True
        self._submit_count += 1
        self._invalidate()
        self.form_state_subject.publish(
            FormStateEvent(
                name=None,
                changed=frozenset(
                    {StateKind.ERRORS, StateKind.IS_VALID, StateKind.IS_SUBMITTED, StateKind.SUBMIT_COUNT}
                ),
            )
        )
        _logger.debug("Submit #%d valid=%s", self._submit_count, valid)
        if valid:
            on_valid(self.get_values())
        elif on_invalid is not None:
            on_invalid(copy.deepcopy(self._errors))
        return valid

    def reset(
        self,
        values: Mapping[str, Any] | None = None,
        options: KeepStateOptions | None = None,
        **keep: bool,
    ) -> None:
        """Return the form to a baseline.

        *values* become the new defaults (unless ``keep_default_values``) and
        the new values (unless ``keep_values``).  Without *values* the current
        defaults are restored.  Keep-flags may be passed as *options* or as
        keyword arguments; each one independently preserves one piece of state.
        """
        opts = options or KeepStateOptions(**keep)

        if values is not None and not opts.keep_default_values:
            self._default_values = copy.deepcopy(dict(values))
        if not opts.keep_values:
            source = values if values is not None else self._default_values
            self._values = copy.deepcopy(dict(source))
        if not opts.keep_errors:
            self._errors = {}
        if not opts.keep_touched:
            self._touched = {}
        if not opts.keep_dirty:
            self._dirty = {}
            if self._tracking.track_dirty:
                self._rebuild_dirty()
        if not opts.keep_is_valid:
            self._valid_fields = {}
            self._schema_valid = None
        if not opts.keep_is_submitted:
            self._is_submitted = False
        if not opts.keep_submit_count:
            self._submit_count = 0

        _logger.debug("Form reset with %s", opts)
        self._invalidate()
        if not opts.keep_values:
            self.array_subject.publish(FieldArrayEvent(name=None, is_reset=True))
            self.watch_subject.publish(WatchEvent(name=None, value=self.get_values()))
        self.form_state_subject.publish(FormStateEvent(name=None, changed=ALL_STATE_KINDS))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _update_dirty(self, path: str) -> None:
        flags = dirty_tree(get_path(self._values, path), get_path(self._default_values, path))
        if flags is None:
            unset_path(self._dirty, path)
        else:
            set_path(self._dirty, path, flags)

    def _rebuild_dirty(self) -> None:
        flags = dirty_tree(self._values, self._default_values)
        self._dirty = flags if isinstance(flags, dict) else {}

    def _invalidate(self) -> None:
        self._snapshot = None

    def _publish_array(self, path: str, *, is_reset: bool = False) -> None:
        current = get_path(self._values, path)
        self.array_subject.publish(
            FieldArrayEvent(
                name=path,
                values=copy.deepcopy(current) if isinstance(current, list) else [],
                is_reset=is_reset,
            )
        )

    def _publish(self, path: str, changed: set[StateKind]) -> None:
        self.watch_subject.publish(WatchEvent(name=path, value=copy.deepcopy(get_path(self._values, path))))
        self.form_state_subject.publish(FormStateEvent(name=path, changed=frozenset(changed)))

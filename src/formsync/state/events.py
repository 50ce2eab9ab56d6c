"""Events published by the form-state store.

Events only say *what* changed and *where*; observers pull the new state
from the store (``store.form_state``, ``store.get_values(name)``, or a
field array's ``fields``) when they receive one.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from formsync._path import is_within, join_path


class StateKind(StrEnum):
    VALUES = "values"
    ERRORS = "errors"
    TOUCHED_FIELDS = "touched_fields"
    DIRTY_FIELDS = "dirty_fields"
    IS_DIRTY = "is_dirty"
    IS_VALID = "is_valid"
    IS_SUBMITTED = "is_submitted"
    SUBMIT_COUNT = "submit_count"


ALL_STATE_KINDS: frozenset[StateKind] = frozenset(StateKind)


class _StoreEvent(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str | None = Field(default=None, description="Canonical field path, or None for the whole form")

    @field_validator("name", mode="before")
    @classmethod
    def _canonical_name(cls, value: Any) -> str | None:
        if value is None:
            return None
        return join_path(value)

    def concerns(self, path: str | None) -> bool:
        """True when this event may affect *path* (or the whole form when *path* is None)."""
        if self.name is None or path is None:
            return True
        return is_within(self.name, path) or is_within(path, self.name)


class FormStateEvent(_StoreEvent):
    """Some of the aggregate form state changed."""

    changed: frozenset[StateKind] = Field(default=ALL_STATE_KINDS)


class WatchEvent(_StoreEvent):
    """A value changed at ``name`` (or everywhere, after a reset)."""

    value: Any = None


class FieldArrayEvent(_StoreEvent):
    """An array field's item list changed.

    ``is_reset`` means the list was replaced from outside the field array
    (reset, or a value written at the array path or above it); field arrays
    re-mint their keys on such events.
    """

    values: list[Any] | None = None
    is_reset: bool = False

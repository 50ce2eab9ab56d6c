"""Read-only views of form state handed to observers."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from formsync.models._base import FormSyncModel


class FormStateSnapshot(FormSyncModel):
    """Aggregate form state at one point in time.

    ``is_dirty`` is only computed when some consumer has declared interest
    in it and is ``False`` otherwise.  Without validity tracking ``is_valid``
    only reflects whether any error is stored; with it, fields that were
    never validated are validated silently first.
    """

    values: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, Any] = Field(default_factory=dict)
    touched_fields: dict[str, Any] = Field(default_factory=dict)
    dirty_fields: dict[str, Any] = Field(default_factory=dict)
    is_dirty: bool = False
    is_valid: bool = True
    is_submitted: bool = False
    submit_count: int = Field(default=0, ge=0)


class FieldState(FormSyncModel):
    """State of a single field path."""

    invalid: bool = False
    is_dirty: bool = False
    is_touched: bool = False
    error: Any = None

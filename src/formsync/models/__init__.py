"""Pydantic models exposed by formsync."""

from formsync.models._base import FormSyncModel
from formsync.models.entry import ArrayFieldEntry
from formsync.models.snapshot import FieldState, FormStateSnapshot

__all__ = [
    "ArrayFieldEntry",
    "FieldState",
    "FormStateSnapshot",
    "FormSyncModel",
]

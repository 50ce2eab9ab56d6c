"""formsync - form-state synchronization engine."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("formsync")
except PackageNotFoundError:
    __version__ = "0+local"
from formsync._array import ArrayOperation, ArrayOpKind
from formsync._ids import append_id, generate_id, map_ids, omit_key
from formsync._path import get_path, join_path, parse_path, set_path, unset_path
from formsync._subject import Subject, Subscription
from formsync.config import FormConfig, ValidationMode
from formsync.exceptions import (
    FormSyncConfigError,
    FormSyncError,
    FormSyncPathError,
    FormSyncValidatorError,
)
from formsync.field_array import FieldArray
from formsync.models import ArrayFieldEntry, FieldState, FormStateSnapshot
from formsync.state.events import FieldArrayEvent, FormStateEvent, StateKind, WatchEvent
from formsync.state.policy import KeepStateOptions, TrackingPolicy
from formsync.state.store import FormStateStore

__all__ = [
    "__version__",
    "ArrayFieldEntry",
    "ArrayOpKind",
    "ArrayOperation",
    "FieldArray",
    "FieldArrayEvent",
    "FieldState",
    "FormConfig",
    "FormStateEvent",
    "FormStateSnapshot",
    "FormStateStore",
    "FormSyncConfigError",
    "FormSyncError",
    "FormSyncPathError",
    "FormSyncValidatorError",
    "KeepStateOptions",
    "StateKind",
    "Subject",
    "Subscription",
    "TrackingPolicy",
    "ValidationMode",
    "WatchEvent",
    "append_id",
    "generate_id",
    "get_path",
    "join_path",
    "map_ids",
    "omit_key",
    "parse_path",
    "set_path",
    "unset_path",
]

"""State tracking and validation policy.

This module holds the declarative knobs of the store: which derived state
is worth maintaining, what survives a reset, and when the validator runs.
It contains no tree manipulation.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from formsync.config import ValidationMode
from formsync.state.events import StateKind

_ALWAYS_DELIVERED = frozenset({StateKind.VALUES, StateKind.ERRORS, StateKind.IS_SUBMITTED, StateKind.SUBMIT_COUNT})


class TrackingPolicy(BaseModel):
    """Capability descriptor: which derived state a consumer reads.

    The store only maintains ``dirty_fields``, ``touched_fields`` and the
    per-field validity cache while at least one live consumer (or the store's
    own base policy) asks for them.  Untracked state costs nothing per
    keystroke and stays at its baseline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    track_dirty: bool = False
    track_touched: bool = False
    track_validity: bool = False
    track_is_dirty: bool = False

    @classmethod
    def everything(cls) -> TrackingPolicy:
        return cls(track_dirty=True, track_touched=True, track_validity=True, track_is_dirty=True)

    @property
    def tracks_is_dirty(self) -> bool:
        return self.track_is_dirty or self.track_dirty

    def union(self, other: TrackingPolicy) -> TrackingPolicy:
        return TrackingPolicy(
            track_dirty=self.track_dirty or other.track_dirty,
            track_touched=self.track_touched or other.track_touched,
            track_validity=self.track_validity or other.track_validity,
            track_is_dirty=self.track_is_dirty or other.track_is_dirty,
        )

    def kinds(self) -> frozenset[StateKind]:
        """State kinds whose changes a consumer with this policy wants to hear about."""
        kinds = set(_ALWAYS_DELIVERED)
        if self.track_dirty:
            kinds.add(StateKind.DIRTY_FIELDS)
        if self.tracks_is_dirty:
            kinds.add(StateKind.IS_DIRTY)
        if self.track_touched:
            kinds.add(StateKind.TOUCHED_FIELDS)
        if self.track_validity:
            kinds.add(StateKind.IS_VALID)
        return frozenset(kinds)


def combine_policies(policies: Iterable[TrackingPolicy], base: TrackingPolicy | None = None) -> TrackingPolicy:
    combined = base or TrackingPolicy()
    for policy in policies:
        combined = combined.union(policy)
    return combined


class KeepStateOptions(BaseModel):
    """What survives :meth:`FormStateStore.reset`.

    Each flag independently preserves one piece of state; an unset flag
    clears that piece to its post-reset baseline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    keep_errors: bool = False
    keep_dirty: bool = False
    keep_touched: bool = False
    keep_is_submitted: bool = False
    keep_submit_count: bool = False
    keep_default_values: bool = False
    keep_values: bool = False
    keep_is_valid: bool = False


def _active_mode(mode: ValidationMode, re_validate_mode: ValidationMode, is_submitted: bool) -> ValidationMode:
    return re_validate_mode if is_submitted else mode


def should_validate_on_change(
    *,
    mode: ValidationMode,
    re_validate_mode: ValidationMode,
    is_submitted: bool,
    is_touched: bool = False,
) -> bool:
    """Decide whether a value change triggers validation.

    Before the first submit ``mode`` applies; afterwards ``re_validate_mode``.
    ``ON_TOUCHED`` validates changes once the field has been blurred.
    """
    active = _active_mode(mode, re_validate_mode, is_submitted)
    if active in (ValidationMode.ON_CHANGE, ValidationMode.ALL):
        return True
    return active is ValidationMode.ON_TOUCHED and is_touched


def should_validate_on_blur(
    *,
    mode: ValidationMode,
    re_validate_mode: ValidationMode,
    is_submitted: bool,
) -> bool:
    active = _active_mode(mode, re_validate_mode, is_submitted)
    return active in (ValidationMode.ON_BLUR, ValidationMode.ON_TOUCHED, ValidationMode.ALL)

"""Base model for formsync value objects.

Every model handed to observers inherits from :class:`FormSyncModel`, which
is frozen so a snapshot shared between subscribers cannot be mutated through
attribute assignment.  The trees inside a snapshot are deep copies of the
store's own trees; mutating them does not affect the store.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class FormSyncModel(BaseModel):
    """Base for formsync models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

"""Array-field entry model."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import Field

from formsync.models._base import FormSyncModel

T = TypeVar("T")


class ArrayFieldEntry(FormSyncModel, Generic[T]):
    """One item of an array field as seen by list observers.

    The synthetic ``key`` lives beside the item instead of inside it, so a
    user field that happens to be called ``key`` or ``id`` never collides
    with it.  Only ``value`` is ever written back to the form values.
    """

    key: str = Field(..., min_length=1)
    value: T

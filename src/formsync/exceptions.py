"""Custom exception hierarchy for formsync."""

from __future__ import annotations


class FormSyncError(Exception):
    """Base exception for all formsync errors."""


class FormSyncConfigError(FormSyncError):
    """Invalid or missing configuration."""


class FormSyncPathError(FormSyncError):
    """Field path is empty or cannot be parsed."""

    def __init__(self, message: str, *, path: object = None) -> None:
        self.path = path
        super().__init__(message)


class FormSyncValidatorError(FormSyncError):
    """The injected validator raised instead of returning an error tree.

    The original exception is chained as ``__cause__``.  Returning an error
    tree is the only supported way for a validator to report invalid input.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)

"""Validator contract.

The store never decides on its own whether a value is valid.  It calls an
injected validator and stores whatever error tree comes back:

* per field, ``validator(value, rules)`` with the field's value and the
  rules given at registration;
* with a schema, ``validator(values, schema)`` with the whole values tree,
  returning an error tree shaped like the values.

``None``, ``{}``, ``[]``, ``""`` and ``False`` all mean "no error".
"""

from __future__ import annotations

from typing import Any, Protocol

from formsync._normalize import is_meaningful, prune_tree
from formsync.exceptions import FormSyncValidatorError


class Validator(Protocol):
    def __call__(self, value: Any, rules: Any, /) -> Any: ...


def run_validator(validator: Validator, value: Any, rules: Any, *, path: str | None = None) -> Any:
    """Call *validator* and normalize its result.

    Returns the pruned error (or error tree), or ``None`` when valid.

    Raises
    ------
    FormSyncValidatorError
        If the validator raises.
    """
    try:
        result = validator(value, rules)
    except Exception as exc:
        where = f" for {path!r}" if path else ""
        raise FormSyncValidatorError(f"validator failed{where}: {exc}", path=path) from exc
    cleaned = prune_tree(result)
    return cleaned if is_meaningful(cleaned) else None

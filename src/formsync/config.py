"""Form configuration for formsync."""

from __future__ import annotations

import dataclasses
import os
from enum import StrEnum
from typing import Any

from formsync._constants import (
    DEFAULT_ID_PREFIX,
    ENV_ID_PREFIX,
    ENV_MODE,
    ENV_REVALIDATE_MODE,
    ENV_SHOULD_UNREGISTER,
)
from formsync.exceptions import FormSyncConfigError


class ValidationMode(StrEnum):
    """When the store calls the validator on its own."""

    ON_SUBMIT = "on_submit"
    ON_CHANGE = "on_change"
    ON_BLUR = "on_blur"
    ON_TOUCHED = "on_touched"
    ALL = "all"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_mode(value: Any, field_name: str) -> ValidationMode:
    if isinstance(value, ValidationMode):
        return value
    try:
        return ValidationMode(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(mode.value for mode in ValidationMode)
        raise FormSyncConfigError(f"{field_name} must be one of: {choices} (got {value!r})") from exc


@dataclasses.dataclass(frozen=True)
class FormConfig:
    """Form configuration.

    Parameters
    ----------
    mode : ValidationMode
        Validation strategy before the first submit.
    re_validate_mode : ValidationMode
        Validation strategy after the form has been submitted once.
        ``ON_SUBMIT`` here means "only on the next submit".
    should_unregister : bool
        When ``True``, unregistering a field also removes its value and all
        auxiliary state (errors, touched, dirty, validity).
    id_prefix : str
        Prefix for synthetic array-item keys.
    """

    mode: ValidationMode = ValidationMode.ON_SUBMIT
    re_validate_mode: ValidationMode = ValidationMode.ON_CHANGE
    should_unregister: bool = False
    id_prefix: str = DEFAULT_ID_PREFIX

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", _parse_mode(self.mode, "mode"))
        object.__setattr__(self, "re_validate_mode", _parse_mode(self.re_validate_mode, "re_validate_mode"))
        if not self.id_prefix:
            raise FormSyncConfigError("id_prefix must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> FormConfig:
        """Create configuration from ``FORMSYNC_*`` environment variables.

        Explicit keyword arguments override environment values.

        Returns
        -------
        FormConfig
            Populated configuration.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        _ENV_CONFIG_MAP = {
            ENV_MODE: "mode",
            ENV_REVALIDATE_MODE: "re_validate_mode",
            ENV_ID_PREFIX: "id_prefix",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        if "should_unregister" not in overrides:
            config_kwargs["should_unregister"] = _env_bool(env.get(ENV_SHOULD_UNREGISTER), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

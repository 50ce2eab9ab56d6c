from __future__ import annotations

import pytest

from formsync.config import FormConfig, ValidationMode
from formsync.exceptions import FormSyncConfigError


def test_defaults() -> None:
    config = FormConfig()
    assert config.mode is ValidationMode.ON_SUBMIT
    assert config.re_validate_mode is ValidationMode.ON_CHANGE
    assert config.should_unregister is False


def test_modes_accept_strings() -> None:
    assert FormConfig(mode="on_blur").mode is ValidationMode.ON_BLUR  # type: ignore[arg-type]


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORMSYNC_MODE", "on_change")
    monkeypatch.setenv("FORMSYNC_SHOULD_UNREGISTER", "yes")
    monkeypatch.setenv("FORMSYNC_ID_PREFIX", "row_")

    config = FormConfig.from_env()

    assert config.mode is ValidationMode.ON_CHANGE
    assert config.should_unregister is True
    assert config.id_prefix == "row_"


def test_explicit_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORMSYNC_MODE", "on_change")
    monkeypatch.setenv("FORMSYNC_SHOULD_UNREGISTER", "1")

    config = FormConfig.from_env(mode=ValidationMode.ALL, should_unregister=False)

    assert config.mode is ValidationMode.ALL
    assert config.should_unregister is False


def test_invalid_values_raise_config_error() -> None:
    with pytest.raises(FormSyncConfigError):
        FormConfig(mode="sometimes")  # type: ignore[arg-type]
    with pytest.raises(FormSyncConfigError):
        FormConfig(id_prefix="")

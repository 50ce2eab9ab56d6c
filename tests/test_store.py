from __future__ import annotations

from typing import Any

import pytest

import formsync.state.store as store_module
from formsync import FormConfig, FormStateStore, TrackingPolicy, ValidationMode
from formsync.exceptions import FormSyncValidatorError
from formsync.state.events import FormStateEvent, WatchEvent


def required(value: Any, rules: Any) -> Any:
    if rules.get("required") and value in (None, ""):
        return {"type": "required", "message": "required"}
    return None


REQUIRED_ERROR = {"type": "required", "message": "required"}


def test_set_value_writes_and_notifies_watchers() -> None:
    store = FormStateStore({"name": "a"})
    seen: list[Any] = []
    store.watch("name", lambda value, event: seen.append(value))

    store.set_value("name", "b")

    assert store.get_values("name") == "b"
    assert seen == ["b"]


def test_values_are_copied_in_and_out() -> None:
    defaults = {"tags": ["a"]}
    store = FormStateStore(defaults)
    store.get_values("tags").append("mutated")
    defaults["tags"].append("mutated")
    assert store.get_values() == {"tags": ["a"]}


def test_watchers_of_unrelated_paths_are_not_notified() -> None:
    store = FormStateStore({"a": 1, "b": {"c": 2}})
    seen: list[WatchEvent] = []
    store.subscribe_watch(seen.append, "b")

    store.set_value("a", 5)
    store.set_value("b.c", 3)

    assert [event.name for event in seen] == ["b.c"]


def test_observer_reads_post_mutation_state() -> None:
    store = FormStateStore({"name": "a"})
    observed: list[str] = []
    store.subscribe_form_state(lambda event: observed.append(store.form_state.values["name"]))

    store.set_value("name", "b")

    assert observed == ["b"]


def test_snapshot_is_shared_until_next_mutation() -> None:
    store = FormStateStore({"name": "a"})
    snapshots: list[Any] = []
    store.subscribe_form_state(lambda event: snapshots.append(store.form_state))
    store.subscribe_form_state(lambda event: snapshots.append(store.form_state))

    store.set_value("name", "b")
    assert snapshots[0] is snapshots[1]

    store.set_value("name", "c")
    assert snapshots[2] is not snapshots[0]
    assert snapshots[2].values == {"name": "c"}
    assert store.snapshot() is snapshots[2]


def test_numeric_mapping_keys_stay_keys() -> None:
    store = FormStateStore({"accounts": {"1042": {"balance": 1}}})
    store.set_value("accounts.1042.balance", 2)
    assert store.get_values("accounts") == {"1042": {"balance": 2}}


def test_tuple_name_is_one_segment_form_path() -> None:
    store = FormStateStore({"accounts": {"1042": 1, "7": 2}})
    seen: list[Any] = []
    store.watch(("accounts", "1042"), lambda value, event: seen.append(value))

    store.set_value(["accounts", "1042"], 5)
    store.set_value(["accounts", "7"], 3)

    assert seen == [5]


def test_list_of_strings_names_several_paths() -> None:
    store = FormStateStore({"a": 1, "b": 2, "c": 3})
    seen: list[str | None] = []
    store.subscribe_watch(lambda event: seen.append(event.name), ["a", "c"])

    store.set_value("a", 10)
    store.set_value("b", 20)
    store.set_value("c", 30)

    assert seen == ["a", "c"]


def test_index_segment_on_missing_path_creates_list() -> None:
    store = FormStateStore()
    store.set_value("ledger.0", "x")
    assert store.get_values() == {"ledger": ["x"]}


class TestDirty:
    def test_dirty_flags_return_to_clean(self) -> None:
        store = FormStateStore({"name": "a"}, tracking=TrackingPolicy(track_dirty=True))

        store.set_value("name", "b")
        assert store.form_state.dirty_fields == {"name": True}
        assert store.form_state.is_dirty

        store.set_value("name", "a")
        assert store.form_state.dirty_fields == {}
        assert not store.form_state.is_dirty

    def test_untracked_dirty_state_is_never_computed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[int] = []
        real = store_module.dirty_tree

        def counting(value: Any, default: Any) -> Any:
            calls.append(1)
            return real(value, default)

        monkeypatch.setattr(store_module, "dirty_tree", counting)
        store = FormStateStore({"name": "a"})
        store.subscribe_form_state(lambda event: None)

        for character in "hello":
            store.set_value("name", character)

        assert calls == []
        assert store.get_values("name") == "o"
        assert store.form_state.dirty_fields == {}
        assert store.form_state.is_dirty is False

    def test_interest_turns_dirty_tracking_on_and_off(self) -> None:
        store = FormStateStore({"name": "a"})
        store.set_value("name", "b")
        assert store.form_state.dirty_fields == {}

        handle = store.subscribe_form_state(lambda event: None, TrackingPolicy(track_dirty=True))
        assert store.tracking.track_dirty
        assert store.form_state.dirty_fields == {"name": True}

        handle.unsubscribe()
        assert not store.tracking.track_dirty
        assert store.form_state.dirty_fields == {}

    def test_get_is_dirty_compares_on_demand(self) -> None:
        store = FormStateStore({"a": {"b": 1}})
        assert not store.get_is_dirty()
        assert not store.get_is_dirty("a")
        assert store.get_is_dirty("a", {"b": 2})
        assert store.get_is_dirty(candidate={"a": {"b": 3}})

    def test_field_state_without_tracking_compares_directly(self) -> None:
        store = FormStateStore({"a": 1})
        store.set_value("a", 2)
        assert store.get_field_state("a").is_dirty
        store.set_value("a", 1)
        assert not store.get_field_state("a").is_dirty


class TestTouched:
    def test_touched_recorded_when_tracked(self) -> None:
        store = FormStateStore({"a": 1}, tracking=TrackingPolicy(track_touched=True))
        plain: list[FormStateEvent] = []
        touched: list[FormStateEvent] = []
        store.subscribe_form_state(plain.append)
        store.subscribe_form_state(touched.append, TrackingPolicy(track_touched=True))

        store.mark_touched("a")

        assert plain == []
        assert len(touched) == 1
        assert store.form_state.touched_fields == {"a": True}
        assert store.get_field_state("a").is_touched

    def test_touched_ignored_when_untracked(self) -> None:
        store = FormStateStore({"a": 1})
        store.mark_touched("a")
        store.set_value("a", 2, should_touch=True)
        assert store.form_state.touched_fields == {}


class TestValidation:
    def test_explicit_validation_writes_and_clears_errors(self) -> None:
        store = FormStateStore({"name": ""}, validator=required)
        store.register("name", {"required": True})

        store.set_value("name", "", should_validate=True)
        assert store.form_state.errors == {"name": REQUIRED_ERROR}
        assert store.get_field_state("name").invalid

        store.set_value("name", "ok", should_validate=True)
        assert store.form_state.errors == {}

    def test_on_submit_mode_does_not_validate_changes(self) -> None:
        store = FormStateStore({"name": "x"}, validator=required)
        store.register("name", {"required": True})
        store.set_value("name", "")
        assert store.form_state.errors == {}

    def test_on_change_mode_validates_every_change(self) -> None:
        store = FormStateStore(
            {"name": "x"},
            validator=required,
            config=FormConfig(mode=ValidationMode.ON_CHANGE),
        )
        store.register("name", {"required": True})

        store.set_value("name", "")

        assert store.form_state.errors == {"name": REQUIRED_ERROR}

    def test_on_blur_mode_validates_when_touched(self) -> None:
        store = FormStateStore(
            {"name": ""},
            validator=required,
            config=FormConfig(mode=ValidationMode.ON_BLUR),
        )
        store.register("name", {"required": True})

        store.mark_touched("name")

        assert store.form_state.errors == {"name": REQUIRED_ERROR}

    def test_on_touched_mode_revalidates_changes_after_blur(self) -> None:
        store = FormStateStore(
            {"name": ""},
            validator=required,
            config=FormConfig(mode=ValidationMode.ON_TOUCHED),
        )
        store.register("name", {"required": True})
        assert store.tracking.track_touched

        store.set_value("name", "")
        assert store.form_state.errors == {}

        store.mark_touched("name")
        assert store.form_state.errors == {"name": REQUIRED_ERROR}

        store.set_value("name", "filled")
        assert store.form_state.errors == {}

    def test_on_touched_revalidation_keeps_touched_tracking_on(self) -> None:
        store = FormStateStore(config=FormConfig(re_validate_mode=ValidationMode.ON_TOUCHED))
        handle = store.subscribe_form_state(lambda event: None, TrackingPolicy(track_touched=True))
        handle.unsubscribe()
        assert store.tracking.track_touched

    def test_trigger_reports_validity(self) -> None:
        store = FormStateStore({"a": "", "b": "x"}, validator=required)
        store.register("a", {"required": True})
        store.register("b", {"required": True})

        assert store.trigger("b") is True
        assert store.form_state.errors == {}
        assert store.trigger() is False
        assert store.form_state.errors == {"a": REQUIRED_ERROR}

    def test_validator_failure_is_wrapped(self) -> None:
        def broken(value: Any, rules: Any) -> Any:
            raise ValueError("boom")

        store = FormStateStore({"name": ""}, validator=broken)
        store.register("name", {"required": True})

        with pytest.raises(FormSyncValidatorError) as excinfo:
            store.trigger("name")

        assert isinstance(excinfo.value.__cause__, ValueError)
        assert excinfo.value.path == "name"

    def test_schema_mode_validates_whole_tree(self) -> None:
        def schema_validator(values: Any, schema: Any) -> Any:
            return {key: "required" for key in schema if not values.get(key)}

        store = FormStateStore({"a": "", "b": "x"}, validator=schema_validator, schema=["a", "b"])

        assert store.trigger() is False
        assert store.form_state.errors == {"a": "required"}

        store.set_value("a", "filled", should_validate=True)
        assert store.form_state.errors == {}
        assert store.trigger() is True

    def test_tracked_validity_validates_silently(self) -> None:
        store = FormStateStore(
            {"name": ""},
            validator=required,
            tracking=TrackingPolicy(track_validity=True),
        )
        store.register("name", {"required": True})

        assert store.form_state.is_valid is False
        assert store.form_state.errors == {}

        store.set_value("name", "x")
        assert store.form_state.is_valid is True

    def test_untracked_validity_reflects_stored_errors(self) -> None:
        store = FormStateStore({"name": ""}, validator=required)
        store.register("name", {"required": True})
        assert store.form_state.is_valid is True

        store.trigger()
        assert store.form_state.is_valid is False


class TestErrors:
    def test_external_error_set_and_cleared(self) -> None:
        store = FormStateStore({"items": [{"x": 1}]})

        store.set_error("items.0.x", {"type": "server"})
        assert store.get_field_state("items.0.x").error == {"type": "server"}
        assert store.form_state.errors == {"items": [{"x": {"type": "server"}}]}

        store.clear_errors("items.0.x")
        assert store.form_state.errors == {}

    def test_clear_all_errors(self) -> None:
        store = FormStateStore()
        store.set_error("a", "bad")
        store.set_error("b", "bad")
        store.clear_errors()
        assert store.form_state.errors == {}

    def test_empty_error_is_no_error(self) -> None:
        store = FormStateStore()
        store.set_error("a", {})
        assert store.form_state.errors == {}


class TestSubmit:
    def test_submit_counts_and_hands_over_values(self) -> None:
        store = FormStateStore({"name": "x"}, validator=required)
        store.register("name", {"required": True})
        received: list[Any] = []
        invalid: list[Any] = []

        assert store.handle_submit(received.append) is True
        assert received == [{"name": "x"}]
        assert store.form_state.is_submitted
        assert store.form_state.submit_count == 1

        # After the first submit the re-validation mode (on change) applies.
        store.set_value("name", "")
        assert store.form_state.errors == {"name": REQUIRED_ERROR}

        assert store.handle_submit(received.append, invalid.append) is False
        assert invalid == [{"name": REQUIRED_ERROR}]
        assert len(received) == 1
        assert store.form_state.submit_count == 2

    def test_callback_exceptions_propagate(self) -> None:
        store = FormStateStore({"name": "x"})

        def explode(values: Any) -> None:
            raise RuntimeError("handler")

        with pytest.raises(RuntimeError):
            store.handle_submit(explode)
        assert store.form_state.submit_count == 1


class TestRegistration:
    def test_register_seeds_value_from_defaults(self) -> None:
        store = FormStateStore({"a": 1}, config=FormConfig(should_unregister=True))
        unregister = store.register("a")
        assert store.registered_names == ["a"]

        unregister()
        assert store.registered_names == []
        assert store.get_values() == {}

        store.register("a")
        assert store.get_values("a") == 1

    def test_unregister_keeps_value_by_default(self) -> None:
        store = FormStateStore({"a": 1})
        store.register("a")()
        assert store.get_values() == {"a": 1}

    def test_unregister_drops_auxiliary_state(self) -> None:
        store = FormStateStore(
            {"a": {"b": 1}},
            config=FormConfig(should_unregister=True),
            tracking=TrackingPolicy(track_touched=True),
        )
        store.register("a.b")
        store.mark_touched("a.b")
        store.set_error("a.b", "bad")

        store.unregister("a.b")

        state = store.form_state
        assert state.values == {}
        assert state.errors == {}
        assert state.touched_fields == {}

from __future__ import annotations

import logging

import pytest

from formsync._subject import Subject, Subscription


def test_delivery_follows_registration_order_and_predicates() -> None:
    subject: Subject[str] = Subject("test")
    seen: list[tuple[str, str]] = []
    subject.subscribe(lambda e: seen.append(("a", e)))
    subject.subscribe(lambda e: seen.append(("b", e)), lambda e: e.startswith("x"))
    subject.subscribe(lambda e: seen.append(("c", e)))

    assert subject.publish("x1") == 3
    assert subject.publish("y1") == 2
    assert seen == [("a", "x1"), ("b", "x1"), ("c", "x1"), ("a", "y1"), ("c", "y1")]


def test_unsubscribing_self_during_delivery_does_not_skip_others() -> None:
    subject: Subject[int] = Subject()
    seen: list[str] = []
    handles: dict[str, Subscription[int]] = {}

    def first(event: int) -> None:
        seen.append("first")
        handles["first"].unsubscribe()

    handles["first"] = subject.subscribe(first)
    subject.subscribe(lambda e: seen.append("second"))
    subject.subscribe(lambda e: seen.append("third"))

    subject.publish(1)
    subject.publish(2)

    assert seen == ["first", "second", "third", "second", "third"]


def test_handle_closed_before_its_turn_is_skipped() -> None:
    subject: Subject[int] = Subject()
    seen: list[str] = []
    handles: dict[str, Subscription[int]] = {}

    def first(event: int) -> None:
        seen.append("first")
        handles["third"].unsubscribe()

    subject.subscribe(first)
    subject.subscribe(lambda e: seen.append("second"))
    handles["third"] = subject.subscribe(lambda e: seen.append("third"))

    subject.publish(1)

    assert seen == ["first", "second"]


def test_subscriber_added_during_delivery_sees_only_later_events() -> None:
    subject: Subject[int] = Subject()
    late: list[int] = []

    def adder(event: int) -> None:
        if event == 1:
            subject.subscribe(late.append)

    subject.subscribe(adder)
    subject.publish(1)
    subject.publish(2)

    assert late == [2]


def test_unsubscribe_is_idempotent() -> None:
    subject: Subject[int] = Subject()
    closed: list[Subscription[int]] = []
    handle = subject.subscribe(lambda e: None, on_close=closed.append)

    handle.unsubscribe()
    handle.unsubscribe()
    subject.unsubscribe(handle)

    assert closed == [handle]
    assert handle.closed
    assert subject.observer_count == 0
    assert subject.publish(1) == 0


def test_failing_observer_is_logged_and_delivery_continues(caplog: pytest.LogCaptureFixture) -> None:
    subject: Subject[str] = Subject()
    seen: list[str] = []

    def boom(event: str) -> None:
        raise RuntimeError("observer broke")

    subject.subscribe(boom)
    subject.subscribe(seen.append)

    with caplog.at_level(logging.WARNING, logger="formsync._subject"):
        delivered = subject.publish("e")

    assert seen == ["e"]
    assert delivered == 1
    assert "observer 1 failed" in caplog.text


def test_close_tears_down_everything() -> None:
    subject: Subject[int] = Subject()
    handles = [subject.subscribe(lambda e: None) for _ in range(3)]
    subject.close()
    assert subject.observer_count == 0
    assert all(handle.closed for handle in handles)

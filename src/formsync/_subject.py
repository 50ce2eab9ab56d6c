"""Predicate-filtered synchronous multicast channel."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

EventT = TypeVar("EventT")


@dataclass(eq=False, slots=True)
class Subscription(Generic[EventT]):
    """Handle for one registered observer.

    ``predicate`` filters events before ``deliver`` is called; ``None``
    accepts everything.  ``on_close`` runs once when the handle is torn
    down.
    """

    id: int
    deliver: Callable[[EventT], None]
    predicate: Callable[[EventT], bool] | None = None
    on_close: Callable[[Subscription[EventT]], None] | None = None
    closed: bool = False
    _subject: Subject[EventT] | None = field(default=None, repr=False)

    def matches(self, event: EventT) -> bool:
        if self.predicate is None:
            return True
        return bool(self.predicate(event))

    def unsubscribe(self) -> None:
        """Stop receiving events.  Calling it again is a no-op."""
        if self._subject is not None:
            self._subject.unsubscribe(self)
        else:
            self.closed = True


class Subject(Generic[EventT]):
    """Synchronous publish/subscribe channel for one event type.

    Delivery follows registration order and iterates over a copy of the
    subscriber list, so observers may subscribe or unsubscribe (themselves or
    others) from inside ``deliver``.  A handle closed before its turn in the
    current delivery is skipped; everyone else receives the event exactly
    once.  Observers added during a delivery see only later events.
    """

    def __init__(self, name: str = "subject") -> None:
        self._name = name
        self._subscriptions: list[Subscription[EventT]] = []
        self._ids = itertools.count(1)

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        deliver: Callable[[EventT], None],
        predicate: Callable[[EventT], bool] | None = None,
        *,
        on_close: Callable[[Subscription[EventT]], None] | None = None,
    ) -> Subscription[EventT]:
        handle: Subscription[EventT] = Subscription(
            id=next(self._ids),
            deliver=deliver,
            predicate=predicate,
            on_close=on_close,
            _subject=self,
        )
        self._subscriptions.append(handle)
        return handle

    def unsubscribe(self, handle: Subscription[EventT]) -> None:
        if handle.closed:
            return
        handle.closed = True
        # Rebind instead of list.remove so an in-progress publish keeps its copy intact.
        self._subscriptions = [sub for sub in self._subscriptions if sub is not handle]
        if handle.on_close is not None:
            handle.on_close(handle)

    def publish(self, event: EventT) -> int:
        """Deliver *event* to every matching observer; return how many handled it without raising."""
        delivered = 0
        for handle in tuple(self._subscriptions):
            if handle.closed:
                continue
            try:
                if not handle.matches(event):
                    continue
            except Exception:
                _logger.warning("%s predicate of subscription %d failed", self._name, handle.id, exc_info=True)
                continue
            try:
                handle.deliver(event)
            except Exception:
                _logger.warning("%s observer %d failed", self._name, handle.id, exc_info=True)
                continue
            delivered += 1
        return delivered

    def close(self) -> None:
        """Tear down every subscription."""
        for handle in tuple(self._subscriptions):
            self.unsubscribe(handle)

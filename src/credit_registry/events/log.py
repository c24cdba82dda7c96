# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import collections
import logging
import threading
from typing import Callable

from credit_registry.config import EventConfig
from credit_registry.events.query import EventFilter, EventQueryResult, apply_filter
from credit_registry.events.record import RegistryEvent

logger = logging.getLogger("credit_registry.events")

EventSubscriber = Callable[[RegistryEvent], None]


class EventLog:
    """
    Bounded in-memory log of registry events.

    When :attr:`~EventConfig.max_events` is reached the oldest event is
    evicted. Subscribers are called synchronously, in registration order,
    after each event is stored. A subscriber that raises is logged and
    skipped; the state change that produced the event has already been
    applied.

    :class:`~credit_registry.registry.CreditRegistry` emits while it still
    holds the lock of the record that changed, so events for one record are
    stored in commit order. Subscribers must not call back into the registry.

    Example::

        events = EventLog()
        events.subscribe(print)
        events.emit(RegistryEvent(event_type=EventType.RECORD_CREATED, timestamp=0))
        result = events.query(EventFilter(event_type=EventType.RECORD_CREATED))
    """

    def __init__(self, config: EventConfig | None = None) -> None:
        self._config = config or EventConfig()
        self._events: collections.deque[RegistryEvent] = collections.deque(
            maxlen=self._config.max_events
        )
        self._subscribers: list[EventSubscriber] = []
        self._guard = threading.Lock()

    def emit(self, event: RegistryEvent) -> RegistryEvent:
        """Store ``event`` and notify subscribers."""
        with self._guard:
            self._events.append(event)
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception(
                    "event_subscriber_failed",
                    extra={"event_id": event.event_id, "event_type": event.event_type},
                )
        return event

    def subscribe(self, subscriber: EventSubscriber) -> None:
        """Register a callable to receive every future event."""
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: EventSubscriber) -> bool:
        """Remove ``subscriber``. Returns False if it was not registered."""
        try:
            self._subscribers.remove(subscriber)
        except ValueError:
            return False
        return True

    def query(self, event_filter: EventFilter | None = None) -> EventQueryResult:
        """Return stored events matching ``event_filter`` (all when None)."""
        with self._guard:
            snapshot = list(self._events)
        return apply_filter(snapshot, event_filter or EventFilter())

    def latest(self, n: int = 10) -> list[RegistryEvent]:
        """Return the ``n`` most recent events, most recent last."""
        if n < 1:
            raise ValueError(f"n must be >= 1; got {n}.")
        with self._guard:
            snapshot = list(self._events)
        return snapshot[-n:]

    def count(self) -> int:
        return len(self._events)

    def clear(self) -> int:
        """Remove all stored events and return how many were removed."""
        with self._guard:
            count = len(self._events)
            self._events.clear()
        return count

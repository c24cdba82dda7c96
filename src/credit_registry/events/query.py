# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from collections import Counter

from pydantic import BaseModel

from credit_registry.events.record import RegistryEvent


class EventFilter(BaseModel, frozen=True):
    """
    Filter criteria for querying registry events.

    All fields are optional and combined with AND logic.

    Attributes:
        event_type: Only include events of this type.
        token_id: Only include events for this record.
        owner: Only include events whose owner or previous owner matches.
        integration: Only include events involving this integration.
        since: Only include events at or after this time.
        until: Only include events before this time.
        limit: Maximum number of events to return. 0 means no limit.
        offset: Number of events to skip before collecting results.
    """

    event_type: str | None = None
    token_id: int | None = None
    owner: str | None = None
    integration: str | None = None
    since: int | None = None
    until: int | None = None
    limit: int = 0
    offset: int = 0


class EventQueryResult(BaseModel, frozen=True):
    """
    Result of an event query.

    Attributes:
        events: Matching events, oldest first.
        total_matched: Number of matches before ``limit`` and ``offset``.
        filter_applied: The :class:`EventFilter` used.
    """

    events: list[RegistryEvent]
    total_matched: int
    filter_applied: EventFilter


def apply_filter(events: list[RegistryEvent], event_filter: EventFilter) -> EventQueryResult:
    """Apply ``event_filter`` to ``events`` and paginate the matches."""
    matched = [event for event in events if _event_matches(event, event_filter)]

    paginated = matched[event_filter.offset :]
    if event_filter.limit > 0:
        paginated = paginated[: event_filter.limit]

    return EventQueryResult(
        events=paginated,
        total_matched=len(matched),
        filter_applied=event_filter,
    )


def _event_matches(event: RegistryEvent, event_filter: EventFilter) -> bool:
    if event_filter.event_type is not None and event.event_type != event_filter.event_type:
        return False

    if event_filter.token_id is not None and event.token_id != event_filter.token_id:
        return False

    if event_filter.owner is not None and event_filter.owner not in (
        event.owner,
        event.previous_owner,
    ):
        return False

    if event_filter.integration is not None and event.integration != event_filter.integration:
        return False

    if event_filter.since is not None and event.timestamp < event_filter.since:
        return False

    if event_filter.until is not None and event.timestamp >= event_filter.until:
        return False

    return True


def count_by_type(events: list[RegistryEvent]) -> dict[str, int]:
    """Return the number of events per event type."""
    return dict(Counter(event.event_type for event in events))

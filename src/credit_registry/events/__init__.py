# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from credit_registry.events.log import EventLog, EventSubscriber
from credit_registry.events.query import (
    EventFilter,
    EventQueryResult,
    apply_filter,
    count_by_type,
)
from credit_registry.events.record import RegistryEvent

__all__ = [
    "EventLog",
    "EventSubscriber",
    "EventFilter",
    "EventQueryResult",
    "RegistryEvent",
    "apply_filter",
    "count_by_type",
]

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import time


class EventType(str):
    """Kinds of event emitted by the registry."""

    RECORD_CREATED = "record_created"
    RECORD_TRANSFERRED = "record_transferred"
    APPROVAL_GRANTED = "approval_granted"
    APPROVAL_REVOKED = "approval_revoked"
    RECORD_LOCKED = "record_locked"
    RECORD_UNLOCKED = "record_unlocked"
    SCORE_UPDATED = "score_updated"
    FUNDS_WITHDRAWN = "funds_withdrawn"


EVENT_TYPE_VALUES = frozenset(
    {
        EventType.RECORD_CREATED,
        EventType.RECORD_TRANSFERRED,
        EventType.APPROVAL_GRANTED,
        EventType.APPROVAL_REVOKED,
        EventType.RECORD_LOCKED,
        EventType.RECORD_UNLOCKED,
        EventType.SCORE_UPDATED,
        EventType.FUNDS_WITHDRAWN,
    }
)


def system_clock() -> int:
    """Return the current wall-clock time in whole seconds since Unix epoch."""
    return int(time.time())


def require_identity(value: str, name: str) -> None:
    """Raise ValueError when an identity argument is empty."""
    if not value:
        raise ValueError(f"{name} must be a non-empty string.")

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, Field


class RegistryEvent(BaseModel, frozen=True):
    """
    An immutable notification of a registry state change.

    Only the fields relevant to ``event_type`` are populated.

    Attributes:
        event_id: Unique UUID for this event.
        event_type: One of the :class:`~credit_registry.types.EventType` values.
        timestamp: The operation time the change was applied at.
        token_id: The record affected, if any.
        owner: The record owner (the new owner for transfers).
        previous_owner: The sending identity of a transfer.
        integration: The integration involved, if any.
        score: The score after the change, for score updates.
        delta: The applied delta, for score updates.
        extra: Any additional key-value metadata.
    """

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str
    timestamp: int
    token_id: int | None = None
    owner: str | None = None
    previous_owner: str | None = None
    integration: str | None = None
    score: int | None = None
    delta: int | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

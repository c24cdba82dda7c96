# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
credit-registry: per-identity credit scores adjusted by approved integrations.

Quick start::

    from credit_registry import CreditRegistry

    registry = CreditRegistry()
    record = registry.create_record("alice")
    registry.grant_approval("alice", "lender-x")

    registry.adjust_score(record.token_id, "lender-x", 10, now=0)
    print(registry.get_score("alice"))  # (510, 0)
"""
from __future__ import annotations

from credit_registry.approvals.registry import ApprovalRegistry
from credit_registry.config import (
    EventConfig,
    LockConfig,
    PaymentConfig,
    RegistryConfig,
    ScoreConfig,
)
from credit_registry.errors import (
    AlreadyOwnsRecordError,
    CreditRegistryError,
    DeltaOutOfRangeError,
    DestinationAlreadyOwnsRecordError,
    InvalidPaymentError,
    NotApprovedError,
    RateLimitedError,
    RecordLockedError,
    RecordNotFoundError,
    ScoreOutOfBoundsError,
    UnauthorizedError,
)
from credit_registry.events import (
    EventFilter,
    EventLog,
    EventQueryResult,
    RegistryEvent,
    count_by_type,
)
from credit_registry.locking import KeyedLock
from credit_registry.locks.state import LockEntry, LockState
from credit_registry.ownership import InMemoryOwnershipRegistry, OwnershipRegistry
from credit_registry.payment.gate import PaymentGate
from credit_registry.ratelimit.tracker import RateLimitTracker
from credit_registry.records.store import CreditRecord, RecordStore
from credit_registry.registry import CreditRegistry
from credit_registry.types import EVENT_TYPE_VALUES, EventType

__version__ = "0.1.0"

__all__ = [
    # Service
    "CreditRegistry",
    # Configuration
    "RegistryConfig",
    "ScoreConfig",
    "LockConfig",
    "PaymentConfig",
    "EventConfig",
    # Components
    "RecordStore",
    "CreditRecord",
    "OwnershipRegistry",
    "InMemoryOwnershipRegistry",
    "ApprovalRegistry",
    "RateLimitTracker",
    "LockState",
    "LockEntry",
    "PaymentGate",
    "KeyedLock",
    # Events
    "EventType",
    "EVENT_TYPE_VALUES",
    "EventLog",
    "EventFilter",
    "EventQueryResult",
    "RegistryEvent",
    "count_by_type",
    # Errors
    "CreditRegistryError",
    "AlreadyOwnsRecordError",
    "DestinationAlreadyOwnsRecordError",
    "RecordNotFoundError",
    "NotApprovedError",
    "DeltaOutOfRangeError",
    "RateLimitedError",
    "ScoreOutOfBoundsError",
    "RecordLockedError",
    "InvalidPaymentError",
    "UnauthorizedError",
    "__version__",
]

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
Basic credit registry example.

Creates a record, approves an integration, and walks through a throttled
adjustment, a lock, and a transfer.

Run with:
    python examples/basic_registry.py
"""
from __future__ import annotations

import logging

from credit_registry import (
    CreditRegistry,
    EventFilter,
    EventType,
    LockConfig,
    RateLimitedError,
    RecordLockedError,
    RegistryConfig,
    count_by_type,
)

DAY = 86_400


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")

    # ------------------------------------------------------------------ #
    # 1. Build the registry and issue a record
    # ------------------------------------------------------------------ #
    registry = CreditRegistry(
        config=RegistryConfig(lock=LockConfig(max_lock_duration=90 * DAY)),
    )
    record = registry.create_record("alice", now=0)
    registry.grant_approval("alice", "lender-x", now=0)
    print(f"Created record {record.token_id} for alice at score {record.score}")

    # ------------------------------------------------------------------ #
    # 2. Throttled adjustments
    # ------------------------------------------------------------------ #
    print("score after +10:", registry.adjust_score(record.token_id, "lender-x", 10, now=0))
    try:
        registry.adjust_score(record.token_id, "lender-x", 5, now=1_000)
    except RateLimitedError as exc:
        print(f"rejected ({exc.code}); retry in {exc.retry_after}s")
    print("score after +5 next day:", registry.adjust_score(record.token_id, "lender-x", 5, now=DAY))

    # ------------------------------------------------------------------ #
    # 3. Lock while collateral is outstanding
    # ------------------------------------------------------------------ #
    registry.lock(record.token_id, "lender-x", now=DAY)
    try:
        registry.revoke_approval("alice", "lender-x", now=DAY)
    except RecordLockedError as exc:
        print(f"revoke rejected ({exc.code})")
    registry.unlock(record.token_id, "lender-x", now=2 * DAY)
    registry.revoke_approval("alice", "lender-x", now=2 * DAY)

    # ------------------------------------------------------------------ #
    # 4. Transfer and inspect events
    # ------------------------------------------------------------------ #
    registry.transfer(record.token_id, "alice", "bob", now=3 * DAY)
    print("bob's score:", registry.get_score("bob"))
    print("bob's last change:", registry.get_last_change("bob"))

    updates = registry.events.query(EventFilter(event_type=EventType.SCORE_UPDATED))
    print(f"{updates.total_matched} score updates recorded")
    print("event counts:", count_by_type(registry.events.query().events))


if __name__ == "__main__":
    main()

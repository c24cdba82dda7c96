# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from pydantic import BaseModel

from credit_registry.config import LockConfig


class LockEntry(BaseModel, frozen=True):
    """
    An active lock on a credit record.

    Attributes:
        token_id: The locked record.
        locked_by: The approved integration that set the lock.
        locked_at: Time the lock was set.
    """

    token_id: int
    locked_by: str
    locked_at: int

    def expires_at(self, max_duration: int | None) -> int | None:
        """Return the time the lock lapses, or None if it never does."""
        if max_duration is None:
            return None
        return self.locked_at + max_duration


class LockState:
    """
    Per-record lock flags.

    A locked record keeps its owner from revoking approvals, so an
    integration holding collateral against the record cannot be cut off.
    Locks do not block score adjustments or transfers.

    Without :attr:`~LockConfig.max_lock_duration` a lock stays until an
    approved integration clears it. With it, a lock is treated as cleared
    once the duration has elapsed.
    """

    def __init__(self, config: LockConfig | None = None) -> None:
        self._config = config or LockConfig()
        self._locks: dict[int, LockEntry] = {}

    def set_locked(self, token_id: int, locked_by: str, now: int) -> LockEntry:
        """Lock ``token_id``, replacing any existing lock entry."""
        entry = LockEntry(token_id=token_id, locked_by=locked_by, locked_at=now)
        self._locks[token_id] = entry
        return entry

    def set_unlocked(self, token_id: int) -> bool:
        """
        Clear the lock on ``token_id``.

        Returns:
            True if a lock entry was removed, False if none was stored.
        """
        return self._locks.pop(token_id, None) is not None

    def is_locked(self, token_id: int, now: int) -> bool:
        """Return True if ``token_id`` holds a lock that has not lapsed."""
        entry = self._locks.get(token_id)
        if entry is None:
            return False
        expires_at = entry.expires_at(self._config.max_lock_duration)
        return expires_at is None or now < expires_at

    def get(self, token_id: int) -> LockEntry | None:
        """Return the stored lock entry for ``token_id``, lapsed or not."""
        return self._locks.get(token_id)

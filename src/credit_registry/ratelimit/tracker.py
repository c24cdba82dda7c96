# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import math


class RateLimitTracker:
    """
    Last-adjustment timestamps keyed by (integration, owner).

    A pair with no entry has never adjusted anything and is always eligible.
    Entries are written only after an adjustment has passed every check.
    """

    def __init__(self, cooldown_seconds: int) -> None:
        self._cooldown = cooldown_seconds
        self._last: dict[tuple[str, str], int] = {}

    @property
    def cooldown_seconds(self) -> int:
        return self._cooldown

    def time_since_last(self, integration: str, owner: str, now: int) -> float:
        """
        Return the seconds elapsed since the pair's last adjustment.

        Returns ``math.inf`` when the pair has never adjusted.
        """
        last = self._last.get((integration, owner))
        if last is None:
            return math.inf
        return now - last

    def remaining(self, integration: str, owner: str, now: int) -> int:
        """Return the seconds until the pair may adjust again (0 if eligible)."""
        elapsed = self.time_since_last(integration, owner, now)
        if elapsed >= self._cooldown:
            return 0
        return int(self._cooldown - elapsed)

    def is_eligible(self, integration: str, owner: str, now: int) -> bool:
        return self.time_since_last(integration, owner, now) >= self._cooldown

    def record_update(self, integration: str, owner: str, now: int) -> None:
        """Overwrite the pair's last-adjustment time with ``now``."""
        self._last[(integration, owner)] = now

    def last_update(self, integration: str, owner: str) -> int | None:
        return self._last.get((integration, owner))

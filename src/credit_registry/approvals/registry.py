# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import threading

from credit_registry.errors import NotApprovedError


class ApprovalRegistry:
    """
    Per-owner set of integrations allowed to act on the owner's record.

    Two views are kept in step: a membership map for constant-time
    :meth:`is_approved` checks, and an ordered list per owner for
    enumeration. The list never holds duplicates, so the swap-and-pop
    removal in :meth:`revoke` always removes the only matching entry.

    Enumeration order is insertion order until the first revocation; a
    revocation moves the last entry into the vacated slot.

    Lock gating of revocation is applied by
    :class:`~credit_registry.registry.CreditRegistry`, which knows which
    record belongs to which owner.

    Example::

        approvals = ApprovalRegistry()
        approvals.grant("alice", "lender-x")
        assert approvals.is_approved("alice", "lender-x")
        approvals.revoke("alice", "lender-x")
        assert approvals.list("alice") == []
    """

    def __init__(self) -> None:
        self._approved: dict[str, set[str]] = {}
        self._order: dict[str, list[str]] = {}
        self._guard = threading.Lock()

    def grant(self, owner: str, integration: str) -> bool:
        """
        Approve ``integration`` for ``owner``.

        Granting an already-approved integration changes nothing.

        Returns:
            True if the approval is new, False if it already existed.
        """
        with self._guard:
            members = self._approved.setdefault(owner, set())
            if integration in members:
                return False
            members.add(integration)
            self._order.setdefault(owner, []).append(integration)
            return True

    def revoke(self, owner: str, integration: str) -> None:
        """
        Withdraw the approval of ``integration`` for ``owner``.

        Raises:
            NotApprovedError: If ``integration`` is not currently approved.
        """
        with self._guard:
            members = self._approved.get(owner)
            if members is None or integration not in members:
                raise NotApprovedError(owner=owner, integration=integration)
            members.discard(integration)

            order = self._order[owner]
            index = order.index(integration)
            order[index] = order[-1]
            order.pop()

            if not members:
                del self._approved[owner]
                del self._order[owner]

    def is_approved(self, owner: str, integration: str) -> bool:
        """Return True if ``owner`` has approved ``integration``."""
        members = self._approved.get(owner)
        return members is not None and integration in members

    def list(self, owner: str) -> list[str]:
        """Return a copy of the integrations approved by ``owner``."""
        return list(self._order.get(owner, ()))

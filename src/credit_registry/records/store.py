# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import threading

from pydantic import BaseModel

from credit_registry.errors import (
    AlreadyOwnsRecordError,
    DestinationAlreadyOwnsRecordError,
    RecordNotFoundError,
)
from credit_registry.ownership.interface import OwnershipRegistry


class CreditRecord(BaseModel, frozen=True):
    """
    An immutable snapshot of one identity's credit score.

    Records are never mutated in place. Every change produces a new snapshot
    that replaces the old one in the :class:`RecordStore`, so a reader always
    sees either the state before an update or the state after it.

    Attributes:
        token_id: The ownership token this record is bound to.
        owner: Mirror of the token's current holder, refreshed on transfer.
        score: Current credit score.
        last_updated: Time of the most recent adjustment, or of creation.
        last_score_change: Delta applied by the most recent adjustment.
        last_updated_by: Integration that applied the most recent adjustment.
    """

    token_id: int
    owner: str
    score: int
    last_updated: int
    last_score_change: int = 0
    last_updated_by: str | None = None


class RecordStore:
    """
    In-memory store of credit records keyed by token id.

    New tokens are minted through the supplied
    :class:`~credit_registry.ownership.interface.OwnershipRegistry`, which
    remains the authority on ownership. The store keeps an owner-to-token
    index so that one identity never holds two records.
    """

    def __init__(self, ownership: OwnershipRegistry) -> None:
        self._ownership = ownership
        self._records: dict[int, CreditRecord] = {}
        self._token_by_owner: dict[str, int] = {}
        self._guard = threading.Lock()

    def create(self, owner: str, score: int, now: int) -> CreditRecord:
        """
        Mint a token for ``owner`` and store a fresh record for it.

        Args:
            owner: The identity acquiring the record.
            score: Initial score.
            now: Creation time, stored as ``last_updated``.

        Returns:
            The new :class:`CreditRecord`.

        Raises:
            AlreadyOwnsRecordError: If ``owner`` already holds a record.
        """
        with self._guard:
            held = self._token_by_owner.get(owner)
            if held is not None:
                raise AlreadyOwnsRecordError(owner=owner, token_id=held)
            token_id = self._ownership.mint(owner)
            record = CreditRecord(
                token_id=token_id,
                owner=owner,
                score=score,
                last_updated=now,
            )
            self._records[token_id] = record
            self._token_by_owner[owner] = token_id
            return record

    def get(self, token_id: int) -> CreditRecord:
        """
        Return the record for ``token_id``.

        Raises:
            RecordNotFoundError: If no such token was ever issued.
        """
        record = self._records.get(token_id)
        if record is None:
            raise RecordNotFoundError(token_id=token_id)
        return record

    def token_of(self, owner: str) -> int | None:
        """Return the token id held by ``owner``, or None."""
        return self._token_by_owner.get(owner)

    def find_by_owner(self, owner: str) -> CreditRecord | None:
        """Return the record held by ``owner``, or None."""
        token_id = self._token_by_owner.get(owner)
        if token_id is None:
            return None
        return self._records.get(token_id)

    def replace(self, record: CreditRecord) -> None:
        """
        Swap in a new snapshot for an existing record.

        Raises:
            RecordNotFoundError: If ``record.token_id`` is unknown.
        """
        if record.token_id not in self._records:
            raise RecordNotFoundError(token_id=record.token_id)
        self._records[record.token_id] = record

    def update_owner(self, token_id: int, new_owner: str) -> CreditRecord:
        """
        Move the owner mirror of ``token_id`` to ``new_owner``.

        Score and history are preserved; only ``owner`` changes.

        Returns:
            The updated :class:`CreditRecord`.

        Raises:
            RecordNotFoundError: If ``token_id`` is unknown.
            DestinationAlreadyOwnsRecordError: If ``new_owner`` holds a record.
        """
        with self._guard:
            record = self.get(token_id)
            if new_owner in self._token_by_owner:
                raise DestinationAlreadyOwnsRecordError(recipient=new_owner, token_id=token_id)
            updated = record.model_copy(update={"owner": new_owner})
            del self._token_by_owner[record.owner]
            self._token_by_owner[new_owner] = token_id
            self._records[token_id] = updated
            return updated

    def count(self) -> int:
        """Return the number of stored records."""
        return len(self._records)

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from abc import ABC, abstractmethod


class OwnershipRegistry(ABC):
    """
    Minimal token-ownership contract the credit registry depends on.

    The ownership registry is the single source of truth for which identity
    holds a token. Implementors may back this with a ledger, a database, or
    any key-value store. Each identity may hold at most one token.
    """

    @abstractmethod
    def mint(self, owner: str) -> int:
        """
        Issue a new token to ``owner`` and return its id.

        Raises:
            AlreadyOwnsRecordError: If ``owner`` already holds a token.
        """
        ...

    @abstractmethod
    def owner_of(self, token_id: int) -> str:
        """
        Return the identity currently holding ``token_id``.

        Raises:
            RecordNotFoundError: If the token was never issued.
        """
        ...

    @abstractmethod
    def exists(self, token_id: int) -> bool:
        ...

    @abstractmethod
    def token_of(self, owner: str) -> int | None:
        """Return the token held by ``owner``, or None."""
        ...

    @abstractmethod
    def transfer(self, sender: str, recipient: str, token_id: int) -> None:
        """
        Move ``token_id`` from ``sender`` to ``recipient``.

        Raises:
            RecordNotFoundError: If the token was never issued.
            UnauthorizedError: If ``sender`` does not hold the token.
            DestinationAlreadyOwnsRecordError: If ``recipient`` holds a token.
        """
        ...

    @abstractmethod
    def total_supply(self) -> int:
        ...

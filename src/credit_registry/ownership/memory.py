# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

import threading

from credit_registry.errors import (
    AlreadyOwnsRecordError,
    DestinationAlreadyOwnsRecordError,
    RecordNotFoundError,
    UnauthorizedError,
)
from credit_registry.ownership.interface import OwnershipRegistry


class InMemoryOwnershipRegistry(OwnershipRegistry):
    """
    In-process ownership registry, suitable for single-process use and testing.

    Token ids are issued sequentially starting at 1. All state is lost when
    the process exits.
    """

    def __init__(self) -> None:
        self._owners: dict[int, str] = {}
        self._tokens: dict[str, int] = {}
        self._next_id = 1
        self._guard = threading.Lock()

    def mint(self, owner: str) -> int:
        with self._guard:
            held = self._tokens.get(owner)
            if held is not None:
                raise AlreadyOwnsRecordError(owner=owner, token_id=held)
            token_id = self._next_id
            self._next_id += 1
            self._owners[token_id] = owner
            self._tokens[owner] = token_id
            return token_id

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise RecordNotFoundError(token_id=token_id)
        return owner

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def token_of(self, owner: str) -> int | None:
        return self._tokens.get(owner)

    def transfer(self, sender: str, recipient: str, token_id: int) -> None:
        with self._guard:
            current = self._owners.get(token_id)
            if current is None:
                raise RecordNotFoundError(token_id=token_id)
            if current != sender:
                raise UnauthorizedError(caller=sender, operation=f"transfer record {token_id}")
            if recipient in self._tokens:
                raise DestinationAlreadyOwnsRecordError(recipient=recipient, token_id=token_id)
            del self._tokens[sender]
            self._tokens[recipient] = token_id
            self._owners[token_id] = recipient

    def total_supply(self) -> int:
        return len(self._owners)

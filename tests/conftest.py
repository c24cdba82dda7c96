# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for credit-registry tests."""

from __future__ import annotations

import pytest

from credit_registry.config import RegistryConfig
from credit_registry.records.store import CreditRecord
from credit_registry.registry import CreditRegistry


class FakeClock:
    """Manually advanced clock returning whole seconds."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> CreditRegistry:
    """A freshly initialised CreditRegistry with default config."""
    return CreditRegistry(config=RegistryConfig(), clock=clock)


@pytest.fixture
def alice_record(registry: CreditRegistry) -> CreditRecord:
    """A record for 'alice' with 'lender-x' approved."""
    record = registry.create_record("alice", now=0)
    registry.grant_approval("alice", "lender-x", now=0)
    return record

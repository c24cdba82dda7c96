# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field, model_validator


class ScoreConfig(BaseModel, frozen=True):
    """
    Score domain and adjustment limits.

    Attributes:
        initial_score: Score assigned to a newly created record.
        min_score: Lowest score a record may hold.
        max_score: Highest score a record may hold.
        max_delta: Largest absolute change a single adjustment may apply.
        cooldown_seconds: Minimum time between two successful adjustments by
            the same integration on the same owner's record.
    """

    initial_score: int = 500
    min_score: int = 350
    max_score: int = 900
    max_delta: Annotated[int, Field(gt=0)] = 10
    cooldown_seconds: Annotated[int, Field(ge=0)] = 86_400

    @model_validator(mode="after")
    def _check_bounds(self) -> ScoreConfig:
        if not self.min_score <= self.initial_score <= self.max_score:
            raise ValueError(
                f"initial_score {self.initial_score} must lie within "
                f"[{self.min_score}, {self.max_score}]."
            )
        return self


class LockConfig(BaseModel, frozen=True):
    """
    Configuration for record locks.

    Attributes:
        max_lock_duration: Seconds after which a lock lapses on its own.
            None keeps locks in place until an approved integration clears
            them explicitly.
    """

    max_lock_duration: Annotated[int, Field(gt=0)] | None = None


class PaymentConfig(BaseModel, frozen=True):
    """
    Configuration for the record purchase gate.

    Attributes:
        price: Exact amount required to create a record. 0 accepts only a zero payment.
        administrator: Identity allowed to withdraw collected funds.
    """

    price: Annotated[int, Field(ge=0)] = 0
    administrator: str | None = None


class EventConfig(BaseModel, frozen=True):
    """
    Configuration for the in-memory event log.

    Attributes:
        max_events: Maximum number of events retained. Oldest events are
            evicted first.
    """

    max_events: Annotated[int, Field(gt=0)] = 10_000


class RegistryConfig(BaseModel, frozen=True):
    """
    Top-level configuration for :class:`~credit_registry.registry.CreditRegistry`.

    Example::

        config = RegistryConfig(
            score=ScoreConfig(cooldown_seconds=3600),
            lock=LockConfig(max_lock_duration=30 * 86_400),
            payment=PaymentConfig(price=100, administrator="treasury"),
        )
        registry = CreditRegistry(config=config)
    """

    score: ScoreConfig = Field(default_factory=ScoreConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
    payment: PaymentConfig = Field(default_factory=PaymentConfig)
    events: EventConfig = Field(default_factory=EventConfig)

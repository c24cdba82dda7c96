# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""
Tests for CreditRegistry: record creation, score adjustment, approvals,
locks, transfer, and payments.
"""

from __future__ import annotations

import threading

import pytest

from credit_registry.config import LockConfig, PaymentConfig, RegistryConfig, ScoreConfig
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
from credit_registry.events.query import EventFilter
from credit_registry.events.record import RegistryEvent
from credit_registry.records.store import CreditRecord
from credit_registry.registry import CreditRegistry
from credit_registry.types import EventType

DAY = 86_400


def _registry(**score: int) -> CreditRegistry:
    return CreditRegistry(config=RegistryConfig(score=ScoreConfig(**score)))


# ---------------------------------------------------------------------------
# TestCreateRecord
# ---------------------------------------------------------------------------


class TestCreateRecord:
    def test_new_record_starts_at_initial_score(self, registry: CreditRegistry) -> None:
        record = registry.create_record("alice", now=42)
        assert record.score == 500
        assert record.owner == "alice"
        assert registry.get_score("alice") == (500, 42)

    def test_new_record_has_no_last_change(self, registry: CreditRegistry) -> None:
        registry.create_record("alice")
        assert registry.get_last_change("alice") == (0, None)

    def test_second_record_for_same_owner_raises(self, registry: CreditRegistry) -> None:
        record = registry.create_record("alice")
        with pytest.raises(AlreadyOwnsRecordError) as exc_info:
            registry.create_record("alice")
        assert exc_info.value.token_id == record.token_id
        assert registry.total_records() == 1

    def test_each_owner_gets_a_distinct_token(self, registry: CreditRegistry) -> None:
        first = registry.create_record("alice")
        second = registry.create_record("bob")
        assert first.token_id != second.token_id
        assert registry.owner_of(second.token_id) == "bob"
        assert registry.token_of("alice") == first.token_id

    def test_empty_owner_raises_value_error(self, registry: CreditRegistry) -> None:
        with pytest.raises(ValueError, match="owner must be a non-empty string"):
            registry.create_record("")

    def test_create_uses_registry_clock_when_now_omitted(self) -> None:
        registry = CreditRegistry(clock=lambda: 1_000)
        registry.create_record("alice")
        assert registry.get_score("alice") == (500, 1_000)

    def test_get_score_for_unknown_owner_raises(self, registry: CreditRegistry) -> None:
        with pytest.raises(RecordNotFoundError):
            registry.get_score("nobody")

    def test_get_record_for_unknown_token_raises(self, registry: CreditRegistry) -> None:
        with pytest.raises(RecordNotFoundError):
            registry.get_record(99)


# ---------------------------------------------------------------------------
# TestAdjustScore
# ---------------------------------------------------------------------------


class TestAdjustScore:
    def test_daily_throttle_scenario(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        token = alice_record.token_id
        assert registry.adjust_score(token, "lender-x", 10, now=0) == 510

        with pytest.raises(RateLimitedError) as exc_info:
            registry.adjust_score(token, "lender-x", 5, now=1_000)
        assert exc_info.value.retry_after == DAY - 1_000

        assert registry.adjust_score(token, "lender-x", 5, now=DAY) == 515
        assert registry.get_score("alice") == (515, DAY)

    def test_throttle_boundary_is_inclusive(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        token = alice_record.token_id
        registry.adjust_score(token, "lender-x", 1, now=100)
        with pytest.raises(RateLimitedError):
            registry.adjust_score(token, "lender-x", 1, now=100 + DAY - 1)
        assert registry.adjust_score(token, "lender-x", 1, now=100 + DAY) == 502

    def test_last_change_records_delta_and_integration(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.adjust_score(alice_record.token_id, "lender-x", -7, now=5)
        assert registry.get_last_change("alice") == (-7, "lender-x")
        record = registry.get_record(alice_record.token_id)
        assert record.last_updated == 5
        assert record.last_updated_by == "lender-x"

    @pytest.mark.parametrize("delta", [11, -11, 100])
    def test_delta_out_of_range_raises_regardless_of_approval(
        self, registry: CreditRegistry, alice_record: CreditRecord, delta: int
    ) -> None:
        with pytest.raises(DeltaOutOfRangeError):
            registry.adjust_score(alice_record.token_id, "never-approved", delta, now=0)

    def test_delta_out_of_range_raises_during_cooldown(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.adjust_score(alice_record.token_id, "lender-x", 1, now=0)
        with pytest.raises(DeltaOutOfRangeError):
            registry.adjust_score(alice_record.token_id, "lender-x", -11, now=1)

    @pytest.mark.parametrize("delta", [10, -10, 0])
    def test_delta_at_limit_is_accepted(
        self, registry: CreditRegistry, alice_record: CreditRecord, delta: int
    ) -> None:
        assert registry.adjust_score(alice_record.token_id, "lender-x", delta, now=0) == 500 + delta

    def test_unapproved_integration_raises_not_approved(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        with pytest.raises(NotApprovedError):
            registry.adjust_score(alice_record.token_id, "lender-y", 5, now=0)

    def test_grant_enables_adjustment_immediately(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        with pytest.raises(NotApprovedError):
            registry.adjust_score(alice_record.token_id, "lender-y", 5, now=0)
        registry.grant_approval("alice", "lender-y")
        assert registry.adjust_score(alice_record.token_id, "lender-y", 5, now=0) == 505

    def test_unknown_token_raises_record_not_found(self, registry: CreditRegistry) -> None:
        with pytest.raises(RecordNotFoundError):
            registry.adjust_score(7, "lender-x", 1, now=0)

    def test_throttle_is_per_integration(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.grant_approval("alice", "lender-y")
        registry.adjust_score(alice_record.token_id, "lender-x", 3, now=0)
        assert registry.adjust_score(alice_record.token_id, "lender-y", 3, now=0) == 506

    def test_throttle_is_per_owner(self, registry: CreditRegistry) -> None:
        alice = registry.create_record("alice")
        bob = registry.create_record("bob")
        registry.grant_approval("alice", "lender-x")
        registry.grant_approval("bob", "lender-x")
        registry.adjust_score(alice.token_id, "lender-x", 3, now=0)
        assert registry.adjust_score(bob.token_id, "lender-x", 3, now=0) == 503

    def test_score_cannot_exceed_maximum(self) -> None:
        registry = _registry(cooldown_seconds=0)
        token = registry.create_record("alice").token_id
        registry.grant_approval("alice", "lender-x")
        for _ in range(40):
            registry.adjust_score(token, "lender-x", 10, now=0)
        assert registry.get_score("alice")[0] == 900

        with pytest.raises(ScoreOutOfBoundsError) as exc_info:
            registry.adjust_score(token, "lender-x", 1, now=0)
        assert exc_info.value.candidate == 901
        assert registry.get_score("alice")[0] == 900

    def test_score_cannot_drop_below_minimum(self) -> None:
        registry = _registry(cooldown_seconds=0)
        token = registry.create_record("alice").token_id
        registry.grant_approval("alice", "lender-x")
        for _ in range(15):
            registry.adjust_score(token, "lender-x", -10, now=0)
        assert registry.get_score("alice")[0] == 350

        with pytest.raises(ScoreOutOfBoundsError):
            registry.adjust_score(token, "lender-x", -1, now=0)
        assert registry.get_score("alice")[0] == 350

    def test_full_range_takes_fifty_five_days(self) -> None:
        registry = _registry(initial_score=350)
        token = registry.create_record("alice", now=0).token_id
        registry.grant_approval("alice", "lender-x")
        for day in range(55):
            registry.adjust_score(token, "lender-x", 10, now=day * DAY)
        assert registry.get_score("alice") == (900, 54 * DAY)

    def test_rejected_adjustment_leaves_no_state(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        token = alice_record.token_id
        registry.adjust_score(token, "lender-x", 4, now=0)
        before = registry.get_record(token)

        with pytest.raises(RateLimitedError):
            registry.adjust_score(token, "lender-x", 4, now=10)

        assert registry.get_record(token) == before
        assert registry.rate_limits.last_update("lender-x", "alice") == 0

    def test_rejected_bounds_check_does_not_start_cooldown(self) -> None:
        registry = _registry(initial_score=900)
        token = registry.create_record("alice").token_id
        registry.grant_approval("alice", "lender-x")
        with pytest.raises(ScoreOutOfBoundsError):
            registry.adjust_score(token, "lender-x", 1, now=0)
        assert registry.adjust_score(token, "lender-x", -1, now=0) == 899

    @pytest.mark.parametrize("delta", [2.5, 2.0, True, "2"])
    def test_non_integer_delta_raises_and_leaves_no_state(
        self, registry: CreditRegistry, alice_record: CreditRecord, delta: object
    ) -> None:
        token = alice_record.token_id
        before = registry.get_record(token)
        count = registry.events.count()

        with pytest.raises(TypeError):
            registry.adjust_score(token, "lender-x", delta, now=0)  # type: ignore[arg-type]

        assert registry.get_record(token) == before
        assert registry.get_score("alice") == (500, 0)
        assert registry.cooldown_remaining(token, "lender-x", now=0) == 0
        assert registry.rate_limits.last_update("lender-x", "alice") is None
        assert registry.events.count() == count
        assert registry.adjust_score(token, "lender-x", 2, now=0) == 502

    def test_cooldown_remaining(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        token = alice_record.token_id
        assert registry.cooldown_remaining(token, "lender-x", now=0) == 0
        registry.adjust_score(token, "lender-x", 1, now=0)
        assert registry.cooldown_remaining(token, "lender-x", now=400) == DAY - 400

    def test_concurrent_adjustments_apply_once(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        token = alice_record.token_id
        barrier = threading.Barrier(8)
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            try:
                registry.adjust_score(token, "lender-x", 10, now=0)
                result = "ok"
            except RateLimitedError:
                result = "limited"
            with outcomes_lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("limited") == 7
        assert registry.get_score("alice")[0] == 510


# ---------------------------------------------------------------------------
# TestApprovals
# ---------------------------------------------------------------------------


class TestApprovals:
    def test_grant_and_list(self, registry: CreditRegistry) -> None:
        registry.grant_approval("alice", "lender-x")
        registry.grant_approval("alice", "lender-y")
        assert registry.list_approvals("alice") == ["lender-x", "lender-y"]
        assert registry.is_approved("alice", "lender-y") is True
        assert registry.is_approved("bob", "lender-y") is False

    def test_grant_is_idempotent(self, registry: CreditRegistry) -> None:
        assert registry.grant_approval("alice", "lender-x") is True
        assert registry.grant_approval("alice", "lender-x") is False
        assert registry.list_approvals("alice") == ["lender-x"]

    def test_revoke_removes_approval(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.revoke_approval("alice", "lender-x")
        assert registry.is_approved("alice", "lender-x") is False
        with pytest.raises(NotApprovedError):
            registry.adjust_score(alice_record.token_id, "lender-x", 1, now=0)

    def test_revoke_unknown_approval_raises(self, registry: CreditRegistry) -> None:
        with pytest.raises(NotApprovedError):
            registry.revoke_approval("alice", "lender-x")

    def test_owner_without_record_can_manage_approvals(self, registry: CreditRegistry) -> None:
        registry.grant_approval("bob", "lender-x")
        registry.revoke_approval("bob", "lender-x")
        assert registry.list_approvals("bob") == []

    def test_empty_integration_raises_value_error(self, registry: CreditRegistry) -> None:
        with pytest.raises(ValueError, match="integration"):
            registry.grant_approval("alice", "")


# ---------------------------------------------------------------------------
# TestLocks
# ---------------------------------------------------------------------------


class TestLocks:
    def test_locked_record_blocks_revocation(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.lock(alice_record.token_id, "lender-x", now=0)
        assert registry.is_locked(alice_record.token_id, now=0) is True

        with pytest.raises(RecordLockedError):
            registry.revoke_approval("alice", "lender-x", now=0)
        assert registry.is_approved("alice", "lender-x") is True

    def test_revocation_succeeds_after_unlock(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.lock(alice_record.token_id, "lender-x", now=0)
        registry.unlock(alice_record.token_id, "lender-x", now=1)
        assert registry.is_locked(alice_record.token_id, now=1) is False
        registry.revoke_approval("alice", "lender-x", now=1)
        assert registry.list_approvals("alice") == []

    def test_lock_blocks_revoking_any_integration(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.grant_approval("alice", "lender-y")
        registry.lock(alice_record.token_id, "lender-x", now=0)
        with pytest.raises(RecordLockedError):
            registry.revoke_approval("alice", "lender-y", now=0)

    def test_unapproved_caller_cannot_lock(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        with pytest.raises(NotApprovedError):
            registry.lock(alice_record.token_id, "stranger", now=0)
        assert registry.is_locked(alice_record.token_id, now=0) is False

    def test_unapproved_caller_cannot_unlock(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.lock(alice_record.token_id, "lender-x", now=0)
        with pytest.raises(NotApprovedError):
            registry.unlock(alice_record.token_id, "stranger", now=0)
        assert registry.is_locked(alice_record.token_id, now=0) is True

    def test_any_approved_integration_may_unlock(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.grant_approval("alice", "lender-y")
        registry.lock(alice_record.token_id, "lender-x", now=0)
        registry.unlock(alice_record.token_id, "lender-y", now=0)
        assert registry.is_locked(alice_record.token_id, now=0) is False

    def test_lock_does_not_block_adjustment(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.lock(alice_record.token_id, "lender-x", now=0)
        assert registry.adjust_score(alice_record.token_id, "lender-x", 2, now=0) == 502

    def test_lock_unknown_token_raises(self, registry: CreditRegistry) -> None:
        with pytest.raises(RecordNotFoundError):
            registry.lock(5, "lender-x", now=0)

    def test_unknown_token_is_not_locked(self, registry: CreditRegistry) -> None:
        assert registry.is_locked(5, now=0) is False

    def test_lock_lapses_after_max_duration(self) -> None:
        registry = CreditRegistry(config=RegistryConfig(lock=LockConfig(max_lock_duration=100)))
        token = registry.create_record("alice").token_id
        registry.grant_approval("alice", "lender-x")
        registry.lock(token, "lender-x", now=0)

        assert registry.is_locked(token, now=99) is True
        with pytest.raises(RecordLockedError):
            registry.revoke_approval("alice", "lender-x", now=99)

        assert registry.is_locked(token, now=100) is False
        registry.revoke_approval("alice", "lender-x", now=100)

    def test_lock_without_max_duration_never_lapses(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.lock(alice_record.token_id, "lender-x", now=0)
        assert registry.is_locked(alice_record.token_id, now=10_000 * DAY) is True


# ---------------------------------------------------------------------------
# TestTransfer
# ---------------------------------------------------------------------------


class TestTransfer:
    def test_transfer_preserves_score_and_history(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        token = alice_record.token_id
        registry.adjust_score(token, "lender-x", 8, now=50)
        before = registry.get_record(token)

        after = registry.transfer(token, "alice", "bob", now=60)

        assert after.owner == "bob"
        assert after.model_dump(exclude={"owner"}) == before.model_dump(exclude={"owner"})
        assert registry.owner_of(token) == "bob"
        assert registry.get_score("bob") == (508, 50)
        assert registry.get_last_change("bob") == (8, "lender-x")
        with pytest.raises(RecordNotFoundError):
            registry.get_score("alice")

    def test_transfer_to_existing_owner_raises(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.create_record("bob")
        with pytest.raises(DestinationAlreadyOwnsRecordError):
            registry.transfer(alice_record.token_id, "alice", "bob")
        assert registry.owner_of(alice_record.token_id) == "alice"
        assert registry.token_of("alice") == alice_record.token_id

    def test_transfer_by_non_owner_raises(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        with pytest.raises(UnauthorizedError):
            registry.transfer(alice_record.token_id, "mallory", "bob")
        assert registry.owner_of(alice_record.token_id) == "alice"

    def test_transfer_unknown_token_raises(self, registry: CreditRegistry) -> None:
        with pytest.raises(RecordNotFoundError):
            registry.transfer(3, "alice", "bob")

    def test_transfer_to_self_raises_value_error(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        with pytest.raises(ValueError):
            registry.transfer(alice_record.token_id, "alice", "alice")

    def test_approvals_do_not_follow_the_record(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.transfer(alice_record.token_id, "alice", "bob")
        with pytest.raises(NotApprovedError):
            registry.adjust_score(alice_record.token_id, "lender-x", 1, now=0)
        registry.grant_approval("bob", "lender-x")
        assert registry.adjust_score(alice_record.token_id, "lender-x", 1, now=0) == 501

    def test_previous_owner_may_acquire_a_new_record(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.transfer(alice_record.token_id, "alice", "bob")
        fresh = registry.create_record("alice")
        assert fresh.token_id != alice_record.token_id
        assert registry.get_score("alice")[0] == 500

    def test_lock_carries_over_with_the_record(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.lock(alice_record.token_id, "lender-x", now=0)
        registry.transfer(alice_record.token_id, "alice", "bob")
        assert registry.is_locked(alice_record.token_id, now=0) is True


# ---------------------------------------------------------------------------
# TestPayments
# ---------------------------------------------------------------------------


class TestPayments:
    @pytest.fixture
    def paid_registry(self) -> CreditRegistry:
        config = RegistryConfig(payment=PaymentConfig(price=100, administrator="treasury"))
        return CreditRegistry(config=config)

    def test_wrong_payment_raises_and_creates_nothing(self, paid_registry: CreditRegistry) -> None:
        with pytest.raises(InvalidPaymentError) as exc_info:
            paid_registry.create_record("alice", payment=50)
        assert exc_info.value.expected == 100
        assert paid_registry.token_of("alice") is None
        assert paid_registry.payments.balance == 0

    def test_exact_payment_creates_record(self, paid_registry: CreditRegistry) -> None:
        paid_registry.create_record("alice", payment=100)
        assert paid_registry.get_score("alice")[0] == 500
        assert paid_registry.payments.balance == 100

    def test_duplicate_purchase_is_not_charged(self, paid_registry: CreditRegistry) -> None:
        paid_registry.create_record("alice", payment=100)
        with pytest.raises(AlreadyOwnsRecordError):
            paid_registry.create_record("alice", payment=100)
        assert paid_registry.payments.balance == 100

    def test_withdraw_by_administrator(self, paid_registry: CreditRegistry) -> None:
        paid_registry.create_record("alice", payment=100)
        paid_registry.create_record("bob", payment=100)
        assert paid_registry.withdraw("treasury") == 200
        assert paid_registry.withdraw("treasury") == 0

    def test_withdraw_by_other_identity_raises(self, paid_registry: CreditRegistry) -> None:
        paid_registry.create_record("alice", payment=100)
        with pytest.raises(UnauthorizedError):
            paid_registry.withdraw("alice")
        assert paid_registry.payments.balance == 100

    def test_withdraw_without_administrator_raises(self, registry: CreditRegistry) -> None:
        with pytest.raises(UnauthorizedError):
            registry.withdraw("anyone")

    def test_zero_price_rejects_nonzero_payment(self, registry: CreditRegistry) -> None:
        with pytest.raises(InvalidPaymentError):
            registry.create_record("alice", payment=1)
        assert registry.token_of("alice") is None
        assert registry.payments.balance == 0


# ---------------------------------------------------------------------------
# TestErrorsAndEvents
# ---------------------------------------------------------------------------


class TestErrorsAndEvents:
    def test_only_rate_limit_is_retryable(self) -> None:
        assert RateLimitedError("x", "alice", 10).retryable is True
        assert DeltaOutOfRangeError(11, 10).retryable is False
        assert ScoreOutOfBoundsError(901, 350, 900).retryable is False
        assert NotApprovedError("alice", "x").retryable is False

    def test_errors_carry_distinct_codes(self) -> None:
        errors: list[CreditRegistryError] = [
            AlreadyOwnsRecordError("alice", 1),
            DestinationAlreadyOwnsRecordError("bob", 1),
            RecordNotFoundError(token_id=1),
            NotApprovedError("alice", "x"),
            DeltaOutOfRangeError(11, 10),
            RateLimitedError("x", "alice", 1),
            ScoreOutOfBoundsError(901, 350, 900),
            RecordLockedError(1),
            InvalidPaymentError(100, 1),
            UnauthorizedError("alice", "withdraw funds"),
        ]
        codes = {error.code for error in errors}
        assert len(codes) == len(errors)

    def test_scenario_emits_events_in_order(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.adjust_score(alice_record.token_id, "lender-x", 10, now=0)
        types = [event.event_type for event in registry.events.query().events]
        assert types == [
            EventType.RECORD_CREATED,
            EventType.APPROVAL_GRANTED,
            EventType.SCORE_UPDATED,
        ]

    def test_score_event_carries_new_score_and_integration(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.adjust_score(alice_record.token_id, "lender-x", -3, now=9)
        result = registry.events.query(EventFilter(event_type=EventType.SCORE_UPDATED))
        assert result.total_matched == 1
        event = result.events[0]
        assert (event.token_id, event.score, event.integration, event.delta) == (
            alice_record.token_id,
            497,
            "lender-x",
            -3,
        )
        assert event.timestamp == 9

    def test_rejections_emit_no_events(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        count = registry.events.count()
        with pytest.raises(DeltaOutOfRangeError):
            registry.adjust_score(alice_record.token_id, "lender-x", 50, now=0)
        with pytest.raises(NotApprovedError):
            registry.revoke_approval("alice", "lender-y")
        assert registry.events.count() == count

    def test_transfer_event_names_both_parties(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.transfer(alice_record.token_id, "alice", "bob", now=3)
        result = registry.events.query(EventFilter(event_type=EventType.RECORD_TRANSFERRED))
        event = result.events[0]
        assert (event.previous_owner, event.owner, event.token_id) == (
            "alice",
            "bob",
            alice_record.token_id,
        )

    def test_grant_event_carries_the_owners_token(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        registry.grant_approval("alice", "lender-y", now=1)
        registry.grant_approval("carol", "lender-y", now=1)
        result = registry.events.query(
            EventFilter(event_type=EventType.APPROVAL_GRANTED, integration="lender-y")
        )
        assert [(event.owner, event.token_id) for event in result.events] == [
            ("alice", alice_record.token_id),
            ("carol", None),
        ]

    def test_events_for_one_record_follow_commit_order(
        self, registry: CreditRegistry, alice_record: CreditRecord
    ) -> None:
        entered = threading.Event()
        release = threading.Event()

        def slow_subscriber(event: RegistryEvent) -> None:
            if (
                event.event_type == EventType.APPROVAL_GRANTED
                and event.integration == "lender-y"
            ):
                entered.set()
                release.wait(timeout=5)

        registry.events.subscribe(slow_subscriber)
        grant = threading.Thread(
            target=registry.grant_approval, args=("alice", "lender-y"), kwargs={"now": 1}
        )
        revoke = threading.Thread(
            target=registry.revoke_approval, args=("alice", "lender-y"), kwargs={"now": 2}
        )

        grant.start()
        assert entered.wait(timeout=5)
        revoke.start()
        revoke.join(timeout=0.2)
        assert revoke.is_alive()

        release.set()
        grant.join(timeout=5)
        revoke.join(timeout=5)

        result = registry.events.query(EventFilter(integration="lender-y"))
        assert [event.event_type for event in result.events] == [
            EventType.APPROVAL_GRANTED,
            EventType.APPROVAL_REVOKED,
        ]
        assert not registry.is_approved("alice", "lender-y")

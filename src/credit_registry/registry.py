# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Callable

from credit_registry.approvals.registry import ApprovalRegistry
from credit_registry.config import RegistryConfig
from credit_registry.errors import (
    AlreadyOwnsRecordError,
    CreditRegistryError,
    DeltaOutOfRangeError,
    DestinationAlreadyOwnsRecordError,
    NotApprovedError,
    RateLimitedError,
    RecordLockedError,
    RecordNotFoundError,
    ScoreOutOfBoundsError,
    UnauthorizedError,
)
from credit_registry.events.log import EventLog
from credit_registry.events.record import RegistryEvent
from credit_registry.locking import KeyedLock
from credit_registry.locks.state import LockEntry, LockState
from credit_registry.ownership.interface import OwnershipRegistry
from credit_registry.ownership.memory import InMemoryOwnershipRegistry
from credit_registry.payment.gate import PaymentGate
from credit_registry.ratelimit.tracker import RateLimitTracker
from credit_registry.records.store import CreditRecord, RecordStore
from credit_registry.types import EventType, require_identity, system_clock

logger = logging.getLogger("credit_registry.registry")


class CreditRegistry:
    """
    Per-identity credit records adjusted only by owner-approved integrations.

    Composes the record store, approval registry, rate-limit tracker, lock
    state, payment gate, and event log into the public registry surface.

    Every mutating operation validates first and commits last: a rejected
    call raises a :class:`~credit_registry.errors.CreditRegistryError`
    subclass and leaves no state behind. Mutations on the same record are
    serialized by a per-record lock; mutations on different records never
    wait on each other.

    Times are integer seconds. Operations that take ``now`` fall back to the
    registry clock when it is omitted.

    Example::

        registry = CreditRegistry()
        record = registry.create_record("alice")
        registry.grant_approval("alice", "lender-x")
        registry.adjust_score(record.token_id, "lender-x", 10, now=0)
        assert registry.get_score("alice") == (510, 0)
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        ownership: OwnershipRegistry | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        cfg = config or RegistryConfig()
        self._config = cfg
        self._clock = clock or system_clock
        self._mutex = KeyedLock()

        self.ownership: OwnershipRegistry = (
            ownership if ownership is not None else InMemoryOwnershipRegistry()
        )
        self.records = RecordStore(self.ownership)
        self.approvals = ApprovalRegistry()
        self.rate_limits = RateLimitTracker(cfg.score.cooldown_seconds)
        self.lock_state = LockState(cfg.lock)
        self.payments = PaymentGate(cfg.payment)
        self.events = EventLog(cfg.events)

    @property
    def config(self) -> RegistryConfig:
        return self._config

    # ------------------------------------------------------------------
    # Records and ownership
    # ------------------------------------------------------------------

    def create_record(self, owner: str, payment: int = 0, now: int | None = None) -> CreditRecord:
        """
        Issue a new credit record to ``owner`` at the initial score.

        Args:
            owner: The identity acquiring the record.
            payment: Amount paid; must equal the configured price.
            now: Creation time.

        Returns:
            The created :class:`~credit_registry.records.store.CreditRecord`.

        Raises:
            ValueError: If ``owner`` is empty.
            AlreadyOwnsRecordError: If ``owner`` already holds a record.
            InvalidPaymentError: If ``payment`` does not match the price.
        """
        require_identity(owner, "owner")
        at = self._now(now)
        with self._owner_guard(owner) as held:
            if held is not None:
                raise AlreadyOwnsRecordError(owner=owner, token_id=held)
            self.payments.check_payment(payment)
            record = self.records.create(owner, self._config.score.initial_score, at)
            self.payments.require_payment(payment)

            logger.info(
                "record_created",
                extra={"token_id": record.token_id, "owner": owner, "score": record.score},
            )
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.RECORD_CREATED,
                    timestamp=at,
                    token_id=record.token_id,
                    owner=owner,
                    score=record.score,
                    extra={"payment": payment},
                )
            )
        return record

    def transfer(
        self,
        token_id: int,
        sender: str,
        recipient: str,
        now: int | None = None,
    ) -> CreditRecord:
        """
        Move a record to a new owner, preserving its score and history.

        Approvals and rate-limit history stay with the identities that
        created them; the recipient starts with its own approval set. Lock
        state belongs to the record and carries over.

        Raises:
            ValueError: If an identity is empty or ``sender == recipient``.
            RecordNotFoundError: If ``token_id`` does not exist.
            UnauthorizedError: If ``sender`` does not own the record.
            DestinationAlreadyOwnsRecordError: If ``recipient`` holds a record.
        """
        require_identity(sender, "sender")
        require_identity(recipient, "recipient")
        if sender == recipient:
            raise ValueError("sender and recipient must differ.")
        at = self._now(now)

        with self._mutex.hold(("token", token_id)):
            self.records.get(token_id)
            if self.ownership.owner_of(token_id) != sender:
                raise UnauthorizedError(caller=sender, operation=f"transfer record {token_id}")
            if self.records.token_of(recipient) is not None:
                raise DestinationAlreadyOwnsRecordError(recipient=recipient, token_id=token_id)
            self.ownership.transfer(sender, recipient, token_id)
            record = self.records.update_owner(token_id, recipient)

            logger.info(
                "record_transferred",
                extra={"token_id": token_id, "from": sender, "to": recipient},
            )
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.RECORD_TRANSFERRED,
                    timestamp=at,
                    token_id=token_id,
                    owner=recipient,
                    previous_owner=sender,
                )
            )
        return record

    def get_record(self, token_id: int) -> CreditRecord:
        """Return the current snapshot of ``token_id``."""
        return self.records.get(token_id)

    def owner_of(self, token_id: int) -> str:
        """Return the current owner of ``token_id`` from the ownership registry."""
        return self.ownership.owner_of(token_id)

    def token_of(self, owner: str) -> int | None:
        """Return the token held by ``owner``, or None."""
        return self.records.token_of(owner)

    def total_records(self) -> int:
        return self.records.count()

    def get_score(self, owner: str) -> tuple[int, int]:
        """
        Return ``(score, last_updated)`` for the record held by ``owner``.

        Raises:
            RecordNotFoundError: If ``owner`` holds no record.
        """
        record = self._record_of(owner)
        return record.score, record.last_updated

    def get_last_change(self, owner: str) -> tuple[int, str | None]:
        """
        Return ``(delta, integration)`` of the last adjustment to ``owner``'s record.

        A record that was never adjusted returns ``(0, None)``.

        Raises:
            RecordNotFoundError: If ``owner`` holds no record.
        """
        record = self._record_of(owner)
        return record.last_score_change, record.last_updated_by

    # ------------------------------------------------------------------
    # Approvals
    # ------------------------------------------------------------------

    def grant_approval(self, owner: str, integration: str, now: int | None = None) -> bool:
        """
        Allow ``integration`` to adjust and lock ``owner``'s record.

        Granting is idempotent. An event is emitted for every grant, including
        repeats.

        Returns:
            True if the approval is new, False if it already existed.
        """
        require_identity(owner, "owner")
        require_identity(integration, "integration")
        at = self._now(now)
        with self._owner_guard(owner) as token_id:
            added = self.approvals.grant(owner, integration)

            logger.info(
                "approval_granted",
                extra={"owner": owner, "integration": integration, "new": added},
            )
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.APPROVAL_GRANTED,
                    timestamp=at,
                    token_id=token_id,
                    owner=owner,
                    integration=integration,
                )
            )
        return added

    def revoke_approval(self, owner: str, integration: str, now: int | None = None) -> None:
        """
        Withdraw ``integration``'s approval for ``owner``.

        Raises:
            RecordLockedError: If the record ``owner`` holds is locked.
            NotApprovedError: If ``integration`` is not currently approved.
        """
        require_identity(owner, "owner")
        require_identity(integration, "integration")
        at = self._now(now)
        with self._owner_guard(owner) as token_id:
            try:
                if token_id is not None and self.lock_state.is_locked(token_id, at):
                    raise RecordLockedError(token_id=token_id)
                self.approvals.revoke(owner, integration)
            except CreditRegistryError as exc:
                logger.info(
                    "approval_revoke_rejected",
                    extra={"owner": owner, "integration": integration, "code": exc.code},
                )
                raise

            logger.info("approval_revoked", extra={"owner": owner, "integration": integration})
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.APPROVAL_REVOKED,
                    timestamp=at,
                    token_id=token_id,
                    owner=owner,
                    integration=integration,
                )
            )

    def list_approvals(self, owner: str) -> list[str]:
        """Return the integrations ``owner`` has approved."""
        return self.approvals.list(owner)

    def is_approved(self, owner: str, integration: str) -> bool:
        return self.approvals.is_approved(owner, integration)

    # ------------------------------------------------------------------
    # Locks
    # ------------------------------------------------------------------

    def lock(self, token_id: int, caller: str, now: int | None = None) -> LockEntry:
        """
        Lock a record so its owner cannot revoke approvals.

        ``caller`` must be an integration approved by the record's current
        owner. Both :meth:`lock` and :meth:`unlock` authorize against the
        identity of the caller.

        Raises:
            RecordNotFoundError: If ``token_id`` does not exist.
            NotApprovedError: If ``caller`` is not approved by the owner.
        """
        require_identity(caller, "caller")
        at = self._now(now)
        with self._mutex.hold(("token", token_id)):
            owner = self._authorize_integration(token_id, caller)
            entry = self.lock_state.set_locked(token_id, caller, at)

            logger.info("record_locked", extra={"token_id": token_id, "integration": caller})
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.RECORD_LOCKED,
                    timestamp=at,
                    token_id=token_id,
                    owner=owner,
                    integration=caller,
                )
            )
        return entry

    def unlock(self, token_id: int, caller: str, now: int | None = None) -> None:
        """
        Clear the lock on a record.

        Any integration approved by the current owner may unlock, not only
        the one that set the lock.

        Raises:
            RecordNotFoundError: If ``token_id`` does not exist.
            NotApprovedError: If ``caller`` is not approved by the owner.
        """
        require_identity(caller, "caller")
        at = self._now(now)
        with self._mutex.hold(("token", token_id)):
            owner = self._authorize_integration(token_id, caller)
            self.lock_state.set_unlocked(token_id)

            logger.info("record_unlocked", extra={"token_id": token_id, "integration": caller})
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.RECORD_UNLOCKED,
                    timestamp=at,
                    token_id=token_id,
                    owner=owner,
                    integration=caller,
                )
            )

    def is_locked(self, token_id: int, now: int | None = None) -> bool:
        """Return True if ``token_id`` is locked. Unknown tokens are unlocked."""
        return self.lock_state.is_locked(token_id, self._now(now))

    # ------------------------------------------------------------------
    # Score updates
    # ------------------------------------------------------------------

    def adjust_score(
        self,
        token_id: int,
        integration: str,
        delta: int,
        now: int | None = None,
    ) -> int:
        """
        Apply a bounded, throttled score change on behalf of an integration.

        Checks run in this order and the first failure is raised:

        1. The record exists.
        2. ``|delta|`` is within :attr:`~ScoreConfig.max_delta`.
        3. The record's owner has approved ``integration``.
        4. The cooldown since this integration's last adjustment for this
           owner has elapsed.
        5. The resulting score stays within the score domain.

        The new record snapshot and the rate-limit entry are committed
        together only after every check passes.

        Returns:
            The new score.

        Raises:
            TypeError: If ``delta`` is not an int. Booleans are rejected.
            RecordNotFoundError, DeltaOutOfRangeError, NotApprovedError,
            RateLimitedError, ScoreOutOfBoundsError.
        """
        require_identity(integration, "integration")
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise TypeError(f"delta must be an int, got {type(delta).__name__}.")
        at = self._now(now)
        score_cfg = self._config.score

        with self._mutex.hold(("token", token_id)):
            try:
                record = self.records.get(token_id)
                owner = self.ownership.owner_of(token_id)

                if abs(delta) > score_cfg.max_delta:
                    raise DeltaOutOfRangeError(delta=delta, max_delta=score_cfg.max_delta)

                if not self.approvals.is_approved(owner, integration):
                    raise NotApprovedError(owner=owner, integration=integration)

                if not self.rate_limits.is_eligible(integration, owner, at):
                    raise RateLimitedError(
                        integration=integration,
                        owner=owner,
                        retry_after=self.rate_limits.remaining(integration, owner, at),
                    )

                candidate = record.score + delta
                if not score_cfg.min_score <= candidate <= score_cfg.max_score:
                    raise ScoreOutOfBoundsError(
                        candidate=candidate,
                        min_score=score_cfg.min_score,
                        max_score=score_cfg.max_score,
                    )
            except CreditRegistryError as exc:
                logger.info(
                    "score_update_rejected",
                    extra={
                        "token_id": token_id,
                        "integration": integration,
                        "delta": delta,
                        "code": exc.code,
                    },
                )
                raise

            updated = CreditRecord.model_validate(
                {
                    **record.model_dump(),
                    "score": candidate,
                    "last_updated": at,
                    "last_score_change": delta,
                    "last_updated_by": integration,
                }
            )
            self.records.replace(updated)
            self.rate_limits.record_update(integration, owner, at)

            logger.info(
                "score_updated",
                extra={
                    "token_id": token_id,
                    "integration": integration,
                    "delta": delta,
                    "score": candidate,
                },
            )
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.SCORE_UPDATED,
                    timestamp=at,
                    token_id=token_id,
                    owner=owner,
                    integration=integration,
                    score=candidate,
                    delta=delta,
                )
            )
        return candidate

    def cooldown_remaining(self, token_id: int, integration: str, now: int | None = None) -> int:
        """
        Return the seconds until ``integration`` may adjust ``token_id`` again.

        Raises:
            RecordNotFoundError: If ``token_id`` does not exist.
        """
        owner = self.ownership.owner_of(token_id)
        return self.rate_limits.remaining(integration, owner, self._now(now))

    # ------------------------------------------------------------------
    # Funds
    # ------------------------------------------------------------------

    def withdraw(self, caller: str, now: int | None = None) -> int:
        """
        Withdraw all collected record payments.

        Raises:
            UnauthorizedError: If ``caller`` is not the configured administrator.
        """
        at = self._now(now)
        with self._mutex.hold(("funds",)):
            amount = self.payments.withdraw(caller)
            logger.info("funds_withdrawn", extra={"caller": caller, "amount": amount})
            self.events.emit(
                RegistryEvent(
                    event_type=EventType.FUNDS_WITHDRAWN,
                    timestamp=at,
                    owner=caller,
                    extra={"amount": amount},
                )
            )
        return amount

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _now(self, now: int | None) -> int:
        return self._clock() if now is None else now

    def _record_of(self, owner: str) -> CreditRecord:
        record = self.records.find_by_owner(owner)
        if record is None:
            raise RecordNotFoundError(owner=owner)
        return record

    def _authorize_integration(self, token_id: int, caller: str) -> str:
        """Return the owner of ``token_id`` if it has approved ``caller``."""
        owner = self.ownership.owner_of(token_id)
        if not self.approvals.is_approved(owner, caller):
            logger.info(
                "integration_not_approved",
                extra={"token_id": token_id, "integration": caller},
            )
            raise NotApprovedError(owner=owner, integration=caller)
        return owner

    @contextmanager
    def _owner_guard(self, owner: str) -> Iterator[int | None]:
        """
        Serialize with every other mutation of ``owner``'s record.

        Always holds a lock keyed by the identity, and also the record's lock
        when ``owner`` has a record. The identity lock is taken first. Retries
        if a transfer moved the record while the record lock was being
        acquired. Yields the token id or None.
        """
        while True:
            with self._mutex.hold(("owner", owner)):
                token_id = self.records.token_of(owner)
                if token_id is None:
                    yield None
                    return
                with self._mutex.hold(("token", token_id)):
                    if self.records.token_of(owner) == token_id:
                        yield token_id
                        return

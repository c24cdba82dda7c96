# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations


class CreditRegistryError(Exception):
    """
    Base class for all credit-registry errors.

    Attributes:
        code: Stable machine-readable identifier for the failed invariant.
        retryable: True when the same request may succeed later without any
            change of authorization or arguments.
    """

    retryable: bool = False

    def __init__(self, message: str, code: str = "CREDIT_REGISTRY_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class AlreadyOwnsRecordError(CreditRegistryError):
    """
    Raised when an identity that already holds a record tries to acquire another.

    Attributes:
        owner: The identity that already holds a record.
        token_id: The token the identity currently holds.
    """

    def __init__(self, owner: str, token_id: int) -> None:
        super().__init__(
            f"Identity '{owner}' already owns credit record {token_id}.",
            code="ALREADY_OWNS_RECORD",
        )
        self.owner = owner
        self.token_id = token_id


class DestinationAlreadyOwnsRecordError(CreditRegistryError):
    """
    Raised when a transfer targets an identity that already holds a record.

    Attributes:
        recipient: The destination identity.
        token_id: The token that was being transferred.
    """

    def __init__(self, recipient: str, token_id: int) -> None:
        super().__init__(
            f"Cannot transfer record {token_id}: '{recipient}' already owns a record.",
            code="DESTINATION_ALREADY_OWNS_RECORD",
        )
        self.recipient = recipient
        self.token_id = token_id


class RecordNotFoundError(CreditRegistryError):
    """Raised when a token id or owner identity has no credit record."""

    def __init__(self, token_id: int | None = None, owner: str | None = None) -> None:
        if owner is not None:
            text = f"Identity '{owner}' does not own a credit record."
        else:
            text = f"Credit record {token_id} does not exist."
        super().__init__(text, code="RECORD_NOT_FOUND")
        self.token_id = token_id
        self.owner = owner


class NotApprovedError(CreditRegistryError):
    """
    Raised when an integration acts without the owner's approval.

    Attributes:
        owner: The record owner whose approval was checked.
        integration: The integration that is not approved.
    """

    def __init__(self, owner: str, integration: str) -> None:
        super().__init__(
            f"Integration '{integration}' is not approved by '{owner}'.",
            code="NOT_APPROVED",
        )
        self.owner = owner
        self.integration = integration


class DeltaOutOfRangeError(CreditRegistryError):
    """Raised when a score adjustment exceeds the per-call magnitude limit."""

    def __init__(self, delta: int, max_delta: int) -> None:
        super().__init__(
            f"Score delta {delta} is outside the allowed range "
            f"[-{max_delta}, {max_delta}].",
            code="DELTA_OUT_OF_RANGE",
        )
        self.delta = delta
        self.max_delta = max_delta


class RateLimitedError(CreditRegistryError):
    """
    Raised when an integration adjusts the same owner's score too soon.

    Attributes:
        integration: The throttled integration.
        owner: The owner whose record was targeted.
        retry_after: Seconds until the integration becomes eligible again.
    """

    retryable = True

    def __init__(self, integration: str, owner: str, retry_after: int) -> None:
        super().__init__(
            f"Integration '{integration}' updated '{owner}' too recently; "
            f"retry after {retry_after}s.",
            code="RATE_LIMITED",
        )
        self.integration = integration
        self.owner = owner
        self.retry_after = retry_after


class ScoreOutOfBoundsError(CreditRegistryError):
    """Raised when an adjustment would move the score outside its domain."""

    def __init__(self, candidate: int, min_score: int, max_score: int) -> None:
        super().__init__(
            f"Resulting score {candidate} is outside [{min_score}, {max_score}].",
            code="SCORE_OUT_OF_BOUNDS",
        )
        self.candidate = candidate
        self.min_score = min_score
        self.max_score = max_score


class RecordLockedError(CreditRegistryError):
    """Raised when approvals are revoked while the owner's record is locked."""

    def __init__(self, token_id: int) -> None:
        super().__init__(
            f"Credit record {token_id} is locked; approvals cannot be revoked.",
            code="RECORD_LOCKED",
        )
        self.token_id = token_id


class InvalidPaymentError(CreditRegistryError):
    """Raised when the payment for a new record does not match the price."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"Record price is {expected}; received {received}.",
            code="INVALID_PAYMENT",
        )
        self.expected = expected
        self.received = received


class UnauthorizedError(CreditRegistryError):
    """Raised when a caller invokes an operation reserved for another identity."""

    def __init__(self, caller: str, operation: str) -> None:
        super().__init__(
            f"'{caller}' is not authorized to {operation}.",
            code="UNAUTHORIZED",
        )
        self.caller = caller
        self.operation = operation

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import threading

from credit_registry.config import PaymentConfig
from credit_registry.errors import InvalidPaymentError, UnauthorizedError


class PaymentGate:
    """
    Fixed-price gate in front of record creation.

    Collected amounts accumulate until the configured administrator
    withdraws them. A price of 0 accepts only a zero payment.
    """

    def __init__(self, config: PaymentConfig | None = None) -> None:
        self._config = config or PaymentConfig()
        self._balance = 0
        self._guard = threading.Lock()

    @property
    def price(self) -> int:
        return self._config.price

    @property
    def balance(self) -> int:
        return self._balance

    def check_payment(self, amount: int) -> None:
        """
        Validate ``amount`` against the price without collecting it.

        Raises:
            InvalidPaymentError: If ``amount`` is not exactly the price.
        """
        if amount != self._config.price:
            raise InvalidPaymentError(expected=self._config.price, received=amount)

    def require_payment(self, amount: int) -> None:
        """
        Collect ``amount`` after checking it matches the price exactly.

        Raises:
            InvalidPaymentError: If ``amount`` is not exactly the price.
        """
        self.check_payment(amount)
        with self._guard:
            self._balance += amount

    def withdraw(self, caller: str) -> int:
        """
        Pay out and reset the collected balance.

        Returns:
            The amount withdrawn.

        Raises:
            UnauthorizedError: If ``caller`` is not the administrator.
        """
        administrator = self._config.administrator
        if administrator is None or caller != administrator:
            raise UnauthorizedError(caller=caller, operation="withdraw funds")
        with self._guard:
            amount = self._balance
            self._balance = 0
        return amount

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from credit_registry.payment.gate import PaymentGate

__all__ = ["PaymentGate"]

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from credit_registry.records.store import CreditRecord, RecordStore

__all__ = [
    "CreditRecord",
    "RecordStore",
]

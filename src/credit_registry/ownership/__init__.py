# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from credit_registry.ownership.interface import OwnershipRegistry
from credit_registry.ownership.memory import InMemoryOwnershipRegistry

__all__ = [
    "OwnershipRegistry",
    "InMemoryOwnershipRegistry",
]

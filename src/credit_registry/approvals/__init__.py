# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from credit_registry.approvals.registry import ApprovalRegistry

__all__ = ["ApprovalRegistry"]

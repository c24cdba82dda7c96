# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
credit-registry benchmark.

Runs the registry hot paths against in-memory state and writes a JSON
results object to stdout. Uses time.perf_counter_ns and statistics from the
standard library.

Usage::

    python benchmarks/bench.py > results.json
"""

from __future__ import annotations

import json
import platform
import statistics
import sys
import time
from dataclasses import dataclass
from typing import Callable

from credit_registry import (
    CreditRegistry,
    RateLimitedError,
    RegistryConfig,
    ScoreConfig,
)


# ─── Types ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    iterations: int
    ops_per_sec: int
    mean_ns: int
    stdev_ns: int

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "iterations": self.iterations,
            "ops_per_sec": self.ops_per_sec,
            "mean_ns": self.mean_ns,
            "stdev_ns": self.stdev_ns,
        }


# ─── Timing helpers ───────────────────────────────────────────────────────────


def measure_iterations(fn: Callable[[], None], iterations: int) -> tuple[int, int]:
    """Run fn for `iterations` cycles and return (mean_ns, stdev_ns)."""
    for _ in range(min(1000, iterations // 10)):
        fn()

    samples: list[float] = []
    for _ in range(iterations):
        start = time.perf_counter_ns()
        fn()
        samples.append(float(time.perf_counter_ns() - start))

    mean_ns = round(statistics.mean(samples))
    stdev_ns = round(statistics.stdev(samples)) if len(samples) > 1 else 0
    return mean_ns, stdev_ns


def to_scenario_result(name: str, iterations: int, fn: Callable[[], None]) -> ScenarioResult:
    mean_ns, stdev_ns = measure_iterations(fn, iterations)
    ops_per_sec = round(1_000_000_000 / mean_ns) if mean_ns > 0 else 0
    return ScenarioResult(
        name=name,
        iterations=iterations,
        ops_per_sec=ops_per_sec,
        mean_ns=mean_ns,
        stdev_ns=stdev_ns,
    )


def _registry(cooldown_seconds: int = 86_400) -> tuple[CreditRegistry, int]:
    config = RegistryConfig(score=ScoreConfig(cooldown_seconds=cooldown_seconds))
    registry = CreditRegistry(config=config, clock=lambda: 0)
    token_id = registry.create_record("bench-owner").token_id
    registry.grant_approval("bench-owner", "bench-integration")
    return registry, token_id


# ─── Scenarios ────────────────────────────────────────────────────────────────

ITERATIONS = 20_000


def bench_approval_check() -> ScenarioResult:
    registry, _ = _registry()

    def run() -> None:
        registry.is_approved("bench-owner", "bench-integration")

    return to_scenario_result("approval_check", ITERATIONS, run)


def bench_adjust_score() -> ScenarioResult:
    registry, token_id = _registry(cooldown_seconds=0)
    step = [1]

    def run() -> None:
        registry.adjust_score(token_id, "bench-integration", step[0], now=0)
        step[0] = -step[0]

    return to_scenario_result("adjust_score", ITERATIONS, run)


def bench_rate_limited_rejection() -> ScenarioResult:
    registry, token_id = _registry()
    registry.adjust_score(token_id, "bench-integration", 1, now=0)

    def run() -> None:
        try:
            registry.adjust_score(token_id, "bench-integration", 1, now=1)
        except RateLimitedError:
            pass

    return to_scenario_result("rate_limited_rejection", ITERATIONS, run)


def bench_lock_cycle() -> ScenarioResult:
    registry, token_id = _registry()

    def run() -> None:
        registry.lock(token_id, "bench-integration", now=0)
        registry.unlock(token_id, "bench-integration", now=0)

    return to_scenario_result("lock_cycle", ITERATIONS, run)


# ─── Entry point ─────────────────────────────────────────────────────────────


def main() -> None:
    scenarios = [
        bench_approval_check(),
        bench_adjust_score(),
        bench_rate_limited_rejection(),
        bench_lock_cycle(),
    ]

    python_version = (
        f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    )
    report = {
        "language": "python",
        "version": python_version,
        "runtime": f"cpython-{python_version}-{platform.machine()}",
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "scenarios": [scenario.to_dict() for scenario in scenarios],
    }
    json.dump(report, sys.stdout, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()

"""
Mutator Statistics - Per-Mutator Effectiveness Tracking

CONCEPT: Not all mutators are equally valuable for a given target. Each
registered mutator gets running counters:
1. How often was it executed?
2. How often did its output reach new coverage?
3. How often did its output crash the target?
4. How long did the target take on its output?

The selection engine turns these counters into a utility score on demand.
Scores are never stored; only the counters are.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict, dataclass

from io_fuzzer.core.config import SelectionConfig
from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.core.mutation.base import Mutator, mutator_name


@dataclass
class MutatorStatistics:
    """
    Running counters for one registered mutator.

    Counts only grow. ``average_latency_ms`` is an incremental running mean,
    updated per execution and never recomputed from history.
    """

    total_executions: int = 0
    new_coverage_count: int = 0
    crash_count: int = 0
    average_latency_ms: float = 0.0
    successful_mutation_count: int = 0
    total_coverage_increase: float = 0.0

    def record_execution(
        self, new_coverage: bool, crashed: bool, latency_ms: float
    ) -> None:
        """Absorb the outcome of one execution of this mutator's output."""
        if latency_ms < 0:
            raise InvalidArgumentError(
                "latency_ms", "Latency cannot be negative", {"latency_ms": latency_ms}
            )

        self.total_executions += 1
        if new_coverage:
            self.new_coverage_count += 1
        if crashed:
            self.crash_count += 1

        n = self.total_executions
        self.average_latency_ms = (self.average_latency_ms * (n - 1) + latency_ms) / n

    def record_success(self, coverage_increase: float) -> None:
        """Count an externally confirmed successful mutation."""
        if coverage_increase < 0:
            raise InvalidArgumentError(
                "coverage_increase",
                "Coverage increase cannot be negative",
                {"coverage_increase": coverage_increase},
            )
        self.successful_mutation_count += 1
        self.total_coverage_increase += coverage_increase

    def reset(self) -> None:
        """Zero every counter."""
        self.total_executions = 0
        self.new_coverage_count = 0
        self.crash_count = 0
        self.average_latency_ms = 0.0
        self.successful_mutation_count = 0
        self.total_coverage_increase = 0.0

    @property
    def coverage_rate(self) -> float:
        """Share of executions that discovered new coverage."""
        if self.total_executions == 0:
            return 0.0
        return self.new_coverage_count / self.total_executions

    @property
    def crash_rate(self) -> float:
        """Share of executions that crashed the target."""
        if self.total_executions == 0:
            return 0.0
        return self.crash_count / self.total_executions

    def copy(self) -> MutatorStatistics:
        return MutatorStatistics(**asdict(self))

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


def utility_score(
    stats: MutatorStatistics,
    max_average_latency_ms: float,
    config: SelectionConfig | None = None,
) -> float:
    """
    Weight a mutator by coverage yield, crash yield and speed.

    ``score = w_cov * coverage_rate + w_crash * crash_rate + w_speed * speed``
    where ``speed = 1 - latency / max_latency`` (1.0 when the maximum is
    zero). Unexecuted mutators score 1.0. The result is floored at
    ``config.min_score`` so every mutator keeps a chance of being picked.

    Args:
        stats: Counters of the mutator being scored
        max_average_latency_ms: Largest average latency across all mutators
        config: Weights and floor (defaults if omitted)

    Returns:
        Utility score (unnormalized selection weight)

    """
    config = config or SelectionConfig()
    if stats.total_executions == 0:
        return 1.0

    normalized_speed = 1.0
    if max_average_latency_ms > 0:
        normalized_speed = 1.0 - stats.average_latency_ms / max_average_latency_ms

    score = (
        config.coverage_weight * stats.coverage_rate
        + config.crash_weight * stats.crash_rate
        + config.speed_weight * normalized_speed
    )
    return max(config.min_score, score)


@dataclass
class _Registration:
    mutator: Mutator
    stats: MutatorStatistics


class MutationStatisticsStore:
    """
    Statistics for every registered mutator, keyed by mutator identity.

    The same name may be registered more than once; each instance keeps its
    own counters. Name-keyed snapshots disambiguate repeated names with a
    ``#2``, ``#3`` ... suffix in registration order.
    """

    def __init__(self) -> None:
        self._registrations: list[_Registration] = []

    def register(self, mutator: Mutator) -> MutatorStatistics:
        """Start tracking a mutator with zeroed counters."""
        if mutator is None:
            raise InvalidArgumentError("mutator", "Cannot register None")
        stats = MutatorStatistics()
        self._registrations.append(_Registration(mutator, stats))
        return stats

    def get(self, mutator: Mutator) -> MutatorStatistics | None:
        """Return the live counters of a registered mutator instance."""
        for registration in self._registrations:
            if registration.mutator is mutator:
                return registration.stats
        return None

    def __contains__(self, mutator: object) -> bool:
        return any(r.mutator is mutator for r in self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    def __iter__(self) -> Iterator[tuple[Mutator, MutatorStatistics]]:
        for registration in self._registrations:
            yield registration.mutator, registration.stats

    @property
    def mutators(self) -> tuple[Mutator, ...]:
        return tuple(r.mutator for r in self._registrations)

    def max_average_latency(self) -> float:
        return max(
            (r.stats.average_latency_ms for r in self._registrations), default=0.0
        )

    def all_below(self, threshold: int) -> bool:
        """True when every mutator has fewer than ``threshold`` executions."""
        return all(r.stats.total_executions < threshold for r in self._registrations)

    def reset(self) -> None:
        for registration in self._registrations:
            registration.stats.reset()

    def report_keys(self) -> list[str]:
        """Name of each registration, with repeated names suffixed."""
        seen: dict[str, int] = {}
        keys = []
        for registration in self._registrations:
            name = mutator_name(registration.mutator)
            seen[name] = seen.get(name, 0) + 1
            keys.append(name if seen[name] == 1 else f"{name}#{seen[name]}")
        return keys

    def snapshot(self) -> dict[str, MutatorStatistics]:
        """Name-keyed copies of every mutator's counters."""
        return {
            key: registration.stats.copy()
            for key, registration in zip(
                self.report_keys(), self._registrations, strict=True
            )
        }

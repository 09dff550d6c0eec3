"""
Guided Mutation Engine - Feedback-Driven Mutator Selection

LEARNING OBJECTIVE: Learn how a fuzzer can shift effort towards the mutators
that actually pay off for the target being tested.

CONCEPT: Every registered mutator starts with zeroed statistics. Until each
of them has been executed a minimum number of times, selection is uniform
(bootstrap phase) so that none is judged on too few samples. After that each
mutator gets a utility score from its coverage yield, crash yield and speed,
and selection becomes a weighted roulette over those scores. A score floor
keeps every mutator selectable, so the engine never stops exploring.

The engine is single-threaded per fuzzing loop. Parallel loops each own an
engine and share only the coverage tracker.
"""

from __future__ import annotations

import random
from collections.abc import Iterable

import numpy as np

from io_fuzzer.core.config import MutationConfig, SelectionConfig
from io_fuzzer.core.exceptions import InvalidArgumentError, NoMutatorsRegisteredError
from io_fuzzer.core.mutation import Mutator, apply_mutator, default_mutators
from io_fuzzer.core.mutation.base import BytesLike, mutator_name
from io_fuzzer.core.statistics import (
    MutationStatisticsStore,
    MutatorStatistics,
    utility_score,
)
from io_fuzzer.utils.logger import get_logger

logger = get_logger(__name__)


class GuidedMutationEngine:
    """Adaptive mutator selection driven by execution feedback.

    Args:
        rng: Injected randomness source (fixed seed gives reproducible runs)
        mutators: Mutators to register up front
        config: Bootstrap threshold, score weights and floor

    """

    def __init__(
        self,
        rng: random.Random,
        mutators: Iterable[Mutator] | None = None,
        config: SelectionConfig | None = None,
    ) -> None:
        if rng is None:
            raise InvalidArgumentError("rng", "A randomness source is required")
        self.rng = rng
        self.config = config if config is not None else SelectionConfig()
        self._store = MutationStatisticsStore()
        self.last_mutator: Mutator | None = None

        for mutator in mutators or ():
            self.register_mutator(mutator)

    @classmethod
    def create(
        cls,
        rng: random.Random,
        mutators: Iterable[Mutator] | None = None,
        config: SelectionConfig | None = None,
        mutation_config: MutationConfig | None = None,
    ) -> GuidedMutationEngine:
        """Build an engine, registering the built-in mutators by default.

        ``mutation_config`` only shapes the built-in mutators; it is unused
        when ``mutators`` is given.
        """
        if mutators is None:
            mutators = default_mutators(mutation_config)
        return cls(
            rng,
            mutators=mutators,
            config=config,
        )

    def register_mutator(self, mutator: Mutator) -> None:
        """Add a mutator with fresh zero statistics.

        Registering the same name twice is allowed: statistics are kept per
        instance.
        """
        if mutator is None:
            raise InvalidArgumentError("mutator", "Cannot register None")
        self._store.register(mutator)
        logger.debug(
            "mutator_registered",
            mutator=mutator_name(mutator),
            total=len(self._store),
        )

    def get_mutators(self) -> tuple[Mutator, ...]:
        return self._store.mutators

    # Selection

    def select_mutator(self) -> Mutator:
        """Pick the mutator for the next iteration.

        Returns:
            The chosen mutator

        Raises:
            NoMutatorsRegisteredError: If the engine has no mutators

        """
        mutators = self._store.mutators
        if not mutators:
            raise NoMutatorsRegisteredError(
                "Cannot select a mutator: none registered",
                error_code="NO_MUTATORS",
            )

        if self._store.all_below(self.config.min_executions_for_stats):
            return self.rng.choice(mutators)

        scores = np.array(self._scores(), dtype=float)
        cumulative = np.cumsum(scores)
        draw = self.rng.random() * float(cumulative[-1])

        # First band whose upper edge is above the draw
        idx = int(np.searchsorted(cumulative, draw, side="right"))
        if idx >= len(mutators):
            return mutators[-1]
        return mutators[idx]

    def _scores(self) -> list[float]:
        max_latency = self._store.max_average_latency()
        return [
            utility_score(stats, max_latency, self.config) for _, stats in self._store
        ]

    def score_mutators(self) -> dict[str, float]:
        """Current utility score of every mutator, keyed like get_statistics."""
        return dict(zip(self._store.report_keys(), self._scores(), strict=True))

    # Mutation

    def mutate(
        self, seed: BytesLike | None, mutation_count: int | None = None
    ) -> bytes:
        """Produce a candidate input from ``seed``.

        With no count, one mutator is selected and applied. With a count,
        that many selections are stacked, each operating on the previous
        output. ``last_mutator`` is left pointing at the final mutator applied,
        or None when no mutator ran.

        Args:
            seed: Seed input
            mutation_count: Number of stacked mutations (one if omitted)

        Returns:
            Mutated candidate input

        """
        self.last_mutator = None
        if seed is None:
            return b""
        if mutation_count is not None and mutation_count < 0:
            raise InvalidArgumentError(
                "mutation_count",
                "Mutation count cannot be negative",
                {"mutation_count": mutation_count},
            )

        result = bytes(seed)
        if not self._store:
            return result

        for _ in range(1 if mutation_count is None else mutation_count):
            mutator = self.select_mutator()
            result = apply_mutator(mutator, result, self.rng)
            self.last_mutator = mutator
        return result

    # Feedback

    def record_feedback(
        self,
        mutator: Mutator,
        new_coverage_discovered: bool,
        crashed: bool,
        latency_ms: float,
    ) -> None:
        """Absorb one execution outcome for ``mutator``."""
        stats = self._lookup(mutator)
        if stats is None:
            return
        stats.record_execution(new_coverage_discovered, crashed, latency_ms)

        if crashed:
            logger.info(
                "mutator_crash_recorded",
                mutator=mutator_name(mutator),
                crash_count=stats.crash_count,
            )

    def record_success(self, mutator: Mutator, coverage_increase: float) -> None:
        """Count a successful mutation as judged by the caller."""
        stats = self._lookup(mutator)
        if stats is None:
            return
        stats.record_success(coverage_increase)

    def _lookup(self, mutator: Mutator) -> MutatorStatistics | None:
        if mutator is None:
            raise InvalidArgumentError("mutator", "Feedback requires a mutator")
        stats = self._store.get(mutator)
        if stats is None:
            logger.warning(
                "feedback_for_unknown_mutator", mutator=mutator_name(mutator)
            )
        return stats

    # Reporting

    def get_statistics(self) -> dict[str, MutatorStatistics]:
        """Name-keyed copies of every mutator's statistics."""
        return self._store.snapshot()

    def reset_statistics(self) -> None:
        """Zero all statistics, keeping the registrations."""
        self._store.reset()
        self.last_mutator = None
        logger.info("mutation_statistics_reset", mutators=len(self._store))

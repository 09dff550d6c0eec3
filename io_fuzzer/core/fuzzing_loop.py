"""
Fuzzing Loop - Reference Orchestration

Glue between the mutation engine, an executor and the coverage tracker:

1. Pick a seed from the corpus (or draw fresh random bytes)
2. Mutate it with the engine
3. Execute the candidate
4. Feed coverage into the tracker
5. Feed the outcome back into the engine's statistics
6. Keep crashes and inputs that reached new coverage

Corpus and crash stores are in-memory only.
"""

from __future__ import annotations

import hashlib
import random
import time
from dataclasses import dataclass, field
from typing import Any

from io_fuzzer.core.config import LoopConfig, MutationConfig, Settings, get_settings
from io_fuzzer.core.coverage_tracker import CoverageTracker
from io_fuzzer.core.engine import GuidedMutationEngine, MutationEngine
from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.core.execution import (
    CallableExecutor,
    ExecutionResult,
    Executor,
    Target,
)
from io_fuzzer.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def resolve_seed(seed: int) -> int:
    """Return ``seed``, or a freshly drawn one when it is 0."""
    if seed:
        return seed
    return random.SystemRandom().randrange(1, 2**32)


class InMemoryCorpus:
    """Seed inputs and crashing inputs, de-duplicated by content hash."""

    def __init__(self) -> None:
        self._entries: list[bytes] = []
        self._hashes: set[str] = set()
        self.crashes: list[tuple[bytes, str]] = []
        self._crash_hashes: set[str] = set()

    @staticmethod
    def _digest(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    def add(self, data: bytes) -> bool:
        """Add a seed. Returns False if the same bytes are already present."""
        digest = self._digest(bytes(data))
        if digest in self._hashes:
            return False
        self._hashes.add(digest)
        self._entries.append(bytes(data))
        return True

    def add_crash(self, data: bytes, error: str) -> bool:
        """Record a crashing input. Returns False for a repeat."""
        digest = self._digest(bytes(data))
        if digest in self._crash_hashes:
            return False
        self._crash_hashes.add(digest)
        self.crashes.append((bytes(data), error))
        return True

    def choose(self, rng: random.Random) -> bytes:
        if not self._entries:
            raise IndexError("Cannot choose from an empty corpus")
        return rng.choice(self._entries)

    @property
    def entries(self) -> tuple[bytes, ...]:
        return tuple(self._entries)

    @property
    def crash_count(self) -> int:
        return len(self.crashes)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class FuzzingStats:
    """Statistics for a fuzzing run."""

    start_time: float = field(default_factory=time.time)
    executions: int = 0
    interesting_inputs: int = 0
    crashes: int = 0
    corpus_size: int = 0
    total_latency_ms: float = 0.0
    coverage_percentage: float = 0.0
    mutator_statistics: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def average_latency_ms(self) -> float:
        if self.executions == 0:
            return 0.0
        return self.total_latency_ms / self.executions

    @property
    def exec_per_sec(self) -> float:
        elapsed = time.time() - self.start_time
        return self.executions / elapsed if elapsed > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "executions": self.executions,
            "interesting_inputs": self.interesting_inputs,
            "crashes": self.crashes,
            "corpus_size": self.corpus_size,
            "average_latency_ms": self.average_latency_ms,
            "coverage_percentage": self.coverage_percentage,
            "mutator_statistics": self.mutator_statistics,
        }


class FuzzingLoop:
    """Drive an engine against an executor for a number of iterations.

    Args:
        engine: Guided or baseline mutation engine
        executor: Runs candidates against the target
        tracker: Shared coverage tracker (a fresh one if omitted)
        corpus: Seed store (an empty one if omitted)
        config: Loop parameters
        rng: Randomness source for seed choice and fresh inputs. When
            omitted it is seeded from ``config.seed`` (a random seed if 0),
            and the seed is kept on ``self.seed`` and logged for replay
        mutation_config: Stacking limit for the baseline engine

    """

    def __init__(
        self,
        engine: GuidedMutationEngine | MutationEngine,
        executor: Executor,
        tracker: CoverageTracker | None = None,
        corpus: InMemoryCorpus | None = None,
        config: LoopConfig | None = None,
        rng: random.Random | None = None,
        mutation_config: MutationConfig | None = None,
    ) -> None:
        if engine is None:
            raise InvalidArgumentError("engine", "A mutation engine is required")
        if executor is None:
            raise InvalidArgumentError("executor", "An executor is required")

        self.engine = engine
        self.executor = executor
        self.tracker = tracker if tracker is not None else CoverageTracker()
        self.corpus = corpus if corpus is not None else InMemoryCorpus()
        self.config = config if config is not None else LoopConfig()
        self.mutation_config = mutation_config or MutationConfig()
        self.seed: int | None = None
        if rng is None:
            self.seed = resolve_seed(self.config.seed)
            rng = random.Random(self.seed)
        self.rng = rng
        self.stats = FuzzingStats()

    @classmethod
    def from_settings(
        cls,
        target: Target,
        settings: Settings | None = None,
        corpus: InMemoryCorpus | None = None,
        tracker: CoverageTracker | None = None,
    ) -> FuzzingLoop:
        """Build a loop around a Python callable from application settings.

        Configures logging, wraps ``target`` in a :class:`CallableExecutor`
        with the configured timeout, and picks the guided or baseline engine.
        The engine and the loop share one rng seeded from ``loop.seed``.
        """
        settings = settings if settings is not None else get_settings()
        configure_logging(
            log_level=settings.logging.log_level.value,
            json_format=settings.logging.log_format == "json",
        )

        seed = resolve_seed(settings.loop.seed)
        rng = random.Random(seed)
        engine: GuidedMutationEngine | MutationEngine
        if settings.loop.guided:
            engine = GuidedMutationEngine.create(
                rng, config=settings.selection, mutation_config=settings.mutation
            )
        else:
            engine = MutationEngine.create_with_default_mutators(
                rng, mutation_config=settings.mutation
            )

        loop = cls(
            engine,
            CallableExecutor(target, timeout_ms=settings.loop.timeout_ms),
            tracker=tracker,
            corpus=corpus,
            config=settings.loop,
            rng=rng,
            mutation_config=settings.mutation,
        )
        loop.seed = seed
        return loop

    @property
    def guided(self) -> bool:
        return isinstance(self.engine, GuidedMutationEngine)

    def _next_input(self) -> tuple[bytes, bool]:
        """Return the next candidate and whether a mutator produced it."""
        if len(self.corpus) > 0 and (
            self.rng.random() < self.config.corpus_selection_probability
        ):
            seed = self.corpus.choose(self.rng)
            if isinstance(self.engine, GuidedMutationEngine):
                return self.engine.mutate(seed), True
            count = self.rng.randint(1, self.mutation_config.max_mutations)
            return self.engine.mutate(seed, count), True

        size = self.rng.randint(1, self.config.max_input_size - 1)
        return self.rng.randbytes(size), False

    def run_iteration(self) -> ExecutionResult:
        """Generate, execute and account for one candidate input."""
        data, mutated = self._next_input()
        result = self.executor.execute(data)
        new_signals = self.tracker.update_coverage(result.coverage)

        self.stats.executions += 1
        self.stats.total_latency_ms += result.latency_ms

        if isinstance(self.engine, GuidedMutationEngine) and mutated:
            mutator = self.engine.last_mutator
            if mutator is not None:
                self.engine.record_feedback(
                    mutator, bool(new_signals), result.crashed, result.latency_ms
                )
                if new_signals:
                    self.engine.record_success(mutator, float(len(new_signals)))

        if result.crashed:
            if self.corpus.add_crash(data, result.error or "Unknown error"):
                self.stats.crashes += 1
                logger.warning(
                    "crash_detected",
                    outcome=result.outcome.value,
                    error=result.error,
                    input_size=len(data),
                )

        if new_signals and self.corpus.add(data):
            self.stats.interesting_inputs += 1
            logger.debug(
                "interesting_input_added",
                new_signals=len(new_signals),
                corpus_size=len(self.corpus),
            )

        return result

    def run(self, iterations: int | None = None) -> FuzzingStats:
        """Run the loop and return the accumulated statistics."""
        total = self.config.iterations if iterations is None else iterations
        if total < 0:
            raise InvalidArgumentError(
                "iterations",
                "Iteration count cannot be negative",
                {"iterations": total},
            )

        logger.info(
            "fuzzing_started",
            iterations=total,
            seed=self.seed,
            guided=self.guided,
            corpus_size=len(self.corpus),
        )
        for i in range(total):
            self.run_iteration()
            if (i + 1) % self.config.report_interval == 0:
                self._report_progress()

        self._refresh_stats()
        logger.info("fuzzing_completed", **self.stats.to_dict())
        return self.stats

    def _refresh_stats(self) -> None:
        self.stats.corpus_size = len(self.corpus)
        self.stats.coverage_percentage = self.tracker.percentage_covered()
        if isinstance(self.engine, GuidedMutationEngine):
            self.stats.mutator_statistics = {
                name: stats.to_dict()
                for name, stats in self.engine.get_statistics().items()
            }

    def _report_progress(self) -> None:
        self._refresh_stats()
        logger.info(
            "fuzzing_progress",
            executions=self.stats.executions,
            crashes=self.stats.crashes,
            corpus_size=self.stats.corpus_size,
            coverage_percentage=round(self.stats.coverage_percentage, 2),
            exec_per_sec=round(self.stats.exec_per_sec, 1),
        )

    def reset(self) -> None:
        """Zero loop statistics, coverage counts and engine statistics."""
        self.stats = FuzzingStats()
        self.tracker.reset()
        if isinstance(self.engine, GuidedMutationEngine):
            self.engine.reset_statistics()
        logger.info("fuzzing_loop_reset")

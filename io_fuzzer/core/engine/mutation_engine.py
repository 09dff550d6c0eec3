"""Non-adaptive baseline mutation engine.

Picks mutators uniformly at random and stacks several of them on one input.
Useful as a control when measuring what the guided engine buys.
"""

from __future__ import annotations

import random

from io_fuzzer.core.config import MutationConfig
from io_fuzzer.core.exceptions import InvalidArgumentError
from io_fuzzer.core.mutation import Mutator, apply_mutator, default_mutators
from io_fuzzer.core.mutation.base import BytesLike, mutator_name
from io_fuzzer.utils.logger import get_logger

logger = get_logger(__name__)


class MutationEngine:
    """Uniform random mutator stacking.

    Args:
        rng: Injected randomness source (fixed seed gives reproducible runs)

    """

    def __init__(self, rng: random.Random) -> None:
        if rng is None:
            raise InvalidArgumentError("rng", "A randomness source is required")
        self.rng = rng
        self._mutators: list[Mutator] = []

    @classmethod
    def create_with_default_mutators(
        cls, rng: random.Random, mutation_config: MutationConfig | None = None
    ) -> MutationEngine:
        """Build an engine with the six built-in mutators registered."""
        engine = cls(rng)
        for mutator in default_mutators(mutation_config):
            engine.add_mutator(mutator)
        return engine

    def add_mutator(self, mutator: Mutator) -> None:
        if mutator is None:
            raise InvalidArgumentError("mutator", "Cannot register None")
        self._mutators.append(mutator)
        logger.debug(
            "mutator_registered",
            mutator=mutator_name(mutator),
            total=len(self._mutators),
        )

    def get_mutators(self) -> tuple[Mutator, ...]:
        return tuple(self._mutators)

    def mutate(self, data: BytesLike | None, mutation_count: int = 1) -> bytes:
        """Apply ``mutation_count`` randomly chosen mutators in sequence.

        Each step operates on the previous step's output. A non-positive
        count, or an engine without mutators, returns the input unchanged.

        Args:
            data: Seed input
            mutation_count: Number of stacked mutations

        Returns:
            Mutated candidate input

        """
        if data is None:
            return b""

        result = bytes(data)
        if mutation_count <= 0 or not self._mutators:
            return result

        for _ in range(mutation_count):
            mutator = self.rng.choice(self._mutators)
            result = apply_mutator(mutator, result, self.rng)
        return result

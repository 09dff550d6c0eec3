"""Boundary value mutator."""

from __future__ import annotations

import random

from io_fuzzer.core.constants import SPECIAL_VALUES, MutatorName
from io_fuzzer.core.mutation.base import mutation_boundary

MAX_REPLACEMENTS = 3


class ValueMutator:
    """Overwrite 1-3 spans with zero/min/max integer patterns.

    Catalog entries longer than the buffer are skipped.
    """

    name = MutatorName.VALUE.value

    def __init__(self, values: tuple[bytes, ...] = SPECIAL_VALUES) -> None:
        self.values = values

    @mutation_boundary
    def mutate(self, data: bytearray, rng: random.Random) -> bytearray:
        replacements = rng.randint(1, MAX_REPLACEMENTS)
        for _ in range(replacements):
            value = rng.choice(self.values)
            if len(value) > len(data):
                continue

            pos = rng.randint(0, len(data) - len(value))
            data[pos : pos + len(value)] = value
        return data

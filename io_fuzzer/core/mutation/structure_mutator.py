"""Structural mutator.

Changes the shape of a buffer instead of its values: inserts random bytes,
deletes a contiguous run, duplicates a segment elsewhere, or swaps two
non-overlapping segments.
"""

from __future__ import annotations

import random

from io_fuzzer.core.constants import MutatorName, StructureEdit
from io_fuzzer.core.exceptions import MutationError
from io_fuzzer.core.mutation.base import mutation_boundary

MAX_INSERT = 10
MAX_SWAP_SEGMENT = 10


class StructureMutator:
    """Insert, delete, duplicate or swap byte segments."""

    name = MutatorName.STRUCTURE.value

    def __init__(self) -> None:
        self._edits = {
            StructureEdit.INSERT: self._insert_random_bytes,
            StructureEdit.DELETE: self._delete_random_bytes,
            StructureEdit.DUPLICATE: self._duplicate_segment,
            StructureEdit.SWAP: self._swap_segments,
        }

    @mutation_boundary
    def mutate(self, data: bytearray, rng: random.Random) -> bytearray:
        edit = rng.choice(list(StructureEdit))
        return self.apply(edit, data, rng)

    def apply(
        self, edit: StructureEdit, data: bytearray, rng: random.Random
    ) -> bytearray:
        """Apply a specific edit to ``data`` (modified in place or replaced)."""
        return self._edits[edit](data, rng)

    def _insert_random_bytes(self, data: bytearray, rng: random.Random) -> bytearray:
        count = rng.randint(1, MAX_INSERT)
        pos = rng.randint(0, len(data))
        data[pos:pos] = bytes(rng.randrange(256) for _ in range(count))
        return data

    def _delete_random_bytes(self, data: bytearray, rng: random.Random) -> bytearray:
        if len(data) < 2:
            return data

        count = rng.randint(1, max(1, len(data) // 2))
        pos = rng.randint(0, len(data) - count)
        del data[pos : pos + count]
        return data

    def _duplicate_segment(self, data: bytearray, rng: random.Random) -> bytearray:
        if len(data) < 2:
            return data

        size = rng.randint(1, max(1, len(data) // 2))
        src = rng.randint(0, len(data) - size)
        dst = rng.randint(0, len(data))
        data[dst:dst] = data[src : src + size]
        return data

    def _swap_segments(self, data: bytearray, rng: random.Random) -> bytearray:
        if len(data) < 4:
            return data

        limit = max(1, min(len(data) // 4, MAX_SWAP_SEGMENT))
        size1 = rng.randint(1, limit)
        pos1 = rng.randint(0, len(data) - size1)
        size2 = rng.randint(1, limit)

        # Candidate start ranges for the second segment, before and after the first
        ranges = []
        if pos1 >= size2:
            ranges.append((0, pos1 - size2))
        if pos1 + size1 + size2 <= len(data):
            ranges.append((pos1 + size1, len(data) - size2))

        # Segments are capped at a quarter of the buffer, so one side always fits
        if not ranges:
            raise MutationError(
                "No room for a second swap segment",
                error_code="SWAP_PLACEMENT",
                context={
                    "size": len(data),
                    "pos1": pos1,
                    "size1": size1,
                    "size2": size2,
                },
            )

        start, end = rng.choice(ranges)
        pos2 = rng.randint(start, end)

        (first_pos, first_size), (second_pos, second_size) = sorted(
            [(pos1, size1), (pos2, size2)]
        )
        first = data[first_pos : first_pos + first_size]
        second = data[second_pos : second_pos + second_size]
        return (
            data[:first_pos]
            + second
            + data[first_pos + first_size : second_pos]
            + first
            + data[second_pos + second_size :]
        )

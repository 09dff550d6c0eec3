"""Bit- and byte-level mutators.

Small, local perturbations: single bit inversions, whole byte inversions and
endianness swaps of 16/32/64-bit spans.
"""

from __future__ import annotations

import random

from io_fuzzer.core.constants import MutatorName
from io_fuzzer.core.mutation.base import mutation_boundary

MAX_FLIPS = 5
SWAP_WIDTHS = (2, 4, 8)


class BitFlipMutator:
    """Flip 1-5 random bits.

    Positions are drawn independently, so two flips may hit the same bit
    and cancel out.
    """

    name = MutatorName.BIT_FLIP.value

    @mutation_boundary
    def mutate(self, data: bytearray, rng: random.Random) -> bytearray:
        flips = rng.randint(1, min(MAX_FLIPS, len(data) * 8))
        for _ in range(flips):
            pos = rng.randrange(len(data))
            bit = rng.randrange(8)
            data[pos] ^= 1 << bit
        return data


class ByteFlipMutator:
    """Invert every bit of 1-5 random bytes."""

    name = MutatorName.BYTE_FLIP.value

    @mutation_boundary
    def mutate(self, data: bytearray, rng: random.Random) -> bytearray:
        flips = rng.randint(1, min(MAX_FLIPS, len(data)))
        for _ in range(flips):
            pos = rng.randrange(len(data))
            data[pos] ^= 0xFF
        return data


class EndiannessMutator:
    """Reverse the byte order of 1-5 spans of 2, 4 or 8 bytes.

    Spans too wide for the buffer fall back to 2 bytes; a 1-byte buffer is
    returned unchanged.
    """

    name = MutatorName.ENDIANNESS.value

    @mutation_boundary
    def mutate(self, data: bytearray, rng: random.Random) -> bytearray:
        if len(data) < 2:
            return data

        swaps = rng.randint(1, min(MAX_FLIPS, len(data) // 2))
        for _ in range(swaps):
            width = rng.choice(SWAP_WIDTHS)
            if width > len(data):
                width = 2

            pos = rng.randint(0, len(data) - width)
            data[pos : pos + width] = data[pos : pos + width][::-1]
        return data

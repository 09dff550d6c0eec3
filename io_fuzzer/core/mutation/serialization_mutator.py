"""Format-aware serialization mutator.

Targets binary formats that prefix strings and arrays with a compact
variable-length integer. The mutator looks for such a length-prefixed field
and edits the length marker and the payload independently, so that decoders
see a well-formed header paired with the wrong amount of data (or the
reverse). When no field can be located it falls back to overwriting a single
random byte.

It also has a deliberate corruption mode (:meth:`SerializationMutator.corrupt`)
that damages the buffer as a whole: truncation, spliced garbage, or
scattered bit flips. Those inputs probe error-handling paths rather than
boundary handling.
"""

from __future__ import annotations

import random
from collections.abc import Iterable

from io_fuzzer.core.constants import (
    INTERESTING_VALUES,
    INVALID_UTF8,
    SPECIAL_VALUES,
    VARINT_MARKER_16,
    VARINT_WIDTHS,
    CorruptionKind,
    MutatorName,
    SerializationEdit,
)
from io_fuzzer.core.mutation.base import mutation_boundary
from io_fuzzer.core.varint import (
    encode_var_int,
    find_length_prefixed_field,
    read_var_int,
)

LENGTH_JITTER = 5
MAX_PAYLOAD_EDITS = 5
MAX_SPLICE = 5
MAX_CORRUPT_FLIPS = 4
DEFAULT_MAX_GROWTH = 10000


class SerializationMutator:
    """Length-prefix aware mutator with a whole-buffer corruption mode.

    Args:
        edits: Edits to choose from (all of them by default)
        max_growth: Buffers at or above this size get values overwritten
            instead of inserted

    """

    name = MutatorName.SERIALIZATION.value

    def __init__(
        self,
        edits: Iterable[SerializationEdit] | None = None,
        max_growth: int = DEFAULT_MAX_GROWTH,
    ) -> None:
        self.edits = tuple(edits) if edits is not None else tuple(SerializationEdit)
        if not self.edits:
            raise ValueError("At least one serialization edit is required")
        self.max_growth = max_growth
        self.catalog = INTERESTING_VALUES + SPECIAL_VALUES
        self._handlers = {
            SerializationEdit.MODIFY_VARINT: self._modify_var_int,
            SerializationEdit.MODIFY_VAR_BYTES: self._modify_var_bytes,
            SerializationEdit.MODIFY_ARRAY: self._modify_array,
            SerializationEdit.INSERT_INTERESTING_VALUE: self._insert_interesting_value,
            SerializationEdit.CORRUPT_FORMAT: self._corrupt_format,
        }

    @mutation_boundary
    def mutate(self, data: bytearray, rng: random.Random) -> bytearray:
        edit = rng.choice(self.edits)
        return self._handlers[edit](data, rng)

    @mutation_boundary
    def corrupt(self, data: bytearray, rng: random.Random) -> bytearray:
        """Deliberately damage the whole buffer."""
        return self._corrupt_format(data, rng)

    # Field-level edits

    def _modify_var_int(self, data: bytearray, rng: random.Random) -> bytearray:
        start = rng.randrange(len(data))
        for step in range(len(data)):
            offset = (start + step) % len(data)
            decoded = read_var_int(data, offset)
            if decoded is not None:
                break
        else:
            return self._overwrite_random_byte(data, rng)

        _, header_size = decoded
        choice = rng.randrange(3)
        if choice == 0:
            # New marker, old payload
            data[offset] = VARINT_MARKER_16 + rng.randrange(len(VARINT_WIDTHS))
        elif choice == 1:
            if header_size == 1:
                data[offset] = rng.randrange(VARINT_MARKER_16)
            else:
                for i in range(offset + 1, offset + header_size):
                    data[i] = rng.randrange(256)
        else:
            value = rng.choice(self.catalog)
            span = min(len(value), len(data) - offset)
            data[offset : offset + span] = value[:span]
        return data

    def _modify_var_bytes(self, data: bytearray, rng: random.Random) -> bytearray:
        found = find_length_prefixed_field(data, rng.randrange(len(data)))
        if found is None:
            return self._overwrite_random_byte(data, rng)

        offset, header_size, length = found
        payload = offset + header_size
        choice = rng.randrange(3)
        if choice == 0:
            return self._rewrite_length(data, rng, offset, header_size, length)
        if choice == 1:
            return self._corrupt_payload(data, rng, payload, length)

        pos = payload + rng.randrange(max(1, length))
        if pos + len(INVALID_UTF8) <= len(data):
            data[pos : pos + len(INVALID_UTF8)] = INVALID_UTF8
        return data

    def _modify_array(self, data: bytearray, rng: random.Random) -> bytearray:
        found = find_length_prefixed_field(
            data, rng.randrange(len(data)), require_payload=True
        )
        if found is None:
            return self._overwrite_random_byte(data, rng)

        offset, header_size, length = found
        payload = offset + header_size
        choice = rng.randrange(3)
        if choice == 0:
            return self._rewrite_length(data, rng, offset, header_size, length)
        if choice == 1:
            return self._corrupt_payload(data, rng, payload, length)

        if length >= 2:
            a = payload + rng.randrange(length)
            b = payload + rng.randrange(length)
            data[a], data[b] = data[b], data[a]
        return data

    def _insert_interesting_value(
        self, data: bytearray, rng: random.Random
    ) -> bytearray:
        value = rng.choice(self.catalog)
        pos = rng.randrange(len(data))

        if rng.randrange(2) == 0 and len(data) + len(value) < self.max_growth:
            data[pos:pos] = value
        else:
            span = min(len(value), len(data) - pos)
            data[pos : pos + span] = value[:span]
        return data

    # Whole-buffer corruption

    def _corrupt_format(self, data: bytearray, rng: random.Random) -> bytearray:
        kind = rng.choice(list(CorruptionKind))
        if kind is CorruptionKind.TRUNCATE:
            del data[rng.randrange(len(data)) :]
        elif kind is CorruptionKind.SPLICE_GARBAGE:
            pos = rng.randint(0, len(data))
            count = rng.randint(1, MAX_SPLICE)
            data[pos:pos] = bytes(rng.randrange(256) for _ in range(count))
        else:
            for _ in range(rng.randint(1, MAX_CORRUPT_FLIPS)):
                data[rng.randrange(len(data))] ^= 1 << rng.randrange(8)
        return data

    # Helpers

    def _rewrite_length(
        self,
        data: bytearray,
        rng: random.Random,
        offset: int,
        header_size: int,
        length: int,
    ) -> bytearray:
        """Replace the length marker, leaving the payload bytes untouched."""
        new_length = rng.randint(max(0, length - LENGTH_JITTER), length + LENGTH_JITTER)
        data[offset : offset + header_size] = encode_var_int(new_length)
        return data

    def _corrupt_payload(
        self, data: bytearray, rng: random.Random, payload: int, length: int
    ) -> bytearray:
        if length == 0:
            return self._overwrite_random_byte(data, rng)
        for _ in range(min(length, MAX_PAYLOAD_EDITS)):
            data[payload + rng.randrange(length)] = rng.randrange(256)
        return data

    def _overwrite_random_byte(self, data: bytearray, rng: random.Random) -> bytearray:
        data[rng.randrange(len(data))] = rng.randrange(256)
        return data

"""Compact variable-length integer codec.

Values below 0xFD take a single byte. Larger values are written as a marker
byte (0xFD, 0xFE, 0xFF) followed by a little-endian uint16, uint32 or uint64.
The format-aware mutator uses these helpers to find and rewrite length
prefixes without touching the payload that follows them.
"""

from __future__ import annotations

import struct

from io_fuzzer.core.constants import (
    VARINT_MARKER_16,
    VARINT_MARKER_32,
    VARINT_MARKER_64,
    VARINT_WIDTHS,
)

_FORMATS = {2: "<H", 4: "<I", 8: "<Q"}


def read_var_int(data: bytes | bytearray, offset: int) -> tuple[int, int] | None:
    """Decode a compact integer at ``offset``.

    Returns:
        ``(value, bytes_read)``, or None when the offset is out of range or the
        buffer ends before the marker's payload does.

    """
    if offset < 0 or offset >= len(data):
        return None

    first = data[offset]
    if first < VARINT_MARKER_16:
        return first, 1

    width = VARINT_WIDTHS[first]
    end = offset + 1 + width
    if end > len(data):
        return None

    (value,) = struct.unpack(_FORMATS[width], bytes(data[offset + 1 : end]))
    return value, 1 + width


def encode_var_int(value: int) -> bytes:
    """Encode a non-negative integer in its shortest compact form."""
    if value < 0:
        raise ValueError("compact integers are unsigned")
    if value < VARINT_MARKER_16:
        return bytes([value])
    if value <= 0xFFFF:
        return bytes([VARINT_MARKER_16]) + struct.pack("<H", value)
    if value <= 0xFFFFFFFF:
        return bytes([VARINT_MARKER_32]) + struct.pack("<I", value)
    return bytes([VARINT_MARKER_64]) + struct.pack("<Q", value & 0xFFFFFFFFFFFFFFFF)


def find_length_prefixed_field(
    data: bytes | bytearray, start: int = 0, require_payload: bool = False
) -> tuple[int, int, int] | None:
    """Locate a compact length marker whose payload fits in the buffer.

    The scan begins at ``start`` and wraps around to the beginning of the
    buffer, so a random ``start`` gives every field a chance to be picked.

    Args:
        data: Buffer to scan
        start: First offset to try
        require_payload: Skip zero-length fields

    Returns:
        ``(offset, header_size, length)`` of the first matching field, or None

    """
    size = len(data)
    if size == 0:
        return None

    for step in range(size):
        offset = (start + step) % size
        decoded = read_var_int(data, offset)
        if decoded is None:
            continue
        length, header_size = decoded
        if require_payload and length == 0:
            continue
        if offset + header_size + length <= size:
            return offset, header_size, length

    return None

"""Shared constants for the mutation core.

Boundary-value catalogs and compact-integer markers used across several
mutators. All tables are immutable module data.

References:
- AFL whitepaper: https://lcamtuf.coredump.cx/afl/technical_details.txt

"""

from __future__ import annotations

import struct
from enum import Enum
from typing import Final

# =============================================================================
# Boundary Values
# Zero/max/min of the 1-, 2-, 4- and 8-byte signed and unsigned ranges
# =============================================================================

#: Special byte patterns written over existing data by the value mutator
SPECIAL_VALUES: Final[tuple[bytes, ...]] = (
    b"\x00",  # Null byte
    b"\xff",  # UINT8_MAX
    b"\x7f",  # INT8_MAX
    b"\x80",  # INT8_MIN
    b"\x00\x00",  # Zero (2 bytes)
    b"\xff\xff",  # UINT16_MAX
    b"\x7f\xff",  # INT16_MAX
    b"\x80\x00",  # INT16_MIN
    b"\x00\x00\x00\x00",  # Zero (4 bytes)
    b"\xff\xff\xff\xff",  # UINT32_MAX
    b"\x7f\xff\xff\xff",  # INT32_MAX
    b"\x80\x00\x00\x00",  # INT32_MIN
    b"\x00" * 8,  # Zero (8 bytes)
    b"\xff" * 8,  # UINT64_MAX
    b"\x7f" + b"\xff" * 7,  # INT64_MAX
    b"\x80" + b"\x00" * 7,  # INT64_MIN
)

# =============================================================================
# Compact Variable-Length Integers
# One byte below 0xFD, otherwise a marker byte followed by a little-endian
# uint16 / uint32 / uint64
# =============================================================================

VARINT_MARKER_16: Final[int] = 0xFD
VARINT_MARKER_32: Final[int] = 0xFE
VARINT_MARKER_64: Final[int] = 0xFF

#: Marker byte -> payload width in bytes
VARINT_WIDTHS: Final[dict[int, int]] = {
    VARINT_MARKER_16: 2,
    VARINT_MARKER_32: 4,
    VARINT_MARKER_64: 8,
}

#: Values that stress length-prefixed decoders
INTERESTING_VALUES: Final[tuple[bytes, ...]] = (
    struct.pack("<i", 2147483647),  # INT32_MAX
    struct.pack("<i", -2147483648),  # INT32_MIN
    struct.pack("<q", 9223372036854775807),  # INT64_MAX
    struct.pack("<q", -9223372036854775808),  # INT64_MIN
    struct.pack("<i", 0),
    struct.pack("<i", 1),
    struct.pack("<i", -1),
    b"\xff" * 8,  # Varint 64-bit marker followed by junk
    b"\xfd\xff\xff",  # Varint 0xFFFF
    b"\xfe\xff\xff\xff\xff",  # Varint 0xFFFFFFFF
    b"IO",
    b"\xc0\xaf\xe0",  # Invalid UTF-8
)

#: Overlong two-byte UTF-8 sequence used to poison string payloads
INVALID_UTF8: Final[bytes] = b"\xc0\xaf"

# =============================================================================
# Mutator Names
# Stable names used as statistics keys in reports
# =============================================================================


class MutatorName(str, Enum):
    """Names of the built-in mutators.

    Inherits from str for easy serialization and logging.
    """

    BIT_FLIP = "BitFlip"
    BYTE_FLIP = "ByteFlip"
    ENDIANNESS = "Endianness"
    STRUCTURE = "Structure"
    VALUE = "Value"
    SERIALIZATION = "Serialization"


class StructureEdit(str, Enum):
    """Edits applied by the structure mutator."""

    INSERT = "insert"
    DELETE = "delete"
    DUPLICATE = "duplicate"
    SWAP = "swap"


class SerializationEdit(str, Enum):
    """Edits applied by the format-aware serialization mutator."""

    MODIFY_VARINT = "modify_varint"
    MODIFY_VAR_BYTES = "modify_var_bytes"
    MODIFY_ARRAY = "modify_array"
    INSERT_INTERESTING_VALUE = "insert_interesting_value"
    CORRUPT_FORMAT = "corrupt_format"


class CorruptionKind(str, Enum):
    """Whole-buffer corruptions used to probe error-handling paths."""

    TRUNCATE = "truncate"
    SPLICE_GARBAGE = "splice_garbage"
    FLIP_BITS = "flip_bits"

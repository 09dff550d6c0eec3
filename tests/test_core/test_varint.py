"""Tests for the compact variable-length integer helpers."""

import pytest

from io_fuzzer.core.varint import (
    encode_var_int,
    find_length_prefixed_field,
    read_var_int,
)


class TestEncodeVarInt:
    """Tests for encode_var_int."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, b"\x00"),
            (0xFC, b"\xfc"),
            (0xFD, b"\xfd\xfd\x00"),
            (0xFFFF, b"\xfd\xff\xff"),
            (0x10000, b"\xfe\x00\x00\x01\x00"),
            (0x100000000, b"\xff\x00\x00\x00\x00\x01\x00\x00\x00"),
        ],
    )
    def test_shortest_form(self, value, expected):
        assert encode_var_int(value) == expected

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            encode_var_int(-1)


class TestReadVarInt:
    """Tests for read_var_int."""

    def test_single_byte(self):
        assert read_var_int(b"\x05", 0) == (5, 1)

    def test_marker_with_payload(self):
        assert read_var_int(b"\x00\xfd\x34\x12", 1) == (0x1234, 3)

    def test_truncated_payload(self):
        assert read_var_int(b"\xfe\x01\x02", 0) is None

    @pytest.mark.parametrize("offset", [-1, 3, 10])
    def test_offset_out_of_range(self, offset):
        assert read_var_int(b"\x01\x02\x03", offset) is None

    @pytest.mark.parametrize("value", [0, 1, 0xFC, 0xFD, 0x1234, 0xFFFFFFFF])
    def test_decodes_encoded_values(self, value):
        encoded = encode_var_int(value)
        assert read_var_int(encoded, 0) == (value, len(encoded))


class TestFindLengthPrefixedField:
    """Tests for find_length_prefixed_field."""

    def test_empty_buffer(self):
        assert find_length_prefixed_field(b"") is None

    def test_finds_field_at_start(self):
        assert find_length_prefixed_field(b"\x03abc") == (0, 1, 3)

    def test_skips_fields_that_overrun(self):
        """0x09 claims nine bytes; the scan moves on to the next offset."""
        assert find_length_prefixed_field(b"\x09\x01\x00") == (1, 1, 1)

    def test_wraps_around_from_start(self):
        """Scanning from the end wraps to offset 0."""
        data = b"\x02ab\xfa"
        assert find_length_prefixed_field(data, start=3) == (0, 1, 2)

    def test_require_payload_skips_empty_fields(self):
        data = b"\x00\x01z"
        assert find_length_prefixed_field(data) == (0, 1, 0)
        assert find_length_prefixed_field(data, require_payload=True) == (1, 1, 1)

    def test_no_field_found(self):
        assert find_length_prefixed_field(b"\xfe\xfe", require_payload=True) is None

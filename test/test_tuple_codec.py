#!/usr/bin/env python3
"""Tests for the byte buffer tuple codec."""

import pytest

from walreader.errors import MalformedTupleError
from walreader.utils.tuple_codec import ByteBufferTuple


class TestByteBufferTuple:
    """Tests for ByteBufferTuple encoding and decoding."""

    @pytest.mark.parametrize("a, b", [
        (b"", b""),
        (b"block data", b""),
        (b"\x00" * 300, b"\xff" * 70000),
    ])
    def test_round_trip(self, a, b):
        """Test that decoding an encoded tuple yields the original tuple."""
        original = ByteBufferTuple(a=a, b=b)

        decoded = ByteBufferTuple.from_bytes(original.to_bytes())

        assert decoded == original

    def test_der_encoding(self):
        """Test the exact DER layout: a SEQUENCE of two OCTET STRINGs in order."""
        encoded = ByteBufferTuple(a=b"ab", b=b"").to_bytes()

        assert encoded == b"\x30\x06\x04\x02ab\x04\x00"

    def test_encoding_is_deterministic(self):
        """Test that identical tuples always encode to identical bytes."""
        first = ByteBufferTuple(a=b"payload", b=b"metadata").to_bytes()
        second = ByteBufferTuple(a=b"payload", b=b"metadata").to_bytes()

        assert first == second

    def test_wrong_outer_tag(self):
        """Test that a value which is not a SEQUENCE is rejected."""
        with pytest.raises(MalformedTupleError):
            ByteBufferTuple.from_bytes(b"\x04\x00")

    def test_wrong_field_tag(self):
        """Test that a non OCTET STRING field is rejected."""
        with pytest.raises(MalformedTupleError):
            ByteBufferTuple.from_bytes(b"\x30\x07\x02\x01\x01\x04\x02ab")

    def test_truncated_input(self):
        """Test that a declared length longer than the data is rejected."""
        with pytest.raises(MalformedTupleError):
            ByteBufferTuple.from_bytes(b"\x30\x06\x04\x02ab")

    def test_trailing_garbage(self):
        """Test that bytes after the encoded tuple are rejected."""
        encoded = ByteBufferTuple(a=b"ab", b=b"cd").to_bytes()

        with pytest.raises(MalformedTupleError):
            ByteBufferTuple.from_bytes(encoded + b"\x00")

    def test_empty_input(self):
        """Test that empty input is rejected."""
        with pytest.raises(MalformedTupleError):
            ByteBufferTuple.from_bytes(b"")

    @pytest.mark.parametrize("encoded", [
        bytes.fromhex("3080040004000000"),
        bytes.fromhex("3006040004000400"),
        bytes.fromhex("308106040161040162"),
    ], ids=["indefinite-length", "extra-element", "long-form-length"])
    def test_rejects_non_der_encodings(self, encoded):
        """Test that BER forms which a lenient parser would accept are rejected."""
        with pytest.raises(MalformedTupleError):
            ByteBufferTuple.from_bytes(encoded)

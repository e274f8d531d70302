#!/usr/bin/env python3
"""DER codec for the byte buffer tuple.

A proposal payload multiplexes two independently serialized messages (the
block data and the block metadata) through a single ASN.1 value:

    ByteBufferTuple ::= SEQUENCE {
        a OCTET STRING,
        b OCTET STRING
    }
"""

from dataclasses import dataclass

from asn1crypto.core import OctetString, Sequence

from ..errors import MalformedTupleError


class _Asn1ByteBufferTuple(Sequence):
    _fields = [
        ("a", OctetString),
        ("b", OctetString),
    ]


@dataclass(frozen=True, slots=True)
class ByteBufferTuple:
    """Two byte strings packed into one DER sequence.

    Attributes:
        a: First element (serialized block data in a proposal payload)
        b: Second element (serialized block metadata in a proposal payload)
    """
    a: bytes
    b: bytes

    def to_bytes(self) -> bytes:
        """Encode the tuple as DER.

        Returns:
            Deterministic DER encoding of the two octet strings in order
        """
        return _Asn1ByteBufferTuple({"a": bytes(self.a), "b": bytes(self.b)}).dump()

    @classmethod
    def from_bytes(cls, data: bytes) -> "ByteBufferTuple":
        """Decode a DER-encoded tuple.

        Args:
            data: Bytes produced by ``to_bytes`` or an equivalent encoder

        Returns:
            The decoded tuple

        Raises:
            MalformedTupleError: On a wrong tag, truncated length or trailing data
        """
        try:
            native = _Asn1ByteBufferTuple.load(data, strict=True).native
        except (ValueError, TypeError) as e:
            raise MalformedTupleError(f"invalid byte buffer tuple: {e}") from e

        decoded = cls(a=native["a"], b=native["b"])
        # BER forms (indefinite length, extra elements) parse but do not re-encode identically
        if decoded.to_bytes() != bytes(data):
            raise MalformedTupleError("invalid byte buffer tuple: not a DER encoding")
        return decoded

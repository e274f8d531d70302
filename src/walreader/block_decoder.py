#!/usr/bin/env python3
"""Block envelope decoding for SmartBFT proposals.

A proposal produced by the Fabric BFT orderer carries the block header as a
DER-encoded triple and the block body as a byte buffer tuple of the
serialized ``BlockData`` and ``BlockMetadata`` messages. This module turns a
proposal back into a Fabric ``common.Block`` and computes the block hash.
"""

import hashlib
import logging
from dataclasses import dataclass

from asn1crypto.core import Integer, OctetString, Sequence
from google.protobuf.message import DecodeError as ProtobufDecodeError

from . import protos
from .errors import (
    BadBlockDataError,
    BadBlockMetadataError,
    BadHeaderError,
    BadPayloadTupleError,
    BlockNumberOverflowError,
    EmptyHeaderError,
    EmptyPayloadError,
    MalformedTupleError,
)
from .utils.tuple_codec import ByteBufferTuple

# Get logger for this module
logger = logging.getLogger(__name__)

MAX_BLOCK_NUMBER = 2**64 - 1


class _Asn1BlockHeader(Sequence):
    _fields = [
        ("number", Integer),
        ("previous_hash", OctetString),
        ("data_hash", OctetString),
    ]


@dataclass(frozen=True, slots=True)
class BlockHeaderTriple:
    """The ASN.1 block header as carried in a proposal.

    ``number`` is kept at arbitrary precision; use ``block_number`` to narrow it.
    """
    number: int
    previous_hash: bytes
    data_hash: bytes

    def to_bytes(self) -> bytes:
        """DER-encode the header triple."""
        return _Asn1BlockHeader({
            "number": self.number,
            "previous_hash": bytes(self.previous_hash),
            "data_hash": bytes(self.data_hash),
        }).dump()

    @classmethod
    def from_bytes(cls, data: bytes) -> "BlockHeaderTriple":
        """Decode a DER-encoded header triple.

        Raises:
            BadHeaderError: If the bytes are not a valid header encoding
        """
        try:
            native = _Asn1BlockHeader.load(data, strict=True).native
        except (ValueError, TypeError) as e:
            raise BadHeaderError(f"bad header: {e}") from e

        header = cls(
            number=native["number"],
            previous_hash=native["previous_hash"],
            data_hash=native["data_hash"],
        )
        if header.to_bytes() != bytes(data):
            raise BadHeaderError("bad header: not a DER encoding")
        return header

    @property
    def block_number(self) -> int:
        """The header number narrowed to an unsigned 64-bit value.

        Raises:
            BlockNumberOverflowError: If the number does not fit in a uint64
        """
        if not 0 <= self.number <= MAX_BLOCK_NUMBER:
            raise BlockNumberOverflowError(f"block number {self.number} does not fit in uint64")
        return self.number


def block_header_bytes(block_header: protos.BlockHeader) -> bytes:
    """DER encoding of a Fabric block header, as hashed by the ledger."""
    return BlockHeaderTriple(
        number=block_header.number,
        previous_hash=block_header.previous_hash,
        data_hash=block_header.data_hash,
    ).to_bytes()


def block_header_hash(block_header: protos.BlockHeader) -> bytes:
    """SHA-256 of the DER-encoded block header."""
    return hashlib.sha256(block_header_bytes(block_header)).digest()


def decode_proposal(proposal: protos.Proposal) -> protos.Block:
    """Reconstruct the Fabric block carried by a consensus proposal.

    Args:
        proposal: SmartBFT proposal from a pre-prepare message

    Returns:
        The Fabric block assembled from the header, data and metadata

    Raises:
        EmptyHeaderError: If the proposal has no header bytes
        EmptyPayloadError: If the proposal has no payload bytes
        BadHeaderError: If the header is not a valid ASN.1 triple
        BlockNumberOverflowError: If the block number exceeds uint64
        BadPayloadTupleError: If the payload is not a byte buffer tuple
        BadBlockDataError: If the first tuple element is not a BlockData message
        BadBlockMetadataError: If the second tuple element is not a BlockMetadata message
    """
    if not proposal.header:
        raise EmptyHeaderError("proposal header cannot be empty")
    if not proposal.payload:
        raise EmptyPayloadError("proposal payload cannot be empty")

    header = BlockHeaderTriple.from_bytes(proposal.header)
    block_number = header.block_number

    try:
        payload_tuple = ByteBufferTuple.from_bytes(proposal.payload)
    except MalformedTupleError as e:
        raise BadPayloadTupleError(f"bad payload and metadata tuple: {e}") from e

    try:
        block_data = protos.BlockData.FromString(payload_tuple.a)
    except ProtobufDecodeError as e:
        raise BadBlockDataError(f"bad payload: {e}") from e

    try:
        block_metadata = protos.BlockMetadata.FromString(payload_tuple.b)
    except ProtobufDecodeError as e:
        raise BadBlockMetadataError(f"bad metadata: {e}") from e

    block = protos.Block()
    block.header.number = block_number
    block.header.previous_hash = header.previous_hash
    block.header.data_hash = header.data_hash
    block.data.CopyFrom(block_data)
    block.metadata.CopyFrom(block_metadata)

    logger.debug(
        f"Decoded proposal for block {block_number}: "
        f"{len(block_data.data)} data entries, {len(block_metadata.metadata)} metadata entries"
    )
    return block

#!/usr/bin/env python3
"""Sequential reader for SmartBFT write-ahead log segments.

Physical record layout (all records are 8-byte aligned):

    +----------------------+----------------------+-------------------+---------+
    | body length (uint32) | CRC-32C (uint32)     | LogRecord body    | padding |
    | header bits 0-31     | header bits 32-63    | (length bytes)    | to 8    |
    +----------------------+----------------------+-------------------+---------+

The header is one little-endian uint64. CRCs form a chain across records:
each non-anchor record's CRC is the CRC-32C of its body seeded with the
previous record's CRC. Every segment starts with a CRC_ANCHOR record whose
header CRC seeds the chain for that segment.
"""

import logging
import os
import struct
from dataclasses import dataclass, field

import crc32c
from google.protobuf.message import DecodeError as ProtobufDecodeError

from . import protos
from .errors import (
    BadLogRecordError,
    ChecksumMismatchError,
    PossiblyRepairableError,
    ReadFailureError,
    SegmentReadError,
    TruncatedRecordError,
)
from .protos import LogRecordType

# Get logger for this module
logger = logging.getLogger(__name__)

RECORD_HEADER_SIZE = 8
RECORD_ALIGNMENT = 8
_RECORD_HEADER = struct.Struct("<Q")
_LENGTH_MASK = 0xFFFFFFFF


def pad_size(length: int) -> int:
    """Number of zero bytes that follow a record body of ``length`` bytes."""
    return (RECORD_ALIGNMENT - length % RECORD_ALIGNMENT) % RECORD_ALIGNMENT


class LogRecordReader:
    """Reads one physical record at a time from a segment file.

    Use as a context manager so the file handle is released on every exit
    path.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        """
        Open a segment for reading.

        Args:
            path: Path to the segment file

        Raises:
            OSError: If the file cannot be opened
        """
        self.path = os.fspath(path)
        self.records_read = 0
        self._crc = 0
        self._file = open(self.path, "rb")

    def __enter__(self) -> "LogRecordReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._file.close()

    @property
    def crc(self) -> int:
        """Running CRC after the last record read."""
        return self._crc

    def _read_exact(self, size: int, allow_eof: bool = False) -> bytes | None:
        data = self._file.read(size)
        if len(data) == size:
            return data
        if not data and allow_eof:
            return None
        raise TruncatedRecordError(
            f"unexpected end of file after record #{self.records_read}: "
            f"wanted {size} bytes, got {len(data)}"
        )

    def read(self) -> protos.LogRecord | None:
        """Read the next physical record.

        Returns:
            The decoded record, or None at a clean end of file

        Raises:
            TruncatedRecordError: If the file ends inside a record
            ChecksumMismatchError: If a record body breaks the CRC chain
            BadLogRecordError: If the body is not a LogRecord or the first
                record is not a CRC anchor
            OSError: On any other I/O failure
        """
        header = self._read_exact(RECORD_HEADER_SIZE, allow_eof=True)
        if header is None:
            return None

        (value,) = _RECORD_HEADER.unpack(header)
        length = value & _LENGTH_MASK
        expected_crc = value >> 32

        body = self._read_exact(length + pad_size(length))[:length]

        try:
            record = protos.LogRecord.FromString(body)
        except ProtobufDecodeError as e:
            raise BadLogRecordError(
                f"failed to read record #{self.records_read + 1} from log file: {self.path}: {e}"
            ) from e

        if self.records_read == 0 and record.type != LogRecordType.CRC_ANCHOR:
            raise BadLogRecordError(f"failed reading CRC-Anchor from log file: {self.path}")

        if record.type != LogRecordType.CRC_ANCHOR:
            actual_crc = crc32c.crc32c(body, value=self._crc)
            if actual_crc != expected_crc:
                raise ChecksumMismatchError(
                    f"record #{self.records_read + 1}: CRC {actual_crc:08X} "
                    f"does not match expected {expected_crc:08X}"
                )

        self._crc = expected_crc
        self.records_read += 1
        return record


@dataclass(slots=True)
class SegmentReadResult:
    """Outcome of scanning one segment.

    ``payloads`` holds the ENTRY record bodies read before the scan ended,
    also when ``error`` is set.

    Attributes:
        path: Segment path
        payloads: Raw ENTRY payloads in log order
        records_read: Number of physical records read, including anchors and
            control records
        crc: Running CRC when the scan ended
        error: None for a clean end of file, otherwise the termination error
    """
    path: str
    payloads: list[bytes] = field(default_factory=list)
    records_read: int = 0
    crc: int = 0
    error: SegmentReadError | None = None


def read_segment(path: str | os.PathLike[str]) -> SegmentReadResult:
    """Scan a segment and collect every ENTRY payload.

    Termination is classified instead of raised: a clean end of file yields
    no error, a truncated record or CRC mismatch yields a
    ``PossiblyRepairableError`` and anything else yields a
    ``ReadFailureError``. Payloads read before the failure are always kept.

    Args:
        path: Path to the segment file

    Returns:
        The payloads read and the termination status
    """
    result = SegmentReadResult(path=os.fspath(path))

    try:
        with LogRecordReader(path) as reader:
            try:
                while (record := reader.read()) is not None:
                    if record.type == LogRecordType.ENTRY:
                        result.payloads.append(bytes(record.data))
                    logger.debug(f"Read record #{reader.records_read}, file: {result.path}")

                logger.debug(f"Reached EOF, finished reading file; CRC: {reader.crc:08X}")
            finally:
                result.records_read = reader.records_read
                result.crc = reader.crc

    except (TruncatedRecordError, ChecksumMismatchError) as e:
        result.error = PossiblyRepairableError(result.path, e)
    except (BadLogRecordError, OSError) as e:
        result.error = ReadFailureError(result.path, e)

    return result

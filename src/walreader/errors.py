#!/usr/bin/env python3
"""Exception hierarchy for the WAL reader.

Segment termination errors (``PossiblyRepairableError``, ``ReadFailureError``)
are returned to the caller together with the payloads read so far. Every
decode-time error is raised, chained to its underlying cause, and names the
decode stage that failed so corruption classes can be told apart.
"""


class WalReaderError(Exception):
    """Base class for every error raised or returned by this package."""


class MalformedTupleError(WalReaderError):
    """Bytes are not a DER encoding of the two-field byte buffer tuple."""


class TruncatedRecordError(WalReaderError):
    """The segment ended in the middle of a record header or body."""


class ChecksumMismatchError(WalReaderError):
    """A record body does not match the CRC chain recorded in its header."""


class BadLogRecordError(WalReaderError):
    """A record body is not a valid LogRecord, or the segment lacks its CRC anchor."""


class SegmentReadError(WalReaderError):
    """A log segment scan ended with something other than a clean EOF.

    Attributes:
        path: Path of the segment that was being read
        cause: The underlying exception reported by the physical reader
    """

    def __init__(self, message: str, path: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause
        self.__cause__ = cause


class PossiblyRepairableError(SegmentReadError):
    """Truncated record or checksum mismatch; results up to that point are valid."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        super().__init__(
            f"received an error in the file, this can possibly be repaired; "
            f"file: {path}; error: {cause}",
            path,
            cause,
        )


class ReadFailureError(SegmentReadError):
    """Any other failure while reading a segment."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        super().__init__(f"failed reading file: {path}; error: {cause}", path, cause)


class DecodeError(WalReaderError):
    """A record payload could not be decoded.

    Attributes:
        stage: Short name of the decode step that failed
    """

    stage: str = "record"

    def __init__(self, message: str) -> None:
        super().__init__(f"{self.stage}: {message}")


class BadEnvelopeError(DecodeError):
    stage = "saved message"


class BadViewMetadataError(DecodeError):
    stage = "view metadata"


class ProposalError(DecodeError):
    """The proposal carried in a proposed record is malformed."""


class EmptyHeaderError(ProposalError):
    stage = "proposal header"


class EmptyPayloadError(ProposalError):
    stage = "proposal payload"


class BadHeaderError(ProposalError):
    stage = "block header"


class BlockNumberOverflowError(ProposalError):
    stage = "block number"


class BadPayloadTupleError(ProposalError):
    stage = "payload and metadata tuple"


class BadBlockDataError(ProposalError):
    stage = "block data"


class BadBlockMetadataError(ProposalError):
    stage = "block metadata"


class TransactionError(DecodeError):
    """A transaction inside a proposed block could not be extracted.

    Attributes:
        tx_index: Position of the failing transaction within the block
    """

    def __init__(self, message: str, tx_index: int) -> None:
        super().__init__(f"transaction #{tx_index}: {message}")
        self.tx_index = tx_index


class BadCreatorError(TransactionError):
    stage = "creator"


class BadSignatureError(TransactionError):
    stage = "creator signature"


class BadChannelHeaderError(TransactionError):
    stage = "channel header"


class BadChaincodeRefError(TransactionError):
    stage = "chaincode ID"


class RecordDecodeError(WalReaderError):
    """Decoding a record failed; names the file and the record position.

    The original ``DecodeError`` is available as ``__cause__``.
    """

    def __init__(self, path: str, index: int, cause: DecodeError) -> None:
        super().__init__(f"failed decoding record #{index} of {path}: {cause}")
        self.path = path
        self.index = index
        self.cause = cause

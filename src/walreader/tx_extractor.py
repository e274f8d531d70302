#!/usr/bin/env python3
"""Transaction extraction from decoded Fabric blocks.

Each entry of ``BlockData.data`` is a serialized ``common.Envelope``. This
module unwraps the envelope layers of every entry to recover who submitted
the transaction, its signature, its channel header and the chaincode it
invokes, and assembles the ``Block`` model returned to callers.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from google.protobuf.message import DecodeError as ProtobufDecodeError
from hexbytes import HexBytes

from . import protos
from .block_decoder import block_header_hash, decode_proposal
from .errors import (
    BadChaincodeRefError,
    BadChannelHeaderError,
    BadCreatorError,
    BadSignatureError,
    TransactionError,
)
from .models import Block, ChaincodeID, Creator, Tx
from .protos import HeaderType

# Get logger for this module
logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_M = TypeVar("_M")


def _parse(message_class: type[_M], data: bytes, what: str,
           error: type[TransactionError], tx_index: int) -> _M:
    """Deserialize one envelope layer, mapping failures to ``error``."""
    try:
        return message_class.FromString(data)
    except ProtobufDecodeError as e:
        raise error(f"error unmarshaling {what}: {e}", tx_index) from e


class TransactionEnvelope:
    """Accessors over one serialized transaction envelope.

    Every accessor decodes the layers it needs and raises the error class
    that names its own extraction step.
    """

    def __init__(self, raw: bytes, tx_index: int) -> None:
        self.raw = raw
        self.tx_index = tx_index

    def _payload(self, error: type[TransactionError]) -> protos.Payload:
        envelope = _parse(protos.Envelope, self.raw, "Envelope", error, self.tx_index)
        payload = _parse(protos.Payload, envelope.payload, "Payload", error, self.tx_index)
        if not payload.HasField("header"):
            raise error("payload header is missing", self.tx_index)
        return payload

    def creator(self) -> Creator:
        """MSP ID and PEM certificate of the submitting identity."""
        payload = self._payload(BadCreatorError)
        signature_header = _parse(
            protos.SignatureHeader, payload.header.signature_header,
            "SignatureHeader", BadCreatorError, self.tx_index
        )
        identity = _parse(
            protos.SerializedIdentity, signature_header.creator,
            "SerializedIdentity", BadCreatorError, self.tx_index
        )
        return Creator(msp_id=identity.mspid, cert=bytes(identity.id_bytes))

    def creator_signature_hex(self) -> str:
        """The creator's signature over the payload as lowercase hex."""
        envelope = _parse(protos.Envelope, self.raw, "Envelope", BadSignatureError, self.tx_index)
        return HexBytes(envelope.signature).hex()

    def channel_header(self) -> protos.ChannelHeader:
        payload = self._payload(BadChannelHeaderError)
        return _parse(
            protos.ChannelHeader, payload.header.channel_header,
            "ChannelHeader", BadChannelHeaderError, self.tx_index
        )

    def chaincode_name(self) -> str:
        """Name of the chaincode invoked by the first transaction action."""
        payload = self._payload(BadChaincodeRefError)
        transaction = _parse(
            protos.Transaction, payload.data, "Transaction", BadChaincodeRefError, self.tx_index
        )
        if not transaction.actions:
            raise BadChaincodeRefError("transaction has no actions", self.tx_index)

        action_payload = _parse(
            protos.ChaincodeActionPayload, transaction.actions[0].payload,
            "ChaincodeActionPayload", BadChaincodeRefError, self.tx_index
        )
        proposal_payload = _parse(
            protos.ChaincodeProposalPayload, action_payload.chaincode_proposal_payload,
            "ChaincodeProposalPayload", BadChaincodeRefError, self.tx_index
        )
        invocation_spec = _parse(
            protos.ChaincodeInvocationSpec, proposal_payload.input,
            "ChaincodeInvocationSpec", BadChaincodeRefError, self.tx_index
        )
        return invocation_spec.chaincode_spec.chaincode_id.name


def timestamp_to_datetime(channel_header: protos.ChannelHeader, tx_index: int = 0) -> datetime:
    """Channel header timestamp as an aware UTC datetime (epoch when unset).

    Raises:
        BadChannelHeaderError: If the timestamp is outside the datetime range
    """
    timestamp = channel_header.timestamp
    try:
        return _EPOCH + timedelta(seconds=timestamp.seconds, microseconds=timestamp.nanos // 1000)
    except (OverflowError, ValueError) as e:
        raise BadChannelHeaderError(
            f"timestamp out of range: {timestamp.seconds}s {timestamp.nanos}ns: {e}", tx_index
        ) from e


def is_config_block(block: protos.Block) -> bool:
    """Whether the block holds a single CONFIG transaction.

    Any decoding problem while probing means "not a config block"; real
    extraction errors surface from ``extract_transactions``.
    """
    if len(block.data.data) != 1:
        return False

    try:
        envelope = protos.Envelope.FromString(block.data.data[0])
        payload = protos.Payload.FromString(envelope.payload)
        if not payload.HasField("header"):
            return False
        channel_header = protos.ChannelHeader.FromString(payload.header.channel_header)
    except ProtobufDecodeError:
        return False

    return channel_header.type == HeaderType.CONFIG


def extract_transactions(block_data: protos.BlockData, is_config: bool) -> tuple[Tx, ...]:
    """Extract one ``Tx`` per block data entry, preserving commit order.

    Args:
        block_data: Decoded block body
        is_config: Whether the owning block is a configuration block; when set,
            chaincode extraction is skipped and ``chaincode_id`` stays None

    Returns:
        All transactions of the block

    Raises:
        TransactionError: If any single transaction fails extraction; no
            partial list is ever returned
    """
    transactions: list[Tx] = []

    for index, raw in enumerate(block_data.data):
        envelope = TransactionEnvelope(raw, index)

        creator = envelope.creator()
        creator_signature = envelope.creator_signature_hex()
        channel_header = envelope.channel_header()

        chaincode_id: ChaincodeID | None = None
        # config transactions carry no chaincode invocation payload
        if not is_config:
            chaincode_id = ChaincodeID(
                name=envelope.chaincode_name(),
                version=channel_header.version,
            )

        transactions.append(Tx(
            tx_id=channel_header.tx_id,
            creator=creator,
            creator_signature=creator_signature,
            chaincode_id=chaincode_id,
            channel_id=channel_header.channel_id,
            timestamp=timestamp_to_datetime(channel_header, index),
        ))

    return tuple(transactions)


def block_info(block: protos.Block) -> Block:
    """Build the ``Block`` model from a Fabric block."""
    is_config = is_config_block(block)
    txs = extract_transactions(block.data, is_config)

    logger.debug(f"Extracted {len(txs)} transactions from block {block.header.number}")
    return Block(
        txs=txs,
        is_config=is_config,
        hash=HexBytes(block_header_hash(block.header)),
        previous_block_hash=HexBytes(block.header.previous_hash),
        block_number=block.header.number,
    )


def block_info_from_proposal(proposal: protos.Proposal) -> Block:
    """Decode a proposal's block envelope and extract its transactions.

    Raises:
        ProposalError: If the block envelope cannot be decoded
        TransactionError: If any transaction cannot be extracted
    """
    return block_info(decode_proposal(proposal))

#!/usr/bin/env python3
"""Decoding of WAL entry payloads into consensus messages.

Every ENTRY payload is a serialized ``SavedMessage``. Commit, new-view and
view-change records are passed through as plain values; proposed records are
expanded into the full block they carry.
"""

import logging

from google.protobuf.message import DecodeError as ProtobufDecodeError

from . import protos
from .errors import BadEnvelopeError, BadViewMetadataError
from .models import (
    CommitRecord,
    ConsensusMessage,
    NewViewRecord,
    PrepareInfo,
    PrePrepareInfo,
    ProposedBlockRecord,
    SignatureInfo,
    SignedViewDataInfo,
    ViewChangeRecord,
    ViewMetadataInfo,
)
from .tx_extractor import block_info_from_proposal

# Get logger for this module
logger = logging.getLogger(__name__)


def _commit_record(message: protos.Message) -> CommitRecord:
    commit = message.commit
    return CommitRecord(
        view=commit.view,
        seq=commit.seq,
        digest=commit.digest,
        signature=SignatureInfo(signer=commit.signature.signer, value=bytes(commit.signature.value)),
        assist=commit.assist,
    )


def _new_view_record(message: protos.Message) -> NewViewRecord:
    return NewViewRecord(signed_view_data=tuple(
        SignedViewDataInfo(
            signer=svd.signer,
            raw_view_data=bytes(svd.raw_view_data),
            signature=bytes(svd.signature),
        )
        for svd in message.new_view.signed_view_data
    ))


def _proposed_block_record(record: protos.ProposedRecord) -> ProposedBlockRecord:
    proposal = record.pre_prepare.proposal

    try:
        metadata = protos.ViewMetadata.FromString(proposal.metadata)
    except ProtobufDecodeError as e:
        raise BadViewMetadataError(f"error unmarshaling ViewMetadata: {e}") from e

    block = block_info_from_proposal(proposal)

    return ProposedBlockRecord(
        pre_prepare=PrePrepareInfo(
            view=record.pre_prepare.view,
            seq=record.pre_prepare.seq,
            payload_size=len(proposal.payload),
            verification_sequence=proposal.verification_sequence,
        ),
        view_metadata=ViewMetadataInfo(
            view_id=metadata.view_id,
            latest_sequence=metadata.latest_sequence,
            decisions_in_view=metadata.decisions_in_view,
        ),
        prepare=PrepareInfo(
            view=record.prepare.view,
            seq=record.prepare.seq,
            digest=record.prepare.digest,
            assist=record.prepare.assist,
        ),
        block=block,
    )


def decode_message(payload: bytes) -> ConsensusMessage:
    """Decode one WAL entry payload.

    Args:
        payload: Raw ENTRY payload from ``read_segment``

    Returns:
        The decoded message; proposed records include their ``Block``

    Raises:
        BadEnvelopeError: If the payload is not a SavedMessage with content
        BadViewMetadataError: If a proposal's view metadata is malformed
        ProposalError: If a proposal's block envelope is malformed
        TransactionError: If a transaction of the proposed block is malformed
    """
    try:
        saved_message = protos.SavedMessage.FromString(payload)
    except ProtobufDecodeError as e:
        raise BadEnvelopeError(f"error unmarshaling SavedMessage: {e}") from e

    match saved_message.WhichOneof("content"):
        case "commit":
            return _commit_record(saved_message.commit)
        case "new_view":
            return _new_view_record(saved_message.new_view)
        case "view_change":
            view_change = saved_message.view_change
            return ViewChangeRecord(next_view=view_change.next_view, reason=view_change.reason)
        case "proposed_record":
            return _proposed_block_record(saved_message.proposed_record)
        case None:
            raise BadEnvelopeError("saved message has no content")
        case other:
            raise BadEnvelopeError(f"unsupported saved message content: {other}")

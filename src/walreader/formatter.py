#!/usr/bin/env python3
"""Human-readable rendering of decoded WAL records."""

import base64

from .models import (
    Block,
    CommitRecord,
    ConsensusMessage,
    NewViewRecord,
    ProposedBlockRecord,
    Tx,
    ViewChangeRecord,
)


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def format_block_header(record: ProposedBlockRecord) -> str:
    pre_prepare = record.pre_prepare
    metadata = record.view_metadata
    prepare = record.prepare
    block = record.block
    return (
        f"Preprepare: <view: {pre_prepare.view}, sequence: {pre_prepare.seq}, "
        f"payload of {pre_prepare.payload_size} bytes> "
        f"metadata: <last sequence: {metadata.latest_sequence}, view ID: {metadata.view_id}, "
        f"decisions in view: {metadata.decisions_in_view}>, "
        f"verification sequence: {pre_prepare.verification_sequence}\n"
        f"Prepare: <view: {prepare.view}, sequence: {prepare.seq}, "
        f"assist: {str(prepare.assist).lower()}, digest: {prepare.digest}>\n"
        f"Proposed block: <config: {str(block.is_config).lower()}, hash: {b64(block.hash)}, "
        f"previous hash: {b64(block.previous_block_hash)}, block number: {block.block_number}>"
    )


def format_tx(tx: Tx) -> str:
    """Render one transaction, including the creator's PEM certificate."""
    if tx.chaincode_id is not None:
        chaincode = f"chaincode ID: {tx.chaincode_id.name}, chaincode version: {tx.chaincode_id.version}"
    else:
        chaincode = "chaincode ID: <none>"

    return (
        f"tx ID: {tx.tx_id}, creator's MSP ID: {tx.creator.msp_id}, "
        f"creator's signature: {tx.creator_signature}\n"
        f"creator's cert:\n {tx.creator.cert.decode('utf-8', errors='replace')}\n"
        f"{chaincode}, channel ID: {tx.channel_id}, "
        f"timestamp: {tx.timestamp.astimezone().isoformat()}"
    )


def format_transactions(block: Block) -> list[str]:
    return [f"Transactions from block {block.block_number}:"] + [format_tx(tx) for tx in block.txs]


def format_record(index: int, record: ConsensusMessage) -> list[str]:
    """Render a decoded record as log-ready text blocks.

    Args:
        index: Position of the record among the segment's ENTRY payloads
        record: Decoded consensus message

    Returns:
        One text block for the record itself, followed for proposed blocks by
        a transactions heading and one block per transaction
    """
    match record:
        case CommitRecord():
            return [
                f"print #{index} record (Commit)\n"
                f"Digest: {record.digest} View: {record.view} Sequence: {record.seq}\n"
                f"Signature: <signer: {record.signature.signer} "
                f"base64-encoded signature: {b64(record.signature.value)}>"
            ]
        case NewViewRecord():
            entries = "\n".join(
                f"signed view data: <signer: {svd.signer}, "
                f"view data of {len(svd.raw_view_data)} bytes, "
                f"base64-encoded signature: {b64(svd.signature)}>"
                for svd in record.signed_view_data
            )
            return [f"print #{index} record (New view)\n{entries or '<no signed view data>'}"]
        case ViewChangeRecord():
            return [
                f"print #{index} record (View change)\n"
                f"next view: {record.next_view}, reason: {record.reason}"
            ]
        case ProposedBlockRecord():
            return [
                f"print #{index} record (Proposed record)\n{format_block_header(record)}",
                *format_transactions(record.block),
            ]
        case _:
            raise TypeError(f"unsupported record type: {type(record).__name__}")

#!/usr/bin/env python3
"""Data models for decoded WAL records.

Immutable data classes for the consensus messages found in a SmartBFT WAL
and for the Fabric block reconstructed from a proposed record.
"""

from dataclasses import dataclass
from datetime import datetime

from hexbytes import HexBytes


@dataclass(frozen=True, slots=True)
class Creator:
    """Identity that submitted a transaction.

    Attributes:
        msp_id: Membership service provider that issued the certificate
        cert: PEM-encoded certificate bytes
    """
    msp_id: str
    cert: bytes


@dataclass(frozen=True, slots=True)
class ChaincodeID:
    """Chaincode invoked by a transaction.

    Attributes:
        name: Chaincode name from the invocation spec
        version: Schema version taken from the transaction's channel header
    """
    name: str
    version: int


@dataclass(frozen=True, slots=True)
class Tx:
    """One transaction of a proposed block.

    ``chaincode_id`` is None for transactions of a configuration block,
    which carry no chaincode invocation.
    """
    tx_id: str
    creator: Creator
    creator_signature: str
    chaincode_id: ChaincodeID | None
    channel_id: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Block:
    """A Fabric block reconstructed from a consensus proposal.

    Attributes:
        txs: Transactions in commit order
        is_config: Whether this is a channel configuration block
        hash: SHA-256 of the DER-encoded block header
        previous_block_hash: Hash of the previous block, copied from the header
        block_number: Block number narrowed to an unsigned 64-bit value
    """
    txs: tuple[Tx, ...]
    is_config: bool
    hash: HexBytes
    previous_block_hash: HexBytes
    block_number: int

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"Block(number={self.block_number}, "
            f"config={self.is_config}, "
            f"txs={len(self.txs)})"
        )


@dataclass(frozen=True, slots=True)
class SignatureInfo:
    signer: int
    value: bytes


@dataclass(frozen=True, slots=True)
class SignedViewDataInfo:
    signer: int
    raw_view_data: bytes
    signature: bytes


@dataclass(frozen=True, slots=True)
class PrePrepareInfo:
    view: int
    seq: int
    payload_size: int
    verification_sequence: int


@dataclass(frozen=True, slots=True)
class PrepareInfo:
    view: int
    seq: int
    digest: str
    assist: bool


@dataclass(frozen=True, slots=True)
class ViewMetadataInfo:
    view_id: int
    latest_sequence: int
    decisions_in_view: int


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A saved commit message."""
    view: int
    seq: int
    digest: str
    signature: SignatureInfo
    assist: bool


@dataclass(frozen=True, slots=True)
class NewViewRecord:
    """A saved new-view message with the signed view data it collected."""
    signed_view_data: tuple[SignedViewDataInfo, ...]


@dataclass(frozen=True, slots=True)
class ViewChangeRecord:
    """A saved view-change message."""
    next_view: int
    reason: str


@dataclass(frozen=True, slots=True)
class ProposedBlockRecord:
    """A saved pre-prepare/prepare pair together with its decoded block."""
    pre_prepare: PrePrepareInfo
    view_metadata: ViewMetadataInfo
    prepare: PrepareInfo
    block: Block


ConsensusMessage = CommitRecord | NewViewRecord | ViewChangeRecord | ProposedBlockRecord

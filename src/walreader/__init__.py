"""
SmartBFT WAL reader package.

Decodes the write-ahead log of a SmartBFT orderer, including the Fabric
blocks carried by proposed records.
"""

from .dispatcher import decode_message
from .models import Block, ChaincodeID, ConsensusMessage, Creator, Tx
from .reader import WalReader
from .segment_reader import SegmentReadResult, read_segment

__all__ = [
    "Block",
    "ChaincodeID",
    "ConsensusMessage",
    "Creator",
    "SegmentReadResult",
    "Tx",
    "WalReader",
    "decode_message",
    "read_segment",
]
__version__ = "0.1.0"

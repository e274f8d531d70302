#!/usr/bin/env python3
"""Protobuf message classes for the SmartBFT WAL and the Fabric ledger.

The WAL stores SmartBFT consensus messages, and proposed blocks carry
Hyperledger Fabric ledger messages. Only the fields this tool reads are
declared; unknown fields survive parsing untouched. Message classes are
built from descriptors registered in a private pool so they never clash with
other copies of the same ``.proto`` files loaded in the process.
"""

from enum import IntEnum
from typing import NamedTuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, timestamp_pb2

_FieldProto = descriptor_pb2.FieldDescriptorProto

_SCALAR_TYPES: dict[str, int] = {
    "bool": _FieldProto.TYPE_BOOL,
    "bytes": _FieldProto.TYPE_BYTES,
    "int32": _FieldProto.TYPE_INT32,
    "string": _FieldProto.TYPE_STRING,
    "uint64": _FieldProto.TYPE_UINT64,
}


class LogRecordType(IntEnum):
    """Discriminant of a physical WAL record."""
    ENTRY = 0
    CONTROL = 1
    CRC_ANCHOR = 2


class HeaderType(IntEnum):
    """Fabric channel header types."""
    MESSAGE = 0
    CONFIG = 1
    CONFIG_UPDATE = 2
    ENDORSER_TRANSACTION = 3
    ORDERER_TRANSACTION = 4
    DELIVER_SEEK_INFO = 5
    CHAINCODE_PACKAGE = 6


class Field(NamedTuple):
    """One field of a message declaration.

    ``kind`` is either a scalar type name or a fully qualified message name
    (leading dot, as in ``.common.Header``).
    """
    name: str
    number: int
    kind: str
    repeated: bool = False
    oneof: str | None = None


def _build_file(
    name: str,
    package: str,
    messages: dict[str, list[Field]],
    dependencies: tuple[str, ...] = ()
) -> descriptor_pb2.FileDescriptorProto:
    """Assemble a proto3 file descriptor from message declarations."""
    file_proto = descriptor_pb2.FileDescriptorProto(name=name, package=package, syntax="proto3")
    file_proto.dependency.extend(dependencies)

    for message_name, fields in messages.items():
        message = file_proto.message_type.add(name=message_name)
        oneofs: dict[str, int] = {}

        for field in fields:
            proto_field = message.field.add(name=field.name, number=field.number)
            proto_field.label = _FieldProto.LABEL_REPEATED if field.repeated else _FieldProto.LABEL_OPTIONAL

            if (scalar := _SCALAR_TYPES.get(field.kind)) is not None:
                proto_field.type = scalar
            else:
                proto_field.type = _FieldProto.TYPE_MESSAGE
                proto_field.type_name = field.kind

            if field.oneof is not None:
                if field.oneof not in oneofs:
                    oneofs[field.oneof] = len(message.oneof_decl)
                    message.oneof_decl.add(name=field.oneof)
                proto_field.oneof_index = oneofs[field.oneof]

    return file_proto


_SMARTBFT_MESSAGES = _build_file(
    "smartbftprotos/messages.proto",
    "smartbftprotos",
    {
        "Message": [
            Field("pre_prepare", 1, ".smartbftprotos.PrePrepare", oneof="content"),
            Field("prepare", 2, ".smartbftprotos.Prepare", oneof="content"),
            Field("commit", 3, ".smartbftprotos.Commit", oneof="content"),
            Field("view_change", 4, ".smartbftprotos.ViewChange", oneof="content"),
            Field("view_data", 5, ".smartbftprotos.SignedViewData", oneof="content"),
            Field("new_view", 6, ".smartbftprotos.NewView", oneof="content"),
            Field("heart_beat", 7, ".smartbftprotos.HeartBeat", oneof="content"),
            Field("heart_beat_response", 8, ".smartbftprotos.HeartBeatResponse", oneof="content"),
        ],
        "PrePrepare": [
            Field("view", 1, "uint64"),
            Field("seq", 2, "uint64"),
            Field("proposal", 3, ".smartbftprotos.Proposal"),
            Field("prev_commit_signatures", 4, ".smartbftprotos.Signature", repeated=True),
        ],
        "Prepare": [
            Field("view", 1, "uint64"),
            Field("seq", 2, "uint64"),
            Field("digest", 3, "string"),
            Field("assist", 4, "bool"),
        ],
        "ProposedRecord": [
            Field("pre_prepare", 1, ".smartbftprotos.PrePrepare"),
            Field("prepare", 2, ".smartbftprotos.Prepare"),
        ],
        "Commit": [
            Field("view", 1, "uint64"),
            Field("seq", 2, "uint64"),
            Field("digest", 3, "string"),
            Field("signature", 4, ".smartbftprotos.Signature"),
            Field("assist", 5, "bool"),
        ],
        "ViewChange": [
            Field("next_view", 1, "uint64"),
            Field("reason", 2, "string"),
        ],
        "ViewData": [
            Field("next_view", 1, "uint64"),
            Field("last_decision", 2, ".smartbftprotos.Proposal"),
            Field("last_decision_signatures", 3, ".smartbftprotos.Signature", repeated=True),
            Field("in_flight_proposal", 4, ".smartbftprotos.Proposal"),
            Field("in_flight_prepared", 5, "bool"),
        ],
        "SignedViewData": [
            Field("raw_view_data", 1, "bytes"),
            Field("signer", 2, "uint64"),
            Field("signature", 3, "bytes"),
        ],
        "NewView": [
            Field("signed_view_data", 2, ".smartbftprotos.SignedViewData", repeated=True),
        ],
        "HeartBeat": [
            Field("view", 1, "uint64"),
            Field("seq", 2, "uint64"),
        ],
        "HeartBeatResponse": [
            Field("view", 1, "uint64"),
        ],
        "Signature": [
            Field("signer", 1, "uint64"),
            Field("value", 2, "bytes"),
            Field("msg", 3, "bytes"),
        ],
        "Proposal": [
            Field("header", 1, "bytes"),
            Field("payload", 2, "bytes"),
            Field("metadata", 3, "bytes"),
            Field("verification_sequence", 4, "uint64"),
        ],
        "ViewMetadata": [
            Field("view_id", 1, "uint64"),
            Field("latest_sequence", 2, "uint64"),
            Field("decisions_in_view", 3, "uint64"),
            Field("black_list", 4, "uint64", repeated=True),
            Field("prev_commit_signature_digest", 5, "bytes"),
        ],
        "SavedMessage": [
            Field("proposed_record", 1, ".smartbftprotos.ProposedRecord", oneof="content"),
            Field("commit", 2, ".smartbftprotos.Message", oneof="content"),
            Field("new_view", 3, ".smartbftprotos.Message", oneof="content"),
            Field("view_change", 4, ".smartbftprotos.ViewChange", oneof="content"),
        ],
    },
)

_SMARTBFT_LOGRECORD = _build_file(
    "smartbftprotos/logrecord.proto",
    "smartbftprotos",
    {
        "LogRecord": [
            Field("type", 1, "int32"),
            Field("truncate_to", 2, "bool"),
            Field("data", 3, "bytes"),
        ],
    },
)

_FABRIC_COMMON = _build_file(
    "common/common.proto",
    "common",
    {
        "Envelope": [
            Field("payload", 1, "bytes"),
            Field("signature", 2, "bytes"),
        ],
        "Payload": [
            Field("header", 1, ".common.Header"),
            Field("data", 2, "bytes"),
        ],
        "Header": [
            Field("channel_header", 1, "bytes"),
            Field("signature_header", 2, "bytes"),
        ],
        "ChannelHeader": [
            Field("type", 1, "int32"),
            Field("version", 2, "int32"),
            Field("timestamp", 3, ".google.protobuf.Timestamp"),
            Field("channel_id", 4, "string"),
            Field("tx_id", 5, "string"),
            Field("epoch", 6, "uint64"),
            Field("extension", 7, "bytes"),
            Field("tls_cert_hash", 8, "bytes"),
        ],
        "SignatureHeader": [
            Field("creator", 1, "bytes"),
            Field("nonce", 2, "bytes"),
        ],
        "Block": [
            Field("header", 1, ".common.BlockHeader"),
            Field("data", 2, ".common.BlockData"),
            Field("metadata", 3, ".common.BlockMetadata"),
        ],
        "BlockHeader": [
            Field("number", 1, "uint64"),
            Field("previous_hash", 2, "bytes"),
            Field("data_hash", 3, "bytes"),
        ],
        "BlockData": [
            Field("data", 1, "bytes", repeated=True),
        ],
        "BlockMetadata": [
            Field("metadata", 1, "bytes", repeated=True),
        ],
    },
    dependencies=("google/protobuf/timestamp.proto",),
)

_FABRIC_MSP = _build_file(
    "msp/identities.proto",
    "msp",
    {
        "SerializedIdentity": [
            Field("mspid", 1, "string"),
            Field("id_bytes", 2, "bytes"),
        ],
    },
)

_FABRIC_PEER = _build_file(
    "peer/transaction.proto",
    "protos",
    {
        "Transaction": [
            Field("actions", 1, ".protos.TransactionAction", repeated=True),
        ],
        "TransactionAction": [
            Field("header", 1, "bytes"),
            Field("payload", 2, "bytes"),
        ],
        "ChaincodeActionPayload": [
            Field("chaincode_proposal_payload", 1, "bytes"),
            Field("action", 2, ".protos.ChaincodeEndorsedAction"),
        ],
        "ChaincodeEndorsedAction": [
            Field("proposal_response_payload", 1, "bytes"),
            Field("endorsements", 2, ".protos.Endorsement", repeated=True),
        ],
        "Endorsement": [
            Field("endorser", 1, "bytes"),
            Field("signature", 2, "bytes"),
        ],
        "ChaincodeProposalPayload": [
            Field("input", 1, "bytes"),
        ],
        "ChaincodeInvocationSpec": [
            Field("chaincode_spec", 1, ".protos.ChaincodeSpec"),
        ],
        "ChaincodeSpec": [
            Field("type", 1, "int32"),
            Field("chaincode_id", 2, ".protos.ChaincodeID"),
            Field("input", 3, ".protos.ChaincodeInput"),
            Field("timeout", 4, "int32"),
        ],
        "ChaincodeInput": [
            Field("args", 1, "bytes", repeated=True),
            Field("is_init", 3, "bool"),
        ],
        "ChaincodeID": [
            Field("path", 1, "string"),
            Field("name", 2, "string"),
            Field("version", 3, "string"),
        ],
    },
)

_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(timestamp_pb2.DESCRIPTOR.serialized_pb)
for _file_proto in (_SMARTBFT_MESSAGES, _SMARTBFT_LOGRECORD, _FABRIC_COMMON, _FABRIC_MSP, _FABRIC_PEER):
    _pool.AddSerializedFile(_file_proto.SerializeToString())


def _message_class(full_name: str) -> type:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(full_name))


# SmartBFT consensus
Message = _message_class("smartbftprotos.Message")
PrePrepare = _message_class("smartbftprotos.PrePrepare")
Prepare = _message_class("smartbftprotos.Prepare")
ProposedRecord = _message_class("smartbftprotos.ProposedRecord")
Commit = _message_class("smartbftprotos.Commit")
ViewChange = _message_class("smartbftprotos.ViewChange")
ViewData = _message_class("smartbftprotos.ViewData")
SignedViewData = _message_class("smartbftprotos.SignedViewData")
NewView = _message_class("smartbftprotos.NewView")
Signature = _message_class("smartbftprotos.Signature")
Proposal = _message_class("smartbftprotos.Proposal")
ViewMetadata = _message_class("smartbftprotos.ViewMetadata")
SavedMessage = _message_class("smartbftprotos.SavedMessage")
LogRecord = _message_class("smartbftprotos.LogRecord")

# Fabric ledger
Envelope = _message_class("common.Envelope")
Payload = _message_class("common.Payload")
Header = _message_class("common.Header")
ChannelHeader = _message_class("common.ChannelHeader")
SignatureHeader = _message_class("common.SignatureHeader")
Block = _message_class("common.Block")
BlockHeader = _message_class("common.BlockHeader")
BlockData = _message_class("common.BlockData")
BlockMetadata = _message_class("common.BlockMetadata")
SerializedIdentity = _message_class("msp.SerializedIdentity")
Transaction = _message_class("protos.Transaction")
TransactionAction = _message_class("protos.TransactionAction")
ChaincodeActionPayload = _message_class("protos.ChaincodeActionPayload")
ChaincodeProposalPayload = _message_class("protos.ChaincodeProposalPayload")
ChaincodeInvocationSpec = _message_class("protos.ChaincodeInvocationSpec")
ChaincodeSpec = _message_class("protos.ChaincodeSpec")
ChaincodeID = _message_class("protos.ChaincodeID")

#!/usr/bin/env python3
"""Tests for reading WAL files and directories."""

import logging

import pytest

from builders import (
    commit_payload,
    make_envelope,
    make_proposal,
    new_view_payload,
    proposed_record_payload,
    segment_bytes,
    view_change_payload,
    write_segment,
)
from walreader.errors import (
    BadChannelHeaderError,
    BadEnvelopeError,
    PossiblyRepairableError,
    ReadFailureError,
    RecordDecodeError,
)
from walreader.models import CommitRecord, NewViewRecord, ProposedBlockRecord, ViewChangeRecord
from walreader.reader import WalReader, segment_files


@pytest.fixture
def entries():
    """One payload of every record kind, in log order."""
    return [
        proposed_record_payload(make_proposal([make_envelope(tx_id="t1"), make_envelope(tx_id="t2")])),
        commit_payload(),
        view_change_payload(),
        new_view_payload(),
    ]


class TestDecodeFile:
    """Tests for WalReader.decode_file."""

    def test_decodes_every_entry(self, tmp_path, entries):
        path = write_segment(tmp_path / "1.wal", entries)

        records, error = WalReader(path).decode_file(path)

        assert error is None
        assert [type(r) for r in records] == [ProposedBlockRecord, CommitRecord, ViewChangeRecord, NewViewRecord]

    def test_truncated_segment_keeps_prefix(self, tmp_path, entries):
        """Test that records before a truncation are decoded and the error is returned."""
        path = tmp_path / "1.wal"
        path.write_bytes(segment_bytes(entries)[:-3])

        records, error = WalReader(path).decode_file(path)

        assert isinstance(error, PossiblyRepairableError)
        assert len(records) == 3

    def test_undecodable_entry(self, tmp_path, entries):
        """Test that a bad entry names the file and its position."""
        path = write_segment(tmp_path / "1.wal", [entries[1], b"\x0a\x05ab", entries[2]])

        with pytest.raises(RecordDecodeError) as exc_info:
            WalReader(path).decode_file(path)

        assert exc_info.value.path == str(path)
        assert exc_info.value.index == 1
        assert isinstance(exc_info.value.cause, BadEnvelopeError)
        assert exc_info.value.__cause__ is exc_info.value.cause


class TestReadFile:
    """Tests for reading a single file."""

    def test_logs_records(self, tmp_path, entries, caplog):
        """Test that every record and transaction is logged in order."""
        path = write_segment(tmp_path / "1.wal", entries)

        with caplog.at_level(logging.INFO, logger="walreader"):
            failures = WalReader(path).read()

        assert failures == []
        messages = [r.getMessage() for r in caplog.records if r.name == "walreader.reader"]
        assert messages[0].startswith("print #0 record (Proposed record)")
        assert messages[1] == "Transactions from block 5:"
        assert "tx ID: t1" in messages[2]
        assert "tx ID: t2" in messages[3]
        assert messages[4].startswith("print #1 record (Commit)")
        assert messages[5].startswith("print #2 record (View change)")
        assert messages[6].startswith("print #3 record (New view)")

    def test_read_failure_is_reported(self, tmp_path):
        path = tmp_path / "1.wal"
        path.write_bytes(b"\x00" * 8)

        failures = WalReader(path).read()

        assert len(failures) == 1
        assert failures[0].path == str(path)
        assert isinstance(failures[0].error, ReadFailureError)

    def test_decode_failure_is_reported(self, tmp_path):
        path = write_segment(tmp_path / "1.wal", [b"\x0a\x05ab"])

        failures = WalReader(path).read()

        assert len(failures) == 1
        assert isinstance(failures[0].error, RecordDecodeError)

    def test_records_before_bad_entry_are_logged(self, tmp_path, entries, caplog):
        """Test that records decoded before a failing entry are still logged."""
        path = write_segment(tmp_path / "1.wal", [entries[1], entries[1], b"\xff\xff\xff"])

        with caplog.at_level(logging.INFO, logger="walreader"):
            failures = WalReader(path).read()

        assert len(failures) == 1
        assert failures[0].error.index == 2
        messages = [r.getMessage() for r in caplog.records if r.name == "walreader.reader"]
        assert messages[0].startswith("print #0 record (Commit)")
        assert messages[1].startswith("print #1 record (Commit)")


class TestReadDir:
    """Tests for reading a directory of segments."""

    def test_segment_files_sorted_recursive(self, tmp_path):
        (tmp_path / "sub").mkdir()
        for name in ("b.wal", "a.wal", "sub/c.wal"):
            (tmp_path / name).write_bytes(b"")

        assert [p.relative_to(tmp_path).as_posix() for p in segment_files(tmp_path)] == [
            "a.wal",
            "b.wal",
            "sub/c.wal",
        ]

    def test_continues_after_failure(self, tmp_path, entries, caplog):
        """Test that a failing file does not stop the traversal."""
        write_segment(tmp_path / "1.wal", entries[1:2])
        write_segment(tmp_path / "2.wal", [b"\x0a\x05ab"])
        (tmp_path / "3.wal").write_bytes(segment_bytes([entries[2], entries[1]])[:-1])
        write_segment(tmp_path / "4.wal", entries[3:4])

        with caplog.at_level(logging.INFO, logger="walreader"):
            failures = WalReader(tmp_path).read()

        assert [f.path for f in failures] == [str(tmp_path / "2.wal"), str(tmp_path / "3.wal")]
        assert isinstance(failures[0].error, RecordDecodeError)
        assert isinstance(failures[1].error, PossiblyRepairableError)

        messages = [r.getMessage() for r in caplog.records]
        assert f"Read {tmp_path / '4.wal'}" in messages
        assert any(m.startswith("print #0 record (New view)") for m in messages)
        assert any(m.startswith("print #0 record (View change)") for m in messages)

    def test_continues_after_timestamp_out_of_range(self, tmp_path, entries, caplog):
        """Test that a transaction timestamp datetime cannot hold fails only its own file."""
        bad_block = proposed_record_payload(make_proposal([make_envelope(seconds=300_000_000_000)]))
        write_segment(tmp_path / "1.wal", [bad_block])
        write_segment(tmp_path / "2.wal", entries[1:2])

        with caplog.at_level(logging.INFO, logger="walreader"):
            failures = WalReader(tmp_path).read()

        assert [f.path for f in failures] == [str(tmp_path / "1.wal")]
        assert isinstance(failures[0].error, RecordDecodeError)
        assert isinstance(failures[0].error.cause, BadChannelHeaderError)
        assert any(m.startswith("print #0 record (Commit)") for m in caplog.messages)

    def test_empty_directory(self, tmp_path):
        assert WalReader(tmp_path).read() == []

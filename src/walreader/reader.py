#!/usr/bin/env python3
"""Reading WAL files and directories and logging their decoded records.

This module ties the segment reader, the record decoder and the formatter
together: it resolves a path to segment files, decodes each entry in log
order and logs the rendered text.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .dispatcher import decode_message
from .errors import DecodeError, RecordDecodeError, WalReaderError
from .formatter import format_record
from .models import ConsensusMessage
from .segment_reader import SegmentReadResult, read_segment

# Get logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileFailure:
    """A file whose processing ended with an error."""
    path: str
    error: WalReaderError


def segment_files(directory: str | os.PathLike[str]) -> list[Path]:
    """All regular files below ``directory``, recursively, in sorted order."""
    return sorted(path for path in Path(directory).rglob("*") if path.is_file())


class WalReader:
    """Reads a WAL file or a directory of WAL files and logs every record."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        """
        Initialize the WalReader.

        Args:
            path: A segment file or a directory containing segment files
        """
        self.path = os.fspath(path)

    def _read_segment(self, file_path: str | os.PathLike[str]) -> SegmentReadResult:
        result = read_segment(file_path)
        if result.error is not None:
            logger.debug(str(result.error))
        return result

    @staticmethod
    def _decode_records(result: SegmentReadResult) -> Iterator[tuple[int, ConsensusMessage]]:
        """Decode entries in log order, yielding each one before the next is tried."""
        for index, payload in enumerate(result.payloads):
            try:
                record = decode_message(payload)
            except DecodeError as e:
                raise RecordDecodeError(result.path, index, e) from e
            yield index, record

    def decode_file(self, file_path: str | os.PathLike[str]) -> tuple[list[ConsensusMessage], WalReaderError | None]:
        """Read a segment and decode all of its entries.

        Args:
            file_path: Path of the segment

        Returns:
            The decoded records and the segment termination error, if any

        Raises:
            RecordDecodeError: If an entry cannot be decoded; the rest of the
                file is not processed
        """
        result = self._read_segment(file_path)
        records = [record for _, record in self._decode_records(result)]
        return records, result.error

    def read_file(self, file_path: str | os.PathLike[str]) -> WalReaderError | None:
        """Decode a segment and log every record as soon as it is decoded.

        Records before an undecodable entry are logged before the error is
        raised.

        Returns:
            The segment termination error, if the scan did not end cleanly

        Raises:
            RecordDecodeError: If an entry cannot be decoded
        """
        result = self._read_segment(file_path)

        for index, record in self._decode_records(result):
            for text in format_record(index, record):
                logger.info(text)

        return result.error

    def read_dir(self) -> list[FileFailure]:
        """Read every file below the configured directory.

        A failing file is logged and skipped; traversal continues with the
        next file.

        Returns:
            The files that ended with an error
        """
        failures: list[FileFailure] = []

        for file_path in segment_files(self.path):
            logger.info(f"Read {file_path}")
            try:
                if (error := self.read_file(file_path)) is not None:
                    failures.append(FileFailure(str(file_path), error))
            except RecordDecodeError as e:
                logger.warning(str(e))
                failures.append(FileFailure(str(file_path), e))

        return failures

    def read(self) -> list[FileFailure]:
        """Read the configured path, whether it is a file or a directory."""
        if os.path.isdir(self.path):
            return self.read_dir()

        try:
            if (error := self.read_file(self.path)) is not None:
                return [FileFailure(self.path, error)]
        except RecordDecodeError as e:
            logger.warning(str(e))
            return [FileFailure(self.path, e)]

        return []

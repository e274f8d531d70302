#!/usr/bin/env python3
"""Tests for the configuration module."""

import logging
import os
from unittest.mock import patch

import pytest

from walreader.config import ReaderConfig


@pytest.fixture
def wal_file(tmp_path):
    path = tmp_path / "0000000000000001.wal"
    path.write_bytes(b"")
    return path


class TestReaderConfig:
    """Tests for ReaderConfig."""

    def test_valid_config(self, wal_file):
        """Test creating a valid configuration with defaults."""
        config = ReaderConfig(wal_path=str(wal_file))

        assert config.wal_path == str(wal_file)
        assert config.output_path is None
        assert config.log_level == "DEBUG"
        assert config.is_directory is False

    def test_directory(self, tmp_path):
        config = ReaderConfig(wal_path=str(tmp_path))

        assert config.is_directory is True

    def test_missing_path(self):
        """Test that an empty WAL path is rejected."""
        with pytest.raises(ValueError, match="WAL path is required"):
            ReaderConfig(wal_path="")

    def test_nonexistent_path(self, tmp_path):
        with pytest.raises(ValueError, match="WAL path does not exist"):
            ReaderConfig(wal_path=str(tmp_path / "missing"))

    def test_log_level_normalized(self, wal_file):
        """Test that log level names are accepted in any case."""
        config = ReaderConfig(wal_path=str(wal_file), log_level="info")

        assert config.log_level == "INFO"

    def test_invalid_log_level(self, wal_file):
        with pytest.raises(ValueError, match="Unsupported log level"):
            ReaderConfig(wal_path=str(wal_file), log_level="VERBOSE")

    def test_output_directory_must_exist(self, wal_file, tmp_path):
        """Test that the output file's directory is checked up front."""
        with pytest.raises(ValueError, match="Output directory does not exist"):
            ReaderConfig(wal_path=str(wal_file), output_path=str(tmp_path / "nope" / "out.log"))

    def test_frozen(self, wal_file):
        config = ReaderConfig(wal_path=str(wal_file))

        with pytest.raises(AttributeError):
            config.wal_path = "other"


class TestFromEnv:
    """Tests for ReaderConfig.from_env."""

    def test_from_env(self, wal_file, tmp_path):
        """Test loading configuration from environment variables."""
        env = {
            "WAL_PATH": str(wal_file),
            "WAL_OUTPUT_PATH": str(tmp_path / "out.log"),
            "LOG_LEVEL": "WARNING",
        }
        with patch.dict(os.environ, env, clear=True):
            config = ReaderConfig.from_env()

        assert config.wal_path == str(wal_file)
        assert config.output_path == str(tmp_path / "out.log")
        assert config.log_level == "WARNING"

    def test_arguments_override_env(self, wal_file, tmp_path):
        """Test that explicit values take precedence over the environment."""
        with patch.dict(os.environ, {"WAL_PATH": "/does/not/exist", "LOG_LEVEL": "ERROR"}, clear=True):
            config = ReaderConfig.from_env(wal_path=str(wal_file), log_level="INFO")

        assert config.wal_path == str(wal_file)
        assert config.log_level == "INFO"

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_env(self):
        """Test that a missing WAL_PATH raises an error."""
        with pytest.raises(ValueError, match="WAL path is required"):
            ReaderConfig.from_env()

    def test_empty_output_env(self, wal_file):
        with patch.dict(os.environ, {"WAL_PATH": str(wal_file), "WAL_OUTPUT_PATH": ""}, clear=True):
            config = ReaderConfig.from_env()

        assert config.output_path is None


def test_log_config(wal_file, caplog):
    """Test that the configuration is logged at debug level."""
    config = ReaderConfig(wal_path=str(wal_file))

    with caplog.at_level(logging.DEBUG, logger="walreader.config"):
        config.log_config()

    assert "WAL Reader Configuration" in caplog.text
    assert f"WAL path: {wal_file} (file)" in caplog.text
    assert "[stdout only]" in caplog.text

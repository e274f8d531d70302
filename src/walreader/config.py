#!/usr/bin/env python3
"""Configuration management for the WAL reader.

Configuration is loaded from environment variables, with values given on
the command line taking precedence.
"""

import logging
import os
from dataclasses import dataclass
from typing import ClassVar

# Get logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReaderConfig:
    """Configuration for a WAL reader run.

    Attributes:
        wal_path: WAL segment file or directory of segment files
        output_path: File that receives a copy of the log output (optional)
        log_level: Logging level name
    """

    wal_path: str
    output_path: str | None = None
    log_level: str = "DEBUG"

    LOG_LEVELS: ClassVar[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __post_init__(self) -> None:
        """Validate reader configuration."""
        if not self.wal_path:
            raise ValueError("WAL path is required (-f or WAL_PATH)")

        if not os.path.exists(self.wal_path):
            raise ValueError(f"WAL path does not exist: {self.wal_path}")

        level = self.log_level.upper()
        if level not in self.LOG_LEVELS:
            raise ValueError(
                f"Unsupported log level: {self.log_level}. "
                f"Supported levels: {', '.join(self.LOG_LEVELS)}"
            )
        if level != self.log_level:
            # Use object.__setattr__ since dataclass is frozen
            object.__setattr__(self, "log_level", level)

        if self.output_path:
            directory = os.path.dirname(os.path.abspath(self.output_path))
            if not os.path.isdir(directory):
                raise ValueError(f"Output directory does not exist: {directory}")

    @classmethod
    def from_env(
        cls,
        wal_path: str | None = None,
        output_path: str | None = None,
        log_level: str | None = None
    ) -> "ReaderConfig":
        """Load configuration from environment variables.

        Args:
            wal_path: Overrides WAL_PATH when given
            output_path: Overrides WAL_OUTPUT_PATH when given
            log_level: Overrides LOG_LEVEL when given

        Returns:
            ReaderConfig instance with loaded values

        Raises:
            ValueError: If required values are missing or invalid
        """
        return cls(
            wal_path=wal_path or os.environ.get("WAL_PATH", ""),
            output_path=output_path or os.environ.get("WAL_OUTPUT_PATH") or None,
            log_level=log_level or os.environ.get("LOG_LEVEL", "DEBUG"),
        )

    @property
    def is_directory(self) -> bool:
        return os.path.isdir(self.wal_path)

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.debug("WAL Reader Configuration")
        logger.debug(f"  WAL path: {self.wal_path} ({'directory' if self.is_directory else 'file'})")
        logger.debug(f"  Output file: {self.output_path or '[stdout only]'}")
        logger.debug(f"  Log level: {self.log_level}")

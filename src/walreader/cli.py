#!/usr/bin/env python3
"""Command-line interface for the WAL reader.

Prints every record of a SmartBFT WAL file, or of every file in a WAL
directory, to stdout and optionally to a file.
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from .config import ReaderConfig
from .reader import WalReader

# Get logger for this module
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "DEBUG", output_path: str | None = None) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        output_path: Optional file that receives the same output as stdout
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if output_path:
        handlers.append(logging.FileHandler(output_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.DEBUG),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SmartBFT WAL reader - print the records of write-ahead log files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  WAL_PATH         - WAL file or directory (overridden by -f)
  WAL_OUTPUT_PATH  - File receiving a copy of the output (overridden by --to)
  LOG_LEVEL        - Logging level (overridden by --log-level)
        """
    )
    parser.add_argument("-f", dest="wal_path", default=None, help="path to WAL file or directory")
    parser.add_argument("--to", "-to", dest="output_path", default=None,
                        help="path to the file for saving the output")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=list(ReaderConfig.LOG_LEVELS),
        help="Set the logging level (default: DEBUG)"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the reader.

    Returns:
        Process exit status: 0 when every file was read cleanly, 1 otherwise
    """
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = ReaderConfig.from_env(
            wal_path=args.wal_path,
            output_path=args.output_path,
            log_level=args.log_level,
        )
    except ValueError as e:
        setup_logging("INFO")
        logger.error(f"Configuration Error: {e}")
        logger.error("Please provide the path to a WAL file or directory with WAL files with -f")
        logger.error("  - or set WAL_PATH in the environment")
        return 1

    setup_logging(config.log_level, config.output_path)
    config.log_config()

    failures = WalReader(config.wal_path).read()
    for failure in failures:
        logger.warning(f"{failure.path}: {failure.error}")

    return 1 if failures else 0


def run() -> None:
    sys.exit(main())

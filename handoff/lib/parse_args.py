import argparse
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

EVENT = "message"
LOG_LEVEL = logging.INFO
CONFIG_FILE = "handoff.ini"


def positive_int(input):
    """Verify an integer input is at least 1"""
    try:
        value = int(input)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a whole number, but got '{input}'")

    if value < 1:
        raise argparse.ArgumentTypeError(f"Value must be at least 1, but got {value}")

    return value


def positive_float(input):
    """Verify a float input is greater than 0"""
    try:
        value = float(input)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a number of seconds, but got '{input}'")

    if value <= 0:
        raise argparse.ArgumentTypeError(f"Value must be greater than 0, but got {value}")

    return value


class ArgsNamespace(argparse.Namespace):
    """Provides typehints to the input args"""

    event: list[str]
    max_calls: int | None
    ttl: float | None
    config_file_path: str
    log_level: int
    log_dir: Path | None


def parse_args(argv: list[str] | None = None) -> ArgsNamespace:
    parser = argparse.ArgumentParser(
        prog="handoff",
        description="Read 'EVENT [ARG ...]' lines from stdin and notify an echo listener.",
    )

    parser.add_argument(
        "-e",
        "--event",
        action="append",
        help=f"Event the echo listener subscribes to. Repeat for more events. (default: {EVENT})",
        required=False,
    )
    parser.add_argument(
        "-n",
        "--max-calls",
        help="Let the echo listener unregister itself after this many notifications",
        default=None,
        type=positive_int,
        required=False,
    )
    parser.add_argument(
        "--ttl",
        help="Let the echo listener unregister itself after this many seconds",
        default=None,
        type=positive_float,
        required=False,
    )
    parser.add_argument(
        "-c",
        "--config-file-path",
        help=f"Path to a config file to load settings from. Relative paths are resolved in the data directory. (default: {CONFIG_FILE})",
        default=CONFIG_FILE,
        required=False,
    )
    parser.add_argument(
        "-l",
        "--log-level",
        help=f"Logging level int value (DEBUG: 10, INFO: 20, WARNING: 30, ERROR: 40, CRITICAL: 50). (default: {LOG_LEVEL} )",
        default=LOG_LEVEL,
        type=int,
        required=False,
    )
    parser.add_argument(
        "--log-dir",
        help="Directory to write log files to. Defaults to the per-user log directory",
        default=None,
        type=Path,
        required=False,
    )

    args = parser.parse_args(argv, namespace=ArgsNamespace())

    if args.max_calls is not None and args.ttl is not None:
        parser.error("--max-calls and --ttl can't be combined")

    if not args.event:
        args.event = [EVENT]

    return args

"""
Shared utilities for the word-similarity tool.

Common helpers for configuration via environment variables, timing, the error
taxonomy and argument parsing, used across loader.py, matrix.py, report.py and
word_similarity.py.
"""

import os
import time
from typing import Callable, TypeVar

T = TypeVar("T")

MIN_WORDS = 2
MAX_WORDS = 500_000


# ============================================================================
# Environment Variable Helpers
# ============================================================================
# Every WORDSIM_* setting is fetched through these helpers so that a malformed
# value falls back to the default instead of crashing the run.


def get_env_or_default(name: str, default: str) -> str:
    """Get an environment variable with a default value."""
    return os.environ.get(name, default)


def get_env_parsed(name: str, default: T, parser: Callable[[str], T] = int) -> T:
    """
    Get an environment variable parsed to a type, with a default value.
    Returns the default if the variable is not set or cannot be parsed.
    """
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return parser(value)
    except (ValueError, TypeError):
        return default


def get_env_bool(name: str) -> bool:
    """
    Get a boolean environment variable.
    Accepts "1", "true", or "yes" (case-insensitive) as true values.
    Returns False if not set or set to any other value.
    """
    value = os.environ.get(name, "").lower()
    return value in ("1", "true", "yes")


# ============================================================================
# Errors
# ============================================================================


class WordListIOError(OSError):
    """The input could not be opened or read. The OS error is kept as `__cause__`."""

    def __init__(self, path, message: str):
        super().__init__(f"{message}: {path}")
        self.path = path


class ReportWriteError(WordListIOError):
    """The report could not be created or written."""


class ValidationError(ValueError):
    """The input was read but does not form a valid word list."""


class EmptyLineError(ValidationError):
    def __init__(self, line_no: int):
        super().__init__(f"Empty lines are not allowed in the input file (line {line_no})")
        self.line_no = line_no


class CountOutOfRangeError(ValidationError):
    def __init__(self, count: int, min_count: int = MIN_WORDS, max_count: int = MAX_WORDS):
        super().__init__(
            f"Invalid number of words: {count}. "
            f"The input file must contain between {min_count} and {max_count} words."
        )
        self.count = count
        self.min = min_count
        self.max = max_count


# ============================================================================


def now_ns() -> int:
    """Get current time in nanoseconds for timing a run."""
    return time.monotonic_ns()


def format_elapsed(elapsed_ns: int) -> str:
    """Render a nanosecond duration the way humans read it: `1.234s` or `12.3ms`."""
    secs = elapsed_ns / 1e9
    if secs >= 1:
        return f"{secs:.3f}s"
    return f"{secs * 1e3:.1f}ms"


def default_workers() -> int:
    """Number of worker threads when none is requested: one per available core."""
    return get_env_parsed("WORDSIM_WORKERS", os.cpu_count() or 1)


def add_common_args(parser):
    """Add the engine tuning arguments to an ArgumentParser."""
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=default_workers(),
        help="Number of worker threads (default: CPU count, or WORDSIM_WORKERS env var)",
    )
    parser.add_argument(
        "--block-size",
        type=int,
        default=get_env_parsed("WORDSIM_BLOCK_SIZE", 64),
        help="Rows per unit of parallel work (default: 64, or WORDSIM_BLOCK_SIZE env var)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        default=get_env_bool("WORDSIM_NO_PROGRESS"),
        help="Disable progress bars (or set WORDSIM_NO_PROGRESS env var)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print Python and library versions before running",
    )

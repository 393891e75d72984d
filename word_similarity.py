#!/usr/bin/env python3
# /// script
# dependencies = [
#   "rapidfuzz",
#   "python-Levenshtein",
#   "jellyfish",
#   "editdistance",
#   "numpy",
#   "tqdm",
# ]
# ///
"""
Word similarity report: every pair of input lines at or above a similarity threshold.

- Loads one word or phrase per line, compares lowercased forms
- Scores all pairs with normalized Levenshtein similarity across all CPU cores
- Writes `Row i: <word>\\tRow j: <word>\\tSimilarity: NN.NN%` lines, best first

Environment variables:
- WORDSIM_MIN_MATCH: Default minimum match percentage (80)
- WORDSIM_WORKERS: Worker thread count (CPU count)
- WORDSIM_BLOCK_SIZE: Rows per unit of parallel work (64)
- WORDSIM_KERNEL: Similarity backend ('rapidfuzz', 'levenshtein', 'jellyfish', 'editdistance')
- WORDSIM_DENSE_LIMIT: Largest word count computed as a dense matrix in auto mode (4096)
- WORDSIM_NO_PROGRESS: Disable progress bars

Examples:
  uv run word_similarity.py words.txt matches.txt
  uv run word_similarity.py words.txt matches.txt --min-match 90
  WORDSIM_KERNEL=jellyfish uv run word_similarity.py words.txt matches.txt -m 75
"""

import argparse
import sys
from importlib import metadata

import numpy as np
import rapidfuzz
import tqdm as tqdm_module
from tqdm import tqdm

from loader import load_words
from matrix import DEFAULT_KERNEL, KERNELS, compute_matrix
from report import collect_matches, stream_matches, write_report
from utils import (
    ValidationError,
    WordListIOError,
    add_common_args,
    format_elapsed,
    get_env_or_default,
    get_env_parsed,
    now_ns,
)

DEFAULT_MIN_MATCH = 80.0
DEFAULT_DENSE_LIMIT = 4096
MODES = ("auto", "dense", "streaming")


def log_system_info():
    """Log Python version and similarity library versions."""

    print(f"- Python: {sys.version.split()[0]}, {sys.platform}")
    print(f"- RapidFuzz: {rapidfuzz.__version__}")
    print(f"- python-Levenshtein: {metadata.version('Levenshtein')}")
    print(f"- Jellyfish: {metadata.version('jellyfish')}")
    print(f"- EditDistance: {metadata.version('editdistance')}")
    print(f"- NumPy: {np.__version__}")
    print(f"- tqdm: {tqdm_module.__version__}")
    print()  # Add blank line


def resolve_mode(mode: str, word_count: int, dense_limit: int) -> str:
    """Pick `dense` or `streaming`; `auto` streams once the matrix would exceed `dense_limit` rows."""
    if mode == "auto":
        return "dense" if word_count <= dense_limit else "streaming"
    return mode


def find_matches(words, min_match: float, mode: str, workers: int, block_size: int, kernel: str, progress: bool):
    """Run the engine in the requested mode and return the sorted matching pairs."""
    with tqdm(total=len(words), desc=f"Comparing ({mode})", unit="rows", leave=False, disable=not progress) as bar:
        if mode == "dense":
            matrix = compute_matrix(
                words,
                workers=workers,
                block_size=block_size,
                kernel=kernel,
                on_rows=bar.update,
            )
            return collect_matches(matrix, words, min_match)
        return stream_matches(
            words,
            min_match,
            workers=workers,
            block_size=block_size,
            kernel=kernel,
            on_rows=bar.update,
        )


_main_epilog = """
Examples:

  # Pairs at least 80%% similar
  %(prog)s words.txt matches.txt

  # Stricter threshold
  %(prog)s words.txt matches.txt --min-match 95

  # Large list on 16 threads, never materializing the full matrix
  %(prog)s words.txt matches.txt --mode streaming -j 16

  # Compare against another backend
  %(prog)s words.txt matches.txt --kernel editdistance
"""


def main(argv=None) -> int:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Calculate similarity percentages between word pairs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_main_epilog,
    )
    parser.add_argument("input", metavar="INPUT", help="Input file containing a list of words")
    parser.add_argument("output", metavar="OUTPUT", help="Output file for similarity percentages")
    parser.add_argument(
        "-m",
        "--min-match",
        type=float,
        default=get_env_parsed("WORDSIM_MIN_MATCH", DEFAULT_MIN_MATCH, float),
        help="Minimum match percentage (default: 80, or WORDSIM_MIN_MATCH env var)",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="auto",
        help="Dense matrix, streaming row blocks, or pick by word count (default: auto)",
    )
    parser.add_argument(
        "--dense-limit",
        type=int,
        default=get_env_parsed("WORDSIM_DENSE_LIMIT", DEFAULT_DENSE_LIMIT),
        help="Largest word count computed as a dense matrix in auto mode (default: 4096)",
    )
    parser.add_argument(
        "--kernel",
        choices=sorted(KERNELS),
        default=get_env_or_default("WORDSIM_KERNEL", DEFAULT_KERNEL),
        help="Similarity backend (default: rapidfuzz, or WORDSIM_KERNEL env var)",
    )
    add_common_args(parser)

    args = parser.parse_args(argv)

    if args.kernel not in KERNELS:
        parser.error(f"Unknown kernel: {args.kernel}")
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.block_size < 1:
        parser.error("--block-size must be at least 1")

    if args.verbose:
        log_system_info()

    progress = not args.no_progress
    min_match = args.min_match / 100.0
    start = now_ns()

    try:
        with tqdm(desc="Reading", unit="lines", leave=False, disable=not progress) as bar:
            words = load_words(args.input, on_line=lambda _: bar.update())
    except (WordListIOError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    mode = resolve_mode(args.mode, len(words), args.dense_limit)
    matches = find_matches(words, min_match, mode, args.workers, args.block_size, args.kernel, progress)

    try:
        written = write_report(args.output, matches)
    except WordListIOError as e:
        print(f"Error writing output file: {e}", file=sys.stderr)
        return 1

    print(f"Compared {len(words):,} words, wrote {written:,} pairs to {args.output}")
    print(f"Time elapsed: {format_elapsed(now_ns() - start)}")
    return 0


if __name__ == "__main__":
    exit(main())

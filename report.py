"""
Threshold filtering, ordering and serialization of matching word pairs.

Output is one line per pair, no header:

    Row <i>: <word_i>\\tRow <j>: <word_j>\\tSimilarity: <percent>%

Rows are 1-based in the output. Pairs are ordered by descending similarity,
then ascending first row, then ascending second row, so identical inputs
always produce byte-identical reports.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from loader import WordEntry
from matrix import DEFAULT_BLOCK_SIZE, DEFAULT_KERNEL, BlockMatches, iter_block_matches, upper_triangle
from utils import ReportWriteError


@dataclass(frozen=True)
class MatchPair:
    """A qualifying pair from the upper triangle; rows are 0-based and `row_i < row_j`."""

    score: float
    row_i: int
    word_i: str
    row_j: int
    word_j: str


def _to_pairs(blocks: Iterable[BlockMatches], words: Sequence[WordEntry]) -> List[MatchPair]:
    blocks = list(blocks)
    if not blocks:
        return []
    rows = np.concatenate([b[0] for b in blocks])
    cols = np.concatenate([b[1] for b in blocks])
    scores = np.concatenate([b[2] for b in blocks])

    # np.lexsort uses the last key as primary
    order = np.lexsort((cols, rows, -scores))
    return [
        MatchPair(
            score=float(scores[k]),
            row_i=int(rows[k]),
            word_i=words[rows[k]].original,
            row_j=int(cols[k]),
            word_j=words[cols[k]].original,
        )
        for k in order
    ]


def sort_matches(matches: Iterable[MatchPair]) -> List[MatchPair]:
    """Order pairs by descending score, ties by ascending `row_i` then `row_j`."""
    return sorted(matches, key=lambda m: (-m.score, m.row_i, m.row_j))


def collect_matches(matrix: np.ndarray, words: Sequence[WordEntry], min_match: float) -> List[MatchPair]:
    """
    All pairs `(i, j)` with `i < j` and `matrix[i, j] >= min_match`, already sorted.

    `min_match` is a fraction and is not range-checked: values <= 0 admit every
    pair and values > 1 admit none.
    """
    return _to_pairs([upper_triangle(matrix, 0, min_match)], words)


def stream_matches(
    words: Sequence[WordEntry],
    min_match: float,
    workers: Optional[int] = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
    kernel: str = DEFAULT_KERNEL,
    on_rows: Optional[Callable[[int], None]] = None,
) -> List[MatchPair]:
    """Same result as `collect_matches(compute_matrix(words), ...)` without the dense matrix."""
    blocks = iter_block_matches(
        words,
        min_match,
        workers=workers,
        block_size=block_size,
        kernel=kernel,
        on_rows=on_rows,
    )
    return _to_pairs(blocks, words)


def format_match(pair: MatchPair) -> str:
    return (
        f"Row {pair.row_i + 1}: {pair.word_i}\t"
        f"Row {pair.row_j + 1}: {pair.word_j}\t"
        f"Similarity: {pair.score * 100:.2f}%"
    )


def write_report(path, matches: Iterable[MatchPair]) -> int:
    """
    Write the formatted pairs to `path` as UTF-8, one per line.

    Returns the number of lines written. The file is written in place, so a
    failure can leave it truncated.

    Raises:
        ReportWriteError: the file cannot be created or written
    """
    written = 0
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for pair in matches:
                f.write(format_match(pair))
                f.write("\n")
                written += 1
    except OSError as e:
        raise ReportWriteError(path, "Failed to write the output file") from e
    return written

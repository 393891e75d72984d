"""
All-pairs similarity over a word list: the N x N matrix engine.

Similarity is one minus the Levenshtein distance over the length of the longer
string, so identical strings score 1.0 and two empty strings also score 1.0.

- Kernels: rapidfuzz (batched cdist), python-Levenshtein, jellyfish, editdistance
- Dense: `compute_matrix` fills a pre-allocated float64 array, one row block per task
- Streaming: `iter_block_matches` keeps only the qualifying upper-triangle cells
  of each block, so memory stays proportional to `block_size * N`

Row blocks are independent, each task writes only its own slice, and the
executor's futures are the only synchronization point.
"""

import os
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

import editdistance as ed
import jellyfish as jf
import Levenshtein as le
from rapidfuzz import process
from rapidfuzz.distance import Levenshtein as rf

from loader import WordEntry

DEFAULT_BLOCK_SIZE = 64
DEFAULT_KERNEL = "rapidfuzz"

BlockScores = np.ndarray
BlockMatches = Tuple[np.ndarray, np.ndarray, np.ndarray]


@dataclass(frozen=True)
class Kernel:
    """A normalized-similarity backend in scalar and row-block form."""

    name: str
    pair: Callable[[str, str], float]
    block: Callable[[Sequence[str], Sequence[str]], BlockScores]


def _normalized(distance: Callable[[str, str], int]) -> Callable[[str, str], float]:
    def kernel(a: str, b: str) -> float:
        longest = max(len(a), len(b))
        if longest == 0:
            return 1.0
        return 1.0 - distance(a, b) / longest

    return kernel


def _per_pair_block(pair: Callable[[str, str], float]) -> Callable[[Sequence[str], Sequence[str]], BlockScores]:
    def block(queries: Sequence[str], choices: Sequence[str]) -> BlockScores:
        scores = np.empty((len(queries), len(choices)), dtype=np.float64)
        for row, a in enumerate(queries):
            scores[row] = [pair(a, b) for b in choices]
        return scores

    return block


def _rapidfuzz_block(queries: Sequence[str], choices: Sequence[str]) -> BlockScores:
    # One thread per call: the pool above already spreads blocks over all cores
    return process.cdist(
        queries,
        choices,
        scorer=rf.normalized_similarity,
        dtype=np.float64,
        workers=1,
    )


def _make_kernel(name: str, distance: Callable[[str, str], int]) -> Kernel:
    pair = _normalized(distance)
    return Kernel(name=name, pair=pair, block=_per_pair_block(pair))


KERNELS: Dict[str, Kernel] = {
    "rapidfuzz": Kernel(name="rapidfuzz", pair=rf.normalized_similarity, block=_rapidfuzz_block),
    "levenshtein": _make_kernel("levenshtein", le.distance),
    "jellyfish": _make_kernel("jellyfish", jf.levenshtein_distance),
    "editdistance": _make_kernel("editdistance", ed.eval),
}


def get_kernel(name: str) -> Kernel:
    try:
        return KERNELS[name]
    except KeyError:
        raise ValueError(f"Unknown similarity kernel: {name}. Use one of: {', '.join(KERNELS)}.") from None


def similarity(a: str, b: str, kernel: str = DEFAULT_KERNEL) -> float:
    """Normalized similarity of two already-normalized strings, in [0, 1]."""
    return float(get_kernel(kernel).pair(a, b))


def row_blocks(n: int, block_size: int) -> List[Tuple[int, int]]:
    """Split `range(n)` into contiguous `(start, stop)` ranges of at most `block_size` rows."""
    block_size = max(1, int(block_size or 1))
    return [(start, min(start + block_size, n)) for start in range(0, n, block_size)]


def upper_triangle(scores: BlockScores, row_offset: int, min_match: float) -> BlockMatches:
    """
    Select cells `(i, j)` with `i < j` and `score >= min_match` from a row block.

    `scores` holds rows `row_offset .. row_offset + len(scores)` of the full
    matrix. Returns global `(rows, cols, values)` arrays in row-major order.
    """
    n_rows, n_cols = scores.shape
    rows = np.arange(row_offset, row_offset + n_rows)[:, None]
    cols = np.arange(n_cols)[None, :]
    mask = (cols > rows) & (scores >= min_match)
    local_rows, match_cols = np.nonzero(mask)
    return local_rows + row_offset, match_cols, scores[local_rows, match_cols]


def _iter_blocks(
    strings: List[str],
    task: Callable[[int, int], object],
    workers: Optional[int],
    block_size: int,
) -> Iterator[Tuple[int, int, object]]:
    """Run `task(start, stop)` per row block, yielding results in row order.

    At most `2 * workers` blocks are in flight, so a slow consumer bounds memory.
    """
    workers = max(1, workers or os.cpu_count() or 1)
    max_pending = workers * 2
    pending = deque()
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for start, stop in row_blocks(len(strings), block_size):
            pending.append((start, stop, executor.submit(task, start, stop)))
            if len(pending) >= max_pending:
                start, stop, future = pending.popleft()
                yield start, stop, future.result()
        while pending:
            start, stop, future = pending.popleft()
            yield start, stop, future.result()


def compute_matrix(
    words: Sequence[WordEntry],
    workers: Optional[int] = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
    kernel: str = DEFAULT_KERNEL,
    on_rows: Optional[Callable[[int], None]] = None,
) -> np.ndarray:
    """
    Compute the dense N x N similarity matrix of the normalized words.

    The result is symmetric with an exact 1.0 diagonal. Memory is O(N^2): for
    large lists prefer `iter_block_matches`.

    Args:
        words: Loaded word list
        workers: Thread count, defaults to the number of CPU cores
        block_size: Rows computed per task
        kernel: Name of a backend in `KERNELS`
        on_rows: Observer called with the number of rows finished, for progress only
    """
    engine = get_kernel(kernel)
    strings = [word.normalized for word in words]
    matrix = np.empty((len(strings), len(strings)), dtype=np.float64)

    def fill(start: int, stop: int) -> None:
        matrix[start:stop] = engine.block(strings[start:stop], strings)

    for start, stop, _ in _iter_blocks(strings, fill, workers, block_size):
        if on_rows is not None:
            on_rows(stop - start)
    return matrix


def iter_block_matches(
    words: Sequence[WordEntry],
    min_match: float,
    workers: Optional[int] = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
    kernel: str = DEFAULT_KERNEL,
    on_rows: Optional[Callable[[int], None]] = None,
) -> Iterator[BlockMatches]:
    """
    Stream the qualifying upper-triangle cells of the matrix, one row block at a time.

    Each block's scores are filtered inside the worker and then dropped, so
    the full matrix is never materialized. Yields `(rows, cols, values)` as in
    `upper_triangle`, in ascending row order.
    """
    engine = get_kernel(kernel)
    strings = [word.normalized for word in words]

    def select(start: int, stop: int) -> BlockMatches:
        scores = engine.block(strings[start:stop], strings)
        return upper_triangle(scores, start, min_match)

    for start, stop, matches in _iter_blocks(strings, select, workers, block_size):
        if on_rows is not None:
            on_rows(stop - start)
        yield matches

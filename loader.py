"""
Word list loading and validation.

Reads one word or phrase per line, keeps the original text for reporting and a
lowercased copy for comparison. The whole list is validated before anything
downstream runs: no empty lines, and between MIN_WORDS and MAX_WORDS entries.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from utils import (
    MAX_WORDS,
    MIN_WORDS,
    CountOutOfRangeError,
    EmptyLineError,
    WordListIOError,
)


@dataclass(frozen=True)
class WordEntry:
    """One input line. Its position in the list is its identity."""

    normalized: str
    original: str


def normalize(text: str) -> str:
    return text.lower()


def _strip_line_ending(line: str) -> str:
    # Only the terminator is removed; surrounding spaces belong to the word
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def parse_words(
    lines: Iterable[str],
    on_line: Optional[Callable[[int], None]] = None,
) -> List[WordEntry]:
    """
    Validate and normalize already-read lines.

    Args:
        lines: Lines with or without their `\\n` / `\\r\\n` terminators
        on_line: Observer called with the running line count, for progress only

    Raises:
        EmptyLineError: a line is zero-length once its terminator is removed
        CountOutOfRangeError: fewer than MIN_WORDS or more than MAX_WORDS lines
    """
    words: List[WordEntry] = []
    for line_no, raw in enumerate(lines, start=1):
        original = _strip_line_ending(raw)
        if not original:
            raise EmptyLineError(line_no)
        words.append(WordEntry(normalized=normalize(original), original=original))
        if on_line is not None:
            on_line(line_no)

    count = len(words)
    if count < MIN_WORDS or count > MAX_WORDS:
        raise CountOutOfRangeError(count, MIN_WORDS, MAX_WORDS)
    return words


def load_words(path, on_line: Optional[Callable[[int], None]] = None) -> List[WordEntry]:
    """
    Load a word list from a UTF-8 text file, one entry per line.

    Raises:
        WordListIOError: the file cannot be opened, read or decoded
        ValidationError: see `parse_words`
    """
    try:
        # Split on "\n" only; a stray "\r" inside a line is part of the word
        with open(path, "r", encoding="utf-8", newline="\n") as f:
            return parse_words(f, on_line=on_line)
    except UnicodeDecodeError as e:
        raise WordListIOError(path, "Input file is not valid UTF-8") from e
    except OSError as e:
        raise WordListIOError(path, "Failed to read the input file") from e

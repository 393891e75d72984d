"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path
from typing import List

import pytest

from loader import WordEntry, parse_words


@pytest.fixture
def animal_words() -> List[WordEntry]:
    """Three words where only the first two are close."""
    return parse_words(["cat", "cot", "dog"])


@pytest.fixture
def mixed_words() -> List[WordEntry]:
    """A small list with duplicates, casing differences, spaces and non-ASCII text."""
    return parse_words(
        [
            "Apple",
            "apple",
            "apples",
            "Application",
            " apple",
            "banana",
            "bandana",
            "Café",
            "cafe",
            "naïve",
            "naive",
            "x",
            "apple",
        ]
    )


@pytest.fixture
def write_lines(tmp_path):
    """Write lines to a UTF-8 file under tmp_path and return its path."""

    def _write(lines: List[str], name: str = "words.txt", ending: str = "\n") -> Path:
        path = tmp_path / name
        path.write_bytes(ending.join(lines).encode("utf-8") + ending.encode("utf-8"))
        return path

    return _write

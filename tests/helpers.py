"""Small in-memory dictionaries shared by the test modules."""

from __future__ import annotations

import itertools
from functools import lru_cache
from typing import List, Tuple

from minifill.data.dictionary import WordIndex

LETTERS = "CRANE"

EMPTY_GRID = ["....."] * 5

# Upper-left 3x3 region; the rest of the grid is blocked.
SQUARE_GRID = ["...##", "...##", "...##", "#####", "#####"]
SQUARE_SOLUTION = ["ABC##", "DEF##", "GHI##", "#####", "#####"]
SQUARE_ENTRIES: List[Tuple[str, int]] = [
    ("ABC", 90),
    ("DEF", 80),
    ("GHI", 70),
    ("ADG", 60),
    ("BEH", 50),
    ("CFI", 40),
    ("XYZ", 30),
]


def synthetic_score(word: str) -> int:
    return sum((i + 1) * ord(ch) for i, ch in enumerate(word)) % 100 + 1


@lru_cache(maxsize=None)
def synthetic_index() -> WordIndex:
    """Every 2-5 letter string over ``LETTERS``, so any layout can be filled."""

    entries = [
        ("".join(letters), synthetic_score("".join(letters)))
        for length in range(2, 6)
        for letters in itertools.product(LETTERS, repeat=length)
    ]
    return WordIndex.from_entries(entries)


def square_index() -> WordIndex:
    return WordIndex.from_entries(SQUARE_ENTRIES)

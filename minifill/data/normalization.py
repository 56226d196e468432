"""Shared helpers for word list normalization."""

from __future__ import annotations

import re
from typing import Optional, Tuple

SEPARATORS_RE = re.compile(r"[\s\-'’.]")
WORD_RE = re.compile(r"^[A-Z]+$")
SCORE_RE = re.compile(r"[1-9][0-9]{0,2}")

MIN_SCORE = 1
MAX_SCORE = 100


def clean_entry(text: str) -> str:
    """Return ``text`` upper-cased with spaces, hyphens, apostrophes and periods removed.

    ``"Ice cream"`` becomes ``"ICECREAM"`` and ``"can't"`` becomes ``"CANT"``. The
    result is not guaranteed to be A-Z only; callers check :func:`is_valid_word`.
    """

    if not text:
        return ""
    return SEPARATORS_RE.sub("", text).upper()


def is_valid_word(word: str) -> bool:
    return bool(word) and WORD_RE.match(word) is not None


def parse_score(text: str) -> Optional[int]:
    """Return the integer score in ``text``, or None unless it is plain 1-100 digits."""

    if not isinstance(text, str):
        return None
    digits = text.strip()
    if SCORE_RE.fullmatch(digits) is None:
        return None
    score = int(digits)
    if score < MIN_SCORE or score > MAX_SCORE:
        return None
    return score


def split_entry(line: str) -> Optional[Tuple[str, str]]:
    """Split ``WORD;SCORE`` on the last semicolon, ignoring comments and blanks."""

    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#"):
        return None
    word, sep, score = trimmed.rpartition(";")
    if not sep:
        return None
    return word, score


__all__ = ["clean_entry", "is_valid_word", "parse_score", "split_entry"]

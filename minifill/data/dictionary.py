"""Scored word index and pattern lookups."""

from __future__ import annotations

import os
import threading
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..core.constants import GRID_SIZE, MIN_SLOT_LENGTH, PATTERN_WILDCARDS
from ..core.exceptions import DictionaryLoadError
from ..utils.logger import get_logger
from .normalization import is_valid_word, parse_score, split_entry


LOGGER = get_logger(__name__)

DEFAULT_DICTIONARY_PATH = Path("data/crossword-master.dict")
DICTIONARY_ENV = "MINIFILL_DICTIONARY"


@dataclass
class DictionaryConfig:
    """Configuration for dictionary loading and filtering."""

    path: Path | str | None = None
    min_length: int = MIN_SLOT_LENGTH
    max_length: int = GRID_SIZE
    min_score: int = 1


def parse_entry(line: str) -> Optional[Tuple[str, int]]:
    """Parse one ``WORD;SCORE`` line, returning None for anything invalid."""

    parts = split_entry(line)
    if parts is None:
        return None
    word, raw_score = parts
    if not is_valid_word(word):
        return None
    score = parse_score(raw_score)
    if score is None:
        return None
    return word, score


class WordIndex:
    """Immutable position-letter index over a scored dictionary.

    Lookups intersect the sets stored under ``(length, position, letter)`` keys,
    smallest first, so a pattern like ``A..E.`` only touches the words that
    already have ``A`` in position 0. Nothing is mutated after construction,
    so a single instance may be shared between threads.
    """

    def __init__(
        self,
        config: Optional[DictionaryConfig] = None,
        entries: Optional[Iterable[Tuple[str, int]]] = None,
    ) -> None:
        self.config = config or DictionaryConfig()
        self._words_by_length: Dict[int, List[str]] = defaultdict(list)
        self._scores: Dict[str, int] = {}
        self._rank: Dict[str, int] = {}
        self._position_index: Dict[Tuple[int, int, str], Set[str]] = defaultdict(set)
        self.skipped_lines = 0
        if entries is not None:
            self._hydrate(entries)
        elif self.config.path is not None:
            self._load(Path(self.config.path))
        # Freeze the defaultdicts so lookups for unknown keys never insert.
        self._words_by_length = dict(self._words_by_length)
        self._position_index = dict(self._position_index)

    @classmethod
    def from_file(cls, path: Path | str, **kwargs) -> "WordIndex":
        return cls(DictionaryConfig(path=path, **kwargs))

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, int]], **kwargs) -> "WordIndex":
        return cls(DictionaryConfig(**kwargs), entries=entries)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _load(self, source: Path) -> None:
        try:
            with source.open("r", encoding="utf-8") as handle:
                lines = handle.read().splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise DictionaryLoadError(f"Cannot read dictionary {source}: {exc}") from exc

        parsed: List[Tuple[str, int]] = []
        for line in lines:
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("#"):
                continue
            entry = parse_entry(trimmed)
            if entry is None:
                self.skipped_lines += 1
                continue
            parsed.append(entry)
        self._hydrate(parsed)

        LOGGER.info("Loaded %s words from %s", f"{len(self._scores):,}", source.name)
        if self.skipped_lines:
            LOGGER.debug("Skipped %d invalid dictionary lines", self.skipped_lines)
        for length, words in sorted(self._words_by_length.items()):
            LOGGER.debug("  %d-letter: %s", length, f"{len(words):,}")

    def _hydrate(self, entries: Iterable[Tuple[str, int]]) -> None:
        for word, score in entries:
            word = (word or "").strip().upper()
            if not is_valid_word(word):
                continue
            try:
                score = int(score)
            except (TypeError, ValueError):
                continue
            if score < 1 or score > 100:
                continue
            if score < self.config.min_score:
                continue
            if not self.config.min_length <= len(word) <= self.config.max_length:
                continue
            self._add_word(word, score)

    def _add_word(self, word: str, score: int) -> None:
        existing = self._scores.get(word)
        if existing is not None:
            if score > existing:
                self._scores[word] = score
            return
        self._scores[word] = score
        length = len(word)
        self._rank[word] = len(self._words_by_length[length])
        self._words_by_length[length].append(word)
        for pos, letter in enumerate(word):
            self._position_index[(length, pos, letter)].add(word)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def contains(self, word: str) -> bool:
        return word.upper() in self._scores

    def score(self, word: str) -> int:
        return self._scores.get(word.upper(), 0)

    def words_of_length(self, length: int) -> List[str]:
        return list(self._words_by_length.get(length, ()))

    def search(self, pattern: str, min_score: int = 1) -> List[str]:
        """Return words matching ``pattern`` with a score of at least ``min_score``.

        Letters in the pattern are fixed; ``.``, ``?``, ``_``, ``*`` and space are
        wildcards. Results follow dictionary load order.
        """

        matches = self._index_lookup(pattern)
        if min_score > 1:
            matches = [word for word in matches if self._scores[word] >= min_score]
        return matches

    def search_sorted(self, pattern: str, min_score: int = 1) -> List[Tuple[str, int]]:
        scored = [(word, self._scores[word]) for word in self.search(pattern, min_score)]
        scored.sort(key=lambda item: (-item[1], item[0]))
        return scored

    def count(self, pattern: str, min_score: int = 1) -> int:
        return len(self.search(pattern, min_score))

    def _index_lookup(self, pattern: str) -> List[str]:
        length = len(pattern)
        bucket = self._words_by_length.get(length)
        if not bucket:
            return []

        constraints: List[Set[str]] = []
        for pos, char in enumerate(pattern):
            if char in PATTERN_WILDCARDS:
                continue
            match_set = self._position_index.get((length, pos, char.upper()))
            if not match_set:
                return []
            constraints.append(match_set)

        if not constraints:
            return list(bucket)

        # Intersect smallest sets first for speed
        constraints.sort(key=len)
        result = set(constraints[0])
        for other in constraints[1:]:
            result &= other
            if not result:
                return []
        return sorted(result, key=self._rank.__getitem__)

    def stats(self) -> Dict[str, object]:
        total = len(self._scores)
        average = sum(self._scores.values()) / total if total else 0.0
        return {
            "total_words": total,
            "by_length": {length: len(words) for length, words in sorted(self._words_by_length.items())},
            "index_entries": len(self._position_index),
            "average_score": round(average, 1),
        }


_CACHED_INDEX: Optional[WordIndex] = None
_CACHE_LOCK = threading.Lock()


def default_dictionary_path() -> Path:
    return Path(os.environ.get(DICTIONARY_ENV) or DEFAULT_DICTIONARY_PATH)


def get_word_index(path: Path | str | None = None) -> WordIndex:
    """Return the process-wide index, loading it on first use."""

    global _CACHED_INDEX
    with _CACHE_LOCK:
        if _CACHED_INDEX is None:
            source = Path(path) if path is not None else default_dictionary_path()
            if not source.exists():
                raise DictionaryLoadError(
                    f"Master dictionary not found at {source}. "
                    "Build one with: python -m minifill.data.builder"
                )
            _CACHED_INDEX = WordIndex.from_file(source)
        return _CACHED_INDEX


def clear_word_index_cache() -> None:
    global _CACHED_INDEX
    with _CACHE_LOCK:
        _CACHED_INDEX = None


__all__ = [
    "DictionaryConfig",
    "WordIndex",
    "clear_word_index_cache",
    "default_dictionary_path",
    "get_word_index",
    "parse_entry",
]

"""Data models supporting the fill engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .constants import CellType, Direction


@dataclass
class Cell:
    """Represents a grid cell and the placed slots that own its letter."""

    type: CellType = CellType.EMPTY
    letter: Optional[str] = None
    owners: Set[str] = field(default_factory=set)
    fixed: bool = False

    def is_block(self) -> bool:
        return self.type == CellType.BLOCK

    def is_empty(self) -> bool:
        return self.type == CellType.EMPTY


@dataclass
class Slot:
    """A maximal run of at least two non-block cells."""

    direction: Direction
    start_row: int
    start_col: int
    length: int
    filled: bool = False
    word: Optional[str] = None
    _cells: Optional[List[Tuple[int, int]]] = field(default=None, repr=False, compare=False)

    @property
    def id(self) -> str:
        return slot_id(self.direction, self.start_row, self.start_col)

    @property
    def cells(self) -> List[Tuple[int, int]]:
        if self._cells is None:
            if self.direction == Direction.ACROSS:
                self._cells = [(self.start_row, self.start_col + i) for i in range(self.length)]
            else:
                self._cells = [(self.start_row + i, self.start_col) for i in range(self.length)]
        return self._cells

    def describe(self, pattern: Optional[str] = None) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "id": self.id,
            "direction": self.direction.value,
            "start_row": self.start_row,
            "start_col": self.start_col,
            "length": self.length,
            "cells": [list(cell) for cell in self.cells],
        }
        if pattern is not None:
            payload["pattern"] = pattern
        return payload


@dataclass(frozen=True)
class Crossing:
    """Shared cell between ``slot_id`` and ``cross_slot_id``."""

    slot_id: str
    position: int
    cross_slot_id: str
    cross_position: int


@dataclass(frozen=True)
class Placement:
    word: str
    direction: Direction
    start_row: int
    start_col: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "word": self.word,
            "direction": self.direction.value,
            "start_row": self.start_row,
            "start_col": self.start_col,
        }


@dataclass(frozen=True)
class Candidate:
    word: str
    score: int
    viable: Optional[bool] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"word": self.word, "score": self.score}
        if self.viable is not None:
            payload["viable"] = self.viable
        return payload


def slot_id(direction: Direction, row: int, col: int) -> str:
    return f"{direction.value}-{row}-{col}"


def parse_slot_id(text: str) -> Optional[Tuple[Direction, int, int]]:
    """Return ``(direction, row, col)`` for ids like ``across-0-0`` or None."""

    parts = (text or "").strip().lower().split("-")
    if len(parts) != 3:
        return None
    try:
        direction = Direction(parts[0])
        return direction, int(parts[1]), int(parts[2])
    except ValueError:
        return None


@dataclass
class FillStats:
    """Counters emitted with every fill result, successful or not."""

    attempts: int = 0
    backtracks: int = 0
    slots_filled: int = 0
    pattern_searches: int = 0
    cache_hits: int = 0
    ac3_revisions: int = 0
    elapsed_ms: int = 0
    excluded_words: int = 0
    template: Optional[int] = None
    quality: Optional[Dict[str, object]] = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

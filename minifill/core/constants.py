"""Shared constants and enumerations for the fill engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Tuple


GRID_SIZE = 5
MIN_SLOT_LENGTH = 2
MAX_BLOCKS = 10

BLOCK_MARKER = "#"
EMPTY_MARKER = ""
WILDCARD = "."

BLOCK_INPUTS: FrozenSet[str] = frozenset({"#", "■"})
EMPTY_INPUTS: FrozenSet[str] = frozenset({"", ".", " ", "?", "_"})
PATTERN_WILDCARDS: FrozenSet[str] = frozenset({".", "?", "_", " ", "*"})

# Score tiers used by the quick-fill value ordering, highest first.
SCORE_TIERS: Tuple[int, ...] = (75, 50, 25)


class CellType(str, Enum):
    """All supported cell types in the grid."""

    BLOCK = "BLOCK"
    EMPTY = "EMPTY"
    LETTER = "LETTER"


class Direction(str, Enum):
    """Word directions supported by the grid."""

    ACROSS = "across"
    DOWN = "down"


class Symmetry(str, Enum):
    """Mirroring applied to a black-square template."""

    NONE = "none"
    ROTATIONAL = "rotational"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


class FailureKind(str, Enum):
    """Machine-readable failure kinds surfaced to callers."""

    INVALID_INPUT = "invalid_input"
    NO_SOLUTION = "no_solution"
    TIMEOUT = "timeout"


class FillBackend(str, Enum):
    """Search strategies available to the fill operation."""

    BACKTRACKING = "backtracking"
    CPSAT = "cpsat"


ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


GRID_BOUNDS = Bounds(rows=GRID_SIZE, cols=GRID_SIZE)


def step(direction: Direction) -> Tuple[int, int]:
    return (0, 1) if direction == Direction.ACROSS else (1, 0)

"""Grid representation, slot detection and placement helpers."""

from __future__ import annotations

import copy
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.constants import (
    BLOCK_INPUTS,
    BLOCK_MARKER,
    EMPTY_INPUTS,
    EMPTY_MARKER,
    GRID_BOUNDS,
    GRID_SIZE,
    MIN_SLOT_LENGTH,
    ORTHOGONAL_STEPS,
    WILDCARD,
    CellType,
    Direction,
    step,
)
from ..core.exceptions import InvalidInputError, SlotPlacementError
from ..core.models import Cell, Crossing, Slot
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


def _parse_cell(value: object, row: int, col: int) -> Cell:
    if value is None:
        return Cell()
    if isinstance(value, str):
        text = value.strip()
        if text in BLOCK_INPUTS:
            return Cell(type=CellType.BLOCK)
        if text in EMPTY_INPUTS:
            return Cell()
        if len(text) == 1 and text.isascii() and text.isalpha():
            return Cell(type=CellType.LETTER, letter=text.upper(), fixed=True)
    raise InvalidInputError(f"Unrecognized cell value {value!r} at ({row},{col})")


class FillGrid:
    """Encapsulates the 5x5 grid with placement helpers.

    Every letter written by :meth:`place` records the slot that owns it, so
    :meth:`unplace` only clears cells no other placed slot still spells through.
    Letters supplied by the caller are ``fixed`` and survive any unplacement.
    """

    def __init__(self, cells: Optional[List[List[Cell]]] = None) -> None:
        self.bounds = GRID_BOUNDS
        self.cells: List[List[Cell]] = cells or [
            [Cell() for _ in range(self.bounds.cols)] for _ in range(self.bounds.rows)
        ]

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(cls, rows: Sequence[object]) -> "FillGrid":
        """Build a grid from five rows of cell values or five 5-character strings."""

        if not isinstance(rows, Sequence) or isinstance(rows, str):
            raise InvalidInputError(f"grid must be a sequence of {GRID_SIZE} rows, got {type(rows).__name__}")
        if len(rows) != GRID_SIZE:
            raise InvalidInputError(f"grid must have {GRID_SIZE} rows, got {len(rows)}")
        cells: List[List[Cell]] = []
        for r, row in enumerate(rows):
            if not isinstance(row, Sequence):
                raise InvalidInputError(f"row {r} must be a string or list of cells, got {type(row).__name__}")
            if len(row) != GRID_SIZE:
                raise InvalidInputError(f"row {r} must have {GRID_SIZE} cells, got {len(row)}")
            cells.append([_parse_cell(value, r, c) for c, value in enumerate(row)])
        return cls(cells)

    @classmethod
    def from_blocks(cls, blocks: Iterable[Tuple[int, int]]) -> "FillGrid":
        grid = cls()
        for row, col in blocks:
            grid.cells[row][col] = Cell(type=CellType.BLOCK)
        return grid

    def copy(self) -> "FillGrid":
        return FillGrid(copy.deepcopy(self.cells))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def is_block(self, row: int, col: int) -> bool:
        return self.cells[row][col].type == CellType.BLOCK

    def neighbors(self, row: int, col: int) -> Iterable[Tuple[int, int]]:
        for dr, dc in ORTHOGONAL_STEPS:
            nr, nc = row + dr, col + dc
            if self.bounds.contains(nr, nc):
                yield nr, nc

    def block_count(self) -> int:
        return sum(1 for row in self.cells for cell in row if cell.is_block())

    def blocks(self) -> List[Tuple[int, int]]:
        return [
            (r, c)
            for r in range(self.bounds.rows)
            for c in range(self.bounds.cols)
            if self.is_block(r, c)
        ]

    def is_complete(self) -> bool:
        return all(not cell.is_empty() for row in self.cells for cell in row)

    def is_connected(self) -> bool:
        """True when the non-block cells form one 4-connected region."""

        whites = [
            (r, c)
            for r in range(self.bounds.rows)
            for c in range(self.bounds.cols)
            if not self.is_block(r, c)
        ]
        if not whites:
            return False
        seen = {whites[0]}
        stack = [whites[0]]
        while stack:
            row, col = stack.pop()
            for nr, nc in self.neighbors(row, col):
                if (nr, nc) in seen or self.is_block(nr, nc):
                    continue
                seen.add((nr, nc))
                stack.append((nr, nc))
        return len(seen) == len(whites)

    def run_length(self, row: int, col: int, direction: Direction) -> int:
        """Length of the maximal non-block run through ``(row, col)``."""

        if self.is_block(row, col):
            return 0
        dr, dc = step(direction)
        length = 1
        for sign in (1, -1):
            r, c = row + sign * dr, col + sign * dc
            while self.bounds.contains(r, c) and not self.is_block(r, c):
                length += 1
                r += sign * dr
                c += sign * dc
        return length

    def isolated_cells(self) -> List[Tuple[int, int]]:
        """Non-block cells that belong to no across or down slot."""

        isolated: List[Tuple[int, int]] = []
        for r in range(self.bounds.rows):
            for c in range(self.bounds.cols):
                if self.is_block(r, c):
                    continue
                if (
                    self.run_length(r, c, Direction.ACROSS) < MIN_SLOT_LENGTH
                    and self.run_length(r, c, Direction.DOWN) < MIN_SLOT_LENGTH
                ):
                    isolated.append((r, c))
        return isolated

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    def detect_slots(self) -> List[Slot]:
        """Derive across then down slots, marking those already spelled out."""

        isolated = self.isolated_cells()
        if isolated:
            raise InvalidInputError(f"isolated cell at {isolated[0]} cannot hold a word")

        slots: List[Slot] = []
        for r in range(self.bounds.rows):
            slots.extend(self._scan_line(r, 0, Direction.ACROSS))
        for c in range(self.bounds.cols):
            slots.extend(self._scan_line(0, c, Direction.DOWN))
        LOGGER.debug("Detected %d word slots", len(slots))
        return slots

    def _scan_line(self, row: int, col: int, direction: Direction) -> List[Slot]:
        dr, dc = step(direction)
        found: List[Slot] = []
        r, c = row, col
        while self.bounds.contains(r, c):
            if self.is_block(r, c):
                r, c = r + dr, c + dc
                continue
            start_row, start_col = r, c
            length = 0
            while self.bounds.contains(r, c) and not self.is_block(r, c):
                length += 1
                r, c = r + dr, c + dc
            if length >= MIN_SLOT_LENGTH:
                slot = Slot(direction=direction, start_row=start_row, start_col=start_col, length=length)
                pattern = self.pattern(slot)
                if WILDCARD not in pattern:
                    slot.filled = True
                    slot.word = pattern
                found.append(slot)
        return found

    @staticmethod
    def build_crossings(slots: Sequence[Slot]) -> Dict[str, List[Crossing]]:
        """Map each slot id to the crossings it shares with other slots."""

        through: Dict[Tuple[int, int], List[Tuple[Slot, int]]] = defaultdict(list)
        for slot in slots:
            for position, cell in enumerate(slot.cells):
                through[cell].append((slot, position))

        crossings: Dict[str, List[Crossing]] = {slot.id: [] for slot in slots}
        for entries in through.values():
            if len(entries) != 2:
                continue
            (first, first_pos), (second, second_pos) = entries
            crossings[first.id].append(Crossing(first.id, first_pos, second.id, second_pos))
            crossings[second.id].append(Crossing(second.id, second_pos, first.id, first_pos))
        return crossings

    def pattern(self, slot: Slot) -> str:
        return "".join(self.cells[r][c].letter or WILDCARD for r, c in slot.cells)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------
    def place(self, slot: Slot, word: str) -> None:
        word = word.upper()
        if len(word) != slot.length:
            raise SlotPlacementError(f"'{word}' does not fit {slot.id} (length {slot.length})")
        for index, (row, col) in enumerate(slot.cells):
            cell = self.cells[row][col]
            if cell.is_block():
                raise SlotPlacementError(f"{slot.id} overlaps a block at ({row},{col})")
            if cell.letter and cell.letter != word[index]:
                raise SlotPlacementError(
                    f"Letter conflict at ({row},{col}): '{cell.letter}' vs '{word[index]}'"
                )

        for index, (row, col) in enumerate(slot.cells):
            cell = self.cells[row][col]
            cell.type = CellType.LETTER
            cell.letter = word[index]
            cell.owners.add(slot.id)
        slot.filled = True
        slot.word = word

    def unplace(self, slot: Slot) -> None:
        """Remove ``slot``'s word, keeping letters other placed slots or seeds rely on."""

        for row, col in slot.cells:
            cell = self.cells[row][col]
            cell.owners.discard(slot.id)
            if not cell.owners and not cell.fixed:
                cell.type = CellType.EMPTY
                cell.letter = None
        slot.filled = False
        slot.word = None

    def claim(self, slot: Slot) -> None:
        """Record ownership for a slot already spelled out by the loaded grid."""

        for row, col in slot.cells:
            self.cells[row][col].owners.add(slot.id)

    # ------------------------------------------------------------------
    # Numbering & serialization
    # ------------------------------------------------------------------
    def clue_numbers(self) -> List[List[Optional[int]]]:
        """Number cells that start an across or down slot, in reading order."""

        numbers: List[List[Optional[int]]] = [
            [None] * self.bounds.cols for _ in range(self.bounds.rows)
        ]
        current = 1
        for r in range(self.bounds.rows):
            for c in range(self.bounds.cols):
                if self.is_block(r, c):
                    continue
                starts_across = (c == 0 or self.is_block(r, c - 1)) and (
                    c + 1 < self.bounds.cols and not self.is_block(r, c + 1)
                )
                starts_down = (r == 0 or self.is_block(r - 1, c)) and (
                    r + 1 < self.bounds.rows and not self.is_block(r + 1, c)
                )
                if starts_across or starts_down:
                    numbers[r][c] = current
                    current += 1
        return numbers

    def to_rows(self) -> List[List[str]]:
        return [
            [
                BLOCK_MARKER if cell.is_block() else (cell.letter or EMPTY_MARKER)
                for cell in row
            ]
            for row in self.cells
        ]

    def to_strings(self) -> List[str]:
        return [
            "".join(
                BLOCK_MARKER if cell.is_block() else (cell.letter or WILDCARD) for cell in row
            )
            for row in self.cells
        ]

    def __str__(self) -> str:
        return "\n".join(self.to_strings())

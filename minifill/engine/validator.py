"""Deterministic rule validation for filled grids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.constants import Direction
from ..core.exceptions import ValidationError
from ..core.models import Placement
from ..data.dictionary import WordIndex
from ..utils.logger import get_logger
from .grid import FillGrid


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str] = field(default_factory=list)


class GridValidator:
    """Runs deterministic validation over a filled grid and its placements.

    Words listed in ``fixed_words`` were supplied by the caller and are exempt
    from the dictionary, score and exclusion checks.
    """

    def __init__(self, index: WordIndex) -> None:
        self.index = index

    def validate(
        self,
        grid: FillGrid,
        placements: Sequence[Placement],
        *,
        exclude: Iterable[str] = (),
        min_score: int = 1,
        fixed_words: Iterable[str] = (),
    ) -> ValidationResult:
        fixed = {word.upper() for word in fixed_words}
        try:
            self._check_complete(grid)
            by_start = self._check_lengths(grid, placements)
            self._check_crossings(grid, by_start)
            self._check_no_duplicate_words(placements)
            self._check_words(placements, fixed, min_score)
            self._check_exclusions(placements, fixed, exclude)
        except ValidationError as exc:
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=[str(exc)])
        return ValidationResult(ok=True)

    def _check_complete(self, grid: FillGrid) -> None:
        for r in range(grid.bounds.rows):
            for c in range(grid.bounds.cols):
                cell = grid.cell(r, c)
                if cell.is_block():
                    continue
                if not cell.letter or not cell.letter.isalpha() or not cell.letter.isupper():
                    raise ValidationError(f"Cell ({r},{c}) is not filled with a letter")

    def _check_lengths(
        self, grid: FillGrid, placements: Sequence[Placement]
    ) -> Dict[str, str]:
        placed: Dict[Tuple[Direction, int, int], str] = {
            (p.direction, p.start_row, p.start_col): p.word for p in placements
        }
        by_slot: Dict[str, str] = {}
        for slot in grid.detect_slots():
            word = placed.get((slot.direction, slot.start_row, slot.start_col))
            if word is None:
                raise ValidationError(f"Slot {slot.id} has no placed word")
            if len(word) != slot.length:
                raise ValidationError(
                    f"Word '{word}' has length {len(word)} but {slot.id} has length {slot.length}"
                )
            if grid.pattern(slot) != word:
                raise ValidationError(f"Slot {slot.id} reads '{grid.pattern(slot)}', not '{word}'")
            by_slot[slot.id] = word
        if len(by_slot) != len(placed):
            raise ValidationError("Placements do not match the grid's slots")
        return by_slot

    def _check_crossings(self, grid: FillGrid, by_slot: Dict[str, str]) -> None:
        crossings = grid.build_crossings(grid.detect_slots())
        for items in crossings.values():
            for crossing in items:
                mine = by_slot[crossing.slot_id][crossing.position]
                theirs = by_slot[crossing.cross_slot_id][crossing.cross_position]
                if mine != theirs:
                    raise ValidationError(
                        f"Crossing mismatch between {crossing.slot_id} and {crossing.cross_slot_id}"
                    )

    def _check_no_duplicate_words(self, placements: Sequence[Placement]) -> None:
        seen = set()
        for placement in placements:
            if placement.word in seen:
                raise ValidationError(
                    f"Duplicate word '{placement.word}' at ({placement.start_row},{placement.start_col})"
                )
            seen.add(placement.word)

    def _check_words(self, placements: Sequence[Placement], fixed: set, min_score: int) -> None:
        for placement in placements:
            if placement.word in fixed:
                continue
            if not self.index.contains(placement.word):
                raise ValidationError(f"Word '{placement.word}' is not in the dictionary")
            if self.index.score(placement.word) < min_score:
                raise ValidationError(
                    f"Word '{placement.word}' scores {self.index.score(placement.word)} (< {min_score})"
                )

    def _check_exclusions(
        self, placements: Sequence[Placement], fixed: set, exclude: Iterable[str]
    ) -> None:
        banned = {word.strip().upper() for word in exclude}
        for placement in placements:
            if placement.word in banned and placement.word not in fixed:
                raise ValidationError(f"Excluded word '{placement.word}' was placed")


__all__ = ["GridValidator", "ValidationResult"]

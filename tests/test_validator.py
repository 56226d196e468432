import unittest

from minifill.core.constants import Direction
from minifill.core.models import Placement
from minifill.data.dictionary import WordIndex
from minifill.engine.grid import FillGrid
from minifill.engine.validator import GridValidator

from helpers import SQUARE_GRID, SQUARE_SOLUTION, square_index


def square_placements():
    return [
        Placement("ABC", Direction.ACROSS, 0, 0),
        Placement("DEF", Direction.ACROSS, 1, 0),
        Placement("GHI", Direction.ACROSS, 2, 0),
        Placement("ADG", Direction.DOWN, 0, 0),
        Placement("BEH", Direction.DOWN, 0, 1),
        Placement("CFI", Direction.DOWN, 0, 2),
    ]


class ValidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = GridValidator(square_index())
        self.grid = FillGrid.from_rows(SQUARE_SOLUTION)

    def test_valid_square_passes(self) -> None:
        result = self.validator.validate(self.grid, square_placements())
        self.assertTrue(result.ok, result.messages)
        self.assertEqual(result.messages, [])

    def test_incomplete_grid_fails(self) -> None:
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = self.validator.validate(FillGrid.from_rows(SQUARE_GRID), square_placements())
        self.assertFalse(result.ok)
        self.assertIn("Cell (0,0) is not filled", result.messages[0])

    def test_placement_must_match_grid_letters(self) -> None:
        placements = square_placements()
        placements[0] = Placement("XYZ", Direction.ACROSS, 0, 0)
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = self.validator.validate(self.grid, placements)
        self.assertFalse(result.ok)
        self.assertIn("reads 'ABC'", result.messages[0])

    def test_missing_placement_fails(self) -> None:
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = self.validator.validate(self.grid, square_placements()[:-1])
        self.assertFalse(result.ok)
        self.assertIn("down-0-2", result.messages[0])

    def test_duplicate_words_fail(self) -> None:
        grid = FillGrid.from_rows(["AB###", "AB###", "#####", "#####", "#####"])
        placements = [
            Placement("AB", Direction.ACROSS, 0, 0),
            Placement("AB", Direction.ACROSS, 1, 0),
            Placement("AA", Direction.DOWN, 0, 0),
            Placement("BB", Direction.DOWN, 0, 1),
        ]
        validator = GridValidator(WordIndex.from_entries([("AB", 50), ("AA", 50), ("BB", 50)]))
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = validator.validate(grid, placements)
        self.assertFalse(result.ok)
        self.assertIn("Duplicate word 'AB'", result.messages[0])

    def test_unknown_words_fail_unless_fixed(self) -> None:
        validator = GridValidator(
            WordIndex.from_entries([("ABC", 90), ("DEF", 80), ("ADG", 60), ("BEH", 50), ("CFI", 40)])
        )
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = validator.validate(self.grid, square_placements())
        self.assertIn("'GHI' is not in the dictionary", result.messages[0])

        result = validator.validate(self.grid, square_placements(), fixed_words=["ghi"])
        self.assertTrue(result.ok, result.messages)

    def test_minimum_score_applies(self) -> None:
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = self.validator.validate(self.grid, square_placements(), min_score=50)
        self.assertFalse(result.ok)
        self.assertIn("'CFI' scores 40", result.messages[0])

    def test_excluded_words_fail_unless_fixed(self) -> None:
        with self.assertLogs("minifill.engine.validator", level="ERROR"):
            result = self.validator.validate(self.grid, square_placements(), exclude=[" abc"])
        self.assertIn("Excluded word 'ABC'", result.messages[0])

        result = self.validator.validate(
            self.grid, square_placements(), exclude=["ABC"], fixed_words=["ABC"]
        )
        self.assertTrue(result.ok, result.messages)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

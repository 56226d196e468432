import random
import unittest
from unittest.mock import MagicMock, patch

from minifill.core.constants import Symmetry
from minifill.engine.grid import FillGrid
from minifill.engine.templates import (
    TEMPLATES,
    apply_symmetry,
    choose_template,
    template_problems,
)


class TemplateTests(unittest.TestCase):
    def test_curated_templates_are_valid(self) -> None:
        self.assertEqual(len(TEMPLATES), 6)
        for symmetry in (Symmetry.NONE, Symmetry.ROTATIONAL, Symmetry.HORIZONTAL, Symmetry.VERTICAL):
            for blocks in TEMPLATES:
                grid = FillGrid.from_blocks(apply_symmetry(blocks, symmetry))
                self.assertEqual(template_problems(grid), [], (symmetry, sorted(blocks)))

    def test_diagonal_mirror_can_box_in_the_center(self) -> None:
        blocks = apply_symmetry(TEMPLATES[2], Symmetry.DIAGONAL)
        self.assertEqual(blocks, {(1, 2), (3, 2), (2, 1), (2, 3)})
        problems = template_problems(FillGrid.from_blocks(blocks))
        self.assertIn("white cells are not connected", problems)

        rng = MagicMock()
        rng.randrange.return_value = 2
        index, grid = choose_template(rng, Symmetry.DIAGONAL)
        self.assertEqual(index, 1)
        self.assertEqual(grid.blocks(), [(2, 2)])

    def test_symmetry_partners(self) -> None:
        self.assertEqual(apply_symmetry({(1, 2)}, Symmetry.ROTATIONAL), {(1, 2), (3, 2)})
        self.assertEqual(apply_symmetry({(0, 1)}, Symmetry.HORIZONTAL), {(0, 1), (4, 1)})
        self.assertEqual(apply_symmetry({(0, 1)}, Symmetry.VERTICAL), {(0, 1), (0, 3)})
        self.assertEqual(apply_symmetry({(0, 1)}, Symmetry.DIAGONAL), {(0, 1), (1, 0)})
        self.assertEqual(apply_symmetry({(0, 1)}, Symmetry.NONE), {(0, 1)})

    def test_problems_are_reported(self) -> None:
        full_row = FillGrid.from_blocks([(2, c) for c in range(5)])
        problems = template_problems(full_row)
        self.assertIn("row 2 is fully blocked", problems)
        self.assertIn("white cells are not connected", problems)

        crowded = FillGrid.from_blocks([(r, c) for r in range(3) for c in range(4)])
        self.assertTrue(any("exceeds" in problem for problem in template_problems(crowded)))

    def test_choose_template_is_seeded(self) -> None:
        first = choose_template(random.Random(11))
        second = choose_template(random.Random(11))
        self.assertEqual(first[0], second[0])
        self.assertEqual(set(first[1].blocks()), set(TEMPLATES[first[0]]))

    def test_rejected_template_falls_back_to_center_block(self) -> None:
        rng = MagicMock()
        rng.randrange.return_value = 0
        bad = frozenset((2, c) for c in range(5))
        with patch("minifill.engine.templates.TEMPLATES", (bad, frozenset({(2, 2)}))):
            index, grid = choose_template(rng)
        self.assertEqual(index, 1)
        self.assertEqual(grid.blocks(), [(2, 2)])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

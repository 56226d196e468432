import random
import unittest

from minifill.core.models import FillStats
from minifill.data.dictionary import WordIndex
from minifill.engine.grid import FillGrid
from minifill.engine.solver import ConstraintSolver, Deadline

from helpers import SQUARE_GRID, SQUARE_SOLUTION, square_index, synthetic_index


class DeadlineTests(unittest.TestCase):
    def test_zero_deadline_is_already_expired(self) -> None:
        self.assertTrue(Deadline.after_ms(0).expired())
        self.assertFalse(Deadline().expired())
        self.assertIsNone(Deadline().remaining_seconds())
        self.assertFalse(Deadline.after_ms(60_000).expired())


class SolverTests(unittest.TestCase):
    def test_square_fill_follows_score_order(self) -> None:
        grid = FillGrid.from_rows(SQUARE_GRID)
        solver = ConstraintSolver(grid, square_index())
        self.assertTrue(solver.initialize())
        self.assertTrue(solver.propagate())
        self.assertTrue(solver.solve())
        self.assertEqual(grid.to_strings(), SQUARE_SOLUTION)
        self.assertEqual(
            [p.word for p in solver.placements()],
            ["ABC", "DEF", "GHI", "ADG", "BEH", "CFI"],
        )

    def test_full_arc_consistency_prunes_domains(self) -> None:
        grid = FillGrid.from_rows(["A..##", "...##", "...##", "#####", "#####"])
        solver = ConstraintSolver(grid, square_index())
        self.assertTrue(solver.initialize())
        self.assertEqual(solver.candidates_for("across-0-0"), ["ABC", "ADG"])
        self.assertTrue(solver.propagate())
        # XYZ has no support in any crossing slot.
        self.assertNotIn("XYZ", solver.candidates_for("across-1-0"))
        self.assertGreater(solver.stats.ac3_revisions, 0)

    def test_pattern_searches_are_memoized(self) -> None:
        stats = FillStats()
        solver = ConstraintSolver(FillGrid.from_rows(SQUARE_GRID), square_index(), stats=stats)
        solver.initialize()
        self.assertEqual(stats.pattern_searches, 1)
        self.assertEqual(stats.cache_hits, 5)

    def test_exclusions_and_min_score_shape_domains(self) -> None:
        solver = ConstraintSolver(
            FillGrid.from_rows(SQUARE_GRID),
            square_index(),
            min_score=50,
            exclude=[" abc "],
        )
        solver.initialize()
        self.assertEqual(solver.candidates_for("across-0-0"), ["DEF", "GHI", "ADG", "BEH"])

    def test_empty_domain_fails_initialization(self) -> None:
        grid = FillGrid.from_rows(["QQQQQ", ".....", ".....", ".....", "....."])
        solver = ConstraintSolver(grid, synthetic_index())
        self.assertFalse(solver.initialize())
        self.assertEqual(solver.candidates_for("down-0-0"), [])
        self.assertEqual(solver.placed, {"across-0-0": "QQQQQ"})

    def test_duplicate_prefilled_words_fail(self) -> None:
        grid = FillGrid.from_rows(["AB###", "AB###", "#####", "#####", "#####"])
        solver = ConstraintSolver(grid, WordIndex.from_entries([("AB", 50), ("AA", 50), ("BB", 50)]))
        self.assertFalse(solver.initialize())

    def test_uniqueness_forces_backtracking(self) -> None:
        # Every 2x2 arrangement over two letters repeats a word.
        grid = FillGrid.from_rows(["..###", "..###", "#####", "#####", "#####"])
        index = WordIndex.from_entries([("AA", 90), ("AB", 50), ("BA", 40), ("BB", 30)])
        solver = ConstraintSolver(grid, index)
        self.assertTrue(solver.initialize())
        self.assertTrue(solver.propagate())
        self.assertFalse(solver.solve())
        self.assertFalse(solver.timed_out)
        self.assertGreater(solver.stats.backtracks, 0)
        self.assertEqual(grid.to_strings()[0], "..###")

    def test_expired_deadline_stops_search(self) -> None:
        solver = ConstraintSolver(
            FillGrid.from_rows(SQUARE_GRID), square_index(), deadline=Deadline.after_ms(0)
        )
        solver.initialize()
        self.assertFalse(solver.solve())
        self.assertTrue(solver.timed_out)

    def test_is_viable_restores_state(self) -> None:
        grid = FillGrid.from_rows(SQUARE_GRID)
        solver = ConstraintSolver(grid, square_index())
        solver.initialize()
        solver.propagate()
        before = {key: list(value) for key, value in solver.domains.items()}

        self.assertTrue(solver.is_viable("across-0-0", "ABC"))
        self.assertFalse(solver.is_viable("across-0-0", "XYZ"))
        self.assertEqual(solver.domains, before)
        self.assertEqual(grid.to_strings(), SQUARE_GRID)
        self.assertEqual(solver.placed, {})

    def test_quick_fill_ordering_is_seeded(self) -> None:
        def first_row(seed: int) -> str:
            grid = FillGrid()
            solver = ConstraintSolver(
                grid, synthetic_index(), rng=random.Random(seed), quick_fill=True
            )
            solver.initialize()
            solver.propagate()
            self.assertTrue(solver.solve())
            return grid.to_strings()[0]

        self.assertEqual(first_row(3), first_row(3))
        first = synthetic_index().score(first_row(3))
        self.assertGreaterEqual(first, 75)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

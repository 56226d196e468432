"""Curated black-square templates for generating grids from scratch."""

from __future__ import annotations

import random
from typing import FrozenSet, Iterable, List, Tuple

from ..core.constants import GRID_SIZE, MAX_BLOCKS, Symmetry
from ..utils.logger import get_logger
from .grid import FillGrid

LOGGER = get_logger(__name__)

Blocks = FrozenSet[Tuple[int, int]]

TEMPLATES: Tuple[Blocks, ...] = (
    frozenset(),
    frozenset({(2, 2)}),
    frozenset({(1, 2), (3, 2)}),
    frozenset({(1, 1), (3, 3)}),
    frozenset({(1, 3), (3, 1)}),
    frozenset({(1, 1), (1, 3), (3, 1), (3, 3)}),
)

FALLBACK_TEMPLATE = 1


def mirror(row: int, col: int, symmetry: Symmetry) -> Tuple[int, int]:
    last = GRID_SIZE - 1
    if symmetry == Symmetry.ROTATIONAL:
        return last - row, last - col
    if symmetry == Symmetry.HORIZONTAL:
        return last - row, col
    if symmetry == Symmetry.VERTICAL:
        return row, last - col
    if symmetry == Symmetry.DIAGONAL:
        return col, row
    return row, col


def apply_symmetry(blocks: Iterable[Tuple[int, int]], symmetry: Symmetry) -> Blocks:
    """Add the mirror partner of every block."""

    blocks = frozenset(blocks)
    if symmetry == Symmetry.NONE:
        return blocks
    return blocks | {mirror(row, col, symmetry) for row, col in blocks}


def template_problems(grid: FillGrid) -> List[str]:
    """Reasons ``grid`` is unusable as a template; empty when it is fine."""

    problems: List[str] = []
    if grid.block_count() > MAX_BLOCKS:
        problems.append(f"{grid.block_count()} blocks exceeds {MAX_BLOCKS}")
    size = grid.bounds.rows
    for r in range(size):
        if all(grid.is_block(r, c) for c in range(grid.bounds.cols)):
            problems.append(f"row {r} is fully blocked")
    for c in range(grid.bounds.cols):
        if all(grid.is_block(r, c) for r in range(size)):
            problems.append(f"column {c} is fully blocked")
    if not grid.is_connected():
        problems.append("white cells are not connected")
    isolated = grid.isolated_cells()
    if isolated:
        problems.append(f"isolated cell at {isolated[0]}")
    return problems


def choose_template(rng: random.Random, symmetry: Symmetry = Symmetry.NONE) -> Tuple[int, FillGrid]:
    """Pick a template uniformly, mirror it and fall back to the center block if rejected."""

    choice = rng.randrange(len(TEMPLATES))
    grid = FillGrid.from_blocks(apply_symmetry(TEMPLATES[choice], symmetry))
    problems = template_problems(grid)
    if not problems:
        return choice, grid
    LOGGER.debug("Template %d rejected: %s", choice, "; ".join(problems))
    return FALLBACK_TEMPLATE, FillGrid.from_blocks(TEMPLATES[FALLBACK_TEMPLATE])


__all__ = ["TEMPLATES", "apply_symmetry", "choose_template", "mirror", "template_problems"]

"""CP-SAT fill backend using OR-Tools."""

from __future__ import annotations

from collections import defaultdict
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from ..core.models import Slot
from ..data.dictionary import WordIndex
from ..utils.logger import get_logger
from .grid import FillGrid

LOGGER = get_logger(__name__)


def _letter_value(letter: str) -> int:
    return ord(letter) - ord("A")


def solve_with_cpsat(
    grid: FillGrid,
    slots: Sequence[Slot],
    index: WordIndex,
    *,
    min_score: int = 1,
    exclude: Iterable[str] = frozenset(),
    timeout_seconds: float = 5.0,
    num_workers: int = 1,
) -> Optional[Dict[str, str]]:
    """Fill the unfilled ``slots`` of ``grid`` via CP-SAT.

    Args:
        grid: FillGrid whose letters are treated as constants.
        slots: every slot of the grid; filled slots only contribute their words
            to the uniqueness constraints.
        index: WordIndex used for the per-slot candidate tables.
        min_score: minimum dictionary score for candidate words.
        exclude: words that may not be used anywhere.
        timeout_seconds: solver time limit.
        num_workers: CP-SAT search workers; a single worker keeps runs reproducible.

    Returns:
        ``{slot_id: word}`` for every unfilled slot, or None if unsolvable or
        the time limit was reached first.
    """

    unfilled = [slot for slot in slots if not slot.filled]
    if not unfilled:
        return {}
    banned: FrozenSet[str] = frozenset(w.strip().upper() for w in exclude)
    placed_words = {slot.word for slot in slots if slot.filled and slot.word}

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell letter variables
    # ------------------------------------------------------------------
    cell_vars: Dict[Tuple[int, int], object] = {}  # (r,c) -> IntVar or int

    for slot in unfilled:
        for r, c in slot.cells:
            if (r, c) in cell_vars:
                continue
            existing = grid.cell(r, c).letter
            if existing:
                cell_vars[(r, c)] = _letter_value(existing)
            else:
                cell_vars[(r, c)] = model.new_int_var(0, 25, f"L_{r}_{c}")

    # ------------------------------------------------------------------
    # Step 2: Per-slot candidate tables
    # ------------------------------------------------------------------
    for slot in unfilled:
        words = [
            word
            for word in index.search(grid.pattern(slot), min_score)
            if word not in banned and word not in placed_words
        ]
        if not words:
            LOGGER.debug("CP-SAT: no candidates for %s", slot.id)
            return None
        cell_list = [cell_vars[cell] for cell in slot.cells]
        model.add_allowed_assignments(
            cell_list, [[_letter_value(ch) for ch in word] for word in words]
        )

    # ------------------------------------------------------------------
    # Step 3: Uniqueness constraints
    # ------------------------------------------------------------------
    by_length: Dict[int, List[Slot]] = defaultdict(list)
    for slot in unfilled:
        by_length[slot.length].append(slot)
    for group in by_length.values():
        for first, second in combinations(group, 2):
            _add_differ_constraint(model, cell_vars, first, second)

    # ------------------------------------------------------------------
    # Step 4: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = max(timeout_seconds, 0.001)
    solver.parameters.num_workers = num_workers

    LOGGER.debug(
        "CP-SAT: %d slots, %d cell vars (timeout=%0.2fs)",
        len(unfilled),
        sum(1 for v in cell_vars.values() if isinstance(v, cp_model.IntVar)),
        timeout_seconds,
    )
    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.debug("CP-SAT: no solution (status=%s)", solver.status_name(status))
        return None

    # ------------------------------------------------------------------
    # Step 5: Extract solution
    # ------------------------------------------------------------------
    return {
        slot.id: "".join(chr(_resolve_var(solver, cell_vars[cell]) + ord("A")) for cell in slot.cells)
        for slot in unfilled
    }


def _resolve_var(solver: cp_model.CpSolver, var_or_const) -> int:
    if isinstance(var_or_const, cp_model.IntVar):
        return solver.value(var_or_const)
    return var_or_const


def _add_differ_constraint(model, cell_vars, first: Slot, second: Slot) -> None:
    """Ensure two same-length slots cannot spell the same word."""
    diffs = []
    for pos in range(first.length):
        v1 = cell_vars[first.cells[pos]]
        v2 = cell_vars[second.cells[pos]]
        if not isinstance(v1, cp_model.IntVar) and not isinstance(v2, cp_model.IntVar):
            if v1 != v2:
                return
            continue
        b = model.new_bool_var(f"d_{first.id}_{second.id}_{pos}")
        model.add(v1 != v2).only_enforce_if(b)
        model.add(v1 == v2).only_enforce_if(~b)
        diffs.append(b)
    if diffs:
        model.add_bool_or(diffs)


__all__ = ["solve_with_cpsat"]

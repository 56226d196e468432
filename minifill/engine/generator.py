"""Fill orchestration: generate from scratch, fill a partial grid, list candidates.

Each operation runs the same pipeline of slot detection, domain initialization,
full AC-3 and a search backend, then validates the result. Failures raised
inside an attempt are caught here and turned into :class:`FillFailure` values;
callers never see exceptions for the no-solution, timeout or invalid-input
cases unless they ask for them with :meth:`FillResult.raise_for_error`.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from ..core.constants import FailureKind, FillBackend, Symmetry
from ..core.exceptions import (
    FillError,
    FillTimeoutError,
    InvalidInputError,
    NoSolutionError,
    QualityRejectedError,
    SlotPlacementError,
    ValidationError,
)
from ..core.models import Candidate, FillStats, Placement
from ..data.dictionary import WordIndex
from ..utils.logger import get_logger
from .cpsat import solve_with_cpsat
from .grid import FillGrid
from .quality import QualityPolicy, QualityReport, score_quality
from .solver import ConstraintSolver, Deadline
from .templates import choose_template
from .validator import GridValidator


LOGGER = get_logger(__name__)

GridInput = Union[FillGrid, Sequence[object]]

_ERRORS = {
    FailureKind.INVALID_INPUT: InvalidInputError,
    FailureKind.NO_SOLUTION: NoSolutionError,
    FailureKind.TIMEOUT: FillTimeoutError,
}


@dataclass
class FillOptions:
    symmetry: Symmetry = Symmetry.NONE
    min_score: int = 1
    max_retries: int = 20
    timeout_ms: Optional[int] = 5000
    exclude_words: Sequence[str] = ()
    quick_fill: bool = False
    backend: FillBackend = FillBackend.BACKTRACKING
    quality: QualityPolicy = field(default_factory=QualityPolicy)
    limit: int = 100
    check_viability: bool = False

    def merged(self, **overrides) -> "FillOptions":
        return replace(self, **overrides)

    def excluded(self) -> FrozenSet[str]:
        return frozenset(word.strip().upper() for word in self.exclude_words if word and word.strip())


@dataclass
class FillFailure:
    kind: FailureKind
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass
class FillResult:
    success: bool
    grid: Optional[List[List[str]]] = None
    solution: Optional[List[str]] = None
    words: List[Placement] = field(default_factory=list)
    quality: Optional[QualityReport] = None
    stats: FillStats = field(default_factory=FillStats)
    error: Optional[FillFailure] = None
    clue_numbers: Optional[List[List[Optional[int]]]] = None

    def raise_for_error(self) -> None:
        if self.success or self.error is None:
            return
        raise _ERRORS[self.error.kind](self.error.message)

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": self.success,
            "grid": self.grid,
            "solution": self.solution,
            "words": [placement.to_dict() for placement in self.words],
            "quality": self.quality.to_dict() if self.quality else None,
            "stats": self.stats.to_dict(),
            "error": self.error.to_dict() if self.error else None,
            "clue_numbers": self.clue_numbers,
        }


@dataclass
class CandidateResult:
    candidates: List[Candidate] = field(default_factory=list)
    slot: Optional[Dict[str, object]] = None
    total_candidates: int = 0
    viable_candidates: int = 0
    error: Optional[FillFailure] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "candidates": [candidate.to_dict() for candidate in self.candidates],
            "slot": self.slot,
            "total_candidates": self.total_candidates,
            "viable_candidates": self.viable_candidates,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class SlotSuggestion:
    slot: Dict[str, object]
    domain_size: int
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {"slot": self.slot, "domain_size": self.domain_size, "reason": self.reason}


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _as_grid(grid: GridInput) -> FillGrid:
    if isinstance(grid, FillGrid):
        return grid.copy()
    return FillGrid.from_rows(grid)


class FillEngine:
    """Runs fill operations against one shared :class:`WordIndex`.

    ``rng`` is the only source of randomness (template choice and quick-fill
    ordering), so an engine built with a seed reproduces its results.
    """

    def __init__(
        self,
        index: WordIndex,
        options: Optional[FillOptions] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.index = index
        self.options = options or FillOptions()
        self.rng = random.Random(seed)
        self.validator = GridValidator(index)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def generate(self, options: Optional[FillOptions] = None) -> FillResult:
        opts = options or self.options
        started = time.monotonic()
        stats = FillStats(excluded_words=len(opts.excluded()))
        timed_out = False

        for attempt in range(1, max(1, opts.max_retries) + 1):
            stats.attempts = attempt
            template, grid = choose_template(self.rng, opts.symmetry)
            stats.template = template
            try:
                placements, quality = self._attempt(grid, opts, stats, enforce_quality=True)
            except FillTimeoutError as exc:
                timed_out = True
                LOGGER.debug("Generate attempt %d timed out: %s", attempt, exc)
                continue
            except (QualityRejectedError, ValidationError) as exc:
                LOGGER.warning("Generate attempt %d rejected: %s", attempt, exc)
                continue
            except FillError as exc:
                LOGGER.debug("Generate attempt %d failed: %s", attempt, exc)
                continue
            return self._success("generate", grid, placements, quality, stats, started)

        kind = FailureKind.TIMEOUT if timed_out else FailureKind.NO_SOLUTION
        return self._failure("generate", kind, stats, started)

    def fill(self, grid: GridInput, options: Optional[FillOptions] = None) -> FillResult:
        opts = options or self.options
        operation = "quickfill" if opts.quick_fill else "fill"
        started = time.monotonic()
        stats = FillStats(excluded_words=len(opts.excluded()))
        try:
            source = _as_grid(grid)
        except InvalidInputError as exc:
            return self._failure(operation, FailureKind.INVALID_INPUT, stats, started, str(exc))

        # Only quick-fill reorders the search, so only quick-fill retries timeouts.
        attempts = max(1, opts.max_retries) if opts.quick_fill else 1
        kind = FailureKind.NO_SOLUTION
        for attempt in range(1, attempts + 1):
            stats.attempts = attempt
            working = source.copy()
            try:
                placements, quality = self._attempt(working, opts, stats, enforce_quality=False)
            except FillTimeoutError as exc:
                kind = FailureKind.TIMEOUT
                LOGGER.debug("%s attempt %d timed out: %s", operation, attempt, exc)
                continue
            except InvalidInputError as exc:
                return self._failure(operation, FailureKind.INVALID_INPUT, stats, started, str(exc))
            except FillError as exc:
                kind = FailureKind.NO_SOLUTION
                LOGGER.debug("%s attempt %d failed: %s", operation, attempt, exc)
                break
            return self._success(operation, working, placements, quality, stats, started)
        return self._failure(operation, kind, stats, started)

    def quick_fill(self, grid: GridInput, options: Optional[FillOptions] = None) -> FillResult:
        return self.fill(grid, (options or self.options).merged(quick_fill=True))

    def candidates(
        self,
        grid: GridInput,
        slot_id: str,
        options: Optional[FillOptions] = None,
    ) -> CandidateResult:
        """Arc-consistent candidates for one slot, best scores first."""

        opts = options or self.options
        excluded = opts.excluded()
        try:
            solver, dead_end = self._prepared_solver(_as_grid(grid), opts)
        except InvalidInputError as exc:
            return CandidateResult(
                error=FillFailure(FailureKind.INVALID_INPUT, f"candidates: invalid input: {exc}")
            )

        slot = solver.slot_map.get(slot_id)
        if slot is None:
            LOGGER.debug("Unknown slot id %s", slot_id)
            return CandidateResult()

        descriptor = slot.describe(solver.grid.pattern(slot))
        if dead_end is not None:
            LOGGER.debug("No candidates for %s: %s", slot_id, dead_end)
            return CandidateResult(
                slot=descriptor,
                error=FillFailure(FailureKind.NO_SOLUTION, f"candidates: no solution: {dead_end}"),
            )

        placed = set(solver.placed.values())
        domain = [
            word for word in solver.candidates_for(slot_id) if word not in excluded and word not in placed
        ]
        domain.sort(key=lambda word: (-self.index.score(word), word))
        candidates: List[Candidate] = []
        for word in domain[: max(0, opts.limit)]:
            viable = solver.is_viable(slot_id, word) if opts.check_viability else None
            candidates.append(Candidate(word=word, score=self.index.score(word), viable=viable))
        return CandidateResult(
            candidates=candidates,
            slot=descriptor,
            total_candidates=len(domain),
            viable_candidates=sum(1 for candidate in candidates if candidate.viable is not False),
        )

    def evaluate(self, grid: GridInput, options: Optional[FillOptions] = None) -> QualityReport:
        """Quality of the words already spelled out by the grid."""

        opts = options or self.options
        board = _as_grid(grid)
        words = [slot.word for slot in board.detect_slots() if slot.filled and slot.word]
        return score_quality(words, self.index, opts.quality, board.block_count())

    def best_slot(
        self, grid: GridInput, options: Optional[FillOptions] = None
    ) -> Optional[SlotSuggestion]:
        """The open slot with the fewest arc-consistent candidates, or None when full."""

        solver, _ = self._prepared_solver(_as_grid(grid), options or self.options)
        open_slots = solver.open_slots()
        if not open_slots:
            return None
        slot = min(open_slots, key=lambda item: len(solver.domains[item.id]))
        size = len(solver.domains[slot.id])
        if size == 0:
            reason = "No candidates fit this slot; the grid cannot be completed as is"
        else:
            reason = f"Most constrained open slot with {size} candidate(s)"
        return SlotSuggestion(
            slot=slot.describe(solver.grid.pattern(slot)),
            domain_size=size,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _prepared_solver(
        self, grid: FillGrid, opts: FillOptions
    ) -> Tuple[ConstraintSolver, Optional[str]]:
        """Solver with domains built and AC-3 applied, plus why it dead-ended if it did."""

        solver = ConstraintSolver(
            grid,
            self.index,
            min_score=opts.min_score,
            exclude=opts.excluded(),
            rng=self.rng,
        )
        if not solver.initialize():
            return solver, "a slot has no candidate words"
        if not solver.propagate():
            return solver, "arc consistency emptied a domain"
        return solver, None

    def _attempt(
        self,
        grid: FillGrid,
        opts: FillOptions,
        stats: FillStats,
        enforce_quality: bool,
    ) -> Tuple[List[Placement], QualityReport]:
        deadline = Deadline.after_ms(opts.timeout_ms)
        if deadline.expired():
            raise FillTimeoutError("deadline expired before the search started")

        solver = ConstraintSolver(
            grid,
            self.index,
            min_score=opts.min_score,
            exclude=opts.excluded(),
            rng=self.rng,
            quick_fill=opts.quick_fill,
            deadline=deadline,
            stats=stats,
        )
        if not solver.initialize():
            raise NoSolutionError("a slot has no candidate words")
        if not solver.propagate():
            raise NoSolutionError("arc consistency emptied a domain")

        if opts.backend == FillBackend.CPSAT:
            self._solve_with_cpsat(solver, opts, deadline)
        elif not solver.solve():
            if solver.timed_out:
                raise FillTimeoutError("deadline reached during search")
            raise NoSolutionError("search exhausted every candidate")

        placements = solver.placements()
        validation = self.validator.validate(
            grid,
            placements,
            exclude=opts.excluded(),
            min_score=opts.min_score,
            fixed_words=solver.fixed_words,
        )
        if not validation.ok:
            raise ValidationError("; ".join(validation.messages))

        quality = score_quality(
            [placement.word for placement in placements],
            self.index,
            opts.quality,
            grid.block_count(),
        )
        if enforce_quality and not quality.acceptable:
            raise QualityRejectedError(
                f"quality {quality.score} with {quality.two_letter_words} two-letter words"
            )
        return placements, quality

    def _solve_with_cpsat(
        self, solver: ConstraintSolver, opts: FillOptions, deadline: Deadline
    ) -> None:
        remaining = deadline.remaining_seconds()
        assignment = solve_with_cpsat(
            solver.grid,
            solver.slots,
            self.index,
            min_score=opts.min_score,
            exclude=opts.excluded(),
            timeout_seconds=remaining if remaining is not None else 60.0,
        )
        if assignment is None:
            if deadline.expired():
                raise FillTimeoutError("CP-SAT time limit reached")
            raise NoSolutionError("CP-SAT found no solution")
        for slot_id, word in assignment.items():
            try:
                solver.assign(slot_id, word)
            except SlotPlacementError as exc:
                raise NoSolutionError(f"Cannot place CP-SAT word '{word}' in {slot_id}: {exc}") from exc

    def _success(
        self,
        operation: str,
        grid: FillGrid,
        placements: List[Placement],
        quality: QualityReport,
        stats: FillStats,
        started: float,
    ) -> FillResult:
        stats.slots_filled = len(placements)
        stats.elapsed_ms = _elapsed_ms(started)
        stats.quality = quality.to_dict()
        LOGGER.info(
            "%s: filled %d slots after %d attempt(s) in %d ms (quality %d)",
            operation,
            stats.slots_filled,
            stats.attempts,
            stats.elapsed_ms,
            quality.score,
        )
        return FillResult(
            success=True,
            grid=grid.to_rows(),
            solution=grid.to_strings(),
            words=placements,
            quality=quality,
            stats=stats,
            clue_numbers=grid.clue_numbers(),
        )

    def _failure(
        self,
        operation: str,
        kind: FailureKind,
        stats: FillStats,
        started: float,
        detail: Optional[str] = None,
    ) -> FillResult:
        stats.elapsed_ms = _elapsed_ms(started)
        if kind == FailureKind.INVALID_INPUT:
            message = f"{operation}: invalid input: {detail}"
        elif kind == FailureKind.TIMEOUT:
            message = f"{operation}: timed out after {stats.attempts} attempt(s) in {stats.elapsed_ms} ms"
        else:
            message = f"{operation}: no solution after {stats.attempts} attempt(s) in {stats.elapsed_ms} ms"
        LOGGER.info("%s", message)
        return FillResult(success=False, stats=stats, error=FillFailure(kind, message))


__all__ = [
    "CandidateResult",
    "FillEngine",
    "FillFailure",
    "FillOptions",
    "FillResult",
    "SlotSuggestion",
]

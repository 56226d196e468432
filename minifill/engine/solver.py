"""Arc-consistent backtracking solver for filling a grid's word slots."""

from __future__ import annotations

import random
import time
from collections import deque
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from ..core.constants import SCORE_TIERS
from ..core.exceptions import SlotPlacementError
from ..core.models import Crossing, FillStats, Placement, Slot
from ..data.dictionary import WordIndex
from ..utils.logger import get_logger
from .grid import FillGrid

LOGGER = get_logger(__name__)


class Deadline:
    """Wall-clock cut-off based on ``time.monotonic``; ``None`` never expires."""

    def __init__(self, expires_at: Optional[float] = None) -> None:
        self.expires_at = expires_at

    @classmethod
    def after_ms(cls, milliseconds: Optional[float]) -> "Deadline":
        if milliseconds is None:
            return cls(None)
        return cls(time.monotonic() + max(0.0, milliseconds) / 1000.0)

    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def remaining_seconds(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())


def _reverse(crossing: Crossing) -> Crossing:
    return Crossing(
        crossing.cross_slot_id,
        crossing.cross_position,
        crossing.slot_id,
        crossing.position,
    )


class ConstraintSolver:
    """Fills the open slots of one grid.

    Domains are plain lists that are replaced, never mutated in place, so a
    snapshot is a shallow copy of the ``slot id -> list`` mapping. Failures are
    reported as ``False``; ``timed_out`` tells a deadline apart from exhaustion.
    """

    def __init__(
        self,
        grid: FillGrid,
        index: WordIndex,
        *,
        min_score: int = 1,
        exclude: Iterable[str] = frozenset(),
        rng: Optional[random.Random] = None,
        quick_fill: bool = False,
        deadline: Optional[Deadline] = None,
        stats: Optional[FillStats] = None,
    ) -> None:
        self.grid = grid
        self.index = index
        self.min_score = min_score
        self.exclude: FrozenSet[str] = frozenset(w.strip().upper() for w in exclude)
        self.rng = rng or random.Random()
        self.quick_fill = quick_fill
        self.deadline = deadline or Deadline()
        self.stats = stats if stats is not None else FillStats()
        self.slots: List[Slot] = []
        self.slot_map: Dict[str, Slot] = {}
        self.crossings: Dict[str, List[Crossing]] = {}
        self.domains: Dict[str, List[str]] = {}
        self.placed: Dict[str, str] = {}
        self.fixed_words: Set[str] = set()
        self.timed_out = False
        self._pattern_cache: Dict[str, List[str]] = {}

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def initialize(self) -> bool:
        """Detect slots and build every domain.

        All domains are computed even when one comes up empty so callers that
        only inspect domains still see the full picture. Raises
        ``InvalidInputError`` for grids with isolated cells.
        """

        self.slots = self.grid.detect_slots()
        self.slot_map = {slot.id: slot for slot in self.slots}
        self.crossings = self.grid.build_crossings(self.slots)
        self.domains = {}
        self.placed = {}
        self.fixed_words = set()
        ok = True

        for slot in self.slots:
            if not slot.filled:
                continue
            word = slot.word or ""
            if word in self.fixed_words:
                LOGGER.debug("Pre-filled word %s appears twice", word)
                ok = False
            self.grid.claim(slot)
            self.domains[slot.id] = [word]
            self.placed[slot.id] = word
            self.fixed_words.add(word)

        for slot in self.slots:
            if slot.filled:
                continue
            matches = self._search(self.grid.pattern(slot))
            domain = [
                word for word in matches if word not in self.exclude and word not in self.fixed_words
            ]
            self.domains[slot.id] = domain
            LOGGER.debug("Domain %s: %d words", slot.id, len(domain))
            if not domain:
                ok = False
        return ok

    def _search(self, pattern: str) -> List[str]:
        cached = self._pattern_cache.get(pattern)
        if cached is not None:
            self.stats.cache_hits += 1
            return cached
        self.stats.pattern_searches += 1
        matches = self.index.search(pattern, self.min_score)
        self._pattern_cache[pattern] = matches
        return matches

    # ------------------------------------------------------------------
    # Arc consistency
    # ------------------------------------------------------------------
    def propagate(self, seed_slot_ids: Optional[Sequence[str]] = None) -> bool:
        """Run AC-3 over every arc, or only the arcs pointing at ``seed_slot_ids``."""

        queue: Deque[Tuple[str, Crossing]] = deque()
        queued: Set[Tuple[str, str]] = set()

        def push(crossing: Crossing) -> None:
            key = (crossing.slot_id, crossing.cross_slot_id)
            if key in queued:
                return
            queued.add(key)
            queue.append((crossing.slot_id, crossing))

        if seed_slot_ids is None:
            for crossings in self.crossings.values():
                for crossing in crossings:
                    push(crossing)
        else:
            for seed in seed_slot_ids:
                for crossing in self.crossings.get(seed, ()):
                    push(_reverse(crossing))

        while queue:
            slot_id, crossing = queue.popleft()
            queued.discard((slot_id, crossing.cross_slot_id))
            if not self._revise(crossing):
                continue
            if not self.domains[slot_id]:
                return False
            for other in self.crossings[slot_id]:
                if other.cross_slot_id != crossing.cross_slot_id:
                    push(_reverse(other))
        return True

    def _revise(self, crossing: Crossing) -> bool:
        self.stats.ac3_revisions += 1
        domain = self.domains[crossing.slot_id]
        support = {word[crossing.cross_position] for word in self.domains[crossing.cross_slot_id]}
        kept = [word for word in domain if word[crossing.position] in support]
        if len(kept) == len(domain):
            return False
        self.domains[crossing.slot_id] = kept
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def solve(self) -> bool:
        if self.deadline.expired():
            self.timed_out = True
            return False

        slot = self._select_slot()
        if slot is None:
            return True
        domain = self.domains[slot.id]
        if not domain:
            return False

        used = set(self.placed.values())
        for word in self._order_values(domain):
            if word in used:
                continue
            snapshot = dict(self.domains)
            self.grid.place(slot, word)
            self.placed[slot.id] = word
            self.domains[slot.id] = [word]

            if not self.propagate([slot.id]):
                self._undo(slot, snapshot)
                continue
            if self.solve():
                return True
            self._undo(slot, snapshot)
            if self.timed_out:
                return False
            self.stats.backtracks += 1
        return False

    def assign(self, slot_id: str, word: str) -> None:
        """Place ``word`` outside the search, e.g. from another backend's answer."""

        slot = self.slot_map[slot_id]
        self.grid.place(slot, word)
        self.placed[slot_id] = slot.word or word
        self.domains[slot_id] = [self.placed[slot_id]]

    def _undo(self, slot: Slot, snapshot: Dict[str, List[str]]) -> None:
        self.domains = snapshot
        self.grid.unplace(slot)
        del self.placed[slot.id]

    def _select_slot(self) -> Optional[Slot]:
        open_slots = [slot for slot in self.slots if slot.id not in self.placed]
        if not open_slots:
            return None
        return min(open_slots, key=lambda slot: len(self.domains[slot.id]))

    def _order_values(self, domain: Sequence[str]) -> List[str]:
        if not self.quick_fill:
            return sorted(domain, key=lambda word: (-self.index.score(word), word))

        tiers: List[List[str]] = [[] for _ in range(len(SCORE_TIERS) + 1)]
        for word in domain:
            score = self.index.score(word)
            for position, floor in enumerate(SCORE_TIERS):
                if score >= floor:
                    tiers[position].append(word)
                    break
            else:
                tiers[-1].append(word)
        ordered: List[str] = []
        for tier in tiers:
            self.rng.shuffle(tier)
            ordered.extend(tier)
        return ordered

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def candidates_for(self, slot_id: str) -> List[str]:
        return list(self.domains.get(slot_id, ()))

    def placements(self) -> List[Placement]:
        return [
            Placement(self.placed[slot.id], slot.direction, slot.start_row, slot.start_col)
            for slot in self.slots
            if slot.id in self.placed
        ]

    def open_slots(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.id not in self.placed]

    def is_viable(self, slot_id: str, word: str) -> bool:
        """Whether placing ``word`` leaves every domain non-empty after AC-3."""

        slot = self.slot_map[slot_id]
        word = word.upper()
        if slot.id in self.placed:
            return self.placed[slot.id] == word
        if word in self.placed.values():
            return False

        snapshot = dict(self.domains)
        try:
            self.grid.place(slot, word)
        except SlotPlacementError:
            return False
        self.placed[slot.id] = word
        self.domains[slot.id] = [word]
        try:
            return self.propagate([slot.id])
        finally:
            self._undo(slot, snapshot)


__all__ = ["ConstraintSolver", "Deadline"]

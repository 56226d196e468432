"""Pretty-print helpers for filled grids."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from ..engine.generator import FillResult


def format_rows(rows: Sequence[Sequence[str]]) -> str:
    width = len(rows[0]) if rows else 0
    header_cells = [f"{c:>2}" for c in range(width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * width - 1))
    for r, row in enumerate(rows):
        row_render = " ".join(f"{(symbol or '.'):>2}" for symbol in row)
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def print_fill_result(result: FillResult, *, stream=None) -> None:
    """Print grid, words and statistics for a fill result."""

    stream = stream or sys.stdout
    if not result.success:
        message = result.error.message if result.error else "fill failed"
        print(f"FAILED: {message}", file=stream)
        _print_stats(result, stream)
        return

    print(format_rows(result.grid or []), file=stream)

    words = [placement.word for placement in result.words]
    lengths = Counter(len(word) for word in words)
    print(file=stream)
    print("--- Words ---", file=stream)
    for direction in ("across", "down"):
        entries: List[str] = [
            f"{p.word}@({p.start_row},{p.start_col})"
            for p in result.words
            if p.direction.value == direction
        ]
        print(f"  {direction.capitalize():<7} {' '.join(entries) or '-'}", file=stream)
    if lengths:
        dist_parts = [f"{length}:{count}" for length, count in sorted(lengths.items())]
        print(f"  Distribution:  {' '.join(dist_parts)}", file=stream)

    if result.quality is not None:
        quality = result.quality
        print(file=stream)
        print("--- Quality ---", file=stream)
        print(f"  Score:         {quality.score}", file=stream)
        print(f"  Avg word:      {quality.average_word_score:.1f}", file=stream)
        print(f"  Two-letter:    {quality.two_letter_words}", file=stream)
    _print_stats(result, stream)


def _print_stats(result: FillResult, stream) -> None:
    stats = result.stats
    print(file=stream)
    print("--- Stats ---", file=stream)
    print(f"  Attempts:      {stats.attempts}", file=stream)
    print(f"  Backtracks:    {stats.backtracks}", file=stream)
    print(f"  Slots filled:  {stats.slots_filled}", file=stream)
    print(f"  Searches:      {stats.pattern_searches} ({stats.cache_hits} cached)", file=stream)
    print(f"  Elapsed:       {stats.elapsed_ms} ms", file=stream)
    if stats.excluded_words:
        print(f"  Excluded:      {stats.excluded_words}", file=stream)
    if stats.template is not None:
        print(f"  Template:      {stats.template}", file=stream)

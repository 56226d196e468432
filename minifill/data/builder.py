"""Merge scored word lists into the master ``WORD;SCORE`` dictionary."""

from __future__ import annotations

import argparse
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from ..core.constants import GRID_SIZE, MIN_SLOT_LENGTH
from ..core.exceptions import DictionaryLoadError
from ..utils.logger import get_logger
from .normalization import clean_entry, is_valid_word, parse_score, split_entry


LOGGER = get_logger(__name__)

SCORE_BUCKETS: Tuple[Tuple[str, int, int], ...] = (
    ("1-10", 1, 10),
    ("11-25", 11, 25),
    ("26-50", 26, 50),
    ("51-75", 51, 75),
    ("76-100", 76, 100),
)


@dataclass
class SourceReport:
    """Per-source merge counters."""

    source: str
    status: str = "loaded"
    parsed: int = 0
    skipped: int = 0
    qualifying: int = 0
    new_words: int = 0
    upgraded: int = 0
    kept_existing: int = 0


@dataclass
class BuildReport:
    output: Optional[Path]
    sources: List[SourceReport] = field(default_factory=list)
    total_words: int = 0
    by_length: Dict[int, int] = field(default_factory=dict)
    score_distribution: Dict[str, int] = field(default_factory=dict)


def parse_source_line(
    line: str,
    min_length: int = MIN_SLOT_LENGTH,
    max_length: int = GRID_SIZE,
) -> Optional[Tuple[str, int]]:
    """Parse a raw list line such as ``Ice cream;50`` into ``("ICECREAM", 50)``."""

    parts = split_entry(line)
    if parts is None:
        return None
    raw_word, raw_score = parts
    score = parse_score(raw_score)
    if score is None:
        return None
    word = clean_entry(raw_word)
    if not is_valid_word(word):
        return None
    if not min_length <= len(word) <= max_length:
        return None
    return word, score


def read_source(source: str, timeout_seconds: float = 60.0) -> str:
    """Return the text of a local path or an ``http(s)://`` URL."""

    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DictionaryLoadError(f"Word list download failed: {exc}") from exc
        return response.text
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DictionaryLoadError(f"Cannot read word list {path}: {exc}") from exc


def load_source(
    text: str,
    report: SourceReport,
    min_length: int = MIN_SLOT_LENGTH,
    max_length: int = GRID_SIZE,
) -> Dict[str, int]:
    """Parse one source, keeping the higher score for duplicates within it."""

    words: Dict[str, int] = {}
    for line in text.splitlines():
        entry = parse_source_line(line, min_length, max_length)
        if entry is None:
            if line.strip() and not line.strip().startswith("#"):
                report.skipped += 1
            continue
        report.parsed += 1
        word, score = entry
        if score > words.get(word, 0):
            words[word] = score
    report.qualifying = len(words)
    return words


def merge_word_lists(
    sources: Sequence[str],
    min_length: int = MIN_SLOT_LENGTH,
    max_length: int = GRID_SIZE,
    missing_ok: bool = True,
) -> Tuple[Dict[str, int], List[SourceReport]]:
    """Merge ``sources`` in order; the highest score wins across all of them."""

    master: Dict[str, int] = {}
    reports: List[SourceReport] = []
    for source in sources:
        report = SourceReport(source=source)
        reports.append(report)
        is_remote = source.startswith(("http://", "https://"))
        if not is_remote and not Path(source).exists():
            if not missing_ok:
                raise DictionaryLoadError(f"Missing word list: {source}")
            LOGGER.warning("Skipping %s (file not found)", source)
            report.status = "not found"
            continue

        words = load_source(read_source(source), report, min_length, max_length)
        for word, score in words.items():
            existing = master.get(word)
            if existing is None:
                master[word] = score
                report.new_words += 1
            elif score > existing:
                master[word] = score
                report.upgraded += 1
            else:
                report.kept_existing += 1
        LOGGER.info(
            "%s: parsed %d, qualifying %d, new %d, upgraded %d",
            source,
            report.parsed,
            report.qualifying,
            report.new_words,
            report.upgraded,
        )
    return master, reports


def sorted_entries(master: Dict[str, int]) -> List[Tuple[str, int]]:
    return sorted(master.items(), key=lambda item: (len(item[0]), item[0]))


def write_master_dictionary(
    entries: Iterable[Tuple[str, int]],
    destination: Path | str,
    sources: Sequence[str] = (),
) -> int:
    entries = list(entries)
    lengths = [len(word) for word, _ in entries]
    span = f"{min(lengths)}-{max(lengths)}" if lengths else "none"
    header = [
        "# Crossword Master Dictionary",
        f"# Generated: {date.today().isoformat()}",
        "# Format: WORD;SCORE (1-100)",
        f"# Words: {len(entries):,} (lengths {span})",
        "#",
        f"# Sources: {', '.join(sources)}",
        "#",
        "# Merge strategy: highest score wins across all sources",
        "#",
    ]
    lines = header + [f"{word};{score}" for word, score in entries]
    location = Path(destination)
    location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return len(entries)


def summarize(master: Dict[str, int]) -> Tuple[Dict[int, int], Dict[str, int]]:
    by_length = Counter(len(word) for word in master)
    distribution = {label: 0 for label, _, _ in SCORE_BUCKETS}
    for score in master.values():
        for label, low, high in SCORE_BUCKETS:
            if low <= score <= high:
                distribution[label] += 1
                break
    return dict(sorted(by_length.items())), distribution


def build_master_dictionary(
    sources: Sequence[str],
    destination: Path | str | None,
    min_length: int = MIN_SLOT_LENGTH,
    max_length: int = GRID_SIZE,
) -> BuildReport:
    """Merge ``sources`` and optionally write the result to ``destination``."""

    master, reports = merge_word_lists(sources, min_length, max_length)
    output = Path(destination) if destination is not None else None
    if output is not None:
        write_master_dictionary(sorted_entries(master), output, sources)
        LOGGER.info("Wrote %s words to %s", f"{len(master):,}", output)
    by_length, distribution = summarize(master)
    return BuildReport(
        output=output,
        sources=reports,
        total_words=len(master),
        by_length=by_length,
        score_distribution=distribution,
    )


def format_report(report: BuildReport) -> str:
    lines = [f"Total words: {report.total_words:,}"]
    for source in report.sources:
        lines.append(
            f"  {source.source} [{source.status}] parsed={source.parsed:,} "
            f"skipped={source.skipped:,} new={source.new_words:,} upgraded={source.upgraded:,}"
        )
    lines.append("Words by length:")
    for length, count in report.by_length.items():
        lines.append(f"  {length}-letter: {count:,}")
    lines.append("Score distribution:")
    for label, count in report.score_distribution.items():
        pct = (count / report.total_words * 100) if report.total_words else 0.0
        lines.append(f"  {label:<7}: {count:>8,} ({pct:5.1f}%)")
    return "\n".join(lines)


def add_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument("sources", nargs="+", help="Word list paths or URLs (WORD;SCORE lines)")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/crossword-master.dict"),
        help="Destination .dict file",
    )
    parser.add_argument("--min-length", type=int, default=MIN_SLOT_LENGTH)
    parser.add_argument("--max-length", type=int, default=GRID_SIZE)
    return parser


def _cli(argv: Optional[Sequence[str]] = None) -> None:
    parser = add_arguments(argparse.ArgumentParser(description="Build the master crossword dictionary"))
    args = parser.parse_args(argv)
    report = build_master_dictionary(args.sources, args.output, args.min_length, args.max_length)
    print(format_report(report))


__all__ = [
    "BuildReport",
    "SourceReport",
    "build_master_dictionary",
    "merge_word_lists",
    "parse_source_line",
    "read_source",
    "write_master_dictionary",
]


if __name__ == "__main__":  # pragma: no cover - convenience CLI
    _cli()

"""CLI entrypoint for the 5x5 mini crossword fill engine."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from minifill.core.constants import FailureKind, FillBackend, Symmetry
from minifill.core.exceptions import DictionaryLoadError, InvalidInputError
from minifill.data import builder
from minifill.data.dictionary import WordIndex, default_dictionary_path
from minifill.engine.generator import FillEngine, FillOptions, FillResult
from minifill.utils.logger import configure_logging
from minifill.utils.pretty import format_rows, print_fill_result

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def parse_words_file(path: Path) -> List[str]:
    """Read words from a file, one entry per line. Blank lines and # comments are skipped."""
    entries: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.append(line)
    return entries


def read_grid_file(path: Path) -> List[str]:
    """Read grid rows, one per line. Blank lines are skipped; ``#`` is a block, not a comment."""
    return [line.rstrip("\n") for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def _common_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--dictionary",
        type=Path,
        default=None,
        help="Path to the WORD;SCORE dictionary (default: $MINIFILL_DICTIONARY or data/crossword-master.dict)",
    )
    common.add_argument("--min-score", type=int, default=1, help="Minimum word score (1-100)")
    common.add_argument("--max-retries", type=int, default=20, help="Attempts before giving up")
    common.add_argument(
        "--timeout-ms",
        type=int,
        default=5000,
        help="Per-attempt deadline in milliseconds",
    )
    common.add_argument("--exclude", nargs="+", metavar="WORD", default=[], help="Words that may not be used")
    common.add_argument(
        "--exclude-file",
        type=Path,
        metavar="FILE",
        help="File with one excluded word per line (# comments and blank lines ignored)",
    )
    common.add_argument(
        "--backend",
        type=str,
        choices=[b.value for b in FillBackend],
        default=FillBackend.BACKTRACKING.value,
        help="Search backend for fill operations",
    )
    common.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    common.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    common.add_argument("--output", type=Path, help="Optional path to JSON output")
    common.add_argument("--pretty", action="store_true", help="Print a text grid instead of JSON")
    return common


def _grid_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--grid", type=Path, metavar="FILE", help="File with 5 grid rows ('#' block, '.' empty)")
    source.add_argument("--rows", nargs=5, metavar="ROW", help="Five grid rows such as 'CRANE' or '..#..'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fill 5x5 mini crosswords from a scored dictionary")
    common = _common_parser()
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", parents=[common], help="Generate a grid from scratch")
    generate.add_argument(
        "--symmetry",
        type=str,
        choices=[s.value for s in Symmetry],
        default=Symmetry.NONE.value,
        help="Mirror applied to the black-square template",
    )

    for name, description in (
        ("fill", "Fill an existing partial grid"),
        ("quickfill", "Fill with score-tier shuffled candidates"),
        ("evaluate", "Score the words already in a grid"),
        ("best-slot", "Suggest the most constrained open slot"),
    ):
        _grid_arguments(commands.add_parser(name, parents=[common], help=description))

    candidates = commands.add_parser("candidates", parents=[common], help="List candidates for one slot")
    _grid_arguments(candidates)
    candidates.add_argument("--slot", required=True, help="Slot id such as across-0-0 or down-0-3")
    candidates.add_argument("--limit", type=int, default=100, help="Maximum candidates to return")
    candidates.add_argument(
        "--check-viability",
        action="store_true",
        help="Test each candidate with a tentative placement",
    )

    build = commands.add_parser("build-dict", help="Merge scored word lists into a master dictionary")
    build.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    builder.add_arguments(build)
    return parser


def _options(args: argparse.Namespace) -> FillOptions:
    excluded: List[str] = list(args.exclude or [])
    if args.exclude_file:
        excluded.extend(parse_words_file(args.exclude_file))
    return FillOptions(
        symmetry=Symmetry(getattr(args, "symmetry", Symmetry.NONE.value)),
        min_score=args.min_score,
        max_retries=args.max_retries,
        timeout_ms=args.timeout_ms,
        exclude_words=tuple(excluded),
        backend=FillBackend(args.backend),
        limit=getattr(args, "limit", 100),
        check_viability=getattr(args, "check_viability", False),
    )


def _grid_rows(args: argparse.Namespace) -> List[str]:
    if args.grid:
        return read_grid_file(args.grid)
    return list(args.rows)


def _emit(args: argparse.Namespace, payload: Dict[str, Any]) -> None:
    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)


def _fill_exit_code(result: FillResult) -> int:
    if result.success:
        return EXIT_OK
    if result.error is not None and result.error.kind == FailureKind.INVALID_INPUT:
        return EXIT_INVALID
    return EXIT_FAILED


def _run(args: argparse.Namespace, engine: FillEngine, options: FillOptions) -> int:
    if args.command in ("generate", "fill", "quickfill"):
        if args.command == "generate":
            result = engine.generate(options)
        elif args.command == "fill":
            result = engine.fill(_grid_rows(args), options)
        else:
            result = engine.quick_fill(_grid_rows(args), options)
        if args.pretty:
            print_fill_result(result)
        else:
            _emit(args, result.to_dict())
        return _fill_exit_code(result)

    if args.command == "candidates":
        listing = engine.candidates(_grid_rows(args), args.slot, options)
        if args.pretty:
            for candidate in listing.candidates:
                marker = "" if candidate.viable is None else (" ok" if candidate.viable else " dead")
                print(f"{candidate.word:<6} {candidate.score:>3}{marker}")
            print(f"{len(listing.candidates)} of {listing.total_candidates} candidates")
        else:
            _emit(args, listing.to_dict())
        if listing.error is None:
            return EXIT_OK
        return EXIT_INVALID if listing.error.kind == FailureKind.INVALID_INPUT else EXIT_FAILED

    rows = _grid_rows(args)
    if args.command == "evaluate":
        report = engine.evaluate(rows, options)
        if args.pretty:
            print(format_rows(rows))
            print(f"Quality {report.score} ({'acceptable' if report.acceptable else 'rejected'})")
        else:
            _emit(args, report.to_dict())
        return EXIT_OK

    suggestion = engine.best_slot(rows, options)
    payload: Dict[str, Any] = (
        suggestion.to_dict()
        if suggestion
        else {"slot": None, "domain_size": 0, "reason": "All slots are filled"}
    )
    if args.pretty:
        print(payload["reason"])
    else:
        _emit(args, payload)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "build-dict":
        try:
            report = builder.build_master_dictionary(
                args.sources, args.output, args.min_length, args.max_length
            )
        except DictionaryLoadError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_INVALID
        print(builder.format_report(report))
        return EXIT_OK

    try:
        index = WordIndex.from_file(args.dictionary or default_dictionary_path())
        options = _options(args)
        engine = FillEngine(index, options, seed=args.seed)
        return _run(args, engine, options)
    except (DictionaryLoadError, InvalidInputError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

"""Command-line interface for the conditional unfolder."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .js_formatter import JsRenderOptions
from .js_frontend import SourceParseError
from .report import UnfoldReport, UnfoldReporter
from .switch_synth import SWITCH_THRESHOLD
from .transform import ConditionalUnfolder, UnfoldOptions


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHANGES = 1
EXIT_PARSE_ERROR = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="unfold-conditionals",
        description="Rewrite ternary and short-circuit statements in JavaScript "
        "sources into if/else chains, early returns and switch statements.",
    )
    parser.add_argument("inputs", type=Path, nargs="+", help="JavaScript files to rewrite")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the result to this path (single input only)",
    )
    parser.add_argument(
        "--in-place",
        action="store_true",
        help="Overwrite every input with its rewritten source",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write a JSON report describing every rewrite",
    )
    parser.add_argument(
        "--switch-threshold",
        type=int,
        default=SWITCH_THRESHOLD,
        help="Minimum number of chained comparisons before emitting a switch",
    )
    parser.add_argument(
        "--no-switch",
        action="store_true",
        help="Never turn comparison chains into switch statements",
    )
    parser.add_argument(
        "--permissive-switch-cases",
        action="store_true",
        help="Emit a switch even when a case only keeps the immediate guard expression",
    )
    parser.add_argument(
        "--indent",
        type=str,
        default="  ",
        help="Indentation unit used for generated blocks",
    )
    parser.add_argument(
        "--no-semicolons",
        action="store_true",
        help="Do not terminate generated statements with semicolons",
    )
    parser.add_argument(
        "--max-passes",
        type=int,
        default=8,
        help="Maximum number of rewrite passes per file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Do not write anything; exit with status 1 when a file would change",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every rewrite decision",
    )
    args = parser.parse_args(argv)
    if args.output is not None and len(args.inputs) != 1:
        parser.error("--output requires exactly one input")
    if args.output is not None and args.in_place:
        parser.error("--output and --in-place are mutually exclusive")
    if args.switch_threshold < 1:
        parser.error("--switch-threshold must be positive")
    if args.max_passes < 1:
        parser.error("--max-passes must be positive")
    return args


def build_options(args: argparse.Namespace) -> UnfoldOptions:
    return UnfoldOptions(
        switch_threshold=args.switch_threshold,
        strict_cases=not args.permissive_switch_cases,
        synthesize_switch=not args.no_switch,
        max_passes=args.max_passes,
        render=JsRenderOptions(indent=args.indent, semicolons=not args.no_semicolons),
    )


def _emit(args: argparse.Namespace, path: Path, text: str) -> None:
    if args.in_place:
        path.write_text(text, "utf-8")
    elif args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, "utf-8")
    else:
        sys.stdout.write(text)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    unfolder = ConditionalUnfolder(build_options(args))
    reports: List[UnfoldReport] = []
    changed: List[Path] = []

    for path in args.inputs:
        source = path.read_text("utf-8")
        try:
            result = unfolder.unfold(source, name=str(path))
        except SourceParseError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            return EXIT_PARSE_ERROR
        reports.append(result.report)
        if result.changed:
            changed.append(path)
        logger.debug("%s: %d rewrite(s)", path, result.report.total_rewrites())
        if not args.check:
            _emit(args, path, result.source)

    if args.report is not None:
        args.report.parent.mkdir(parents=True, exist_ok=True)
        args.report.write_text(UnfoldReporter(reports).as_json(), "utf-8")

    if args.check:
        for path in changed:
            print(f"would rewrite {path}")
        return EXIT_CHANGES if changed else EXIT_OK

    if args.in_place or args.output is not None:
        print(UnfoldReporter(reports).as_text())
    return EXIT_OK


__all__ = ["parse_args", "build_options", "main"]

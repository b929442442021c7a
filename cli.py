from __future__ import annotations

import argparse
import logging
from pathlib import Path

from config import APP_NAME, APP_VERSION, DEFAULT_OUTPUT_DIR
from core.diff_engine import TextDiffer
from core.models import (
    ComparisonError,
    ComparisonType,
    DiffPart,
    ParseError,
    UnsupportedFormatError,
    ValidationError,
)
from core.orchestrator import Orchestrator
from core.registry import ParserRegistry


KNOWN_ERRORS = (ParseError, UnsupportedFormatError, ValidationError, ComparisonError, OSError)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="l10n-reconcile", description=APP_NAME)
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile", help="Reconcile a translated work file against the master"
    )
    reconcile.add_argument("master", type=str)
    reconcile.add_argument("candidate", type=str)
    reconcile.add_argument("-l", "--language", type=str, default=None)
    _add_output(reconcile)

    merge = subparsers.add_parser(
        "merge-status", help="Check whether a server file is merged into the master"
    )
    merge.add_argument("server", type=str)
    merge.add_argument("master", type=str)
    merge.add_argument("-l", "--language", type=str, required=True)
    merge.add_argument("--lqa", type=str, default=None, help="LQA overlay file")

    lqa = subparsers.add_parser("lqa-status", help="Check whether an LQA file is merged")
    lqa.add_argument("lqa", type=str)
    lqa.add_argument("master", type=str)
    lqa.add_argument("-l", "--language", type=str, required=True)

    diff = subparsers.add_parser("diff", help="Diff two strings")
    diff.add_argument("old_text", type=str)
    diff.add_argument("new_text", type=str)
    mode = diff.add_mutually_exclusive_group()
    mode.add_argument("--lines", action="store_true", help="Force line mode")
    mode.add_argument("--chars", action="store_true", help="Character diff")

    compare = subparsers.add_parser("compare", help="Compare one language across two files")
    compare.add_argument("file_a", type=str)
    compare.add_argument("file_b", type=str)
    compare.add_argument("-l", "--language", type=str, default="auto")
    compare.add_argument("--ignore-case", action="store_true")
    compare.add_argument("--ignore-whitespace", action="store_true")
    compare.add_argument("--all", action="store_true", help="List unchanged terms too")

    base = subparsers.add_parser(
        "base-changes", help="Compare a new English base file with the master"
    )
    base.add_argument("master", type=str)
    base.add_argument("base", type=str)
    base.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write the updated master to this directory",
    )

    export = subparsers.add_parser("export", help="Write the latest work file for a language")
    export.add_argument("master", type=str)
    export.add_argument("-l", "--language", type=str, required=True)
    _add_output(export)

    stats = subparsers.add_parser("stats", help="Translation completion per language")
    stats.add_argument("master", type=str)
    stats.add_argument("--missing", action="store_true", help="List missing term IDs")

    convert = subparsers.add_parser("convert", help="Convert CSV to XLSX or XLSX to CSV")
    convert.add_argument("input", type=str)
    convert.add_argument(
        "--first-sheet",
        action="store_true",
        help="Use the first sheet instead of searching by header row",
    )
    _add_output(convert)

    subparsers.add_parser("formats", help="List supported formats")
    return parser


def _add_output(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help="Output directory",
    )


def _on_progress(message: str, value: float) -> None:
    logging.getLogger("cli").debug("%s (%d%%)", message, int(value * 100))


def cmd_reconcile(args: argparse.Namespace) -> int:
    orchestrator = Orchestrator(on_progress=_on_progress)
    print(f"Reconciling: {args.candidate} against {args.master}")
    report, outputs = orchestrator.reconcile_files(
        args.master, args.candidate, args.output, language=args.language
    )
    print(
        "Language {language}: needs translation={missing} needs update={update} "
        "unchanged={unchanged} kept from master={kept}".format(
            language=report.language,
            missing=report.total_needs_translation,
            update=report.total_needs_update,
            unchanged=len(report.unchanged),
            kept=len(report.found_in_master),
        )
    )
    for detail in report.needs_update:
        summary = detail.summary.message if detail.summary else ""
        print(f"  update {detail.term_id}: {summary}")
    for warning in report.warnings:
        print(f"Warning: {warning}")
    for output in outputs:
        suffix = Path(output).suffix.lower()
        if suffix == ".html":
            print(f"HTML report: {output}")
        elif suffix == ".xlsx":
            print(f"Excel report: {output}")
        else:
            print(f"Reconciled file: {output}")
    return 0


def cmd_merge_status(args: argparse.Namespace) -> int:
    status = Orchestrator().merge_status(
        args.server, args.master, args.language, lqa_file=args.lqa
    )
    print(
        f"{status.language}: {status.status.value} "
        f"(matched {status.valid_terms_matched}/{status.valid_terms_total})"
    )
    for term in status.outdated_terms:
        print(f"  outdated {term.term_id}: {term.server_english!r} -> {term.master_english!r}")
    for term in status.unmatched_terms:
        print(f"  unmerged {term.term_id}")
    return 0


def cmd_lqa_status(args: argparse.Namespace) -> int:
    merged = Orchestrator().lqa_status(args.lqa, args.master, args.language)
    print(f"{args.language} LQA: {'merged' if merged else 'not merged'}")
    return 0


def _format_part(part: DiffPart) -> str:
    marker = "+" if part.added else "-" if part.removed else "="
    return f"  {marker} {part.value!r}"


def cmd_diff(args: argparse.Namespace) -> int:
    if args.chars:
        parts = TextDiffer.char_diff(args.old_text, args.new_text)
    else:
        parts = TextDiffer.diff_auto(args.old_text, args.new_text, line_mode=args.lines)
    summary = TextDiffer.diff_summary(args.old_text, args.new_text)
    print(f"{summary.type}: {summary.message}")
    for part in parts:
        print(_format_part(part))
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    result = Orchestrator().compare_files(
        args.file_a,
        args.file_b,
        language=args.language,
        ignore_case=args.ignore_case,
        ignore_whitespace=args.ignore_whitespace,
    )
    stats = result.statistics
    print(
        "Language {language}: total={total} added={added} removed={removed} "
        "modified={modified} newline-only={newline} unchanged={unchanged} "
        "change%={percent:.1f}%".format(
            language=result.language,
            total=stats.total_terms,
            added=stats.added,
            removed=stats.removed,
            modified=stats.modified,
            newline=stats.newline_only,
            unchanged=stats.unchanged,
            percent=stats.change_percentage * 100,
        )
    )
    for comparison in result.comparisons:
        if comparison.type == ComparisonType.UNCHANGED and not args.all:
            continue
        print(f"  {comparison.type.value} {comparison.term_id}")
    return 0


def cmd_base_changes(args: argparse.Namespace) -> int:
    changes, output = Orchestrator().base_changes(args.master, args.base, args.output)
    print(
        f"Added={len(changes.added)} removed={len(changes.removed)} "
        f"modified={len(changes.modified)}"
    )
    for term_id in changes.added:
        print(f"  + {term_id}")
    for term_id in changes.removed:
        print(f"  - {term_id}")
    for item in changes.modified:
        print(f"  ~ {item.term_id}")
    if output:
        print(f"Updated master: {output}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    output = Orchestrator().export_language(args.master, args.language, args.output)
    print(f"Latest {args.language} file: {output}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    for stat in Orchestrator().stats(args.master):
        print(
            f"{stat.language}: {stat.percentage}% "
            f"({stat.translated_terms}/{stat.total_terms})"
        )
        if args.missing and stat.missing_terms:
            print(f"  missing: {', '.join(stat.missing_terms)}")
    return 0


def cmd_convert(args: argparse.Namespace) -> int:
    output = Orchestrator(on_progress=_on_progress).convert(
        args.input, args.output, find_sheet=not args.first_sheet
    )
    print(f"Converted: {output}")
    return 0


def cmd_formats() -> int:
    ParserRegistry.discover()
    print("Supported formats:")
    for ext, description in ParserRegistry.descriptions().items():
        print(f"  {ext}  {description}")
    return 0


COMMANDS = {
    "reconcile": cmd_reconcile,
    "merge-status": cmd_merge_status,
    "lqa-status": cmd_lqa_status,
    "diff": cmd_diff,
    "compare": cmd_compare,
    "base-changes": cmd_base_changes,
    "export": cmd_export,
    "stats": cmd_stats,
    "convert": cmd_convert,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command == "formats":
        return cmd_formats()
    handler = COMMANDS.get(args.command)
    if handler is None:
        return 1
    try:
        return handler(args)
    except KNOWN_ERRORS as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

# src/pupil_anonymiser/cli.py
import argparse
import sys
from pathlib import Path

from .config import (
    DEFAULT_AUDIT_PATH,
    DEFAULT_LOG_PATH,
    DEFAULT_PSEUDONYM_SCHEME,
    DEFAULT_REPORT_MODEL,
    DEFAULT_REPORT_TONE,
    DEFAULT_START_AT,
    REPORT_TONES,
)
from .errors import AnonymiserError, UnresolvedNameLeakError
from .io.table_loader import load_class_record_rows
from .pipelines.anonymise_pipeline import run_anonymise
from .pipelines.report_pipeline import run_reports
from .preprocess.anonymizer import build_pseudonym_map
from .preprocess.name_leak_scanner import detect_name_column, find_name_leaks
from .reports.template import parse_section_arg, save_report_template
from .utils.audit_logger import log_audit_record
from .utils.logging_utils import setup_logging


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--log-path",
        type=Path,
        default=Path(DEFAULT_LOG_PATH),
        help="log file path",
    )
    p.add_argument(
        "--audit-path",
        type=Path,
        default=Path(DEFAULT_AUDIT_PATH),
        help="audit log (one JSON line per command)",
    )


def _add_mapping_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--name-column",
        type=str,
        default=None,
        help="column holding pupil names (detected when omitted)",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="shuffle seed; the same seed gives the same pseudonyms",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pseudonymise pupil names before sending class data to an AI service"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # === check ===
    p_check = subparsers.add_parser("check", help="look for pupil names outside the name column")
    p_check.add_argument("input", type=Path, help="class record (.csv / .xlsx)")
    p_check.add_argument("--name-column", type=str, default=None)
    _add_common(p_check)

    # === anonymise ===
    p_anon = subparsers.add_parser("anonymise", help="write an anonymised copy of a class record")
    p_anon.add_argument("input", type=Path, help="class record (.csv / .xlsx)")
    p_anon.add_argument(
        "--output",
        type=Path,
        default=Path("data/outputs/class_record_anonymised.xlsx"),
        help="anonymised output (.xlsx or .csv)",
    )
    p_anon.add_argument("--scheme", type=str, default=DEFAULT_PSEUDONYM_SCHEME, help='e.g. "Pupil-###", "Anon-##", "Greek"')
    p_anon.add_argument("--start-at", type=int, default=DEFAULT_START_AT)
    p_anon.add_argument("--show-map", action="store_true", help="print the pseudonym map to the console")
    _add_mapping_options(p_anon)
    _add_common(p_anon)

    # === demo ===
    p_demo = subparsers.add_parser("demo", help="anonymise and reidentify a piece of text")
    p_demo.add_argument("--names", type=Path, required=True, help="text file, one pupil name per line")
    p_demo.add_argument("--text", type=Path, required=True, help="text file to anonymise")
    p_demo.add_argument("--scheme", type=str, default=DEFAULT_PSEUDONYM_SCHEME)
    p_demo.add_argument("--start-at", type=int, default=DEFAULT_START_AT)
    p_demo.add_argument("--seed", type=int, default=0)

    # === reports ===
    p_rep = subparsers.add_parser("reports", help="generate end-of-year reports via the LLM")
    p_rep.add_argument("input", type=Path, help="class record (.csv / .xlsx)")
    p_rep.add_argument("--template", type=Path, required=True, help="report sections JSON")
    p_rep.add_argument(
        "--output",
        type=Path,
        default=Path("data/outputs/reports.xlsx"),
        help="reports Excel output",
    )
    p_rep.add_argument("--model", type=str, default=DEFAULT_REPORT_MODEL)
    p_rep.add_argument("--tone", choices=REPORT_TONES, default=DEFAULT_REPORT_TONE)
    p_rep.add_argument("--style-notes", type=str, default=None)
    p_rep.add_argument(
        "--keep-pseudonyms",
        action="store_true",
        help="leave pseudonyms in the output instead of real names",
    )
    _add_mapping_options(p_rep)
    _add_common(p_rep)

    # === template ===
    p_tpl = subparsers.add_parser("template", help="save a report template for the reports command")
    p_tpl.add_argument("output", type=Path, help="template JSON to write")
    p_tpl.add_argument(
        "--section",
        dest="sections",
        type=parse_section_arg,
        action="append",
        required=True,
        help='NAME[:WORDS][:next], e.g. "English:80:next" (repeatable)',
    )
    _add_common(p_tpl)

    return parser


def _cmd_check(args) -> int:
    setup_logging(args.log_path)
    rows = load_class_record_rows(args.input)
    name_column = args.name_column or detect_name_column(rows)
    leaks = find_name_leaks(rows, name_column)

    if leaks:
        print("The following names were found in notes or comments:")
        for leak in leaks:
            print(f"  {leak.describe()}")
        print("Please anonymise these entries in your spreadsheet and re-run the check.")
    else:
        print(f"No names found outside the '{name_column}' column. You can now anonymise the list.")

    cells = {leak.cell for leak in leaks}
    log_audit_record(
        "check",
        args={"input": args.input, "name_column": name_column},
        extra={"rows": len(rows), "flagged_cells": len(cells)},
        status="blocked" if leaks else "success",
        audit_path=args.audit_path,
    )
    return 1 if leaks else 0


def _cmd_anonymise(args) -> int:
    record = run_anonymise(
        input_path=args.input,
        output_path=args.output,
        log_path=args.log_path,
        name_column=args.name_column,
        scheme=args.scheme,
        start_at=args.start_at,
        seed=args.seed,
    )
    print(f"Replaced {len(record.pseudonym_map)} pupil names with pseudonyms -> {args.output}")
    if args.show_map:
        for line in record.pseudonym_map.display_lines():
            print(f"  {line}")

    log_audit_record(
        "anonymise",
        args={"input": args.input, "output": args.output, "scheme": args.scheme, "seeded": args.seed is not None},
        extra={"rows": len(record), "pseudonym_map": record.pseudonym_map},
        audit_path=args.audit_path,
    )
    return 0


def _cmd_demo(args) -> int:
    names = args.names.read_text(encoding="utf-8").splitlines()
    text = args.text.read_text(encoding="utf-8")

    pmap = build_pseudonym_map(names, scheme=args.scheme, start_at=args.start_at, seed=args.seed)
    anon_text = pmap.anonymise(text)
    reid_text = pmap.reidentify(anon_text)

    print("=== pseudonym map ===")
    print("\n".join(pmap.display_lines()))
    print("=== anonymised ===")
    print(anon_text)
    print("=== reidentified ===")
    print(reid_text)
    return 0


def _cmd_reports(args) -> int:
    reports = run_reports(
        input_path=args.input,
        template_path=args.template,
        output_path=args.output,
        log_path=args.log_path,
        name_column=args.name_column,
        seed=args.seed,
        model_name=args.model,
        tone=args.tone,
        style_notes=args.style_notes,
        reveal_names=not args.keep_pseudonyms,
    )
    failed = sum(1 for r in reports if r.get("error"))
    print(f"Wrote {len(reports)} report(s) to {args.output} ({failed} failed)")

    log_audit_record(
        "reports",
        args={"input": args.input, "template": args.template, "output": args.output, "tone": args.tone},
        extra={"model": args.model, "reports": len(reports), "failed": failed},
        status="success" if not failed else "partial",
        audit_path=args.audit_path,
    )
    return 0


def _cmd_template(args) -> int:
    save_report_template(args.output, args.sections)
    print(f"Saved {len(args.sections)} section(s) to {args.output}")
    log_audit_record(
        "template",
        args={"output": args.output},
        extra={"sections": [s.name for s in args.sections]},
        audit_path=args.audit_path,
    )
    return 0


COMMANDS = {
    "check": _cmd_check,
    "anonymise": _cmd_anonymise,
    "demo": _cmd_demo,
    "reports": _cmd_reports,
    "template": _cmd_template,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return COMMANDS[args.command](args)
    except UnresolvedNameLeakError as e:
        print(str(e), file=sys.stderr)
        for leak in e.leaks:
            print(f"  {leak.describe()}", file=sys.stderr)
        if hasattr(args, "audit_path"):
            log_audit_record(args.command, status="blocked", audit_path=args.audit_path)
        return 1
    except AnonymiserError as e:
        print(str(e), file=sys.stderr)
        if hasattr(args, "audit_path"):
            log_audit_record(args.command, status="error", extra={"error": type(e).__name__}, audit_path=args.audit_path)
        return 2


if __name__ == "__main__":
    sys.exit(main())

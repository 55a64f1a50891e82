from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from site_checklist import __version__ as TOOL_VERSION
from site_checklist.aggregate import aggregate, select
from site_checklist.contracts import build_contract, build_run_summary
from site_checklist.decoder import DecodedSheet, decode
from site_checklist.encoder import encode
from site_checklist.report import render_rollup_text, rollup_to_frame
from site_checklist.workbook import SUPPORTED_FORMATS, load_sheet, save_workbook

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class ChecklistArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def maybe_emit_json_stdout(payload: Any, enabled: bool) -> None:
    if enabled:
        print(json_dumps(payload))


def timestamp_token() -> str:
    override = os.environ.get("SITE_CHECKLIST_OUTPUT_STAMP")
    if override:
        return override
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def default_output_dir(input_path: Path) -> Path:
    return Path.cwd() / "site-checklist-output" / f"{input_path.stem}-{timestamp_token()}"


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json_dumps(payload), encoding="utf-8")


def classify_backend_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, ImportError):
        return EXIT_PARSE_FAILED
    if isinstance(exc, FileNotFoundError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, ValueError):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


def require_input(raw: str) -> Path:
    input_path = Path(raw)
    if not input_path.exists():
        raise CliError(f"File not found: {input_path}", EXIT_COMMAND_ERROR)
    if input_path.suffix.lower() not in SUPPORTED_FORMATS:
        raise CliError(
            f"Unsupported file type '{input_path.suffix or '[missing extension]'}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_FORMATS))}",
            EXIT_COMMAND_ERROR,
        )
    return input_path


def decode_file(input_path: Path, args: argparse.Namespace) -> DecodedSheet:
    sheet_title, cells = load_sheet(input_path, sheet_name=args.sheet_name)
    decoded = decode(cells, strict_dates=not args.lenient_dates)
    decoded.sheet_name = sheet_title
    return decoded


def decode_payload(decoded: DecodedSheet, input_path: Path) -> dict[str, Any]:
    contract = build_contract("checklist.decode")
    return {
        "contract": contract,
        "schema_version": contract["version"],
        "tool_version": TOOL_VERSION,
        "file": input_path.name,
        "sheet_name": decoded.sheet_name,
        "metadata": decoded.metadata.to_dict(),
        "headers": decoded.headers,
        "header_detected": decoded.header_detected,
        "rows": [row.to_dict() for row in decoded.rows],
        "changes": [vars(change) for change in decoded.changes],
        "stats": dict(decoded.stats),
        "run_summary": build_run_summary(
            command="decode",
            input_path=input_path,
            metrics={"rows_decoded": len(decoded.rows), "changes_logged": len(decoded.changes)},
            warnings=decoded.warnings,
        ),
    }


def render_decode_text(decoded: DecodedSheet, input_path: Path) -> str:
    meta = decoded.metadata
    lines = [
        "site-checklist decode",
        f"File: {input_path.name}",
        f"Sheet: {decoded.sheet_name or '[unknown]'}",
        f"Project: {meta.project_name or '[blank]'}",
        f"Site: {meta.location or '[blank]'}",
        f"General manager: {meta.general_manager or '[blank]'}",
        f"Inspector: {meta.inspector or '[blank]'}",
        f"Inspection date: {meta.inspection_date or '[blank]'}",
        f"Rows: {len(decoded.rows)}",
        f"Blank rows skipped: {decoded.stats['blank_rows_skipped']}",
        f"Changes logged: {len(decoded.changes)}",
    ]
    for warning in decoded.warnings:
        lines.append(f"Warning: {warning}")
    return "\n".join(lines) + "\n"


def run_decode(args: argparse.Namespace) -> int:
    try:
        input_path = require_input(args.input)
        decoded = decode_file(input_path, args)
        payload = decode_payload(decoded, input_path)
        out_dir = Path(args.out_dir) if args.out_dir else default_output_dir(input_path)
        output_path = Path(args.output) if args.output else out_dir / "decode.json"
        write_json(output_path, payload)
        if args.json:
            maybe_emit_json_stdout(payload, True)
        else:
            emit_human(render_decode_text(decoded, input_path).rstrip(), quiet=args.quiet)
            emit_human(f"Decode written: {output_path}", quiet=args.quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_backend_exception(exc)


def run_rollup(args: argparse.Namespace) -> int:
    try:
        input_path = require_input(args.input)
        decoded = decode_file(input_path, args)
        rollup = aggregate(decoded.rows)
        if args.assignee is not None and args.assignee not in rollup.by_assignee.children:
            eprint(f"Assignee '{args.assignee}' has no rows in this checklist; totals are zero.")
        if args.csv:
            csv_path = Path(args.csv)
            csv_path.parent.mkdir(parents=True, exist_ok=True)
            rollup_to_frame(rollup, args.assignee).to_csv(csv_path, index=False)
            emit_human(f"Rollup CSV: {csv_path}", quiet=args.quiet)
        if args.json:
            selection = select(rollup, args.assignee)
            contract = build_contract("checklist.rollup")
            payload = {
                "contract": contract,
                "schema_version": contract["version"],
                "tool_version": TOOL_VERSION,
                "file": input_path.name,
                "assignee": args.assignee,
                "assignees": rollup.assignee_names,
                "total": selection.total.to_dict(),
                "categories": {key: node.to_dict() for key, node in selection.categories.items()},
                "run_summary": build_run_summary(
                    command="rollup",
                    input_path=input_path,
                    output_path=Path(args.csv) if args.csv else None,
                    metrics={"rows_aggregated": len(decoded.rows), "assignee_count": len(rollup.assignee_names)},
                    warnings=decoded.warnings,
                ),
            }
            maybe_emit_json_stdout(payload, True)
        else:
            print(render_rollup_text(rollup, args.assignee).rstrip())
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_backend_exception(exc)


def run_rewrite(args: argparse.Namespace) -> int:
    try:
        input_path = require_input(args.input)
        if args.output:
            output_path = Path(args.output)
        else:
            output_path = input_path.with_name(f"{input_path.stem}_rewritten.xlsx")
        if output_path.suffix.lower() not in {".xlsx"}:
            raise CliError("Rewritten checklists are always saved as .xlsx", EXIT_COMMAND_ERROR)
        if output_path.exists() and not args.force:
            raise CliError(f"Refusing to overwrite existing output: {output_path}", EXIT_COMMAND_ERROR)
        decoded = decode_file(input_path, args)
        encoded = encode(decoded.metadata, decoded.rows, headers=decoded.headers)
        save_workbook(output_path, encoded)
        contract = build_contract("checklist.rewrite_summary")
        summary = {
            "contract": contract,
            "schema_version": contract["version"],
            "tool_version": TOOL_VERSION,
            "input_file": str(input_path),
            "output_file": str(output_path),
            "rows_written": len(decoded.rows),
            "merges": [merge.ref for merge in encoded.merges],
            "print_area": encoded.print_area.ref,
            "run_summary": build_run_summary(
                command="rewrite",
                input_path=input_path,
                output_path=output_path,
                metrics={"rows_written": len(decoded.rows), "merge_ranges": len(encoded.merges)},
                warnings=decoded.warnings,
            ),
        }
        if args.json_summary:
            write_json(Path(args.json_summary), summary)
        emit_human(f"Rewritten workbook: {output_path}", quiet=args.quiet)
        emit_human(f"Rows: {len(decoded.rows)}  Merged category runs: {len(encoded.merges)}", quiet=args.quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_backend_exception(exc)


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Checklist workbook (.xlsx, .xlsm or .xls)")
    parser.add_argument("--sheet", dest="sheet_name", help="Sheet name (default: first sheet)")
    parser.add_argument(
        "--lenient-dates",
        dest="lenient_dates",
        action="store_true",
        help="Leave an unreadable inspection date blank instead of failing",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")


def build_parser() -> argparse.ArgumentParser:
    parser = ChecklistArgumentParser(prog="site-checklist", description="Inspection checklist decoding and score rollups.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    decode_cmd = subparsers.add_parser("decode", help="Decode a checklist into project details and rows.")
    add_common_arguments(decode_cmd)
    decode_cmd.add_argument("-o", "--out", dest="out_dir", help="Output directory")
    decode_cmd.add_argument("--output", help="Explicit decode JSON output path")
    decode_cmd.add_argument("--json", action="store_true", help="Write machine JSON to stdout")

    rollup_cmd = subparsers.add_parser("rollup", help="Print score rollups by category or assignee.")
    add_common_arguments(rollup_cmd)
    rollup_cmd.add_argument("--assignee", help="Only this assignee's scores (default: everyone)")
    rollup_cmd.add_argument("--csv", help="Also write the flattened rollup to this CSV path")
    rollup_cmd.add_argument("--json", action="store_true", help="Write machine JSON to stdout")

    rewrite_cmd = subparsers.add_parser("rewrite", help="Re-save a checklist with category merges recomputed.")
    add_common_arguments(rewrite_cmd)
    rewrite_cmd.add_argument("output", nargs="?", default=None, help="Output .xlsx path")
    rewrite_cmd.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    rewrite_cmd.add_argument("--json-summary", dest="json_summary", help="Write a JSON rewrite summary here")

    subparsers.add_parser("version", help="Print the tool version.")
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.command == "decode":
            return run_decode(args)
        if args.command == "rollup":
            return run_rollup(args)
        if args.command == "rewrite":
            return run_rewrite(args)
        if args.command == "version":
            return run_version()
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())

"""Command-line runner for table reconciliation.

This script reads two delimited tables, compares them on one or more key
columns, and writes the matched, unmatched and consistency tables under
`output/` by default.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from table_reconciler import ComparisonOptions, KeySpec, compare, read_both_tables
from table_reconciler.models import DataIssue, ReadResult, ResultBundle

DEFAULT_TABLE_A = Path("data/tableA.csv")
DEFAULT_TABLE_B = Path("data/tableB.csv")
DEFAULT_OUTPUT_DIR = Path("output")


def _issue_to_dict(issue: DataIssue) -> dict[str, Any]:
    """Serialize a `DataIssue` into a JSON-friendly dictionary."""

    return {
        "code": issue.code,
        "row": issue.row,
        "message": issue.message,
    }


def _collect_read_issues(result: ReadResult, *, table: str) -> list[dict[str, Any]]:
    """Collect reader issues for one input table."""

    issues: list[dict[str, Any]] = []
    for issue in result.issues:
        item = _issue_to_dict(issue)
        item["table"] = table
        issues.append(item)
    return issues


def build_report(
    bundle: ResultBundle,
    *,
    table_a_path: Path,
    table_b_path: Path,
    read_issues: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a JSON-friendly summary of one comparison."""

    return {
        "metadata": {
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "result_version": bundle.version,
            "table_a_path": str(table_a_path),
            "table_b_path": str(table_b_path),
            "key_columns_a": list(bundle.key_spec.columns_a),
            "key_columns_b": list(bundle.key_spec.columns_b),
            "duplicate_key_rule": (
                "If several rows of table B share a key, the last one is joined and the earlier ones are ignored."
            ),
        },
        "summary": bundle.summary(),
        "duplicate_keys_b": list(bundle.duplicate_keys_b),
        "read_issues": read_issues or [],
    }


def write_report(report: dict[str, Any], *, output_path: Path) -> None:
    """Write report JSON to disk."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for a comparison run."""

    parser = argparse.ArgumentParser(description="Compare two delimited tables on key columns.")
    parser.add_argument("--table-a", type=Path, default=DEFAULT_TABLE_A, help="Path to table A")
    parser.add_argument("--table-b", type=Path, default=DEFAULT_TABLE_B, help="Path to table B")
    parser.add_argument(
        "--key",
        action="append",
        required=True,
        help="Key column name; repeat for a composite key",
    )
    parser.add_argument(
        "--key-b",
        action="append",
        default=None,
        help="Key column name in table B when it differs from --key; repeat in the same order",
    )
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR, help="Directory for result tables")
    parser.add_argument("--separator-a", default=",", help="Field separator of table A")
    parser.add_argument("--separator-b", default=",", help="Field separator of table B")
    parser.add_argument("--output-separator", default=",", help="Field separator of written tables")
    parser.add_argument(
        "--require-same-schema",
        action="store_true",
        help="Fail unless both tables have identical headers",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Drop a trailing unpaired field instead of failing on odd matched rows",
    )
    parser.add_argument(
        "--allow-no-matches",
        action="store_true",
        help="Write an empty consistency table when no rows match",
    )
    parser.add_argument("--skip-inputs", action="store_true", help="Do not copy the input tables to the output")
    parser.add_argument("--report", type=Path, default=None, help="Optional JSON summary report path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for command-line execution."""

    try:
        args = _parse_args(argv)
    except SystemExit as exc:
        # Usage errors exit with 1 rather than argparse's 2.
        return 1 if exc.code else 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        combined = read_both_tables(
            args.table_a,
            args.table_b,
            separator_a=args.separator_a,
            separator_b=args.separator_b,
        )
        key_spec = KeySpec(columns_a=tuple(args.key), columns_b=tuple(args.key_b or args.key))
        options = ComparisonOptions(
            require_same_schema=args.require_same_schema,
            lenient=args.lenient,
            allow_empty_match=args.allow_no_matches,
        )
        bundle = compare(combined.table_a.table, combined.table_b.table, key_spec, options)
        # Report before tables: a failed report write leaves no result tables.
        if args.report is not None:
            report = build_report(
                bundle,
                table_a_path=args.table_a,
                table_b_path=args.table_b,
                read_issues=[
                    *_collect_read_issues(combined.table_a, table="A"),
                    *_collect_read_issues(combined.table_b, table="B"),
                ],
            )
            write_report(report, output_path=args.report)
        written = bundle.save(
            args.output_dir,
            include_inputs=not args.skip_inputs,
            separator=args.output_separator,
        )
    except (ValueError, OSError) as exc:
        # ComparisonError is a ValueError; TableWriteError is an OSError.
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for path in written:
        print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

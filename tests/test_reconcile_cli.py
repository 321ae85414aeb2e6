"""Tests for the command-line runner and its JSON report."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from reconcile import build_report, main, write_report
from table_reconciler import KeySpec, compare, read_both_tables

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TABLE_A = PROJECT_ROOT / "data" / "tableA.csv"
TABLE_B = PROJECT_ROOT / "data" / "tableB.csv"


def _write_csv(path: Path, content: str) -> None:
    """Write CSV text fixture content to a file."""

    path.write_text(content, encoding="utf-8")


def test_main_writes_result_tables_for_sample_data(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """The sample tables should join on id, with the last duplicate of key 3 used."""
    output_dir = tmp_path / "out"

    exit_code = main(["--table-a", str(TABLE_A), "--table-b", str(TABLE_B), "--key", "id", "--output-dir", str(output_dir)])

    assert exit_code == 0
    assert (output_dir / "matched.csv").read_text(encoding="utf-8") == (
        "id,name,qty,id,name,qty\n2,Gadget,5,2,Gadget,5\n3,Gizmo,7,3,Gizmo,8\n"
    )
    assert (output_dir / "unmatchedTableA.csv").read_text(encoding="utf-8") == (
        "id,name,qty\n1,Widget,10\n4,Doohickey,2\n"
    )
    assert (output_dir / "unmatchedTableB.csv").read_text(encoding="utf-8") == "id,name,qty\n5,Thing,1\n"
    assert (output_dir / "consistencyTable.csv").read_text(encoding="utf-8") == (
        "id,name,qty\n"
        "2,Gadget,5\n2,Gadget,5\nTRUE,TRUE,TRUE\n"
        "3,Gizmo,7\n3,Gizmo,8\nTRUE,TRUE,FALSE\n"
    )
    assert "Wrote" in capsys.readouterr().out


def test_main_writes_optional_report(tmp_path: Path) -> None:
    report_path = tmp_path / "reports" / "summary.json"

    exit_code = main(
        [
            "--table-a",
            str(TABLE_A),
            "--table-b",
            str(TABLE_B),
            "--key",
            "id",
            "--output-dir",
            str(tmp_path / "out"),
            "--skip-inputs",
            "--report",
            str(report_path),
        ]
    )

    assert exit_code == 0
    assert not (tmp_path / "out" / "tableA.csv").exists()
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["summary"]["matched_rows"] == 2
    assert report["summary"]["inconsistent_rows"] == 1
    assert report["duplicate_keys_b"] == [{"key": "3", "row_count": 2, "kept_row": 3}]
    assert report["metadata"]["key_columns_a"] == ["id"]


def test_main_supports_composite_keys_and_separators(tmp_path: Path) -> None:
    table_a = tmp_path / "a.csv"
    table_b = tmp_path / "b.tsv"
    _write_csv(table_a, "sku;site;qty\nA;north;1\nA;south;2\n")
    _write_csv(table_b, "item\tlocation\tqty\nA\tsouth\t2\n")
    output_dir = tmp_path / "out"

    exit_code = main(
        [
            "--table-a",
            str(table_a),
            "--table-b",
            str(table_b),
            "--separator-a",
            ";",
            "--separator-b",
            "\t",
            "--key",
            "sku",
            "--key",
            "site",
            "--key-b",
            "item",
            "--key-b",
            "location",
            "--output-dir",
            str(output_dir),
        ]
    )

    assert exit_code == 0
    assert (output_dir / "matched.csv").read_text(encoding="utf-8") == (
        "sku,site,qty,item,location,qty\nA,south,2,A,south,2\n"
    )


@pytest.mark.parametrize(
    ("table_b_content", "extra_args", "message"),
    [
        ("", [], "Table B is empty"),
        ("key,y\n2,c\n", [], "Key column 'id' not found in table B"),
        ("id,y\n2,c\n", ["--require-same-schema"], "Table schemas differ"),
        ("id,y\n9,c\n", [], "No matched rows"),
        ("id,y\n2,c\n", ["--key-b", "id", "--key-b", "y"], "Key column counts differ"),
    ],
)
def test_main_fails_without_writing_outputs(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    table_b_content: str,
    extra_args: list[str],
    message: str,
) -> None:
    """Failed comparisons exit 1 with a diagnostic and leave no output files."""
    table_a = tmp_path / "a.csv"
    table_b = tmp_path / "b.csv"
    _write_csv(table_a, "id,x\n1,a\n2,b\n")
    _write_csv(table_b, table_b_content)
    output_dir = tmp_path / "out"

    exit_code = main(
        ["--table-a", str(table_a), "--table-b", str(table_b), "--key", "id", "--output-dir", str(output_dir), *extra_args]
    )

    assert exit_code == 1
    assert message in capsys.readouterr().err
    assert not output_dir.exists()


def test_main_reports_unreadable_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(
        ["--table-a", str(tmp_path / "missing.csv"), "--table-b", str(TABLE_B), "--key", "id", "--output-dir", str(tmp_path / "out")]
    )

    assert exit_code == 1
    assert "Table A is empty" in capsys.readouterr().err


def test_main_allow_no_matches_writes_header_only_consistency(tmp_path: Path) -> None:
    table_a = tmp_path / "a.csv"
    table_b = tmp_path / "b.csv"
    _write_csv(table_a, "id,x\n1,a\n")
    _write_csv(table_b, "id,y\n2,b\n")
    output_dir = tmp_path / "out"

    exit_code = main(
        [
            "--table-a",
            str(table_a),
            "--table-b",
            str(table_b),
            "--key",
            "id",
            "--output-dir",
            str(output_dir),
            "--allow-no-matches",
        ]
    )

    assert exit_code == 0
    assert (output_dir / "consistencyTable.csv").read_text(encoding="utf-8") == "id,x\n"
    assert (output_dir / "matched.csv").read_text(encoding="utf-8") == "id,x,id,y\n"


def test_build_report_includes_read_issues_and_rule(tmp_path: Path) -> None:
    combined = read_both_tables(TABLE_A, TABLE_B)
    bundle = compare(combined.table_a.table, combined.table_b.table, KeySpec.shared("id"))

    report = build_report(
        bundle,
        table_a_path=TABLE_A,
        table_b_path=TABLE_B,
        read_issues=[{"table": "A", "code": "blank_row_skipped", "row": 3, "message": "blank"}],
    )

    assert "last one is joined" in report["metadata"]["duplicate_key_rule"]
    assert report["metadata"]["result_version"] == 1
    assert report["read_issues"][0]["code"] == "blank_row_skipped"
    assert report["summary"]["unmatched_a_rows"] == 2


def test_write_report_writes_valid_json(tmp_path: Path) -> None:
    """`write_report` should create parent directory and emit valid JSON."""
    output_path = tmp_path / "output" / "report.json"
    report = {
        "metadata": {"generated_at_utc": "2026-01-01T00:00:00+00:00"},
        "summary": {},
        "duplicate_keys_b": [],
        "read_issues": [],
    }

    write_report(report, output_path=output_path)

    assert output_path.exists()
    parsed = json.loads(output_path.read_text(encoding="utf-8"))
    assert parsed == report


def test_main_usage_error_exits_with_one(capsys: pytest.CaptureFixture[str]) -> None:
    """A missing required --key is a validation failure like any other."""
    exit_code = main(["--table-a", str(TABLE_A), "--table-b", str(TABLE_B)])

    assert exit_code == 1
    assert "--key" in capsys.readouterr().err


def test_main_report_failure_writes_no_result_tables(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """An unwritable report path fails the run before any result table is written."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    output_dir = tmp_path / "out"

    exit_code = main(
        [
            "--table-a",
            str(TABLE_A),
            "--table-b",
            str(TABLE_B),
            "--key",
            "id",
            "--output-dir",
            str(output_dir),
            "--report",
            str(blocker / "report.json"),
        ]
    )

    assert exit_code == 1
    assert "error:" in capsys.readouterr().err
    assert not output_dir.exists()

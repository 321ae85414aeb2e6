"""Delimited-text codec for reading and writing tables."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from .errors import TableWriteError
from .models import CombinedReadResult, DataIssue, ReadResult, Table

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = ","


def _check_separator(separator: str) -> str:
    """Return the separator when it is a single character."""

    if len(separator) != 1:
        raise ValueError(f"Field separator must be a single character, got {separator!r}")
    return separator


def _is_blank_row(raw_row: list[str]) -> bool:
    """Return True for an empty line; rows of empty fields are data."""

    return not raw_row


def read_table(csv_path: str | Path, *, separator: str = DEFAULT_SEPARATOR) -> ReadResult:
    """Read one delimited file into a table with row-level issues.

    A file that cannot be opened or decoded yields an empty table and a
    `read_failed` issue rather than an exception.
    """

    path = Path(csv_path)
    delimiter = _check_separator(separator)
    issues: list[DataIssue] = []
    rows: list[list[str]] = []

    try:
        with path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.reader(handle, delimiter=delimiter)
            for line_number, raw_row in enumerate(reader, start=1):
                if _is_blank_row(raw_row):
                    issues.append(
                        DataIssue(
                            code="blank_row_skipped",
                            message=f"Line {line_number} is blank and was skipped",
                            row=line_number,
                        )
                    )
                    continue
                if rows and len(raw_row) != len(rows[0]):
                    issues.append(
                        DataIssue(
                            code="row_width_mismatch",
                            message=(
                                f"Line {line_number} has {len(raw_row)} fields but the header has {len(rows[0])}"
                            ),
                            row=line_number,
                        )
                    )
                rows.append(raw_row)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return ReadResult(
            file_path=path,
            table=Table.empty(),
            issues=[DataIssue(code="read_failed", message=f"Could not read {path}: {exc}")],
        )

    logger.debug("Read %d rows from %s", len(rows), path)
    return ReadResult(file_path=path, table=Table.from_rows(rows), issues=issues)


def read_both_tables(
    table_a_path: str | Path,
    table_b_path: str | Path,
    *,
    separator_a: str = DEFAULT_SEPARATOR,
    separator_b: str = DEFAULT_SEPARATOR,
) -> CombinedReadResult:
    """Read both input tables and return them as one combined structure."""

    return CombinedReadResult(
        table_a=read_table(table_a_path, separator=separator_a),
        table_b=read_table(table_b_path, separator=separator_b),
    )


def write_table(table: Table, csv_path: str | Path, *, separator: str = DEFAULT_SEPARATOR) -> None:
    """Write a table to disk, creating parent directories as needed."""

    path = Path(csv_path)
    delimiter = _check_separator(separator)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle, delimiter=delimiter, lineterminator="\n")
            writer.writerows(table.rows)
    except OSError as exc:
        raise TableWriteError(str(path), exc.strerror or str(exc)) from exc

    logger.info("Wrote %d rows to %s", len(table), path)

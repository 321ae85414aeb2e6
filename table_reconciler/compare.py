"""Comparison engine: availability partition and field consistency diff."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import NamedTuple

from .errors import EmptyMatchedTableError, EmptyTableError, OddFieldCountError, SchemaMismatchError
from .keys import CompositeKey, composite_key, format_key, resolve_key_indices
from .models import ComparisonOptions, DuplicateKeyInfo, KeySpec, ResultBundle, Row, Table

logger = logging.getLogger(__name__)

FLAG_EQUAL = "TRUE"
FLAG_DIFFERENT = "FALSE"


class Partition(NamedTuple):
    """Matched rows plus the rows found in only one table."""

    matched: Table
    unmatched_a: Table
    unmatched_b: Table


def validate_same_schema(table_a: Table, table_b: Table) -> None:
    """Fail unless both tables have the same header, field for field."""

    _require_rows(table_a, "A")
    _require_rows(table_b, "B")

    if table_a.column_count != table_b.column_count:
        raise SchemaMismatchError(
            f"table A has {table_a.column_count} columns, table B has {table_b.column_count}"
        )
    for position, (name_a, name_b) in enumerate(zip(table_a.header, table_b.header)):
        if name_a != name_b:
            raise SchemaMismatchError(f"column {position} is {name_a!r} in table A but {name_b!r} in table B")


def _require_rows(table: Table, table_label: str) -> None:
    if table.is_empty:
        raise EmptyTableError(table_label)


def partition(table_a: Table, table_b: Table, key_spec: KeySpec) -> Partition:
    """Split both tables into matched, only-in-A and only-in-B rows.

    Table B is indexed by composite key. When a key repeats in table B the
    last occurrence wins the index entry. Output rows keep the relative order
    of their source table.
    """

    _require_rows(table_a, "A")
    _require_rows(table_b, "B")

    # Both tables resolve before any data row is scanned.
    indices_a = resolve_key_indices(table_a.header, key_spec.columns_a, table_label="A")
    indices_b = resolve_key_indices(table_b.header, key_spec.columns_b, table_label="B")
    logger.debug("Resolved key indices: table A %s, table B %s", indices_a, indices_b)

    index_b: dict[CompositeKey, Row] = {}
    for row_number, row in enumerate(table_b.data_rows, start=1):
        index_b[composite_key(row, indices_b, table_label="B", row_number=row_number)] = row
    logger.debug("Indexed %d distinct keys from %d rows of table B", len(index_b), len(table_b.data_rows))

    matched: list[Row] = [table_a.header + table_b.header]
    unmatched_a: list[Row] = [table_a.header]
    seen_keys: set[CompositeKey] = set()

    for row_number, row in enumerate(table_a.data_rows, start=1):
        key = composite_key(row, indices_a, table_label="A", row_number=row_number)
        joined = index_b.get(key)
        if joined is None:
            unmatched_a.append(row)
            continue
        matched.append(row + joined)
        seen_keys.add(key)

    unmatched_b: list[Row] = [table_b.header]
    for row_number, row in enumerate(table_b.data_rows, start=1):
        if composite_key(row, indices_b, table_label="B", row_number=row_number) not in seen_keys:
            unmatched_b.append(row)

    return Partition(
        matched=Table(rows=tuple(matched)),
        unmatched_a=Table(rows=tuple(unmatched_a)),
        unmatched_b=Table(rows=tuple(unmatched_b)),
    )


def _half_width(row: Row, row_number: int, *, lenient: bool) -> int:
    """Return the width of one half of a matched row."""

    width = len(row)
    if width % 2:
        if not lenient:
            raise OddFieldCountError(row_number, width)
        logger.warning("Matched row %d has %d fields; dropping the trailing unpaired field", row_number, width)
    return width // 2


def consistency(matched: Table, *, lenient: bool = False, allow_empty: bool = False) -> Table:
    """Expand matched rows into A values, B values and per-field equality flags.

    Each matched row is split in half. The output holds three rows per
    matched row, and the flag at position i is `TRUE` only when both halves
    hold exactly the same text there.
    """

    if not matched.data_rows:
        if not allow_empty:
            raise EmptyMatchedTableError()
        if matched.is_empty:
            return Table.empty()
        half = _half_width(matched.header, 0, lenient=lenient)
        return Table(rows=(matched.header[:half],))

    half = _half_width(matched.header, 0, lenient=lenient)
    rows: list[Row] = [matched.header[:half]]

    for row_number, row in enumerate(matched.data_rows, start=1):
        row_half = _half_width(row, row_number, lenient=lenient)
        values_a = row[:row_half]
        values_b = row[row_half : 2 * row_half]
        flags = tuple(FLAG_EQUAL if a == b else FLAG_DIFFERENT for a, b in zip(values_a, values_b))
        rows.extend([values_a, values_b, flags])

    return Table(rows=tuple(rows))


def detect_duplicate_keys(table: Table, key_columns: tuple[str, ...], *, table_label: str) -> list[DuplicateKeyInfo]:
    """Return keys that occur on more than one data row of `table`.

    `kept_row` is the data-row number of the last occurrence, which is the
    row an index built over this table keeps.
    """

    _require_rows(table, table_label)
    indices = resolve_key_indices(table.header, key_columns, table_label=table_label)
    row_counts: defaultdict[CompositeKey, int] = defaultdict(int)
    last_rows: dict[CompositeKey, int] = {}

    for row_number, row in enumerate(table.data_rows, start=1):
        key = composite_key(row, indices, table_label=table_label, row_number=row_number)
        row_counts[key] += 1
        last_rows[key] = row_number

    duplicates: list[DuplicateKeyInfo] = []
    for key in sorted(row_counts):
        if row_counts[key] <= 1:
            continue
        duplicates.append(
            {
                "key": format_key(key),
                "row_count": row_counts[key],
                "kept_row": last_rows[key],
            }
        )
    return duplicates


def compare(
    table_a: Table,
    table_b: Table,
    key_spec: KeySpec,
    options: ComparisonOptions | None = None,
) -> ResultBundle:
    """Run a full comparison and return its immutable result bundle.

    Any failure propagates before a bundle exists.
    """

    options = options or ComparisonOptions()
    if options.require_same_schema:
        validate_same_schema(table_a, table_b)

    matched, unmatched_a, unmatched_b = partition(table_a, table_b, key_spec)
    consistency_table = consistency(matched, lenient=options.lenient, allow_empty=options.allow_empty_match)
    duplicates = detect_duplicate_keys(table_b, key_spec.columns_b, table_label="B")
    for duplicate in duplicates:
        logger.warning(
            "Key %r appears %d times in table B; row %d is used",
            duplicate["key"],
            duplicate["row_count"],
            duplicate["kept_row"],
        )

    bundle = ResultBundle(
        table_a=table_a,
        table_b=table_b,
        key_spec=key_spec,
        matched=matched,
        unmatched_a=unmatched_a,
        unmatched_b=unmatched_b,
        consistency_table=consistency_table,
        duplicate_keys_b=tuple(duplicates),
    )
    summary = bundle.summary()
    logger.info(
        "Compared %d rows of table A with %d rows of table B: %d matched, %d only in A, %d only in B",
        summary["table_a_rows"],
        summary["table_b_rows"],
        summary["matched_rows"],
        summary["unmatched_a_rows"],
        summary["unmatched_b_rows"],
    )
    return bundle

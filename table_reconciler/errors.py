"""Typed failures raised by the comparison engine and the table codec."""

from __future__ import annotations


class ComparisonError(ValueError):
    """Base class for every failure that aborts a table comparison."""


class EmptyTableError(ComparisonError):
    """An input table has no rows at all, not even a header."""

    def __init__(self, table_label: str) -> None:
        self.table_label = table_label
        super().__init__(f"Table {table_label} is empty (no header row)")


class ColumnNotFoundError(ComparisonError):
    """A key column name is absent from a table header."""

    def __init__(self, column: str, table_label: str) -> None:
        self.column = column
        self.table_label = table_label
        super().__init__(f"Key column {column!r} not found in table {table_label} header")


class SchemaMismatchError(ComparisonError):
    """Tables were required to share a header but do not."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Table schemas differ: {reason}")


class OddFieldCountError(ComparisonError):
    """A matched row cannot be split into two equal halves."""

    def __init__(self, row_number: int, width: int) -> None:
        self.row_number = row_number
        self.width = width
        super().__init__(f"Matched row {row_number} has an odd field count ({width}) and cannot be halved")


class EmptyMatchedTableError(ComparisonError):
    """The consistency diff was asked to run on a table without matched rows."""

    def __init__(self) -> None:
        super().__init__("No matched rows to check for consistency")


class ShortRowError(ComparisonError):
    """A data row is too short to contain one of the key columns."""

    def __init__(self, table_label: str, row_number: int, index: int, width: int) -> None:
        self.table_label = table_label
        self.row_number = row_number
        self.index = index
        self.width = width
        super().__init__(
            f"Table {table_label} row {row_number} has {width} fields; key column position {index} is out of range"
        )


class InvalidKeySpecError(ComparisonError):
    """Key column lists are empty, blank, or of unequal length."""


class TableWriteError(OSError):
    """The codec could not create a directory or write a table file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to write table to {path}: {reason}")

"""Core typed models shared by the codec and the comparison engine."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypedDict

from .errors import EmptyTableError, InvalidKeySpecError

Row = tuple[str, ...]

RESULT_BUNDLE_VERSION = 1


@dataclass(frozen=True, slots=True)
class DataIssue:
    """Structured data-quality issue emitted while reading a table."""

    code: str
    message: str
    row: int | None = None


@dataclass(frozen=True, slots=True)
class Table:
    """Ordered rows of text fields where row 0 is the header."""

    rows: tuple[Row, ...] = ()

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[str]]) -> Table:
        """Build a table from any nested iterable of strings."""

        return cls(rows=tuple(tuple(row) for row in rows))

    @classmethod
    def empty(cls) -> Table:
        return cls()

    @property
    def is_empty(self) -> bool:
        """Return whether the table lacks even a header row."""

        return not self.rows

    @property
    def header(self) -> Row:
        if not self.rows:
            raise EmptyTableError("(unnamed)")
        return self.rows[0]

    @property
    def data_rows(self) -> tuple[Row, ...]:
        return self.rows[1:]

    @property
    def column_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def __len__(self) -> int:
        return len(self.rows)

    def to_lists(self) -> list[list[str]]:
        """Return the rows as plain nested lists."""

        return [list(row) for row in self.rows]


@dataclass(frozen=True, slots=True)
class KeySpec:
    """Key column names for table A and the matching names for table B."""

    columns_a: tuple[str, ...]
    columns_b: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.columns_a or not self.columns_b:
            raise InvalidKeySpecError("At least one key column is required for each table")
        if len(self.columns_a) != len(self.columns_b):
            raise InvalidKeySpecError(
                f"Key column counts differ: {len(self.columns_a)} for table A, {len(self.columns_b)} for table B"
            )
        for name in (*self.columns_a, *self.columns_b):
            if not name or not name.strip():
                raise InvalidKeySpecError("Key column names must not be blank")

    @classmethod
    def shared(cls, *names: str) -> KeySpec:
        """Use the same key column names for both tables."""

        return cls(columns_a=tuple(names), columns_b=tuple(names))


@dataclass(slots=True)
class ReadResult:
    """Table read from one delimited file plus the issues found while reading."""

    file_path: Path
    table: Table
    issues: list[DataIssue] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """Return whether the file could not be read at all."""

        return any(issue.code == "read_failed" for issue in self.issues)


@dataclass(slots=True)
class CombinedReadResult:
    """Container for both tables of a comparison."""

    table_a: ReadResult
    table_b: ReadResult

    def all_issues(self) -> list[DataIssue]:
        return [*self.table_a.issues, *self.table_b.issues]


@dataclass(frozen=True, slots=True)
class ComparisonOptions:
    """Policy switches for one comparison run."""

    require_same_schema: bool = False
    lenient: bool = False
    allow_empty_match: bool = False


class DuplicateKeyInfo(TypedDict):
    """A key that occurs more than once in the indexed table."""

    key: str
    row_count: int
    kept_row: int


class ComparisonSummary(TypedDict):
    """Row counts for one comparison."""

    table_a_rows: int
    table_b_rows: int
    matched_rows: int
    unmatched_a_rows: int
    unmatched_b_rows: int
    inconsistent_rows: int
    duplicate_keys_b: int


@dataclass(frozen=True, slots=True)
class ResultBundle:
    """Immutable outcome of one comparison, created only by `compare()`."""

    table_a: Table
    table_b: Table
    key_spec: KeySpec
    matched: Table
    unmatched_a: Table
    unmatched_b: Table
    consistency_table: Table
    duplicate_keys_b: tuple[DuplicateKeyInfo, ...] = ()
    version: int = RESULT_BUNDLE_VERSION

    def summary(self) -> ComparisonSummary:
        """Return data-row counts for every table in the bundle."""

        flag_rows = self.consistency_table.data_rows[2::3]
        return {
            "table_a_rows": len(self.table_a.data_rows),
            "table_b_rows": len(self.table_b.data_rows),
            "matched_rows": len(self.matched.data_rows),
            "unmatched_a_rows": len(self.unmatched_a.data_rows),
            "unmatched_b_rows": len(self.unmatched_b.data_rows),
            "inconsistent_rows": sum(1 for flags in flag_rows if "FALSE" in flags),
            "duplicate_keys_b": len(self.duplicate_keys_b),
        }

    def save(self, output_dir: str | Path, *, include_inputs: bool = True, separator: str = ",") -> list[Path]:
        """Write the bundle tables under `output_dir` and return the written paths."""

        from .codec import write_table

        directory = Path(output_dir)
        outputs: list[tuple[str, Table]] = []
        if include_inputs:
            outputs.extend([("tableA.csv", self.table_a), ("tableB.csv", self.table_b)])
        outputs.extend(
            [
                ("matched.csv", self.matched),
                ("unmatchedTableA.csv", self.unmatched_a),
                ("unmatchedTableB.csv", self.unmatched_b),
                ("consistencyTable.csv", self.consistency_table),
            ]
        )

        written: list[Path] = []
        for file_name, table in outputs:
            path = directory / file_name
            write_table(table, path, separator=separator)
            written.append(path)
        return written

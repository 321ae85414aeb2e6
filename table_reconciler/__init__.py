"""Public API exports for the table codec and comparison engine."""

from .codec import read_both_tables, read_table, write_table
from .compare import Partition, compare, consistency, detect_duplicate_keys, partition, validate_same_schema
from .errors import (
    ColumnNotFoundError,
    ComparisonError,
    EmptyMatchedTableError,
    EmptyTableError,
    InvalidKeySpecError,
    OddFieldCountError,
    SchemaMismatchError,
    ShortRowError,
    TableWriteError,
)
from .keys import composite_key, format_key, resolve_key_index, resolve_key_indices
from .models import (
    CombinedReadResult,
    ComparisonOptions,
    ComparisonSummary,
    DataIssue,
    DuplicateKeyInfo,
    KeySpec,
    ReadResult,
    ResultBundle,
    Table,
)

__all__ = [
    "ColumnNotFoundError",
    "CombinedReadResult",
    "ComparisonError",
    "ComparisonOptions",
    "ComparisonSummary",
    "DataIssue",
    "DuplicateKeyInfo",
    "EmptyMatchedTableError",
    "EmptyTableError",
    "InvalidKeySpecError",
    "KeySpec",
    "OddFieldCountError",
    "Partition",
    "ReadResult",
    "ResultBundle",
    "SchemaMismatchError",
    "ShortRowError",
    "Table",
    "TableWriteError",
    "compare",
    "composite_key",
    "consistency",
    "detect_duplicate_keys",
    "format_key",
    "partition",
    "read_both_tables",
    "read_table",
    "resolve_key_index",
    "resolve_key_indices",
    "validate_same_schema",
    "write_table",
]

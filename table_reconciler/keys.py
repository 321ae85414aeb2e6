"""Key column resolution and composite key construction."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeAlias

from .errors import ColumnNotFoundError, ShortRowError

CompositeKey: TypeAlias = tuple[str, ...]

KEY_DISPLAY_SEPARATOR = "|"


def resolve_key_index(header: Sequence[str], column_name: str, *, table_label: str = "?") -> int:
    """Return the position of the first header field equal to `column_name`.

    Matching is exact and case-sensitive.
    """

    for index, name in enumerate(header):
        if name == column_name:
            return index
    raise ColumnNotFoundError(column_name, table_label)


def resolve_key_indices(header: Sequence[str], columns: Sequence[str], *, table_label: str) -> tuple[int, ...]:
    """Resolve every key column name against one header, in key order."""

    return tuple(resolve_key_index(header, column, table_label=table_label) for column in columns)


def composite_key(
    row: Sequence[str],
    indices: Sequence[int],
    *,
    table_label: str = "?",
    row_number: int = 0,
) -> CompositeKey:
    """Return the tuple of key field values for one row.

    Tuples are used instead of delimiter-joined strings so values that contain
    the display separator cannot collide.
    """

    width = len(row)
    for index in indices:
        if index >= width:
            raise ShortRowError(table_label, row_number, index, width)
    return tuple(row[index] for index in indices)


def format_key(key: CompositeKey) -> str:
    """Render a composite key for reports and log messages."""

    return KEY_DISPLAY_SEPARATOR.join(key)

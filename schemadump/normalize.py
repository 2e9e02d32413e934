"""Repair passes applied to an extracted schema before it is ordered.

Two passes run in sequence:

1. ``normalize_indices`` on every table: auto-increment columns own the
   primary key, and single-column indices are deduplicated.
2. ``normalize_foreign_keys`` across tables: duplicate foreign keys are
   dropped and integer columns referencing an auto-increment column are
   made unsigned to match it.

Every repair that drops or alters metadata is reported as a warning string
and logged; the passes never remove tables or columns.
"""

import logging

from schemadump.errors import DanglingReferenceError
from schemadump.models import INDEX_TYPE_PRIORITY, Column, Index, IndexType, IntegerType, Table

logger = logging.getLogger(__name__)


def _warn(warnings: list[str], message: str) -> None:
    logger.warning(message)
    warnings.append(message)


def _format_columns(table: str, columns: list[str]) -> str:
    return f"`{table}({', '.join(columns)})`"


def _repair_primary_key(table: Table, indices: list[Index], warnings: list[str]) -> list[Index]:
    """Let the auto-increment column own the primary key."""
    increments = table.increments_columns
    if not increments:
        return indices

    kept: list[Index] = []
    for index in indices:
        if index.type is not IndexType.PRIMARY:
            kept.append(index)
            continue

        label = _format_columns(table.name, index.columns)
        if len(index.columns) == 1:
            _warn(warnings, f"Removing primary key {label} because we have an AUTO_INCREMENT column")
            continue

        remaining = [c for c in index.columns if c not in increments]
        if len(remaining) == len(index.columns) or not remaining:
            _warn(warnings, f"Removing compound primary key {label} because we have an AUTO_INCREMENT column")
            continue

        _warn(
            warnings,
            f"Downgrading compound primary key {label} to unique index "
            f"{_format_columns(table.name, remaining)} because we have an AUTO_INCREMENT column",
        )
        index.columns = remaining
        index.type = IndexType.UNIQUE
        kept.append(index)

    return kept


def _drop_duplicate_indices(table: Table, indices: list[Index], warnings: list[str]) -> list[Index]:
    """Drop single-column indices on a column that already has one (first wins)."""
    kept: list[Index] = []
    covered: set[str] = set()
    for index in indices:
        if len(index.columns) > 1 or index.type is IndexType.FULLTEXT:
            kept.append(index)
            continue

        column = index.columns[0]
        if column in covered:
            _warn(warnings, f"Duplicate Index on {_format_columns(table.name, [column])}")
            continue
        covered.add(column)
        kept.append(index)

    return kept


def normalize_indices(table: Table) -> list[str]:
    """Repair the indices of a single table in place.

    Args:
        table: Table to repair

    Returns:
        Warnings describing each removed or altered index
    """
    warnings: list[str] = []
    indices = _repair_primary_key(table, list(table.indices), warnings)
    indices = _drop_duplicate_indices(table, indices, warnings)
    # sort is stable: indices of the same kind keep their relative order
    table.indices = sorted(indices, key=lambda i: INDEX_TYPE_PRIORITY[i.type])
    return warnings


def _require_column(table: Table, name: str) -> Column:
    column = table.get_column(name)
    if column is None:
        raise DanglingReferenceError(table.name, name, f"Column `{table.name}.{name}` does not exist")
    return column


def normalize_foreign_keys(tables: list[Table]) -> list[str]:
    """Drop duplicate foreign keys and align integer signedness across them.

    Foreign keys are keyed on their first local column; a later key on an
    already claimed column is dropped. An ``integer`` column that references an
    ``increments`` column is made unsigned, since auto-increment keys are
    unsigned and most engines reject a foreign key with mismatched signedness.

    Args:
        tables: The whole schema; referenced tables are looked up by name

    Returns:
        Warnings describing each dropped foreign key and altered column

    Raises:
        DanglingReferenceError: If a foreign key names a missing table or column
    """
    by_name = {t.name: t for t in tables}
    warnings: list[str] = []

    for table in tables:
        claimed: set[str] = set()
        kept = []
        for key in table.foreign_keys:
            column_name = key.columns[0]
            if column_name in claimed:
                _warn(warnings, f"Duplicate ForeignKey on {_format_columns(table.name, [column_name])}")
                continue
            claimed.add(column_name)
            kept.append(key)

            foreign_table = by_name.get(key.foreign_table)
            if foreign_table is None:
                raise DanglingReferenceError(
                    key.foreign_table,
                    None,
                    f"ForeignKey on {_format_columns(table.name, key.columns)} references "
                    f"missing table `{key.foreign_table}`",
                )
            foreign_column = _require_column(foreign_table, key.foreign_columns[0])
            this_column = _require_column(table, column_name)

            if (
                foreign_column.is_increments
                and isinstance(this_column.type, IntegerType)
                and not this_column.type.unsigned
            ):
                this_column.type.unsigned = True
                _warn(
                    warnings,
                    f"Making `{table.name}.{column_name}` unsigned to match "
                    f"AUTO_INCREMENT column `{foreign_table.name}.{foreign_column.name}`",
                )
        table.foreign_keys = kept

    return warnings


def normalize_tables(tables: list[Table]) -> list[str]:
    """Run the index pass on every table, then the foreign key pass."""
    warnings: list[str] = []
    for table in tables:
        warnings.extend(normalize_indices(table))
    warnings.extend(normalize_foreign_keys(tables))
    return warnings

"""Database catalog introspection.

Reflects tables through SQLAlchemy's ``Inspector`` and builds the schema
model consumed by the normalizer and the dependency sorter.
"""

import logging
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Dialect, Inspector
from sqlalchemy.exc import DatabaseError, NoSuchTableError

from schemadump.models import INDEX_TYPE_PRIORITY, Column, ForeignKey, Index, IndexType, Table
from schemadump.sources.database.engine import create_database_engine
from schemadump.sources.database.type_mapping import map_column_type, parse_default, split_on_update

logger = logging.getLogger(__name__)

DEFAULT_REFERENTIAL_ACTION = "NO ACTION"


def _is_auto_increment(
    column: dict[str, Any],
    pk_columns: list[str],
    database_type: str,
) -> bool:
    if column.get("autoincrement") is True:
        return True
    # INTEGER PRIMARY KEY is an alias of the rowid in SQLite
    return (
        database_type == "sqlite"
        and pk_columns == [column["name"]]
        and type(column["type"]).__name__ in ("INTEGER", "Integer")
    )


def reflect_columns(
    inspector: Inspector,
    table_name: str,
    pk_columns: list[str],
    database_type: str,
    dialect: Dialect | None = None,
    schema: str | None = None,
) -> list[Column]:
    """Reflect the columns of a table in declaration order."""
    columns = []
    for col in inspector.get_columns(table_name, schema=schema):
        column_type = map_column_type(
            col["type"],
            autoincrement=_is_auto_increment(col, pk_columns, database_type),
            dialect=dialect,
        )
        raw_default, on_update = split_on_update(col.get("default"))
        columns.append(
            Column(
                name=col["name"],
                type=column_type,
                nullable=col.get("nullable", True),
                default=parse_default(raw_default, column_type),
                on_update=on_update,
                comment=col.get("comment") or "",
            )
        )
    return columns


def reflect_indices(
    inspector: Inspector,
    table_name: str,
    pk_columns: list[str],
    schema: str | None = None,
) -> list[Index]:
    """Reflect primary key, indexes and unique constraints as indices.

    The result is sorted primary, unique, index, fulltext; reflection order is
    kept within each kind.
    """
    indices: list[Index] = []
    if pk_columns:
        indices.append(Index(columns=pk_columns, type=IndexType.PRIMARY))

    for index in inspector.get_indexes(table_name, schema=schema):
        column_names = index.get("column_names") or []
        if not column_names or None in column_names:
            logger.debug(f"Skipping expression index '{index.get('name')}' on '{table_name}'")
            continue
        if index.get("duplicates_constraint"):
            # reported again by get_unique_constraints
            continue

        if index.get("dialect_options", {}).get("mysql_prefix") == "FULLTEXT":
            index_type = IndexType.FULLTEXT
        elif index.get("unique"):
            index_type = IndexType.UNIQUE
        else:
            index_type = IndexType.INDEX
        indices.append(Index(columns=list(column_names), type=index_type))

    try:
        unique_constraints = inspector.get_unique_constraints(table_name, schema=schema)
    except NotImplementedError:
        logger.debug(f"Unique constraint inspection not supported for '{table_name}'")
        unique_constraints = []

    seen = {tuple(i.columns) for i in indices}
    for constraint in unique_constraints:
        columns = list(constraint.get("column_names") or [])
        if columns and tuple(columns) not in seen:
            seen.add(tuple(columns))
            indices.append(Index(columns=columns, type=IndexType.UNIQUE))

    indices.sort(key=lambda i: INDEX_TYPE_PRIORITY[i.type])
    return indices


def reflect_foreign_keys(inspector: Inspector, table_name: str, schema: str | None = None) -> list[ForeignKey]:
    """Reflect the foreign keys of a table."""
    foreign_keys = []
    try:
        reflected = inspector.get_foreign_keys(table_name, schema=schema)
    except NotImplementedError:
        logger.debug(f"Foreign key introspection not supported for '{table_name}'")
        return []

    for fk in reflected:
        columns = fk.get("constrained_columns") or []
        referred_columns = fk.get("referred_columns") or []
        if not columns or not referred_columns or not fk.get("referred_table"):
            logger.warning(f"Skipping incomplete foreign key '{fk.get('name')}' on '{table_name}'")
            continue

        options = fk.get("options") or {}
        foreign_keys.append(
            ForeignKey(
                columns=list(columns),
                foreign_table=fk["referred_table"],
                foreign_columns=list(referred_columns),
                on_update=(options.get("onupdate") or DEFAULT_REFERENTIAL_ACTION).upper(),
                on_delete=(options.get("ondelete") or DEFAULT_REFERENTIAL_ACTION).upper(),
            )
        )
    return foreign_keys


def reflect_table(
    inspector: Inspector,
    table_name: str,
    database_type: str,
    dialect: Dialect | None = None,
    schema: str | None = None,
) -> Table:
    """Reflect a single table into the schema model.

    Raises:
        ValueError: If the table does not exist
    """
    try:
        pk_constraint = inspector.get_pk_constraint(table_name, schema=schema)
    except NoSuchTableError as e:
        raise ValueError(f"Table '{table_name}' not found in database") from e
    pk_columns = list(pk_constraint.get("constrained_columns") or [])

    return Table(
        name=table_name,
        columns=reflect_columns(inspector, table_name, pk_columns, database_type, dialect, schema),
        indices=reflect_indices(inspector, table_name, pk_columns, schema),
        foreign_keys=reflect_foreign_keys(inspector, table_name, schema),
    )


def extract_tables(
    connection_string: str,
    database_type: str,
    schema: str | None = None,
    table_names: list[str] | None = None,
) -> list[Table]:
    """Extract all base tables of a database or schema.

    Args:
        connection_string: Database connection string
        database_type: Database type (postgresql, mysql, sqlite)
        schema: Database schema name (optional, defaults to 'public' for PostgreSQL)
        table_names: Restrict extraction to these tables (optional)

    Returns:
        Tables in catalog order, not yet normalized or sorted

    Raises:
        ValueError: If database_type is not supported or a requested table is missing
    """
    engine = create_database_engine(connection_string, database_type)

    try:
        inspector = inspect(engine)

        # For PostgreSQL, default to 'public' schema if not specified
        if database_type == "postgresql" and schema is None:
            schema = "public"

        available = inspector.get_table_names(schema=schema)
        if table_names is None:
            table_names = available
        else:
            missing = [name for name in table_names if name not in available]
            if missing:
                raise ValueError(f"Tables not found in database: {', '.join(missing)}")

        tables = []
        for table_name in table_names:
            try:
                tables.append(reflect_table(inspector, table_name, database_type, engine.dialect, schema))
            except DatabaseError as e:
                raise ValueError(f"Could not reflect table '{table_name}': {e}") from e
            logger.debug(f"Reflected table '{table_name}'")

        logger.info(f"Extracted {len(tables)} tables")
        return tables

    finally:
        engine.dispose()

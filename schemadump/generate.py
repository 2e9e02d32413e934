"""Render an ordered, normalized schema as a knex migration."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from schemadump.models import (
    BigIntegerType,
    BooleanType,
    Column,
    CustomType,
    DateTimeType,
    DecimalType,
    EnumType,
    IndexType,
    IntegerType,
    StringType,
    Table,
)

logger = logging.getLogger(__name__)

CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"


@dataclass
class DbMetadata:
    """Pieces of a migration, grouped by the phase they are emitted in"""

    creates: list[str] = field(default_factory=list)
    on_updates: list[dict[str, str]] = field(default_factory=list)
    indices: list[dict[str, Any]] = field(default_factory=list)
    foreigns: list[dict[str, str]] = field(default_factory=list)
    id_keys: list[dict[str, Any]] = field(default_factory=list)


def _js(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _format_default(column: Column) -> str:
    if column.default == CURRENT_TIMESTAMP:
        return "knex.fn.now()"
    if isinstance(column.type, BooleanType) and isinstance(column.default, str):
        return "true" if column.default.lower() in ("1", "true") else "false"
    return _js(column.default)


def generate_column(column: Column) -> str:
    """Render one column builder chain, e.g. ``t.integer("user_id").unsigned()``"""
    name = _js(column.name)
    type_ = column.type

    match type_:
        case StringType():
            code = f"t.string({name}, {type_.length})"
        case DecimalType():
            code = f"t.decimal({name}, {type_.precision}, {type_.scale})"
        case EnumType():
            code = f"t.enum({name}, {_js(type_.cases)})"
        case CustomType():
            code = f"t.specificType({name}, {_js(type_.raw_declaration)})"
        case _:
            code = f"t.{type_.type}({name})"

    if isinstance(type_, (IntegerType, BigIntegerType)) and type_.unsigned:
        code += ".unsigned()"
    if not column.nullable:
        code += ".notNullable()"
    if column.default is not None:
        code += f".defaultTo({_format_default(column)})"
    if column.comment:
        code += f".comment({_js(column.comment)})"
    return code


def is_on_update_timestamp(column: Column) -> bool:
    """Whether the on-update phase of a migration adds this column."""
    return isinstance(column.type, DateTimeType) and column.on_update.upper() == CURRENT_TIMESTAMP


def generate_create_table(table: Table) -> str:
    """Render the createTable statement for a table.

    ``DATETIME ... ON UPDATE CURRENT_TIMESTAMP`` columns are left out; they are
    added by the on-update phase of the migration. Other ON UPDATE expressions
    have no knex equivalent, so those columns are created without it.
    """
    lines = [f"knex.schema.createTable({_js(table.name)}, t => {{"]
    for column in table.columns:
        if is_on_update_timestamp(column):
            continue
        if column.on_update:
            logger.warning(
                f"Dropping ON UPDATE {column.on_update} from `{table.name}.{column.name}`: "
                "knex can only add ON UPDATE CURRENT_TIMESTAMP to DATETIME columns"
            )
        lines.append(f"  {generate_column(column)};")
    lines.append("})")
    return "\n".join(lines)


def generate_db_metadata(tables: list[Table]) -> DbMetadata:
    """Collect the migration pieces for tables, preserving their order.

    ``id_keys`` lists every column that takes part in a foreign key on either
    side, plus every auto-increment column, each once per table.
    """
    metadata = DbMetadata()
    id_keys: dict[str, dict[str, None]] = {}
    by_name = {t.name: t for t in tables}

    def record_id(table: str, column: str) -> None:
        id_keys.setdefault(table, {})[column] = None

    for table in tables:
        metadata.creates.append(generate_create_table(table))

        for index in table.indices:
            metadata.indices.append({"table": table.name, "type": index.type.value, "columns": list(index.columns)})

        for key in table.foreign_keys:
            column = key.columns[0]
            foreign_column = key.foreign_columns[0]
            record_id(table.name, column)
            record_id(key.foreign_table, foreign_column)
            metadata.foreigns.append(
                {
                    "table": table.name,
                    "column": column,
                    "foreign_table": key.foreign_table,
                    "foreign_column": foreign_column,
                    "on_delete": key.on_delete,
                    "on_update": key.on_update,
                }
            )

        for column in table.columns:
            if column.is_increments:
                record_id(table.name, column.name)
            if is_on_update_timestamp(column):
                metadata.on_updates.append({"table": table.name, "column": column.name})

    for table_name, columns in id_keys.items():
        owner = by_name.get(table_name)
        for column_name in columns:
            definition = owner.get_column(column_name) if owner else None
            if definition is None:
                # reference into a table outside the dump; nothing to describe
                continue
            metadata.id_keys.append(
                {
                    "table": table_name,
                    "column": column_name,
                    "nullable": definition.nullable,
                    "auto": definition.is_increments,
                }
            )

    return metadata


def _index_call(index: dict[str, Any]) -> str:
    columns = _js(index["columns"])
    # knex has no fulltext builder; MySQL takes it as the index type
    if index["type"] == IndexType.FULLTEXT.value:
        return f't.index({columns}, undefined, "FULLTEXT")'
    return f"t.{index['type']}({columns})"


def _indent(code: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line if line else line for line in code.splitlines())


def generate_knex_migration(tables: list[Table]) -> str:
    """Render a complete knex migration module for ordered tables.

    Tables are created in the given order, then indices, ON UPDATE columns and
    foreign keys are added. ``down`` drops the tables in reverse order.
    """
    metadata = generate_db_metadata(tables)
    body: list[str] = []

    for create in metadata.creates:
        body.append(f"await {create};")

    for index in metadata.indices:
        body.append(f"await knex.schema.alterTable({_js(index['table'])}, t => {{ {_index_call(index)}; }});")

    for on_update in metadata.on_updates:
        table, column = _js(on_update["table"]), _js(on_update["column"])
        body.append(
            f'await knex.raw("ALTER TABLE ?? ADD COLUMN ?? DATETIME NOT NULL '
            f'DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP", [{table}, {column}]);'
        )

    for foreign in metadata.foreigns:
        body.append(
            f"await knex.schema.alterTable({_js(foreign['table'])}, t => {{ "
            f"t.foreign({_js(foreign['column'])})"
            f".references({_js(foreign['foreign_column'])})"
            f".inTable({_js(foreign['foreign_table'])})"
            f".onDelete({_js(foreign['on_delete'])})"
            f".onUpdate({_js(foreign['on_update'])}); }});"
        )

    drops = [f"await knex.schema.dropTableIfExists({_js(t.name)});" for t in reversed(tables)]

    lines = ["exports.up = async knex => {", _indent("\n".join(body)), "};", ""]
    lines += ["exports.down = async knex => {", _indent("\n".join(drops)), "};", ""]
    return "\n".join(lines)

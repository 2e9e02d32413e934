"""Tests for knex migration rendering"""

import logging

import pytest
from sqlalchemy.dialects import mysql

from schemadump.generate import generate_column, generate_create_table, generate_db_metadata, generate_knex_migration
from schemadump.models import (
    BooleanType,
    Column,
    CustomType,
    DateTimeType,
    DecimalType,
    EnumType,
    Index,
    IndexType,
    IntegerType,
    StringType,
    Table,
)
from schemadump.ordering import process_tables
from schemadump.sources.database.type_mapping import map_column_type


def test_generate_column_variants() -> None:
    """Test the builder call for each kind of column"""
    assert generate_column(Column(name="email", type=StringType(length=120))) == 't.string("email", 120)'
    assert generate_column(Column(name="price", type=DecimalType(precision=10, scale=2))) == (
        't.decimal("price", 10, 2)'
    )
    assert generate_column(Column(name="state", type=EnumType(cases=["a", "b"]))) == 't.enum("state", ["a", "b"])'
    assert generate_column(Column(name="geo", type=CustomType(raw_declaration="POINT"))) == (
        't.specificType("geo", "POINT")'
    )
    assert generate_column(Column(name="user_id", type=IntegerType(unsigned=True), nullable=False)) == (
        't.integer("user_id").unsigned().notNullable()'
    )


def test_generate_column_defaults() -> None:
    """Test default value rendering"""
    created = Column(name="created_at", type=DateTimeType(), default="CURRENT_TIMESTAMP")
    assert generate_column(created) == 't.dateTime("created_at").defaultTo(knex.fn.now())'

    active = Column(name="active", type=BooleanType(), default=True)
    assert generate_column(active) == 't.boolean("active").defaultTo(true)'

    legacy = Column(name="legacy", type=BooleanType(), default="0")
    assert generate_column(legacy) == 't.boolean("legacy").defaultTo(false)'

    status = Column(name="status", type=StringType(length=20), default="new", comment="Order state")
    assert generate_column(status) == 't.string("status", 20).defaultTo("new").comment("Order state")'


def test_create_table_skips_on_update_columns() -> None:
    """Test that ON UPDATE columns are left to the on-update phase"""
    table = Table(
        name="posts",
        columns=[
            Column(name="id", type={"type": "increments"}, nullable=False),
            Column(name="updated_at", type=DateTimeType(), on_update="CURRENT_TIMESTAMP"),
        ],
    )
    assert generate_create_table(table) == 'knex.schema.createTable("posts", t => {\n  t.increments("id").notNullable();\n})'


def test_create_table_keeps_other_on_update_columns(caplog: pytest.LogCaptureFixture) -> None:
    """Test that ON UPDATE expressions knex cannot add keep their column and log a warning"""
    table = Table(
        name="posts",
        columns=[
            Column(name="id", type={"type": "increments"}, nullable=False),
            Column(name="revision", type=IntegerType(), on_update="revision + 1"),
        ],
    )

    with caplog.at_level(logging.WARNING, logger="schemadump.generate"):
        code = generate_create_table(table)

    assert '  t.integer("revision");' in code
    assert generate_db_metadata([table]).on_updates == []
    assert "`posts.revision`" in caplog.text


def test_migration_keeps_reflected_timestamp_on_update_column() -> None:
    """Test that MySQL TIMESTAMP ... ON UPDATE CURRENT_TIMESTAMP columns reach the migration"""
    table = Table(
        name="posts",
        columns=[
            Column(name="id", type={"type": "increments"}, nullable=False),
            Column(
                name="updated_at",
                type=map_column_type(mysql.TIMESTAMP(), dialect=mysql.dialect()),
                nullable=False,
                default="CURRENT_TIMESTAMP",
                on_update="CURRENT_TIMESTAMP",
            ),
        ],
    )
    migration = generate_knex_migration([table])

    assert '"updated_at"' in migration
    assert "ON UPDATE CURRENT_TIMESTAMP" in migration


def test_db_metadata(users_table: Table, orders_table: Table) -> None:
    """Test collected indices, foreign keys and id keys"""
    orders_table.indices = [Index(columns=["status"], type=IndexType.INDEX)]
    result = process_tables([orders_table, users_table])
    metadata = generate_db_metadata(result.sorted)

    assert len(metadata.creates) == 2
    assert metadata.creates[0].startswith('knex.schema.createTable("users"')
    assert metadata.indices == [{"table": "orders", "type": "index", "columns": ["status"]}]
    assert metadata.foreigns == [
        {
            "table": "orders",
            "column": "user_id",
            "foreign_table": "users",
            "foreign_column": "id",
            "on_delete": "CASCADE",
            "on_update": "NO ACTION",
        }
    ]
    assert metadata.id_keys == [
        {"table": "users", "column": "id", "nullable": False, "auto": True},
        {"table": "orders", "column": "user_id", "nullable": False, "auto": False},
        {"table": "orders", "column": "id", "nullable": False, "auto": True},
    ]


def test_on_update_columns_collected() -> None:
    """Test that DATETIME ON UPDATE CURRENT_TIMESTAMP columns are collected"""
    table = Table(
        name="posts",
        columns=[Column(name="updated_at", type=DateTimeType(), on_update="CURRENT_TIMESTAMP")],
    )
    assert generate_db_metadata([table]).on_updates == [{"table": "posts", "column": "updated_at"}]


def test_knex_migration(users_table: Table, orders_table: Table) -> None:
    """Test the order of statements in the rendered migration"""
    result = process_tables([orders_table, users_table])
    migration = generate_knex_migration(result.sorted)

    assert migration.startswith("exports.up = async knex => {")
    assert "exports.down = async knex => {" in migration
    assert migration.index('createTable("users"') < migration.index('createTable("orders"')
    assert migration.index('createTable("orders"') < migration.index('t.foreign("user_id")')
    assert '.references("id").inTable("users").onDelete("CASCADE").onUpdate("NO ACTION")' in migration
    assert 't.integer("user_id").unsigned().notNullable();' in migration
    # dependents are dropped first
    assert migration.index('dropTableIfExists("orders")') < migration.index('dropTableIfExists("users")')


def test_knex_migration_index_calls() -> None:
    """Test the builder call used for each kind of index"""
    table = Table(
        name="articles",
        columns=[
            Column(name="slug", type=StringType(length=80), nullable=False),
            Column(name="title", type=StringType(length=200)),
            Column(name="body", type={"type": "text"}),
        ],
        indices=[
            Index(columns=["slug"], type=IndexType.UNIQUE),
            Index(columns=["title"], type=IndexType.INDEX),
            Index(columns=["body"], type=IndexType.FULLTEXT),
        ],
    )
    migration = generate_knex_migration([table])

    assert 't => { t.unique(["slug"]); }' in migration
    assert 't => { t.index(["title"]); }' in migration
    assert 't => { t.index(["body"], undefined, "FULLTEXT"); }' in migration
    assert "t.fulltext" not in migration

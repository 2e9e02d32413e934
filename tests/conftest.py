"""Pytest configuration and shared fixtures"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from schemadump.models import (
    Column,
    ForeignKey,
    IncrementsType,
    Index,
    IndexType,
    IntegerType,
    Schema,
    StringType,
    Table,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI config at a temporary file so tests never read ~/.schemadump.yaml"""
    config_path = tmp_path / "schemadump.yaml"
    monkeypatch.setenv("SCHEMADUMP_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def users_table() -> Table:
    """Return a users table with an auto-increment key and an explicit primary index"""
    return Table(
        name="users",
        columns=[
            Column(name="id", type=IncrementsType(), nullable=False),
            Column(name="email", type=StringType(length=120), nullable=False),
        ],
        indices=[Index(columns=["id"], type=IndexType.PRIMARY)],
    )


@pytest.fixture
def orders_table() -> Table:
    """Return an orders table referencing users with a signed integer column"""
    return Table(
        name="orders",
        columns=[
            Column(name="id", type=IncrementsType(), nullable=False),
            Column(name="user_id", type=IntegerType(unsigned=False), nullable=False),
            Column(name="status", type=StringType(length=20), default="new"),
        ],
        foreign_keys=[
            ForeignKey(
                columns=["user_id"],
                foreign_table="users",
                foreign_columns=["id"],
                on_delete="CASCADE",
            )
        ],
    )


@pytest.fixture
def schema_file(tmp_path: Path, users_table: Table, orders_table: Table) -> Path:
    """Save orders and users (dependent first) as a JSON snapshot and return its path"""
    path = tmp_path / "schema.json"
    path.write_text(Schema(tables=[orders_table, users_table]).model_dump_json(indent=2), encoding="utf-8")
    return path


@pytest.fixture
def sqlite_db(tmp_path: Path) -> Iterator[str]:
    """Create a SQLite database with users, orders and tags tables"""
    db_path = tmp_path / "shop.db"
    connection_string = f"sqlite:///{db_path}"

    engine = create_engine(connection_string)
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email VARCHAR(120) NOT NULL,
                    is_active BOOLEAN NOT NULL DEFAULT 1,
                    balance DECIMAL(10, 2) DEFAULT '0.00',
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    bio TEXT,
                    UNIQUE (email)
                )
                """
            )
        )
        conn.execute(text("CREATE INDEX ix_users_created_at ON users (created_at)"))
        conn.execute(
            text(
                """
                CREATE TABLE orders (
                    id INTEGER PRIMARY KEY,
                    user_id INTEGER NOT NULL,
                    status VARCHAR(20) DEFAULT 'new',
                    amount FLOAT,
                    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
                )
                """
            )
        )
        conn.execute(text("CREATE INDEX ix_orders_status ON orders (status)"))
        conn.execute(text("CREATE INDEX ix_orders_status_again ON orders (status)"))
        conn.execute(
            text(
                """
                CREATE TABLE tags (
                    order_id INTEGER NOT NULL,
                    label VARCHAR(40) NOT NULL,
                    PRIMARY KEY (order_id, label),
                    FOREIGN KEY (order_id) REFERENCES orders (id)
                )
                """
            )
        )
    engine.dispose()

    yield connection_string

    db_path.unlink(missing_ok=True)

"""Database catalog extraction.

This package reflects database catalogs into the schema model.
"""

from schemadump.sources.database.engine import create_database_engine, sanitize_connection_string
from schemadump.sources.database.introspection import extract_tables, reflect_table
from schemadump.sources.database.type_mapping import map_column_type, parse_default, split_on_update

__all__ = [
    # Engine
    "create_database_engine",
    "sanitize_connection_string",
    # Type mapping
    "map_column_type",
    "parse_default",
    "split_on_update",
    # Introspection
    "extract_tables",
    "reflect_table",
]

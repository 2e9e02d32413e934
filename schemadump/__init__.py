"""Extract a database schema, repair it and order its tables for regeneration."""

from schemadump.errors import CycleError, DanglingReferenceError, SchemaError, SortError, UnknownNodeError
from schemadump.models import Column, ForeignKey, Index, IndexType, Schema, Table
from schemadump.normalize import normalize_foreign_keys, normalize_indices, normalize_tables
from schemadump.ordering import SchemaResult, process_tables
from schemadump.toposort import SortResult, toposort

__version__ = "0.1.0"

__all__ = [
    # Models
    "Column",
    "ForeignKey",
    "Index",
    "IndexType",
    "Schema",
    "Table",
    # Errors
    "CycleError",
    "DanglingReferenceError",
    "SchemaError",
    "SortError",
    "UnknownNodeError",
    # Engine
    "SchemaResult",
    "SortResult",
    "normalize_foreign_keys",
    "normalize_indices",
    "normalize_tables",
    "process_tables",
    "toposort",
]

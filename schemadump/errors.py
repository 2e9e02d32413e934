"""Errors reported while normalizing and ordering a schema."""

from typing import Any


class SortError(Exception):
    """Structural problem found while sorting; returned to the caller, never raised by the sorter."""

    def __init__(self, key: Any, message: str) -> None:
        super().__init__(message)
        self.key = key

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.key == other.key  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.key))


class UnknownNodeError(SortError):
    def __init__(self, key: Any) -> None:
        super().__init__(key, f'Unknown node "{key}".')


class CycleError(SortError):
    def __init__(self, key: Any) -> None:
        super().__init__(key, f'Node "{key}" is part of a cycle.')


class SchemaError(Exception):
    """Base class for malformed schema models."""


class DanglingReferenceError(SchemaError):
    """A foreign key names a table or column that does not exist."""

    def __init__(self, table: str, column: str | None, message: str) -> None:
        super().__init__(message)
        self.table = table
        self.column = column

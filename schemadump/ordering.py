"""Normalize a schema and order its tables by foreign key dependencies."""

import logging
from dataclasses import dataclass, field

from schemadump.errors import SortError
from schemadump.models import Table
from schemadump.normalize import normalize_tables
from schemadump.toposort import toposort

logger = logging.getLogger(__name__)


@dataclass
class SchemaResult:
    """Ordered tables, unresolved sort errors and the repairs that were applied"""

    sorted: list[Table] = field(default_factory=list)
    errors: list[SortError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def table_names(self) -> list[str]:
        return [t.name for t in self.sorted]


def process_tables(tables: list[Table]) -> SchemaResult:
    """Normalize tables in place and sort them so referenced tables come first.

    Args:
        tables: Extracted tables, in catalog order

    Returns:
        SchemaResult with every table exactly once. Cycles and references to
        unknown tables are returned in ``errors``; it is up to the caller to
        decide whether they are fatal.

    Raises:
        DanglingReferenceError: If a foreign key names a missing column or table
    """
    warnings = normalize_tables(tables)
    result = toposort(tables, key=lambda t: t.name, dependencies=lambda t: t.dependencies)

    for error in result.errors:
        logger.debug(f"Sort error: {error}")
    logger.debug(f"Ordered {len(result.sorted)} tables with {len(result.errors)} errors")

    return SchemaResult(sorted=result.sorted, errors=result.errors, warnings=warnings)

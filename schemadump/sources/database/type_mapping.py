"""Map reflected SQLAlchemy column types onto schema column types."""

import re
from typing import Any

from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Dialect
from sqlalchemy.exc import CompileError

from schemadump.models import (
    BigIntegerType,
    BooleanType,
    ColumnType,
    CustomType,
    DateTimeType,
    DateType,
    DecimalType,
    EnumType,
    FloatType,
    IncrementsType,
    IntegerType,
    JsonType,
    StringType,
    TextType,
)

# Class names of reflected types, generic and dialect-specific spellings
INTEGER_TYPES = {"Integer", "INTEGER", "INT"}
BIG_INTEGER_TYPES = {"BigInteger", "BIGINT"}
STRING_TYPES = {"String", "VARCHAR"}
TEXT_TYPES = {"Text", "TEXT"}
DECIMAL_TYPES = {"Numeric", "NUMERIC", "DECIMAL"}
FLOAT_TYPES = {"Float", "FLOAT"}
DATETIME_TYPES = {"DateTime", "DATETIME", "TIMESTAMP"}
DATE_TYPES = {"Date", "DATE"}

ON_UPDATE_PATTERN = re.compile(r"\s+ON\s+UPDATE\s+(?P<expression>.+)$", re.IGNORECASE)
QUOTED_DEFAULT_PATTERN = re.compile(r"^'(?P<value>(?:''|[^'])*)'(?:::[\w\s\"]+)?$")


def compile_type(reflected_type: sqltypes.TypeEngine[Any], dialect: Dialect | None = None) -> str:
    """Render a reflected type the way the database declares it."""
    try:
        if dialect is not None:
            return str(reflected_type.compile(dialect=dialect))
        return str(reflected_type)
    except CompileError:
        return type(reflected_type).__name__.upper()


def map_column_type(
    reflected_type: sqltypes.TypeEngine[Any],
    autoincrement: bool = False,
    dialect: Dialect | None = None,
) -> ColumnType:
    """Map a reflected SQLAlchemy type to a column type variant.

    Args:
        reflected_type: Type instance from ``Inspector.get_columns``
        autoincrement: Whether the column is an auto-increment key
        dialect: Dialect used to render types without a dedicated variant

    Returns:
        The matching column type; unrecognized types become ``custom``
    """
    name = type(reflected_type).__name__
    unsigned = bool(getattr(reflected_type, "unsigned", False))

    if autoincrement and name in INTEGER_TYPES | BIG_INTEGER_TYPES:
        return IncrementsType()
    if isinstance(reflected_type, sqltypes.JSON):
        return JsonType()
    if isinstance(reflected_type, sqltypes.Boolean):
        return BooleanType()
    # MySQL spells booleans as TINYINT(1)
    if name == "TINYINT" and getattr(reflected_type, "display_width", None) == 1:
        return BooleanType()
    if isinstance(reflected_type, sqltypes.Enum):
        return EnumType(cases=list(reflected_type.enums))
    if name in TEXT_TYPES:
        return TextType()
    if name in STRING_TYPES and getattr(reflected_type, "length", None):
        return StringType(length=reflected_type.length)  # type: ignore[attr-defined]
    if name in DECIMAL_TYPES and getattr(reflected_type, "precision", None) is not None:
        return DecimalType(
            precision=reflected_type.precision,  # type: ignore[attr-defined]
            scale=getattr(reflected_type, "scale", None) or 0,
        )
    if name in FLOAT_TYPES:
        return FloatType()
    if name in DATETIME_TYPES:
        return DateTimeType()
    if name in DATE_TYPES:
        return DateType()
    if name in INTEGER_TYPES:
        return IntegerType(unsigned=unsigned)
    if name in BIG_INTEGER_TYPES:
        return BigIntegerType(unsigned=unsigned)

    return CustomType(raw_declaration=compile_type(reflected_type, dialect))


def split_on_update(default: str | None) -> tuple[str | None, str]:
    """Split a reflected default into the default and its ON UPDATE expression.

    MySQL reflection reports ``CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP``
    as a single default string.
    """
    if default is None:
        return None, ""
    match = ON_UPDATE_PATTERN.search(default)
    if not match:
        return default, ""
    return default[: match.start()], match.group("expression").strip()


def parse_default(default: str | None, column_type: ColumnType) -> str | bool | int | None:
    """Convert a reflected server default into a plain scalar.

    Args:
        default: Default expression as reflected, e.g. ``'abc'`` or ``0``
        column_type: Mapped type of the column

    Returns:
        Unquoted string, bool for boolean columns, int for integer columns,
        or None when there is no default
    """
    if default is None or isinstance(column_type, IncrementsType):
        return None

    value = default.strip()
    # generated expressions such as ('abc') in SQLite
    while value.startswith("(") and value.endswith(")"):
        value = value[1:-1].strip()
    if value.upper() == "NULL":
        return None

    match = QUOTED_DEFAULT_PATTERN.match(value)
    if match:
        value = match.group("value").replace("''", "'")

    if isinstance(column_type, BooleanType):
        return value.lower() not in ("0", "false", "b'0'", "")
    if isinstance(column_type, (IntegerType, BigIntegerType)):
        try:
            return int(value)
        except ValueError:
            return value
    return value

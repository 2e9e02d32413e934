"""Pydantic models for the extracted schema"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

# ============================================================================
# Column Type Models
# ============================================================================


class IncrementsType(BaseModel):
    """Auto-incrementing integer primary key column"""

    type: Literal["increments"] = "increments"


class JsonType(BaseModel):
    type: Literal["json"] = "json"


class BooleanType(BaseModel):
    type: Literal["boolean"] = "boolean"


class DecimalType(BaseModel):
    """Fixed-point number"""

    type: Literal["decimal"] = "decimal"
    precision: int = Field(default=8, ge=1, description="Total number of digits")
    scale: int = Field(default=2, ge=0, description="Digits after the decimal point")


class IntegerType(BaseModel):
    type: Literal["integer"] = "integer"
    unsigned: bool = Field(default=False, description="Whether negative values are excluded")


class BigIntegerType(BaseModel):
    type: Literal["bigInteger"] = "bigInteger"
    unsigned: bool = Field(default=False, description="Whether negative values are excluded")


class FloatType(BaseModel):
    type: Literal["float"] = "float"


class DateType(BaseModel):
    type: Literal["date"] = "date"


class DateTimeType(BaseModel):
    type: Literal["dateTime"] = "dateTime"


class StringType(BaseModel):
    type: Literal["string"] = "string"
    length: int = Field(default=255, ge=1, description="Maximum number of characters")


class TextType(BaseModel):
    type: Literal["text"] = "text"


class EnumType(BaseModel):
    type: Literal["enum"] = "enum"
    cases: list[str] = Field(default_factory=list, description="Allowed values, in declaration order")


class CustomType(BaseModel):
    """Escape hatch for column types without a dedicated variant"""

    type: Literal["custom"] = "custom"
    raw_declaration: str = Field(description="Type declaration as reported by the database")


ColumnType = Annotated[
    IncrementsType
    | JsonType
    | BooleanType
    | DecimalType
    | IntegerType
    | BigIntegerType
    | FloatType
    | DateType
    | DateTimeType
    | StringType
    | TextType
    | EnumType
    | CustomType,
    Field(discriminator="type"),
]


# ============================================================================
# Table Models
# ============================================================================


class Column(BaseModel):
    """A single table column"""

    name: str = Field(description="Column name, unique within its table")
    type: ColumnType = Field(description="Column type variant")
    nullable: bool = Field(default=True, description="Whether NULL values are allowed")
    default: str | bool | int | float | None = Field(default=None, description="Default value, if any")
    on_update: str = Field(default="", description="Expression applied on row update (e.g. CURRENT_TIMESTAMP)")
    comment: str = Field(default="", description="Column comment")

    @property
    def is_increments(self) -> bool:
        return self.type.type == "increments"


class IndexType(str, Enum):
    """Index kinds, declared in canonical emission order"""

    PRIMARY = "primary"
    UNIQUE = "unique"
    INDEX = "index"
    FULLTEXT = "fulltext"


INDEX_TYPE_PRIORITY = {
    IndexType.PRIMARY: 0,
    IndexType.UNIQUE: 1,
    IndexType.INDEX: 2,
    IndexType.FULLTEXT: 3,
}


class Index(BaseModel):
    """An index over one or more columns"""

    columns: list[str] = Field(min_length=1, description="Indexed columns in physical key order")
    type: IndexType = Field(default=IndexType.INDEX, description="Index kind")


class ForeignKey(BaseModel):
    """A foreign key constraint"""

    columns: list[str] = Field(min_length=1, description="Local columns")
    foreign_table: str = Field(description="Referenced table name")
    foreign_columns: list[str] = Field(min_length=1, description="Referenced columns, same length as columns")
    on_update: str = Field(default="NO ACTION", description="Referential action on update")
    on_delete: str = Field(default="NO ACTION", description="Referential action on delete")


class Table(BaseModel):
    """A table with its columns, indices and foreign keys"""

    name: str = Field(description="Table name, unique across the schema")
    columns: list[Column] = Field(default_factory=list, description="Columns in declaration order")
    indices: list[Index] = Field(default_factory=list, description="Indices")
    foreign_keys: list[ForeignKey] = Field(default_factory=list, description="Foreign key constraints")

    def get_column(self, name: str) -> Column | None:
        """Return the column called ``name``, or None if the table has none"""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def increments_columns(self) -> list[str]:
        return [c.name for c in self.columns if c.is_increments]

    @property
    def dependencies(self) -> list[str]:
        """Names of referenced tables, in foreign key order"""
        return [fk.foreign_table for fk in self.foreign_keys]


class Schema(BaseModel):
    """Snapshot of a whole database schema"""

    tables: list[Table] = Field(default_factory=list, description="Tables of the schema")
    metadata: dict[str, str] = Field(default_factory=dict, description="Additional metadata")

"""
Schema Models

Typed records for raw catalog rows and the in-memory schema model built
from them. Raw rows mirror the column names returned by the catalog
queries; everything downstream of the builder works with Table, Column
and Constraint only.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# Raw catalog rows
# ============================================================================


class _CatalogRow(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    table_schema: str = Field(..., alias="TABLE_SCHEMA")
    table_name: str = Field(..., alias="TABLE_NAME")


class TableRow(_CatalogRow):
    """One row of the tables catalog query."""

    table_description: str | None = Field(None, alias="TABLE_DESCRIPTION")


class ColumnRow(_CatalogRow):
    """One row of the columns catalog query."""

    column_name: str = Field(..., alias="COLUMN_NAME")
    data_type: str = Field(..., alias="DATA_TYPE")
    is_nullable: str = Field("YES", alias="IS_NULLABLE")
    ordinal_position: int = Field(0, alias="ORDINAL_POSITION")
    column_description: str | None = Field(None, alias="COLUMN_DESCRIPTION")


class ConstraintRow(_CatalogRow):
    """One row of the constraints catalog query."""

    column_name: str = Field(..., alias="COLUMN_NAME")
    constraint_name: str = Field(..., alias="CONSTRAINT_NAME")
    constraint_type: str = Field(..., alias="ConstraintType")
    ordinal_position: int = Field(1, alias="ORDINAL_POSITION")
    referenced_schema: str | None = Field(None, alias="ReferencedSchema")
    referenced_table: str | None = Field(None, alias="ReferencedTable")
    referenced_column: str | None = Field(None, alias="ReferencedColumn")
    check_clause: str | None = Field(None, alias="CheckClause")
    default_value: str | None = Field(None, alias="DefaultValue")


# ============================================================================
# Schema model
# ============================================================================


class ConstraintType(StrEnum):
    PRIMARY_KEY = "PRIMARY KEY"
    FOREIGN_KEY = "FOREIGN KEY"
    UNIQUE = "UNIQUE"
    CHECK = "CHECK"
    DEFAULT = "DEFAULT"


class Column(BaseModel):
    """A column of a table, in catalog ordinal order."""

    column_name: str
    data_type: str
    is_nullable: bool = True
    column_description: str | None = None

    model_config = ConfigDict(frozen=True)


class Constraint(BaseModel):
    """
    One (constraint, column) membership row.

    Constraints spanning several columns appear as several Constraint
    objects sharing constraint_name; ordinal_position orders them.
    """

    constraint_name: str
    constraint_type: ConstraintType
    column_name: str
    ordinal_position: int = 1
    referenced_schema: str | None = None
    referenced_table: str | None = None
    referenced_column: str | None = None
    check_clause: str | None = None
    default_value: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("constraint_type", mode="before")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return v.strip().upper() if isinstance(v, str) else v


class Table(BaseModel):
    """A table identified by (table_schema, table_name)."""

    table_name: str
    table_schema: str
    table_description: str | None = None
    columns: list[Column] = Field(default_factory=list)
    constraints: list[Constraint] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.table_schema, self.table_name)

    @property
    def qualified_name(self) -> str:
        return f"{self.table_schema}.{self.table_name}"

    @property
    def bracketed_name(self) -> str:
        return f"[{self.table_schema}].[{self.table_name}]"

    @property
    def column_names(self) -> list[str]:
        return [column.column_name for column in self.columns]


class SchemaSnapshot(BaseModel):
    """Schema captured once per connection. Never refreshed in place."""

    tables: tuple[Table, ...] = Field(default_factory=tuple)
    database: str | None = None

    model_config = ConfigDict(frozen=True)

    def table_names(self) -> list[str]:
        return [table.table_name for table in self.tables]

    def __len__(self) -> int:
        return len(self.tables)


class TableNotFoundError(LookupError):
    """A requested table name does not exist in the snapshot."""

    def __init__(self, table_name: str, prefix: str = "Table not found:"):
        self.table_name = table_name
        self.prefix = prefix
        super().__init__(f"{prefix} the table {table_name} was not found in the database")

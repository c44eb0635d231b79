"""
Schema Module

Catalog introspection, schema model, table selection and prompt rendering.
"""

from generative_db.schema.builder import build_tables
from generative_db.schema.catalog import CatalogReader, CatalogRows
from generative_db.schema.database import SQLDatabase
from generative_db.schema.models import (
    Column,
    ColumnRow,
    Constraint,
    ConstraintRow,
    ConstraintType,
    SchemaSnapshot,
    Table,
    TableNotFoundError,
    TableRow,
)
from generative_db.schema.selection import select_tables, verify_tables_exist
from generative_db.schema.serializer import SchemaSerializer

__all__ = [
    "CatalogReader",
    "CatalogRows",
    "Column",
    "ColumnRow",
    "Constraint",
    "ConstraintRow",
    "ConstraintType",
    "SQLDatabase",
    "SchemaSerializer",
    "SchemaSnapshot",
    "Table",
    "TableNotFoundError",
    "TableRow",
    "build_tables",
    "select_tables",
    "verify_tables_exist",
]

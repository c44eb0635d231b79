"""SQL Server catalog query templates for schema introspection."""

from __future__ import annotations

from typing import NamedTuple


class CatalogTemplates(NamedTuple):
    """System-catalog templates for metadata discovery."""

    list_tables: str
    list_columns: str
    list_constraints: str


_DESCRIPTION_PROPERTY = "MS_Description"

MSSQL_CATALOG_TEMPLATES = CatalogTemplates(
    list_tables=(
        "SELECT t.TABLE_SCHEMA, t.TABLE_NAME, "
        "CAST(ep.value AS NVARCHAR(MAX)) AS TABLE_DESCRIPTION "
        "FROM INFORMATION_SCHEMA.TABLES t "
        "LEFT JOIN sys.extended_properties ep "
        "ON ep.major_id = OBJECT_ID(QUOTENAME(t.TABLE_SCHEMA) + '.' + QUOTENAME(t.TABLE_NAME)) "
        "AND ep.minor_id = 0 "
        "AND ep.class = 1 "
        f"AND ep.name = '{_DESCRIPTION_PROPERTY}' "
        "WHERE t.TABLE_TYPE IN ('BASE TABLE', 'VIEW') "
        "AND t.TABLE_SCHEMA <> 'sys' "
        "{schema_predicate}"
        "ORDER BY t.TABLE_SCHEMA, t.TABLE_NAME"
    ),
    list_columns=(
        "SELECT c.TABLE_SCHEMA, c.TABLE_NAME, c.COLUMN_NAME, c.DATA_TYPE, c.IS_NULLABLE, "
        "c.ORDINAL_POSITION, CAST(ep.value AS NVARCHAR(MAX)) AS COLUMN_DESCRIPTION "
        "FROM INFORMATION_SCHEMA.COLUMNS c "
        "LEFT JOIN sys.extended_properties ep "
        "ON ep.major_id = OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME)) "
        "AND ep.minor_id = COLUMNPROPERTY(ep.major_id, c.COLUMN_NAME, 'ColumnId') "
        "AND ep.class = 1 "
        f"AND ep.name = '{_DESCRIPTION_PROPERTY}' "
        "WHERE c.TABLE_SCHEMA <> 'sys' "
        "{schema_predicate}"
        "ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION"
    ),
    list_constraints=(
        "SELECT * FROM ("
        # PRIMARY KEY and UNIQUE
        "SELECT tc.TABLE_SCHEMA, tc.TABLE_NAME, kcu.COLUMN_NAME, tc.CONSTRAINT_NAME, "
        "tc.CONSTRAINT_TYPE AS ConstraintType, "
        "CAST(NULL AS NVARCHAR(128)) AS ReferencedSchema, "
        "CAST(NULL AS NVARCHAR(128)) AS ReferencedTable, "
        "CAST(NULL AS NVARCHAR(128)) AS ReferencedColumn, "
        "CAST(NULL AS NVARCHAR(MAX)) AS CheckClause, "
        "CAST(NULL AS NVARCHAR(MAX)) AS DefaultValue, "
        "kcu.ORDINAL_POSITION "
        "FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc "
        "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu "
        "ON tc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA "
        "AND tc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME "
        "WHERE tc.CONSTRAINT_TYPE IN ('PRIMARY KEY', 'UNIQUE') "
        "UNION ALL "
        # FOREIGN KEY, member columns paired with referenced columns by ordinal
        "SELECT fk.TABLE_SCHEMA, fk.TABLE_NAME, fk.COLUMN_NAME, rc.CONSTRAINT_NAME, "
        "'FOREIGN KEY', pk.TABLE_SCHEMA, pk.TABLE_NAME, pk.COLUMN_NAME, NULL, NULL, "
        "fk.ORDINAL_POSITION "
        "FROM INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc "
        "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE fk "
        "ON rc.CONSTRAINT_SCHEMA = fk.CONSTRAINT_SCHEMA "
        "AND rc.CONSTRAINT_NAME = fk.CONSTRAINT_NAME "
        "JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE pk "
        "ON rc.UNIQUE_CONSTRAINT_SCHEMA = pk.CONSTRAINT_SCHEMA "
        "AND rc.UNIQUE_CONSTRAINT_NAME = pk.CONSTRAINT_NAME "
        "AND fk.ORDINAL_POSITION = pk.ORDINAL_POSITION "
        "UNION ALL "
        # CHECK
        "SELECT ccu.TABLE_SCHEMA, ccu.TABLE_NAME, ccu.COLUMN_NAME, cc.CONSTRAINT_NAME, "
        "'CHECK', NULL, NULL, NULL, cc.CHECK_CLAUSE, NULL, "
        "CAST(ROW_NUMBER() OVER (PARTITION BY ccu.TABLE_SCHEMA, cc.CONSTRAINT_NAME "
        "ORDER BY ccu.COLUMN_NAME) AS INT) "
        "FROM INFORMATION_SCHEMA.CHECK_CONSTRAINTS cc "
        "JOIN INFORMATION_SCHEMA.CONSTRAINT_COLUMN_USAGE ccu "
        "ON cc.CONSTRAINT_SCHEMA = ccu.CONSTRAINT_SCHEMA "
        "AND cc.CONSTRAINT_NAME = ccu.CONSTRAINT_NAME "
        "UNION ALL "
        # DEFAULT
        "SELECT s.name, t.name, col.name, dc.name, "
        "'DEFAULT', NULL, NULL, NULL, NULL, dc.definition, 1 "
        "FROM sys.default_constraints dc "
        "JOIN sys.columns col "
        "ON dc.parent_object_id = col.object_id AND dc.parent_column_id = col.column_id "
        "JOIN sys.tables t ON dc.parent_object_id = t.object_id "
        "JOIN sys.schemas s ON t.schema_id = s.schema_id"
        ") AS constraints "
        "WHERE 1 = 1 "
        "{schema_predicate}"
        "ORDER BY TABLE_SCHEMA, TABLE_NAME, ConstraintType, CONSTRAINT_NAME, ORDINAL_POSITION"
    ),
)


def render_catalog_queries(schema_name: str | None = None) -> tuple[CatalogTemplates, list[str] | None]:
    """
    Render the catalog statements for an optional schema filter.

    Returns the three statements plus the parameter list the driver should
    bind (None when no filter applies).
    """
    templates = MSSQL_CATALOG_TEMPLATES
    if not schema_name:
        return (
            CatalogTemplates(
                list_tables=templates.list_tables.format(schema_predicate=""),
                list_columns=templates.list_columns.format(schema_predicate=""),
                list_constraints=templates.list_constraints.format(schema_predicate=""),
            ),
            None,
        )
    return (
        CatalogTemplates(
            list_tables=templates.list_tables.format(
                schema_predicate="AND t.TABLE_SCHEMA = %s "
            ),
            list_columns=templates.list_columns.format(
                schema_predicate="AND c.TABLE_SCHEMA = %s "
            ),
            list_constraints=templates.list_constraints.format(
                schema_predicate="AND TABLE_SCHEMA = %s "
            ),
        ),
        [schema_name],
    )

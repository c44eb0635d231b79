"""Table selection: include/ignore lists and explicit target overrides."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from generative_db.schema.models import Table, TableNotFoundError

INCLUDE_TABLES_PREFIX = "Include tables not found in database:"
IGNORE_TABLES_PREFIX = "Ignore tables not found in database:"
TARGET_TABLES_PREFIX = "Wrong target table name:"


def verify_tables_exist(
    all_tables: Iterable[Table],
    table_names: Sequence[str],
    error_prefix: str,
) -> None:
    """
    Fail on the first name that matches no table.

    Matching is by bare table name; schema qualification is not considered.

    Raises:
        TableNotFoundError: Naming the missing table, prefixed with error_prefix
    """
    if not table_names:
        return
    known = {table.table_name for table in all_tables}
    for name in table_names:
        if name not in known:
            raise TableNotFoundError(name, prefix=error_prefix)


def select_tables(
    all_tables: Sequence[Table],
    include_tables: Sequence[str] = (),
    ignore_tables: Sequence[str] = (),
    target_tables: Sequence[str] | None = None,
) -> list[Table]:
    """
    Apply the selection rules in order.

    1. A non-empty include list keeps only the named tables.
    2. A non-empty ignore list then removes the named tables.
    3. Non-empty target_tables replaces both steps: every name must exist
       and exactly those tables are returned.
    """
    if target_tables:
        verify_tables_exist(all_tables, target_tables, TARGET_TABLES_PREFIX)
        targets = set(target_tables)
        return [table for table in all_tables if table.table_name in targets]

    selected = list(all_tables)
    if include_tables:
        included = set(include_tables)
        selected = [table for table in selected if table.table_name in included]
    if ignore_tables:
        ignored = set(ignore_tables)
        selected = [table for table in selected if table.table_name not in ignored]
    return selected

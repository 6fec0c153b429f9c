"""
Schema Diff Module

Compares PostgreSQL (source) and MySQL (target) table snapshots and reports
per-table structural drift: tables that never got created and columns that
were dropped or renamed.

Column membership is tested by name only (case-insensitive); type
compatibility is the type mapper's responsibility at creation time.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pg_mysql_migration.models import SchemaDiffResult, SchemaStatus, TableSnapshot

logger = logging.getLogger(__name__)


def split_tables(
    source_tables: Iterable[str],
    target_tables: Iterable[str]
) -> Tuple[List[str], List[str]]:
    """
    Split source table names into those present in the target and those missing.

    Both lists keep the source order.
    """
    target_names = set(target_tables)
    common = []
    missing = []
    for name in source_tables:
        if name in target_names:
            common.append(name)
        else:
            missing.append(name)
    return common, missing


def log_missing_tables(missing_in_target: List[str]) -> None:
    if missing_in_target:
        logger.info("Tables missing in MySQL (excluded from column validation):")
        for table_name in missing_in_target:
            logger.info(f"  • {table_name}")


def diff_table(source: TableSnapshot, target: TableSnapshot) -> List[SchemaDiffResult]:
    """
    Diff the columns of one table present in both databases.

    Args:
        source: Source snapshot of the table
        target: Target snapshot of the same table

    Returns:
        One column_missing entry per source column absent from the target,
        a single ok entry when nothing is missing, or a single table_missing
        entry when the target table has no columns at all
    """
    table_name = source.table_name
    logger.info(
        f"Checking schema for table: {table_name} "
        f"(PostgreSQL columns: {len(source.columns)}, MySQL columns: {len(target.columns)})"
    )

    if not target.columns:
        logger.warning(f"✗ Table {table_name} not found in MySQL or has no columns")
        return [SchemaDiffResult(
            table=table_name,
            status=SchemaStatus.TABLE_MISSING,
            issue=f"Table {table_name} not found in MySQL",
        )]

    results = []
    for column in source.columns:
        if target.has_column(column.name):
            logger.debug(f"✓ Column {table_name}.{column.name} found in MySQL")
            continue
        logger.warning(f"✗ Column {table_name}.{column.name} missing in MySQL")
        results.append(SchemaDiffResult(
            table=table_name,
            status=SchemaStatus.COLUMN_MISSING,
            issue=f"Column {column.name} not found in MySQL",
            column=column.name,
        ))

    if not results:
        logger.info(f"✓ Schema validation passed for {table_name}")
        results.append(SchemaDiffResult(table=table_name, status=SchemaStatus.OK))

    return results


def _error_result(table_name: str, error: Exception) -> SchemaDiffResult:
    logger.error(f"✗ Error validating schema for {table_name}: {error}")
    return SchemaDiffResult(
        table=table_name,
        status=SchemaStatus.ERROR,
        issue=f"Schema validation error: {error}",
    )


SnapshotLoader = Callable[[str], Tuple[TableSnapshot, TableSnapshot]]


def _diff_table_names(
    source_names: List[str],
    target_names: Iterable[str],
    load_snapshots: SnapshotLoader,
    on_missing: Optional[Callable[[List[str]], None]] = None,
) -> List[SchemaDiffResult]:
    """
    Diff every source table, in source order.

    Tables missing in the target get a single table_missing entry. For the
    rest, ``load_snapshots(table_name)`` supplies the (source, target) pair;
    anything it or the diff raises becomes that table's error entry.
    """
    common, missing = split_tables(source_names, target_names)
    logger.info(f"Found {len(common)} common tables, {len(missing)} missing in MySQL")
    log_missing_tables(missing)
    if on_missing is not None:
        on_missing(missing)

    missing_names = set(missing)
    results: List[SchemaDiffResult] = []

    for table_name in source_names:
        if table_name in missing_names:
            results.append(SchemaDiffResult(
                table=table_name,
                status=SchemaStatus.TABLE_MISSING,
                issue=f"Table {table_name} not found in MySQL",
            ))
            continue

        try:
            source, target = load_snapshots(table_name)
            results.extend(diff_table(source, target))
        except Exception as e:
            results.append(_error_result(table_name, e))

    return results


def diff_schemas(
    source_tables: Iterable[TableSnapshot],
    target_tables: Iterable[TableSnapshot]
) -> List[SchemaDiffResult]:
    """
    Compare two sets of table snapshots.

    Tables missing in the target get a single table_missing entry and no
    column-level detail. Output follows the source snapshot order.

    Args:
        source_tables: Snapshots from the source database
        target_tables: Snapshots from the target database

    Returns:
        Schema diff results for every source table
    """
    source_by_name: Dict[str, TableSnapshot] = {t.table_name: t for t in source_tables}
    target_by_name: Dict[str, TableSnapshot] = {t.table_name: t for t in target_tables}

    return _diff_table_names(
        list(source_by_name),
        target_by_name,
        lambda name: (source_by_name[name], target_by_name[name]),
    )


def diff_catalogs(
    source_reader,
    target_reader,
    source_schema: str,
    target_schema: str,
    on_missing: Optional[Callable[[List[str]], None]] = None,
) -> List[SchemaDiffResult]:
    """
    Build snapshots through the catalog readers and diff them.

    Metadata failures are isolated per table: a table whose columns cannot be
    read on either side becomes an error entry and the rest of the diff
    proceeds.

    Args:
        source_reader: Catalog reader for the source database
        target_reader: Catalog reader for the target database
        source_schema: Source schema name
        target_schema: Target schema/database name
        on_missing: Optional callback receiving the tables missing in the target

    Returns:
        Schema diff results in source table order
    """
    logger.info("Validating schema structure...")

    def load_snapshots(table_name: str) -> Tuple[TableSnapshot, TableSnapshot]:
        source = TableSnapshot.from_columns(
            table_name, source_reader.list_columns(source_schema, table_name)
        )
        target = TableSnapshot.from_columns(
            table_name, target_reader.list_columns(target_schema, table_name)
        )
        return source, target

    return _diff_table_names(
        source_reader.list_tables(source_schema),
        target_reader.list_tables(target_schema),
        load_snapshots,
        on_missing,
    )

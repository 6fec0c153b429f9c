"""
Data Migration Validation Module

This module verifies a PostgreSQL to MySQL migration on three separate
facets: exact row counts, schema structure, and sampled row contents.
The facets are reported independently; a table can pass its count check
and still fail sample validation.
"""

from typing import Any, Dict, List, Optional
import logging

from pg_mysql_migration.models import (
    CountReconciliationResult,
    DataMismatch,
    MismatchKind,
    SampleValidationResult,
    SchemaDiffResult,
    ValidationSummary,
)
from pg_mysql_migration.report import ReportSink
from pg_mysql_migration.schema_diff import diff_catalogs
from pg_mysql_migration.value_comparator import classify_mismatch, compare_row

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 5
DEFAULT_SAMPLE_TABLE_LIMIT = 5


def reconcile_sample(
    table_name: str,
    source_rows: List[Dict[str, Any]],
    target_rows: List[Dict[str, Any]],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    order_key: str = 'id'
) -> SampleValidationResult:
    """
    Compare already-fetched source rows with their target counterparts.

    Rows are paired on the identity key. A source row without a target row
    records a ``missing`` mismatch and fails the table on the spot. For each
    pair the first unequal column is recorded and comparison moves on to the
    next row.

    Args:
        table_name: Table being validated
        source_rows: Source rows ordered by the identity key
        target_rows: Target rows with the same identity keys
        sample_size: Requested sample size (for reporting)
        order_key: Identity key column

    Returns:
        Sample validation result for the table
    """
    if not source_rows:
        logger.info(f"No data in {table_name} to validate")
        return SampleValidationResult(table=table_name, sample_size=sample_size, validated_records=0)

    target_by_key = {row.get(order_key): row for row in target_rows}
    mismatches: List[DataMismatch] = []
    validated = 0

    for source_row in source_rows:
        row_id = source_row.get(order_key)
        target_row = target_by_key.get(row_id)

        if target_row is None:
            logger.warning(f"✗ Missing row with id {row_id} in MySQL table {table_name}")
            mismatches.append(DataMismatch(row_id, None, None, None, MismatchKind.MISSING))
            break

        validated += 1
        outcomes = compare_row(source_row, target_row, table_name)
        if not outcomes or outcomes[-1].equal:
            continue

        failed = outcomes[-1]
        if failed.column not in target_row:
            kind = MismatchKind.MISSING
        else:
            kind = classify_mismatch(failed.source_value, failed.normalized_target_value)
        mismatches.append(DataMismatch(
            row_id=row_id,
            column=failed.column,
            source_value=failed.source_value,
            target_value=failed.normalized_target_value,
            kind=kind,
        ))

    passed = not mismatches
    if passed:
        logger.info(f"✓ Sample data validation passed for {table_name}")
    else:
        logger.warning(f"✗ Sample data validation found {len(mismatches)} mismatches for {table_name}")

    return SampleValidationResult(
        table=table_name,
        sample_size=sample_size,
        validated_records=validated,
        mismatches=tuple(mismatches),
        passed=passed,
    )


class MigrationValidator:
    """Validate data migrated from PostgreSQL to MySQL."""

    def __init__(self, source_reader, target_reader, report_sink: Optional[ReportSink] = None):
        """
        Initialize the migration validator.

        Args:
            source_reader: PostgreSQL catalog reader
            target_reader: MySQL catalog reader
            report_sink: Optional sink receiving every result record
        """
        self.source_reader = source_reader
        self.target_reader = target_reader
        self.report_sink = report_sink

    def _emit(self, record: Any) -> None:
        if self.report_sink is not None:
            self.report_sink.emit(record)

    def validate_row_count(self, table_name: str) -> CountReconciliationResult:
        """
        Compare exact row counts between source and target tables.

        Args:
            table_name: Table present in the source database

        Returns:
            Count reconciliation result; counting errors are recorded on the
            result rather than raised
        """
        try:
            source_count = self.source_reader.count(table_name)
            target_count = self.target_reader.count(table_name)
        except Exception as e:
            logger.error(f"✗ Error validating row count for {table_name}: {e}")
            return CountReconciliationResult(
                table=table_name,
                source_count=None,
                target_count=None,
                match=False,
                error=str(e),
            )

        match = source_count == target_count
        if match:
            logger.info(f"✓ {table_name:<25} | PG: {source_count:>8,} | MySQL: {target_count:>8,}")
        else:
            logger.warning(
                f"✗ {table_name:<25} | PG: {source_count:>8,} | MySQL: {target_count:>8,} "
                f"| Difference: {target_count - source_count:+,}"
            )

        return CountReconciliationResult(
            table=table_name,
            source_count=source_count,
            target_count=target_count,
            match=match,
        )

    def validate_table_counts(self, tables: List[str]) -> List[CountReconciliationResult]:
        logger.info("Validating table row counts...")
        results = []
        for table_name in tables:
            result = self.validate_row_count(table_name)
            self._emit(result)
            results.append(result)
        return results

    def validate_sample_data(
        self,
        table_name: str,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        order_key: str = 'id'
    ) -> SampleValidationResult:
        """
        Validate the first rows of a table, ordered by the identity key.

        Args:
            table_name: Table to validate
            sample_size: Number of source rows to sample
            order_key: Identity key column shared by both databases

        Returns:
            Sample validation result
        """
        logger.info(f"Validating sample data for {table_name} (sample size: {sample_size})")

        try:
            source_rows = self.source_reader.sample_rows(table_name, order_key, sample_size)
            target_rows = []
            if source_rows:
                ids = [row.get(order_key) for row in source_rows]
                target_rows = self.target_reader.rows_by_ids(table_name, ids, order_key)
        except Exception as e:
            logger.error(f"✗ Sample data validation failed for {table_name}: {e}")
            return SampleValidationResult(
                table=table_name,
                sample_size=sample_size,
                validated_records=0,
                passed=False,
                error=str(e),
            )

        return reconcile_sample(table_name, source_rows, target_rows, sample_size, order_key)

    def validate_schema(self) -> Dict[str, Any]:
        """
        Diff the source and target schemas.

        Returns:
            Dictionary with 'results' (schema diff results) and
            'missing_in_target' (table names)
        """
        missing: List[str] = []
        results = diff_catalogs(
            self.source_reader,
            self.target_reader,
            self.source_reader.schema,
            self.target_reader.schema,
            on_missing=missing.extend,
        )
        for result in results:
            self._emit(result)
        return {'results': results, 'missing_in_target': missing}

    def validate_migration(
        self,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        sample_table_limit: int = DEFAULT_SAMPLE_TABLE_LIMIT,
        order_key: str = 'id'
    ) -> ValidationSummary:
        """
        Run every validation facet over all source tables.

        Sample validation only runs for tables whose counts match and are
        non-zero, up to ``sample_table_limit`` tables.

        Args:
            sample_size: Rows sampled per table
            sample_table_limit: Maximum number of tables to sample
            order_key: Identity key column

        Returns:
            Validation summary across all facets
        """
        logger.info("Starting migration validation...")

        tables = self.source_reader.list_tables()
        count_results = self.validate_table_counts(tables)

        schema = self.validate_schema()
        schema_results: List[SchemaDiffResult] = schema['results']

        logger.info("Validating sample data...")
        tables_with_data = [
            r.table for r in count_results
            if r.match and r.source_count
        ]
        sample_results = []
        for table_name in tables_with_data[:sample_table_limit]:
            result = self.validate_sample_data(table_name, sample_size, order_key)
            self._emit(result)
            sample_results.append(result)

        summary = ValidationSummary(
            count_results=tuple(count_results),
            schema_results=tuple(schema_results),
            sample_results=tuple(sample_results),
            missing_in_target=tuple(schema['missing_in_target']),
        )
        log_validation_summary(summary)

        if self.report_sink is not None:
            self.report_sink.finalize(summary)

        return summary


def log_validation_summary(summary: ValidationSummary) -> None:
    logger.info("Validation Summary:")
    logger.info(
        f"Row counts: {summary.tables_with_matching_counts}/{len(summary.count_results)} tables match"
    )
    logger.info(
        f"Schema validation: {summary.tables_with_valid_schema}/{summary.schema_validated_tables} tables validated"
    )
    logger.info(
        f"Sample data validation: {summary.tables_with_valid_sample_data}/{len(summary.sample_results)} "
        f"tables validated"
    )

    if summary.is_valid:
        logger.info("✓ All validations passed. Migration appears successful.")
    else:
        logger.warning("✗ Some validations failed. Please review the results above.")
        if summary.missing_in_target:
            logger.info("Note: Tables missing in MySQL are excluded from schema validation.")


def validate_migration(
    source_reader,
    target_reader,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    sample_table_limit: int = DEFAULT_SAMPLE_TABLE_LIMIT,
    report_sink: Optional[ReportSink] = None
) -> ValidationSummary:
    """
    Convenience function to validate a complete migration.

    Args:
        source_reader: PostgreSQL catalog reader
        target_reader: MySQL catalog reader
        sample_size: Rows sampled per table
        sample_table_limit: Maximum number of tables to sample
        report_sink: Optional sink for result records

    Returns:
        Validation summary
    """
    validator = MigrationValidator(source_reader, target_reader, report_sink)
    return validator.validate_migration(sample_size, sample_table_limit)

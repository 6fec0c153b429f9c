"""
PostgreSQL to MySQL Data Migration DAG

This DAG copies table data from PostgreSQL to MySQL after the schema DAG
has created the target tables:
1. Discover source tables (minus excluded patterns)
2. Copy each table in `id`-ordered batches, converting booleans, timestamps
   and JSON values for MySQL
3. Log a per-table transfer summary

Run `validate_postgres_to_mysql` afterwards to reconcile the result.
"""

from airflow.decorators import dag, task
from airflow.models.param import Param
from pendulum import datetime
from datetime import timedelta
from typing import Any, Dict, List
import logging

from pg_mysql_migration.catalog import build_readers
from pg_mysql_migration.data_transfer import transfer_tables
from pg_mysql_migration.table_config import (
    expand_table_list_param,
    get_exclude_patterns,
    get_migration_settings,
    parse_positive_int,
)

logger = logging.getLogger(__name__)


@dag(
    dag_id="postgres_to_mysql_migration",
    start_date=datetime(2025, 1, 1),
    schedule=None,  # Run manually or trigger via API
    catchup=False,
    max_active_runs=1,
    is_paused_upon_creation=False,
    doc_md=__doc__,
    default_args={
        "owner": "data-team",
        "retries": 1,
        "retry_delay": timedelta(seconds=30),
    },
    params={
        "source_conn_id": Param(
            default="postgres_source",
            type="string",
            description="PostgreSQL connection ID"
        ),
        "target_conn_id": Param(
            default="mysql_target",
            type="string",
            description="MySQL connection ID"
        ),
        "source_schema": Param(
            default="public",
            type="string",
            description="Source schema in PostgreSQL"
        ),
        "batch_size": Param(
            default=get_migration_settings()['batch_size'],
            type="integer",
            minimum=1,
            description="Rows per INSERT batch. Defaults from BATCH_SIZE env var."
        ),
        "exclude_tables": Param(
            default=get_exclude_patterns(),
            type="array",
            description="Table patterns to exclude (supports wildcards)"
        ),
    },
    tags=["migration", "postgres", "mysql", "data"],
)
def postgres_to_mysql_migration():
    """Data DAG: copy rows from PostgreSQL into the MySQL tables."""

    @task
    def transfer_all_tables(**context) -> List[Dict[str, Any]]:
        params = context["params"]
        batch_size = parse_positive_int(params["batch_size"], "batch_size")

        source_reader, target_writer = build_readers(
            params["source_conn_id"],
            params["target_conn_id"],
            params["source_schema"],
            expand_table_list_param(params.get("exclude_tables")),
        )

        tables = source_reader.list_tables()
        logger.info(f"Migrating data for {len(tables)} tables (batch size: {batch_size:,})")

        return transfer_tables(source_reader, target_writer, tables, batch_size)

    @task
    def log_transfer_summary(results: List[Dict[str, Any]]) -> str:
        total_rows = sum(r['rows_transferred'] for r in results)
        failed = [r for r in results if not r['success']]

        summary = (
            f"Migration complete: {len(results) - len(failed)}/{len(results)} tables, "
            f"{total_rows:,} rows"
        )
        logger.info(summary)
        for result in failed:
            logger.warning(f"  ✗ {result['table_name']}: {result['error']}")

        return summary

    log_transfer_summary(transfer_all_tables())


# Instantiate
postgres_to_mysql_migration()

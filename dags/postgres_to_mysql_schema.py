"""
PostgreSQL to MySQL Schema DAG

This DAG handles schema operations only:
1. Read table and column metadata from PostgreSQL
2. Map PostgreSQL types to MySQL (ids and *_id columns widened to BIGINT)
3. Drop and recreate each table in MySQL with an `id` primary key

Tables that fail to create are logged and reported; the remaining tables
are still created. Foreign keys and secondary indexes are not created.
"""

from airflow.decorators import dag, task
from airflow.models.param import Param
from pendulum import datetime
from datetime import timedelta
from typing import Any, Dict, List
import logging

from pg_mysql_migration.catalog import build_readers
from pg_mysql_migration.ddl_generator import DDLGenerator
from pg_mysql_migration.models import TableSnapshot
from pg_mysql_migration.table_config import expand_table_list_param, get_exclude_patterns

logger = logging.getLogger(__name__)


@dag(
    dag_id="postgres_to_mysql_schema",
    start_date=datetime(2025, 1, 1),
    schedule=None,
    catchup=False,
    max_active_runs=1,
    is_paused_upon_creation=False,
    doc_md=__doc__,
    default_args={
        "owner": "data-team",
        "retries": 2,
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
        "exclude_tables": Param(
            default=get_exclude_patterns(),
            type="array",
            description="Table patterns to exclude (supports wildcards). "
                        "Defaults from EXCLUDE_TABLE_PATTERNS env var."
        ),
    },
    tags=["schema", "postgres", "mysql", "ddl"],
)
def postgres_to_mysql_schema():
    """Schema DAG: read PostgreSQL metadata, create MySQL tables."""

    @task
    def create_target_tables(**context) -> Dict[str, List[Any]]:
        """Create every source table in MySQL."""
        params = context["params"]

        source_reader, target_writer = build_readers(
            params["source_conn_id"],
            params["target_conn_id"],
            params["source_schema"],
            expand_table_list_param(params.get("exclude_tables")),
        )

        tables = source_reader.list_tables()
        columns = source_reader.list_columns()

        grouped: Dict[str, List[Any]] = {}
        for column in columns:
            grouped.setdefault(column.table, []).append(column)

        snapshots = [
            TableSnapshot.from_columns(table_name, grouped.get(table_name, []))
            for table_name in tables
        ]
        logger.info(f"Creating {len(snapshots)} tables in MySQL database '{target_writer.schema}'")

        result = DDLGenerator(target_writer).create_tables(snapshots)

        logger.info(
            f"Schema DAG complete: {len(result['created'])} tables created, "
            f"{len(result['failed'])} failed"
        )
        for failure in result['failed']:
            logger.warning(f"  ✗ {failure['table_name']}: {failure['error']}")

        return result

    create_target_tables()


# Instantiate
postgres_to_mysql_schema()

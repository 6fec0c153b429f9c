"""
PostgreSQL to MySQL Migration Validation DAG

Reconciles a completed migration on three independent facets:
- Row counts: exact per-table equality
- Schema: tables and columns missing in MySQL
- Sample data: the first rows of each table (by `id`) compared value by
  value, tolerating representation differences (0/1 vs booleans, JSON text
  vs objects, timestamp strings and timezone shifts up to 24 hours)

Results are written to a JSON report and returned through XCom.
Run this DAG manually after migration to verify data integrity.
"""

from airflow.decorators import dag, task
from airflow.models.param import Param
from pendulum import datetime
from typing import Any, Dict
import logging

from pg_mysql_migration.catalog import build_readers
from pg_mysql_migration.report import JsonReportSink
from pg_mysql_migration.table_config import (
    expand_table_list_param,
    get_exclude_patterns,
    get_migration_settings,
    parse_positive_int,
)
from pg_mysql_migration.validation import MigrationValidator

logger = logging.getLogger(__name__)

_settings = get_migration_settings()


@dag(
    dag_id="validate_postgres_to_mysql",
    start_date=datetime(2025, 1, 1),
    schedule=None,  # Run manually after migration
    catchup=False,
    max_active_runs=1,
    is_paused_upon_creation=False,
    doc_md=__doc__,
    default_args={
        "owner": "data-team",
        "retries": 0,
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
        "source_schema": Param(default="public", type="string"),
        "sample_size": Param(
            default=_settings['sample_size'],
            type="integer",
            minimum=1,
            description="Rows sampled per table"
        ),
        "sample_table_limit": Param(
            default=_settings['sample_table_limit'],
            type="integer",
            minimum=1,
            description="Maximum number of tables whose data is sampled"
        ),
        "exclude_tables": Param(
            default=get_exclude_patterns(),
            type="array",
            description="Tables to exclude from validation (supports wildcards)"
        ),
        "report_path": Param(
            default=_settings['report_path'],
            type="string",
            description="Where to write the JSON validation report"
        ),
    },
    tags=["validation", "migration", "postgres", "mysql"],
)
def validate_postgres_to_mysql():
    """Validate row counts, schema and sample data after migration."""

    @task
    def validate_all_tables(**context) -> Dict[str, Any]:
        params = context["params"]

        source_reader, target_reader = build_readers(
            params["source_conn_id"],
            params["target_conn_id"],
            params["source_schema"],
            expand_table_list_param(params.get("exclude_tables")),
        )

        validator = MigrationValidator(
            source_reader,
            target_reader,
            report_sink=JsonReportSink(params["report_path"]),
        )
        summary = validator.validate_migration(
            sample_size=parse_positive_int(params["sample_size"], "sample_size"),
            sample_table_limit=parse_positive_int(params["sample_table_limit"], "sample_table_limit"),
        )

        return summary.to_dict()

    validate_all_tables()


# Instantiate
validate_postgres_to_mysql()

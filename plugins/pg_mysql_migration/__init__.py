"""
PostgreSQL to MySQL Migration Utilities

This package provides utilities for migrating schemas and data from
PostgreSQL to MySQL and for reconciling the result, driven by Apache Airflow.

Modules:
- models: Value objects shared across modules
- type_mapping: Map PostgreSQL types to MySQL
- ddl_generator: Generate MySQL DDL statements
- data_transfer: Copy table data in batches
- value_normalizer: Reshape MySQL values toward their PostgreSQL form
- value_comparator: Decide whether migrated values are equivalent
- schema_diff: Detect missing tables and columns
- validation: Row count, schema and sample data validation
- catalog: Catalog readers over PostgreSQL and MySQL hooks
- report: Result sinks for validation runs
- table_config: Settings from DAG params and environment variables
- utils: Identifier validation and quoting
"""

__version__ = "1.0.0"

from pg_mysql_migration import type_mapping
from pg_mysql_migration import ddl_generator
from pg_mysql_migration import data_transfer
from pg_mysql_migration import value_normalizer
from pg_mysql_migration import value_comparator
from pg_mysql_migration import schema_diff
from pg_mysql_migration import validation
from pg_mysql_migration import catalog
from pg_mysql_migration import report
from pg_mysql_migration import table_config

__all__ = [
    "type_mapping",
    "ddl_generator",
    "data_transfer",
    "value_normalizer",
    "value_comparator",
    "schema_diff",
    "validation",
    "catalog",
    "report",
    "table_config",
]

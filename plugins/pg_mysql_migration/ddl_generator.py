"""
MySQL DDL Generation Module

This module generates MySQL DDL statements from PostgreSQL table snapshots
and runs them through the target catalog writer.
"""

from typing import Any, Dict, List, Optional
import logging

from pg_mysql_migration.models import TableSnapshot
from pg_mysql_migration.type_mapping import map_column
from pg_mysql_migration.utils import quote_mysql_identifier, truncate_string

logger = logging.getLogger(__name__)

TABLE_OPTIONS = "ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci"


class DDLGenerator:
    """Generate MySQL DDL statements from schema metadata."""

    def __init__(self, target_writer: Optional[Any] = None, primary_key_column: str = 'id'):
        """
        Initialize the DDL generator.

        Args:
            target_writer: MySQL catalog writer used to execute DDL
            primary_key_column: Column that becomes the primary key when present
        """
        self.target_writer = target_writer
        self.primary_key_column = primary_key_column

    def generate_create_table(self, snapshot: TableSnapshot) -> str:
        """
        Generate CREATE TABLE statement for MySQL.

        Args:
            snapshot: Source table snapshot

        Returns:
            CREATE TABLE DDL statement
        """
        table_name = snapshot.table_name
        column_definitions = [
            self._generate_column_definition(map_column(column))
            for column in snapshot.columns
        ]

        if self.primary_key_column in snapshot.column_names():
            column_definitions.append(
                f"    PRIMARY KEY ({quote_mysql_identifier(self.primary_key_column)})"
            )

        ddl_parts = [
            f"CREATE TABLE {quote_mysql_identifier(table_name)} (",
            ',\n'.join(column_definitions),
            f") {TABLE_OPTIONS}",
        ]
        return '\n'.join(ddl_parts)

    def generate_drop_table(self, table_name: str) -> str:
        """
        Generate DROP TABLE statement.

        Args:
            table_name: Table name to drop

        Returns:
            DROP TABLE DDL statement
        """
        return f"DROP TABLE IF EXISTS {quote_mysql_identifier(table_name)}"

    def generate_complete_ddl(self, snapshot: TableSnapshot, drop_if_exists: bool = True) -> List[str]:
        """
        Generate complete DDL for a table.

        Args:
            snapshot: Source table snapshot
            drop_if_exists: Whether to include DROP TABLE statement

        Returns:
            List of DDL statements in execution order
        """
        ddl_statements = []
        if drop_if_exists:
            ddl_statements.append(self.generate_drop_table(snapshot.table_name))
        ddl_statements.append(self.generate_create_table(snapshot))
        return ddl_statements

    def create_tables(self, snapshots: List[TableSnapshot], drop_if_exists: bool = True) -> Dict[str, Any]:
        """
        Create every table, continuing past tables that fail.

        Args:
            snapshots: Source table snapshots in creation order
            drop_if_exists: Whether to drop existing tables first

        Returns:
            Dictionary with 'created' and 'failed' table lists
        """
        if self.target_writer is None:
            raise ValueError("DDLGenerator needs a target_writer to create tables")

        result = {'created': [], 'failed': []}

        for snapshot in snapshots:
            table_name = snapshot.table_name
            if not snapshot.columns:
                logger.warning(f"No structure found for table {table_name}, skipping")
                result['failed'].append({'table_name': table_name, 'error': 'no columns'})
                continue

            ddl_statements = self.generate_complete_ddl(snapshot, drop_if_exists)
            try:
                self.target_writer.execute_ddl(ddl_statements)
            except Exception as e:
                logger.error(f"✗ Failed to create table {table_name}: {e}")
                logger.debug(f"SQL: {truncate_string(ddl_statements[-1], 500)}")
                result['failed'].append({'table_name': table_name, 'error': str(e)})
                continue

            logger.info(f"✓ Created table: {table_name}")
            result['created'].append(table_name)

        return result

    def _generate_column_definition(self, column: Dict[str, Any]) -> str:
        """
        Generate a column definition for CREATE TABLE.

        Args:
            column: Mapped column information from map_column

        Returns:
            Column definition string
        """
        parts = [
            quote_mysql_identifier(column['column_name']),
            column['data_type'],
            'NULL' if column['is_nullable'] else 'NOT NULL',
        ]

        if column.get('auto_increment'):
            parts.append('AUTO_INCREMENT')
        elif column.get('default_value') is not None:
            parts.append(f"DEFAULT {column['default_value']}")

        return '    ' + ' '.join(parts)

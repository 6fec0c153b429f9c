"""
Catalog Reader Module

Readers expose table metadata and row data of one database to the
reconciliation code. They wrap a DB-API hook (anything with ``get_conn()``,
e.g. Airflow's PostgresHook or MySqlHook) that the caller constructs and
owns; readers never open connections of their own accord.
"""

from contextlib import closing
from typing import Any, Dict, Iterator, List, Optional, Sequence
import logging

from pg_mysql_migration.models import ColumnDescriptor
from pg_mysql_migration.utils import (
    matches_any_pattern,
    quote_mysql_identifier,
    quote_pg_identifier,
    truncate_string,
    validate_sql_identifier,
)

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATTERNS = ("strapi_*",)

Row = Dict[str, Any]


class CatalogReader:
    """
    Base class for catalog readers.

    Subclasses provide the dialect-specific queries; this class runs them
    through the hook and shapes the results.
    """

    dialect = "generic"

    def __init__(
        self,
        hook: Any,
        schema: str,
        exclude_patterns: Optional[Sequence[str]] = None
    ):
        """
        Args:
            hook: DB-API hook exposing get_conn()
            schema: Schema (PostgreSQL) or database (MySQL) to read
            exclude_patterns: Table name wildcard patterns to skip
        """
        self.hook = hook
        self.schema = schema
        self.exclude_patterns = tuple(
            DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns
        )

    # -- query helpers -------------------------------------------------------

    def _fetch_all(self, query: str, parameters: Optional[Sequence[Any]] = None) -> List[Row]:
        with closing(self.hook.get_conn()) as conn:
            with conn.cursor() as cursor:
                cursor.execute(query, parameters)
                columns = [d[0] for d in cursor.description]
                return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def _fetch_value(self, query: str, parameters: Optional[Sequence[Any]] = None) -> Any:
        with closing(self.hook.get_conn()) as conn:
            with conn.cursor() as cursor:
                cursor.execute(query, parameters)
                row = cursor.fetchone()
                return row[0] if row else None

    def _quote(self, identifier: str) -> str:
        raise NotImplementedError

    def _qualified(self, table: str) -> str:
        raise NotImplementedError

    def _filter_tables(self, names: List[str]) -> List[str]:
        result = []
        for name in names:
            if matches_any_pattern(name, self.exclude_patterns):
                logger.debug(f"Excluding table {name} from {self.dialect} catalog")
                continue
            result.append(name)
        return result

    @staticmethod
    def _to_column(row: Row) -> ColumnDescriptor:
        def _int_or_none(value):
            return int(value) if value is not None else None

        return ColumnDescriptor(
            table=row['table_name'],
            name=row['column_name'],
            native_type=str(row['data_type']).lower(),
            nullable=str(row['is_nullable']).upper() == 'YES',
            default_expr=row.get('column_default'),
            max_length=_int_or_none(row.get('character_maximum_length')),
            precision=_int_or_none(row.get('numeric_precision')),
            scale=_int_or_none(row.get('numeric_scale')),
            ordinal_position=int(row.get('ordinal_position') or 0),
        )

    # -- collaborator interface ----------------------------------------------

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        raise NotImplementedError

    def list_columns(self, schema: Optional[str] = None, table: Optional[str] = None) -> List[ColumnDescriptor]:
        raise NotImplementedError

    def count(self, table: str) -> int:
        """Exact row count of a table."""
        result = self._fetch_value(f"SELECT COUNT(*) FROM {self._qualified(table)}")
        return int(result or 0)

    def sample_rows(self, table: str, order_key: str = 'id', limit: int = 5) -> List[Row]:
        """First ``limit`` rows ordered by the identity key."""
        query = (
            f"SELECT * FROM {self._qualified(table)} "
            f"ORDER BY {self._quote(order_key)} LIMIT %s"
        )
        return self._fetch_all(query, [int(limit)])

    def rows_by_ids(self, table: str, ids: Sequence[Any], order_key: str = 'id') -> List[Row]:
        """Rows whose identity key is in ``ids``, ordered by that key."""
        if not ids:
            return []
        placeholders = ', '.join(['%s'] * len(ids))
        query = (
            f"SELECT * FROM {self._qualified(table)} "
            f"WHERE {self._quote(order_key)} IN ({placeholders}) "
            f"ORDER BY {self._quote(order_key)}"
        )
        return self._fetch_all(query, list(ids))

    def fetch_batches(self, table: str, order_key: str = 'id', batch_size: int = 1000) -> Iterator[List[Row]]:
        """
        Yield all rows of a table in keyset-paginated batches.

        Args:
            table: Table to read
            order_key: Unique, ordered key column
            batch_size: Maximum rows per batch
        """
        last_key = None
        while True:
            if last_key is None:
                query = (
                    f"SELECT * FROM {self._qualified(table)} "
                    f"ORDER BY {self._quote(order_key)} LIMIT %s"
                )
                parameters = [batch_size]
            else:
                query = (
                    f"SELECT * FROM {self._qualified(table)} "
                    f"WHERE {self._quote(order_key)} > %s "
                    f"ORDER BY {self._quote(order_key)} LIMIT %s"
                )
                parameters = [last_key, batch_size]

            rows = self._fetch_all(query, parameters)
            if not rows:
                return
            yield rows
            if len(rows) < batch_size:
                return
            last_key = rows[-1][order_key]


class PostgresCatalogReader(CatalogReader):
    """Catalog reader for the PostgreSQL source database."""

    dialect = "postgres"

    def __init__(self, hook: Any, schema: str = 'public', exclude_patterns: Optional[Sequence[str]] = None):
        super().__init__(hook, schema, exclude_patterns)

    def _quote(self, identifier: str) -> str:
        return quote_pg_identifier(identifier)

    def _qualified(self, table: str) -> str:
        return f"{quote_pg_identifier(self.schema)}.{quote_pg_identifier(table)}"

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        query = """
        SELECT table_name
        FROM information_schema.tables
        WHERE table_schema = %s
          AND table_type = 'BASE TABLE'
        ORDER BY table_name
        """
        rows = self._fetch_all(query, [schema or self.schema])
        tables = self._filter_tables([r['table_name'] for r in rows])
        logger.info(f"Found {len(tables)} PostgreSQL tables")
        return tables

    def list_columns(self, schema: Optional[str] = None, table: Optional[str] = None) -> List[ColumnDescriptor]:
        query = """
        SELECT
            table_name,
            column_name,
            data_type,
            is_nullable,
            column_default,
            character_maximum_length,
            numeric_precision,
            numeric_scale,
            ordinal_position
        FROM information_schema.columns
        WHERE table_schema = %s
        """
        parameters = [schema or self.schema]
        if table is not None:
            query += "  AND table_name = %s\n"
            parameters.append(table)
        query += "ORDER BY table_name, ordinal_position"

        rows = self._fetch_all(query, parameters)
        columns = [self._to_column(r) for r in rows]
        if table is None:
            allowed = set(self._filter_tables(sorted({c.table for c in columns})))
            columns = [c for c in columns if c.table in allowed]
        return columns


class MySqlCatalogReader(CatalogReader):
    """Catalog reader and writer for the MySQL target database."""

    dialect = "mysql"

    def _quote(self, identifier: str) -> str:
        return quote_mysql_identifier(identifier)

    def _qualified(self, table: str) -> str:
        return f"{quote_mysql_identifier(self.schema)}.{quote_mysql_identifier(table)}"

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        """
        List base tables of the MySQL database.

        Tries SHOW TABLES first and falls back to information_schema; returns
        an empty list if both fail.
        """
        database = schema or self.schema
        show_tables_error = None

        try:
            rows = self._fetch_all(f"SHOW FULL TABLES FROM {quote_mysql_identifier(database)}")
            if rows:
                name_key = next(iter(rows[0]))
                tables = [
                    r[name_key] for r in rows
                    if str(r.get('Table_type', 'BASE TABLE')).upper() == 'BASE TABLE'
                ]
            else:
                tables = []
            tables = self._filter_tables(tables)
            logger.info(f"Found {len(tables)} MySQL tables")
            return tables
        except Exception as e:
            show_tables_error = e
            logger.warning(f"SHOW TABLES failed, trying information_schema: {e}")

        try:
            rows = self._fetch_all(
                """
                SELECT TABLE_NAME AS table_name
                FROM information_schema.tables
                WHERE TABLE_SCHEMA = %s
                  AND TABLE_TYPE = 'BASE TABLE'
                ORDER BY TABLE_NAME
                """,
                [database],
            )
        except Exception as e:
            logger.error("Both SHOW TABLES and information_schema failed:")
            logger.error(f"  SHOW TABLES error: {show_tables_error}")
            logger.error(f"  information_schema error: {e}")
            return []

        tables = self._filter_tables([r['table_name'] for r in rows])
        logger.info(f"Found {len(tables)} MySQL tables via information_schema")
        if not tables:
            logger.warning(f"No tables found in database: {database}")
        return tables

    def list_columns(self, schema: Optional[str] = None, table: Optional[str] = None) -> List[ColumnDescriptor]:
        query = """
        SELECT
            TABLE_NAME AS table_name,
            COLUMN_NAME AS column_name,
            DATA_TYPE AS data_type,
            IS_NULLABLE AS is_nullable,
            COLUMN_DEFAULT AS column_default,
            CHARACTER_MAXIMUM_LENGTH AS character_maximum_length,
            NUMERIC_PRECISION AS numeric_precision,
            NUMERIC_SCALE AS numeric_scale,
            ORDINAL_POSITION AS ordinal_position
        FROM information_schema.columns
        WHERE TABLE_SCHEMA = %s
        """
        parameters = [schema or self.schema]
        if table is not None:
            query += "  AND TABLE_NAME = %s\n"
            parameters.append(table)
        query += "ORDER BY TABLE_NAME, ORDINAL_POSITION"

        rows = self._fetch_all(query, parameters)
        return [self._to_column(r) for r in rows]

    def execute_ddl(self, ddl_statements: List[str]) -> None:
        """
        Execute DDL statements in MySQL.

        MySQL commits DDL implicitly, so statements run one after another
        without a surrounding transaction.
        """
        with closing(self.hook.get_conn()) as conn:
            with conn.cursor() as cursor:
                for ddl in ddl_statements:
                    logger.info(f"Executing DDL: {truncate_string(ddl.strip())}")
                    cursor.execute(ddl)
            conn.commit()

    def insert_rows(self, table: str, columns: List[str], rows: List[Sequence[Any]]) -> int:
        """
        Insert rows with foreign key checks disabled for the batch.

        Args:
            table: Target table
            columns: Column names, in the order of each row's values
            rows: Row value sequences, already converted for MySQL

        Returns:
            Number of rows inserted
        """
        if not rows:
            return 0

        column_list = ', '.join(quote_mysql_identifier(c) for c in columns)
        placeholders = ', '.join(['%s'] * len(columns))
        insert_sql = f"INSERT INTO {self._qualified(table)} ({column_list}) VALUES ({placeholders})"

        with closing(self.hook.get_conn()) as conn:
            with conn.cursor() as cursor:
                cursor.execute("SET FOREIGN_KEY_CHECKS = 0")
                try:
                    cursor.executemany(insert_sql, rows)
                finally:
                    cursor.execute("SET FOREIGN_KEY_CHECKS = 1")
            conn.commit()

        return len(rows)


def get_target_database(mysql_conn_id: str) -> str:
    """
    Extract the database name from an Airflow MySQL connection.

    Raises:
        ValueError: If the connection has no database configured
    """
    from airflow.hooks.base import BaseHook

    conn = BaseHook.get_connection(mysql_conn_id)
    database = conn.schema

    if not database:
        raise ValueError(
            f"Cannot extract database name from connection '{mysql_conn_id}'. "
            f"Ensure the connection has a database/schema configured."
        )

    return database


def build_readers(
    postgres_conn_id: str,
    mysql_conn_id: str,
    source_schema: str = 'public',
    exclude_patterns: Optional[Sequence[str]] = None
):
    """
    Create the source reader and target reader/writer from Airflow connections.

    The hooks are created here and owned by the returned readers.

    Returns:
        Tuple of (PostgresCatalogReader, MySqlCatalogReader)
    """
    from airflow.providers.mysql.hooks.mysql import MySqlHook
    from airflow.providers.postgres.hooks.postgres import PostgresHook

    validate_sql_identifier(source_schema, "schema name")

    source_reader = PostgresCatalogReader(
        PostgresHook(postgres_conn_id=postgres_conn_id),
        schema=source_schema,
        exclude_patterns=exclude_patterns,
    )
    target_reader = MySqlCatalogReader(
        MySqlHook(mysql_conn_id=mysql_conn_id),
        schema=get_target_database(mysql_conn_id),
        exclude_patterns=exclude_patterns,
    )
    return source_reader, target_reader

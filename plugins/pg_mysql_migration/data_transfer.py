"""
Data Transfer Module

Copies table data from PostgreSQL to MySQL in batches, converting values
to forms MySQL accepts. Value conversion here is the inverse of what
value_normalizer undoes at validation time.
"""

import json
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence
import logging

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


def convert_value_for_mysql(value: Any) -> Any:
    """
    Convert a PostgreSQL value for a parameterized MySQL INSERT.

    - booleans become 1/0
    - datetimes become 'YYYY-MM-DD HH:MM:SS' (aware values in UTC)
    - dicts and lists become JSON text
    - memoryview/bytearray become bytes
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return 1 if value else 0

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime('%Y-%m-%d %H:%M:%S')

    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)

    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)

    return value


def convert_row(row: Dict[str, Any], columns: Sequence[str]) -> List[Any]:
    return [convert_value_for_mysql(row.get(column)) for column in columns]


def transfer_table(
    source_reader,
    target_writer,
    table_name: str,
    batch_size: int = DEFAULT_BATCH_SIZE,
    order_key: str = 'id'
) -> Dict[str, Any]:
    """
    Copy all rows of one table.

    Args:
        source_reader: PostgreSQL catalog reader
        target_writer: MySQL catalog writer
        table_name: Table to copy
        batch_size: Rows per INSERT batch
        order_key: Key used to page through the source table

    Returns:
        Transfer result dictionary
    """
    logger.info(f"Migrating data for table: {table_name}")
    start_time = time.time()
    rows_transferred = 0
    columns: List[str] = []

    try:
        for batch in source_reader.fetch_batches(table_name, order_key, batch_size):
            if not columns:
                columns = list(batch[0].keys())
            values = [convert_row(row, columns) for row in batch]
            rows_transferred += target_writer.insert_rows(table_name, columns, values)
            logger.info(f"Migrated {rows_transferred:,} rows for {table_name}")
    except Exception as e:
        elapsed = time.time() - start_time
        logger.error(f"✗ Failed to migrate data for {table_name}: {e}")
        return {
            'table_name': table_name,
            'rows_transferred': rows_transferred,
            'elapsed_time_seconds': elapsed,
            'success': False,
            'error': str(e),
        }

    elapsed = time.time() - start_time
    if rows_transferred == 0:
        logger.info(f"No data to migrate for table: {table_name}")
    else:
        rate = rows_transferred / elapsed if elapsed > 0 else 0
        logger.info(
            f"✓ Completed migration for {table_name}: {rows_transferred:,} rows "
            f"in {elapsed:.2f}s ({rate:,.0f} rows/sec)"
        )

    return {
        'table_name': table_name,
        'rows_transferred': rows_transferred,
        'elapsed_time_seconds': elapsed,
        'success': True,
        'error': None,
    }


def transfer_tables(
    source_reader,
    target_writer,
    tables: List[str],
    batch_size: int = DEFAULT_BATCH_SIZE
) -> List[Dict[str, Any]]:
    """
    Copy several tables in order; one table's failure does not stop the rest.

    Returns:
        One transfer result per table
    """
    results = [
        transfer_table(source_reader, target_writer, table_name, batch_size)
        for table_name in tables
    ]

    succeeded = sum(1 for r in results if r['success'])
    logger.info(f"Data transfer complete: {succeeded}/{len(results)} tables migrated successfully")
    return results

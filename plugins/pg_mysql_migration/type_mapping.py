"""
PostgreSQL to MySQL Type Mapping Module

This module maps PostgreSQL column types (as reported by information_schema)
to MySQL column declarations, along with column defaults and the key-column
widening policy applied when tables are created.
"""

import fnmatch
import re
from typing import Optional, Dict, Any
import logging

from pg_mysql_migration.models import ColumnDescriptor

logger = logging.getLogger(__name__)

FALLBACK_TYPE = "TEXT"
DEFAULT_DECIMAL = "DECIMAL(10,2)"

# PostgreSQL information_schema data_type -> MySQL declaration template
TYPE_MAPPING = {
    # Integer Types
    "bigint": "BIGINT",
    "integer": "BIGINT",  # Widened, see widen_key_type
    "smallint": "SMALLINT",

    # Boolean
    "boolean": "BOOLEAN",

    # Character Types
    "text": "TEXT",
    "character varying": "VARCHAR({length})",
    "varchar": "VARCHAR({length})",

    # Date and Time Types
    "timestamp without time zone": "DATETIME",
    "timestamp with time zone": "DATETIME",
    "date": "DATE",
    "time": "TIME",

    # Numeric Types
    "decimal": "DECIMAL({precision},{scale})",
    "numeric": "DECIMAL({precision},{scale})",
    "real": "FLOAT",
    "double precision": "DOUBLE",

    # Structured and Other Types
    "json": "JSON",
    "jsonb": "JSON",
    "uuid": "VARCHAR(36)",
    "bytea": "LONGBLOB",
}

# MySQL integer declarations that are widened for key-shaped columns
NARROW_INTEGER_TYPES = ("TINYINT", "SMALLINT", "MEDIUMINT", "INT", "INTEGER")

KEY_COLUMN_PATTERNS = ("id", "*_id")

# MySQL rejects literal defaults on these column types
NO_LITERAL_DEFAULT_TYPES = ("TEXT", "JSON", "LONGBLOB")

AUTO_INCREMENT = "AUTO_INCREMENT"


def map_type(
    pg_type: str,
    max_length: Optional[int] = None,
    precision: Optional[int] = None,
    scale: Optional[int] = None,
) -> str:
    """
    Map a PostgreSQL data type to its MySQL equivalent.

    The mapping is total: types without an entry fall back to TEXT so a
    migration can always proceed. The fallback is lossy for exotic types
    (arrays, ranges, network types) and is logged as a warning.

    Args:
        pg_type: PostgreSQL data type name as reported by information_schema
        max_length: character_maximum_length for character types
        precision: numeric_precision for numeric types
        scale: numeric_scale for numeric types

    Returns:
        The MySQL column type declaration
    """
    normalized = (pg_type or "").lower().strip()

    if normalized not in TYPE_MAPPING:
        logger.warning(f"Unknown PostgreSQL type '{pg_type}', using {FALLBACK_TYPE} as fallback")
        return FALLBACK_TYPE

    mysql_type = TYPE_MAPPING[normalized]

    if "{length}" in mysql_type:
        if max_length:
            mysql_type = mysql_type.replace("{length}", str(max_length))
        else:
            # Unbounded varchar
            mysql_type = "TEXT"

    if "{precision}" in mysql_type:
        if precision is not None and scale is not None:
            mysql_type = mysql_type.replace("{precision}", str(precision)).replace("{scale}", str(scale))
        else:
            mysql_type = DEFAULT_DECIMAL

    return mysql_type


def is_key_column(column_name: str) -> bool:
    """Return True for columns named ``id`` or ending in ``_id``."""
    name = column_name.lower()
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in KEY_COLUMN_PATTERNS)


def widen_key_type(column_name: str, mysql_type: str) -> str:
    """
    Widen integer declarations of identity and foreign-key columns to BIGINT.

    Applied on top of map_type so that ids and references to ids share one
    integer width regardless of the source's default integer size.
    """
    if not is_key_column(column_name):
        return mysql_type

    if mysql_type.upper() in NARROW_INTEGER_TYPES:
        logger.debug(f"Widening {column_name} from {mysql_type} to BIGINT")
        return "BIGINT"

    return mysql_type


def map_default_value(pg_default: Optional[str]) -> Optional[str]:
    """
    Map a PostgreSQL column default expression to MySQL.

    Args:
        pg_default: column_default from information_schema.columns

    Returns:
        AUTO_INCREMENT for sequence-backed defaults, a MySQL default
        expression, or None if the default cannot be mapped
    """
    if not pg_default:
        return None

    default = pg_default.strip()
    lowered = default.lower()

    if lowered.startswith('nextval('):
        return AUTO_INCREMENT

    if lowered in ('now()', 'current_timestamp', 'current_timestamp()', 'localtimestamp'):
        return 'CURRENT_TIMESTAMP'

    if lowered in ('current_date',):
        return '(CURRENT_DATE)'

    # Strip type casts: 'active'::character varying, '0'::numeric
    cast_match = re.match(r"^\(?('(?:[^']|'')*'|-?\d+(?:\.\d+)?)\)?::[\w\s\[\]\"]+$", default)
    if cast_match:
        default = cast_match.group(1)
        lowered = default.lower()

    if re.match(r'^-?\d+(\.\d+)?$', default):
        return default  # Numeric literal
    elif default.startswith("'") and default.endswith("'"):
        return default  # String literal
    elif lowered in ('null', 'true', 'false'):
        return default.upper()

    logger.warning(f"Cannot map default value '{pg_default}', skipping")
    return None


def map_column(column: ColumnDescriptor) -> Dict[str, Any]:
    """
    Map a complete column definition from PostgreSQL to MySQL.

    Args:
        column: Column metadata from the source catalog

    Returns:
        Dictionary with the MySQL column definition parts
    """
    data_type = map_type(column.native_type, column.max_length, column.precision, column.scale)
    data_type = widen_key_type(column.name, data_type)

    result = {
        'column_name': column.name,
        'data_type': data_type,
        'is_nullable': column.nullable,
        'default_value': None,
        'auto_increment': False,
    }

    default = map_default_value(column.default_expr)
    if default == AUTO_INCREMENT:
        result['auto_increment'] = True
    elif default is not None:
        if data_type.upper() in NO_LITERAL_DEFAULT_TYPES and default.upper() != 'NULL':
            logger.warning(
                f"Dropping default {default} for {column.table}.{column.name}: "
                f"{data_type} columns cannot carry literal defaults in MySQL"
            )
        else:
            result['default_value'] = default

    return result


def validate_type_mapping(pg_type: str) -> bool:
    """
    Check if a PostgreSQL type has a known mapping.

    Args:
        pg_type: The PostgreSQL data type to check

    Returns:
        True if the type has a mapping, False if it would use the fallback
    """
    return (pg_type or "").lower().strip() in TYPE_MAPPING


def get_supported_types() -> list:
    """
    Get a list of all supported PostgreSQL data types.

    Returns:
        List of supported PostgreSQL data type names
    """
    return list(TYPE_MAPPING.keys())

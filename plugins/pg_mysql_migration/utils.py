"""
Utility functions for the migration plugins.

This module provides identifier validation and quoting for the two SQL
dialects, plus small helpers used in log output and reports.
"""

import fnmatch
import json
import re
from typing import Any, Iterable

from pg_mysql_migration.value_normalizer import ValueKind, classify_value


def validate_sql_identifier(identifier: str, identifier_type: str = "identifier") -> str:
    """
    Validate SQL identifiers before they are interpolated into queries.

    Args:
        identifier: The identifier to validate
        identifier_type: Type description for error messages (e.g., "table name", "schema")

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        ValueError: If the identifier is invalid

    Rules:
        - Non-empty
        - Max 64 characters (MySQL limit; PostgreSQL allows 63 bytes)
        - Must start with letter or underscore
        - Can contain only alphanumeric characters, underscores and '$'

    Examples:
        >>> validate_sql_identifier("users")
        'users'
        >>> validate_sql_identifier("order_items_2023")
        'order_items_2023'
        >>> validate_sql_identifier("drop; --")  # doctest: +SKIP
        ValueError: Invalid identifier 'drop; --': ...
    """
    if not identifier:
        raise ValueError(f"Invalid {identifier_type}: cannot be empty")

    if len(identifier) > 64:
        raise ValueError(
            f"Invalid {identifier_type}: exceeds maximum length of 64 characters "
            f"(got {len(identifier)} characters)"
        )

    if not re.match(r'^[a-zA-Z_][a-zA-Z0-9_$]*$', identifier):
        raise ValueError(
            f"Invalid {identifier_type} '{identifier}': must start with letter or underscore "
            "and contain only alphanumeric characters and underscores"
        )

    return identifier


def quote_pg_identifier(identifier: str) -> str:
    """
    Quote a PostgreSQL identifier.

    >>> quote_pg_identifier('users')
    '"users"'
    >>> quote_pg_identifier('we"ird')
    '"we""ird"'
    """
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def quote_mysql_identifier(identifier: str) -> str:
    """
    Quote a MySQL identifier with backticks.

    >>> quote_mysql_identifier('order')
    '`order`'
    >>> quote_mysql_identifier('we`ird')
    '`we``ird`'
    """
    escaped = identifier.replace('`', '``')
    return f'`{escaped}`'


def matches_any_pattern(name: str, patterns: Iterable[str]) -> bool:
    """Case-insensitive wildcard match of a table name against exclude patterns."""
    lowered = name.lower()
    return any(fnmatch.fnmatch(lowered, pattern.lower()) for pattern in patterns)


def truncate_string(s: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Examples:
        >>> truncate_string("short")
        'short'
        >>> truncate_string("a" * 150, max_length=20)
        'aaaaaaaaaaaaaaaaa...'
    """
    if len(s) <= max_length:
        return s
    return s[:max_length - len(suffix)] + suffix


def format_value_for_display(value: Any) -> str:
    """Render a database value for log lines and reports."""
    kind = classify_value(value)
    if kind is ValueKind.NULL:
        return 'null'
    if kind in (ValueKind.TEMPORAL, ValueKind.TIME):
        return value.isoformat()
    if kind is ValueKind.STRUCTURED:
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            return str(value)
    if kind is ValueKind.BINARY:
        return '0x' + bytes(value).hex()
    return str(value)

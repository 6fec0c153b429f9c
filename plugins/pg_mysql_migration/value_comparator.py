"""
Value Equivalence Module

Decides whether a source value and a (normalized) target value should be
considered the same after migration, and compares whole rows column by
column.
"""

import json
import logging
from datetime import timedelta
from typing import Any, Dict, List

from pg_mysql_migration.models import ComparisonOutcome, MismatchKind
from pg_mysql_migration.utils import format_value_for_display
from pg_mysql_migration.value_normalizer import (
    ValueKind,
    as_aware_datetime,
    classify_value,
    normalize_value,
    parse_temporal,
)

logger = logging.getLogger(__name__)

# Absorbs timezone normalization differences between the two engines
DATE_TOLERANCE_MS = 86_400_000

TIMESTAMP_COLUMN_MARKERS = ('_at', 'date')


def _within_tolerance(value1: Any, value2: Any) -> bool:
    first = as_aware_datetime(value1)
    second = as_aware_datetime(value2)
    if first is None or second is None:
        return False
    try:
        delta = abs(first - second)
    except (TypeError, OverflowError):
        return False
    return delta <= timedelta(milliseconds=DATE_TOLERANCE_MS)


def are_strictly_equal(value1: Any, value2: Any) -> bool:
    """
    Identity, or equality between two values of the same kind.

    Structured values are only strictly equal when they are the same object;
    their contents are compared by serialization in are_objects_equal.
    """
    if value1 is value2:
        return True

    kind = classify_value(value1)
    if kind is not classify_value(value2) or kind is ValueKind.STRUCTURED:
        return False

    if kind is ValueKind.BINARY:
        return bytes(value1) == bytes(value2)

    if kind is ValueKind.TEMPORAL:
        # Aware and naive datetimes never compare equal with ==
        return as_aware_datetime(value1) == as_aware_datetime(value2)

    try:
        return bool(value1 == value2)
    except (TypeError, ValueError, ArithmeticError):
        return False


def are_dates_equal(value1: Any, value2: Any) -> bool:
    """Both values are date/times no more than 24 hours apart."""
    if classify_value(value1) is not ValueKind.TEMPORAL or classify_value(value2) is not ValueKind.TEMPORAL:
        return False
    return _within_tolerance(value1, value2)


def are_objects_equal(value1: Any, value2: Any) -> bool:
    """
    Both values are structured and serialize to identical JSON.

    Serialization keeps key order, so {"a": 1, "b": 2} and {"b": 2, "a": 1}
    are NOT equal. This is a known limitation of serialization-based
    equality.
    """
    if classify_value(value1) is not ValueKind.STRUCTURED or classify_value(value2) is not ValueKind.STRUCTURED:
        return False

    try:
        return json.dumps(value1) == json.dumps(value2)
    except (TypeError, ValueError):
        return False


def is_timestamp_column(column_name: str) -> bool:
    return any(marker in column_name for marker in TIMESTAMP_COLUMN_MARKERS)


def are_timestamp_strings_equal(value1: Any, value2: Any, column_name: str) -> bool:
    """
    Both values are timestamp strings no more than 24 hours apart.

    Only applies to columns whose name contains ``_at`` or ``date``.
    """
    if classify_value(value1) is not ValueKind.TEXT or classify_value(value2) is not ValueKind.TEXT:
        return False

    if not is_timestamp_column(column_name):
        return False

    first = parse_temporal(value1)
    second = parse_temporal(value2)
    if first is None or second is None:
        return False

    return _within_tolerance(first, second)


def are_values_equal(value1: Any, value2: Any, column_name: str) -> bool:
    """
    Check whether two values are equal enough to consider a migration faithful.

    Args:
        value1: Source value
        value2: Target value, already normalized against value1
        column_name: Column the values belong to

    Returns:
        True if the values are considered equivalent
    """
    if are_strictly_equal(value1, value2):
        return True

    if value1 is None and value2 is None:
        return True

    if are_dates_equal(value1, value2):
        return True

    if are_objects_equal(value1, value2):
        return True

    if are_timestamp_strings_equal(value1, value2, column_name):
        return True

    return False


def classify_mismatch(source_value: Any, target_value: Any) -> MismatchKind:
    """type_mismatch when both values are present but of different kinds."""
    source_kind = classify_value(source_value)
    target_kind = classify_value(target_value)
    if ValueKind.NULL in (source_kind, target_kind) or source_kind is target_kind:
        return MismatchKind.DIFFERENT
    return MismatchKind.TYPE_MISMATCH


def compare_row(
    source_row: Dict[str, Any],
    target_row: Dict[str, Any],
    table_name: str
) -> List[ComparisonOutcome]:
    """
    Compare every source column of a row against the matching target row.

    Columns present only in the target row are ignored. Comparison stops at
    the first unequal column, which is the last outcome in the returned list.

    Args:
        source_row: Row from the source database
        target_row: Row with the same identity key from the target database
        table_name: Table name for logging

    Returns:
        Per-column comparison outcomes
    """
    outcomes = []

    for column, source_value in source_row.items():
        target_value = target_row.get(column)
        normalized = normalize_value(target_value, source_value)
        equal = are_values_equal(source_value, normalized, column)
        outcomes.append(ComparisonOutcome(column, equal, source_value, normalized))

        if not equal:
            logger.warning(
                f"✗ Data mismatch in {table_name}.{column} for id {source_row.get('id')}: "
                f"source={format_value_for_display(source_value)} ({type(source_value).__name__}), "
                f"target={format_value_for_display(normalized)} ({type(normalized).__name__})"
            )
            break

    return outcomes


def rows_match(source_row: Dict[str, Any], target_row: Dict[str, Any], table_name: str) -> bool:
    return all(outcome.equal for outcome in compare_row(source_row, target_row, table_name))

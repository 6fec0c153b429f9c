"""
Value Normalization Module

PostgreSQL and MySQL persist the same logical value in different native
forms: MySQL BOOLEAN columns come back as 0/1, JSON columns as text, and
DATETIME values may arrive as strings. Before comparing a migrated value
with its source, the target value is reshaped toward the source value's
representation.

The reference value's runtime kind drives the reshape; declared column
types are not available on the row comparison path.
"""

import json
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import pendulum

logger = logging.getLogger(__name__)

# Bare times of day such as 10:30 or 10:30:00.123456
TIME_OF_DAY_PATTERN = re.compile(r"^\s*T?\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?\s*$")


class ValueKind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"
    TEMPORAL = "temporal"
    TIME = "time"
    STRUCTURED = "structured"
    BINARY = "binary"
    OTHER = "other"


def classify_value(value: Any) -> ValueKind:
    """Classify a database value by its runtime representation."""
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (datetime, date)):
        return ValueKind.TEMPORAL
    if isinstance(value, time):
        return ValueKind.TIME
    if isinstance(value, (dict, list)):
        return ValueKind.STRUCTURED
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    return ValueKind.OTHER


def parse_temporal(text: str) -> Optional[datetime]:
    """
    Parse a date/time string, returning None when it is not one.

    Date-only strings become midnight of that day. Strings without a date
    part (bare times of day) are rejected rather than pinned to today.
    """
    if TIME_OF_DAY_PATTERN.match(text):
        return None

    try:
        parsed = pendulum.parse(text, strict=False, exact=True)
    except (ValueError, TypeError, OverflowError):
        return None

    if isinstance(parsed, datetime):
        return parsed
    if isinstance(parsed, date):
        return pendulum.datetime(parsed.year, parsed.month, parsed.day)
    # Durations and bare times are not points in time
    return None


def parse_time_of_day(text: str) -> Optional[time]:
    """Parse an ``HH:MM[:SS[.ffffff]]`` string into a naive time."""
    if not TIME_OF_DAY_PATTERN.match(text):
        return None

    try:
        parsed = pendulum.parse(text.strip(), strict=False, exact=True)
    except (ValueError, TypeError, OverflowError):
        return None

    if isinstance(parsed, time):
        return time(parsed.hour, parsed.minute, parsed.second, parsed.microsecond)
    return None


def timedelta_to_time(value: timedelta) -> Optional[time]:
    """
    Convert a MySQL TIME value, which MySQLdb returns as a timedelta, to a time.

    MySQL TIME spans -838:59:59 to 838:59:59; only values inside one day are
    times of day. Anything else returns None.
    """
    if value < timedelta(0) or value >= timedelta(days=1):
        return None
    return (datetime.min + value).time()


def as_aware_datetime(value: Any) -> Optional[datetime]:
    """
    Convert a temporal value to a timezone-aware datetime.

    Naive datetimes are taken to be UTC; plain dates become midnight UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return None


def normalize_value(value: Any, reference_value: Any) -> Any:
    """
    Reshape a target-side value toward the representation of its source value.

    Rules, first match wins:

    1. either value is null: return ``value`` unchanged
    2. reference is a boolean: ``value is True or value == 1``
    3. reference is a date/time and ``value`` a string: parse it
    3b. reference is a time of day: a timedelta (MySQL TIME) or an
        ``HH:MM:SS`` string becomes a time
    4. reference is structured (dict/list) and ``value`` a string: parse JSON
    5. reference is a string and ``value`` structured: parse the *reference*
       as JSON instead. This normalizes the wrong side; it is kept because
       callers are not consistent about which side is source and which is
       target.
    6. otherwise return ``value`` unchanged

    Never raises; parse failures pass the input through.

    Args:
        value: Value read from the target database
        reference_value: Corresponding value read from the source database

    Returns:
        The normalized value
    """
    value_kind = classify_value(value)
    reference_kind = classify_value(reference_value)

    if value_kind is ValueKind.NULL or reference_kind is ValueKind.NULL:
        return value

    if reference_kind is ValueKind.BOOLEAN:
        return value is True or _equals_one(value)

    if reference_kind is ValueKind.TEMPORAL:
        if value_kind is ValueKind.TEXT:
            parsed = parse_temporal(value)
            return parsed if parsed is not None else value
        return value

    if reference_kind is ValueKind.TIME:
        if isinstance(value, timedelta):
            converted = timedelta_to_time(value)
            return converted if converted is not None else value
        if value_kind is ValueKind.TEXT:
            parsed_time = parse_time_of_day(value)
            return parsed_time if parsed_time is not None else value
        return value

    if reference_kind is ValueKind.STRUCTURED and value_kind is ValueKind.TEXT:
        try:
            return json.loads(value)
        except ValueError:
            return value

    if reference_kind is ValueKind.TEXT and value_kind is ValueKind.STRUCTURED:
        try:
            return json.loads(reference_value)
        except ValueError:
            return reference_value

    return value


def _equals_one(value: Any) -> bool:
    if classify_value(value) is not ValueKind.NUMBER:
        return False
    try:
        return value == 1
    except (TypeError, ArithmeticError):
        return False

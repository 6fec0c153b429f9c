"""
Tests for Value Equivalence Module

These tests cover the equality cascade used to decide whether a migrated
value matches its source, plus row comparison and mismatch classification.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest
from pg_mysql_migration.models import MismatchKind
from pg_mysql_migration.value_comparator import (
    DATE_TOLERANCE_MS,
    are_dates_equal,
    are_objects_equal,
    are_strictly_equal,
    are_timestamp_strings_equal,
    are_values_equal,
    classify_mismatch,
    compare_row,
    is_timestamp_column,
    rows_match,
)


class TestStrictEquality:

    @pytest.mark.parametrize("value", [
        None,
        True,
        0,
        3.14,
        Decimal("10.50"),
        "text",
        datetime(2024, 1, 15, 10, 30),
        date(2024, 1, 15),
        {"a": 1},
        [1, 2],
        b"\x00\xff",
    ])
    def test_reflexive(self, value):
        assert are_values_equal(value, value, "any_column")

    def test_int_and_bool_are_different_kinds(self):
        assert not are_strictly_equal(1, True)
        assert not are_values_equal(1, True, "active")

    def test_numbers_compare_by_value(self):
        assert are_strictly_equal(1, 1.0)
        assert are_strictly_equal(Decimal("2.5"), 2.5)

    def test_number_and_string_differ(self):
        assert not are_values_equal(42, "42", "quantity")

    def test_binary_across_buffer_types(self):
        assert are_strictly_equal(b"\x01\x02", memoryview(b"\x01\x02"))
        assert are_strictly_equal(bytearray(b"\x01"), b"\x01")

    def test_naive_and_utc_datetime_equal(self):
        naive = datetime(2024, 1, 15, 10, 30)
        aware = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert are_strictly_equal(naive, aware)

    def test_structured_equal_contents_not_strict(self):
        assert not are_strictly_equal({"a": 1}, {"a": 1})


class TestDateTolerance:

    def test_tolerance_constant(self):
        assert DATE_TOLERANCE_MS == 86_400_000

    def test_exactly_24_hours_apart_is_equal(self):
        first = datetime(2024, 1, 15, 0, 0)
        second = first + timedelta(milliseconds=86_400_000)
        assert are_dates_equal(first, second)
        assert are_values_equal(first, second, "anything")

    def test_one_millisecond_over_is_not_equal(self):
        first = datetime(2024, 1, 15, 0, 0)
        second = first + timedelta(milliseconds=86_400_001)
        assert not are_dates_equal(first, second)
        assert not are_values_equal(first, second, "anything")

    def test_timezone_shift_within_tolerance(self):
        source = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        target = datetime(2024, 1, 15, 10, 30) - timedelta(hours=5)
        assert are_values_equal(source, target, "updated")

    def test_date_and_datetime(self):
        assert are_dates_equal(date(2024, 1, 15), datetime(2024, 1, 15, 12, 0))

    def test_requires_both_temporal(self):
        assert not are_dates_equal(datetime(2024, 1, 15), "2024-01-15")
        assert not are_dates_equal(None, datetime(2024, 1, 15))


class TestObjectEquality:

    def test_equal_contents(self):
        assert are_objects_equal({"a": 1, "b": [1, 2]}, {"a": 1, "b": [1, 2]})
        assert are_values_equal([{"x": 1}], [{"x": 1}], "items")

    def test_key_order_matters(self):
        """Serialization-based equality is sensitive to key order."""
        assert not are_objects_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})
        assert not are_values_equal({"a": 1, "b": 2}, {"b": 2, "a": 1}, "payload")

    def test_unserializable_is_not_equal(self):
        assert not are_objects_equal({"a": object()}, {"a": object()})

    def test_requires_both_structured(self):
        assert not are_objects_equal({"a": 1}, '{"a": 1}')


class TestTimestampStrings:

    @pytest.mark.parametrize("name", ["created_at", "updated_at", "birth_date", "date", "datetime"])
    def test_timestamp_column_names(self, name):
        assert is_timestamp_column(name)

    @pytest.mark.parametrize("name", ["name", "status", "at", "total"])
    def test_other_column_names(self, name):
        assert not is_timestamp_column(name)

    def test_strings_within_tolerance_on_timestamp_column(self):
        assert are_timestamp_strings_equal(
            "2024-01-15T10:30:00Z", "2024-01-15 15:30:00", "created_at"
        )
        assert are_values_equal("2024-01-15T10:30:00Z", "2024-01-15 15:30:00", "created_at")

    def test_same_strings_on_other_column_are_not_lenient(self):
        assert not are_values_equal("2024-01-15T10:30:00Z", "2024-01-15 15:30:00", "label")

    def test_strings_beyond_tolerance(self):
        assert not are_timestamp_strings_equal(
            "2024-01-15T00:00:00Z", "2024-01-17T00:00:00Z", "created_at"
        )

    def test_unparsable_strings(self):
        assert not are_timestamp_strings_equal("soon", "later", "created_at")


class TestClassifyMismatch:

    def test_same_kind_is_different(self):
        assert classify_mismatch("a", "b") is MismatchKind.DIFFERENT
        assert classify_mismatch(1, 2) is MismatchKind.DIFFERENT

    def test_different_kinds_is_type_mismatch(self):
        assert classify_mismatch(1, "1") is MismatchKind.TYPE_MISMATCH
        assert classify_mismatch({"a": 1}, '{"a": 1}') is MismatchKind.TYPE_MISMATCH

    def test_null_side_is_different(self):
        assert classify_mismatch(None, 1) is MismatchKind.DIFFERENT
        assert classify_mismatch("x", None) is MismatchKind.DIFFERENT


class TestCompareRow:

    def test_time_row_passes_against_mysql_timedelta(self):
        assert rows_match(
            {'id': 1, 'start_time': time(10, 30)},
            {'id': 1, 'start_time': timedelta(hours=10, minutes=30)},
            'shifts',
        )
        assert not rows_match(
            {'id': 1, 'start_time': time(10, 30)},
            {'id': 1, 'start_time': timedelta(hours=11)},
            'shifts',
        )

    def test_boolean_row_passes_after_normalization(self):
        outcomes = compare_row({'id': 1, 'active': True}, {'id': 1, 'active': 1}, 'users')

        assert [o.column for o in outcomes] == ['id', 'active']
        assert all(o.equal for o in outcomes)
        assert outcomes[1].normalized_target_value is True

    def test_json_text_row_passes(self):
        assert rows_match(
            {'id': 1, 'settings': {'theme': 'dark'}},
            {'id': 1, 'settings': '{"theme": "dark"}'},
            'users',
        )

    def test_stops_at_first_mismatch(self, caplog):
        outcomes = compare_row(
            {'id': 1, 'name': 'Ann', 'email': 'ann@example.com'},
            {'id': 1, 'name': 'Anne', 'email': 'other@example.com'},
            'users',
        )

        assert len(outcomes) == 2
        assert outcomes[-1].column == 'name'
        assert not outcomes[-1].equal
        assert "Data mismatch in users.name" in caplog.text

    def test_extra_target_columns_ignored(self):
        assert rows_match({'id': 1}, {'id': 1, 'extra': 'x'}, 'users')

    def test_missing_target_column_fails(self):
        assert not rows_match({'id': 1, 'name': 'Ann'}, {'id': 1}, 'users')

"""
Tests for identifier and display helpers
"""

from datetime import date, datetime, time

import pytest
from pg_mysql_migration.utils import (
    format_value_for_display,
    matches_any_pattern,
    quote_mysql_identifier,
    quote_pg_identifier,
    truncate_string,
    validate_sql_identifier,
)


class TestValidateSqlIdentifier:

    @pytest.mark.parametrize("identifier", ["users", "_private", "order_items_2023", "a$b"])
    def test_valid(self, identifier):
        assert validate_sql_identifier(identifier) == identifier

    @pytest.mark.parametrize("identifier", [
        "",
        "1users",
        "users; DROP TABLE users--",
        "my table",
        'we"ird',
        "a" * 65,
    ])
    def test_invalid(self, identifier):
        with pytest.raises(ValueError):
            validate_sql_identifier(identifier, "table name")


def test_quote_pg_identifier():
    assert quote_pg_identifier("users") == '"users"'
    assert quote_pg_identifier('we"ird') == '"we""ird"'


def test_quote_mysql_identifier():
    assert quote_mysql_identifier("order") == "`order`"
    assert quote_mysql_identifier("we`ird") == "`we``ird`"


def test_matches_any_pattern():
    assert matches_any_pattern("strapi_users", ["strapi_*"])
    assert matches_any_pattern("Strapi_Users", ["STRAPI_*"])
    assert not matches_any_pattern("users", ["strapi_*"])
    assert not matches_any_pattern("users", [])


def test_truncate_string():
    assert truncate_string("short") == "short"
    assert truncate_string("a" * 150, max_length=20) == "a" * 17 + "..."


class TestFormatValueForDisplay:

    def test_formats(self):
        assert format_value_for_display(None) == 'null'
        assert format_value_for_display(datetime(2024, 1, 15, 10, 30)) == '2024-01-15T10:30:00'
        assert format_value_for_display(date(2024, 1, 15)) == '2024-01-15'
        assert format_value_for_display(time(10, 30)) == '10:30:00'
        assert format_value_for_display({"a": 1}) == '{"a": 1}'
        assert format_value_for_display(b"\x01\xff") == '0x01ff'
        assert format_value_for_display(5) == '5'
        assert format_value_for_display(True) == 'True'

    def test_nested_values_use_str(self):
        assert format_value_for_display({"at": date(2024, 1, 15)}) == '{"at": "2024-01-15"}'

    def test_circular_structure_falls_back_to_str(self):
        value = []
        value.append(value)
        assert format_value_for_display(value) == '[[...]]'

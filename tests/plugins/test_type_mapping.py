"""
Tests for PostgreSQL to MySQL Type Mapping Module

These tests validate the type table, the fallback for unknown types,
default expression mapping and the key-column widening policy.
"""

import pytest
from pg_mysql_migration.models import ColumnDescriptor
from pg_mysql_migration.type_mapping import (
    map_type,
    map_column,
    map_default_value,
    widen_key_type,
    is_key_column,
    validate_type_mapping,
    get_supported_types,
)


class TestMapType:
    """Test PostgreSQL to MySQL type mapping."""

    @pytest.mark.parametrize("pg_type,expected", [
        ("bigint", "BIGINT"),
        ("integer", "BIGINT"),
        ("smallint", "SMALLINT"),
        ("boolean", "BOOLEAN"),
        ("text", "TEXT"),
        ("timestamp without time zone", "DATETIME"),
        ("timestamp with time zone", "DATETIME"),
        ("date", "DATE"),
        ("time", "TIME"),
        ("real", "FLOAT"),
        ("double precision", "DOUBLE"),
        ("json", "JSON"),
        ("jsonb", "JSON"),
        ("uuid", "VARCHAR(36)"),
        ("bytea", "LONGBLOB"),
    ])
    def test_fixed_mappings(self, pg_type, expected):
        assert map_type(pg_type) == expected

    def test_varchar_with_length(self):
        assert map_type("character varying", max_length=255) == "VARCHAR(255)"
        assert map_type("varchar", max_length=50) == "VARCHAR(50)"

    def test_varchar_without_length_becomes_text(self):
        """Unbounded varchar maps to TEXT."""
        assert map_type("character varying") == "TEXT"
        assert map_type("character varying", max_length=None) == "TEXT"

    def test_numeric_with_precision_and_scale(self):
        assert map_type("numeric", precision=10, scale=2) == "DECIMAL(10,2)"
        assert map_type("decimal", precision=18, scale=4) == "DECIMAL(18,4)"

    def test_numeric_with_zero_scale(self):
        assert map_type("numeric", precision=12, scale=0) == "DECIMAL(12,0)"

    def test_numeric_without_precision_uses_default(self):
        assert map_type("numeric") == "DECIMAL(10,2)"
        assert map_type("numeric", precision=10) == "DECIMAL(10,2)"
        assert map_type("numeric", scale=3) == "DECIMAL(10,2)"

    def test_case_and_whitespace_insensitive(self):
        assert map_type("  BIGINT ") == "BIGINT"
        assert map_type("Character Varying", max_length=10) == "VARCHAR(10)"

    def test_unknown_type_falls_back_to_text(self, caplog):
        """Unknown types map to TEXT and log a warning."""
        assert map_type("inet") == "TEXT"
        assert map_type("integer[]") == "TEXT"
        assert "Unknown PostgreSQL type 'inet'" in caplog.text

    def test_empty_type_falls_back(self):
        assert map_type("") == "TEXT"
        assert map_type(None) == "TEXT"


class TestKeyWidening:
    """Test identity and foreign-key column widening."""

    @pytest.mark.parametrize("name", ["id", "ID", "user_id", "Parent_Id"])
    def test_key_columns(self, name):
        assert is_key_column(name)

    @pytest.mark.parametrize("name", ["identity", "uuid", "idx", "paid"])
    def test_non_key_columns(self, name):
        assert not is_key_column(name)

    @pytest.mark.parametrize("mysql_type", ["INT", "INTEGER", "SMALLINT", "MEDIUMINT", "TINYINT"])
    def test_narrow_integers_widened(self, mysql_type):
        assert widen_key_type("user_id", mysql_type) == "BIGINT"

    def test_non_key_column_unchanged(self):
        assert widen_key_type("quantity", "SMALLINT") == "SMALLINT"

    def test_non_integer_key_unchanged(self):
        assert widen_key_type("id", "VARCHAR(36)") == "VARCHAR(36)"
        assert widen_key_type("id", "BIGINT") == "BIGINT"


class TestMapDefaultValue:
    """Test PostgreSQL default expression mapping."""

    def test_none_and_empty(self):
        assert map_default_value(None) is None
        assert map_default_value("") is None

    def test_sequence_default_becomes_auto_increment(self):
        assert map_default_value("nextval('users_id_seq'::regclass)") == "AUTO_INCREMENT"

    def test_now_functions(self):
        assert map_default_value("now()") == "CURRENT_TIMESTAMP"
        assert map_default_value("CURRENT_TIMESTAMP") == "CURRENT_TIMESTAMP"

    def test_current_date(self):
        assert map_default_value("CURRENT_DATE") == "(CURRENT_DATE)"

    def test_casted_string_literal(self):
        assert map_default_value("'active'::character varying") == "'active'"

    def test_casted_numeric_literal(self):
        assert map_default_value("'0'::numeric") == "'0'"
        assert map_default_value("(0)::numeric") == "0"

    def test_literals(self):
        assert map_default_value("42") == "42"
        assert map_default_value("-1.5") == "-1.5"
        assert map_default_value("'pending'") == "'pending'"
        assert map_default_value("true") == "TRUE"
        assert map_default_value("false") == "FALSE"
        assert map_default_value("NULL") == "NULL"

    def test_unmappable_expression(self, caplog):
        assert map_default_value("gen_random_uuid()") is None
        assert "Cannot map default value" in caplog.text


class TestMapColumn:
    """Test complete column mapping."""

    def test_serial_id_column(self):
        column = ColumnDescriptor(
            table="users",
            name="id",
            native_type="integer",
            nullable=False,
            default_expr="nextval('users_id_seq'::regclass)",
        )
        result = map_column(column)

        assert result == {
            'column_name': 'id',
            'data_type': 'BIGINT',
            'is_nullable': False,
            'default_value': None,
            'auto_increment': True,
        }

    def test_varchar_with_default(self):
        column = ColumnDescriptor(
            table="users",
            name="status",
            native_type="character varying",
            max_length=20,
            default_expr="'active'::character varying",
        )
        result = map_column(column)

        assert result['data_type'] == 'VARCHAR(20)'
        assert result['default_value'] == "'active'"
        assert result['is_nullable'] is True

    def test_foreign_key_smallint_widened(self):
        column = ColumnDescriptor(table="orders", name="region_id", native_type="smallint")
        assert map_column(column)['data_type'] == 'BIGINT'

    def test_json_literal_default_dropped(self, caplog):
        """MySQL rejects literal defaults on JSON/TEXT columns."""
        column = ColumnDescriptor(
            table="users",
            name="settings",
            native_type="jsonb",
            default_expr="'{}'::jsonb",
        )
        result = map_column(column)

        assert result['data_type'] == 'JSON'
        assert result['default_value'] is None
        assert "Dropping default" in caplog.text

    def test_timestamp_default(self):
        column = ColumnDescriptor(
            table="users",
            name="created_at",
            native_type="timestamp without time zone",
            default_expr="now()",
        )
        result = map_column(column)

        assert result['data_type'] == 'DATETIME'
        assert result['default_value'] == 'CURRENT_TIMESTAMP'


class TestTypeCoverage:

    def test_validate_type_mapping(self):
        assert validate_type_mapping("jsonb")
        assert validate_type_mapping(" Integer ")
        assert not validate_type_mapping("tsvector")

    def test_supported_types(self):
        supported = get_supported_types()
        assert "timestamp with time zone" in supported
        assert "bytea" in supported
        assert len(supported) == len(set(supported))

"""
Tests for MySQL DDL Generation Module
"""

import pytest
from unittest.mock import Mock
from pg_mysql_migration.ddl_generator import DDLGenerator, TABLE_OPTIONS
from pg_mysql_migration.models import ColumnDescriptor, TableSnapshot


@pytest.fixture
def users_snapshot():
    return TableSnapshot.from_columns("users", [
        ColumnDescriptor(
            table="users", name="email", native_type="character varying",
            nullable=False, max_length=255, ordinal_position=2,
        ),
        ColumnDescriptor(
            table="users", name="id", native_type="integer", nullable=False,
            default_expr="nextval('users_id_seq'::regclass)", ordinal_position=1,
        ),
        ColumnDescriptor(
            table="users", name="is_admin", native_type="boolean",
            default_expr="false", ordinal_position=3,
        ),
    ])


class TestGenerateCreateTable:

    def test_create_table(self, users_snapshot):
        ddl = DDLGenerator().generate_create_table(users_snapshot)

        assert ddl == (
            "CREATE TABLE `users` (\n"
            "    `id` BIGINT NOT NULL AUTO_INCREMENT,\n"
            "    `email` VARCHAR(255) NOT NULL,\n"
            "    `is_admin` BOOLEAN NULL DEFAULT FALSE,\n"
            "    PRIMARY KEY (`id`)\n"
            f") {TABLE_OPTIONS}"
        )

    def test_no_primary_key_without_id(self):
        snapshot = TableSnapshot.from_columns("tags", [
            ColumnDescriptor(table="tags", name="label", native_type="text"),
        ])

        ddl = DDLGenerator().generate_create_table(snapshot)

        assert "PRIMARY KEY" not in ddl
        assert "`label` TEXT NULL" in ddl

    def test_identifiers_quoted(self):
        snapshot = TableSnapshot.from_columns("order", [
            ColumnDescriptor(table="order", name="group", native_type="text"),
        ])

        ddl = DDLGenerator().generate_create_table(snapshot)

        assert ddl.startswith("CREATE TABLE `order` (")
        assert "`group` TEXT" in ddl


class TestGenerateCompleteDDL:

    def test_drop_then_create(self, users_snapshot):
        statements = DDLGenerator().generate_complete_ddl(users_snapshot)

        assert statements[0] == "DROP TABLE IF EXISTS `users`"
        assert statements[1].startswith("CREATE TABLE `users`")

    def test_without_drop(self, users_snapshot):
        statements = DDLGenerator().generate_complete_ddl(users_snapshot, drop_if_exists=False)

        assert len(statements) == 1


class TestCreateTables:

    def test_requires_writer(self, users_snapshot):
        with pytest.raises(ValueError):
            DDLGenerator().create_tables([users_snapshot])

    def test_continues_past_failures(self, users_snapshot):
        writer = Mock()
        writer.execute_ddl.side_effect = [Exception("syntax error"), None]
        orders = TableSnapshot.from_columns("orders", [
            ColumnDescriptor(table="orders", name="id", native_type="bigint"),
        ])
        empty = TableSnapshot("ghost")

        result = DDLGenerator(writer).create_tables([users_snapshot, empty, orders])

        assert result['created'] == ['orders']
        assert result['failed'] == [
            {'table_name': 'users', 'error': 'syntax error'},
            {'table_name': 'ghost', 'error': 'no columns'},
        ]
        assert writer.execute_ddl.call_count == 2

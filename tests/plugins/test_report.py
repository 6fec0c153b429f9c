"""
Tests for Validation Report Sinks
"""

import json

import pytest
from pg_mysql_migration.models import (
    CountReconciliationResult,
    SchemaDiffResult,
    SchemaStatus,
    ValidationSummary,
)
from pg_mysql_migration.report import CollectingReportSink, JsonReportSink, ReportSink


@pytest.fixture
def summary():
    return ValidationSummary(
        count_results=(CountReconciliationResult('users', 10, 9, False),),
        schema_results=(SchemaDiffResult('users', SchemaStatus.OK),),
    )


def test_base_sink_requires_emit():
    with pytest.raises(NotImplementedError):
        ReportSink().emit("record")


def test_collecting_sink(summary):
    sink = CollectingReportSink()
    sink.emit(summary.count_results[0])
    sink.finalize(summary)

    assert sink.records == [summary.count_results[0]]
    assert sink.summary is summary


def test_json_sink_writes_report(tmp_path, summary):
    output = tmp_path / "reports" / "validation.json"
    sink = JsonReportSink(str(output))
    sink.emit(summary.count_results[0])
    sink.emit(summary.schema_results[0])

    sink.finalize(summary)

    report = json.loads(output.read_text(encoding='utf-8'))
    assert report['record_count'] == 2
    assert report['is_valid'] is False
    assert report['table_counts'][0] == {
        'table': 'users',
        'source_count': 10,
        'target_count': 9,
        'row_difference': -1,
        'match': False,
    }
    assert report['summary']['tables_with_valid_schema'] == 1
    assert 'validation_date' in report

"""
Migration Reconciliation Data Model

Value objects shared by the type mapper, schema diff, and row reconciliation
modules. All of them are immutable and live for a single migration or
validation run; ``to_dict()`` renders them for XCom and the JSON report.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pg_mysql_migration.utils import format_value_for_display


class SchemaStatus(str, Enum):
    OK = "ok"
    TABLE_MISSING = "table_missing"
    COLUMN_MISSING = "column_missing"
    ERROR = "error"


class MismatchKind(str, Enum):
    MISSING = "missing"
    DIFFERENT = "different"
    TYPE_MISMATCH = "type_mismatch"


@dataclass(frozen=True)
class ColumnDescriptor:
    """One physical column as reported by a catalog reader."""

    table: str
    name: str
    native_type: str
    nullable: bool = True
    default_expr: Optional[str] = None
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    ordinal_position: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TableSnapshot:
    """Columns of one table in declaration order."""

    table_name: str
    columns: Tuple[ColumnDescriptor, ...] = ()

    @classmethod
    def from_columns(cls, table_name: str, columns: List[ColumnDescriptor]) -> "TableSnapshot":
        ordered = sorted(columns, key=lambda c: c.ordinal_position)
        return cls(table_name=table_name, columns=tuple(ordered))

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def has_column(self, name: str) -> bool:
        """Case-insensitive column membership test."""
        wanted = name.lower()
        return any(c.name.lower() == wanted for c in self.columns)


@dataclass(frozen=True)
class SchemaDiffResult:
    table: str
    status: SchemaStatus
    issue: Optional[str] = None
    column: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'table': self.table, 'status': self.status.value}
        if self.issue:
            result['issue'] = self.issue
        if self.column:
            result['column'] = self.column
        return result


@dataclass(frozen=True)
class ComparisonOutcome:
    column: str
    equal: bool
    source_value: Any
    normalized_target_value: Any


@dataclass(frozen=True)
class DataMismatch:
    row_id: Any
    column: Optional[str]
    source_value: Any
    target_value: Any
    kind: MismatchKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row_id': self.row_id,
            'column': self.column,
            'source_value': format_value_for_display(self.source_value),
            'target_value': format_value_for_display(self.target_value),
            'kind': self.kind.value,
        }


@dataclass(frozen=True)
class CountReconciliationResult:
    table: str
    source_count: Optional[int]
    target_count: Optional[int]
    match: bool
    error: Optional[str] = None

    @property
    def row_difference(self) -> Optional[int]:
        if self.source_count is None or self.target_count is None:
            return None
        return self.target_count - self.source_count

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'table': self.table,
            'source_count': self.source_count,
            'target_count': self.target_count,
            'row_difference': self.row_difference,
            'match': self.match,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass(frozen=True)
class SampleValidationResult:
    table: str
    sample_size: int
    validated_records: int
    mismatches: Tuple[DataMismatch, ...] = ()
    passed: bool = True
    error: Optional[str] = None

    @property
    def status(self) -> str:
        return 'passed' if self.passed else 'failed'

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'table': self.table,
            'sample_size': self.sample_size,
            'validated_records': self.validated_records,
            'mismatches': [m.to_dict() for m in self.mismatches],
            'status': self.status,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass(frozen=True)
class ValidationSummary:
    """Outcome of a full validation run, one list per facet."""

    count_results: Tuple[CountReconciliationResult, ...] = ()
    schema_results: Tuple[SchemaDiffResult, ...] = ()
    sample_results: Tuple[SampleValidationResult, ...] = ()
    missing_in_target: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def tables_with_matching_counts(self) -> int:
        return sum(1 for r in self.count_results if r.match)

    def _schema_checked_tables(self) -> set:
        # Tables absent from the target are informational only
        missing = set(self.missing_in_target)
        return {r.table for r in self.schema_results if r.table not in missing}

    @property
    def schema_validated_tables(self) -> int:
        return len(self._schema_checked_tables())

    @property
    def tables_with_valid_schema(self) -> int:
        checked = self._schema_checked_tables()
        return sum(
            1 for r in self.schema_results
            if r.table in checked and r.status == SchemaStatus.OK
        )

    @property
    def tables_with_valid_sample_data(self) -> int:
        return sum(1 for r in self.sample_results if r.passed)

    @property
    def is_valid(self) -> bool:
        counts_ok = self.tables_with_matching_counts == len(self.count_results)
        validated = self.schema_validated_tables
        schema_ok = validated == 0 or self.tables_with_valid_schema == validated
        samples_ok = (
            not self.sample_results
            or self.tables_with_valid_sample_data == len(self.sample_results)
        )
        return counts_ok and schema_ok and samples_ok

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'table_counts': [r.to_dict() for r in self.count_results],
            'schema_validation': [r.to_dict() for r in self.schema_results],
            'sample_data_validation': [r.to_dict() for r in self.sample_results],
            'missing_in_target': list(self.missing_in_target),
            'summary': {
                'total_tables': len(self.count_results),
                'tables_with_matching_counts': self.tables_with_matching_counts,
                'tables_with_valid_schema': self.tables_with_valid_schema,
                'tables_with_valid_sample_data': self.tables_with_valid_sample_data,
            },
        }

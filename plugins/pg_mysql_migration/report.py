"""
Validation Report Sinks

Sinks receive the structured result records of a validation run
(count results, schema diff results, sample validation results) and the
final summary. Rendering them for people is left to whoever consumes the
JSON artifact.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, List, Optional

from pg_mysql_migration.models import ValidationSummary

logger = logging.getLogger(__name__)


class ReportSink:
    """Accepts result records as they are produced."""

    def emit(self, record: Any) -> None:
        raise NotImplementedError

    def finalize(self, summary: ValidationSummary) -> None:
        """Called once with the summary after the last record."""


class CollectingReportSink(ReportSink):
    """Keeps every record in memory."""

    def __init__(self):
        self.records: List[Any] = []
        self.summary: Optional[ValidationSummary] = None

    def emit(self, record: Any) -> None:
        self.records.append(record)

    def finalize(self, summary: ValidationSummary) -> None:
        self.summary = summary


class JsonReportSink(CollectingReportSink):
    """Writes the run as a JSON document when the run is finalized."""

    def __init__(self, output_path: str):
        super().__init__()
        self.output_path = output_path

    def finalize(self, summary: ValidationSummary) -> None:
        super().finalize(summary)

        report = {
            'validation_date': datetime.now(timezone.utc).isoformat(),
            'record_count': len(self.records),
        }
        report.update(summary.to_dict())

        directory = os.path.dirname(self.output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.output_path, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, default=str)

        logger.info(f"Validation report saved to: {self.output_path}")

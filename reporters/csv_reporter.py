from __future__ import annotations

from core.models import ReconciliationReport
from core.serialization import dataset_to_csv
from reporters.base import BaseReporter


class CsvReporter(BaseReporter):
    """Writes the reconciled work file in the shared CSV layout."""

    name = "CSV Reporter"
    output_extension = ".csv"

    def generate(self, report: ReconciliationReport, output_path: str) -> str:
        output_file = self._normalize_output_path(output_path)
        output_file.write_text(dataset_to_csv(report.dataset), encoding="utf-8", newline="")
        return str(output_file)

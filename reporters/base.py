from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from core.models import ReconciliationReport


class BaseReporter(ABC):
    name: str
    output_extension: str
    supports_rich_text: bool = False

    @abstractmethod
    def generate(self, report: ReconciliationReport, output_path: str) -> str:
        raise NotImplementedError

    def _normalize_output_path(self, output_path: str) -> Path:
        output_file = Path(output_path)
        if output_file.suffix.lower() != self.output_extension:
            output_file = output_file.with_suffix(self.output_extension)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        return output_file

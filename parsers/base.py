from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from core.models import Dataset


class BaseParser(ABC):
    name: str
    supported_extensions: list[str]
    format_description: str

    @abstractmethod
    def can_handle(self, filepath: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def parse(self, filepath: str) -> Dataset:
        raise NotImplementedError

    @abstractmethod
    def validate(self, filepath: str) -> list[str]:
        raise NotImplementedError


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def rows_to_dataset(rows: Iterable[Sequence[Any]], source_path: str | None = None) -> Dataset:
    """Build a dataset from a header row followed by data rows.

    Header names are trimmed, cell values are kept as they are. Rows with
    no content at all are skipped and cells past the header are dropped
    with a warning.
    """
    header: list[str] | None = None
    records: list[dict[str, str]] = []
    warnings: list[str] = []
    for line_number, row in enumerate(rows, start=1):
        cells = [cell_text(value) for value in row]
        if not any(cell.strip() for cell in cells):
            continue
        if header is None:
            header = [cell.strip() for cell in cells]
            while header and not header[-1]:
                header.pop()
            continue
        if len(cells) > len(header) and any(cell.strip() for cell in cells[len(header):]):
            warnings.append(f"Row {line_number} has more cells than the header; extra cells ignored")
        record = {name: cells[index] if index < len(cells) else "" for index, name in enumerate(header) if name}
        records.append(record)

    dataset = Dataset.from_records(records, columns=header or [], source_path=source_path)
    dataset.warnings.extend(warnings)
    return dataset

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import openpyxl

from config import STANDARD_COLUMNS
from core.models import Dataset, ParseError
from parsers.base import BaseParser, rows_to_dataset


logger = logging.getLogger(__name__)


def headers_match(actual: Sequence[Any], expected: Sequence[str]) -> bool:
    """True when the first cells of ``actual`` equal ``expected`` after trimming."""
    if len(actual) < len(expected):
        return False
    for index, name in enumerate(expected):
        cell = actual[index]
        if cell is None or str(cell).strip() != name.strip():
            return False
    return True


def read_sheet_rows(
    filepath: str,
    *,
    expected_headers: Sequence[str] | None = None,
    sheet_index: int = 0,
) -> tuple[str, list[tuple[Any, ...]]]:
    """Cell values of one worksheet.

    With ``expected_headers`` the first sheet whose header row starts with
    those names is used; otherwise the sheet at ``sheet_index``.
    """
    try:
        workbook = openpyxl.load_workbook(filepath, data_only=True, read_only=True)
    except Exception as exc:
        raise ParseError(filepath, str(exc)) from exc

    try:
        if expected_headers:
            for sheet in workbook.worksheets:
                first_row = next(sheet.iter_rows(max_row=1, values_only=True), ())
                if headers_match(first_row, expected_headers):
                    return sheet.title, list(sheet.iter_rows(values_only=True))
            raise ParseError(
                filepath,
                f"No sheet found with expected headers: {', '.join(expected_headers)}",
            )

        if sheet_index < 0 or sheet_index >= len(workbook.worksheets):
            raise ParseError(
                filepath,
                f"Sheet index {sheet_index} out of range. "
                f"Workbook has {len(workbook.worksheets)} sheets.",
            )
        sheet = workbook.worksheets[sheet_index]
        return sheet.title, list(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()


class XlsxParser(BaseParser):
    name = "XLSX Parser"
    supported_extensions = [".xlsx"]
    format_description = "Excel Workbook"

    def __init__(self) -> None:
        self.expected_headers: list[str] | None = list(STANDARD_COLUMNS)
        self.sheet_index = 0

    def can_handle(self, filepath: str) -> bool:
        return Path(filepath).suffix.lower() in self.supported_extensions

    def set_sheet(self, sheet_index: int) -> None:
        """Read a fixed sheet instead of searching by header row."""
        if sheet_index < 0:
            raise ValueError("Sheet index must be >= 0.")
        self.expected_headers = None
        self.sheet_index = sheet_index

    def parse(self, filepath: str) -> Dataset:
        sheet_name, rows = read_sheet_rows(
            filepath,
            expected_headers=self.expected_headers,
            sheet_index=self.sheet_index,
        )
        dataset = rows_to_dataset(rows, source_path=filepath)
        logger.info("Parsed %d rows from sheet '%s' of %s", len(dataset), sheet_name, filepath)
        return dataset

    def validate(self, filepath: str) -> list[str]:
        errors: list[str] = []
        try:
            _ = self.parse(filepath)
        except ParseError as exc:
            errors.append(exc.reason)
        return errors

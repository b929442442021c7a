from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Callable, Sequence

import xlsxwriter

from config import APP_NAME
from core.models import ParseError
from parsers.base import cell_text
from parsers.csv_parser import decode_bytes
from parsers.xlsx_parser import read_sheet_rows


logger = logging.getLogger(__name__)

WORKBOOK_OPTIONS = {
    "strings_to_formulas": False,
    "strings_to_numbers": False,
    "strings_to_urls": False,
}


class SheetConverter:
    """CSV to XLSX and back. Every cell is carried over as text."""

    def __init__(self, on_progress: Callable[[str, float], None] | None = None) -> None:
        self.on_progress = on_progress

    def _progress(self, message: str, value: float) -> None:
        if self.on_progress is not None:
            self.on_progress(message, value)

    def csv_to_xlsx(
        self,
        csv_path: str,
        output_path: str,
        *,
        title: str = "Data",
        sheet_name: str = "Sheet1",
    ) -> str:
        source = Path(csv_path)
        try:
            raw = source.read_bytes()
        except OSError as exc:
            raise ParseError(csv_path, str(exc)) from exc

        self._progress("Reading CSV", 0.1)
        text, _ = decode_bytes(raw)
        try:
            rows = list(csv.reader(io.StringIO(text, newline=""), strict=True))
        except csv.Error as exc:
            raise ParseError(csv_path, str(exc)) from exc
        if not rows:
            raise ParseError(csv_path, "CSV file is empty")

        self._progress("Writing workbook", 0.4)
        output_file = Path(output_path)
        if output_file.suffix.lower() != ".xlsx":
            output_file = output_file.with_suffix(".xlsx")
        output_file.parent.mkdir(parents=True, exist_ok=True)
        workbook = xlsxwriter.Workbook(str(output_file), WORKBOOK_OPTIONS)
        try:
            workbook.set_properties({"title": title, "comments": f"Created by {APP_NAME}"})
            worksheet = workbook.add_worksheet(sheet_name)
            wrap_format = workbook.add_format({"text_wrap": True})
            for row_index, row in enumerate(rows):
                for col_index, value in enumerate(row):
                    worksheet.write_string(row_index, col_index, value, wrap_format)
            worksheet.freeze_panes(1, 0)
        finally:
            workbook.close()

        self._progress("Done", 1.0)
        logger.info("Converted %s to %s (%d rows)", csv_path, output_file, len(rows))
        return str(output_file)

    def xlsx_to_csv(
        self,
        xlsx_path: str,
        output_path: str,
        *,
        expected_headers: Sequence[str] | None = None,
        sheet_index: int = 0,
    ) -> str:
        self._progress("Reading workbook", 0.1)
        sheet_name, rows = read_sheet_rows(
            xlsx_path,
            expected_headers=expected_headers,
            sheet_index=sheet_index,
        )

        self._progress("Writing CSV", 0.7)
        output_file = Path(output_path)
        if output_file.suffix.lower() != ".csv":
            output_file = output_file.with_suffix(".csv")
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with output_file.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            for row in rows:
                writer.writerow([cell_text(value) for value in row])

        self._progress("Done", 1.0)
        logger.info("Converted sheet '%s' of %s to %s", sheet_name, xlsx_path, output_file)
        return str(output_file)


def csv_to_xlsx(csv_path: str, output_path: str) -> str:
    return SheetConverter().csv_to_xlsx(csv_path, output_path)


def xlsx_to_csv(
    xlsx_path: str,
    output_path: str,
    *,
    expected_headers: Sequence[str] | None = None,
    sheet_index: int = 0,
) -> str:
    return SheetConverter().xlsx_to_csv(
        xlsx_path,
        output_path,
        expected_headers=expected_headers,
        sheet_index=sheet_index,
    )

from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest
from openpyxl.utils import column_index_from_string

from core.models import Dataset, ReconciliationReport
from core.reconciler import reconcile
from parsers.csv_parser import CsvParser
from reporters.excel_reporter import ExcelReporter


FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def fixture_report() -> ReconciliationReport:
    parser = CsvParser()
    master = parser.parse(str(FIXTURES / "master.csv"))
    candidate = parser.parse(str(FIXTURES / "candidate_fr.csv"))
    return reconcile(master, candidate, "French")


def test_excel_reporter_generates_file(tmp_path: Path) -> None:
    output_file = ExcelReporter().generate(fixture_report(), str(tmp_path / "report"))
    output_path = Path(output_file)

    assert output_path.suffix == ".xlsx"
    assert output_path.stat().st_size > 0

    workbook = openpyxl.load_workbook(output_path)
    assert workbook.sheetnames == ["Needs Update", "Needs Translation", "Statistics"]

    update_ws = workbook["Needs Update"]
    assert [cell.value for cell in update_ws[1]] == [
        "#",
        "Term ID",
        "Change",
        "Old English",
        "New English",
        "French",
    ]
    assert update_ws.max_row == 2
    assert update_ws["B2"].value == "T3"
    assert str(update_ws["D2"].value) == "Hello World"
    assert str(update_ws["E2"].value) == "Hello world"
    assert update_ws["F2"].value == "Bonjour le monde"

    missing_ws = workbook["Needs Translation"]
    assert missing_ws["A2"].value == "T5"
    assert missing_ws["B2"].value == "Line one\nLine two"

    stats = {
        row[0]: row[1]
        for row in workbook["Statistics"].iter_rows(values_only=True)
    }
    assert stats["Language"] == "French"
    assert stats["Total"] == 5
    assert stats["Needs update"] == 1
    assert stats["Needs translation"] == 1
    assert stats["Not translatable"] == 1
    assert stats["Warnings"] == 1


def test_excel_reporter_column_widths(tmp_path: Path) -> None:
    report = reconcile(Dataset(), Dataset(), "French")
    output_file = ExcelReporter().generate(report, str(tmp_path / "widths.xlsx"))
    workbook = openpyxl.load_workbook(output_file)
    ws = workbook["Needs Update"]

    widths = {
        "A": 6,
        "B": 22,
        "C": 24,
        "D": 46,
        "E": 46,
        "F": 46,
    }

    width_map: dict[int, float] = {}
    for dim in ws.column_dimensions.values():
        if dim.min is None or dim.max is None or dim.width is None:
            continue
        for idx in range(dim.min, dim.max + 1):
            width_map[idx] = dim.width

    for col, expected in widths.items():
        idx = column_index_from_string(col)
        assert idx in width_map
        assert width_map[idx] == pytest.approx(expected, abs=1.0)


def test_excel_reporter_keeps_formula_like_text(tmp_path: Path) -> None:
    master = Dataset.from_records(
        [{"termID": "T1", "English": "=1+1", "shouldBeTranslated": "TRUE", "French": ""}]
    )
    report = reconcile(master, Dataset(), "French")
    output_file = ExcelReporter().generate(report, str(tmp_path / "formula.xlsx"))

    workbook = openpyxl.load_workbook(output_file)
    assert workbook["Needs Translation"]["B2"].value == "=1+1"

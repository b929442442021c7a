from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest

from core.converter import SheetConverter, csv_to_xlsx, xlsx_to_csv
from core.models import ParseError
from parsers.csv_parser import CsvParser


FIXTURES = Path(__file__).resolve().parent / "fixtures"


def test_csv_to_xlsx_keeps_values_as_text(tmp_path: Path) -> None:
    source = tmp_path / "numbers.csv"
    source.write_text('termID,English\n007,"=SUM(A1)"\n', encoding="utf-8")

    output = csv_to_xlsx(str(source), str(tmp_path / "numbers"))

    assert output.endswith(".xlsx")
    workbook = openpyxl.load_workbook(output)
    sheet = workbook.active
    assert sheet["A2"].value == "007"
    assert sheet["B2"].value == "=SUM(A1)"
    workbook.close()


def test_fixture_round_trip(tmp_path: Path) -> None:
    xlsx_path = csv_to_xlsx(str(FIXTURES / "master.csv"), str(tmp_path / "master.xlsx"))
    csv_path = xlsx_to_csv(xlsx_path, str(tmp_path / "back.csv"))

    source_data = CsvParser().parse(str(FIXTURES / "master.csv"))
    restored = CsvParser().parse(csv_path)

    assert restored.languages == source_data.languages
    assert restored.to_records() == source_data.to_records()


def test_xlsx_to_csv_finds_sheet_by_header(tmp_path: Path) -> None:
    workbook_path = tmp_path / "book.xlsx"
    workbook = openpyxl.Workbook()
    workbook.active.append(["Cover page"])
    terms = workbook.create_sheet("Terms")
    terms.append(["termID", "English"])
    terms.append(["T1", "Hi"])
    workbook.save(workbook_path)

    output = xlsx_to_csv(
        str(workbook_path),
        str(tmp_path / "terms.csv"),
        expected_headers=["termID", "English"],
    )
    assert Path(output).read_text(encoding="utf-8") == "termID,English\nT1,Hi\n"


def test_empty_csv_is_rejected(tmp_path: Path) -> None:
    source = tmp_path / "empty.csv"
    source.write_text("", encoding="utf-8")
    with pytest.raises(ParseError, match="empty"):
        csv_to_xlsx(str(source), str(tmp_path / "empty.xlsx"))


def test_progress_callback(tmp_path: Path) -> None:
    events: list[tuple[str, float]] = []
    converter = SheetConverter(on_progress=lambda message, value: events.append((message, value)))
    converter.csv_to_xlsx(str(FIXTURES / "server_fr.csv"), str(tmp_path / "server.xlsx"))
    assert events[0][1] == 0.1
    assert events[-1] == ("Done", 1.0)

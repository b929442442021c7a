from pathlib import Path

import pytest

from core.models import Flag, ParseError
from parsers.csv_parser import CsvParser, decode_bytes, parse_csv_text


FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_csv_can_handle() -> None:
    parser = CsvParser()
    assert parser.can_handle("terms.csv") is True
    assert parser.can_handle("TERMS.CSV") is True
    assert parser.can_handle("terms.xlsx") is False


def test_csv_parse_fixture() -> None:
    dataset = CsvParser().parse(str(FIXTURES / "master.csv"))

    assert dataset.source_path == str(FIXTURES / "master.csv")
    assert dataset.languages == ["French", "German"]
    assert [row.term_id for row in dataset.rows] == ["T1", "T2", "T3", "T4", "T5"]
    assert dataset.get_row("T5").english == "Line one\nLine two"
    assert dataset.get_row("T4").should_be_translated is Flag.FALSE
    assert dataset.get_row("T1").translation("German") == "Hallo"


def test_csv_header_is_trimmed_and_values_are_not() -> None:
    dataset = parse_csv_text(' termID , English ,French\nT1, Hi ," Salut "\n')
    row = dataset.rows[0]
    assert dataset.languages == ["French"]
    assert row.english == " Hi "
    assert row.translation("French") == " Salut "


def test_csv_skips_empty_rows_and_warns_on_extra_cells() -> None:
    dataset = parse_csv_text("termID,English\n\n,\nT1,Hi,stray\n")
    assert len(dataset) == 1
    assert dataset.rows[0].english == "Hi"
    assert len(dataset.warnings) == 1
    assert "more cells than the header" in dataset.warnings[0]


def test_csv_short_rows_are_padded() -> None:
    dataset = parse_csv_text("termID,English,French\nT1\n")
    assert dataset.rows[0].english == ""
    assert dataset.rows[0].translation("French") == ""


def test_csv_crlf_inside_quotes_is_kept() -> None:
    dataset = parse_csv_text('termID,English\r\nT1,"a\r\nb"\r\n')
    assert dataset.rows[0].english == "a\r\nb"


def test_csv_malformed_quotes_raise() -> None:
    with pytest.raises(ParseError):
        parse_csv_text('termID,English\nT1,"unterminated\n', source_path="bad.csv")


def test_csv_missing_file_raises(tmp_path: Path) -> None:
    parser = CsvParser()
    missing = tmp_path / "missing.csv"
    with pytest.raises(ParseError):
        parser.parse(str(missing))
    assert parser.validate(str(missing))


def test_decode_bytes_handles_bom_and_legacy_encodings() -> None:
    text, encoding = decode_bytes("\ufefftermID,English\n".encode("utf-8"))
    assert text == "termID,English\n"
    assert encoding == "utf-8"

    legacy = "termID,English,French\nT1,Hello,Ça déjà été très réussi\n".encode("latin-1")
    text, _ = decode_bytes(legacy)
    assert text.startswith("termID,English,French")


def test_csv_parse_legacy_encoded_file(tmp_path: Path) -> None:
    file_path = tmp_path / "legacy.csv"
    file_path.write_bytes("termID,English\nT1,caf\xe9 au lait\n".encode("latin-1"))
    dataset = CsvParser().parse(str(file_path))
    assert dataset.rows[0].term_id == "T1"

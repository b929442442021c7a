from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from core.models import Dataset, ReconciliationReport
from core.reconciler import reconcile
from parsers.csv_parser import CsvParser
from reporters.html_reporter import HtmlReporter


FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def fixture_report() -> ReconciliationReport:
    parser = CsvParser()
    master = parser.parse(str(FIXTURES / "master.csv"))
    candidate = parser.parse(str(FIXTURES / "candidate_fr.csv"))
    return reconcile(master, candidate, "French")


def test_html_reporter_generates_report(tmp_path: Path) -> None:
    report = fixture_report()
    report.timestamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    output_path = HtmlReporter().generate(report, str(tmp_path / "report"))

    assert output_path.endswith(".html")
    html_content = Path(output_path).read_text(encoding="utf-8")
    assert "French" in html_content
    assert "candidate_fr.csv" in html_content
    assert "2024-01-02 03:04:05 UTC" in html_content
    assert "Translations to update (1)" in html_content
    assert "Terms to translate (1)" in html_content
    assert "T3" in html_content
    assert "T5" in html_content
    assert "Line one<br>Line two" in html_content
    assert "Skipped 1 candidate row(s) without a termID" in html_content
    assert "diff-removed" in html_content


def test_html_reporter_escapes_content(tmp_path: Path) -> None:
    master = Dataset.from_records(
        [
            {
                "termID": "<T1>",
                "English": "<script>alert(1)</script>",
                "shouldBeTranslated": "TRUE",
                "French": "",
            }
        ]
    )
    candidate = Dataset.from_records(
        [{"termID": "<T1>", "English": "<b>old</b>", "French": "<i>vieux</i>"}]
    )
    report = reconcile(master, candidate, "French")

    output_path = HtmlReporter().generate(report, str(tmp_path / "escaped.html"))
    html_content = Path(output_path).read_text(encoding="utf-8")

    assert "<script>alert" not in html_content
    assert "&lt;script&gt;" in html_content
    assert "<i>vieux</i>" not in html_content
    assert "&lt;T1&gt;" in html_content


def test_html_reporter_complete_report(tmp_path: Path) -> None:
    master = Dataset.from_records(
        [{"termID": "T1", "English": "Hi", "shouldBeTranslated": "TRUE", "French": ""}]
    )
    candidate = Dataset.from_records([{"termID": "T1", "English": "Hi", "French": "Salut"}])
    report = reconcile(master, candidate, "French")

    output_path = HtmlReporter().generate(report, str(tmp_path / "done.html"))
    html_content = Path(output_path).read_text(encoding="utf-8")

    assert "All translatable French terms are translated and up to date." in html_content
    assert "Translations to update" not in html_content

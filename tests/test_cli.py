from __future__ import annotations

from pathlib import Path

import pytest

import cli


FIXTURES = Path(__file__).resolve().parent / "fixtures"


def fixture(name: str) -> str:
    return str(FIXTURES / name)


def test_cli_reconcile(tmp_path: Path, capsys) -> None:
    code = cli.main(
        ["reconcile", fixture("master.csv"), fixture("candidate_fr.csv"), "-o", str(tmp_path)]
    )
    out = capsys.readouterr().out

    assert code == 0
    assert "Language French: needs translation=1 needs update=1" in out
    assert "update T3" in out
    assert "Warning: Skipped 1 candidate row(s) without a termID" in out
    assert "HTML report:" in out
    assert "Excel report:" in out
    assert len(list(tmp_path.iterdir())) == 3


def test_cli_merge_status(capsys) -> None:
    code = cli.main(["merge-status", fixture("server_fr.csv"), fixture("master.csv"), "-l", "French"])
    assert code == 0
    assert "French: merged (matched 2/2)" in capsys.readouterr().out


def test_cli_diff(capsys) -> None:
    assert cli.main(["diff", "Hello world", "Hello there"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("modified: Modified (+1 -1 words)")
    assert "- 'world'" in out
    assert "+ 'there'" in out

    assert cli.main(["diff", "cat", "cut", "--chars"]) == 0
    assert "- 'a'" in capsys.readouterr().out


def test_cli_compare(capsys) -> None:
    code = cli.main(["compare", fixture("master.csv"), fixture("candidate_fr.csv")])
    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("Language French:")
    assert "added T9" in out
    assert "unchanged T3" not in out

    cli.main(["compare", fixture("master.csv"), fixture("candidate_fr.csv"), "--all"])
    assert "unchanged T3" in capsys.readouterr().out


def test_cli_base_changes(tmp_path: Path, capsys) -> None:
    code = cli.main(
        ["base-changes", fixture("master.csv"), fixture("base_update.csv"), "-o", str(tmp_path)]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "Added=1 removed=1 modified=1" in out
    assert "  ~ T2" in out
    assert "Updated master:" in out


def test_cli_export_and_stats(tmp_path: Path, capsys) -> None:
    assert cli.main(["export", fixture("master.csv"), "-l", "German", "-o", str(tmp_path)]) == 0
    assert (tmp_path / "German_latest.csv").exists()
    capsys.readouterr()

    assert cli.main(["stats", fixture("master.csv"), "--missing"]) == 0
    out = capsys.readouterr().out
    assert "French: 50% (2/4)" in out
    assert "missing: T1, T5" in out
    assert "German: 25% (1/4)" in out


def test_cli_convert(tmp_path: Path, capsys) -> None:
    assert cli.main(["convert", fixture("server_fr.csv"), "-o", str(tmp_path)]) == 0
    assert (tmp_path / "server_fr.xlsx").exists()
    assert "Converted:" in capsys.readouterr().out


def test_cli_formats(capsys) -> None:
    assert cli.main(["formats"]) == 0
    out = capsys.readouterr().out
    assert ".csv" in out
    assert ".xlsx" in out


def test_cli_reports_known_errors(tmp_path: Path, capsys) -> None:
    code = cli.main(["stats", str(tmp_path / "missing.csv")])
    assert code == 1
    assert capsys.readouterr().out.startswith("Error:")


def test_cli_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.main([])

from __future__ import annotations

import pytest

from core.models import Dataset, ValidationError
from core.validation import (
    ensure_usable,
    find_duplicate_term_ids,
    resolve_candidate_language,
    validate_dataset,
)


def make_dataset(records: list[dict[str, str]]) -> Dataset:
    return Dataset.from_records(records)


def test_valid_dataset() -> None:
    dataset = make_dataset([{"termID": "T1", "English": "Hi", "French": ""}])
    result = validate_dataset(dataset)
    assert result.success is True
    assert result.issues == []
    assert result.row_count == 1
    assert result.available_columns == ["termID", "English", "French"]


def test_empty_dataset_fails() -> None:
    result = validate_dataset(Dataset())
    assert result.success is False
    assert result.issues == ["CSV is empty or could not be parsed"]


def test_reports_every_issue() -> None:
    dataset = make_dataset(
        [
            {"termID": "T1", "French": "a"},
            {"termID": "", "French": "b"},
            {"termID": "T1", "French": "c"},
            {"termID": "T2", "French": "d"},
            {"termID": "T2", "French": "e"},
        ]
    )
    result = validate_dataset(dataset)
    assert result.success is False
    assert result.issues == [
        "Missing required column: English",
        "Found 1 rows with empty or missing termID",
        "Found duplicate termIDs: T1, T2",
    ]
    assert find_duplicate_term_ids(dataset) == ["T1", "T2"]


def test_ensure_usable() -> None:
    with pytest.raises(ValidationError):
        ensure_usable(Dataset(), "master")
    with pytest.raises(ValidationError):
        ensure_usable(make_dataset([{"termID": "", "English": "x"}]), "master")
    ensure_usable(make_dataset([{"termID": "T1", "English": "x"}]), "master")


def test_candidate_language_detection() -> None:
    single = make_dataset([{"termID": "T1", "English": "Hi", "French": "Salut"}])
    assert resolve_candidate_language(single) == "French"
    assert resolve_candidate_language(single, "French") == "French"


def test_candidate_language_ambiguity_is_an_error() -> None:
    none = make_dataset([{"termID": "T1", "English": "Hi"}])
    with pytest.raises(ValidationError, match="no language column"):
        resolve_candidate_language(none)

    several = make_dataset([{"termID": "T1", "English": "Hi", "French": "", "German": ""}])
    with pytest.raises(ValidationError, match="French, German"):
        resolve_candidate_language(several)

    with pytest.raises(ValidationError, match="Spanish"):
        resolve_candidate_language(several, "Spanish")


def test_empty_candidate_accepts_explicit_language() -> None:
    assert resolve_candidate_language(Dataset(), "French") == "French"

from __future__ import annotations

from collections import Counter
import logging

from config import ENGLISH_COLUMN, REQUIRED_COLUMNS
from core.models import Dataset, ValidationError, ValidationResult


logger = logging.getLogger(__name__)


def validate_dataset(dataset: Dataset) -> ValidationResult:
    """Structural checks on a parsed localization sheet."""
    if dataset is None or len(dataset) == 0:
        return ValidationResult(
            success=False,
            issues=["CSV is empty or could not be parsed"],
        )

    issues: list[str] = []
    available_columns = list(dataset.header or dataset.columns)
    for column in REQUIRED_COLUMNS:
        if column not in available_columns:
            issues.append(f"Missing required column: {column}")

    empty_ids = sum(1 for row in dataset.rows if not row.term_id)
    if empty_ids:
        issues.append(f"Found {empty_ids} rows with empty or missing termID")

    duplicates = find_duplicate_term_ids(dataset)
    if duplicates:
        issues.append(f"Found duplicate termIDs: {', '.join(duplicates)}")

    return ValidationResult(
        success=not issues,
        issues=issues,
        row_count=len(dataset),
        available_columns=available_columns,
    )


def find_duplicate_term_ids(dataset: Dataset) -> list[str]:
    counts = Counter(row.term_id for row in dataset.rows if row.term_id)
    return [term_id for term_id, count in counts.items() if count > 1]


def ensure_usable(dataset: Dataset, label: str = "dataset") -> None:
    """Raise when a dataset cannot be reconciled at all."""
    if dataset is None or len(dataset) == 0:
        raise ValidationError(f"The {label} is empty or could not be parsed")
    if not dataset.term_ids:
        raise ValidationError(f"The {label} has no rows with a termID")


def resolve_candidate_language(candidate: Dataset, language: str | None = None) -> str:
    """Pick the single target language column of an uploaded work file.

    With an explicit ``language`` the candidate must carry that column unless
    it has no rows at all. Without one, exactly one non-English language
    column must be present.
    """
    found = [name for name in candidate.languages if name != ENGLISH_COLUMN]
    if language:
        if candidate.rows and language not in found:
            raise ValidationError(
                f"Language column '{language}' not found in candidate file"
                f" (found: {', '.join(found) or 'none'})"
            )
        return language

    if not found:
        raise ValidationError("Candidate file has no language column")
    if len(found) > 1:
        raise ValidationError(
            f"Candidate file has more than one language column: {', '.join(found)}"
        )
    logger.debug("Detected candidate language %s", found[0])
    return found[0]

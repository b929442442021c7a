from __future__ import annotations

from datetime import datetime
import logging

from config import ENGLISH_COLUMN
from core.diff_engine import TextDiffer
from core.models import (
    ComparisonError,
    ComparisonResult,
    ComparisonStatistics,
    ComparisonType,
    Dataset,
    TermComparison,
    TermRow,
)
from core.normalizer import is_newline_only_difference, values_equal


logger = logging.getLogger(__name__)

AUTO_LANGUAGE = "auto"


class TermComparer:
    """Side-by-side comparison of one language column across two sheets."""

    @staticmethod
    def resolve_language(dataset_a: Dataset, dataset_b: Dataset, language: str | None) -> str:
        if language and language != AUTO_LANGUAGE:
            return language
        for candidate in [*dataset_a.languages, *dataset_b.languages]:
            if candidate != ENGLISH_COLUMN:
                return candidate
        return ENGLISH_COLUMN

    @staticmethod
    def _value(row: TermRow, language: str) -> str:
        if language == ENGLISH_COLUMN:
            return row.english
        return row.translation(language)

    @classmethod
    def compare(
        cls,
        dataset_a: Dataset,
        dataset_b: Dataset,
        language: str | None = AUTO_LANGUAGE,
        *,
        ignore_case: bool = False,
        ignore_whitespace: bool = False,
    ) -> ComparisonResult:
        if dataset_a is None or dataset_b is None:
            raise ComparisonError("Both files are required for a comparison")

        language = cls.resolve_language(dataset_a, dataset_b, language)
        rows_a = dataset_a.index_by_term_id()
        rows_b = dataset_b.index_by_term_id()
        term_ids = list(rows_a)
        term_ids.extend(term_id for term_id in rows_b if term_id not in rows_a)

        comparisons = [
            cls._compare_term(
                term_id,
                rows_a.get(term_id),
                rows_b.get(term_id),
                language,
                ignore_case=ignore_case,
                ignore_whitespace=ignore_whitespace,
            )
            for term_id in term_ids
        ]
        statistics = ComparisonStatistics.from_comparisons(comparisons)
        logger.info(
            "Compared %d terms for %s: %d modified, %d added, %d removed",
            statistics.total_terms,
            language,
            statistics.modified,
            statistics.added,
            statistics.removed,
        )
        return ComparisonResult(
            dataset_a=dataset_a,
            dataset_b=dataset_b,
            language=language,
            comparisons=comparisons,
            statistics=statistics,
            timestamp=datetime.now(),
        )

    @classmethod
    def _compare_term(
        cls,
        term_id: str,
        row_a: TermRow | None,
        row_b: TermRow | None,
        language: str,
        *,
        ignore_case: bool,
        ignore_whitespace: bool,
    ) -> TermComparison:
        if row_a is None and row_b is not None:
            return TermComparison(
                term_id=term_id,
                type=ComparisonType.ADDED,
                old_value="",
                new_value=cls._value(row_b, language),
                english=row_b.english,
                notes=row_b.notes,
            )
        if row_b is None and row_a is not None:
            return TermComparison(
                term_id=term_id,
                type=ComparisonType.REMOVED,
                old_value=cls._value(row_a, language),
                new_value="",
                english=row_a.english,
                notes=row_a.notes,
            )

        old_value = cls._value(row_a, language)
        new_value = cls._value(row_b, language)
        comparison = TermComparison(
            term_id=term_id,
            type=ComparisonType.MODIFIED,
            old_value=old_value,
            new_value=new_value,
            english=row_b.english or row_a.english,
            notes=row_b.notes or row_a.notes,
        )
        if values_equal(
            old_value,
            new_value,
            ignore_case=ignore_case,
            ignore_whitespace=ignore_whitespace,
        ):
            comparison.type = ComparisonType.UNCHANGED
        elif is_newline_only_difference(old_value, new_value):
            comparison.type = ComparisonType.NEWLINE_ONLY
        else:
            comparison.diff = TextDiffer.diff_auto(old_value, new_value)
        return comparison


def compare_terms(
    dataset_a: Dataset,
    dataset_b: Dataset,
    language: str | None = AUTO_LANGUAGE,
    *,
    ignore_case: bool = False,
    ignore_whitespace: bool = False,
) -> ComparisonResult:
    return TermComparer.compare(
        dataset_a,
        dataset_b,
        language,
        ignore_case=ignore_case,
        ignore_whitespace=ignore_whitespace,
    )

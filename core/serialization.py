from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable

from config import STANDARD_COLUMNS
from core.models import Dataset, Flag, LanguageStats, TermRow


def dataset_to_csv(dataset: Dataset, languages: Iterable[str] | None = None) -> str:
    """Serialize with the standard column order, every field quoted.

    Embedded quotes are doubled and embedded newlines are kept inside the
    quoted cell, so the text parses back to the same values.
    """
    selected = list(dataset.languages if languages is None else languages)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([*STANDARD_COLUMNS, *selected])
    for record in dataset.to_records(selected):
        writer.writerow(record.values())
    return buffer.getvalue()


def write_csv(dataset: Dataset, output_path: str, languages: Iterable[str] | None = None) -> str:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dataset_to_csv(dataset, languages), encoding="utf-8", newline="")
    return str(path)


def latest_version_dataset(master: Dataset, language: str) -> Dataset:
    """Per-language work file: translatable rows only, flags reset."""
    rows = [
        TermRow(
            term_id=row.term_id,
            english=row.english,
            notes=row.notes,
            should_be_translated=Flag.TRUE,
            translation_needs_update=Flag.FALSE,
            translations={language: row.translation(language)},
        )
        for row in master.rows
        if row.should_be_translated is Flag.TRUE
    ]
    return Dataset(rows=rows, languages=[language], source_path=master.source_path)


def latest_version_csv(master: Dataset, language: str) -> str:
    return dataset_to_csv(latest_version_dataset(master, language))


def completion_stats(dataset: Dataset, languages: Iterable[str] | None = None) -> list[LanguageStats]:
    translatable = [row for row in dataset.rows if row.should_be_translated is Flag.TRUE]
    stats: list[LanguageStats] = []
    for language in dataset.languages if languages is None else languages:
        missing = [
            row.term_id
            for row in translatable
            if row.term_id and not row.has_translation(language)
        ]
        translated = sum(1 for row in translatable if row.has_translation(language))
        stats.append(
            LanguageStats(
                language=language,
                total_terms=len(translatable),
                translated_terms=translated,
                missing_terms=missing,
            )
        )
    return stats

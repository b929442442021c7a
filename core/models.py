from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import math
from typing import Any, Iterable, Iterator, Mapping

from config import (
    ENGLISH_COLUMN,
    FLAG_FALSE,
    FLAG_TRUE,
    NEEDS_UPDATE_COLUMN,
    NOTES_COLUMN,
    SHOULD_BE_TRANSLATED_COLUMN,
    STANDARD_COLUMNS,
    TERM_ID_COLUMN,
)


class ParseError(Exception):
    def __init__(self, filepath: str, reason: str) -> None:
        super().__init__(f"Failed to parse '{filepath}': {reason}")
        self.filepath = filepath
        self.reason = reason


class UnsupportedFormatError(Exception):
    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported format: {extension}")
        self.extension = extension


class ValidationError(Exception):
    def __init__(self, issues: Iterable[str] | str) -> None:
        if isinstance(issues, str):
            issues = [issues]
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))


class ComparisonError(Exception):
    pass


class Flag(str, Enum):
    """Tri-state for the TRUE/FALSE string columns of a localization sheet."""

    TRUE = FLAG_TRUE
    FALSE = FLAG_FALSE
    UNSET = ""

    @classmethod
    def parse(cls, value: Any) -> "Flag":
        if isinstance(value, Flag):
            return value
        if isinstance(value, bool):
            return cls.from_bool(value)
        text = "" if value is None else str(value).strip().upper()
        if text == FLAG_TRUE:
            return cls.TRUE
        if text == FLAG_FALSE:
            return cls.FALSE
        return cls.UNSET

    @classmethod
    def from_bool(cls, value: bool) -> "Flag":
        return cls.TRUE if value else cls.FALSE

    def serialize(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return self is Flag.TRUE


class ChunkType(str, Enum):
    EQUAL = "EQUAL"
    INSERT = "INSERT"
    DELETE = "DELETE"


class LineType(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass
class DiffPart:
    type: ChunkType
    value: str

    @property
    def added(self) -> bool:
        return self.type == ChunkType.INSERT

    @property
    def removed(self) -> bool:
        return self.type == ChunkType.DELETE


@dataclass
class LineDiffPart:
    line_type: LineType
    value: str
    old_line: str | None = None
    new_line: str | None = None
    char_diff: list[DiffPart] = field(default_factory=list)

    @property
    def added(self) -> bool:
        return self.line_type == LineType.ADDED

    @property
    def removed(self) -> bool:
        return self.line_type == LineType.REMOVED

    @property
    def modified(self) -> bool:
        return self.line_type == LineType.MODIFIED


@dataclass
class DiffStats:
    added_chars: int = 0
    removed_chars: int = 0
    unchanged_chars: int = 0
    added_words: int = 0
    removed_words: int = 0
    unchanged_words: int = 0

    @property
    def total_chars(self) -> int:
        return self.added_chars + self.removed_chars + self.unchanged_chars

    @property
    def total_words(self) -> int:
        return self.added_words + self.removed_words + self.unchanged_words


@dataclass
class DiffSummary:
    type: str
    message: str
    added_words: int = 0
    removed_words: int = 0


@dataclass
class TermRow:
    term_id: str
    english: str = ""
    notes: str = ""
    should_be_translated: Flag = Flag.UNSET
    translation_needs_update: Flag = Flag.UNSET
    translations: dict[str, str] = field(default_factory=dict)

    @property
    def is_translatable(self) -> bool:
        return self.should_be_translated is not Flag.FALSE

    def translation(self, language: str) -> str:
        return self.translations.get(language) or ""

    def has_translation(self, language: str) -> bool:
        return bool(self.translation(language).strip())

    def copy(self) -> "TermRow":
        return TermRow(
            term_id=self.term_id,
            english=self.english,
            notes=self.notes,
            should_be_translated=self.should_be_translated,
            translation_needs_update=self.translation_needs_update,
            translations=dict(self.translations),
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any], languages: Iterable[str]) -> "TermRow":
        return cls(
            term_id=_text(record.get(TERM_ID_COLUMN)).strip(),
            english=_text(record.get(ENGLISH_COLUMN)),
            notes=_text(record.get(NOTES_COLUMN)),
            should_be_translated=Flag.parse(record.get(SHOULD_BE_TRANSLATED_COLUMN)),
            translation_needs_update=Flag.parse(record.get(NEEDS_UPDATE_COLUMN)),
            translations={
                language: _text(record.get(language))
                for language in languages
                if language in record
            },
        )

    def to_record(self, languages: Iterable[str]) -> dict[str, str]:
        record = {
            TERM_ID_COLUMN: self.term_id,
            NOTES_COLUMN: self.notes,
            SHOULD_BE_TRANSLATED_COLUMN: self.should_be_translated.serialize(),
            NEEDS_UPDATE_COLUMN: self.translation_needs_update.serialize(),
            ENGLISH_COLUMN: self.english,
        }
        for language in languages:
            record[language] = self.translation(language)
        return record


@dataclass
class Dataset:
    rows: list[TermRow] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    source_path: str | None = None
    warnings: list[str] = field(default_factory=list)
    header: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[TermRow]:
        return iter(self.rows)

    @property
    def term_ids(self) -> list[str]:
        return [row.term_id for row in self.rows if row.term_id]

    @property
    def columns(self) -> list[str]:
        return [*STANDARD_COLUMNS, *self.languages]

    def index_by_term_id(self) -> dict[str, TermRow]:
        index: dict[str, TermRow] = {}
        for row in self.rows:
            if row.term_id and row.term_id not in index:
                index[row.term_id] = row
        return index

    def get_row(self, term_id: str) -> TermRow:
        for row in self.rows:
            if row.term_id == term_id:
                return row
        raise KeyError(f"Term not found: {term_id}")

    def add_language(self, language: str) -> None:
        name = language.strip()
        if not name:
            raise ValidationError("Language name must not be empty")
        if name in self.languages or name in STANDARD_COLUMNS:
            raise ValidationError(f"Language already exists: {name}")
        self.languages.append(name)
        for row in self.rows:
            row.translations.setdefault(name, "")

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        columns: Iterable[str] | None = None,
        source_path: str | None = None,
    ) -> "Dataset":
        items = list(records)
        columns = list(items[0].keys()) if columns is None and items else list(columns or [])
        languages = language_columns(columns)
        rows = [TermRow.from_record(record, languages) for record in items]
        return cls(
            rows=rows,
            languages=languages,
            source_path=source_path,
            header=[(column or "").strip() for column in columns],
        )

    def to_records(self, languages: Iterable[str] | None = None) -> list[dict[str, str]]:
        selected = list(self.languages if languages is None else languages)
        return [row.to_record(selected) for row in self.rows]


def language_columns(columns: Iterable[str]) -> list[str]:
    languages: list[str] = []
    for column in columns:
        name = (column or "").strip()
        if not name or name in STANDARD_COLUMNS or name in languages:
            continue
        languages.append(name)
    return languages


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class TermStatus(str, Enum):
    NEEDS_TRANSLATION = "needs-translation"
    NEEDS_UPDATE = "needs-update"
    FOUND_IN_MASTER = "found-in-master"
    UNCHANGED = "unchanged"
    NOT_TRANSLATABLE = "not-translatable"


@dataclass
class UpdateDetail:
    term_id: str
    old_text: str
    new_text: str
    user_translation: str
    line_diff: list[LineDiffPart] = field(default_factory=list)
    summary: DiffSummary | None = None


@dataclass
class ReconciliationReport:
    language: str
    dataset: Dataset
    needs_translation: list[str] = field(default_factory=list)
    needs_update: list[UpdateDetail] = field(default_factory=list)
    found_in_master: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    statuses: dict[str, TermStatus] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    timestamp: datetime | None = None

    @property
    def needs_update_ids(self) -> list[str]:
        return [detail.term_id for detail in self.needs_update]

    @property
    def total_needs_translation(self) -> int:
        return len(self.needs_translation)

    @property
    def total_needs_update(self) -> int:
        return len(self.needs_update)

    @property
    def is_complete(self) -> bool:
        return not self.needs_translation and not self.needs_update


class MergeStatusCode(str, Enum):
    MERGED = "merged"
    MERGED_OUTDATED = "merged-outdated"
    UNMERGED = "unmerged"
    UNMERGED_OUTDATED = "unmerged-outdated"

    @classmethod
    def from_flags(cls, is_merged: bool, has_outdated: bool) -> "MergeStatusCode":
        if is_merged:
            return cls.MERGED_OUTDATED if has_outdated else cls.MERGED
        return cls.UNMERGED_OUTDATED if has_outdated else cls.UNMERGED


@dataclass
class OutdatedTerm:
    term_id: str
    server_english: str
    master_english: str
    current_translation: str


@dataclass
class UnmatchedTerm:
    term_id: str
    server_translation: str
    expected_translation: str
    lqa_translation: str | None = None


@dataclass
class MergeStatus:
    language: str
    is_merged: bool
    valid_terms_matched: int
    valid_terms_total: int
    status: MergeStatusCode
    outdated_terms: list[OutdatedTerm] = field(default_factory=list)
    unmatched_terms: list[UnmatchedTerm] = field(default_factory=list)

    @property
    def checked_terms(self) -> int:
        return self.valid_terms_total

    @property
    def has_outdated_terms(self) -> bool:
        return bool(self.outdated_terms)


@dataclass
class ValidationResult:
    success: bool
    issues: list[str]
    row_count: int = 0
    available_columns: list[str] = field(default_factory=list)


class ComparisonType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    NEWLINE_ONLY = "newline-only"


@dataclass
class TermComparison:
    term_id: str
    type: ComparisonType
    old_value: str
    new_value: str
    english: str = ""
    notes: str = ""
    diff: list[DiffPart] = field(default_factory=list)

    @property
    def is_changed(self) -> bool:
        return self.type != ComparisonType.UNCHANGED


@dataclass
class ComparisonStatistics:
    total_terms: int
    added: int
    removed: int
    modified: int
    newline_only: int
    unchanged: int
    change_percentage: float

    @classmethod
    def from_comparisons(cls, comparisons: Iterable[TermComparison]) -> "ComparisonStatistics":
        items = list(comparisons)
        total = len(items)
        added = removed = modified = newline_only = unchanged = 0
        for item in items:
            if item.type == ComparisonType.ADDED:
                added += 1
            elif item.type == ComparisonType.REMOVED:
                removed += 1
            elif item.type == ComparisonType.MODIFIED:
                modified += 1
            elif item.type == ComparisonType.NEWLINE_ONLY:
                newline_only += 1
            elif item.type == ComparisonType.UNCHANGED:
                unchanged += 1
        changed = added + removed + modified + newline_only
        percentage = 0.0 if total == 0 else changed / total
        return cls(
            total_terms=total,
            added=added,
            removed=removed,
            modified=modified,
            newline_only=newline_only,
            unchanged=unchanged,
            change_percentage=percentage,
        )


@dataclass
class ComparisonResult:
    dataset_a: Dataset
    dataset_b: Dataset
    language: str
    comparisons: list[TermComparison]
    statistics: ComparisonStatistics
    timestamp: datetime

    @property
    def change_percentage(self) -> float:
        return self.statistics.change_percentage


@dataclass
class ModifiedTerm:
    term_id: str
    old_text: str
    new_text: str


@dataclass
class BaseChanges:
    added: list[str]
    removed: list[str]
    modified: list[ModifiedTerm]
    uploaded: Dataset

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)

    @property
    def modified_ids(self) -> list[str]:
        return [item.term_id for item in self.modified]


@dataclass
class LanguageStats:
    language: str
    total_terms: int
    translated_terms: int
    missing_terms: list[str] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if self.total_terms == 0:
            return 0
        return math.floor(self.translated_terms / self.total_terms * 100 + 0.5)

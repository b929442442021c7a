from __future__ import annotations

import logging

from core.models import BaseChanges, Dataset, Flag, ModifiedTerm, TermRow
from core.normalizer import normalize_line_endings


logger = logging.getLogger(__name__)


class BaseFileSync:
    """Brings a master sheet in line with a newly uploaded English base file.

    Only the English source text is compared. Line endings are unified
    before comparing; everything else, including the escape quote, counts
    as a change.
    """

    @staticmethod
    def _english_map(dataset: Dataset) -> dict[str, str]:
        mapping: dict[str, str] = {}
        for row in dataset.rows:
            if row.term_id:
                mapping[row.term_id] = row.english
        return mapping

    @classmethod
    def compare(cls, master: Dataset, uploaded: Dataset) -> BaseChanges:
        current = cls._english_map(master)
        incoming = cls._english_map(uploaded)

        added: list[str] = []
        modified: list[ModifiedTerm] = []
        for term_id, new_text in incoming.items():
            if term_id not in current:
                added.append(term_id)
                continue
            old_text = current[term_id]
            if normalize_line_endings(old_text) != normalize_line_endings(new_text):
                logger.debug("English changed for %s: %r -> %r", term_id, old_text, new_text)
                modified.append(ModifiedTerm(term_id=term_id, old_text=old_text, new_text=new_text))
        removed = [term_id for term_id in current if term_id not in incoming]

        logger.info(
            "Base file changes: %d added, %d removed, %d modified",
            len(added),
            len(removed),
            len(modified),
        )
        return BaseChanges(added=added, removed=removed, modified=modified, uploaded=uploaded)

    @staticmethod
    def apply(master: Dataset, changes: BaseChanges) -> Dataset:
        """Build the updated master. Neither input is modified."""
        uploaded_rows = {row.term_id: row for row in changes.uploaded.rows if row.term_id}
        modified_ids = set(changes.modified_ids)
        removed_ids = set(changes.removed)
        languages = list(master.languages)

        rows: list[TermRow] = []
        for master_row in master.rows:
            incoming = uploaded_rows.pop(master_row.term_id, None) if master_row.term_id else None
            if incoming is not None:
                updated = master_row.copy()
                updated.english = incoming.english
                if master_row.term_id in modified_ids and any(
                    master_row.has_translation(language) for language in languages
                ):
                    updated.translation_needs_update = Flag.TRUE
                rows.append(updated)
            elif master_row.term_id not in removed_ids:
                rows.append(master_row.copy())

        added_ids = set(changes.added)
        for term_id, incoming in uploaded_rows.items():
            if term_id not in added_ids:
                continue
            rows.append(
                TermRow(
                    term_id=term_id,
                    english=incoming.english,
                    notes=incoming.notes,
                    should_be_translated=Flag.TRUE,
                    translation_needs_update=Flag.FALSE,
                    translations={language: "" for language in languages},
                )
            )

        return Dataset(
            rows=rows,
            languages=languages,
            source_path=master.source_path,
            header=list(master.header),
        )


def compare_base_files(master: Dataset, uploaded: Dataset) -> BaseChanges:
    return BaseFileSync.compare(master, uploaded)


def apply_base_changes(master: Dataset, changes: BaseChanges) -> Dataset:
    return BaseFileSync.apply(master, changes)

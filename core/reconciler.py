from __future__ import annotations

from datetime import datetime, timezone
import logging

from core.diff_engine import TextDiffer
from core.models import (
    Dataset,
    Flag,
    ReconciliationReport,
    TermRow,
    TermStatus,
    UpdateDetail,
)
from core.normalizer import are_equivalent
from core.validation import find_duplicate_term_ids


logger = logging.getLogger(__name__)


class TermReconciler:
    """Classifies master terms against an uploaded or server work file.

    The master term list decides which terms exist: candidate terms unknown
    to the master are ignored and nothing is written back into the inputs.
    """

    @staticmethod
    def index_candidate(candidate: Dataset, warnings: list[str]) -> dict[str, TermRow]:
        index: dict[str, TermRow] = {}
        skipped = 0
        for row in candidate.rows:
            if not row.term_id:
                skipped += 1
                continue
            if row.term_id in index:
                warnings.append(
                    f"Duplicate termID '{row.term_id}' in candidate file; first row used"
                )
                continue
            index[row.term_id] = row
        if skipped:
            message = f"Skipped {skipped} candidate row(s) without a termID"
            logger.warning(message)
            warnings.append(message)
        return index

    @classmethod
    def reconcile(
        cls,
        master: Dataset,
        candidate: Dataset,
        language: str,
    ) -> ReconciliationReport:
        report = ReconciliationReport(
            language=language,
            dataset=Dataset(languages=[language], source_path=candidate.source_path),
            timestamp=datetime.now(timezone.utc),
        )
        candidate_index = cls.index_candidate(candidate, report.warnings)

        duplicates = find_duplicate_term_ids(master)
        if duplicates:
            report.warnings.append(f"Duplicate termIDs in master: {', '.join(duplicates)}")

        master_ids: set[str] = set()
        for master_row in master.rows:
            if not master_row.term_id:
                report.warnings.append("Skipped master row without a termID")
                continue
            master_ids.add(master_row.term_id)

            if master_row.should_be_translated is not Flag.TRUE:
                passthrough = master_row.copy()
                passthrough.translations = {language: master_row.translation(language)}
                report.dataset.rows.append(passthrough)
                report.statuses[master_row.term_id] = TermStatus.NOT_TRANSLATABLE
                continue

            report.dataset.rows.append(
                cls._reconcile_row(master_row, candidate_index.get(master_row.term_id), language, report)
            )

        ignored = [term_id for term_id in candidate_index if term_id not in master_ids]
        if ignored:
            logger.debug("Ignored %d candidate term(s) unknown to master", len(ignored))

        logger.info(
            "Reconciled %s: %d need translation, %d need update, %d unchanged, %d kept from master",
            language,
            len(report.needs_translation),
            len(report.needs_update),
            len(report.unchanged),
            len(report.found_in_master),
        )
        return report

    @classmethod
    def _reconcile_row(
        cls,
        master_row: TermRow,
        candidate_row: TermRow | None,
        language: str,
        report: ReconciliationReport,
    ) -> TermRow:
        term_id = master_row.term_id
        needs_update = False

        if candidate_row is not None and candidate_row.has_translation(language):
            translation = candidate_row.translation(language)
            if are_equivalent(candidate_row.english, master_row.english):
                report.unchanged.append(term_id)
                report.statuses[term_id] = TermStatus.UNCHANGED
            else:
                needs_update = True
                report.needs_update.append(
                    cls._update_detail(term_id, candidate_row.english, master_row.english, translation)
                )
                report.statuses[term_id] = TermStatus.NEEDS_UPDATE
        elif master_row.has_translation(language):
            # A blank upload never overwrites an existing master translation.
            translation = master_row.translation(language)
            report.found_in_master.append(term_id)
            report.statuses[term_id] = TermStatus.FOUND_IN_MASTER
        else:
            translation = ""
            report.needs_translation.append(term_id)
            report.statuses[term_id] = TermStatus.NEEDS_TRANSLATION

        return TermRow(
            term_id=term_id,
            english=master_row.english,
            notes=master_row.notes,
            should_be_translated=Flag.from_bool(not translation.strip()),
            translation_needs_update=Flag.from_bool(needs_update),
            translations={language: translation},
        )

    @staticmethod
    def _update_detail(
        term_id: str, old_text: str, new_text: str, user_translation: str
    ) -> UpdateDetail:
        detail = UpdateDetail(
            term_id=term_id,
            old_text=old_text,
            new_text=new_text,
            user_translation=user_translation,
            summary=TextDiffer.diff_summary(old_text, new_text),
        )
        if TextDiffer.exceeds_interactive_limit(old_text, new_text):
            logger.warning("Skipping line diff for %s: text too long for interactive review", term_id)
        else:
            detail.line_diff = TextDiffer.enhanced_line_diff(old_text, new_text)
        return detail


def reconcile(master: Dataset, candidate: Dataset, language: str) -> ReconciliationReport:
    return TermReconciler.reconcile(master, candidate, language)

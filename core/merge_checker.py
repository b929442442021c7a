from __future__ import annotations

from dataclasses import dataclass
import logging

from config import CHARACTER_DIFF_LIMIT
from core.models import (
    Dataset,
    Flag,
    MergeStatus,
    MergeStatusCode,
    OutdatedTerm,
    UnmatchedTerm,
)
from core.normalizer import normalize


logger = logging.getLogger(__name__)

MISSING_CHAR = "∅"


@dataclass
class CharacterDifference:
    position: int
    expected: str
    actual: str


def _display_char(char: str) -> str:
    if not char:
        return f"'{MISSING_CHAR}' (N/A)"
    shown = {"\n": "\\n", "\t": "\\t"}.get(char, char)
    return f"'{shown}' ({ord(char)})"


def character_differences(
    expected: str | None,
    actual: str | None,
    limit: int = CHARACTER_DIFF_LIMIT,
) -> list[CharacterDifference]:
    """Positional comparison of two strings, first ``limit`` mismatches."""
    expected = expected or ""
    actual = actual or ""
    differences: list[CharacterDifference] = []
    for position in range(max(len(expected), len(actual))):
        char_expected = expected[position] if position < len(expected) else ""
        char_actual = actual[position] if position < len(actual) else ""
        if char_expected == char_actual:
            continue
        differences.append(
            CharacterDifference(
                position=position,
                expected=_display_char(char_expected),
                actual=_display_char(char_actual),
            )
        )
        if len(differences) >= limit:
            break
    return differences


def _translation_map(dataset: Dataset | None, language: str) -> dict[str, str]:
    """Normalized non-blank translations keyed by term ID."""
    mapping: dict[str, str] = {}
    if dataset is None:
        return mapping
    for row in dataset.rows:
        if row.term_id and row.has_translation(language) and row.term_id not in mapping:
            mapping[row.term_id] = normalize(row.translation(language))
    return mapping


class MergeStatusEvaluator:
    """Read-only check of whether a server translation file is in the master.

    Terms whose server-side English no longer matches the master are
    reported as outdated and left out of the tally. LQA overlay values
    count as a match when the server already holds them.
    """

    @staticmethod
    def evaluate(
        server: Dataset,
        language: str,
        master: Dataset,
        lqa: Dataset | None = None,
    ) -> MergeStatus:
        server_translations = _translation_map(server, language)
        server_english: dict[str, str] = {}
        for row in server.rows:
            if row.term_id and row.english and row.term_id not in server_english:
                server_english[row.term_id] = normalize(row.english)
        lqa_translations = _translation_map(lqa, language)

        matched = 0
        total = 0
        outdated: list[OutdatedTerm] = []
        unmatched: list[UnmatchedTerm] = []

        for master_row in master.rows:
            term_id = master_row.term_id
            if not term_id or master_row.should_be_translated is Flag.FALSE:
                continue

            master_english = normalize(master_row.english)
            stale_english = server_english.get(term_id)
            server_translation = server_translations.get(term_id)
            if stale_english and stale_english != master_english:
                outdated.append(
                    OutdatedTerm(
                        term_id=term_id,
                        server_english=stale_english,
                        master_english=master_row.english,
                        current_translation=server_translation or "",
                    )
                )
                continue

            if not server_translation:
                continue

            total += 1
            master_translation = normalize(master_row.translation(language))
            lqa_translation = lqa_translations.get(term_id)
            if server_translation == master_translation or (
                lqa_translation is not None and server_translation == lqa_translation
            ):
                matched += 1
            else:
                unmatched.append(
                    UnmatchedTerm(
                        term_id=term_id,
                        server_translation=server_translation,
                        expected_translation=master_translation,
                        lqa_translation=lqa_translation,
                    )
                )

        is_merged = total > 0 and matched == total
        status = MergeStatus(
            language=language,
            is_merged=is_merged,
            valid_terms_matched=matched,
            valid_terms_total=total,
            status=MergeStatusCode.from_flags(is_merged, bool(outdated)),
            outdated_terms=outdated,
            unmatched_terms=unmatched,
        )
        if unmatched:
            MergeStatusEvaluator._log_unmatched(status)
        return status

    @staticmethod
    def _log_unmatched(status: MergeStatus) -> None:
        logger.warning(
            "%s: %s, %d unmerged term(s), matched %d/%d",
            status.language,
            status.status.value,
            len(status.unmatched_terms),
            status.valid_terms_matched,
            status.valid_terms_total,
        )
        for term in status.unmatched_terms:
            compared = term.lqa_translation or term.server_translation
            label = "LQA" if term.lqa_translation else "server"
            differences = character_differences(term.expected_translation, compared)
            logger.warning(
                "  %s: expected %r, %s %r; %s",
                term.term_id,
                term.expected_translation,
                label,
                compared,
                ", ".join(
                    f"@{item.position} {item.expected} != {item.actual}"
                    for item in differences
                )
                or "no character differences",
            )

    @classmethod
    def is_merged(
        cls,
        server: Dataset,
        language: str,
        master: Dataset,
        lqa: Dataset | None = None,
    ) -> bool:
        return cls.evaluate(server, language, master, lqa).is_merged

    @staticmethod
    def is_lqa_merged(lqa: Dataset, language: str, master: Dataset) -> bool:
        """True when every LQA suggestion already equals the master value."""
        lqa_translations = _translation_map(lqa, language)
        for master_row in master.rows:
            term_id = master_row.term_id
            if not term_id or master_row.should_be_translated is Flag.FALSE:
                continue
            suggestion = lqa_translations.get(term_id)
            if suggestion is None:
                continue
            current = normalize(master_row.translation(language))
            if suggestion != current:
                logger.warning(
                    "LQA not merged for %s: LQA %r, master %r", term_id, suggestion, current
                )
                return False
        return True


def evaluate(
    server: Dataset,
    language: str,
    master: Dataset,
    lqa: Dataset | None = None,
) -> MergeStatus:
    return MergeStatusEvaluator.evaluate(server, language, master, lqa)

from __future__ import annotations

from difflib import SequenceMatcher
import re
from typing import Sequence

from diff_match_patch import diff_match_patch

from config import MAX_INTERACTIVE_DIFF_LINES
from core.models import (
    ChunkType,
    DiffPart,
    DiffStats,
    DiffSummary,
    LineDiffPart,
    LineType,
)
from core.normalizer import are_equivalent, collapse_whitespace


_LineOp = tuple[ChunkType, int | None, int | None]


class TextDiffer:
    """Word, line and character diffs over plain strings.

    Every function accepts ``None`` as the empty string and never raises on
    string input. For the flat diffs, joining the values of all non-inserted
    parts gives back the old text and joining all non-deleted parts gives
    back the new text.

    Word and character diffs use a greedy alignment: on a mismatch one token
    is deleted and one inserted, with no lookahead. ``lcs_word_diff`` and
    ``semantic_char_diff`` are the accurate alternatives and are only used
    when asked for by name.
    """

    _word_split = re.compile(r"(\s+)")
    _token_pattern = re.compile(r"\w+|[^\w\s]|\s+", re.UNICODE)

    @staticmethod
    def _append_chunk(parts: list[DiffPart], chunk_type: ChunkType, text: str) -> None:
        if not text:
            return
        if parts and parts[-1].type == chunk_type:
            parts[-1].value += text
            return
        parts.append(DiffPart(type=chunk_type, value=text))

    @classmethod
    def _tokenize_words(cls, text: str) -> list[str]:
        return [token for token in cls._word_split.split(text) if token]

    @classmethod
    def _greedy_diff(cls, tokens_a: Sequence[str], tokens_b: Sequence[str]) -> list[DiffPart]:
        parts: list[DiffPart] = []
        i = j = 0
        while i < len(tokens_a) or j < len(tokens_b):
            if i >= len(tokens_a):
                cls._append_chunk(parts, ChunkType.INSERT, tokens_b[j])
                j += 1
            elif j >= len(tokens_b):
                cls._append_chunk(parts, ChunkType.DELETE, tokens_a[i])
                i += 1
            elif tokens_a[i] == tokens_b[j]:
                cls._append_chunk(parts, ChunkType.EQUAL, tokens_a[i])
                i += 1
                j += 1
            else:
                cls._append_chunk(parts, ChunkType.DELETE, tokens_a[i])
                cls._append_chunk(parts, ChunkType.INSERT, tokens_b[j])
                i += 1
                j += 1
        return parts

    @classmethod
    def word_diff(cls, old_text: str | None, new_text: str | None) -> list[DiffPart]:
        return cls._greedy_diff(
            cls._tokenize_words(old_text or ""),
            cls._tokenize_words(new_text or ""),
        )

    @classmethod
    def char_diff(cls, old_line: str | None, new_line: str | None) -> list[DiffPart]:
        return cls._greedy_diff(list(old_line or ""), list(new_line or ""))

    @staticmethod
    def compute_lcs(lines_a: Sequence[str], lines_b: Sequence[str]) -> list[tuple[int, int]]:
        """Index pairs of a longest common subsequence, in order."""
        m = len(lines_a)
        n = len(lines_b)
        dp = [[0] * (n + 1) for _ in range(m + 1)]
        for i in range(1, m + 1):
            row = dp[i]
            prev = dp[i - 1]
            line_a = lines_a[i - 1]
            for j in range(1, n + 1):
                if line_a == lines_b[j - 1]:
                    row[j] = prev[j - 1] + 1
                else:
                    row[j] = max(prev[j], row[j - 1])

        pairs: list[tuple[int, int]] = []
        i, j = m, n
        while i > 0 and j > 0:
            if lines_a[i - 1] == lines_b[j - 1]:
                pairs.append((i - 1, j - 1))
                i -= 1
                j -= 1
            elif dp[i - 1][j] >= dp[i][j - 1]:
                i -= 1
            else:
                j -= 1
        pairs.reverse()
        return pairs

    @classmethod
    def _line_ops(cls, lines_a: list[str], lines_b: list[str]) -> list[_LineOp]:
        # Last position in the new text at which each LCS line occurs.
        lcs_last_position: dict[str, int] = {}
        for _, j in cls.compute_lcs(lines_a, lines_b):
            lcs_last_position[lines_b[j]] = j

        ops: list[_LineOp] = []
        i = j = 0
        while i < len(lines_a) or j < len(lines_b):
            if i < len(lines_a) and j < len(lines_b) and lines_a[i] == lines_b[j]:
                ops.append((ChunkType.EQUAL, i, j))
                i += 1
                j += 1
            elif i < len(lines_a) and (
                j >= len(lines_b) or lcs_last_position.get(lines_a[i], -1) < j
            ):
                ops.append((ChunkType.DELETE, i, None))
                i += 1
            else:
                ops.append((ChunkType.INSERT, None, j))
                j += 1
        return ops

    @staticmethod
    def _terminated(index: int, lines: list[str]) -> bool:
        return index < len(lines) - 1

    @classmethod
    def line_diff(cls, old_text: str | None, new_text: str | None) -> list[DiffPart]:
        lines_a = (old_text or "").split("\n")
        lines_b = (new_text or "").split("\n")
        parts: list[DiffPart] = []
        for op, i, j in cls._line_ops(lines_a, lines_b):
            if op == ChunkType.DELETE:
                value = lines_a[i] + ("\n" if cls._terminated(i, lines_a) else "")
                if value:
                    parts.append(DiffPart(type=ChunkType.DELETE, value=value))
            elif op == ChunkType.INSERT:
                value = lines_b[j] + ("\n" if cls._terminated(j, lines_b) else "")
                if value:
                    parts.append(DiffPart(type=ChunkType.INSERT, value=value))
            else:
                ended_a = cls._terminated(i, lines_a)
                ended_b = cls._terminated(j, lines_b)
                line = lines_a[i]
                if ended_a and ended_b:
                    parts.append(DiffPart(type=ChunkType.EQUAL, value=line + "\n"))
                    continue
                if line:
                    parts.append(DiffPart(type=ChunkType.EQUAL, value=line))
                if ended_a:
                    parts.append(DiffPart(type=ChunkType.DELETE, value="\n"))
                elif ended_b:
                    parts.append(DiffPart(type=ChunkType.INSERT, value="\n"))
        return parts

    @classmethod
    def enhanced_line_diff(
        cls, old_text: str | None, new_text: str | None
    ) -> list[LineDiffPart]:
        """Line diff where each removed line directly followed by an added
        line becomes one modified entry carrying a character diff."""
        lines_a = (old_text or "").split("\n")
        lines_b = (new_text or "").split("\n")
        line_parts: list[LineDiffPart] = []
        for op, i, j in cls._line_ops(lines_a, lines_b):
            if op == ChunkType.DELETE:
                line_parts.append(
                    LineDiffPart(
                        line_type=LineType.REMOVED,
                        value=lines_a[i] + ("\n" if cls._terminated(i, lines_a) else ""),
                        old_line=lines_a[i],
                    )
                )
            elif op == ChunkType.INSERT:
                line_parts.append(
                    LineDiffPart(
                        line_type=LineType.ADDED,
                        value=lines_b[j] + ("\n" if cls._terminated(j, lines_b) else ""),
                        new_line=lines_b[j],
                    )
                )
            else:
                line_parts.append(
                    LineDiffPart(
                        line_type=LineType.UNCHANGED,
                        value=lines_b[j] + ("\n" if cls._terminated(j, lines_b) else ""),
                        old_line=lines_a[i],
                        new_line=lines_b[j],
                    )
                )

        enhanced: list[LineDiffPart] = []
        index = 0
        while index < len(line_parts):
            current = line_parts[index]
            following = line_parts[index + 1] if index + 1 < len(line_parts) else None
            if current.removed and following is not None and following.added:
                enhanced.append(
                    LineDiffPart(
                        line_type=LineType.MODIFIED,
                        value=following.value,
                        old_line=current.old_line,
                        new_line=following.new_line,
                        char_diff=cls.char_diff(current.old_line, following.new_line),
                    )
                )
                index += 2
                continue
            enhanced.append(current)
            index += 1
        return enhanced

    @staticmethod
    def is_multiline(old_text: str | None, new_text: str | None) -> bool:
        return "\n" in (old_text or "") or "\n" in (new_text or "")

    @classmethod
    def diff_auto(
        cls,
        old_text: str | None,
        new_text: str | None,
        *,
        line_mode: bool = False,
    ) -> list[DiffPart]:
        if line_mode or cls.is_multiline(old_text, new_text):
            return cls.line_diff(old_text, new_text)
        return cls.word_diff(old_text, new_text)

    @classmethod
    def lcs_word_diff(cls, old_text: str | None, new_text: str | None) -> list[DiffPart]:
        tokens_a = cls._token_pattern.findall(old_text or "")
        tokens_b = cls._token_pattern.findall(new_text or "")
        matcher = SequenceMatcher(None, tokens_a, tokens_b, autojunk=False)
        parts: list[DiffPart] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                cls._append_chunk(parts, ChunkType.EQUAL, "".join(tokens_a[i1:i2]))
                continue
            if tag in ("delete", "replace"):
                cls._append_chunk(parts, ChunkType.DELETE, "".join(tokens_a[i1:i2]))
            if tag in ("insert", "replace"):
                cls._append_chunk(parts, ChunkType.INSERT, "".join(tokens_b[j1:j2]))
        return parts

    @staticmethod
    def semantic_char_diff(old_text: str | None, new_text: str | None) -> list[DiffPart]:
        differ = diff_match_patch()
        diffs = differ.diff_main(old_text or "", new_text or "")
        differ.diff_cleanupSemantic(diffs)
        parts: list[DiffPart] = []
        for op, text in diffs:
            if not text:
                continue
            if op == 0:
                parts.append(DiffPart(type=ChunkType.EQUAL, value=text))
            elif op == -1:
                parts.append(DiffPart(type=ChunkType.DELETE, value=text))
            elif op == 1:
                parts.append(DiffPart(type=ChunkType.INSERT, value=text))
        return parts

    @staticmethod
    def reconstruct(parts: Sequence[DiffPart], side: str) -> str:
        if side == "old":
            return "".join(part.value for part in parts if not part.added)
        return "".join(part.value for part in parts if not part.removed)

    @classmethod
    def diff_stats(cls, old_text: str | None, new_text: str | None) -> DiffStats:
        stats = DiffStats()
        for part in cls.word_diff(old_text, new_text):
            chars = len(part.value)
            words = len(part.value.split())
            if part.added:
                stats.added_chars += chars
                stats.added_words += words
            elif part.removed:
                stats.removed_chars += chars
                stats.removed_words += words
            else:
                stats.unchanged_chars += chars
                stats.unchanged_words += words
        return stats

    @classmethod
    def diff_summary(cls, old_text: str | None, new_text: str | None) -> DiffSummary:
        if are_equivalent(old_text, new_text):
            return DiffSummary(type="identical", message="No changes")

        stats = cls.diff_stats(old_text, new_text)
        added = stats.added_words
        removed = stats.removed_words
        if added > 0 and removed > 0:
            return DiffSummary(
                type="modified",
                message=f"Modified (+{added} -{removed} words)",
                added_words=added,
                removed_words=removed,
            )
        if added > 0:
            return DiffSummary(
                type="added", message=f"Added (+{added} words)", added_words=added
            )
        if removed > 0:
            return DiffSummary(
                type="removed", message=f"Removed (-{removed} words)", removed_words=removed
            )
        return DiffSummary(type="unknown", message="Changed")

    @staticmethod
    def are_texts_identical(
        old_text: str | None,
        new_text: str | None,
        *,
        ignore_case: bool = False,
        ignore_whitespace: bool = False,
    ) -> bool:
        text_a = old_text or ""
        text_b = new_text or ""
        if ignore_whitespace:
            text_a = collapse_whitespace(text_a)
            text_b = collapse_whitespace(text_b)
        if ignore_case:
            text_a = text_a.lower()
            text_b = text_b.lower()
        return text_a == text_b

    @staticmethod
    def exceeds_interactive_limit(
        old_text: str | None,
        new_text: str | None,
        limit: int = MAX_INTERACTIVE_DIFF_LINES,
    ) -> bool:
        return max((old_text or "").count("\n"), (new_text or "").count("\n")) + 1 > limit

from __future__ import annotations

from dataclasses import dataclass
import html
from typing import Sequence

from core.diff_engine import TextDiffer
from core.models import DiffPart, LineDiffPart


@dataclass
class DiffClasses:
    added: str = "diff-added"
    removed: str = "diff-removed"
    unchanged: str = "diff-unchanged"
    char_added: str = "char-added"
    char_removed: str = "char-removed"


class DiffRenderer:
    """HTML fragments for diff parts. All diff text is escaped."""

    def __init__(self, classes: DiffClasses | None = None) -> None:
        self.classes = classes or DiffClasses()

    @staticmethod
    def escape(text: str) -> str:
        return html.escape(text or "", quote=True)

    @classmethod
    def escape_multiline(cls, text: str) -> str:
        return cls.escape(text).replace("\n", "<br>")

    def _span(self, css_class: str, text: str, *, multiline: bool = False) -> str:
        body = self.escape_multiline(text) if multiline else self.escape(text)
        return f'<span class="{css_class}">{body}</span>'

    def _part_class(self, part: DiffPart | LineDiffPart, *, char_level: bool = False) -> str:
        if part.added:
            if char_level:
                return f"{self.classes.added} {self.classes.char_added}"
            return self.classes.added
        if part.removed:
            if char_level:
                return f"{self.classes.removed} {self.classes.char_removed}"
            return self.classes.removed
        return self.classes.unchanged

    def render_parts(self, parts: Sequence[DiffPart], *, multiline: bool = False) -> str:
        return "".join(
            self._span(self._part_class(part), part.value, multiline=multiline)
            for part in parts
        )

    def diff_html(
        self,
        old_text: str | None,
        new_text: str | None,
        *,
        line_mode: bool = False,
    ) -> str:
        return self.render_parts(TextDiffer.diff_auto(old_text, new_text, line_mode=line_mode))

    def side_by_side_html(self, old_text: str | None, new_text: str | None) -> tuple[str, str]:
        old_parts: list[str] = []
        new_parts: list[str] = []
        for part in TextDiffer.diff_auto(old_text, new_text):
            span = self._span(self._part_class(part), part.value)
            if part.added:
                new_parts.append(span)
            elif part.removed:
                old_parts.append(span)
            else:
                old_parts.append(span)
                new_parts.append(span)
        return "".join(old_parts), "".join(new_parts)

    def char_diff_html(self, parts: Sequence[DiffPart]) -> str:
        return "".join(
            self._span(self._part_class(part, char_level=True), part.value, multiline=True)
            for part in parts
        )

    def enhanced_diff_html(self, line_parts: Sequence[LineDiffPart]) -> str:
        rendered: list[str] = []
        for part in line_parts:
            if part.modified:
                rendered.append(
                    '<div class="enhanced-diff-line modified-line">'
                    '<div class="line-label">Modified line</div>'
                    f'<div class="char-diff-content">{self.char_diff_html(part.char_diff)}</div>'
                    "</div>"
                )
                continue
            rendered.append(self._span(self._part_class(part), part.value, multiline=True))
        return "".join(rendered)

    def term_diff_html(self, old_text: str | None, new_text: str | None) -> str:
        """Enhanced line diff for multi-line text, character diff otherwise."""
        if TextDiffer.is_multiline(old_text, new_text):
            return self.enhanced_diff_html(TextDiffer.enhanced_line_diff(old_text, new_text))
        return self.char_diff_html(TextDiffer.char_diff(old_text, new_text))

    def newline_diff_html(self, old_text: str | None, new_text: str | None) -> str:
        def visible(text: str | None) -> str:
            return self.escape(text or "").replace("\n", "\\n").replace("\r", "\\r")

        return (
            '<div class="newline-diff">'
            '<div class="newline-note">Line ending / whitespace difference only</div>'
            f'<div class="{self.classes.removed}">Original: "{visible(old_text)}"</div>'
            f'<div class="{self.classes.added}">Updated: "{visible(new_text)}"</div>'
            "</div>"
        )

from __future__ import annotations

from datetime import datetime, timezone
import html
from pathlib import Path

from jinja2 import Template

from config import APP_NAME
from core.diff_render import DiffRenderer
from core.models import ReconciliationReport, TermStatus, UpdateDetail
from core.utils import resource_path
from reporters.base import BaseReporter


class HtmlReporter(BaseReporter):
    name = "HTML Reporter"
    output_extension = ".html"
    supports_rich_text = True

    def __init__(self) -> None:
        self.renderer = DiffRenderer()

    def generate(self, report: ReconciliationReport, output_path: str) -> str:
        output_file = self._normalize_output_path(output_path)
        template, styles = self._load_template_assets()
        rows = [self._translation_row(report, term_id) for term_id in report.needs_translation]
        html_content = template.render(
            styles=styles,
            report_title=self._escape(f"{APP_NAME}: {report.language}"),
            report_subtitle=self._escape(self._source_label(report)),
            language=self._escape(report.language),
            timestamp=self._format_timestamp(report.timestamp),
            counts={
                "total": len(report.statuses),
                "needs_translation": report.total_needs_translation,
                "needs_update": report.total_needs_update,
                "unchanged": len(report.unchanged),
                "found_in_master": len(report.found_in_master),
                "not_translatable": sum(
                    1 for status in report.statuses.values() if status == TermStatus.NOT_TRANSLATABLE
                ),
            },
            updates=[self._update_row(index, detail) for index, detail in enumerate(report.needs_update, start=1)],
            translations=rows,
            found_in_master=[self._escape(term_id) for term_id in report.found_in_master],
            warnings=[self._escape(warning) for warning in report.warnings],
            is_complete=report.is_complete,
        )
        output_file.write_text(html_content, encoding="utf-8")
        return str(output_file)

    def _update_row(self, index: int, detail: UpdateDetail) -> dict[str, object]:
        if detail.line_diff:
            diff_html = self.renderer.enhanced_diff_html(detail.line_diff)
        else:
            diff_html = self.renderer.escape_multiline(detail.new_text)
        return {
            "index": index,
            "term_id": self._escape(detail.term_id),
            "old_text": self.renderer.escape_multiline(detail.old_text),
            "new_text": self.renderer.escape_multiline(detail.new_text),
            "user_translation": self.renderer.escape_multiline(detail.user_translation),
            "diff_html": diff_html,
            "summary": self._escape(detail.summary.message if detail.summary else ""),
            "summary_type": detail.summary.type if detail.summary else "unknown",
        }

    def _translation_row(self, report: ReconciliationReport, term_id: str) -> dict[str, str]:
        english = ""
        notes = ""
        for row in report.dataset.rows:
            if row.term_id == term_id:
                english = row.english
                notes = row.notes
                break
        return {
            "term_id": self._escape(term_id),
            "english": self.renderer.escape_multiline(english),
            "notes": self.renderer.escape_multiline(notes),
        }

    @staticmethod
    def _source_label(report: ReconciliationReport) -> str:
        if report.dataset.source_path:
            return Path(report.dataset.source_path).name
        return f"{len(report.dataset)} terms"

    def _format_timestamp(self, timestamp: datetime | None) -> str:
        timestamp_utc = self._ensure_utc_timestamp(timestamp or datetime.now(timezone.utc))
        return timestamp_utc.strftime("%Y-%m-%d %H:%M:%S UTC")

    @staticmethod
    def _ensure_utc_timestamp(timestamp: datetime) -> datetime:
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=timezone.utc)
        return timestamp.astimezone(timezone.utc)

    @staticmethod
    def _load_template_assets() -> tuple[Template, str]:
        template_dir = Path(resource_path("reporters/templates"))
        template = Template((template_dir / "report.html.j2").read_text(encoding="utf-8"))
        styles = (template_dir / "styles.css").read_text(encoding="utf-8")
        return template, styles

    @staticmethod
    def _escape(text: str) -> str:
        return html.escape(text or "", quote=True)

from __future__ import annotations

import xlsxwriter

from core.diff_engine import TextDiffer
from core.models import ChunkType, DiffPart, ReconciliationReport, TermStatus
from reporters.base import BaseReporter


class ExcelReporter(BaseReporter):
    name = "Excel Reporter"
    output_extension = ".xlsx"
    supports_rich_text = True

    def generate(self, report: ReconciliationReport, output_path: str) -> str:
        output_file = self._normalize_output_path(output_path)
        workbook = xlsxwriter.Workbook(
            str(output_file),
            {
                "strings_to_formulas": False,
                "strings_to_numbers": False,
                "strings_to_urls": False,
            },
        )
        try:
            update_ws = workbook.add_worksheet("Needs Update")
            missing_ws = workbook.add_worksheet("Needs Translation")
            stats_ws = workbook.add_worksheet("Statistics")

            header_format = workbook.add_format(
                {"bold": True, "bg_color": "#f3f4f6", "text_wrap": True}
            )
            cell_format = workbook.add_format({"text_wrap": True, "valign": "top"})
            update_format = workbook.add_format(
                {"bg_color": "#fffbeb", "text_wrap": True, "valign": "top"}
            )
            diff_formats = {
                ChunkType.DELETE: workbook.add_format(
                    {"font_color": "#b91c1c", "font_strikeout": True, "text_wrap": True}
                ),
                ChunkType.INSERT: workbook.add_format(
                    {"font_color": "#15803d", "underline": True, "text_wrap": True}
                ),
            }

            update_ws.write_row(
                0,
                0,
                ["#", "Term ID", "Change", "Old English", "New English", report.language],
                header_format,
            )
            update_ws.set_column(0, 0, 6)
            update_ws.set_column(1, 1, 22)
            update_ws.set_column(2, 2, 24)
            update_ws.set_column(3, 5, 46)
            update_ws.freeze_panes(1, 0)
            for row, detail in enumerate(report.needs_update, start=1):
                diff = TextDiffer.char_diff(detail.old_text, detail.new_text)
                update_ws.write_number(row, 0, row, update_format)
                self._write_text(update_ws, row, 1, detail.term_id, update_format)
                self._write_text(
                    update_ws, row, 2, detail.summary.message if detail.summary else "", update_format
                )
                self._write_rich(update_ws, row, 3, diff, update_format, diff_formats, side="old")
                self._write_rich(update_ws, row, 4, diff, update_format, diff_formats, side="new")
                self._write_text(update_ws, row, 5, detail.user_translation, update_format)
            update_ws.autofilter(0, 0, max(1, len(report.needs_update)), 5)

            missing_ws.write_row(0, 0, ["Term ID", "English", "Notes"], header_format)
            missing_ws.set_column(0, 0, 22)
            missing_ws.set_column(1, 1, 60)
            missing_ws.set_column(2, 2, 40)
            missing_ws.freeze_panes(1, 0)
            rows_by_id = report.dataset.index_by_term_id()
            for row, term_id in enumerate(report.needs_translation, start=1):
                term = rows_by_id.get(term_id)
                self._write_text(missing_ws, row, 0, term_id, cell_format)
                self._write_text(missing_ws, row, 1, term.english if term else "", cell_format)
                self._write_text(missing_ws, row, 2, term.notes if term else "", cell_format)

            not_translatable = sum(
                1 for status in report.statuses.values() if status == TermStatus.NOT_TRANSLATABLE
            )
            stats_labels = [
                ("Language", report.language),
                ("Total", len(report.statuses)),
                ("Needs translation", report.total_needs_translation),
                ("Needs update", report.total_needs_update),
                ("Unchanged", len(report.unchanged)),
                ("Kept from master", len(report.found_in_master)),
                ("Not translatable", not_translatable),
                ("Warnings", len(report.warnings)),
            ]
            stats_ws.set_column(0, 0, 20)
            stats_ws.set_column(1, 1, 14)
            for row_index, (label, value) in enumerate(stats_labels):
                stats_ws.write(row_index, 0, label, header_format)
                stats_ws.write(row_index, 1, value)
        finally:
            workbook.close()

        return str(output_file)

    def _write_rich(
        self,
        worksheet,
        row: int,
        col: int,
        diff: list[DiffPart],
        cell_format,
        diff_formats: dict[ChunkType, object],
        side: str,
    ) -> None:
        fragments: list[object] = []
        text_buffer: list[str] = []
        for part in diff:
            if part.type == ChunkType.EQUAL:
                text_buffer.append(part.value)
                continue
            if (part.removed and side == "old") or (part.added and side == "new"):
                if text_buffer:
                    fragments.append("".join(text_buffer))
                    text_buffer.clear()
                fragments.append(diff_formats[part.type])
                fragments.append(part.value)
        if text_buffer:
            fragments.append("".join(text_buffer))

        plain_text = TextDiffer.reconstruct(diff, side)
        # write_rich_string needs more than two fragments with at least one styled run.
        has_rich_runs = any(not isinstance(item, str) for item in fragments)
        if len(fragments) <= 2 or not has_rich_runs:
            self._write_text(worksheet, row, col, plain_text, cell_format)
            return

        if worksheet.write_rich_string(row, col, *fragments, cell_format) != 0:
            self._write_text(worksheet, row, col, plain_text, cell_format)

    @staticmethod
    def _write_text(worksheet, row: int, col: int, value: object, cell_format) -> None:
        text = "" if value is None else str(value)
        worksheet.write_string(row, col, text, cell_format)

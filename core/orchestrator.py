from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Callable

from config import STANDARD_COLUMNS
from core.base_sync import BaseFileSync
from core.converter import SheetConverter
from core.merge_checker import MergeStatusEvaluator
from core.models import (
    BaseChanges,
    ComparisonResult,
    Dataset,
    LanguageStats,
    MergeStatus,
    ParseError,
    ReconciliationReport,
    UnsupportedFormatError,
    ValidationError,
)
from core.reconciler import TermReconciler
from core.registry import ParserRegistry, ReporterRegistry
from core.serialization import completion_stats, latest_version_dataset, write_csv
from core.term_compare import TermComparer
from core.utils import safe_stem, timestamp_label
from core.validation import ensure_usable, resolve_candidate_language, validate_dataset


logger = logging.getLogger(__name__)

REPORT_EXTENSIONS = (".csv", ".html", ".xlsx")


@dataclass
class Orchestrator:
    on_progress: Callable[[str, float], None] | None = None
    last_report: ReconciliationReport | None = None
    report_extensions: tuple[str, ...] = field(default=REPORT_EXTENSIONS)

    def __post_init__(self) -> None:
        ParserRegistry.discover()
        ReporterRegistry.discover()

    def load(self, filepath: str) -> Dataset:
        try:
            return ParserRegistry.parse_file(filepath)
        except ParseError as exc:
            raise ParseError(filepath, exc.reason) from exc
        except UnsupportedFormatError as exc:
            raise UnsupportedFormatError(Path(filepath).suffix.lower()) from exc

    def load_master(self, filepath: str) -> Dataset:
        master = self.load(filepath)
        ensure_usable(master, "master file")
        result = validate_dataset(master)
        for issue in result.issues:
            logger.warning("%s: %s", filepath, issue)
        return master

    def reconcile_files(
        self,
        master_file: str,
        candidate_file: str,
        output_dir: str,
        *,
        language: str | None = None,
    ) -> tuple[ReconciliationReport, list[str]]:
        self._progress("Parsing master file", 0.1)
        master = self.load_master(master_file)

        self._progress("Parsing candidate file", 0.3)
        candidate = self.load(candidate_file)
        language = resolve_candidate_language(candidate, language)

        self._progress("Reconciling terms", 0.5)
        report = TermReconciler.reconcile(master, candidate, language)
        self.last_report = report

        self._progress("Generating reports", 0.8)
        output_dir_path = Path(output_dir)
        output_dir_path.mkdir(parents=True, exist_ok=True)
        base_name = f"{safe_stem(language)}_reconciled_{timestamp_label(report.timestamp)}"
        outputs = [
            ReporterRegistry.get_reporter(extension).generate(
                report, str(output_dir_path / f"{base_name}{extension}")
            )
            for extension in self.report_extensions
        ]

        self._progress("Done", 1.0)
        return report, outputs

    def merge_status(
        self,
        server_file: str,
        master_file: str,
        language: str,
        *,
        lqa_file: str | None = None,
    ) -> MergeStatus:
        self._progress("Parsing files", 0.2)
        master = self.load_master(master_file)
        server = self.load(server_file)
        lqa = self.load(lqa_file) if lqa_file else None

        self._progress("Checking merge status", 0.6)
        status = MergeStatusEvaluator.evaluate(server, language, master, lqa)
        self._progress("Done", 1.0)
        return status

    def lqa_status(self, lqa_file: str, master_file: str, language: str) -> bool:
        master = self.load_master(master_file)
        lqa = self.load(lqa_file)
        return MergeStatusEvaluator.is_lqa_merged(lqa, language, master)

    def compare_files(
        self,
        file_a: str,
        file_b: str,
        *,
        language: str | None = None,
        ignore_case: bool = False,
        ignore_whitespace: bool = False,
    ) -> ComparisonResult:
        self._progress("Parsing file A", 0.2)
        dataset_a = self.load(file_a)
        self._progress("Parsing file B", 0.4)
        dataset_b = self.load(file_b)

        self._progress("Comparing terms", 0.6)
        result = TermComparer.compare(
            dataset_a,
            dataset_b,
            language or "auto",
            ignore_case=ignore_case,
            ignore_whitespace=ignore_whitespace,
        )
        self._progress("Done", 1.0)
        return result

    def base_changes(
        self,
        master_file: str,
        base_file: str,
        output_dir: str | None = None,
    ) -> tuple[BaseChanges, str | None]:
        master = self.load_master(master_file)
        uploaded = self.load(base_file)
        ensure_usable(uploaded, "base file")

        changes = BaseFileSync.compare(master, uploaded)
        if output_dir is None or not changes.has_changes:
            return changes, None

        updated = BaseFileSync.apply(master, changes)
        output_path = Path(output_dir) / f"master_updated_{timestamp_label()}.csv"
        return changes, write_csv(updated, str(output_path))

    def export_language(self, master_file: str, language: str, output_dir: str) -> str:
        master = self.load_master(master_file)
        if language not in master.languages:
            raise ValidationError(
                f"Language column '{language}' not found in master"
                f" (found: {', '.join(master.languages) or 'none'})"
            )
        dataset = latest_version_dataset(master, language)
        output_path = Path(output_dir) / f"{safe_stem(language)}_latest.csv"
        return write_csv(dataset, str(output_path))

    def stats(self, master_file: str) -> list[LanguageStats]:
        return completion_stats(self.load_master(master_file))

    def convert(self, input_file: str, output_dir: str, *, find_sheet: bool = True) -> str:
        source = Path(input_file)
        extension = source.suffix.lower()
        output_path = Path(output_dir) / source.stem
        converter = SheetConverter(on_progress=self.on_progress)
        if extension == ".csv":
            return converter.csv_to_xlsx(str(source), str(output_path.with_suffix(".xlsx")))
        if extension == ".xlsx":
            return converter.xlsx_to_csv(
                str(source),
                str(output_path.with_suffix(".csv")),
                expected_headers=list(STANDARD_COLUMNS) if find_sheet else None,
            )
        raise UnsupportedFormatError(extension)

    def _progress(self, message: str, value: float) -> None:
        if self.on_progress is not None:
            self.on_progress(message, value)

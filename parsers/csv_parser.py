from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

import chardet

from core.models import Dataset, ParseError
from parsers.base import BaseParser, rows_to_dataset


logger = logging.getLogger(__name__)


def decode_bytes(raw: bytes) -> tuple[str, str]:
    """Decode uploaded bytes as UTF-8, falling back to the detected encoding."""
    try:
        return raw.decode("utf-8-sig"), "utf-8"
    except UnicodeDecodeError:
        detected = chardet.detect(raw).get("encoding") or "latin-1"
        logger.debug("Falling back to detected encoding %s", detected)
        return raw.decode(detected, errors="replace"), detected


def parse_csv_text(text: str, source_path: str | None = None) -> Dataset:
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        return rows_to_dataset(reader, source_path=source_path)
    except csv.Error as exc:
        raise ParseError(source_path or "<text>", str(exc)) from exc


class CsvParser(BaseParser):
    name = "CSV Parser"
    supported_extensions = [".csv"]
    format_description = "Localization CSV"

    def can_handle(self, filepath: str) -> bool:
        return Path(filepath).suffix.lower() in self.supported_extensions

    def parse(self, filepath: str) -> Dataset:
        try:
            raw = Path(filepath).read_bytes()
        except OSError as exc:
            raise ParseError(filepath, str(exc)) from exc

        text, encoding = decode_bytes(raw)
        dataset = parse_csv_text(text, source_path=filepath)
        logger.info("Parsed %d rows from %s (%s)", len(dataset), filepath, encoding)
        for warning in dataset.warnings:
            logger.warning("%s: %s", filepath, warning)
        return dataset

    def validate(self, filepath: str) -> list[str]:
        errors: list[str] = []
        try:
            dataset = self.parse(filepath)
        except ParseError as exc:
            errors.append(exc.reason)
            return errors
        if not dataset.header:
            errors.append("File has no header row")
        return errors

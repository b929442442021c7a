from __future__ import annotations

import importlib
import inspect
from pathlib import Path
from typing import Callable, ClassVar, Type

from core.models import Dataset, ParseError, UnsupportedFormatError
from parsers.base import BaseParser
from reporters.base import BaseReporter


# Frozen builds cannot glob the package directories.
PARSER_HIDDEN_IMPORTS = [
    "parsers.csv_parser",
    "parsers.xlsx_parser",
]

REPORTER_HIDDEN_IMPORTS = [
    "reporters.html_reporter",
    "reporters.excel_reporter",
    "reporters.csv_reporter",
]


def _module_names(package_name: str) -> list[str]:
    package_dir = Path(__file__).resolve().parents[1] / package_name
    if not package_dir.exists():
        return []
    return [
        f"{package_name}.{path.stem}"
        for path in sorted(package_dir.glob("*.py"))
        if not path.name.startswith("_")
    ]


def _register_module_classes(module, base_class: type, register: Callable) -> None:
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj is base_class or not issubclass(obj, base_class):
            continue
        if inspect.isabstract(obj):
            continue
        register(obj)


def _discover(
    package_name: str,
    hidden_imports: list[str],
    base_class: type,
    register: Callable,
) -> None:
    for module_name in _module_names(package_name) or hidden_imports:
        _register_module_classes(importlib.import_module(module_name), base_class, register)


class ParserRegistry:
    _parsers: ClassVar[dict[str, Type[BaseParser]]] = {}

    @classmethod
    def discover(cls) -> None:
        _discover("parsers", PARSER_HIDDEN_IMPORTS, BaseParser, cls.register)

    @classmethod
    def register(cls, parser_class: Type[BaseParser]) -> None:
        if not inspect.isclass(parser_class) or not issubclass(parser_class, BaseParser):
            raise TypeError("Parser must be a BaseParser subclass")
        for ext in parser_class.supported_extensions:
            key = ext.lower()
            existing = cls._parsers.get(key)
            if existing is not None and existing is not parser_class:
                raise ValueError(f"Extension already registered: {key}")
            cls._parsers[key] = parser_class

    @classmethod
    def get_parser(cls, filepath: str) -> BaseParser:
        ext = Path(filepath).suffix.lower()
        parser_class = cls._parsers.get(ext)
        if parser_class is None:
            raise UnsupportedFormatError(ext)
        parser = parser_class()
        if not parser.can_handle(filepath):
            raise UnsupportedFormatError(ext)
        return parser

    @classmethod
    def parse_file(cls, filepath: str) -> Dataset:
        if not Path(filepath).is_file():
            raise ParseError(filepath, "File not found")
        return cls.get_parser(filepath).parse(filepath)

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return sorted(cls._parsers.keys())

    @classmethod
    def descriptions(cls) -> dict[str, str]:
        return {ext: cls._parsers[ext].format_description for ext in cls.supported_extensions()}


class ReporterRegistry:
    _reporters: ClassVar[dict[str, Type[BaseReporter]]] = {}

    @classmethod
    def discover(cls) -> None:
        _discover("reporters", REPORTER_HIDDEN_IMPORTS, BaseReporter, cls.register)

    @classmethod
    def register(cls, reporter_class: Type[BaseReporter]) -> None:
        if not inspect.isclass(reporter_class) or not issubclass(reporter_class, BaseReporter):
            raise TypeError("Reporter must be a BaseReporter subclass")
        key = reporter_class.output_extension.lower()
        existing = cls._reporters.get(key)
        if existing is not None and existing is not reporter_class:
            raise ValueError(f"Extension already registered: {key}")
        cls._reporters[key] = reporter_class

    @classmethod
    def get_reporter(cls, output_extension: str) -> BaseReporter:
        key = output_extension.lower()
        if key and not key.startswith("."):
            key = f".{key}"
        reporter_class = cls._reporters.get(key)
        if reporter_class is None:
            raise UnsupportedFormatError(key)
        return reporter_class()

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return sorted(cls._reporters.keys())

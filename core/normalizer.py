"""Text equivalence used by reconciliation and merge checks.

Two strings are equivalent when their ``normalize`` forms are equal. The
comparison stays case- and whitespace-sensitive; ``normalize_for_equality``
adds case and whitespace folding for display classification only and must
not be used for reconciliation or merge status.
"""

from __future__ import annotations

import re
import unicodedata


ESCAPE_QUOTE = "'"

PUNCTUATION_MAP = str.maketrans(
    {
        "、": ",",  # ideographic comma
        "，": ",",  # full-width comma
        "。": ".",  # ideographic full stop
        "．": ".",  # full-width full stop
        "？": "?",
        "！": "!",
        "：": ":",
        "；": ";",
        "“": '"',
        "”": '"',
        "‘": "'",
        "’": "'",
    }
)

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_line_endings(text: str | None) -> str:
    return (text or "").replace("\r\n", "\n").replace("\r", "\n")


def strip_escape_quote(text: str | None) -> str:
    value = text or ""
    return value[1:] if value.startswith(ESCAPE_QUOTE) else value


def normalize(text: str | None) -> str:
    """Canonical comparison form of a spreadsheet value.

    Line endings become ``\\n``, full-width and typographic punctuation
    becomes ASCII and the result is NFKC-normalized. A single leading
    spreadsheet escape quote is then dropped. A value whose remainder also
    starts with a quote is left alone so that ``normalize`` stays idempotent.
    """
    if not text:
        return ""
    value = normalize_line_endings(text).translate(PUNCTUATION_MAP)
    # NFKC can yield ideographic punctuation (e.g. U+FE51), so map again.
    value = unicodedata.normalize("NFKC", value).translate(PUNCTUATION_MAP)
    if value.startswith(ESCAPE_QUOTE) and not value.startswith(ESCAPE_QUOTE * 2):
        value = value[1:]
    return value


def are_equivalent(text_a: str | None, text_b: str | None) -> bool:
    return normalize(text_a) == normalize(text_b)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def normalize_for_equality(
    text: str | None,
    *,
    ignore_case: bool = False,
    ignore_whitespace: bool = False,
) -> str:
    value = strip_escape_quote(text)
    if ignore_case:
        value = value.lower()
    if ignore_whitespace:
        value = collapse_whitespace(value)
    return value


def values_equal(
    value_a: str | None,
    value_b: str | None,
    *,
    ignore_case: bool = False,
    ignore_whitespace: bool = False,
) -> bool:
    return normalize_for_equality(
        value_a, ignore_case=ignore_case, ignore_whitespace=ignore_whitespace
    ) == normalize_for_equality(
        value_b, ignore_case=ignore_case, ignore_whitespace=ignore_whitespace
    )


def is_newline_only_difference(value_a: str | None, value_b: str | None) -> bool:
    """True when two values differ only in line endings or whitespace runs."""
    a = strip_escape_quote(value_a)
    b = strip_escape_quote(value_b)
    if normalize_line_endings(a) == normalize_line_endings(b):
        return True
    return a != b and collapse_whitespace(a) == collapse_whitespace(b)

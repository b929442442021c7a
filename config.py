from __future__ import annotations

APP_NAME = "Localisation Reconciler"
APP_VERSION = "1.0"

TERM_ID_COLUMN = "termID"
NOTES_COLUMN = "notes"
SHOULD_BE_TRANSLATED_COLUMN = "shouldBeTranslated"
NEEDS_UPDATE_COLUMN = "translationNeedsToBeUpdated"
ENGLISH_COLUMN = "English"

STANDARD_COLUMNS = (
    TERM_ID_COLUMN,
    NOTES_COLUMN,
    SHOULD_BE_TRANSLATED_COLUMN,
    NEEDS_UPDATE_COLUMN,
    ENGLISH_COLUMN,
)
REQUIRED_COLUMNS = (TERM_ID_COLUMN, ENGLISH_COLUMN)

FLAG_TRUE = "TRUE"
FLAG_FALSE = "FALSE"

# Server-side key for LQA overlay files, e.g. "LQA_French".
LQA_PREFIX = "LQA_"

DEFAULT_OUTPUT_DIR = "./output/"
REPORT_TIMESTAMP_FORMAT = "%d-%m-%y--%H-%M-%S"

# LCS is O(n*m); diffs above this many lines are flagged for interactive use.
MAX_INTERACTIVE_DIFF_LINES = 2000
CHARACTER_DIFF_LIMIT = 10

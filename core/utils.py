from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path
import sys

from config import REPORT_TIMESTAMP_FORMAT


PROJECT_ROOT = Path(__file__).resolve().parents[1]


def resource_path(relative_path: str) -> str:
    """Return absolute path to a bundled resource for dev and PyInstaller."""
    if hasattr(sys, "_MEIPASS"):
        return os.path.join(sys._MEIPASS, relative_path)  # type: ignore[attr-defined]
    return str(PROJECT_ROOT / relative_path)


def timestamp_label(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime(REPORT_TIMESTAMP_FORMAT)


def safe_stem(name: str) -> str:
    safe = name.strip().replace(" ", "_")
    for bad in '<>:"/\\|?*':
        safe = safe.replace(bad, "_")
    return safe or "output"

"""Helpers for naming and finding session log files."""

import datetime as _dt
import re
from pathlib import Path
from typing import List, Optional

from ..config.log_format import (
    FILENAME_TIMESTAMP_FORMAT,
    LOG_NAME_MARKER,
    LOG_SUFFIX,
    SESSION_DATE_DISPLAY_FORMAT,
    SESSION_DATE_RE,
    UNKNOWN_DATE,
)

# Allow only alphanumerics, underscore, dot, and dash.
_PACKAGE_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def _sanitize_package_name(name: str) -> str:
    cleaned = _PACKAGE_NAME_RE.sub("_", name).strip("_")
    return cleaned or "unknown"


def session_log_filename(package_name: Optional[str], started_at: _dt.datetime) -> str:
    """
    Return the file name for a session log.

    Example: "com.example.game_GameBar_log_20250115_143245.csv"
    """
    stamp = started_at.strftime(FILENAME_TIMESTAMP_FORMAT)
    if package_name:
        return f"{_sanitize_package_name(package_name)}_{LOG_NAME_MARKER}_{stamp}{LOG_SUFFIX}"
    return f"{LOG_NAME_MARKER}_{stamp}{LOG_SUFFIX}"


def parse_session_start(file_name: str) -> Optional[_dt.datetime]:
    """Return the start time encoded as ``_yyyyMMdd_HHmmss`` in *file_name*."""
    match = SESSION_DATE_RE.search(file_name)
    if match is None:
        return None
    try:
        return _dt.datetime.strptime(match.group(1) + match.group(2), "%Y%m%d%H%M%S")
    except ValueError:
        return None


def extract_session_date(file_name: str) -> str:
    """Human-readable session date from the file name, or ``"Unknown Date"``."""
    started = parse_session_start(file_name)
    if started is None:
        return UNKNOWN_DATE
    return started.strftime(SESSION_DATE_DISPLAY_FORMAT)


def list_session_logs(directory: Path, package_name: Optional[str] = None) -> List[Path]:
    """
    List session logs under *directory*, newest first.

    Files are ordered by the timestamp in their name, falling back to the
    modification time for names without one. A missing directory yields an
    empty list.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    pattern = f"*{LOG_NAME_MARKER}*{LOG_SUFFIX}"
    if package_name:
        pattern = f"{_sanitize_package_name(package_name)}_{LOG_NAME_MARKER}*{LOG_SUFFIX}"

    def _sort_key(path: Path) -> float:
        started = parse_session_start(path.name)
        if started is not None:
            return started.timestamp()
        return path.stat().st_mtime

    return sorted((p for p in directory.glob(pattern) if p.is_file()), key=_sort_key, reverse=True)

"""CSV writing helpers for recorded overlay samples."""

from __future__ import annotations

import csv
import datetime as _dt
import logging
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from ..config.app_config import DEFAULT_MAX_BUFFERED_ROWS, AnalyzerSettings
from ..config.log_format import CPU_CLOCK_SEPARATOR, LOG_HEADER, NOT_AVAILABLE, TIMESTAMP_FORMAT
from ..core.ringbuffer import RingBuffer
from .file_paths import session_log_filename

logger = logging.getLogger(__name__)

# Keyword names accepted by SessionLogRecorder.add_sample, in column order.
SAMPLE_FIELDS = (
    "date_time",
    "package_name",
    "fps",
    "frame_time",
    "battery_temp",
    "cpu_usage",
    "cpu_clock",
    "cpu_temp",
    "ram_usage",
    "ram_speed",
    "ram_temp",
    "gpu_usage",
    "gpu_clock",
    "gpu_temp",
)


def write_rows(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """
    Write a header row and all data rows to a CSV file.

    Directories are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)


class SessionLogRecorder:
    """
    Collect overlay samples while a capture is running and export them as a
    session log.

    Rows are kept in a :class:`RingBuffer`, so a capture that runs for hours
    keeps only the newest ``max_rows`` samples. Samples offered while not
    capturing are ignored.
    """

    def __init__(self, max_rows: int = DEFAULT_MAX_BUFFERED_ROWS) -> None:
        self._rows: RingBuffer[tuple[str, ...]] = RingBuffer(max_rows)
        self._capturing = False
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: AnalyzerSettings) -> "SessionLogRecorder":
        """Size the row buffer from ``settings.max_buffered_rows``."""
        return cls(max_rows=settings.max_buffered_rows)

    @property
    def is_capturing(self) -> bool:
        with self._lock:
            return self._capturing

    def start_capture(self) -> None:
        with self._lock:
            self._rows.clear()
            self._capturing = True
        logger.info("Session capture started")

    def stop_capture(self) -> None:
        with self._lock:
            self._capturing = False
        logger.info("Session capture stopped (%d rows buffered)", len(self))

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def add_sample(self, date_time: _dt.datetime | str | None = None, **columns: Any) -> bool:
        """
        Buffer one sample. Missing columns are written as ``N/A``.

        Returns ``True`` when the sample was stored.
        """
        unknown = set(columns) - set(SAMPLE_FIELDS)
        if unknown:
            raise TypeError(f"unknown sample columns: {sorted(unknown)}")

        if date_time is None:
            date_time = _dt.datetime.now()
        if isinstance(date_time, _dt.datetime):
            date_time = date_time.strftime(TIMESTAMP_FORMAT)

        row = [str(date_time)]
        for name in SAMPLE_FIELDS[1:]:
            value = columns.get(name)
            if isinstance(value, (list, tuple)):
                value = CPU_CLOCK_SEPARATOR.join(str(v) for v in value)
            # Commas would shift every following column.
            row.append("N/A" if value is None else str(value).replace(",", ";"))

        with self._lock:
            if not self._capturing:
                return False
            self._rows.append(tuple(row))
        return True

    def export(
        self,
        out_dir: Path,
        package_name: Optional[str] = None,
        started_at: Optional[_dt.datetime] = None,
    ) -> Optional[Path]:
        """
        Write the buffered rows to ``out_dir`` and return the new file path.

        Package name and start time default to those of the oldest buffered
        row. Nothing is written (and ``None`` returned) when the buffer is
        empty.
        """
        with self._lock:
            if len(self._rows) == 0:
                logger.info("Nothing to export; session buffer is empty")
                return None
            first = self._rows[0]
            rows = self._rows.snapshot()

        if package_name is None:
            package_name = None if first[1] in NOT_AVAILABLE else first[1]
        if started_at is None:
            try:
                started_at = _dt.datetime.strptime(first[0], TIMESTAMP_FORMAT)
            except ValueError:
                started_at = _dt.datetime.now()
        path = Path(out_dir) / session_log_filename(package_name, started_at)
        write_rows(path, LOG_HEADER, rows)
        logger.info("Exported %d rows to %s", len(rows), path)
        return path

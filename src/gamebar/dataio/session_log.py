"""Parsing of per-session overlay logs into :class:`SampleRow` objects.

Each field is parsed independently into an optional value: a garbled column
drops that field for that row only, and a short line drops that line only.
Nothing here raises for malformed content.
"""

from __future__ import annotations

import datetime as _dt
import logging
import math
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Sequence, TextIO

from ..config.log_format import (
    COL_BATTERY_TEMP,
    COL_CPU_CLOCK,
    COL_CPU_TEMP,
    COL_CPU_USAGE,
    COL_DATETIME,
    COL_FPS,
    COL_FRAME_TIME,
    COL_GPU_CLOCK,
    COL_GPU_TEMP,
    COL_GPU_USAGE,
    COL_PACKAGE_NAME,
    COL_RAM_SPEED,
    COL_RAM_TEMP,
    COL_RAM_USAGE,
    CPU_CLOCK_SEPARATOR,
    DELIMITER,
    HEADER_TOKEN,
    MIN_COLUMNS,
    NOT_AVAILABLE,
    TIMESTAMP_FORMAT,
)
from ..core.models import SampleRow

logger = logging.getLogger(__name__)

_MHZ_RE = re.compile(r"(\d+)\s*MHz")
_CORE_LABEL_RE = re.compile(r"cpu\s*(\d+)", re.IGNORECASE)
# Leading number with an optional unit, e.g. "35.0°C", "2.133 GHz", "1800 MHz".
_NUMBER_WITH_UNIT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*([A-Za-z°]*)")

_UNIT_SCALE = {
    "ghz": 1000.0,
    "mhz": 1.0,
    "khz": 0.001,
    "°c": 1.0,
    "c": 1.0,
    "mb": 1.0,
    "%": 1.0,
    "": 1.0,
}


def _column(columns: Sequence[str], index: int) -> Optional[str]:
    if index >= len(columns):
        return None
    text = columns[index].strip()
    if text in NOT_AVAILABLE:
        return None
    return text


def parse_float(text: Optional[str]) -> Optional[float]:
    """Parse a plain decimal; sentinels, blanks and garbage become ``None``."""
    if text is None:
        return None
    text = text.strip()
    if text in NOT_AVAILABLE:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_measurement(text: Optional[str]) -> Optional[float]:
    """
    Parse a value that may carry a unit suffix.

    Plain numbers go through :func:`parse_float`. Otherwise a leading number
    is scaled by its unit so clocks end up in MHz and temperatures in
    celsius; an unknown unit yields ``None``.
    """
    value = parse_float(text)
    if value is not None or text is None:
        return value

    match = _NUMBER_WITH_UNIT_RE.match(text)
    if match is None:
        return None
    scale = _UNIT_SCALE.get(match.group(2).lower())
    if scale is None:
        return None
    return float(match.group(1)) * scale


def parse_timestamp_ms(text: Optional[str]) -> Optional[int]:
    """Parse ``yyyy-MM-dd HH:mm:ss`` into epoch-like milliseconds."""
    if not text:
        return None
    try:
        stamp = _dt.datetime.strptime(text.strip(), TIMESTAMP_FORMAT)
    except ValueError:
        return None
    # Naive local time: only differences between rows matter.
    delta = stamp - _dt.datetime(1970, 1, 1)
    return int(delta.total_seconds() * 1000)


def parse_cpu_clocks(text: Optional[str]) -> Dict[int, float]:
    """
    Parse ``"cpu0: 1800 MHz;cpu1: 2000 MHz"`` into ``{core: mhz}``.

    The core index comes from the ``cpuN`` label, or the fragment position
    when no label is present. Fragments without a ``<digits> MHz`` value
    are skipped on their own.
    """
    clocks: Dict[int, float] = {}
    if text is None:
        return clocks

    for position, fragment in enumerate(text.split(CPU_CLOCK_SEPARATOR)):
        match = _MHZ_RE.search(fragment)
        if match is None:
            continue
        label = _CORE_LABEL_RE.search(fragment)
        core = int(label.group(1)) if label else position
        clocks[core] = float(match.group(1))
    return clocks


def parse_row(line: str, row_index: int) -> Optional[SampleRow]:
    """
    Parse one data line. Returns ``None`` only when the line is too short to
    hold a frame-rate column.
    """
    columns = line.rstrip("\r\n").split(DELIMITER)
    if len(columns) < MIN_COLUMNS:
        logger.debug("Skipping short log line %d (%d columns)", row_index, len(columns))
        return None

    timestamp_text = columns[COL_DATETIME].strip()
    return SampleRow(
        row_index=row_index,
        timestamp_text=timestamp_text,
        timestamp_ms=parse_timestamp_ms(timestamp_text),
        package_name=columns[COL_PACKAGE_NAME].strip(),
        fps=parse_float(_column(columns, COL_FPS)),
        frame_time_ms=parse_float(_column(columns, COL_FRAME_TIME)),
        battery_temp_c=parse_measurement(_column(columns, COL_BATTERY_TEMP)),
        cpu_usage_pct=parse_float(_column(columns, COL_CPU_USAGE)),
        cpu_clock_by_core=parse_cpu_clocks(_column(columns, COL_CPU_CLOCK)),
        cpu_temp_c=parse_measurement(_column(columns, COL_CPU_TEMP)),
        ram_usage_mb=parse_measurement(_column(columns, COL_RAM_USAGE)),
        ram_speed_mhz=parse_measurement(_column(columns, COL_RAM_SPEED)),
        ram_temp_c=parse_measurement(_column(columns, COL_RAM_TEMP)),
        gpu_usage_pct=parse_float(_column(columns, COL_GPU_USAGE)),
        gpu_clock_mhz=parse_measurement(_column(columns, COL_GPU_CLOCK)),
        gpu_temp_c=parse_measurement(_column(columns, COL_GPU_TEMP)),
    )


def iter_rows(lines: Iterable[str]) -> Iterator[SampleRow]:
    """
    Yield parsed rows from log *lines*.

    The first line is dropped when it is a header. ``row_index`` counts every
    line after the header from 1, including the blank and short lines that are
    skipped, so it can serve as a synthetic one-second clock.
    """
    row_index = 0
    for line_no, line in enumerate(lines):
        if line_no == 0 and HEADER_TOKEN in line:
            continue
        row_index += 1
        if not line.strip():
            continue
        row = parse_row(line, row_index)
        if row is not None:
            yield row


def read_rows(source: Path | TextIO) -> Iterator[SampleRow]:
    """Open *source* (a path or an already-open text stream) and parse it."""
    if isinstance(source, (str, Path)):
        with Path(source).open("r", encoding="utf-8", errors="replace") as handle:
            yield from iter_rows(handle)
    else:
        yield from iter_rows(source)

"""Shared constants that codify the session log layout.

The overlay's log writer and the offline analyzer must agree on the column
order, the "not available" sentinels and the timestamp formats, so they all
live here.
"""

from __future__ import annotations

import re
from typing import Final, FrozenSet, Tuple

DELIMITER: Final[str] = ","
HEADER_TOKEN: Final[str] = "DateTime"

LOG_HEADER: Final[Tuple[str, ...]] = (
    "DateTime",
    "PackageName",
    "FPS",
    "Frame_Time",
    "Battery_Temp",
    "CPU_Usage",
    "CPU_Clock",
    "CPU_Temp",
    "RAM_Usage",
    "RAM_Speed",
    "RAM_Temp",
    "GPU_Usage",
    "GPU_Clock",
    "GPU_Temp",
)

COL_DATETIME: Final[int] = 0
COL_PACKAGE_NAME: Final[int] = 1
COL_FPS: Final[int] = 2
COL_FRAME_TIME: Final[int] = 3
COL_BATTERY_TEMP: Final[int] = 4
COL_CPU_USAGE: Final[int] = 5
COL_CPU_CLOCK: Final[int] = 6
COL_CPU_TEMP: Final[int] = 7
COL_RAM_USAGE: Final[int] = 8
COL_RAM_SPEED: Final[int] = 9
COL_RAM_TEMP: Final[int] = 10
COL_GPU_USAGE: Final[int] = 11
COL_GPU_CLOCK: Final[int] = 12
COL_GPU_TEMP: Final[int] = 13

# A line needs at least this many columns to carry a frame-rate value.
MIN_COLUMNS: Final[int] = COL_FPS + 1

NOT_AVAILABLE: Final[FrozenSet[str]] = frozenset({"", "N/A", "-"})

CPU_CLOCK_SEPARATOR: Final[str] = ";"

TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
FILENAME_TIMESTAMP_FORMAT: Final[str] = "%Y%m%d_%H%M%S"
SESSION_DATE_DISPLAY_FORMAT: Final[str] = "%b %d, %Y %H:%M"

LOG_NAME_MARKER: Final[str] = "GameBar_log"
LOG_SUFFIX: Final[str] = ".csv"

# "<anything>_yyyyMMdd_HHmmss.<ext>"
SESSION_DATE_RE: Final[re.Pattern[str]] = re.compile(r"_(\d{8})_(\d{6})\.[^.]+$")

UNKNOWN_DURATION: Final[str] = "Unknown"
UNKNOWN_DATE: Final[str] = "Unknown Date"

"""Candidate sysfs nodes probed by :mod:`gamebar.sensors.sysfs_detector`.

Every tuple is ranked most-specific-first; the detector returns the first
entry that exists and is readable.
"""

from __future__ import annotations

from typing import Final, Tuple

BATTERY_TEMP_PATHS: Final[Tuple[str, ...]] = (
    "/sys/class/power_supply/battery/temp",
    "/sys/class/power_supply/battery/batt_temp",
    "/sys/class/power_supply/bms/temp",
    "/sys/class/oplus_chg/battery/temp",
    "/sys/class/oplus_chg/battery/batt_temp",
    "/sys/class/oplus_chg/battery/temperature",
    "/sys/class/oplus_chg/bq27541/temp",
    "/sys/class/thermal/thermal_zone0/temp",
)

FPS_PATHS: Final[Tuple[str, ...]] = (
    "/sys/class/drm/card0/sde_crtc_fps",
    "/sys/class/graphics/fb0/fps",
    "/sys/class/graphics/fb0/measured_fps",
    "/sys/class/drm/sde-crtc-0/measured_fps",
)

# Directories holding thermal_zoneN/ entries with sibling ``type``/``temp``.
THERMAL_ROOTS: Final[Tuple[str, ...]] = (
    "/sys/class/thermal",
    "/sys/devices/virtual/thermal",
)

# Pass 1: (match mode, label), most specific first.
CPU_ZONE_PRIORITY: Final[Tuple[Tuple[str, str], ...]] = (
    ("exact", "cpu-thermal"),
    ("prefix", "cpu-0-"),
    ("exact", "cpu"),
    ("prefix", "cpuss-"),
)

# Pass 2: substring keywords, gated by a plausible milli-celsius reading.
CPU_ZONE_KEYWORDS: Final[Tuple[str, ...]] = ("cpu", "tsens", "soc", "cluster")
CPU_ZONE_TEMP_WINDOW: Final[Tuple[int, int]] = (20000, 90000)

DEFAULT_DIVIDER: Final[int] = 1000

# (low inclusive, high exclusive, divider)
DIVIDER_BANDS: Final[Tuple[Tuple[int, int, int], ...]] = (
    (20000, 50000, 1000),
    (2000, 5000, 100),
    (200, 500, 10),
    (20, 100, 1),
)

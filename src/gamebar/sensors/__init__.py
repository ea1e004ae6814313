"""Hardware sensor discovery.

:mod:`sysfs_detector` locates the sysfs nodes backing battery temperature,
CPU temperature and the display frame-rate counter, and infers the unit
scale of their raw readings. The per-metric value readers consume its
output; they are not part of this package.
"""

from .sysfs_detector import (
    MetricKind,
    ResolvedSensor,
    SensorPathResolver,
    ThermalZone,
    detect_temperature_divider,
)

__all__ = [
    "MetricKind",
    "ResolvedSensor",
    "SensorPathResolver",
    "ThermalZone",
    "detect_temperature_divider",
]

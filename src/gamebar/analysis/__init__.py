"""Session analytics: frame-pacing statistics and report assembly.

:mod:`statistics` operates on plain NumPy arrays and stays free of I/O so it
can be reused from scripts and tests; :mod:`session_analyzer` turns a log
file into a :class:`~gamebar.core.models.SessionReport`.
"""

from .session_analyzer import SessionAnalyzer, format_duration, format_fps_stats
from .statistics import channel_statistics, fps_statistics, percentile_low

__all__ = [
    "SessionAnalyzer",
    "channel_statistics",
    "format_duration",
    "format_fps_stats",
    "fps_statistics",
    "percentile_low",
]

"""Turn a recorded session log into an immutable :class:`SessionReport`."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Tuple

from ..config.app_config import AnalyzerSettings
from ..config.log_format import UNKNOWN_DURATION
from ..core.models import (
    CpuStatistics,
    FpsStatistics,
    GpuStatistics,
    SampleRow,
    SessionReport,
    TimePoint,
)
from ..dataio.file_paths import extract_session_date
from ..dataio.session_log import read_rows
from ..tools.debug import time_block
from .statistics import channel_statistics, fps_statistics

logger = logging.getLogger(__name__)

MS_PER_ROW = 1000


def _positive(value: float) -> bool:
    return value > 0


def _non_negative(value: float) -> bool:
    return value >= 0


# SampleRow attribute -> acceptance filter, for every scalar channel besides FPS.
_SCALAR_CHANNELS: Tuple[Tuple[str, Callable[[float], bool]], ...] = (
    ("frame_time_ms", _positive),
    ("battery_temp_c", _positive),
    ("cpu_usage_pct", _non_negative),
    ("cpu_temp_c", _positive),
    ("ram_usage_mb", _non_negative),
    ("ram_speed_mhz", _positive),
    ("ram_temp_c", _positive),
    ("gpu_usage_pct", _non_negative),
    ("gpu_clock_mhz", _positive),
    ("gpu_temp_c", _positive),
)


def format_duration(start_ms: Optional[int], end_ms: Optional[int]) -> str:
    """
    Render the span between two timestamps as ``1h 2m 3s``, ``2m 3s`` or ``3s``.

    Missing timestamps and negative spans render as ``"Unknown"``.
    """
    if start_ms is None or end_ms is None:
        return UNKNOWN_DURATION
    duration_ms = end_ms - start_ms
    if duration_ms < 0:
        return UNKNOWN_DURATION

    total_seconds = duration_ms // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_fps_stats(stats: FpsStatistics) -> str:
    """Plain-text block used by the log history view and the CLI."""
    lines = [
        "FPS Statistics:",
        "-" * 25,
        f"Max FPS:     {stats.max_fps:.1f}",
        f"Min FPS:     {stats.min_fps:.1f}",
        f"Avg FPS:     {stats.avg_fps:.1f}",
        f"Variance:    {stats.variance:.2f}",
        f"Std Dev:     {stats.standard_deviation:.2f}",
        f"1% Low:      {stats.fps_1_percent_low:.1f}",
        f"0.1% Low:    {stats.fps_0_1_percent_low:.1f}",
        f"Smoothness:  {stats.smoothness_percentage:.1f}%",
    ]
    return "\n".join(lines) + "\n"


@dataclass
class _SessionAccumulator:
    """Mutable state for a single pass over the log; never escapes analyze()."""

    session_start_ms: Optional[int] = None
    first_row: Optional[SampleRow] = None
    last_row: Optional[SampleRow] = None
    fps_values: List[float] = field(default_factory=list)
    fps_series: List[TimePoint] = field(default_factory=list)
    channels: Dict[str, List[TimePoint]] = field(
        default_factory=lambda: {name: [] for name, _ in _SCALAR_CHANNELS}
    )
    cpu_clock: Dict[int, List[TimePoint]] = field(default_factory=dict)

    def _anchor_time(self, row: SampleRow) -> int:
        # Non-FPS channels share the time of the latest FPS point.
        if self.session_start_ms is not None and self.fps_series:
            return self.fps_series[-1][0]
        return row.row_index * MS_PER_ROW

    def add(self, row: SampleRow) -> None:
        if self.first_row is None:
            self.first_row = row
        self.last_row = row
        if self.session_start_ms is None and row.timestamp_ms is not None:
            self.session_start_ms = row.timestamp_ms

        if row.fps is not None and row.fps > 0:
            self.fps_values.append(row.fps)
            if row.timestamp_ms is not None and self.session_start_ms is not None:
                relative = row.timestamp_ms - self.session_start_ms
            else:
                relative = row.row_index * MS_PER_ROW
            self.fps_series.append((relative, row.fps))

        relative = self._anchor_time(row)
        for name, accept in _SCALAR_CHANNELS:
            value = getattr(row, name)
            if value is not None and accept(value):
                self.channels[name].append((relative, value))

        for core, mhz in sorted(row.cpu_clock_by_core.items()):
            if not _positive(mhz):
                continue
            self.cpu_clock.setdefault(core, []).append((relative, mhz))

    def values(self, name: str) -> List[float]:
        return [value for _, value in self.channels[name]]


class SessionAnalyzer:
    """
    Parse a comma-delimited session log and derive frame-pacing analytics.

    The analyzer is stateless between calls; :meth:`analyze` may be invoked
    concurrently for different files.
    """

    def __init__(self, settings: AnalyzerSettings | None = None) -> None:
        self.settings = settings or AnalyzerSettings()

    def analyze(self, path: Path | str) -> Optional[SessionReport]:
        """
        Return the :class:`SessionReport` for *path*, or ``None`` when the
        file is missing or unreadable, carries no usable frame-rate sample,
        or fails to parse for any other reason.
        """
        path = Path(path)
        if not path.is_file() or not os.access(path, os.R_OK):
            logger.error("Log file does not exist or cannot be read: %s", path)
            return None

        try:
            with time_block(f"analyze {path.name}", emitter=logger.debug):
                return self._analyze(path)
        except Exception:
            logger.exception("Error analyzing log file: %s", path)
            return None

    def _analyze(self, path: Path) -> Optional[SessionReport]:
        acc = _SessionAccumulator()
        for row in read_rows(path):
            acc.add(row)

        if not acc.fps_values:
            logger.warning("No valid FPS data found in log file %s", path)
            return None

        fps_stats = fps_statistics(
            acc.fps_values,
            smoothness_threshold=self.settings.smoothness_threshold_fps,
            low_percentiles=self.settings.low_percentiles,
        )
        cpu_stats = CpuStatistics(
            usage=channel_statistics(acc.values("cpu_usage_pct")),
            temp=channel_statistics(acc.values("cpu_temp_c")),
        )
        gpu_stats = GpuStatistics(
            usage=channel_statistics(acc.values("gpu_usage_pct")),
            clock=channel_statistics(acc.values("gpu_clock_mhz")),
            temp=channel_statistics(acc.values("gpu_temp_c")),
        )

        first, last = acc.first_row, acc.last_row
        duration = format_duration(
            first.timestamp_ms if first else None,
            last.timestamp_ms if last else None,
        )
        channels = {name: tuple(points) for name, points in acc.channels.items()}

        return SessionReport(
            fps_stats=fps_stats,
            cpu_stats=cpu_stats,
            gpu_stats=gpu_stats,
            session_duration=duration,
            total_samples=len(acc.fps_values),
            app_name=first.package_name if first else "",
            session_date=extract_session_date(path.name),
            fps_series=tuple(acc.fps_series),
            frame_time_series=channels["frame_time_ms"],
            battery_temp_series=channels["battery_temp_c"],
            cpu_usage_series=channels["cpu_usage_pct"],
            cpu_temp_series=channels["cpu_temp_c"],
            cpu_clock_series=MappingProxyType(
                {core: tuple(points) for core, points in sorted(acc.cpu_clock.items())}
            ),
            ram_usage_series=channels["ram_usage_mb"],
            ram_speed_series=channels["ram_speed_mhz"],
            ram_temp_series=channels["ram_temp_c"],
            gpu_usage_series=channels["gpu_usage_pct"],
            gpu_clock_series=channels["gpu_clock_mhz"],
            gpu_temp_series=channels["gpu_temp_c"],
        )

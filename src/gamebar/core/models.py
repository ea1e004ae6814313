"""Shared dataclasses for parsed log rows and session analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

# (milliseconds relative to the session start, value)
TimePoint = Tuple[int, float]
TimeSeries = Tuple[TimePoint, ...]


@dataclass(frozen=True)
class SampleRow:
    """
    One parsed line of a session log.

    Numeric fields are ``None`` when the column was missing, empty, a
    "not available" sentinel, or unparsable.
    """

    row_index: int
    timestamp_text: str
    timestamp_ms: Optional[int]
    package_name: str
    fps: Optional[float] = None
    frame_time_ms: Optional[float] = None
    battery_temp_c: Optional[float] = None
    cpu_usage_pct: Optional[float] = None
    cpu_clock_by_core: Dict[int, float] = field(default_factory=dict)
    cpu_temp_c: Optional[float] = None
    ram_usage_mb: Optional[float] = None
    ram_speed_mhz: Optional[float] = None
    ram_temp_c: Optional[float] = None
    gpu_usage_pct: Optional[float] = None
    gpu_clock_mhz: Optional[float] = None
    gpu_temp_c: Optional[float] = None


@dataclass(frozen=True)
class FpsStatistics:
    max_fps: float = 0.0
    min_fps: float = 0.0
    avg_fps: float = 0.0
    variance: float = 0.0
    standard_deviation: float = 0.0
    fps_1_percent_low: float = 0.0  # mean of the worst 1% of samples
    fps_0_1_percent_low: float = 0.0  # mean of the worst 0.1% of samples
    smoothness_percentage: float = 0.0  # share of samples at/above threshold


@dataclass(frozen=True)
class ChannelStatistics:
    """Max/min/mean of one scalar channel; all zero when it had no samples."""

    maximum: float = 0.0
    minimum: float = 0.0
    average: float = 0.0


@dataclass(frozen=True)
class CpuStatistics:
    usage: ChannelStatistics = field(default_factory=ChannelStatistics)
    temp: ChannelStatistics = field(default_factory=ChannelStatistics)


@dataclass(frozen=True)
class GpuStatistics:
    usage: ChannelStatistics = field(default_factory=ChannelStatistics)
    clock: ChannelStatistics = field(default_factory=ChannelStatistics)
    temp: ChannelStatistics = field(default_factory=ChannelStatistics)


@dataclass(frozen=True)
class SessionReport:
    """
    Immutable analytics for one recorded session.

    Built once by the analyzer and handed to whatever renders it; series
    hold ``(relative_ms, value)`` points in file order.
    """

    fps_stats: FpsStatistics
    cpu_stats: CpuStatistics
    gpu_stats: GpuStatistics
    session_duration: str
    total_samples: int
    app_name: str
    session_date: str
    fps_series: TimeSeries = ()
    frame_time_series: TimeSeries = ()
    battery_temp_series: TimeSeries = ()
    cpu_usage_series: TimeSeries = ()
    cpu_temp_series: TimeSeries = ()
    cpu_clock_series: Mapping[int, TimeSeries] = field(default_factory=dict)
    ram_usage_series: TimeSeries = ()
    ram_speed_series: TimeSeries = ()
    ram_temp_series: TimeSeries = ()
    gpu_usage_series: TimeSeries = ()
    gpu_clock_series: TimeSeries = ()
    gpu_temp_series: TimeSeries = ()

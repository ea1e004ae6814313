"""Shared data structures: parsed samples, analytics reports and buffers."""

from .models import (
    CpuStatistics,
    FpsStatistics,
    GpuStatistics,
    SampleRow,
    SessionReport,
    TimeSeries,
)
from .ringbuffer import RingBuffer

__all__ = [
    "CpuStatistics",
    "FpsStatistics",
    "GpuStatistics",
    "RingBuffer",
    "SampleRow",
    "SessionReport",
    "TimeSeries",
]

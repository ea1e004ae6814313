"""Frame-pacing and scalar channel statistics."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike

from ..config.app_config import DEFAULT_LOW_PERCENTILES, DEFAULT_SMOOTHNESS_THRESHOLD_FPS
from ..core.models import ChannelStatistics, FpsStatistics


def _to_1d_array(values: ArrayLike) -> np.ndarray:
    """Convert input to a 1D float64 numpy array."""
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"values must be 1-D, got shape {arr.shape}")
    return arr


def percentile_low(sorted_values: ArrayLike, fraction: float) -> float:
    """
    Mean of the worst ``ceil(n * fraction)`` samples (at least one).

    Parameters
    ----------
    sorted_values:
        Samples in ascending order.
    fraction:
        Share of the sample to average, e.g. ``0.01`` for the "1% low".
    """
    arr = _to_1d_array(sorted_values)
    if arr.size == 0:
        return 0.0
    count = max(1, int(math.ceil(arr.size * fraction)))
    return float(np.mean(arr[:count]))


def fps_statistics(
    values: ArrayLike,
    *,
    smoothness_threshold: float = DEFAULT_SMOOTHNESS_THRESHOLD_FPS,
    low_percentiles: Tuple[float, float] = DEFAULT_LOW_PERCENTILES,
) -> FpsStatistics:
    """
    Summarise frame-rate samples.

    Only strictly positive values are considered. Variance is the population
    variance (mean squared deviation).
    """
    arr = _to_1d_array(values)
    arr = arr[np.isfinite(arr) & (arr > 0)]
    if arr.size == 0:
        return FpsStatistics()

    ordered = np.sort(arr)
    mean = float(np.mean(arr))
    variance = float(np.mean(np.square(arr - mean)))
    smooth = int(np.count_nonzero(arr >= smoothness_threshold))

    return FpsStatistics(
        max_fps=float(ordered[-1]),
        min_fps=float(ordered[0]),
        avg_fps=mean,
        variance=variance,
        standard_deviation=math.sqrt(variance),
        fps_1_percent_low=percentile_low(ordered, low_percentiles[0]),
        fps_0_1_percent_low=percentile_low(ordered, low_percentiles[1]),
        smoothness_percentage=smooth / arr.size * 100.0,
    )


def channel_statistics(values: ArrayLike) -> ChannelStatistics:
    """Max/min/mean of *values*; an empty channel reports zeros."""
    arr = _to_1d_array(values)
    if arr.size == 0:
        return ChannelStatistics()
    return ChannelStatistics(
        maximum=float(np.max(arr)),
        minimum=float(np.min(arr)),
        average=float(np.mean(arr)),
    )

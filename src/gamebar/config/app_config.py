"""Default application paths and analyzer configuration helpers."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SMOOTHNESS_THRESHOLD_FPS = 45.0
DEFAULT_LOW_PERCENTILES: Tuple[float, float] = (0.01, 0.001)
DEFAULT_MAX_BUFFERED_ROWS = 10000


@dataclass
class AppPaths:
    """
    Commonly used paths for the telemetry tools.

    ``GAMEBAR_DATA_ROOT`` and ``GAMEBAR_LOG_DIR`` override the default
    ``data``/``logs`` folders relative to the repository root so that
    packaged installs and on-device layouts can store files elsewhere.
    """

    # repo_root points at the project root (one level above src/)
    repo_root: Path = Path(__file__).resolve().parents[3]
    data_root: Path = field(init=False)
    logs: Path = field(init=False)
    config_dir: Path = field(init=False)

    def __post_init__(self) -> None:
        env_data_root = os.environ.get("GAMEBAR_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = self.repo_root / "data"

        env_logs_dir = os.environ.get("GAMEBAR_LOG_DIR")
        if env_logs_dir:
            self.logs = Path(env_logs_dir).expanduser()
        else:
            self.logs = self.repo_root / "logs"

        self.config_dir = self.data_root / "config"

    @property
    def analyzer_settings_file(self) -> Path:
        return self.config_dir / "analyzer.yaml"

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        for path in (self.data_root, self.logs, self.config_dir):
            path.mkdir(parents=True, exist_ok=True)


def _coerce_fraction(value: Any, fallback: float) -> float:
    try:
        frac = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(frac) or frac <= 0.0 or frac >= 1.0:
        return fallback
    return frac


@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Tunables for :class:`gamebar.analysis.session_analyzer.SessionAnalyzer`
    and the session log recorder.

    ``low_percentiles`` are the fractions used for the "1% low" and
    "0.1% low" frame-rate figures, in that order.
    """

    smoothness_threshold_fps: float = DEFAULT_SMOOTHNESS_THRESHOLD_FPS
    low_percentiles: Tuple[float, float] = DEFAULT_LOW_PERCENTILES
    max_buffered_rows: int = DEFAULT_MAX_BUFFERED_ROWS

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AnalyzerSettings":
        """Build settings from a (possibly partial or malformed) mapping."""
        if not isinstance(data, Mapping):
            return cls()
        block = data.get("analyzer", data)
        if not isinstance(block, Mapping):
            return cls()

        try:
            threshold = float(block.get("smoothness_threshold_fps", DEFAULT_SMOOTHNESS_THRESHOLD_FPS))
        except (TypeError, ValueError):
            threshold = DEFAULT_SMOOTHNESS_THRESHOLD_FPS
        if not math.isfinite(threshold) or threshold <= 0.0:
            threshold = DEFAULT_SMOOTHNESS_THRESHOLD_FPS

        raw_lows = block.get("low_percentiles")
        if isinstance(raw_lows, (list, tuple)) and len(raw_lows) == 2:
            lows = (
                _coerce_fraction(raw_lows[0], DEFAULT_LOW_PERCENTILES[0]),
                _coerce_fraction(raw_lows[1], DEFAULT_LOW_PERCENTILES[1]),
            )
        else:
            lows = DEFAULT_LOW_PERCENTILES

        try:
            max_rows = int(block.get("max_buffered_rows", DEFAULT_MAX_BUFFERED_ROWS))
        except (TypeError, ValueError):
            max_rows = DEFAULT_MAX_BUFFERED_ROWS

        return cls(
            smoothness_threshold_fps=threshold,
            low_percentiles=lows,
            max_buffered_rows=max(1, max_rows),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "analyzer": {
                "smoothness_threshold_fps": float(self.smoothness_threshold_fps),
                "low_percentiles": [float(p) for p in self.low_percentiles],
                "max_buffered_rows": int(self.max_buffered_rows),
            }
        }


def load_analyzer_settings(path: Path | None = None) -> AnalyzerSettings:
    """Load ``analyzer.yaml``; missing or unreadable files yield defaults."""

    path = Path(path) if path is not None else AppPaths().analyzer_settings_file
    if not path.exists():
        return AnalyzerSettings()
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable analyzer settings %s: %s", path, exc)
        return AnalyzerSettings()
    return AnalyzerSettings.from_mapping(raw)


def save_analyzer_settings(settings: AnalyzerSettings, path: Path | None = None) -> Path:
    """Persist *settings* to ``analyzer.yaml`` and return the path written."""

    path = Path(path) if path is not None else AppPaths().analyzer_settings_file
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(
            settings.to_mapping(),
            fh,
            default_flow_style=False,
            sort_keys=False,
        )
    return path

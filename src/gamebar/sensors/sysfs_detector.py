"""
Automatic detection of sysfs nodes for hardware monitoring.

Devices expose the same metric under vendor-specific paths, and sometimes in
different units (milli-, centi-, deci-celsius or plain celsius). Rather than
shipping per-device overlays, :class:`SensorPathResolver` probes a ranked
list of candidates and keeps the first one that works.

Every probe is fail-soft: a missing, unreadable or garbled node means "try
the next candidate", and a metric with no working node resolves to ``None``.
Nothing in this module raises on filesystem problems.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..config.sysfs_paths import (
    BATTERY_TEMP_PATHS,
    CPU_ZONE_KEYWORDS,
    CPU_ZONE_PRIORITY,
    CPU_ZONE_TEMP_WINDOW,
    DEFAULT_DIVIDER,
    DIVIDER_BANDS,
    FPS_PATHS,
    THERMAL_ROOTS,
)

logger = logging.getLogger(__name__)


class MetricKind(str, Enum):
    BATTERY_TEMP = "battery_temp"
    CPU_TEMP = "cpu_temp"
    FPS = "fps"


@dataclass(frozen=True)
class ResolvedSensor:
    """Detected node for one metric; ``path is None`` means unsupported."""

    kind: Union[MetricKind, str]
    path: Optional[str]
    divider: int = DEFAULT_DIVIDER

    @property
    def supported(self) -> bool:
        return self.path is not None


def _coerce_kind(kind: Union[MetricKind, str]) -> Optional[MetricKind]:
    try:
        return MetricKind(kind)
    except ValueError:
        logger.warning("Unknown metric kind %r", kind)
        return None


# --------------------------------------------------------------------------- # probes
def _is_readable(path: str) -> bool:
    try:
        return os.path.isfile(path) and os.access(path, os.R_OK)
    except (OSError, ValueError):
        return False


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            return fh.read().strip()
    except (OSError, ValueError):
        return None


def _read_int(path: str) -> Optional[int]:
    text = _read_text(path)
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def classify_divider(raw_value: int) -> int:
    """Map a raw temperature reading to the divider that yields celsius."""
    for low, high, divider in DIVIDER_BANDS:
        if low <= raw_value < high:
            return divider
    return DEFAULT_DIVIDER


def detect_temperature_divider(path: str) -> int:
    """
    Read *path* once and infer whether it reports milli, centi, deci or
    whole units.

    This is a one-shot classification of the instantaneous reading; an
    out-of-band value (or any read/parse failure) yields ``1000``.
    """
    raw_value = _read_int(path)
    if raw_value is None:
        logger.warning("Failed to detect temperature divider for %s, using default %d", path, DEFAULT_DIVIDER)
        return DEFAULT_DIVIDER

    divider = classify_divider(raw_value)
    logger.debug("Detected temperature divider for %s: %d (raw value: %d)", path, divider, raw_value)
    return divider


# --------------------------------------------------------------------------- # thermal zones
@dataclass(frozen=True)
class ThermalZone:
    """A ``thermal_zoneN``-style directory with sibling ``type``/``temp`` files."""

    directory: str

    @property
    def type_path(self) -> str:
        return os.path.join(self.directory, "type")

    @property
    def temp_path(self) -> str:
        return os.path.join(self.directory, "temp")

    def read_type(self) -> Optional[str]:
        return _read_text(self.type_path)

    def read_temp(self) -> Optional[int]:
        return _read_int(self.temp_path)


ZoneRule = Callable[[ThermalZone], bool]


def exact_type(label: str) -> ZoneRule:
    def _rule(zone: ThermalZone) -> bool:
        return zone.read_type() == label

    return _rule


def prefix_type(label: str) -> ZoneRule:
    def _rule(zone: ThermalZone) -> bool:
        zone_type = zone.read_type()
        return bool(zone_type) and zone_type.startswith(label)

    return _rule


def keyword_with_plausible_temp(keywords: Iterable[str], low: int, high: int) -> ZoneRule:
    """
    Loose match: ``type`` contains any keyword *and* ``temp`` lies in
    ``[low, high]``. The numeric gate keeps unrelated zones that merely share
    a word (``soc`` battery gauges, ``cluster`` GPU zones) out.
    """
    words = tuple(k.lower() for k in keywords)

    def _rule(zone: ThermalZone) -> bool:
        zone_type = (zone.read_type() or "").lower()
        if not any(word in zone_type for word in words):
            return False
        temp = zone.read_temp()
        return temp is not None and low <= temp <= high

    return _rule


_RULE_FACTORIES: Mapping[str, Callable[[str], ZoneRule]] = {
    "exact": exact_type,
    "prefix": prefix_type,
}


def build_priority_rules(table: Sequence[tuple[str, str]] = CPU_ZONE_PRIORITY) -> List[ZoneRule]:
    return [_RULE_FACTORIES[mode](label) for mode, label in table]


def iter_thermal_zones(roots: Iterable[str]) -> List[ThermalZone]:
    """List zone directories under *roots* that carry both ``type`` and ``temp``."""
    zones: List[ThermalZone] = []
    for root in roots:
        try:
            names = sorted(os.listdir(root))
        except OSError:
            continue
        for name in names:
            directory = os.path.join(root, name)
            zone = ThermalZone(directory)
            if os.path.isfile(zone.type_path) and os.path.isfile(zone.temp_path):
                zones.append(zone)
    return zones


# --------------------------------------------------------------------------- # resolver
class SensorPathResolver:
    """
    Resolve and cache sysfs nodes per :class:`MetricKind`.

    Each instance owns its own cache; results persist until :meth:`reset`.
    The cache is guarded by a lock, but probing happens outside it, so two
    threads racing on a cold key may both probe. Both compute the same value
    for the same filesystem state, and the last writer wins.

    Parameters
    ----------
    candidates:
        Ranked candidate paths per metric kind. Defaults to the vendor lists
        in :mod:`gamebar.config.sysfs_paths`.
    thermal_roots:
        Directories scanned for CPU thermal zones.
    priority_rules / fallback_rules:
        The two passes of the CPU zone scan. Each is an ordered list of
        predicates; the first rule that matches any zone wins.
    """

    def __init__(
        self,
        candidates: Mapping[MetricKind, Sequence[str]] | None = None,
        thermal_roots: Sequence[str] | None = None,
        priority_rules: Sequence[ZoneRule] | None = None,
        fallback_rules: Sequence[ZoneRule] | None = None,
    ) -> None:
        if candidates is None:
            candidates = {
                MetricKind.BATTERY_TEMP: BATTERY_TEMP_PATHS,
                MetricKind.FPS: FPS_PATHS,
            }
        self._candidates: Dict[MetricKind, tuple[str, ...]] = {
            MetricKind(kind): tuple(paths) for kind, paths in candidates.items()
        }
        self._thermal_roots = tuple(thermal_roots if thermal_roots is not None else THERMAL_ROOTS)
        if priority_rules is None:
            priority_rules = build_priority_rules()
        if fallback_rules is None:
            low, high = CPU_ZONE_TEMP_WINDOW
            fallback_rules = [keyword_with_plausible_temp(CPU_ZONE_KEYWORDS, low, high)]
        self._passes: tuple[tuple[ZoneRule, ...], ...] = (
            tuple(priority_rules),
            tuple(fallback_rules),
        )

        self._lock = threading.Lock()
        self._paths: Dict[MetricKind, Optional[str]] = {}
        self._dividers: Dict[MetricKind, int] = {}

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------
    def _cached_path(self, kind: MetricKind) -> tuple[bool, Optional[str]]:
        with self._lock:
            if kind in self._paths:
                return True, self._paths[kind]
        return False, None

    def _store_path(self, kind: MetricKind, path: Optional[str]) -> Optional[str]:
        with self._lock:
            self._paths[kind] = path
        return path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def resolve_path(self, kind: Union[MetricKind, str]) -> Optional[str]:
        """Return the first readable candidate for *kind*, or ``None``.

        Kinds this resolver does not know are unsupported, not errors.
        """
        known = _coerce_kind(kind)
        if known is None:
            return None
        kind = known
        if kind is MetricKind.CPU_TEMP:
            return self.resolve_cpu_temp_path()

        hit, cached = self._cached_path(kind)
        if hit:
            return cached

        for path in self._candidates.get(kind, ()):
            if _is_readable(path):
                logger.debug("Detected %s: %s", kind.value, path)
                return self._store_path(kind, path)

        logger.warning("No valid path found for %s", kind.value)
        return self._store_path(kind, None)

    def resolve_divider(self, path: str) -> int:
        """Classify the unit scale of *path* from a single reading."""
        return detect_temperature_divider(path)

    def resolve_cpu_temp_path(self) -> Optional[str]:
        """
        Locate the CPU temperature node with a two-pass thermal zone scan.

        Pass one tries the priority labels in order; pass two accepts any
        zone whose type contains a CPU-ish keyword and whose current reading
        is a plausible milli-celsius value.
        """
        hit, cached = self._cached_path(MetricKind.CPU_TEMP)
        if hit:
            return cached

        zones = iter_thermal_zones(self._thermal_roots)
        for pass_index, rules in enumerate(self._passes, start=1):
            for rule in rules:
                for zone in zones:
                    if rule(zone):
                        logger.debug(
                            "Detected cpu_temp (pass %d): %s (type=%r)",
                            pass_index,
                            zone.temp_path,
                            zone.read_type(),
                        )
                        return self._store_path(MetricKind.CPU_TEMP, zone.temp_path)

        logger.warning("No CPU thermal zone found under %s", ", ".join(self._thermal_roots))
        return self._store_path(MetricKind.CPU_TEMP, None)

    def resolve(self, kind: Union[MetricKind, str]) -> ResolvedSensor:
        """Return path and divider for *kind*; the divider is cached too."""
        known = _coerce_kind(kind)
        if known is None:
            return ResolvedSensor(kind=kind, path=None)
        kind = known
        path = self.resolve_path(kind)
        if path is None:
            return ResolvedSensor(kind=kind, path=None)

        with self._lock:
            divider = self._dividers.get(kind)
        if divider is None:
            divider = self.resolve_divider(path)
            with self._lock:
                self._dividers[kind] = divider
        return ResolvedSensor(kind=kind, path=path, divider=divider)

    def describe(self) -> List[ResolvedSensor]:
        return [self.resolve(kind) for kind in MetricKind]

    def is_supported(self, kind: Union[MetricKind, str]) -> bool:
        return self.resolve_path(kind) is not None

    def reset(self) -> None:
        """Forget every detected path and divider."""
        with self._lock:
            self._paths.clear()
            self._dividers.clear()
        logger.debug("Sysfs detection cache cleared")

"""Opt-in timing hooks, enabled with ``GAMEBAR_DEBUG=1``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

DEBUG_GAMEBAR = os.getenv("GAMEBAR_DEBUG", "").lower() in {"1", "true", "yes", "on"}


@contextmanager
def time_block(
    label: str,
    *,
    emitter: Callable[[str], None] | None = None,
    enabled: bool | None = None,
) -> Iterator[None]:
    """
    Report how long the wrapped block took.

    Timing is skipped unless *enabled* (default: ``GAMEBAR_DEBUG``) is true.
    The message goes to *emitter*, or to this module's logger at INFO.
    """
    if not (DEBUG_GAMEBAR if enabled is None else enabled):
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        (emitter or logger.info)(f"{label} took {elapsed_ms:.3f} ms")

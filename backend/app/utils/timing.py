"""Timing helpers for slow paths (recipe API calls, shopping list generation)."""

import time
from contextlib import contextmanager
from typing import Iterator

from app.logging import get_logger

logger = get_logger(__name__)

_TIMING_PREFIX = "[TIMING]"


def format_duration(ms: int) -> str:
    """12500 -> '12.5s', 750 -> '750ms'."""
    if ms >= 1000:
        return f"{ms / 1000:.1f}s"
    return f"{ms}ms"


class Span:
    """Elapsed time of one timed block; readable while the block is still running."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._start = time.perf_counter()
        self._end: float | None = None

    @property
    def elapsed_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)

    def close(self) -> int:
        self._end = time.perf_counter()
        return self.elapsed_ms


@contextmanager
def time_span(name: str, **extra: object) -> Iterator[Span]:
    """Time a block and log it with optional key=value fields."""
    span = Span(name)
    try:
        yield span
    finally:
        elapsed = span.close()
        fields = " ".join(f"{k}={v}" for k, v in extra.items())
        logger.info(
            "%s %s elapsed_ms=%s (%s) %s",
            _TIMING_PREFIX,
            name,
            elapsed,
            format_duration(elapsed),
            fields,
        )

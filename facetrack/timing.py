"""Wall-clock bookkeeping for the correlation fallback phase."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Optional

import cv2


@dataclass(frozen=True)
class TickSource:
    """Monotonic tick counter paired with its ticks-per-second constant."""

    read: Callable[[], int]
    frequency: float

    def __post_init__(self) -> None:
        if self.frequency <= 0:
            raise ValueError(f"Tick frequency must be positive, got {self.frequency}")


@functools.lru_cache(maxsize=None)
def default_tick_source() -> TickSource:
    """OpenCV tick counter; the frequency is sampled once per process."""
    return TickSource(read=cv2.getTickCount, frequency=float(cv2.getTickFrequency()))


class TimeoutGuard:
    """Measures how long fallback matching has been running."""

    def __init__(self, ticks: TickSource, start_tick: Optional[int] = None) -> None:
        self.ticks = ticks
        self.start_tick = start_tick

    @property
    def running(self) -> bool:
        return self.start_tick is not None

    def start(self) -> None:
        """Begin timing unless a measurement is already under way."""
        if self.start_tick is None:
            self.start_tick = self.ticks.read()

    def reset(self) -> None:
        self.start_tick = None

    def elapsed(self) -> float:
        if self.start_tick is None:
            return 0.0
        return (self.ticks.read() - self.start_tick) / self.ticks.frequency

    def exceeded(self, max_duration_s: float) -> bool:
        return self.elapsed() > max_duration_s

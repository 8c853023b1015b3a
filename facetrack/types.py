"""Common dataclasses, type aliases and collaborator interfaces used across facetrack."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Tuple

import numpy as np

# Rectangle order: x, y, width, height (pixel coordinates)
Rect = Tuple[int, int, int, int]
Point = Tuple[int, int]
Size = Tuple[int, int]

EMPTY_RECT: Rect = (0, 0, 0, 0)
ORIGIN: Point = (0, 0)


class TrackingState(str, Enum):
    """Search tier the tracker is currently in."""

    SEARCHING = "searching"
    TRACKING = "tracking"
    FALLBACK_MATCHING = "fallback_matching"


@dataclass(frozen=True, eq=False)
class TrackerSnapshot:
    """Complete tracker state between two frames.

    All geometry is in working-frame coordinates. ``fallback_start_tick`` is
    ``None`` unless the tracker is bridging a detector dropout.
    """

    state: TrackingState = TrackingState.SEARCHING
    face: Rect = EMPTY_RECT
    position: Point = ORIGIN
    roi: Rect = EMPTY_RECT
    template: Optional[np.ndarray] = None
    scale: float = 1.0
    fallback_start_tick: Optional[int] = None

    @property
    def face_found(self) -> bool:
        return self.state is not TrackingState.SEARCHING


class ObjectDetector(Protocol):
    """Statistical detector returning candidate boxes within a size range."""

    def detect(
        self,
        image: np.ndarray,
        min_size: Size,
        max_size: Size,
        scale_factor: float,
        min_neighbors: int,
    ) -> List[Rect]:
        ...


class PatchMatcher(Protocol):
    """Correlation primitive locating a template inside a search window."""

    def best_match(self, search_window: np.ndarray, template: np.ndarray) -> Tuple[Point, float]:
        ...


class FrameSource(Protocol):
    """Producer of raster frames on demand."""

    def read(self) -> np.ndarray:
        ...


def rect_area(rect: Rect) -> int:
    """Area of an ``(x, y, w, h)`` rectangle, zero for negative sizes."""
    _, _, width, height = rect
    return max(0, width) * max(0, height)


def is_empty(rect: Rect) -> bool:
    return rect_area(rect) == 0

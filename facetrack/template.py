"""Face template extraction for correlation fallback."""

from __future__ import annotations

import numpy as np

from facetrack.geometry import clip_rect, frame_bounds
from facetrack.types import Rect


def template_rect(face: Rect) -> Rect:
    """Central patch of the face: half the size, inset by a quarter on each axis."""
    x, y, w, h = face
    return (x + w // 4, y + h // 4, w // 2, h // 2)


def extract_template(frame: np.ndarray, face: Rect) -> np.ndarray:
    """Copy the template patch out of ``frame``.

    The result owns its pixels; working frames are discarded after each step.
    """
    height, width = frame.shape[:2]
    x, y, w, h = clip_rect(template_rect(face), frame_bounds(width, height))
    return frame[y : y + h, x : x + w].copy()


def is_template_valid(template) -> bool:
    """A usable template has non-zero area and both sides longer than one pixel."""
    if template is None:
        return False
    rows, cols = template.shape[:2]
    return rows * cols > 0 and rows > 1 and cols > 1

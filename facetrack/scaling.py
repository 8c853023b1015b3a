"""Downscale frames to the working width and map results back."""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from facetrack.types import Point, Rect


def compute_scale(target_width: int, frame_width: int) -> float:
    """Ratio of working width to frame width; never upscales."""
    if frame_width <= 0:
        raise ValueError(f"frame_width must be positive, got {frame_width}")
    return min(max(1, int(target_width)), frame_width) / float(frame_width)


def working_size(scale: float, frame_width: int, frame_height: int) -> Tuple[int, int]:
    """Return ``(width, height)`` of the resized frame."""
    return int(scale * frame_width), int(scale * frame_height)


class ScaleNormalizer:
    """Resize frames to a fixed working width while keeping the aspect ratio."""

    def __init__(self, target_width: int) -> None:
        self.target_width = max(1, int(target_width))

    def normalize(self, frame: np.ndarray) -> Tuple[np.ndarray, float]:
        """Return the working frame and the scale used to produce it."""
        frame_height, frame_width = frame.shape[:2]
        scale = compute_scale(self.target_width, frame_width)
        width, height = working_size(scale, frame_width, frame_height)
        if width < 1 or height < 1:
            raise ValueError(
                f"Frame {frame_width}x{frame_height} collapses to {width}x{height} at width {self.target_width}"
            )
        if (width, height) == (frame_width, frame_height):
            return frame, scale
        resized = cv2.resize(frame, (width, height), interpolation=cv2.INTER_LINEAR)
        return resized, scale

    @staticmethod
    def to_original_rect(rect: Rect, scale: float) -> Rect:
        x, y, w, h = rect
        return (int(x / scale), int(y / scale), int(w / scale), int(h / scale))

    @staticmethod
    def to_original_point(point: Point, scale: float) -> Point:
        x, y = point
        return (int(x / scale), int(y / scale))

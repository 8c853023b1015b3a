"""Template matching used to bridge detector dropouts."""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from facetrack.types import Point


class SquaredDiffPatchMatcher:
    """Locate a template with normalised squared difference (lower is better)."""

    def __init__(self, method: int = cv2.TM_SQDIFF_NORMED) -> None:
        if method not in (cv2.TM_SQDIFF, cv2.TM_SQDIFF_NORMED):
            raise ValueError("SquaredDiffPatchMatcher only supports squared-difference methods")
        self.method = method

    def best_match(self, search_window: np.ndarray, template: np.ndarray) -> Tuple[Point, float]:
        """Return the top-left corner of the best match and its min-max normalised score."""
        window_h, window_w = search_window.shape[:2]
        template_h, template_w = template.shape[:2]
        if template_h > window_h or template_w > window_w:
            raise ValueError(
                f"Template {template_w}x{template_h} does not fit search window {window_w}x{window_h}"
            )
        result = cv2.matchTemplate(search_window, template, self.method)
        result = cv2.normalize(result, None, 0.0, 1.0, cv2.NORM_MINMAX, -1)
        min_val, _max_val, min_loc, _max_loc = cv2.minMaxLoc(result)
        return (int(min_loc[0]), int(min_loc[1])), float(min_val)

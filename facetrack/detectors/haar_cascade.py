"""OpenCV Haar cascade face detector wrapper."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from facetrack.config import DEFAULT_CASCADE_NAME
from facetrack.types import Rect, Size

LOGGER = logging.getLogger("facetrack.detectors.haar")


def default_cascade_path() -> str:
    """Location of the frontal-face cascade bundled with opencv-python."""
    return str(Path(cv2.data.haarcascades) / DEFAULT_CASCADE_NAME)


class HaarCascadeDetector:
    """Wrapper around ``cv2.CascadeClassifier``.

    A cascade that fails to load is reported once here and the detector then
    returns no boxes, which keeps a tracker built on it searching.
    """

    def __init__(self, cascade_path: Optional[str] = None) -> None:
        self.cascade_path = cascade_path or default_cascade_path()
        self.classifier = cv2.CascadeClassifier()
        try:
            self.is_loaded = bool(self.classifier.load(self.cascade_path)) and not self.classifier.empty()
        except cv2.error as exc:
            LOGGER.debug("CascadeClassifier.load raised: %s", exc)
            self.is_loaded = False
        if self.is_loaded:
            LOGGER.info("Loaded Haar cascade %s", self.cascade_path)
        else:
            LOGGER.error(
                "Error creating cascade classifier. Make sure the file %s exists; no faces will be detected.",
                self.cascade_path,
            )

    def detect(
        self,
        image: np.ndarray,
        min_size: Size,
        max_size: Size,
        scale_factor: float = 1.1,
        min_neighbors: int = 3,
    ) -> List[Rect]:
        """Run ``detectMultiScale`` and return ``(x, y, w, h)`` boxes."""
        if not self.is_loaded or image is None or image.size == 0:
            return []
        faces = self.classifier.detectMultiScale(
            image,
            scaleFactor=scale_factor,
            minNeighbors=min_neighbors,
            flags=0,
            minSize=tuple(int(v) for v in min_size),
            maxSize=tuple(int(v) for v in max_size),
        )
        return [tuple(int(v) for v in face) for face in faces]  # type: ignore[misc]

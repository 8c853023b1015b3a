"""Frame sources backed by ``cv2.VideoCapture``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

LOGGER = logging.getLogger("facetrack.sources")


class FrameSourceExhausted(RuntimeError):
    """Raised when a source has no more frames to give."""


class VideoCaptureSource:
    """Camera index or video file read one frame at a time."""

    def __init__(self, source: Union[int, str, Path]) -> None:
        self.source = str(source) if isinstance(source, Path) else source
        self.cap = cv2.VideoCapture(self.source)
        if not self.cap.isOpened():
            raise RuntimeError(f"Unable to open video source {self.source}")
        self.fps = self.cap.get(cv2.CAP_PROP_FPS) or 30.0
        self.frame_count = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT)) or 0
        LOGGER.info(
            "Opened video source %s fps=%.2f frames=%s",
            self.source,
            self.fps,
            self.frame_count or "unknown",
        )

    def read(self) -> np.ndarray:
        ok, frame = self.cap.read()
        if not ok or frame is None:
            raise FrameSourceExhausted(f"No more frames from {self.source}")
        return frame

    def release(self) -> None:
        self.cap.release()

    def __enter__(self) -> "VideoCaptureSource":
        return self

    def __exit__(self, *_exc) -> None:
        self.release()

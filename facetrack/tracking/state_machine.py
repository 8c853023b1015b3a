"""Single-face tracker that escalates from ROI detection to template matching.

Each frame is handled by one of three tiers:

* ``SEARCHING``: the detector scans the whole working frame.
* ``TRACKING``: the detector only scans a region of interest around the last
  face, with a narrow size range.
* ``FALLBACK_MATCHING``: when the ROI scan comes up empty, the stored face
  template is correlated against the ROI until the detector finds the face
  again or the fallback timeout expires.

A frame that starts with a face locked always tries the ROI scan first and
falls through to template matching within the same frame.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

import numpy as np

from facetrack.config import TrackerConfig
from facetrack.geometry import center_of, clip_rect, expand_double, frame_bounds, offset_rect, select_representative
from facetrack.scaling import ScaleNormalizer
from facetrack.template import extract_template, is_template_valid
from facetrack.timing import TickSource, TimeoutGuard, default_tick_source
from facetrack.types import (
    FrameSource,
    ObjectDetector,
    PatchMatcher,
    Point,
    Rect,
    Size,
    TrackerSnapshot,
    TrackingState,
    is_empty,
)

LOGGER = logging.getLogger("facetrack.tracking")

# Detected face size as a fraction of frame height during full-frame search
_MIN_FACE_NUM, _MIN_FACE_DEN = 1, 5
_MAX_FACE_NUM, _MAX_FACE_DEN = 2, 3
# ROI search accepts faces within +/-20% of the tracked size
_ROI_MIN_NUM, _ROI_MAX_NUM, _ROI_DEN = 8, 12, 10


class InvalidFrameError(ValueError):
    """Raised for frames the tracker cannot run geometry on."""


class FaceTracker:
    """Track one face across frames, preferring cheap searches over full scans."""

    def __init__(
        self,
        detector: ObjectDetector,
        matcher: PatchMatcher,
        config: Optional[TrackerConfig] = None,
        ticks: Optional[TickSource] = None,
    ) -> None:
        self.detector = detector
        self.matcher = matcher
        self.config = config or TrackerConfig()
        self.ticks = ticks or default_tick_source()
        self.normalizer = ScaleNormalizer(self.config.resized_width)
        self._snapshot = TrackerSnapshot()
        if getattr(detector, "is_loaded", True) is False:
            LOGGER.warning("Detector is not loaded; tracker will keep searching without results")
        LOGGER.info(
            "Initialised FaceTracker resized_width=%d max_fallback=%.2fs policy=%s",
            self.config.resized_width,
            self.config.template_matching_max_duration,
            self.config.selection_policy,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> TrackerSnapshot:
        return self._snapshot

    @property
    def state(self) -> TrackingState:
        return self._snapshot.state

    def is_face_found(self) -> bool:
        return self._snapshot.face_found

    def face(self) -> Rect:
        """Tracked face rectangle in original-frame coordinates."""
        return self.normalizer.to_original_rect(self._snapshot.face, self._snapshot.scale)

    def face_position(self) -> Point:
        """Center of the tracked face in original-frame coordinates."""
        return self.normalizer.to_original_point(self._snapshot.position, self._snapshot.scale)

    def reset(self) -> None:
        self._snapshot = TrackerSnapshot()

    # ------------------------------------------------------------------
    # Per-frame update
    # ------------------------------------------------------------------
    def next_frame(self, source: FrameSource) -> Tuple[np.ndarray, Point]:
        """Pull one frame from ``source`` and advance on it."""
        frame = source.read()
        return frame, self.advance(frame)

    def advance(self, frame: np.ndarray) -> Point:
        """Process one frame and return the face position in original coordinates.

        The tracker state is replaced only after the whole step succeeds.
        """
        working, scale = self._normalize(frame)
        current = replace(self._snapshot, scale=scale)
        guard = TimeoutGuard(self.ticks, current.fallback_start_tick)

        if current.state is TrackingState.SEARCHING:
            updated = self._search_full_frame(working, current)
        else:
            updated = self._search_roi(working, current, guard)
            if updated is None:
                guard.start()
                updated = self._match_template(working, current, guard)

        if updated.state is not current.state:
            LOGGER.debug("Tracker state %s -> %s", current.state.value, updated.state.value)
        self._snapshot = updated
        return self.face_position()

    def _normalize(self, frame: np.ndarray) -> Tuple[np.ndarray, float]:
        if not isinstance(frame, np.ndarray) or frame.ndim < 2:
            raise InvalidFrameError(f"Expected an image array, got {type(frame).__name__}")
        height, width = frame.shape[:2]
        if height == 0 or width == 0:
            raise InvalidFrameError(f"Frame has zero size ({width}x{height})")
        try:
            return self.normalizer.normalize(frame)
        except ValueError as exc:
            raise InvalidFrameError(str(exc)) from exc

    def _detect(self, image: np.ndarray, min_size: Size, max_size: Size) -> List[Rect]:
        return list(
            self.detector.detect(
                image,
                min_size=min_size,
                max_size=max_size,
                scale_factor=self.config.scale_factor,
                min_neighbors=self.config.min_neighbors,
            )
        )

    def _search_full_frame(self, frame: np.ndarray, current: TrackerSnapshot) -> TrackerSnapshot:
        rows = frame.shape[0]
        min_side = rows * _MIN_FACE_NUM // _MIN_FACE_DEN
        max_side = rows * _MAX_FACE_NUM // _MAX_FACE_DEN
        candidates = self._detect(frame, (min_side, min_side), (max_side, max_side))
        if not candidates:
            return current

        face = select_representative(candidates, self.config.selection_policy)
        face = clip_rect(face, frame_bounds(frame.shape[1], rows))
        locked = self._lock_on(frame, face, TrackingState.TRACKING, None, current.scale)
        if locked.template.size == 0:
            LOGGER.debug("Ignoring face %s with an empty template", face)
            return current
        LOGGER.info("Face acquired at %s (%d candidates)", face, len(candidates))
        return locked

    def _search_roi(
        self,
        frame: np.ndarray,
        current: TrackerSnapshot,
        guard: TimeoutGuard,
    ) -> Optional[TrackerSnapshot]:
        bounds = frame_bounds(frame.shape[1], frame.shape[0])
        roi = clip_rect(current.roi, bounds)
        if is_empty(roi):
            return None

        rx, ry, rw, rh = roi
        _, _, face_w, face_h = current.face
        min_size = (face_w * _ROI_MIN_NUM // _ROI_DEN, face_h * _ROI_MIN_NUM // _ROI_DEN)
        # The y extent follows the face height; width-only bounds skewed the max box.
        max_size = (face_w * _ROI_MAX_NUM // _ROI_DEN, face_h * _ROI_MAX_NUM // _ROI_DEN)
        candidates = self._detect(frame[ry : ry + rh, rx : rx + rw], min_size, max_size)
        if not candidates:
            return None

        face = offset_rect(select_representative(candidates, self.config.selection_policy), (rx, ry))
        face = clip_rect(face, bounds)
        if guard.running:
            LOGGER.info("Face re-detected after %.2fs of template matching", guard.elapsed())
        guard.reset()
        locked = self._lock_on(frame, face, TrackingState.TRACKING, None, current.scale)
        if locked.template.size == 0:
            LOGGER.info("Face lost: re-detected face %s has an empty template", face)
            return self._lost(current)
        return locked

    def _match_template(
        self,
        frame: np.ndarray,
        current: TrackerSnapshot,
        guard: TimeoutGuard,
    ) -> TrackerSnapshot:
        max_duration = self.config.template_matching_max_duration
        if guard.exceeded(max_duration):
            LOGGER.info("Face lost: template matching exceeded %.2fs", max_duration)
            return self._lost(current)

        template = current.template
        if not is_template_valid(template):
            LOGGER.info("Face lost: template degenerated (face left the frame?)")
            return self._lost(current)

        bounds = frame_bounds(frame.shape[1], frame.shape[0])
        rx, ry, rw, rh = clip_rect(current.roi, bounds)
        window = frame[ry : ry + rh, rx : rx + rw]
        if template.shape[2:] != window.shape[2:] or template.dtype != window.dtype:
            LOGGER.info("Face lost: frame format changed under the template")
            return self._lost(current)
        template_h, template_w = template.shape[:2]
        if rw < template_w or rh < template_h:
            LOGGER.info("Face lost: search window %dx%d smaller than template", rw, rh)
            return self._lost(current)

        (match_x, match_y), score = self.matcher.best_match(window, template)
        matched = (match_x + rx, match_y + ry, template_w, template_h)
        face = expand_double(matched, bounds)
        LOGGER.debug("Template match at %s score=%.4f -> face %s", matched, score, face)
        return self._lock_on(frame, face, TrackingState.FALLBACK_MATCHING, guard.start_tick, current.scale)

    @staticmethod
    def _lock_on(
        frame: np.ndarray,
        face: Rect,
        state: TrackingState,
        fallback_start_tick: Optional[int],
        scale: float,
    ) -> TrackerSnapshot:
        bounds = frame_bounds(frame.shape[1], frame.shape[0])
        return TrackerSnapshot(
            state=state,
            face=face,
            position=center_of(face),
            roi=expand_double(face, bounds),
            template=extract_template(frame, face),
            scale=scale,
            fallback_start_tick=fallback_start_tick,
        )

    @staticmethod
    def _lost(current: TrackerSnapshot) -> TrackerSnapshot:
        return TrackerSnapshot(state=TrackingState.SEARCHING, scale=current.scale)

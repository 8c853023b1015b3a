"""Tracking state machine."""

from facetrack.tracking.state_machine import FaceTracker, InvalidFrameError  # noqa: F401

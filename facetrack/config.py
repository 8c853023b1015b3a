"""Tracker configuration and YAML loading."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from facetrack.geometry import SELECTION_POLICIES
from facetrack.io_utils import load_yaml

LOGGER = logging.getLogger("facetrack.config")

DEFAULT_CASCADE_NAME = "haarcascade_frontalface_alt.xml"


@dataclass
class TrackerConfig:
    # Working width frames are downscaled to before detection (px)
    resized_width: int = 320
    # How long correlation matching may bridge a detector dropout (s)
    template_matching_max_duration: float = 2.0
    # Detector pyramid step and neighbour count
    scale_factor: float = 1.1
    min_neighbors: int = 3
    # Which box represents the face when several are detected
    selection_policy: str = "smallest"
    cascade_path: Optional[str] = None

    def __post_init__(self) -> None:
        self.resized_width = max(1, int(self.resized_width))
        self.template_matching_max_duration = float(self.template_matching_max_duration)
        if self.template_matching_max_duration <= 0:
            raise ValueError(
                f"template_matching_max_duration must be positive, got {self.template_matching_max_duration}"
            )
        if self.scale_factor <= 1.0:
            raise ValueError(f"scale_factor must be greater than 1, got {self.scale_factor}")
        if self.min_neighbors < 0:
            raise ValueError(f"min_neighbors must be non-negative, got {self.min_neighbors}")
        if self.selection_policy not in SELECTION_POLICIES:
            raise ValueError(
                f"Unknown selection_policy {self.selection_policy!r}; expected one of {SELECTION_POLICIES}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackerConfig":
        """Build a config from a mapping, ignoring keys the tracker does not know."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            LOGGER.warning("Ignoring unknown tracker config keys: %s", unknown)
        return cls(**{key: value for key, value in data.items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_tracker_config(path: Optional[Path], overrides: Optional[Mapping[str, Any]] = None) -> TrackerConfig:
    """Load ``TrackerConfig`` from YAML; ``overrides`` with non-None values win."""
    data: Dict[str, Any] = {}
    if path is not None:
        if path.exists():
            data.update(load_yaml(path))
        else:
            LOGGER.warning("Tracker config %s not found; using defaults", path)
    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})
    config = TrackerConfig.from_dict(data)
    LOGGER.debug("Tracker config resolved: %s", config.to_dict())
    return config

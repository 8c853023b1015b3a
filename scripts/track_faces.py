#!/usr/bin/env python3
"""CLI for tracking a single face through a camera feed or video file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import cv2
import numpy as np
import pandas as pd

from facetrack.config import TrackerConfig, load_tracker_config
from facetrack.detectors.haar_cascade import HaarCascadeDetector
from facetrack.geometry import SELECTION_POLICIES
from facetrack.io_utils import dump_yaml, ensure_dir, setup_logging
from facetrack.matching.template_match import SquaredDiffPatchMatcher
from facetrack.sources import FrameSourceExhausted, VideoCaptureSource
from facetrack.timing import default_tick_source
from facetrack.tracking import FaceTracker

LOGGER = logging.getLogger("scripts.track_faces")

CSV_COLUMNS = ["frame_idx", "found", "state", "x", "y", "width", "height", "cx", "cy", "ms"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track one face through a camera or video")
    parser.add_argument(
        "source",
        nargs="?",
        default="0",
        help="Camera index or path to a video file (default: camera 0)",
    )
    parser.add_argument(
        "--tracker-config",
        type=Path,
        default=Path("configs/tracker.yaml"),
        help="Tracker configuration YAML",
    )
    parser.add_argument("--resized-width", type=int, default=None, help="Working width in pixels")
    parser.add_argument(
        "--max-fallback-s",
        type=float,
        default=None,
        help="Seconds template matching may run before the face is declared lost",
    )
    parser.add_argument("--selection-policy", choices=SELECTION_POLICIES, default=None)
    parser.add_argument("--cascade", type=str, default=None, help="Haar cascade XML override")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after this many frames")
    parser.add_argument(
        "--save-crops",
        type=Path,
        default=None,
        help="Directory receiving a PNG crop of the face for every frame it is found in",
    )
    parser.add_argument("--output-csv", type=Path, default=None, help="Per-frame tracking results CSV")
    parser.add_argument("--verbose", action="store_true", help="Log per-frame timing")
    return parser.parse_args(argv)


def resolve_source(value: str) -> Union[int, Path]:
    """Digits select a camera index, anything else is a file path."""
    return int(value) if value.isdigit() else Path(value)


def resolve_config(args: argparse.Namespace) -> TrackerConfig:
    overrides = {
        "resized_width": args.resized_width,
        "template_matching_max_duration": args.max_fallback_s,
        "selection_policy": args.selection_policy,
        "cascade_path": args.cascade,
    }
    return load_tracker_config(args.tracker_config, overrides=overrides)


def smooth_fps(fps: float, frame_seconds: float) -> float:
    """Exponential moving average weighting the newest frame by 1/16."""
    if frame_seconds <= 0:
        return fps
    return (15 * fps + (1.0 / frame_seconds)) / 16


def frame_record(frame_idx: int, tracker: FaceTracker, frame_seconds: float) -> Dict:
    x, y, width, height = tracker.face()
    cx, cy = tracker.face_position()
    return {
        "frame_idx": frame_idx,
        "found": tracker.is_face_found(),
        "state": tracker.state.value,
        "x": x,
        "y": y,
        "width": width,
        "height": height,
        "cx": cx,
        "cy": cy,
        "ms": round(frame_seconds * 1000.0, 3),
    }


def save_face_crop(frame: np.ndarray, tracker: FaceTracker, crops_dir: Path, crop_idx: int) -> bool:
    x, y, width, height = tracker.face()
    crop = frame[max(0, y) : y + height, max(0, x) : x + width]
    if crop.size == 0:
        return False
    path = crops_dir / f"captureFace_{crop_idx}.png"
    cv2.imwrite(str(path), crop, [cv2.IMWRITE_PNG_COMPRESSION, 0])
    return True


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = resolve_config(args)
    detector = HaarCascadeDetector(config.cascade_path)
    tracker = FaceTracker(detector, SquaredDiffPatchMatcher(), config)
    ticks = default_tick_source()

    crops_dir = ensure_dir(args.save_crops) if args.save_crops else None
    records: List[Dict] = []
    fps = 0.0
    crop_idx = 0

    with VideoCaptureSource(resolve_source(args.source)) as source:
        frame_idx = 0
        while args.max_frames is None or frame_idx < args.max_frames:
            start = ticks.read()
            try:
                frame, _position = tracker.next_frame(source)
            except FrameSourceExhausted:
                LOGGER.info("Source exhausted after %d frames", frame_idx)
                break
            frame_seconds = (ticks.read() - start) / ticks.frequency
            fps = smooth_fps(fps, frame_seconds)
            LOGGER.debug("Time per frame: %.3f\tFPS: %.3f", frame_seconds, fps)

            if crops_dir is not None and tracker.is_face_found():
                if save_face_crop(frame, tracker, crops_dir, crop_idx):
                    crop_idx += 1
            records.append(frame_record(frame_idx, tracker, frame_seconds))
            frame_idx += 1

    found_frames = sum(1 for record in records if record["found"])
    LOGGER.info(
        "Tracked %d frames; face found in %d; smoothed FPS %.2f; crops saved %d",
        len(records),
        found_frames,
        fps,
        crop_idx,
    )

    if args.output_csv:
        ensure_dir(args.output_csv.parent)
        df = pd.DataFrame(records, columns=CSV_COLUMNS)
        df.to_csv(args.output_csv, index=False)
        dump_yaml(args.output_csv.with_suffix(".config.yaml"), config.to_dict())
        LOGGER.info("Wrote per-frame results to %s", args.output_csv)


if __name__ == "__main__":
    main()

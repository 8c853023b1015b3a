import logging
from pathlib import Path

import pytest

from facetrack.config import TrackerConfig, load_tracker_config

REPO_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "tracker.yaml"


def test_defaults():
    config = TrackerConfig()
    assert config.resized_width == 320
    assert config.template_matching_max_duration == 2.0
    assert config.scale_factor == 1.1
    assert config.min_neighbors == 3
    assert config.selection_policy == "smallest"
    assert config.cascade_path is None


@pytest.mark.parametrize("width", [0, -5])
def test_resized_width_is_clamped(width):
    assert TrackerConfig(resized_width=width).resized_width == 1


def test_invalid_values_raise():
    with pytest.raises(ValueError):
        TrackerConfig(template_matching_max_duration=0)
    with pytest.raises(ValueError):
        TrackerConfig(selection_policy="biggest")
    with pytest.raises(ValueError):
        TrackerConfig(scale_factor=1.0)


def test_from_dict_ignores_unknown_keys(caplog):
    with caplog.at_level(logging.WARNING, logger="facetrack.config"):
        config = TrackerConfig.from_dict({"resized_width": 160, "det_size": [960, 960]})
    assert config.resized_width == 160
    assert "det_size" in caplog.text


def test_load_tracker_config_applies_overrides(tmp_path: Path):
    path = tmp_path / "tracker.yaml"
    path.write_text("resized_width: 480\ntemplate_matching_max_duration: 3.5\n", encoding="utf-8")

    config = load_tracker_config(path, overrides={"resized_width": 200, "selection_policy": None})

    assert config.resized_width == 200
    assert config.template_matching_max_duration == 3.5
    assert config.selection_policy == "smallest"


def test_load_tracker_config_missing_file_uses_defaults(tmp_path: Path):
    config = load_tracker_config(tmp_path / "absent.yaml")
    assert config == TrackerConfig()


def test_shipped_config_matches_defaults():
    assert load_tracker_config(REPO_CONFIG) == TrackerConfig()

"""Tests for recognizer configuration."""

import numpy as np
import pytest
import yaml

from controller_gestures.config import GestureConfig


class TestGestureConfig:
    def test_defaults(self):
        cfg = GestureConfig()
        assert cfg.double_click_limit == 0.2
        assert cfg.press_minimum == 0.4
        assert cfg.anchor_delay == 0.05
        assert cfg.pinch_threshold == 0.01
        assert cfg.rotate_threshold == 0.2
        assert cfg.pan_min_distance == 0.006
        assert cfg.pan_max_velocity == 0.03
        assert np.array_equal(cfg.up_vector, [0.0, 1.0, 0.0])
        assert cfg.horizontal_swipes is False

    def test_yaml_roundtrip(self, tmp_path):
        cfg = GestureConfig(double_click_limit=0.25, press_minimum=0.5, up=(0, 0, 1))
        path = tmp_path / "gestures.yml"
        cfg.to_yaml(path)

        loaded = GestureConfig.from_yaml(path)
        assert loaded == cfg
        assert loaded.up == (0.0, 0.0, 1.0)

    def test_yaml_without_section(self, tmp_path):
        path = tmp_path / "flat.yml"
        path.write_text(yaml.dump({"pinch_threshold": 0.02}))
        assert GestureConfig.from_yaml(path).pinch_threshold == 0.02

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert GestureConfig.from_yaml(path) == GestureConfig()

    def test_unknown_keys_ignored(self):
        cfg = GestureConfig.from_dict({"rotate_threshold": 0.3, "bogus": 1})
        assert cfg.rotate_threshold == 0.3

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            GestureConfig(pinch_threshold=-0.1)

    def test_press_below_tap_window_rejected(self):
        with pytest.raises(ValueError):
            GestureConfig(double_click_limit=0.5, press_minimum=0.3)

    def test_zero_up_rejected(self):
        with pytest.raises(ValueError):
            GestureConfig(up=(0, 0, 0))

    def test_dumps(self):
        text = GestureConfig().dumps()
        data = yaml.safe_load(text)
        assert data["gestures"]["double_click_limit"] == 0.2

"""Tests for loading and saving settings."""

import json
import logging

from pencil_sketch.config_manager import ConfigManager
from pencil_sketch.models import SketchConfig, SketchOptions


def test_missing_file_gives_defaults(tmp_path):
    config = ConfigManager(tmp_path / "absent.json").load()
    assert config == SketchConfig()


def test_save_and_load(tmp_path):
    path = tmp_path / "settings.json"
    manager = ConfigManager(path)
    config = SketchConfig(
        options=SketchOptions(intensity=9, color_mode=True, color_strength=55),
        texture="canvas",
        texture_opacity=0.4,
        export_format="jpeg",
        export_quality="print",
    )

    success, error = manager.save(config)
    assert success and error is None
    assert manager.load() == config


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert ConfigManager(path).load() == SketchConfig()


def test_wrong_shape_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(["a", "list"]))
    assert ConfigManager(path).load() == SketchConfig()


def test_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"options": {"contrast": 500}, "texture": "notebook"}))
    config = ConfigManager(path).load()
    assert config.options.contrast == 100
    assert config.options.intensity == 21
    assert config.texture == "notebook"
    assert config.export_format == "png"


def test_save_failure_reports_error(tmp_path):
    manager = ConfigManager(tmp_path / "missing-dir" / "settings.json")
    success, error = manager.save(SketchConfig())
    assert not success
    assert error


def test_mistyped_settings_fall_back(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "options": {"intensity": 12},
                "texture": ["canvas"],
                "texture_blend_mode": None,
                "export_format": 5,
                "export_quality": "print",
            }
        )
    )
    with caplog.at_level(logging.WARNING, logger="pencil_sketch.config_manager"):
        config = ConfigManager(path).load()

    defaults = SketchConfig()
    assert config.options.intensity == 12
    assert config.texture == defaults.texture
    assert config.texture_blend_mode == defaults.texture_blend_mode
    assert config.export_format == defaults.export_format
    assert config.export_quality == "print"
    assert "export_format" in caplog.text
    assert "Warning:" not in caplog.text


def test_load_message_is_plain(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"texture": "canvas"}))
    with caplog.at_level(logging.INFO, logger="pencil_sketch.config_manager"):
        ConfigManager(path).load()
    assert "Loaded configuration from" in caplog.text
    assert "✓" not in caplog.text

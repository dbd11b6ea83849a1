"""Configuration persistence manager for the pencil sketch tool.

This module handles loading and saving of sketch settings to/from JSON files.
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional, Tuple

from .models import CONFIG_FILE, SketchConfig, SketchOptions

logger = logging.getLogger(__name__)


def _string_setting(data: dict, key: str, default: str) -> str:
    """Read a string setting, keeping the default for missing or mistyped values."""
    value = data.get(key, default)
    if not isinstance(value, str):
        logger.warning(f"Ignoring {key}={value!r} in config, using {default!r}")
        return default
    return value


class ConfigManager:
    """Handles loading and saving of sketch settings."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file (defaults to ~/.pencil_sketch_config.json)
        """
        self.config_path = Path(config_path)

    def load(self) -> SketchConfig:
        """Load configuration from file, returning defaults if not found.

        Returns:
            SketchConfig with loaded or default values
        """
        config = SketchConfig()

        try:
            if self.config_path.exists():
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                # Update config with loaded values (fallback to defaults)
                config.options = SketchOptions.from_dict(data.get("options", {}))
                config.texture = _string_setting(data, "texture", config.texture)
                config.texture_blend_mode = _string_setting(
                    data, "texture_blend_mode", config.texture_blend_mode
                )
                config.texture_opacity = float(
                    data.get("texture_opacity", config.texture_opacity)
                )
                config.export_format = _string_setting(
                    data, "export_format", config.export_format
                )
                config.export_quality = _string_setting(
                    data, "export_quality", config.export_quality
                )
                logger.info(f"Loaded configuration from {self.config_path}")
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Could not load config file: {e}")
            config = SketchConfig()

        return config

    def save(self, config: SketchConfig) -> Tuple[bool, Optional[str]]:
        """Save configuration to file.

        Args:
            config: SketchConfig to save

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        try:
            with open(self.config_path, "w") as f:
                json.dump(asdict(config), f, indent=2)
            return True, None
        except (OSError, TypeError) as e:
            return False, str(e)

"""
Configuration loading and validation utilities.
"""

import os
import yaml
import logging

from ..anim.track import AnimationType
from ..model.model import BoneSupport

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULTS = {
    "frame_rate": 30.0,
    "anim_type": "absolute",
    "looping": False,
    "high_precision": False,
    "bone_support": "locals",
    "log_level": "WARNING",
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def load_config(config_path: str) -> dict:
    """Load a YAML config file, fill missing keys with defaults, and validate."""
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    # Fill defaults for missing keys
    for key, default_val in DEFAULTS.items():
        if key not in cfg:
            cfg[key] = default_val
            logger.warning("Config key '%s' not found, using default: %s", key, default_val)

    _validate_config(cfg)
    return cfg


def _validate_config(cfg: dict) -> None:
    """Validate configuration values."""
    if cfg["frame_rate"] <= 0:
        raise ValueError(f"'frame_rate' must be positive, got {cfg['frame_rate']}")

    anim_types = [t.name.lower() for t in AnimationType]
    if str(cfg["anim_type"]).lower() not in anim_types:
        raise ValueError(
            f"Unsupported anim_type '{cfg['anim_type']}'. Choose from: {anim_types}"
        )

    supports = [s.value for s in BoneSupport]
    if str(cfg["bone_support"]).lower() not in supports:
        raise ValueError(
            f"Unsupported bone_support '{cfg['bone_support']}'. Choose from: {supports}"
        )

    for key in ["looping", "high_precision"]:
        if not isinstance(cfg[key], bool):
            raise ValueError(f"'{key}' must be a boolean, got {cfg[key]!r}")

    if not isinstance(logging.getLevelName(str(cfg["log_level"]).upper()), int):
        raise ValueError(f"Unknown log_level '{cfg['log_level']}'")


def configure_logging(cfg: dict) -> None:
    """Set up root logging at the configured level."""
    logging.basicConfig(
        level=str(cfg.get("log_level", DEFAULTS["log_level"])).upper(),
        format=LOG_FORMAT,
    )

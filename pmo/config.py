"""
App configuration: phase lengths, sound, window geometry, database path.

Stored as JSON in config/settings.json. Missing keys fall back to
DEFAULT_CONFIG so older files keep working after new settings are added.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Optional

from pmo.services.cycle import CycleDurations

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.json"

DEFAULT_CONFIG = {
    "work_minutes": 25,
    "short_break_minutes": 5,
    "long_break_minutes": 15,
    "cycles_per_session": 4,
    "sound_enabled": True,
    "volume": 0.5,
    "always_on_top": True,
    "window": {
        "width": 320,
        "compact_height": 145,
        "history_height": 600,
    },
    "db_path": None,
}

_POSITIVE_KEYS = ("work_minutes", "short_break_minutes", "long_break_minutes",
                  "cycles_per_session")


def load_config(path: Optional[Path] = None) -> dict:
    """
    Read settings from JSON and merge them over DEFAULT_CONFIG.

    A file that is unreadable or not a JSON object yields the defaults.
    Individual bad values (wrong type, non-positive lengths, a `window`
    that is not an object) are logged and replaced by their defaults.
    """
    path = path or CONFIG_PATH
    merged = copy.deepcopy(DEFAULT_CONFIG)
    if not path.exists():
        return merged
    try:
        with open(path, encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError("top-level JSON value must be an object")
    except (json.JSONDecodeError, ValueError, OSError) as e:
        logger.warning("Bad config at %s (%s), using defaults.", path, e)
        return merged

    for key, value in cfg.items():
        if key == "window":
            continue
        if key in DEFAULT_CONFIG and not _valid(key, value):
            logger.warning("Ignoring bad config value %s=%r; using %r.",
                           key, value, DEFAULT_CONFIG[key])
            continue
        merged[key] = value

    window = cfg.get("window")
    if isinstance(window, dict):
        for key, value in window.items():
            if key in DEFAULT_CONFIG["window"] and not _positive_number(value):
                logger.warning("Ignoring bad window size %s=%r.", key, value)
                continue
            merged["window"][key] = value
    elif window is not None:
        logger.warning("Config 'window' must be an object, got %r; using defaults.", window)
    return merged


def _positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _valid(key: str, value) -> bool:
    if key in _POSITIVE_KEYS:
        return _positive_number(value)
    if key == "volume":
        return isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 1
    if key in ("sound_enabled", "always_on_top"):
        return isinstance(value, bool)
    if key == "db_path":
        return value is None or isinstance(value, str)
    return True


def save_config(config: dict, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


def durations_from_config(config: dict) -> CycleDurations:
    """Phase lengths in whole seconds; every length is at least 1."""
    return CycleDurations(
        work=max(1, int(config["work_minutes"] * 60)),
        short_break=max(1, int(config["short_break_minutes"] * 60)),
        long_break=max(1, int(config["long_break_minutes"] * 60)),
        cycles_per_session=max(1, int(config["cycles_per_session"])),
    )


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Loads config/settings.json over DEFAULT_CONFIG. Unknown keys pass
#   through, known keys are type-checked one by one, so a single typo never
#   stops the app from starting.
#
# Data flow:
#   main.py → load_config() → TimerWidget(config) → durations_from_config()
#   → TimerService. Toggling sound in the tray menu → save_config().

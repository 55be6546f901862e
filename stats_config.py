"""Settings for the stats panel, persisted as JSON next to this module."""

import json
import os
from pathlib import Path

# Use script directory so running from different CWD still finds the file.
CONFIG_FILE = str(Path(__file__).resolve().parent / ".trade_stats_config.json")

DEFAULT_SETTINGS = {
    "stats_mode": "day",
    "default_day": "Mon",
    "poll_interval": 1.5,
    "debounce": 0.5,
}


def load_settings(config_file: str = CONFIG_FILE) -> dict:
    """Load settings from the config file, filling gaps from DEFAULT_SETTINGS."""
    try:
        if os.path.exists(config_file):
            with open(config_file, 'r') as f:
                loaded = json.load(f)
                if isinstance(loaded, dict):
                    merged = DEFAULT_SETTINGS.copy()
                    merged.update(loaded)
                    return merged
    except (OSError, ValueError) as e:
        print(f"Warning: Could not load settings from {config_file}: {e}")
    return DEFAULT_SETTINGS.copy()


def save_settings(settings: dict, config_file: str = CONFIG_FILE) -> None:
    """Save settings to the config file.

    Merges with the existing config so partial updates don't wipe other keys.
    """
    merged = load_settings(config_file)
    if isinstance(settings, dict):
        merged.update(settings)
    try:
        with open(config_file, 'w') as f:
            json.dump(merged, f, indent=2)
    except OSError as e:
        print(f"Warning: Could not save settings: {e}")

"""JSON config file loading utilities."""

import json
from pathlib import Path
from typing import Any, Optional

from wavemesh.constants import CONFIG_DIR, DEFAULT_CONFIG_FILE
from wavemesh.core.config import ConfigSource
from wavemesh.core.events import EventBus


def load_json(path: Path) -> Any:
    """Load and return parsed JSON from a file."""
    with open(path) as f:
        return json.load(f)


def load_config(name: str = DEFAULT_CONFIG_FILE) -> Any:
    """Load a config file from assets/config/."""
    return load_json(CONFIG_DIR / name)


def load_config_source(
    path: Optional[Path] = None, event_bus: Optional[EventBus] = None,
) -> ConfigSource:
    """Seed a :class:`ConfigSource` with the initial control values.

    *path* defaults to ``assets/config/controls.json``.
    """
    data = load_json(path) if path is not None else load_config()
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object, got {type(data).__name__}")
    return ConfigSource(event_bus, data)

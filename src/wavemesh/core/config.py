"""User-editable configuration: a string-valued source plus typed snapshots.

The source mimics a set of form inputs. Every value is stored as a string
and only becomes a number in :class:`MeshGenerationConfig` /
:class:`WaterSurfaceConfig`, which is the single place where missing or
malformed input is replaced by a fallback.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from wavemesh.constants import (
    DEFAULT_AMPLITUDE_MULTIPLIER,
    DEFAULT_FREQUENCY_MULTIPLIER,
    DEFAULT_NB_ITERATIONS,
    DEFAULT_RESOLUTION,
    DEFAULT_SPEED,
    MAX_NB_ITERATIONS,
    MAX_RESOLUTION,
)
from wavemesh.core.events import EventBus, EventType

logger = logging.getLogger(__name__)


MESH_KEYS = ("geometry", "resolution")
WATER_KEYS = ("nb_iterations", "amplitude_multiplier", "frequency_multiplier", "speed")

# Alternate spellings accepted by WaterSurfaceConfig.from_mapping
_WATER_KEY_MAP = {
    "nbIterations": "nb_iterations",
    "iterationCount": "nb_iterations",
    "iteration_count": "nb_iterations",
    "amplitudeMultiplier": "amplitude_multiplier",
    "frequencyMultiplier": "frequency_multiplier",
}


def parse_float(raw: Any, default: float, name: str = "value") -> float:
    """Parse *raw* as a finite float, returning *default* otherwise."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Config %s=%r is not numeric, using %s", name, raw, default)
        return default
    if not math.isfinite(value):
        logger.warning("Config %s=%r is not finite, using %s", name, raw, default)
        return default
    return value


def parse_int(
    raw: Any, default: int, name: str = "value", maximum: Optional[int] = None,
) -> int:
    """Parse *raw* as an int in ``[0, maximum]`` (truncating), *default* if unparsable."""
    value = max(int(parse_float(raw, float(default), name)), 0)
    if maximum is not None and value > maximum:
        logger.warning("Config %s=%r exceeds %d, clamping", name, raw, maximum)
        return maximum
    return value


class ConfigSource:
    """String-valued configuration store with change notification.

    :meth:`set` and :meth:`update` publish ``MESH_CONFIG_CHANGED`` and/or
    ``WATER_CONFIG_CHANGED`` on the bus, once per affected group, after the
    new values are stored.
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._bus = event_bus
        self._values: dict[str, str] = {}
        if values:
            for key, value in values.items():
                self._values[key] = _to_str(value)

    def get(self, key: str) -> str:
        """Return the raw value for *key*, or ``""`` if it was never set."""
        value = self._values.get(key)
        if value is None:
            logger.warning("Config value not found: %s", key)
            return ""
        return value

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self._values[key] = _to_str(value)
        self._notify(tuple(values.keys()))

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def _notify(self, keys: tuple[str, ...]) -> None:
        if self._bus is None:
            return
        mesh_keys = tuple(k for k in keys if k in MESH_KEYS)
        water_keys = tuple(k for k in keys if k in WATER_KEYS)
        if mesh_keys:
            self._bus.publish(EventType.MESH_CONFIG_CHANGED, keys=mesh_keys)
        if water_keys:
            self._bus.publish(EventType.WATER_CONFIG_CHANGED, keys=water_keys)


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class MeshGenerationConfig:
    """Shape tag and resolution for the mesh generation scene."""
    geometry: str = ""
    resolution: int = DEFAULT_RESOLUTION

    @classmethod
    def from_source(cls, source: ConfigSource) -> "MeshGenerationConfig":
        return cls(
            geometry=source.get("geometry").strip().lower(),
            resolution=parse_int(
                source.get("resolution"), DEFAULT_RESOLUTION, "resolution", MAX_RESOLUTION),
        )


@dataclass(frozen=True)
class WaterSurfaceConfig:
    """The four wave tunables edited by the user."""
    speed: float = DEFAULT_SPEED
    nb_iterations: int = DEFAULT_NB_ITERATIONS
    amplitude_multiplier: float = DEFAULT_AMPLITUDE_MULTIPLIER
    frequency_multiplier: float = DEFAULT_FREQUENCY_MULTIPLIER

    @classmethod
    def from_source(cls, source: ConfigSource) -> "WaterSurfaceConfig":
        return cls.from_mapping({key: source.get(key) for key in WATER_KEYS})

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "WaterSurfaceConfig":
        """Build from a dict using snake_case or the UI's camelCase keys."""
        d: dict[str, Any] = {}
        for key, value in values.items():
            d[_WATER_KEY_MAP.get(key, key)] = value
        return cls(
            speed=parse_float(d.get("speed"), DEFAULT_SPEED, "speed"),
            nb_iterations=parse_int(
                d.get("nb_iterations"), DEFAULT_NB_ITERATIONS, "nb_iterations",
                MAX_NB_ITERATIONS),
            amplitude_multiplier=parse_float(
                d.get("amplitude_multiplier"), DEFAULT_AMPLITUDE_MULTIPLIER,
                "amplitude_multiplier"),
            frequency_multiplier=parse_float(
                d.get("frequency_multiplier"), DEFAULT_FREQUENCY_MULTIPLIER,
                "frequency_multiplier"),
        )

"""Water surface scene: a fixed dense plane driven by wave shader uniforms.

The displacement itself runs in the vertex shader (``water.vert``). This
module owns the plane buffer, which is built once, and the uniform values
the shader reads every frame.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Mapping, Optional, Union

from wavemesh.constants import (
    DEFAULT_AMPLITUDE_MULTIPLIER,
    DEFAULT_FREQUENCY_MULTIPLIER,
    DEFAULT_NB_ITERATIONS,
    DEFAULT_SPEED,
    LIGHT_POSITION,
    WATER_PLANE_SEGMENTS,
    WATER_PLANE_SIZE,
)
from wavemesh.core.clock import ElapsedClock
from wavemesh.core.config import ConfigSource, WaterSurfaceConfig
from wavemesh.core.events import EventBus, EventType
from wavemesh.core.material import Material
from wavemesh.core.mesh import BufferGeometry, MeshInstance
from wavemesh.core.scene_graph import Scene, SceneNode
from wavemesh.scene.shapes import plane_indices, plane_vertices

logger = logging.getLogger(__name__)


@dataclass
class WaveUniformSet:
    """Values consumed by the water vertex shader, one field per uniform."""
    time: float = 0.0
    speed: float = DEFAULT_SPEED
    iteration_count: int = DEFAULT_NB_ITERATIONS
    amplitude_multiplier: float = DEFAULT_AMPLITUDE_MULTIPLIER
    frequency_multiplier: float = DEFAULT_FREQUENCY_MULTIPLIER
    light_position: tuple[float, float, float] = LIGHT_POSITION

    # field name -> GLSL uniform name
    UNIFORM_NAMES: ClassVar[dict[str, str]] = {
        "light_position": "uLightPos",
        "time": "uTime",
        "speed": "uSpeed",
        "iteration_count": "uNbIterations",
        "amplitude_multiplier": "uAmplitudeMultiplier",
        "frequency_multiplier": "uFrequencyMultiplier",
    }

    @classmethod
    def from_config(cls, config: WaterSurfaceConfig, time: float = 0.0) -> "WaveUniformSet":
        return cls(time=time).with_config(config)

    def with_config(self, config: WaterSurfaceConfig) -> "WaveUniformSet":
        """Return a copy with the four tunables taken from *config*."""
        return replace(
            self,
            speed=config.speed,
            iteration_count=config.nb_iterations,
            amplitude_multiplier=config.amplitude_multiplier,
            frequency_multiplier=config.frequency_multiplier,
        )

    def as_uniforms(self) -> dict[str, Any]:
        """Return ``{uniform_name: value}`` for every field."""
        return {uniform: getattr(self, attr) for attr, uniform in self.UNIFORM_NAMES.items()}

    def apply(self, program) -> None:
        """Upload every value through *program*'s ``set_uniform_*`` methods."""
        names = self.UNIFORM_NAMES
        program.set_uniform_vec3(names["light_position"], self.light_position)
        program.set_uniform_float(names["time"], self.time)
        program.set_uniform_float(names["speed"], self.speed)
        program.set_uniform_int(names["iteration_count"], self.iteration_count)
        program.set_uniform_float(names["amplitude_multiplier"], self.amplitude_multiplier)
        program.set_uniform_float(names["frequency_multiplier"], self.frequency_multiplier)


class WaterSurfaceFacade:
    """Owns the water plane and its :class:`WaveUniformSet`.

    ``FRAME_UPDATE`` events advance ``time``; ``WATER_CONFIG_CHANGED``
    events replace the four tunables. Neither path touches the plane buffer.
    """

    def __init__(
        self,
        scene: Scene,
        source: ConfigSource,
        event_bus: EventBus,
        clock: Optional[ElapsedClock] = None,
        *,
        size: float = WATER_PLANE_SIZE,
        segments: int = WATER_PLANE_SEGMENTS,
    ) -> None:
        self._scene = scene
        self._source = source
        self._bus = event_bus
        self._clock = clock if clock is not None else ElapsedClock()

        self.geometry = BufferGeometry(
            positions=plane_vertices(size, size, segments, segments),
            indices=plane_indices(segments, segments),
        )
        self.geometry.validate()
        self.geometry.freeze()

        self.mesh = MeshInstance(
            name="water_surface",
            geometry=self.geometry,
            material=Material.from_hex(0x1e5f8c, double_sided=True, transparent=True),
        )
        # Built in XY; lay it flat
        self.node = SceneNode("water_surface", self.mesh).set_rotation_x(math.pi / 2)
        self._scene.add(self.node)
        logger.info(
            "Water surface: %d verts, %d tris",
            self.geometry.vertex_count, self.geometry.triangle_count,
        )

        self._uniforms = WaveUniformSet()
        self.initialize(WaterSurfaceConfig.from_source(source))

        self._bus.subscribe(EventType.FRAME_UPDATE, self._on_frame)
        self._bus.subscribe(EventType.WATER_CONFIG_CHANGED, self._on_config_changed)

    @property
    def uniforms(self) -> WaveUniformSet:
        return self._uniforms

    def initialize(
        self, config: WaterSurfaceConfig, elapsed: Optional[float] = None,
    ) -> WaveUniformSet:
        """Reset the uniforms from *config* and the current clock reading."""
        if elapsed is None:
            elapsed = self._clock.elapsed()
        self._uniforms = WaveUniformSet.from_config(config, time=elapsed)
        return self._uniforms

    def tick(self, elapsed: float) -> None:
        """Set ``time``; readings that are not finite or go backwards are ignored."""
        if not math.isfinite(elapsed) or elapsed < self._uniforms.time:
            return
        self._uniforms.time = elapsed

    def on_configuration_changed(
        self, config: Union[WaterSurfaceConfig, Mapping[str, Any]],
    ) -> None:
        """Replace speed, iteration count and both multipliers from *config*."""
        if not isinstance(config, WaterSurfaceConfig):
            config = WaterSurfaceConfig.from_mapping(config)
        # Swap in a complete new set rather than editing fields one by one
        self._uniforms = self._uniforms.with_config(config)
        logger.info(
            "Wave uniforms: speed=%g iterations=%d amplitude=%g frequency=%g",
            config.speed, config.nb_iterations,
            config.amplitude_multiplier, config.frequency_multiplier,
        )

    def apply_uniforms(self, program) -> None:
        self._uniforms.apply(program)

    def close(self) -> None:
        self._bus.unsubscribe(EventType.FRAME_UPDATE, self._on_frame)
        self._bus.unsubscribe(EventType.WATER_CONFIG_CHANGED, self._on_config_changed)
        self._scene.remove(self.node)
        self.mesh.dispose()

    def _on_frame(self, elapsed: float, **_kwargs) -> None:
        self.tick(elapsed)

    def _on_config_changed(self, **_kwargs) -> None:
        self.on_configuration_changed(WaterSurfaceConfig.from_source(self._source))

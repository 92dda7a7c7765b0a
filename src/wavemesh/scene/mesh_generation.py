"""Mesh generation scene: rebuilds the displayed shape on config change."""

import logging
from typing import Optional

from wavemesh.core.config import ConfigSource, MeshGenerationConfig
from wavemesh.core.events import EventBus, EventType
from wavemesh.core.material import Material
from wavemesh.core.mesh import MeshInstance
from wavemesh.core.scene_graph import Scene, SceneNode
from wavemesh.scene.shapes import build_shape

logger = logging.getLogger(__name__)


class MeshGenerationFacade:
    """Keeps one wireframe mesh in *scene* matching the current shape config.

    On every ``MESH_CONFIG_CHANGED`` event the new buffers are built and
    attached before the previous mesh is detached and disposed, so the
    scene never holds zero meshes between frames.
    """

    def __init__(self, scene: Scene, source: ConfigSource, event_bus: EventBus) -> None:
        self._scene = scene
        self._source = source
        self._bus = event_bus
        self._node: Optional[SceneNode] = None
        self._config: Optional[MeshGenerationConfig] = None
        self._regenerating = False

        self.regenerate()
        self._bus.subscribe(EventType.MESH_CONFIG_CHANGED, self._on_config_changed)

    @property
    def mesh(self) -> Optional[MeshInstance]:
        return self._node.mesh if self._node is not None else None

    @property
    def config(self) -> Optional[MeshGenerationConfig]:
        return self._config

    def regenerate(self) -> MeshInstance:
        """Build buffers for the current config and swap them into the scene."""
        if self._regenerating:
            raise RuntimeError("Mesh regeneration is not re-entrant")
        self._regenerating = True
        try:
            config = MeshGenerationConfig.from_source(self._source)
            geometry = build_shape(config.geometry, config.resolution)
            geometry.validate()
            geometry.compute_normals()
            geometry.freeze()

            mesh = MeshInstance(
                name=f"generated_{config.geometry or 'empty'}",
                geometry=geometry,
                material=Material(wireframe=True),
            )
            node = SceneNode(mesh.name, mesh)

            previous = self._node
            self._scene.add(node)
            self._node = node
            self._config = config

            previous_mesh = None
            if previous is not None:
                self._scene.remove(previous)
                previous_mesh = previous.mesh
                previous_mesh.dispose()

            logger.info(
                "Mesh regenerated: %s, resolution %d, %d verts, %d tris",
                config.geometry or "<none>", config.resolution,
                geometry.vertex_count, geometry.triangle_count,
            )
            self._bus.publish(EventType.MESH_REPLACED, mesh=mesh, previous=previous_mesh)
        finally:
            self._regenerating = False
        return mesh

    def close(self) -> None:
        """Stop listening for config changes and release the current mesh."""
        self._bus.unsubscribe(EventType.MESH_CONFIG_CHANGED, self._on_config_changed)
        if self._node is not None:
            self._scene.remove(self._node)
            self._node.mesh.dispose()
            self._node = None

    def _on_config_changed(self, **_kwargs) -> None:
        self.regenerate()

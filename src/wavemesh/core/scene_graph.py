"""Scene graph holding the meshes handed to the rendering collaborator."""

from typing import Callable, Optional

from wavemesh.core.math_utils import Mat4, mat4_identity, mat4_rotation_x, mat4_translation
from wavemesh.core.mesh import MeshInstance


class SceneNode:
    """A node carrying an optional mesh and a local transform.

    ``world_matrix`` is refreshed by :meth:`update_world_matrix` as
    ``parent.world_matrix @ local_matrix``.
    """

    def __init__(self, name: str = "", mesh: Optional[MeshInstance] = None):
        self.name = name
        self.mesh: Optional[MeshInstance] = mesh
        self.visible: bool = True
        self.parent: Optional["SceneNode"] = None
        self.children: list["SceneNode"] = []
        self.local_matrix: Mat4 = mat4_identity()
        self.world_matrix: Mat4 = mat4_identity()

    def add(self, child: "SceneNode") -> "SceneNode":
        """Attach *child*, detaching it from any previous parent first."""
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.append(child)
        return self

    def remove(self, child: "SceneNode") -> "SceneNode":
        if child in self.children:
            self.children.remove(child)
            child.parent = None
        return self

    def set_rotation_x(self, angle_rad: float) -> "SceneNode":
        """Rotate about the local X axis, keeping the current translation."""
        x, y, z = self.local_matrix[:3, 3]
        self.local_matrix = mat4_translation(x, y, z) @ mat4_rotation_x(angle_rad)
        return self

    def update_world_matrix(self) -> None:
        if self.parent is None:
            self.world_matrix = self.local_matrix.copy()
        else:
            self.world_matrix = self.parent.world_matrix @ self.local_matrix
        for child in self.children:
            child.update_world_matrix()

    def traverse_visible(self, callback: Callable[["SceneNode"], None]) -> None:
        """Depth-first walk that skips hidden nodes and their subtrees."""
        if not self.visible:
            return
        callback(self)
        for child in self.children:
            child.traverse_visible(callback)


class Scene(SceneNode):
    """Root node."""

    def __init__(self):
        super().__init__(name="scene")

    def update(self) -> None:
        self.update_world_matrix()

    def collect_meshes(self) -> list[tuple[MeshInstance, Mat4]]:
        """Return ``(mesh, world_matrix)`` for every visible mesh."""
        found: list[tuple[MeshInstance, Mat4]] = []

        def _visit(node: SceneNode) -> None:
            if node.mesh is not None and node.mesh.visible:
                found.append((node.mesh, node.world_matrix))

        self.traverse_visible(_visit)
        return found

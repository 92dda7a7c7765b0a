"""Mesh data structures for geometry storage (no GL dependencies)."""

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from wavemesh.core.material import Material

logger = logging.getLogger(__name__)


@dataclass
class BufferGeometry:
    """Stores vertex attribute arrays for a mesh.

    positions: flat float32 array (x,y,z per vertex)
    indices: triangle index array (uint32), optional for non-indexed geometry
    normals: flat float32 array, filled by :meth:`compute_normals`
    """
    positions: NDArray[np.float32]
    indices: Optional[NDArray[np.uint32]] = None
    normals: Optional[NDArray[np.float32]] = None
    vertex_count: int = 0

    def __post_init__(self):
        if self.vertex_count == 0:
            self.vertex_count = len(self.positions) // 3

    @property
    def triangle_count(self) -> int:
        if self.indices is not None:
            return len(self.indices) // 3
        return self.vertex_count // 3

    @property
    def has_indices(self) -> bool:
        return self.indices is not None and len(self.indices) > 0

    def freeze(self) -> "BufferGeometry":
        """Mark the owned arrays read-only."""
        self.positions.flags.writeable = False
        if self.indices is not None:
            self.indices.flags.writeable = False
        if self.normals is not None:
            self.normals.flags.writeable = False
        return self

    def validate(self) -> None:
        """Check the buffer invariants, raising ``ValueError`` on violation."""
        if len(self.positions) % 3 != 0:
            raise ValueError(
                f"positions length {len(self.positions)} is not a multiple of 3"
            )
        if self.indices is None:
            return
        if len(self.indices) % 3 != 0:
            raise ValueError(
                f"indices length {len(self.indices)} is not a multiple of 3"
            )
        if len(self.indices) and int(self.indices.max()) >= self.vertex_count:
            raise ValueError(
                f"index {int(self.indices.max())} out of range for "
                f"{self.vertex_count} vertices"
            )

    def compute_normals(self) -> None:
        """Compute area-weighted per-vertex normals from triangle winding."""
        pos = self.positions.reshape(-1, 3).astype(np.float64)
        norms = np.zeros_like(pos)

        if self.has_indices:
            tris = self.indices.reshape(-1, 3)
        else:
            tris = np.arange(self.vertex_count - self.vertex_count % 3).reshape(-1, 3)

        if len(tris):
            v0, v1, v2 = pos[tris[:, 0]], pos[tris[:, 1]], pos[tris[:, 2]]
            face_n = np.cross(v1 - v0, v2 - v0)
            for k in range(3):
                np.add.at(norms, tris[:, k], face_n)

        lengths = np.linalg.norm(norms, axis=1, keepdims=True)
        lengths = np.maximum(lengths, 1e-10)
        norms /= lengths
        self.normals = norms.ravel().astype(np.float32)


@dataclass
class MeshInstance:
    """A mesh with material, linking geometry to rendering properties."""
    name: str
    geometry: BufferGeometry
    material: Material = field(default_factory=Material)
    visible: bool = True
    # GL handle (set by renderer)
    gl_handle: object = None
    disposed: bool = False

    def dispose(self) -> None:
        """Release the GPU-side handle. Safe to call more than once."""
        if self.disposed:
            return
        handle = self.gl_handle
        if handle is not None and hasattr(handle, "destroy"):
            handle.destroy()
        self.gl_handle = None
        self.disposed = True
        logger.debug("Disposed mesh '%s'", self.name)

    @property
    def positions(self) -> NDArray[np.float32]:
        return self.geometry.positions

    @property
    def indices(self) -> Optional[NDArray[np.uint32]]:
        return self.geometry.indices

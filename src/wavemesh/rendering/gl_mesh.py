"""GPU copy of a frozen :class:`~wavemesh.core.mesh.BufferGeometry`.

Attribute layout matches the shaders in ``shaders/``: location 0 is the
position, location 1 the normal (only when the geometry carries normals).
Generated buffers never change once built, so a GLMesh is uploaded once and
replaced, not updated, when the shape changes.
"""

import logging
from typing import Optional

import numpy as np
from OpenGL.GL import (
    GL_ARRAY_BUFFER,
    GL_ELEMENT_ARRAY_BUFFER,
    GL_FALSE,
    GL_FILL,
    GL_FLOAT,
    GL_FRONT_AND_BACK,
    GL_LINE,
    GL_STATIC_DRAW,
    GL_TRIANGLES,
    GL_UNSIGNED_INT,
    glBindBuffer,
    glBindVertexArray,
    glBufferData,
    glDeleteBuffers,
    glDeleteVertexArrays,
    glDrawElements,
    glEnableVertexAttribArray,
    glGenBuffers,
    glGenVertexArrays,
    glPolygonMode,
    glVertexAttribPointer,
)

from wavemesh.core.mesh import BufferGeometry, MeshInstance

logger = logging.getLogger(__name__)

POSITION_LOCATION = 0
NORMAL_LOCATION = 1


class GLMesh:
    def __init__(self, geometry: BufferGeometry) -> None:
        self.geometry = geometry
        self._vao: int = 0
        self._buffers: list[int] = []
        self._index_count: int = 0

    @classmethod
    def for_mesh(cls, mesh: MeshInstance) -> "GLMesh":
        """Upload *mesh* and park the result in ``mesh.gl_handle``.

        ``MeshInstance.dispose()`` then frees the GPU objects.
        """
        gl_mesh = cls(mesh.geometry)
        gl_mesh.upload()
        mesh.gl_handle = gl_mesh
        return gl_mesh

    @property
    def uploaded(self) -> bool:
        return self._vao != 0

    @property
    def index_count(self) -> int:
        return self._index_count

    def upload(self) -> None:
        if self.uploaded:
            self.destroy()

        self._vao = int(glGenVertexArrays(1))
        glBindVertexArray(self._vao)

        self._attribute(POSITION_LOCATION, self.geometry.positions)
        if self.geometry.normals is not None:
            self._attribute(NORMAL_LOCATION, self.geometry.normals)

        if self.geometry.has_indices:
            indices = np.ascontiguousarray(self.geometry.indices, dtype=np.uint32)
            self._index_count = len(indices)
            self._buffer(GL_ELEMENT_ARRAY_BUFFER, indices)

        # The element buffer binding stays recorded in the VAO
        glBindVertexArray(0)
        glBindBuffer(GL_ARRAY_BUFFER, 0)
        logger.debug(
            "Uploaded %d verts, %d indices into VAO %d",
            self.geometry.vertex_count, self._index_count, self._vao,
        )

    def _buffer(self, target: int, data: np.ndarray) -> int:
        vbo = int(glGenBuffers(1))
        glBindBuffer(target, vbo)
        glBufferData(target, data.nbytes, data, GL_STATIC_DRAW)
        self._buffers.append(vbo)
        return vbo

    def _attribute(self, location: int, values: np.ndarray) -> None:
        self._buffer(GL_ARRAY_BUFFER, np.ascontiguousarray(values, dtype=np.float32))
        glVertexAttribPointer(location, 3, GL_FLOAT, GL_FALSE, 0, None)
        glEnableVertexAttribArray(location)

    def draw(self, wireframe: bool = False) -> None:
        """Issue one indexed draw. The program must already be bound."""
        if not self.uploaded or self._index_count == 0:
            return
        if wireframe:
            glPolygonMode(GL_FRONT_AND_BACK, GL_LINE)
        glBindVertexArray(self._vao)
        glDrawElements(GL_TRIANGLES, self._index_count, GL_UNSIGNED_INT, None)
        glBindVertexArray(0)
        if wireframe:
            glPolygonMode(GL_FRONT_AND_BACK, GL_FILL)

    def destroy(self) -> None:
        if self._buffers:
            glDeleteBuffers(len(self._buffers), self._buffers)
            self._buffers = []
        if self._vao:
            glDeleteVertexArrays(1, [self._vao])
            self._vao = 0
        self._index_count = 0


def upload_mesh(mesh: MeshInstance) -> Optional[GLMesh]:
    """Upload *mesh* unless it already has a handle or was disposed."""
    if mesh.disposed or mesh.gl_handle is not None:
        return None
    return GLMesh.for_mesh(mesh)

"""Rendering collaborators -- OpenGL 3.3 core profile via PyOpenGL."""

from wavemesh.rendering.gl_mesh import GLMesh, upload_mesh
from wavemesh.rendering.renderer import SceneRenderer
from wavemesh.rendering.shader_program import (
    ShaderProgram,
    create_mesh_program,
    create_water_program,
)

__all__ = [
    "GLMesh",
    "SceneRenderer",
    "ShaderProgram",
    "create_mesh_program",
    "create_water_program",
    "upload_mesh",
]

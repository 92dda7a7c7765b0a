"""Draws the scene graph: the water mesh with the wave program, every other
mesh with the normal-shaded mesh program.

Usage
-----
1. Call :meth:`SceneRenderer.init_gl` once a context is current.
2. Call :meth:`SceneRenderer.render` each frame, after ``scene.update()``.
3. Call :meth:`SceneRenderer.destroy` before the context goes away.
"""

import logging
import math
from typing import Optional

from OpenGL.GL import (
    GL_COLOR_BUFFER_BIT,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    glClear,
    glClearColor,
    glEnable,
    glViewport,
)

from wavemesh.constants import (
    CAMERA_FAR,
    CAMERA_FOV_DEG,
    CAMERA_NEAR,
    CAMERA_POSITION,
    CLEAR_COLOR,
    VIEWPORT_SIZE,
)
from wavemesh.core.math_utils import Mat4, mat4_look_at, mat4_perspective, vec3
from wavemesh.core.mesh import MeshInstance
from wavemesh.core.scene_graph import Scene
from wavemesh.rendering.gl_mesh import upload_mesh
from wavemesh.rendering.shader_program import (
    ShaderProgram,
    create_mesh_program,
    create_water_program,
)
from wavemesh.scene.water_surface import WaterSurfaceFacade

logger = logging.getLogger(__name__)


class SceneRenderer:
    def __init__(
        self,
        water: WaterSurfaceFacade,
        size: tuple[int, int] = VIEWPORT_SIZE,
    ) -> None:
        self._water = water
        self.width, self.height = (max(int(n), 1) for n in size)
        self.camera_position = vec3(*CAMERA_POSITION)
        self.camera_target = vec3()
        self.water_program: Optional[ShaderProgram] = None
        self.mesh_program: Optional[ShaderProgram] = None
        self.frame_count = 0

    def init_gl(
        self,
        water_program: Optional[ShaderProgram] = None,
        mesh_program: Optional[ShaderProgram] = None,
    ) -> None:
        """Set fixed GL state and compile (or adopt) both programs."""
        glClearColor(*CLEAR_COLOR)
        glEnable(GL_DEPTH_TEST)
        self.water_program = water_program or create_water_program()
        self.mesh_program = mesh_program or create_mesh_program()
        logger.info("Renderer ready at %dx%d", self.width, self.height)

    def view_matrix(self) -> Mat4:
        return mat4_look_at(self.camera_position, self.camera_target, vec3(0, 1, 0))

    def projection_matrix(self) -> Mat4:
        return mat4_perspective(
            math.radians(CAMERA_FOV_DEG), self.width / self.height, CAMERA_NEAR, CAMERA_FAR,
        )

    def render(self, scene: Scene) -> int:
        """Draw every visible mesh of *scene*, uploading new ones first.

        Returns the number of meshes drawn.
        """
        if self.water_program is None:
            raise RuntimeError("SceneRenderer.render called before init_gl")

        glViewport(0, 0, self.width, self.height)
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)

        view = self.view_matrix()
        projection = self.projection_matrix()
        meshes = scene.collect_meshes()
        for mesh, world in meshes:
            if upload_mesh(mesh) is not None:
                logger.debug("Uploaded '%s'", mesh.name)
            program = self._program_for(mesh)
            program.set_uniform_mat4("uModel", world)
            program.set_uniform_mat4("uView", view)
            program.set_uniform_mat4("uProjection", projection)
            mesh.gl_handle.draw(wireframe=mesh.material.wireframe)

        self.frame_count += 1
        return len(meshes)

    def _program_for(self, mesh: MeshInstance) -> ShaderProgram:
        """Bind the program for *mesh* and set its per-mesh uniforms."""
        if mesh is self._water.mesh:
            self.water_program.use()
            self._water.apply_uniforms(self.water_program)
            self.water_program.set_uniform_vec3("uCameraPos", self.camera_position)
            return self.water_program
        self.mesh_program.use()
        self.mesh_program.set_uniform_vec3("uColor", mesh.material.color)
        return self.mesh_program

    def release(self, scene: Scene) -> None:
        """Free the GPU copies of every mesh still in *scene*."""
        for mesh, _ in scene.collect_meshes():
            if mesh.gl_handle is not None:
                mesh.gl_handle.destroy()
                mesh.gl_handle = None

    def destroy(self, scene: Optional[Scene] = None) -> None:
        if scene is not None:
            self.release(scene)
        for program in (self.water_program, self.mesh_program):
            if program is not None:
                program.destroy()
        self.water_program = self.mesh_program = None
        logger.info("Renderer destroyed after %d frames", self.frame_count)

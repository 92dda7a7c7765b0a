"""GLSL programs for the water surface and the generated meshes.

All calls need a current OpenGL 3.3 core context. Uniform setters silently
skip names the linker optimised away (location -1), so a program can be fed
the full :class:`~wavemesh.scene.water_surface.WaveUniformSet` even when a
stage does not read every value.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np
from OpenGL.GL import (
    GL_COMPILE_STATUS,
    GL_FRAGMENT_SHADER,
    GL_LINK_STATUS,
    GL_TRUE,
    GL_VERTEX_SHADER,
    glAttachShader,
    glCompileShader,
    glCreateProgram,
    glCreateShader,
    glDeleteProgram,
    glDeleteShader,
    glGetProgramInfoLog,
    glGetProgramiv,
    glGetShaderInfoLog,
    glGetShaderiv,
    glGetUniformLocation,
    glLinkProgram,
    glShaderSource,
    glUniform1f,
    glUniform1i,
    glUniform3f,
    glUniformMatrix4fv,
    glUseProgram,
)

logger = logging.getLogger(__name__)

SHADER_DIR = Path(__file__).parent / "shaders"

_STAGE_NAMES = {GL_VERTEX_SHADER: "vertex", GL_FRAGMENT_SHADER: "fragment"}


def load_shader_source(filename: str) -> str:
    return (SHADER_DIR / filename).read_text(encoding="utf-8")


def _log_text(raw) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


class ShaderProgram:
    """A linked vertex + fragment program with cached uniform locations."""

    def __init__(self, vertex_source: str, fragment_source: str, name: str = "program") -> None:
        self.name = name
        self._stages = ((GL_VERTEX_SHADER, vertex_source), (GL_FRAGMENT_SHADER, fragment_source))
        self._program: int = 0
        self._locations: dict[str, int] = {}

    @classmethod
    def from_files(cls, vert_filename: str, frag_filename: str) -> "ShaderProgram":
        """Load both stages from ``shaders/``; the program is named after the vertex file."""
        return cls(
            load_shader_source(vert_filename),
            load_shader_source(frag_filename),
            name=Path(vert_filename).stem,
        )

    @property
    def program_id(self) -> int:
        return self._program

    def compile(self) -> None:
        """Compile both stages and link them. Raises ``RuntimeError`` with the GL log."""
        shaders: list[int] = []
        try:
            for stage, source in self._stages:
                shaders.append(self._compile_stage(stage, source))
            program = glCreateProgram()
            for shader in shaders:
                glAttachShader(program, shader)
            glLinkProgram(program)
            if not glGetProgramiv(program, GL_LINK_STATUS):
                log = _log_text(glGetProgramInfoLog(program))
                glDeleteProgram(program)
                raise RuntimeError(f"{self.name}: link failed\n{log}")
        finally:
            # Linked programs keep their own copy of the binaries
            for shader in shaders:
                glDeleteShader(shader)

        self._program = program
        self._locations.clear()
        logger.debug("Linked shader program '%s' (id %d)", self.name, program)

    def _compile_stage(self, stage: int, source: str) -> int:
        shader = glCreateShader(stage)
        glShaderSource(shader, source)
        glCompileShader(shader)
        if not glGetShaderiv(shader, GL_COMPILE_STATUS):
            log = _log_text(glGetShaderInfoLog(shader))
            glDeleteShader(shader)
            raise RuntimeError(f"{self.name}: {_STAGE_NAMES[stage]} stage failed\n{log}")
        return shader

    def use(self) -> None:
        glUseProgram(self._program)

    def get_uniform_location(self, name: str) -> int:
        """Location of *name*, looked up once per link; -1 if inactive."""
        loc = self._locations.get(name)
        if loc is None:
            loc = int(glGetUniformLocation(self._program, name))
            self._locations[name] = loc
            if loc < 0:
                logger.debug("Uniform '%s' inactive in '%s'", name, self.name)
        return loc

    def _active(self, name: str) -> Optional[int]:
        loc = self.get_uniform_location(name)
        return loc if loc >= 0 else None

    def set_uniform_mat4(self, name: str, matrix: np.ndarray) -> None:
        """Upload a row-major (4, 4) matrix; GL transposes it on upload."""
        loc = self._active(name)
        if loc is not None:
            glUniformMatrix4fv(loc, 1, GL_TRUE, np.ascontiguousarray(matrix, dtype=np.float32))

    def set_uniform_vec3(self, name: str, value) -> None:
        loc = self._active(name)
        if loc is not None:
            x, y, z = (float(c) for c in value)
            glUniform3f(loc, x, y, z)

    def set_uniform_float(self, name: str, value: float) -> None:
        loc = self._active(name)
        if loc is not None:
            glUniform1f(loc, float(value))

    def set_uniform_int(self, name: str, value: int) -> None:
        loc = self._active(name)
        if loc is not None:
            glUniform1i(loc, int(value))

    def destroy(self) -> None:
        if self._program:
            glDeleteProgram(self._program)
            self._program = 0
        self._locations.clear()


def create_water_program() -> ShaderProgram:
    """Compile the wave displacement program. Needs a current GL context."""
    program = ShaderProgram.from_files("water.vert", "water.frag")
    program.compile()
    return program


def create_mesh_program() -> ShaderProgram:
    """Compile the normal-shaded program for generated shapes."""
    program = ShaderProgram.from_files("mesh.vert", "mesh.frag")
    program.compile()
    return program

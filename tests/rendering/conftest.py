"""Recording stand-ins for the PyOpenGL entry points used by wavemesh.rendering.

The rendering modules import GL functions by name, so the fakes are patched
into each module's namespace. No context or driver is needed, only an
importable ``OpenGL.GL``; test modules skip themselves without one.
"""

import pytest


class FakeGL:
    """Hands out object ids, tracks uniform uploads per program, logs calls."""

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []
        self.compile_ok = True
        self.link_ok = True
        self.inactive: set[str] = set()
        self.current_program = 0
        self._next_id = 0
        self._locations: dict[tuple[int, str], int] = {}
        self._location_names: dict[int, tuple[int, str]] = {}
        self.uniform_values: dict[int, dict[str, object]] = {}

    def new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def called(self, name: str) -> list[tuple]:
        return [args for n, args in self.calls if n == name]

    def uniforms(self, program_id: int) -> dict[str, object]:
        return self.uniform_values.get(program_id, {})

    # ── GL functions with behaviour ──

    def glGetUniformLocation(self, program, name):
        if name in self.inactive:
            return -1
        key = (program, name)
        if key not in self._locations:
            loc = len(self._locations)
            self._locations[key] = loc
            self._location_names[loc] = key
        return self._locations[key]

    def glUseProgram(self, program):
        self.current_program = program

    def _store(self, loc, value):
        program, name = self._location_names[loc]
        self.uniform_values.setdefault(program, {})[name] = value

    def glUniform1f(self, loc, value):
        self._store(loc, value)

    def glUniform1i(self, loc, value):
        self._store(loc, value)

    def glUniform3f(self, loc, x, y, z):
        self._store(loc, (x, y, z))

    def glUniformMatrix4fv(self, loc, count, transpose, value):
        self._store(loc, (transpose, value.copy()))


_ID_FUNCTIONS = ("glCreateShader", "glCreateProgram", "glGenVertexArrays", "glGenBuffers")

_NOOP_FUNCTIONS = (
    "glShaderSource", "glCompileShader", "glAttachShader", "glLinkProgram",
    "glDeleteShader", "glDeleteProgram",
    "glBindVertexArray", "glBindBuffer", "glBufferData",
    "glVertexAttribPointer", "glEnableVertexAttribArray",
    "glPolygonMode", "glDrawElements", "glDeleteBuffers", "glDeleteVertexArrays",
    "glClearColor", "glEnable", "glViewport", "glClear",
)

_BEHAVIOUR_FUNCTIONS = (
    "glGetUniformLocation", "glUseProgram",
    "glUniform1f", "glUniform1i", "glUniform3f", "glUniformMatrix4fv",
)


def _recorder(fake, name, impl):
    def gl_call(*args):
        fake.calls.append((name, args))
        return impl(*args)
    return gl_call


@pytest.fixture
def fake_gl(monkeypatch):
    from wavemesh.rendering import gl_mesh, renderer, shader_program

    fake = FakeGL()
    impls = {name: (lambda *args: fake.new_id()) for name in _ID_FUNCTIONS}
    impls.update({name: (lambda *args: None) for name in _NOOP_FUNCTIONS})
    impls.update({name: getattr(fake, name) for name in _BEHAVIOUR_FUNCTIONS})
    impls["glGetShaderiv"] = lambda *args: 1 if fake.compile_ok else 0
    impls["glGetProgramiv"] = lambda *args: 1 if fake.link_ok else 0
    impls["glGetShaderInfoLog"] = lambda *args: b"0:1: syntax error"
    impls["glGetProgramInfoLog"] = lambda *args: b"undefined symbol"

    for module in (gl_mesh, renderer, shader_program):
        for name, impl in impls.items():
            if hasattr(module, name):
                monkeypatch.setattr(module, name, _recorder(fake, name, impl))
    return fake

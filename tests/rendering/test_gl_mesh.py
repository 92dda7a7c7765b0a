"""Tests for GLMesh upload and its lifetime through MeshInstance.dispose()."""

import pytest

pytest.importorskip("OpenGL.GL")

from wavemesh.core.config import ConfigSource  # noqa: E402
from wavemesh.core.events import EventBus  # noqa: E402
from wavemesh.core.mesh import MeshInstance  # noqa: E402
from wavemesh.core.scene_graph import Scene  # noqa: E402
from wavemesh.rendering.gl_mesh import (  # noqa: E402
    NORMAL_LOCATION,
    GLMesh,
    upload_mesh,
)
from wavemesh.scene.mesh_generation import MeshGenerationFacade  # noqa: E402
from wavemesh.scene.shapes import build_shape  # noqa: E402


def _make_mesh(kind="box", resolution=1, normals=True):
    geometry = build_shape(kind, resolution)
    if normals:
        geometry.compute_normals()
    return MeshInstance(name=kind, geometry=geometry.freeze())


# ── Upload ──

def test_for_mesh_uploads_and_sets_handle(fake_gl):
    mesh = _make_mesh()
    gl_mesh = GLMesh.for_mesh(mesh)

    assert mesh.gl_handle is gl_mesh
    assert gl_mesh.uploaded
    assert gl_mesh.index_count == 36
    # positions, normals, indices
    assert len(fake_gl.called("glGenBuffers")) == 3
    sizes = [args[1] for args in fake_gl.called("glBufferData")]
    assert sizes == [8 * 3 * 4, 8 * 3 * 4, 36 * 4]


def test_upload_without_normals_skips_attribute(fake_gl):
    mesh = _make_mesh(normals=False)
    GLMesh.for_mesh(mesh)
    assert len(fake_gl.called("glGenBuffers")) == 2
    assert (NORMAL_LOCATION,) not in fake_gl.called("glEnableVertexAttribArray")


def test_reupload_replaces_objects(fake_gl):
    gl_mesh = GLMesh(_make_mesh().geometry)
    gl_mesh.upload()
    gl_mesh.upload()
    assert len(fake_gl.called("glDeleteVertexArrays")) == 1
    assert len(fake_gl.called("glGenVertexArrays")) == 2


def test_upload_mesh_skips_handled_and_disposed(fake_gl):
    mesh = _make_mesh()
    assert upload_mesh(mesh) is mesh.gl_handle
    assert upload_mesh(mesh) is None

    disposed = _make_mesh()
    disposed.dispose()
    assert upload_mesh(disposed) is None
    assert len(fake_gl.called("glGenVertexArrays")) == 1


# ── Draw ──

def test_draw_wireframe_restores_fill(fake_gl):
    from OpenGL.GL import GL_FILL, GL_LINE

    gl_mesh = GLMesh.for_mesh(_make_mesh())
    gl_mesh.draw(wireframe=True)

    modes = [args[1] for args in fake_gl.called("glPolygonMode")]
    assert modes == [GL_LINE, GL_FILL]
    assert fake_gl.called("glDrawElements")[0][1] == 36


def test_draw_empty_geometry_is_noop(fake_gl):
    gl_mesh = GLMesh.for_mesh(_make_mesh("dodecahedron"))
    gl_mesh.draw()
    assert fake_gl.called("glDrawElements") == []


def test_draw_before_upload_is_noop(fake_gl):
    GLMesh(_make_mesh().geometry).draw()
    assert fake_gl.called("glBindVertexArray") == []


# ── Release ──

def test_dispose_destroys_gl_mesh(fake_gl):
    mesh = _make_mesh()
    gl_mesh = GLMesh.for_mesh(mesh)
    buffer_count = len(fake_gl.called("glGenBuffers"))

    mesh.dispose()
    mesh.dispose()

    assert not gl_mesh.uploaded
    assert mesh.gl_handle is None
    deleted = fake_gl.called("glDeleteBuffers")
    assert len(deleted) == 1
    assert deleted[0][0] == buffer_count == 3
    assert len(fake_gl.called("glDeleteVertexArrays")) == 1


def test_replaced_shape_frees_previous_upload(fake_gl):
    bus = EventBus()
    scene = Scene()
    source = ConfigSource(bus, {"geometry": "sphere", "resolution": 4})
    facade = MeshGenerationFacade(scene, source, bus)
    first = GLMesh.for_mesh(facade.mesh)

    source.set("geometry", "torus")

    assert not first.uploaded
    assert facade.mesh.gl_handle is None

"""Tests for scene graph module."""

import math

import numpy as np

from wavemesh.core.scene_graph import SceneNode, Scene
from wavemesh.core.math_utils import mat4_translation, transform_point, vec3
from wavemesh.core.mesh import BufferGeometry, MeshInstance


def _make_mesh(name="test"):
    geom = BufferGeometry(
        positions=np.array([0, 0, 0, 1, 0, 0, 0, 1, 0], dtype=np.float32),
        indices=np.array([0, 1, 2], dtype=np.uint32),
    )
    return MeshInstance(name=name, geometry=geom)


def test_node_hierarchy():
    parent = SceneNode(name="parent")
    child = SceneNode(name="child")
    parent.add(child)
    assert child.parent is parent
    assert child in parent.children


def test_node_remove():
    parent = SceneNode(name="parent")
    child = SceneNode(name="child")
    parent.add(child)
    parent.remove(child)
    assert child.parent is None
    assert child not in parent.children


def test_node_reparent():
    p1 = SceneNode(name="p1")
    p2 = SceneNode(name="p2")
    child = SceneNode(name="child")
    p1.add(child)
    p2.add(child)  # Should remove from p1
    assert child.parent is p2
    assert child not in p1.children
    assert child in p2.children


def test_world_matrix_propagation():
    root = SceneNode(name="root")
    root.local_matrix = mat4_translation(10, 0, 0)
    child = SceneNode(name="child")
    child.local_matrix = mat4_translation(5, 0, 0)
    root.add(child)
    root.update_world_matrix()

    np.testing.assert_array_almost_equal(child.world_matrix[:3, 3], [15, 0, 0])


def test_rotation_keeps_position():
    node = SceneNode(name="n")
    node.local_matrix = mat4_translation(1, 2, 3)
    node.set_rotation_x(math.pi / 2)
    node.update_world_matrix()

    np.testing.assert_array_almost_equal(node.world_matrix[:3, 3], [1, 2, 3])
    p = transform_point(node.world_matrix, vec3(0, 1, 0))
    np.testing.assert_array_almost_equal(p, [1, 2, 4])


def test_hidden_subtree_skipped():
    scene = Scene()
    group = SceneNode(name="group")
    group.visible = False
    group.add(SceneNode(name="inner", mesh=_make_mesh()))
    scene.add(group)

    visited = []
    scene.traverse_visible(lambda n: visited.append(n.name))
    assert visited == ["scene"]
    assert scene.collect_meshes() == []


def test_scene_collect_meshes():
    scene = Scene()
    node = SceneNode(name="mesh_node", mesh=_make_mesh())
    scene.add(node)
    scene.update()

    meshes = scene.collect_meshes()
    assert len(meshes) == 1
    assert meshes[0][0] is node.mesh


def test_invisible_node_not_collected():
    scene = Scene()
    node = SceneNode(name="hidden", mesh=_make_mesh())
    node.visible = False
    scene.add(node)

    assert scene.collect_meshes() == []


def test_invisible_mesh_not_collected():
    scene = Scene()
    mesh = _make_mesh()
    mesh.visible = False
    scene.add(SceneNode(name="n", mesh=mesh))

    assert scene.collect_meshes() == []

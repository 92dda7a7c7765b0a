"""NumPy-backed 4x4 transform helpers.

Matrices are 4x4 float64 arrays acting on column vectors.
"""

import numpy as np
from numpy.typing import NDArray

Vec3 = NDArray[np.float64]
Mat4 = NDArray[np.float64]


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Vec3:
    return np.array([x, y, z], dtype=np.float64)


def mat4_identity() -> Mat4:
    return np.eye(4, dtype=np.float64)


def mat4_translation(x: float, y: float, z: float) -> Mat4:
    m = np.eye(4, dtype=np.float64)
    m[0, 3] = x
    m[1, 3] = y
    m[2, 3] = z
    return m


def mat4_rotation_x(angle_rad: float) -> Mat4:
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    m = np.eye(4, dtype=np.float64)
    m[1, 1] = c
    m[1, 2] = -s
    m[2, 1] = s
    m[2, 2] = c
    return m


def transform_point(m: Mat4, p: Vec3) -> Vec3:
    """Apply a 4x4 transform to a 3D point."""
    v = np.array([p[0], p[1], p[2], 1.0], dtype=np.float64)
    r = m @ v
    return r[:3] / r[3]


def normalize(v: Vec3) -> Vec3:
    n = np.linalg.norm(v)
    return v / n if n > 1e-10 else np.zeros_like(v)


def mat4_perspective(fov_rad: float, aspect: float, near: float, far: float) -> Mat4:
    """OpenGL clip-space projection with a vertical field of view."""
    f = 1.0 / np.tan(fov_rad / 2.0)
    depth = near - far
    m = np.zeros((4, 4), dtype=np.float64)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / depth
    m[2, 3] = 2.0 * far * near / depth
    m[3, 2] = -1.0
    return m


def mat4_look_at(eye: Vec3, target: Vec3, up: Vec3) -> Mat4:
    """View matrix placing *eye* at the origin looking down -Z at *target*."""
    forward = normalize(np.asarray(target, dtype=np.float64) - eye)
    side = normalize(np.cross(forward, up))
    true_up = np.cross(side, forward)
    m = np.eye(4, dtype=np.float64)
    m[0, :3], m[1, :3], m[2, :3] = side, true_up, -forward
    m[:3, 3] = -(m[:3, :3] @ eye)
    return m

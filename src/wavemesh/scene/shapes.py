"""Procedural vertex/index buffers for the parametric shapes.

Each shape has a pair of pure functions, ``<shape>_vertices`` returning a
flat float32 position array (x, y, z per vertex) and ``<shape>_indices``
returning a flat uint32 triangle index array. The two functions of a pair
only share their subdivision parameters and agree on vertex ordering, so
they can be called independently and in any order.

Buffers are allocated once from their closed-form size and filled with
vectorized index arithmetic. Negative subdivision counts are treated as 0,
and a zero count never divides: the step along that axis becomes 0.
"""

import logging
import math
from enum import Enum
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from wavemesh.constants import (
    CYLINDER_HEIGHT,
    CYLINDER_RADIUS,
    PLANE_HEIGHT,
    PLANE_WIDTH,
    SPHERE_RADIUS,
    TORUS_MAJOR_RADIUS,
    TORUS_MINOR_RADIUS,
)
from wavemesh.core.mesh import BufferGeometry

logger = logging.getLogger(__name__)


class ShapeKind(Enum):
    BOX = "box"
    SPHERE = "sphere"
    PLANE = "plane"
    CYLINDER = "cylinder"
    TORUS = "torus"

    @classmethod
    def parse(cls, tag: object) -> Optional["ShapeKind"]:
        """Return the kind named by *tag*, or None if it names none."""
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None


def _count(n) -> int:
    """Subdivision count as a non-negative int; NaN and infinities give 0."""
    value = float(n)
    if not math.isfinite(value):
        return 0
    return max(int(value), 0)


def _step(extent: float, segments: int) -> float:
    return extent / segments if segments else 0.0


def _empty_vertices() -> NDArray[np.float32]:
    return np.zeros(0, dtype=np.float32)


def _empty_indices() -> NDArray[np.uint32]:
    return np.zeros(0, dtype=np.uint32)


# ── Box ───────────────────────────────────────────────────────────────

_CUBE_VERTICES = (
    (-1.0, -1.0, -1.0),  # v0
    (1.0, -1.0, -1.0),   # v1
    (1.0, 1.0, -1.0),    # v2
    (-1.0, 1.0, -1.0),   # v3
    (-1.0, -1.0, 1.0),   # v4
    (1.0, -1.0, 1.0),    # v5
    (1.0, 1.0, 1.0),     # v6
    (-1.0, 1.0, 1.0),    # v7
)

# Quads as (a, b, c, d), split along the a-c diagonal into (a,b,c) and (c,d,a)
_CUBE_FACES = (
    (0, 1, 2, 3),  # back
    (4, 5, 6, 7),  # front
    (0, 1, 5, 4),  # bottom
    (2, 3, 7, 6),  # top
    (0, 3, 7, 4),  # left
    (1, 2, 6, 5),  # right
)


def cube_vertices() -> NDArray[np.float32]:
    """Return the 8 corners of the cube [-1, 1]^3.

    v0..v3 are the back face (z = -1), v4..v7 the front face (z = +1)
    with the same (x, y) order.
    """
    return np.array(_CUBE_VERTICES, dtype=np.float32).ravel()


def cube_indices() -> NDArray[np.uint32]:
    """Return the 12 triangles (2 per face) over :func:`cube_vertices`."""
    quads = np.array(_CUBE_FACES, dtype=np.uint32)
    tris = np.empty((len(quads), 6), dtype=np.uint32)
    tris[:, 0:3] = quads[:, [0, 1, 2]]
    tris[:, 3:6] = quads[:, [2, 3, 0]]
    return tris.ravel()


# ── Plane ─────────────────────────────────────────────────────────────

def plane_vertices(
    width: float = 1.0,
    height: float = 1.0,
    width_segments: int = 10,
    height_segments: int = 10,
) -> NDArray[np.float32]:
    """Return a subdivided plane in the XY plane (z = 0), centered at origin.

    Vertices are row-major with the width index *i* as the outer loop:
    vertex(i, j) = (i * width / ws - width / 2, j * height / hs - height / 2, 0).
    """
    ws, hs = _count(width_segments), _count(height_segments)
    ii, jj = np.meshgrid(np.arange(ws + 1), np.arange(hs + 1), indexing="ij")

    out = np.empty((ws + 1) * (hs + 1) * 3, dtype=np.float32)
    pos = out.reshape(-1, 3)
    pos[:, 0] = (ii * _step(width, ws) - width / 2).ravel()
    pos[:, 1] = (jj * _step(height, hs) - height / 2).ravel()
    pos[:, 2] = 0.0
    return out


def plane_indices(
    width_segments: int = 10,
    height_segments: int = 10,
) -> NDArray[np.uint32]:
    """Return two triangles per plane cell.

    ::

        tl ---- tr
         |    / |
         |   /  |
         |  /   |
        bl ---- br

    Triangles are (bl, br, tl) and (br, tr, tl).
    """
    ws, hs = _count(width_segments), _count(height_segments)
    stride = np.uint32(hs + 1)
    w, h = np.meshgrid(
        np.arange(ws, dtype=np.uint32), np.arange(hs, dtype=np.uint32), indexing="ij",
    )

    bl = (w * stride + h).ravel()
    br = bl + np.uint32(1)
    tl = bl + stride
    tr = tl + np.uint32(1)

    out = np.empty((ws * hs, 6), dtype=np.uint32)
    for k, corner in enumerate((bl, br, tl, br, tr, tl)):
        out[:, k] = corner
    return out.ravel()


# ── Surfaces of revolution (sphere, cylinder) ─────────────────────────

def _revolution_indices(rings: int, segments: int) -> NDArray[np.uint32]:
    """Index a pole / rings / pole vertex layout.

    Layout: vertex 0 is the top pole, ring r (0-based) occupies
    ``1 + r * segments .. r * segments + segments``, the last vertex is the
    bottom pole. The bottom fan is listed (pole, next, current), the
    reverse of the top fan, so both caps face outward.
    """
    r, s = _count(rings), _count(segments)
    if r < 1 or s < 1:
        return _empty_indices()

    seg = np.arange(s, dtype=np.int64)
    nxt = (seg + 1) % s

    # Top cap
    top = np.stack([np.zeros(s, dtype=np.int64), 1 + seg, 1 + nxt], axis=1)

    # Middle bands between ring k and ring k + 1
    ring = np.arange(r - 1, dtype=np.int64)[:, None]
    bl = 1 + ring * s + seg
    br = 1 + ring * s + nxt
    tl = bl + s
    tr = br + s
    bands = np.stack([bl, tl, br, br, tl, tr], axis=-1)

    # Bottom cap
    last = (2 + r * s) - 1
    base = 1 + (r - 1) * s
    bottom = np.stack([np.full(s, last, dtype=np.int64), base + nxt, base + seg], axis=1)

    return np.concatenate([top.ravel(), bands.ravel(), bottom.ravel()]).astype(np.uint32)


def sphere_vertices(
    radius: float = 1.0,
    rings: int = 8,
    segments: int = 16,
) -> NDArray[np.float32]:
    """Return sphere positions: north pole, *rings* latitude rings, south pole.

    Ring k (1-based) sits at theta = k * pi / (rings + 1); segment m
    (1-based) at phi = m * 2pi / segments.
    """
    r, s = _count(rings), _count(segments)

    out = np.empty((2 + r * s) * 3, dtype=np.float32)
    pos = out.reshape(-1, 3)

    pos[0] = (0.0, 0.0, radius)

    theta = (math.pi / (r + 1)) * np.arange(1, r + 1)[:, None]
    phi = _step(2 * math.pi, s) * np.arange(1, s + 1)[None, :]

    pos[1:-1, 0] = (radius * np.sin(theta) * np.cos(phi)).ravel()
    pos[1:-1, 1] = (radius * np.sin(theta) * np.sin(phi)).ravel()
    pos[1:-1, 2] = np.broadcast_to(radius * np.cos(theta), (r, s)).ravel()

    pos[-1] = (0.0, 0.0, -radius)
    return out


def sphere_indices(rings: int = 8, segments: int = 16) -> NDArray[np.uint32]:
    """Return top cap, middle bands and bottom cap triangles of a sphere."""
    return _revolution_indices(rings, segments)


def cylinder_vertices(
    radius: float = 1.0,
    height: float = 1.0,
    rings: int = 10,
    segments: int = 10,
) -> NDArray[np.float32]:
    """Return cylinder positions along Z with conical caps.

    Same layout as :func:`sphere_vertices`. The poles are (0, 0, +-height/2)
    and ring k sits at z = height/2 - height * k / (rings + 1).
    """
    r, s = _count(rings), _count(segments)

    out = np.empty((2 + r * s) * 3, dtype=np.float32)
    pos = out.reshape(-1, 3)

    pos[0] = (0.0, 0.0, height / 2)

    ring = np.arange(1, r + 1)[:, None]
    phi = _step(2 * math.pi, s) * np.arange(1, s + 1)[None, :]

    pos[1:-1, 0] = np.broadcast_to(radius * np.cos(phi), (r, s)).ravel()
    pos[1:-1, 1] = np.broadcast_to(radius * np.sin(phi), (r, s)).ravel()
    pos[1:-1, 2] = np.broadcast_to(height / 2 - (height * ring) / (r + 1), (r, s)).ravel()

    pos[-1] = (0.0, 0.0, -height / 2)
    return out


def cylinder_indices(rings: int = 10, segments: int = 10) -> NDArray[np.uint32]:
    """Return top cap, side wall and bottom cap triangles of a cylinder."""
    return _revolution_indices(rings, segments)


# ── Torus ─────────────────────────────────────────────────────────────

def torus_vertices(
    major_radius: float = 1.0,
    minor_radius: float = 1.0,
    radial_segments: int = 10,
    tubular_segments: int = 10,
) -> NDArray[np.float32]:
    """Return a closed radial x tubular grid of torus positions (no seam).

    Ring i (1-based) is centered at angle theta = i * 2pi / radial_segments
    on the major circle; tube vertex j (1-based) is offset by
    phi = j * 2pi / tubular_segments around that center.
    """
    rs, ts = _count(radial_segments), _count(tubular_segments)
    if rs < 1 or ts < 1:
        return _empty_vertices()

    theta = (2 * math.pi / rs) * np.arange(1, rs + 1)[:, None]
    phi = (2 * math.pi / ts) * np.arange(1, ts + 1)[None, :]
    cos_t, sin_t = np.cos(theta), np.sin(theta)

    out = np.empty(rs * ts * 3, dtype=np.float32)
    pos = out.reshape(-1, 3)
    pos[:, 0] = (minor_radius * np.sin(phi) * cos_t + major_radius * cos_t).ravel()
    pos[:, 1] = (minor_radius * np.sin(phi) * sin_t + major_radius * sin_t).ravel()
    pos[:, 2] = np.broadcast_to(minor_radius * np.cos(phi), (rs, ts)).ravel()
    return out


def torus_indices(
    radial_segments: int = 10,
    tubular_segments: int = 10,
) -> NDArray[np.uint32]:
    """Return two triangles per torus cell, wrapping on both axes."""
    rs, ts = _count(radial_segments), _count(tubular_segments)
    if rs < 1 or ts < 1:
        return _empty_indices()

    i = np.arange(rs, dtype=np.int64)[:, None]
    j = np.arange(ts, dtype=np.int64)[None, :]
    i_next = (i + 1) % rs
    j_next = (j + 1) % ts

    bl = i * ts + j
    br = i * ts + j_next
    tl = i_next * ts + j
    tr = i_next * ts + j_next

    return np.stack([br, tr, tl, br, tl, bl], axis=-1).astype(np.uint32).ravel()


# ── Dispatch by kind ──────────────────────────────────────────────────

_VERTEX_BUILDERS = {
    ShapeKind.BOX: lambda n: cube_vertices(),
    ShapeKind.SPHERE: lambda n: sphere_vertices(SPHERE_RADIUS, n, n),
    ShapeKind.PLANE: lambda n: plane_vertices(PLANE_WIDTH, PLANE_HEIGHT, n, n),
    ShapeKind.CYLINDER: lambda n: cylinder_vertices(CYLINDER_RADIUS, CYLINDER_HEIGHT, n, n),
    ShapeKind.TORUS: lambda n: torus_vertices(TORUS_MAJOR_RADIUS, TORUS_MINOR_RADIUS, n, n),
}

_INDEX_BUILDERS = {
    ShapeKind.BOX: lambda n: cube_indices(),
    ShapeKind.SPHERE: lambda n: sphere_indices(n, n),
    ShapeKind.PLANE: lambda n: plane_indices(n, n),
    ShapeKind.CYLINDER: lambda n: cylinder_indices(n, n),
    ShapeKind.TORUS: lambda n: torus_indices(n, n),
}


def shape_vertices(kind: Union[ShapeKind, str, None], resolution: int) -> NDArray[np.float32]:
    """Return the vertex buffer for *kind*; empty if *kind* is unrecognized."""
    shape = ShapeKind.parse(kind)
    if shape is None:
        logger.warning("Unknown shape kind %r, producing empty vertex buffer", kind)
        return _empty_vertices()
    return _VERTEX_BUILDERS[shape](_count(resolution))


def shape_indices(kind: Union[ShapeKind, str, None], resolution: int) -> NDArray[np.uint32]:
    """Return the index buffer for *kind*; empty if *kind* is unrecognized."""
    shape = ShapeKind.parse(kind)
    if shape is None:
        logger.warning("Unknown shape kind %r, producing empty index buffer", kind)
        return _empty_indices()
    return _INDEX_BUILDERS[shape](_count(resolution))


def build_shape(kind: Union[ShapeKind, str, None], resolution: int) -> BufferGeometry:
    """Build the vertex and index buffers of *kind* as one geometry."""
    positions = shape_vertices(kind, resolution)
    indices = shape_indices(kind, resolution)
    geom = BufferGeometry(positions=positions, indices=indices)
    logger.debug(
        "Built %s (resolution %s): %d verts, %d tris",
        kind, resolution, geom.vertex_count, geom.triangle_count,
    )
    return geom

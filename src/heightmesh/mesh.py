"""Terrain mesh construction from a height grid.

Vertices are laid out row-major (flat index ``z * width + x``) in an
interleaved buffer ready for upload. Each grid quad yields two triangles
wound ``(top_left, bottom_left, top_right)`` and
``(top_right, bottom_left, bottom_right)``, which makes +Y the front face
of a flat grid. Vertex normals are the renormalized sum of the unit
normals of every adjacent face.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .config import MeshConfig
from .exceptions import LoadFailureError
from .sampler import sample_heights

VERTEX_DTYPE = np.dtype([
    ("position", np.float32, (3,)),
    ("normal", np.float32, (3,)),
    ("tex_coords", np.float32, (2,)),
])

UP = np.array([0.0, 1.0, 0.0], dtype=np.float32)


@dataclass
class TerrainMesh:
    """Vertex and index buffers for a terrain mesh."""

    vertices: NDArray[np.void]
    indices: NDArray[np.uint32]

    @classmethod
    def empty(cls) -> "TerrainMesh":
        """Mesh with no vertices and no indices."""
        return cls(
            vertices=np.zeros(0, dtype=VERTEX_DTYPE),
            indices=np.zeros(0, dtype=np.uint32),
        )

    @property
    def positions(self) -> NDArray[np.float32]:
        """Vertex positions, shape (n, 3)."""
        return self.vertices["position"]

    @property
    def normals(self) -> NDArray[np.float32]:
        """Vertex normals, shape (n, 3)."""
        return self.vertices["normal"]

    @property
    def tex_coords(self) -> NDArray[np.float32]:
        """Texture coordinates, shape (n, 2)."""
        return self.vertices["tex_coords"]

    @property
    def triangles(self) -> NDArray[np.uint32]:
        """Indices grouped per triangle, shape (n, 3)."""
        return self.indices.reshape(-1, 3)

    @property
    def vertex_count(self) -> int:
        """Number of vertices."""
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        """Number of triangles."""
        return len(self.indices) // 3

    @property
    def is_empty(self) -> bool:
        """True when both buffers are empty."""
        return self.vertex_count == 0 and len(self.indices) == 0


def grid_positions(
    heights: NDArray[np.float64],
    grid_spacing: float,
) -> NDArray[np.float64]:
    """World-space position of every grid sample, row-major.

    The grid is centered on the origin in X/Z using the full extent
    ``width * grid_spacing``.

    Args:
        heights: Final vertex heights, shape (height, width).
        grid_spacing: World-space distance between adjacent samples.

    Returns:
        Array of shape (height * width, 3).
    """
    height, width = heights.shape
    zs, xs = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")

    positions = np.empty((height * width, 3), dtype=np.float64)
    positions[:, 0] = (xs * grid_spacing - width * grid_spacing / 2.0).ravel()
    positions[:, 1] = heights.ravel()
    positions[:, 2] = (zs * grid_spacing - height * grid_spacing / 2.0).ravel()
    return positions


def build_vertices(
    positions: NDArray[np.float64],
    width: int,
    height: int,
) -> NDArray[np.void]:
    """Create the vertex buffer with UVs and placeholder up normals.

    An axis with a single sample gets texture coordinate 0 along that axis.

    Args:
        positions: Row-major positions from ``grid_positions``.
        width: Number of vertex columns.
        height: Number of vertex rows.

    Returns:
        Structured array of ``VERTEX_DTYPE`` with ``height * width`` entries.
    """
    zs, xs = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")

    vertices = np.zeros(height * width, dtype=VERTEX_DTYPE)
    vertices["position"] = positions

    u = xs / (width - 1) if width > 1 else np.zeros_like(xs, dtype=np.float64)
    v = zs / (height - 1) if height > 1 else np.zeros_like(zs, dtype=np.float64)
    vertices["tex_coords"][:, 0] = u.ravel()
    vertices["tex_coords"][:, 1] = v.ravel()

    vertices["normal"] = UP
    return vertices


def build_indices(width: int, height: int) -> NDArray[np.uint32]:
    """Triangulate a width x height vertex grid.

    Quads are visited row-major; each emits six indices. Grids with a
    single row or column produce no triangles.

    Args:
        width: Number of vertex columns.
        height: Number of vertex rows.

    Returns:
        Flat uint32 index array of length ``6 * (width - 1) * (height - 1)``.
    """
    if width < 2 or height < 2:
        return np.zeros(0, dtype=np.uint32)

    zs, xs = np.meshgrid(
        np.arange(height - 1, dtype=np.int64),
        np.arange(width - 1, dtype=np.int64),
        indexing="ij",
    )
    top_left = (zs * width + xs).ravel()
    top_right = top_left + 1
    bottom_left = top_left + width
    bottom_right = bottom_left + 1

    quads = np.stack(
        [top_left, bottom_left, top_right, top_right, bottom_left, bottom_right],
        axis=1,
    )
    return quads.ravel().astype(np.uint32)


def face_normals(
    positions: NDArray[np.floating],
    indices: NDArray[np.uint32],
) -> NDArray[np.float64]:
    """Unit normal of every triangle.

    Computed as ``cross(p1 - p0, p2 - p0)`` normalized. Zero-area faces
    get a zero vector.

    Args:
        positions: Vertex positions, shape (n, 3).
        indices: Flat triangle index array.

    Returns:
        Array of shape (triangle_count, 3).
    """
    triangles = indices.reshape(-1, 3)
    points = positions.astype(np.float64)
    p0 = points[triangles[:, 0]]
    p1 = points[triangles[:, 1]]
    p2 = points[triangles[:, 2]]

    normals = np.cross(p1 - p0, p2 - p0)
    return _normalize_rows(normals, fallback=np.zeros(3))


def vertex_normals(
    positions: NDArray[np.floating],
    indices: NDArray[np.uint32],
) -> NDArray[np.float32]:
    """Per-vertex normals from accumulated face normals.

    Each face's unit normal is added to all three of its corners and the
    sums are renormalized. Vertices touched by no face are given the up
    vector.

    Args:
        positions: Vertex positions, shape (n, 3).
        indices: Flat triangle index array.

    Returns:
        Float32 array of unit normals, shape (n, 3).
    """
    accumulator = np.zeros((len(positions), 3), dtype=np.float64)

    if len(indices):
        triangles = indices.reshape(-1, 3)
        normals = face_normals(positions, indices)
        for corner in range(3):
            np.add.at(accumulator, triangles[:, corner], normals)

    return _normalize_rows(accumulator, fallback=UP).astype(np.float32)


def build_mesh(grid: NDArray[np.float32], config: MeshConfig) -> TerrainMesh:
    """Build a terrain mesh from a normalized height grid.

    Args:
        grid: Height grid of shape (height, width) with values in [0, 1].
        config: Mesh configuration.

    Returns:
        TerrainMesh with final normals.

    Raises:
        LoadFailureError: If the grid is empty. Nothing is allocated.
    """
    if grid.ndim != 2 or grid.size == 0:
        raise LoadFailureError(None, "grid is empty")

    height, width = grid.shape
    heights = sample_heights(grid, config)

    positions = grid_positions(heights, config.grid_spacing)
    vertices = build_vertices(positions, width, height)
    indices = build_indices(width, height)

    vertices["normal"] = vertex_normals(positions, indices)

    return TerrainMesh(vertices=vertices, indices=indices)


def _normalize_rows(
    vectors: NDArray[np.float64],
    fallback: NDArray,
) -> NDArray[np.float64]:
    """Normalize each row, substituting ``fallback`` for zero-length rows."""
    lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
    degenerate = lengths[:, 0] == 0.0
    safe = np.where(lengths == 0.0, 1.0, lengths)

    result = vectors / safe
    result[degenerate] = fallback
    return result

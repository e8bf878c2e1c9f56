"""Tests for terrain mesh construction."""

import numpy as np
import pytest

from heightmesh.config import MeshConfig
from heightmesh.exceptions import LoadFailureError
from heightmesh.mesh import (
    UP,
    VERTEX_DTYPE,
    TerrainMesh,
    build_indices,
    build_mesh,
    build_vertices,
    face_normals,
    grid_positions,
    vertex_normals,
)


class TestBuildIndices:
    """Tests for grid triangulation."""

    def test_single_quad(self) -> None:
        """2x2 grid yields one quad with the fixed winding."""
        indices = build_indices(2, 2)
        np.testing.assert_array_equal(indices, [0, 2, 1, 1, 2, 3])

    @pytest.mark.parametrize("width,height", [(2, 2), (3, 5), (10, 4), (7, 7)])
    def test_index_count(self, width: int, height: int) -> None:
        """Six indices per quad."""
        assert len(build_indices(width, height)) == 6 * (width - 1) * (height - 1)

    @pytest.mark.parametrize("width,height", [(1, 1), (1, 6), (6, 1)])
    def test_degenerate_grid_has_no_triangles(self, width: int, height: int) -> None:
        """Single row or column grids produce no indices."""
        assert len(build_indices(width, height)) == 0

    def test_row_major_quad_order(self) -> None:
        """Second quad on a 3-wide grid starts at vertex 1."""
        indices = build_indices(3, 2)
        np.testing.assert_array_equal(indices[:6], [0, 3, 1, 1, 3, 4])
        np.testing.assert_array_equal(indices[6:], [1, 4, 2, 2, 4, 5])

    def test_dtype(self) -> None:
        """Indices are uint32."""
        assert build_indices(4, 4).dtype == np.uint32

    def test_indices_in_range(self) -> None:
        """Every index refers to an existing vertex."""
        indices = build_indices(9, 6)
        assert indices.max() == 9 * 6 - 1
        assert indices.min() == 0


class TestVertices:
    """Tests for vertex positions and attributes."""

    def test_positions_centered(self) -> None:
        """X/Z are offset by half the full grid extent."""
        heights = np.zeros((3, 4))
        positions = grid_positions(heights, grid_spacing=2.0)

        # First vertex: (0 * 2 - 4 * 2 / 2, 0, 0 * 2 - 3 * 2 / 2)
        np.testing.assert_allclose(positions[0], [-4.0, 0.0, -3.0])
        # Last vertex: x=3, z=2
        np.testing.assert_allclose(positions[-1], [2.0, 0.0, 1.0])

    def test_flat_index_is_row_major(self) -> None:
        """Vertex z * width + x holds cell (x, z)."""
        heights = np.arange(12, dtype=np.float64).reshape(3, 4)
        positions = grid_positions(heights, grid_spacing=1.0)
        assert positions[2 * 4 + 1, 1] == heights[2, 1]

    def test_tex_coords_span_unit_square(self) -> None:
        """UVs run from (0, 0) to (1, 1)."""
        positions = grid_positions(np.zeros((3, 5)), 1.0)
        vertices = build_vertices(positions, 5, 3)

        np.testing.assert_allclose(vertices["tex_coords"][0], [0.0, 0.0])
        np.testing.assert_allclose(vertices["tex_coords"][-1], [1.0, 1.0])
        np.testing.assert_allclose(vertices["tex_coords"][1], [0.25, 0.0])
        np.testing.assert_allclose(vertices["tex_coords"][5], [0.0, 0.5])

    def test_single_column_tex_coords(self) -> None:
        """Single-sample axis gets UV 0 instead of dividing by zero."""
        positions = grid_positions(np.zeros((4, 1)), 1.0)
        vertices = build_vertices(positions, 1, 4)

        assert np.all(np.isfinite(vertices["tex_coords"]))
        np.testing.assert_allclose(vertices["tex_coords"][:, 0], 0.0)

    def test_placeholder_normals(self) -> None:
        """Fresh vertices point up."""
        positions = grid_positions(np.zeros((2, 2)), 1.0)
        vertices = build_vertices(positions, 2, 2)
        np.testing.assert_array_equal(vertices["normal"], np.tile(UP, (4, 1)))

    def test_dtype(self) -> None:
        """Vertex buffer uses the interleaved dtype."""
        vertices = build_vertices(grid_positions(np.zeros((2, 2)), 1.0), 2, 2)
        assert vertices.dtype == VERTEX_DTYPE
        assert VERTEX_DTYPE.itemsize == 32


class TestNormals:
    """Tests for face and vertex normals."""

    def test_flat_face_points_up(self) -> None:
        """Both triangles of a flat quad face +Y."""
        positions = grid_positions(np.zeros((2, 2)), 1.0)
        normals = face_normals(positions, build_indices(2, 2))
        np.testing.assert_allclose(normals, [[0.0, 1.0, 0.0], [0.0, 1.0, 0.0]])

    def test_slope_faces_downhill(self) -> None:
        """A plane rising along +X tilts the normal toward -X."""
        xs = np.arange(4, dtype=np.float64)
        heights = np.tile(xs * 2.0, (3, 1))
        positions = grid_positions(heights, 1.0)

        normals = vertex_normals(positions, build_indices(4, 3))
        expected = np.array([-2.0, 1.0, 0.0]) / np.sqrt(5.0)
        np.testing.assert_allclose(normals, np.tile(expected, (12, 1)), atol=1e-6)

    def test_zero_area_face_contributes_nothing(self) -> None:
        """Degenerate triangles get a zero normal."""
        positions = np.zeros((3, 3))
        normals = face_normals(positions, np.array([0, 1, 2], dtype=np.uint32))
        np.testing.assert_array_equal(normals, [[0.0, 0.0, 0.0]])

    def test_isolated_vertex_points_up(self) -> None:
        """Vertices without faces fall back to the up vector."""
        positions = grid_positions(np.zeros((1, 5)), 1.0)
        normals = vertex_normals(positions, np.zeros(0, dtype=np.uint32))
        np.testing.assert_array_equal(normals, np.tile(UP, (5, 1)))

    def test_accumulation_is_unweighted_sum(self) -> None:
        """Shared vertex normal is the renormalized sum of face normals."""
        # Two triangles sharing vertex 0: one in the XZ plane, one in the XY plane
        positions = np.array([
            [0.0, 0.0, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 0.0],
            [0.0, 5.0, 0.0],
        ])
        indices = np.array([0, 1, 2, 0, 2, 3], dtype=np.uint32)

        normals = vertex_normals(positions, indices)
        expected = np.array([0.0, 1.0, 1.0]) / np.sqrt(2.0)
        np.testing.assert_allclose(normals[0], expected, atol=1e-6)


class TestBuildMesh:
    """Tests for full mesh construction."""

    @pytest.mark.parametrize("width,height", [(2, 2), (6, 5), (1, 4), (9, 1)])
    def test_counts(self, width: int, height: int) -> None:
        """Vertex and index counts follow the grid size."""
        grid = np.full((height, width), 0.3, dtype=np.float32)
        mesh = build_mesh(grid, MeshConfig())

        assert mesh.vertex_count == width * height
        assert len(mesh.indices) == 6 * (width - 1) * (height - 1)

    def test_unit_normals(self) -> None:
        """Every normal is unit length after finalization."""
        rng = np.random.default_rng(11)
        grid = rng.random((12, 15)).astype(np.float32)
        mesh = build_mesh(grid, MeshConfig(height_scale=30.0, fbm_layers=6))

        lengths = np.linalg.norm(mesh.normals, axis=1)
        np.testing.assert_allclose(lengths, 1.0, atol=1e-4)

    def test_flat_grid_normals_up(
        self, flat_grid: np.ndarray, flat_config: MeshConfig
    ) -> None:
        """Flat input without noise gives all-up normals."""
        mesh = build_mesh(flat_grid, flat_config)
        np.testing.assert_allclose(
            mesh.normals, np.tile([0.0, 1.0, 0.0], (30, 1)), atol=1e-6
        )

    def test_ramp_heights(self, ramp_grid: np.ndarray, flat_config: MeshConfig) -> None:
        """Vertex heights follow the grid with offset and recentering."""
        mesh = build_mesh(ramp_grid, flat_config)
        # ramp_grid[0, 4] == 1.0 -> 10 - 20 - 5
        assert mesh.positions[4, 1] == pytest.approx(-15.0)
        assert mesh.positions[0, 1] == pytest.approx(-25.0)

    def test_noise_changes_heights(self, flat_grid: np.ndarray) -> None:
        """Enabling noise perturbs an otherwise flat grid."""
        mesh = build_mesh(flat_grid, MeshConfig(fbm_layers=4))
        assert np.ptp(mesh.positions[:, 1]) > 0.0

    def test_regeneration_bit_identical(self, ramp_grid: np.ndarray) -> None:
        """Same grid and config give identical buffers."""
        config = MeshConfig(height_scale=12.0, grid_spacing=0.75, fbm_layers=5)
        first = build_mesh(ramp_grid, config)
        second = build_mesh(ramp_grid, config)

        np.testing.assert_array_equal(first.positions, second.positions)
        np.testing.assert_array_equal(first.normals, second.normals)
        np.testing.assert_array_equal(first.tex_coords, second.tex_coords)
        np.testing.assert_array_equal(first.indices, second.indices)

    def test_empty_grid_raises(self) -> None:
        """Empty grid is a load failure."""
        with pytest.raises(LoadFailureError):
            build_mesh(np.zeros((0, 0), dtype=np.float32), MeshConfig())


class TestTerrainMesh:
    """Tests for the mesh container."""

    def test_empty(self) -> None:
        """Empty mesh has no vertices or indices."""
        mesh = TerrainMesh.empty()
        assert mesh.is_empty
        assert mesh.vertex_count == 0
        assert mesh.triangle_count == 0

    def test_triangles_view(self) -> None:
        """Triangles groups indices in threes."""
        mesh = build_mesh(np.zeros((3, 3), dtype=np.float32), MeshConfig())
        assert mesh.triangles.shape == (8, 3)
        assert mesh.triangle_count == 8
        assert not mesh.is_empty

"""Post-generation mesh validation."""

import logging
from dataclasses import dataclass, field

import numpy as np

from .mesh import TerrainMesh

logger = logging.getLogger(__name__)

NORMAL_TOLERANCE = 1e-4


@dataclass
class ValidationResult:
    """Invariant violations and warnings found in a mesh."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """True when no invariant was violated."""
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


def validate_mesh(mesh: TerrainMesh, width: int, height: int) -> ValidationResult:
    """Check a generated mesh against the grid it was built from.

    Args:
        mesh: Mesh to check.
        width: Source grid width.
        height: Source grid height.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    # Check 1: Buffer sizes
    _check_counts(mesh, width, height, result)

    # Check 2: Indices address existing vertices
    _check_index_range(mesh, result)

    # Check 3: Unit normals
    _check_normals(mesh, result)

    # Check 4: Finite positions, UVs in range
    _check_attributes(mesh, result)

    if mesh.triangle_count == 0 and mesh.vertex_count > 0:
        result.add_warning(f"Degenerate {width}x{height} grid has no triangles")

    if result.passed:
        logger.info("Mesh validation passed")
    else:
        logger.warning(f"Mesh validation failed with {len(result.errors)} errors")
        for error in result.errors:
            logger.error(f"  - {error}")

    for warning in result.warnings:
        logger.warning(f"  - {warning}")

    return result


def _check_counts(
    mesh: TerrainMesh,
    width: int,
    height: int,
    result: ValidationResult,
) -> None:
    """Check vertex and index counts match the grid dimensions."""
    expected_vertices = width * height
    expected_indices = 6 * max(width - 1, 0) * max(height - 1, 0)

    if mesh.vertex_count != expected_vertices:
        result.add_error(
            f"Vertex count {mesh.vertex_count} != {expected_vertices}"
        )
    if len(mesh.indices) != expected_indices:
        result.add_error(
            f"Index count {len(mesh.indices)} != {expected_indices}"
        )


def _check_index_range(mesh: TerrainMesh, result: ValidationResult) -> None:
    """Check every index refers to a vertex."""
    if len(mesh.indices) == 0:
        return

    max_index = int(mesh.indices.max())
    if max_index >= mesh.vertex_count:
        result.add_error(
            f"Index {max_index} out of range for {mesh.vertex_count} vertices"
        )


def _check_normals(mesh: TerrainMesh, result: ValidationResult) -> None:
    """Check every normal is unit length."""
    if mesh.vertex_count == 0:
        return

    lengths = np.linalg.norm(mesh.normals.astype(np.float64), axis=1)
    bad = np.abs(lengths - 1.0) > NORMAL_TOLERANCE
    if np.any(bad):
        result.add_error(f"{int(np.sum(bad))} normals are not unit length")


def _check_attributes(mesh: TerrainMesh, result: ValidationResult) -> None:
    """Check positions are finite and UVs lie in [0, 1]."""
    if mesh.vertex_count == 0:
        return

    if not np.all(np.isfinite(mesh.positions)):
        result.add_error("Non-finite vertex positions")

    uv = mesh.tex_coords
    if np.any(uv < 0.0) or np.any(uv > 1.0):
        result.add_error("Texture coordinates outside [0, 1]")

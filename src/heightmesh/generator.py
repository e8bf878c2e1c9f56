"""Heightmap-to-mesh generation entry point."""

from pathlib import Path

import structlog

from .config import MeshConfig
from .exceptions import LoadFailureError
from .heightmap import open_height_grid
from .mesh import TerrainMesh, build_mesh

logger = structlog.get_logger()


class GenerationResult:
    """Outcome of a generation call: the mesh, or an empty mesh and the error."""

    def __init__(
        self,
        mesh: TerrainMesh,
        config: MeshConfig,
        width: int = 0,
        height: int = 0,
        error: LoadFailureError | None = None,
    ):
        self.mesh = mesh
        self.config = config
        self.width = width
        self.height = height
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None


def generate_terrain_mesh(
    heightmap_path: str | Path,
    config: MeshConfig | None = None,
) -> GenerationResult:
    """Generate a terrain mesh from a grayscale height map image.

    Load failures are logged and returned on the result rather than raised;
    in that case the mesh is empty.

    Args:
        heightmap_path: Path to the height map image.
        config: Mesh configuration. Defaults to ``MeshConfig()``.

    Returns:
        GenerationResult with the mesh and grid dimensions.
    """
    config = config or MeshConfig()

    try:
        with open_height_grid(heightmap_path) as grid:
            height, width = grid.shape
            logger.info(
                "mesh_generation_started",
                path=str(heightmap_path),
                width=width,
                height=height,
                fbm_layers=config.fbm_layers,
            )
            mesh = build_mesh(grid, config)
    except LoadFailureError as e:
        logger.error(
            "heightmap_load_failed",
            path=str(heightmap_path),
            reason=e.reason,
        )
        return GenerationResult(TerrainMesh.empty(), config, error=e)

    logger.info(
        "mesh_generation_complete",
        vertices=mesh.vertex_count,
        triangles=mesh.triangle_count,
    )
    return GenerationResult(mesh, config, width=width, height=height)

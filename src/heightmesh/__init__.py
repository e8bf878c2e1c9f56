"""Heightmap to terrain mesh conversion.

Decodes a grayscale elevation image, displaces it with fractal value
noise, and builds interleaved vertex and triangle index buffers with
smoothed per-vertex normals.
"""

from .config import MeshConfig, load_config
from .exceptions import HeightMeshError, LoadFailureError
from .generator import GenerationResult, generate_terrain_mesh
from .heightmap import height_grid_from_samples, open_height_grid
from .mesh import VERTEX_DTYPE, TerrainMesh, build_mesh
from .noise import fbm, hash_coords, value_noise
from .persistence import export_obj, load_mesh, save_mesh
from .sampler import sample_heights
from .validation import ValidationResult, validate_mesh

__all__ = [
    "GenerationResult",
    "HeightMeshError",
    "LoadFailureError",
    "MeshConfig",
    "TerrainMesh",
    "VERTEX_DTYPE",
    "ValidationResult",
    "build_mesh",
    "export_obj",
    "fbm",
    "generate_terrain_mesh",
    "hash_coords",
    "height_grid_from_samples",
    "load_config",
    "load_mesh",
    "open_height_grid",
    "sample_heights",
    "save_mesh",
    "validate_mesh",
    "value_noise",
]

"""Mesh persistence: save, load and export generated meshes."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import trimesh

from .config import MeshConfig
from .mesh import VERTEX_DTYPE, TerrainMesh

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def save_mesh(
    path: Path,
    mesh: TerrainMesh,
    config: MeshConfig,
    width: int,
    height: int,
) -> None:
    """Save a mesh to disk.

    Uses numpy's compressed .npz format with attribute arrays stored
    separately and a JSON metadata blob.

    Args:
        path: Output path (should end with .npz).
        mesh: Mesh to save.
        config: Configuration used to build the mesh.
        width: Source grid width.
        height: Source grid height.
    """
    metadata = {
        "version": FORMAT_VERSION,
        "width": width,
        "height": height,
        "config": config.model_dump(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    np.savez_compressed(
        path,
        positions=mesh.positions,
        normals=mesh.normals,
        tex_coords=mesh.tex_coords,
        indices=mesh.indices,
        metadata=np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
    )

    file_size = path.stat().st_size / 1024
    logger.info(f"Saved mesh to {path} ({file_size:.1f} KB)")


def load_mesh(path: Path) -> tuple[TerrainMesh, dict]:
    """Load a mesh from disk.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (TerrainMesh, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")

    with np.load(path) as data:
        for key in ("positions", "normals", "tex_coords", "indices"):
            if key not in data:
                raise ValueError(f"Invalid mesh file: missing '{key}' array")

        positions = data["positions"]
        vertices = np.zeros(len(positions), dtype=VERTEX_DTYPE)
        vertices["position"] = positions
        vertices["normal"] = data["normals"]
        vertices["tex_coords"] = data["tex_coords"]
        indices = data["indices"].astype(np.uint32)

        if "metadata" in data:
            metadata = json.loads(data["metadata"].tobytes().decode("utf-8"))
        else:
            metadata = {}

    mesh = TerrainMesh(vertices=vertices, indices=indices)
    logger.info(
        f"Loaded mesh from {path}: {mesh.vertex_count} vertices, "
        f"{mesh.triangle_count} triangles"
    )
    return mesh, metadata


def export_obj(path: Path, mesh: TerrainMesh) -> None:
    """Export a mesh as Wavefront OBJ with normals and texture coordinates.

    Args:
        path: Output path (should end with .obj).
        mesh: Mesh to export. Must have at least one triangle.

    Raises:
        ValueError: If the mesh has no triangles.
    """
    if mesh.triangle_count == 0:
        raise ValueError("Cannot export a mesh with no triangles")

    tri_mesh = trimesh.Trimesh(
        vertices=mesh.positions,
        faces=mesh.triangles,
        vertex_normals=mesh.normals,
        visual=trimesh.visual.TextureVisuals(uv=mesh.tex_coords),
        process=False,
    )
    text = tri_mesh.export(file_type="obj", include_normals=True)
    path.write_text(text)

    logger.info(f"Exported OBJ to {path}")

"""Custom exceptions for heightmap mesh generation."""

from pathlib import Path


class HeightMeshError(Exception):
    """Base exception for heightmesh errors."""

    pass


class LoadFailureError(HeightMeshError):
    """Raised when a height map cannot be decoded into a usable grid."""

    def __init__(self, path: str | Path | None, reason: str):
        self.path = path
        self.reason = reason
        source = str(path) if path is not None else "<in-memory grid>"
        super().__init__(f"Failed to load height map {source}: {reason}")

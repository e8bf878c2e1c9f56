"""Shared test fixtures for heightmesh tests."""

from pathlib import Path

import numpy as np
import pytest
from numpy.typing import NDArray
from PIL import Image

from heightmesh.config import MeshConfig


@pytest.fixture
def flat_config() -> MeshConfig:
    """Config with the noise disabled."""
    return MeshConfig(height_scale=10.0, grid_spacing=1.0, fbm_layers=0)


@pytest.fixture
def flat_grid() -> NDArray[np.float32]:
    """6x5 grid with every sample at mid elevation."""
    return np.full((5, 6), 0.5, dtype=np.float32)


@pytest.fixture
def ramp_grid() -> NDArray[np.float32]:
    """4 rows x 5 columns rising linearly from 0 to 1 along x."""
    row = np.linspace(0.0, 1.0, 5, dtype=np.float32)
    return np.tile(row, (4, 1))


@pytest.fixture
def heightmap_png(tmp_path: Path) -> Path:
    """12x8 grayscale PNG with a diagonal gradient."""
    ys, xs = np.mgrid[0:8, 0:12]
    samples = ((xs + ys) * 255 // 18).astype(np.uint8)
    path = tmp_path / "heightmap.png"
    Image.fromarray(samples).save(path)
    return path

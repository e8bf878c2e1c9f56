"""Height sampling: base elevation plus fractal noise displacement."""

import numpy as np
from numpy.typing import NDArray

from .config import MeshConfig
from .noise import fbm, fbm_grid


def sample_height(
    grid: NDArray[np.float32],
    x: int,
    z: int,
    config: MeshConfig,
) -> float:
    """Displaced, recentered height for a single grid cell.

    Args:
        grid: Normalized height grid of shape (height, width).
        x: Column index.
        z: Row index.
        config: Mesh configuration.

    Returns:
        World-space height of the cell.
    """
    scale = config.height_scale
    base = float(grid[z, x]) * scale
    noise = fbm(x * config.noise_frequency, z * config.noise_frequency, config.fbm_layers)
    displacement = (noise * config.noise_gain + config.noise_offset) * scale
    return base + displacement - scale / 2.0


def sample_heights(
    grid: NDArray[np.float32],
    config: MeshConfig,
) -> NDArray[np.float64]:
    """Displaced, recentered heights for every cell of a grid.

    Vectorized equivalent of calling ``sample_height`` for each cell in
    row-major order.

    Args:
        grid: Normalized height grid of shape (height, width).
        config: Mesh configuration.

    Returns:
        Float64 array of shape (height, width).
    """
    height, width = grid.shape
    scale = config.height_scale

    zs, xs = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")
    noise = fbm_grid(
        xs * config.noise_frequency,
        zs * config.noise_frequency,
        config.fbm_layers,
    )

    base = grid.astype(np.float64) * scale
    displacement = (noise * config.noise_gain + config.noise_offset) * scale
    return base + displacement - scale / 2.0

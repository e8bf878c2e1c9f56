"""Deterministic value noise and fractal sums.

Scalar functions operate on Python numbers; the ``*_grid`` variants take
numpy arrays and produce the same values element-wise. The hash uses
explicit unsigned 32-bit wraparound so results are identical on every
platform.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

HASH_MAX = 0x7FFFFFFF
_MASK32 = 0xFFFFFFFF
_ROW_STRIDE = 57


def hash_coords(x: int, y: int) -> int:
    """Hash integer lattice coordinates to a value in [0, HASH_MAX].

    Args:
        x: Lattice column.
        y: Lattice row.

    Returns:
        Pseudo-random 31-bit integer.
    """
    n = (x + y * _ROW_STRIDE) & _MASK32
    n = ((n << 13) & _MASK32) ^ n
    # Masking to 31 bits discards everything above bit 32 as well
    return (n * (n * n * 15731 + 789221) + 1376312589) & HASH_MAX


def value_noise(x: float, y: float) -> float:
    """Sample 2D value noise at a point.

    Lattice corners carry independent random scalars which are bilinearly
    interpolated; there are no gradients.

    Args:
        x: Sample x coordinate.
        y: Sample y coordinate.

    Returns:
        Noise value in [0, 1].
    """
    ix = math.floor(x)
    iy = math.floor(y)
    fx = x - ix
    fy = y - iy

    r00 = hash_coords(ix, iy) / HASH_MAX
    r01 = hash_coords(ix, iy + 1) / HASH_MAX
    r10 = hash_coords(ix + 1, iy) / HASH_MAX
    r11 = hash_coords(ix + 1, iy + 1) / HASH_MAX

    rx0 = r00 + fx * (r10 - r00)
    rx1 = r01 + fx * (r11 - r01)
    return rx0 + fy * (rx1 - rx0)


def fbm(x: float, y: float, layers: int) -> float:
    """Fractal Brownian motion built from value noise.

    Each layer doubles the frequency and halves the amplitude, starting
    from 1. The sum is not normalized, so its upper bound approaches 2 as
    layers grow.

    Args:
        x: Sample x coordinate.
        y: Sample y coordinate.
        layers: Number of octaves. Zero or negative yields 0.0.

    Returns:
        Sum of the octaves.
    """
    value = 0.0
    amplitude = 1.0
    frequency = 1.0

    for _ in range(layers):
        value += amplitude * value_noise(x * frequency, y * frequency)
        frequency *= 2.0
        amplitude *= 0.5

    return value


def hash_grid(x: ArrayLike, y: ArrayLike) -> NDArray[np.uint32]:
    """Vectorized ``hash_coords`` over integer coordinate arrays."""
    combined = np.asarray(x, dtype=np.int64) + np.asarray(y, dtype=np.int64) * _ROW_STRIDE
    n = (combined & _MASK32).astype(np.uint32)
    # uint32 products wrap modulo 2**32; 0-d inputs would otherwise warn
    with np.errstate(over="ignore"):
        n = (n << np.uint32(13)) ^ n
        mixed = n * (n * n * np.uint32(15731) + np.uint32(789221)) + np.uint32(1376312589)
    return mixed & np.uint32(HASH_MAX)


def value_noise_grid(x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    """Vectorized ``value_noise``.

    Args:
        x: Sample x coordinates.
        y: Sample y coordinates, broadcastable against ``x``.

    Returns:
        Noise values in [0, 1] with the broadcast shape of the inputs.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x_floor = np.floor(x)
    y_floor = np.floor(y)
    fx = x - x_floor
    fy = y - y_floor
    ix = x_floor.astype(np.int64)
    iy = y_floor.astype(np.int64)

    r00 = hash_grid(ix, iy) / HASH_MAX
    r01 = hash_grid(ix, iy + 1) / HASH_MAX
    r10 = hash_grid(ix + 1, iy) / HASH_MAX
    r11 = hash_grid(ix + 1, iy + 1) / HASH_MAX

    rx0 = r00 + fx * (r10 - r00)
    rx1 = r01 + fx * (r11 - r01)
    return rx0 + fy * (rx1 - rx0)


def fbm_grid(x: ArrayLike, y: ArrayLike, layers: int) -> NDArray[np.float64]:
    """Vectorized ``fbm``.

    Args:
        x: Sample x coordinates.
        y: Sample y coordinates, broadcastable against ``x``.
        layers: Number of octaves. Zero or negative yields zeros.

    Returns:
        Array of fractal sums with the broadcast shape of the inputs.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    result = np.zeros(np.broadcast_shapes(x.shape, y.shape), dtype=np.float64)

    amplitude = 1.0
    frequency = 1.0
    for _ in range(layers):
        result += amplitude * value_noise_grid(x * frequency, y * frequency)
        frequency *= 2.0
        amplitude *= 0.5

    return result

"""Height grid acquisition from grayscale raster images."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray
from PIL import Image

from .exceptions import LoadFailureError

SAMPLE_MAX = 255.0

# 16-bit grayscale; PNGs decode as "I" on older Pillow releases
_WIDE_GRAY_MODES = frozenset({"I", "I;16", "I;16B", "I;16L", "I;16N"})

_DECODE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


def height_grid_from_samples(
    samples: ArrayLike,
    path: str | Path | None = None,
) -> NDArray[np.float32]:
    """Normalize a 2D grid of 8-bit samples to a read-only [0, 1] grid.

    Args:
        samples: Array of shape (height, width) with values 0-255.
        path: Source path, used only for error reporting.

    Returns:
        Read-only float32 grid, row-major with the origin at the top-left.

    Raises:
        LoadFailureError: If the grid is not 2D or has no samples.
    """
    data = np.asarray(samples)
    if data.ndim != 2:
        raise LoadFailureError(path, f"expected a 2D grid, got {data.ndim}D")
    if data.size == 0:
        raise LoadFailureError(path, "grid is empty")

    grid = data.astype(np.float32) / np.float32(SAMPLE_MAX)
    grid.setflags(write=False)
    return grid


@contextmanager
def open_height_grid(path: str | Path) -> Iterator[NDArray[np.float32]]:
    """Decode an image as grayscale and yield it as a normalized height grid.

    The decoded image is held only for the duration of the ``with`` block
    and is closed on every exit path.

    Args:
        path: Path to any raster format Pillow can read.

    Yields:
        Read-only float32 grid of shape (height, width) with values in [0, 1].

    Raises:
        LoadFailureError: If the file is missing, unsupported, or corrupt.
    """
    try:
        image = Image.open(path)
    except _DECODE_ERRORS as e:
        raise LoadFailureError(path, str(e)) from e

    with image:
        try:
            samples = _grayscale_samples(image)
        except _DECODE_ERRORS as e:
            raise LoadFailureError(path, str(e)) from e

        yield height_grid_from_samples(samples, path)


def _grayscale_samples(image: Image.Image) -> NDArray[np.uint8]:
    """Reduce an image to single-channel 8-bit samples.

    16-bit grayscale keeps its high byte; Pillow's own conversion would
    clip it to 255 instead.
    """
    if image.mode in _WIDE_GRAY_MODES:
        wide = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF)
        return (wide >> 8).astype(np.uint8)
    return np.asarray(image.convert("L"))

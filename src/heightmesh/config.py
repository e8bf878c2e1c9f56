"""Mesh generation configuration models."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class MeshConfig(BaseModel):
    """Parameters for converting a height grid into a terrain mesh."""

    model_config = ConfigDict(frozen=True)

    height_scale: float = Field(
        default=10.0, description="Vertical scale for base and noise elevation"
    )
    grid_spacing: float = Field(
        default=1.0, gt=0, description="World-space distance between grid samples"
    )
    fbm_layers: int = Field(
        default=4, ge=0, description="Octave count for the fractal noise (0 = off)"
    )
    noise_frequency: float = Field(
        default=0.1, description="Grid-to-noise coordinate scale"
    )
    noise_gain: float = Field(
        default=0.5, description="Multiplier applied to the raw fractal sum"
    )
    noise_offset: float = Field(
        default=-2.0, description="Offset added after the gain"
    )


def load_config(config_path: Path) -> MeshConfig:
    """Load mesh configuration from a TOML file.

    Settings may live at the top level or under a ``[mesh]`` table.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed MeshConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        pydantic.ValidationError: If a value is out of range.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return MeshConfig.model_validate(data.get("mesh", data))

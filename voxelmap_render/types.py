"""Type definitions for the voxel map renderer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .errors import ColorizeError

# Packed little-endian 0xAABBGGRR values, one per column, row-major.
RegionPixels = np.ndarray


class Colorizer(Enum):
    """Supported colorization strategies."""

    SIMPLE = "simple"
    LIGHT = "light"
    BIOME = "biome"
    HEIGHT = "height"
    TERRAIN = "terrain"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> "Colorizer":
        """Convert a string to Colorizer, case-insensitive.

        Unrecognized names map to UNKNOWN so that validation can reject them.
        """
        value_lower = value.lower()
        for colorizer in cls:
            if colorizer.value == value_lower:
                return colorizer
        return cls.UNKNOWN


@dataclass(frozen=True, order=True)
class RegionPos:
    """Position of a region on the world grid, in region units."""

    x: int
    z: int

    def __iter__(self):
        yield self.x
        yield self.z

    def __str__(self) -> str:
        return f"{self.x},{self.z}"

    @classmethod
    def from_string(cls, value: str) -> "RegionPos":
        """Parse the "x,z" form used in cache file names."""
        parts = value.strip().strip("()").split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid region position: {value!r}")
        return cls(int(parts[0]), int(parts[1]))


@dataclass
class RegionData:
    """Per-column voxel attributes of one region.

    Every layer is a 2D array indexed [z][x].
    """

    pos: RegionPos
    height: np.ndarray
    block: np.ndarray
    light: np.ndarray
    biome: np.ndarray
    floor_height: Optional[np.ndarray] = None
    floor_block: Optional[np.ndarray] = None
    transparent_height: Optional[np.ndarray] = None
    transparent_block: Optional[np.ndarray] = None

    def __post_init__(self):
        """Validate that all layers share one shape."""
        shape = self.height.shape
        if len(shape) != 2:
            raise ColorizeError(
                self.pos, f"expected 2D height layer, got shape {shape}"
            )
        for name in (
            "block",
            "light",
            "biome",
            "floor_height",
            "floor_block",
            "transparent_height",
            "transparent_block",
        ):
            layer = getattr(self, name)
            if layer is not None and layer.shape != shape:
                raise ColorizeError(
                    self.pos,
                    f"layer {name} has shape {layer.shape}, expected {shape}",
                )


@dataclass
class RenderStats:
    """Outcome of one render run."""

    total: int = 0
    rendered: int = 0
    failed: int = 0
    skipped: int = 0
    cancelled: bool = False
    failed_regions: list[RegionPos] = field(default_factory=list)

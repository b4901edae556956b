"""Colorization strategies mapping column attributes to packed pixels.

Every strategy works on a whole region at once and is a pure function of the
region's layers: no state is read or written outside the arrays passed in,
so regions can be colorized concurrently from any number of threads.
"""

import logging
from typing import Callable, Dict

import numpy as np

from .config import validate_colorizer
from .errors import ColorizeError
from .palette import (
    BIOME_COLORS,
    BLOCK_COLORS,
    HEIGHT_STOPS,
    PIXEL_DTYPE,
    TRANSPARENT,
    WATER_RGB,
    pack_channels,
    unpack_channels,
)
from .types import Colorizer, RegionData, RegionPixels

logger = logging.getLogger(__name__)

WATER_BLOCK_IDS = (8, 9)

# Light direction for slope shading (from top-left-front), normalized below
_LIGHT_DIR = np.array([-0.2, 0.8, 0.5], dtype=np.float32)
_LIGHT_DIR /= np.linalg.norm(_LIGHT_DIR)

SHADE_AMBIENT = 0.4
SHADE_DIFFUSE = 0.6
SHADE_VERTICAL_SCALE = 3.0


def block_ids(states: np.ndarray) -> np.ndarray:
    """Legacy block id of each block state."""
    return states.astype(np.uint32) & 0xFFF


def empty_mask(region: RegionData) -> np.ndarray:
    """Columns that were never generated."""
    return (region.height == 0) & (region.block == 0)


def colorize_simple(region: RegionData) -> np.ndarray:
    return BLOCK_COLORS[block_ids(region.block)]


def colorize_light(region: RegionData) -> np.ndarray:
    value = region.light.astype(np.uint32) * 255 // 15
    return pack_channels(value, value, value)


def colorize_biome(region: RegionData) -> np.ndarray:
    return BIOME_COLORS[region.biome]


def colorize_height(region: RegionData) -> np.ndarray:
    heights = region.height.astype(np.float32)
    stop_heights = [h for h, _ in HEIGHT_STOPS]
    channels = [
        np.interp(heights, stop_heights, [rgb[i] for _, rgb in HEIGHT_STOPS])
        for i in range(3)
    ]
    return pack_channels(*(np.rint(c) for c in channels))


def slope_shading(heights: np.ndarray) -> np.ndarray:
    """Lambert shading factor per column from the local height gradient.

    Edge columns reuse their own height for the missing neighbor.
    """
    padded = np.pad(heights.astype(np.float32), 1, mode="edge")
    dhdx = (padded[1:-1, 2:] - padded[1:-1, :-2]) / 2.0
    dhdz = (padded[2:, 1:-1] - padded[:-2, 1:-1]) / 2.0

    normal_len = np.sqrt(dhdx * dhdx + SHADE_VERTICAL_SCALE**2 + dhdz * dhdz)
    lambert = (
        dhdx * _LIGHT_DIR[0]
        + SHADE_VERTICAL_SCALE * _LIGHT_DIR[1]
        + dhdz * _LIGHT_DIR[2]
    ) / normal_len
    return SHADE_AMBIENT + SHADE_DIFFUSE * np.maximum(lambert, 0.0)


def colorize_terrain(region: RegionData) -> np.ndarray:
    r, g, b, _ = unpack_channels(BLOCK_COLORS[block_ids(region.block)])

    # Water: blend from the ocean floor toward water color with depth
    if region.floor_height is not None and region.floor_block is not None:
        water = np.isin(block_ids(region.block), WATER_BLOCK_IDS)
        if water.any():
            fr, fg, fb, _ = unpack_channels(
                BLOCK_COLORS[block_ids(region.floor_block)]
            )
            depth = region.height.astype(np.float32) - region.floor_height
            floor_weight = np.minimum(1.0, 1.0 / np.maximum(depth, 1.0))
            r = np.where(water, WATER_RGB[0] + (fr - WATER_RGB[0]) * floor_weight, r)
            g = np.where(water, WATER_RGB[1] + (fg - WATER_RGB[1]) * floor_weight, g)
            b = np.where(water, WATER_RGB[2] + (fb - WATER_RGB[2]) * floor_weight, b)

    # Ice, glass and similar blocks sitting above the surface
    if region.transparent_height is not None and region.transparent_block is not None:
        covered = (region.transparent_block != 0) & (
            region.transparent_height > region.height
        )
        if covered.any():
            tr, tg, tb, _ = unpack_channels(
                BLOCK_COLORS[block_ids(region.transparent_block)]
            )
            r = np.where(covered, (r + tr) / 2.0, r)
            g = np.where(covered, (g + tg) / 2.0, g)
            b = np.where(covered, (b + tb) / 2.0, b)

    shade = slope_shading(region.height)
    shade *= 0.6 + 0.4 * region.light.astype(np.float32) / 15.0
    return pack_channels(
        np.rint(r * shade), np.rint(g * shade), np.rint(b * shade)
    )


COLORIZERS: Dict[Colorizer, Callable[[RegionData], np.ndarray]] = {
    Colorizer.SIMPLE: colorize_simple,
    Colorizer.LIGHT: colorize_light,
    Colorizer.BIOME: colorize_biome,
    Colorizer.HEIGHT: colorize_height,
    Colorizer.TERRAIN: colorize_terrain,
}


def colorize_region(colorizer: Colorizer, region: RegionData) -> RegionPixels:
    """Colorize a whole region into a flat, row-major pixel buffer.

    Args:
        colorizer: Strategy to apply; UNKNOWN raises ConfigError
        region: Decoded column layers of the region

    Returns:
        Fresh uint32 array of width * depth packed pixels
    """
    validate_colorizer(colorizer)
    strategy = COLORIZERS[colorizer]

    try:
        pixels = strategy(region)
    except (IndexError, ValueError, TypeError) as e:
        raise ColorizeError(region.pos, f"{colorizer.value} colorizer failed: {e}") from e

    pixels = np.where(empty_mask(region), TRANSPARENT, pixels)
    return np.ascontiguousarray(pixels, dtype=PIXEL_DTYPE).reshape(-1)

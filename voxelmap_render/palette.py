"""Color tables and pixel packing helpers.

Pixels are packed as little-endian 0xAABBGGRR so that the raw bytes of a
uint32 buffer read R, G, B, A, which is what the PNG writer consumes.
"""

from typing import Dict, Optional, Tuple

import numpy as np

PIXEL_DTYPE = np.dtype("<u4")

TRANSPARENT = 0x00000000

# Legacy block id -> RGB
BLOCK_RGB: Dict[int, Tuple[int, int, int]] = {
    1: (125, 125, 125),    # Stone
    2: (118, 179, 76),     # Grass
    3: (134, 96, 67),      # Dirt
    4: (122, 122, 122),    # Cobblestone
    5: (157, 128, 79),     # Planks
    7: (84, 84, 84),       # Bedrock
    8: (64, 64, 255),      # Flowing water
    9: (64, 64, 255),      # Water
    10: (207, 91, 20),     # Flowing lava
    11: (207, 91, 20),     # Lava
    12: (219, 211, 160),   # Sand
    13: (136, 126, 126),   # Gravel
    17: (102, 81, 51),     # Log
    18: (60, 130, 40),     # Leaves
    24: (216, 208, 155),   # Sandstone
    31: (100, 160, 60),    # Tall grass
    37: (110, 165, 50),    # Dandelion
    38: (110, 165, 50),    # Poppy
    78: (240, 251, 251),   # Snow layer
    79: (160, 188, 255),   # Ice
    80: (240, 251, 251),   # Snow
    81: (13, 99, 22),      # Cactus
    82: (159, 164, 177),   # Clay
    87: (111, 54, 52),     # Netherrack
    88: (84, 64, 51),      # Soul sand
    89: (249, 212, 156),   # Glowstone
    110: (111, 99, 105),   # Mycelium
    111: (32, 128, 48),    # Lily pad
    161: (60, 130, 40),    # Acacia leaves
    162: (104, 97, 88),    # Acacia log
    172: (150, 92, 66),    # Hardened clay
    174: (165, 195, 245),  # Packed ice
    179: (166, 85, 29),    # Red sandstone
}

# Biome id -> RGB
BIOME_RGB: Dict[int, Tuple[int, int, int]] = {
    0: (0, 0, 112),        # Ocean
    1: (141, 179, 96),     # Plains
    2: (250, 148, 24),     # Desert
    3: (96, 96, 96),       # Extreme hills
    4: (5, 102, 33),       # Forest
    5: (11, 102, 89),      # Taiga
    6: (7, 249, 178),      # Swampland
    7: (0, 0, 255),        # River
    8: (255, 0, 0),        # Hell
    9: (128, 128, 255),    # The end
    10: (144, 144, 160),   # Frozen ocean
    11: (160, 160, 255),   # Frozen river
    12: (255, 255, 255),   # Ice plains
    13: (160, 160, 160),   # Ice mountains
    14: (255, 0, 255),     # Mushroom island
    15: (160, 0, 255),     # Mushroom shore
    16: (250, 222, 85),    # Beach
    17: (210, 95, 18),     # Desert hills
    18: (34, 85, 28),      # Forest hills
    19: (22, 57, 51),      # Taiga hills
    20: (114, 120, 154),   # Extreme hills edge
    21: (83, 123, 9),      # Jungle
    22: (44, 66, 5),       # Jungle hills
    23: (98, 139, 23),     # Jungle edge
    24: (0, 0, 48),        # Deep ocean
    25: (162, 162, 132),   # Stone beach
    26: (250, 240, 192),   # Cold beach
    27: (48, 116, 68),     # Birch forest
    28: (31, 95, 50),      # Birch forest hills
    29: (64, 81, 26),      # Roofed forest
    30: (49, 85, 74),      # Cold taiga
    31: (36, 63, 54),      # Cold taiga hills
    32: (89, 102, 81),     # Mega taiga
    33: (69, 79, 62),      # Mega taiga hills
    34: (80, 112, 80),     # Extreme hills+
    35: (189, 178, 95),    # Savanna
    36: (167, 157, 100),   # Savanna plateau
    37: (217, 69, 21),     # Mesa
    38: (176, 151, 101),   # Mesa plateau F
    39: (202, 140, 101),   # Mesa plateau
}

UNKNOWN_BIOME_RGB = (128, 128, 128)

WATER_RGB = (25, 131, 217)

# (height, RGB) stops for the height gradient
HEIGHT_STOPS: Tuple[Tuple[int, Tuple[int, int, int]], ...] = (
    (0, (0, 0, 48)),
    (62, (30, 80, 200)),
    (64, (200, 190, 120)),
    (72, (90, 160, 60)),
    (100, (40, 110, 30)),
    (140, (120, 95, 60)),
    (190, (150, 150, 150)),
    (255, (255, 255, 255)),
)


def pack_rgba(r: int, g: int, b: int, a: int = 255) -> int:
    """Pack one color into a 0xAABBGGRR integer."""
    return (a & 0xFF) << 24 | (b & 0xFF) << 16 | (g & 0xFF) << 8 | (r & 0xFF)


def unpack_rgba(color: int) -> Tuple[int, int, int, int]:
    return (
        color & 0xFF,
        (color >> 8) & 0xFF,
        (color >> 16) & 0xFF,
        (color >> 24) & 0xFF,
    )


def pack_channels(
    r: np.ndarray, g: np.ndarray, b: np.ndarray, a: Optional[np.ndarray] = None
) -> np.ndarray:
    """Pack per-channel arrays (any numeric dtype, 0-255) into packed pixels."""
    r = np.clip(r, 0, 255).astype(np.uint32)
    g = np.clip(g, 0, 255).astype(np.uint32)
    b = np.clip(b, 0, 255).astype(np.uint32)
    if a is None:
        a = np.full(r.shape, 255, dtype=np.uint32)
    else:
        a = np.clip(a, 0, 255).astype(np.uint32)
    return (a << 24 | b << 16 | g << 8 | r).astype(PIXEL_DTYPE)


def unpack_channels(pixels: np.ndarray) -> Tuple[np.ndarray, ...]:
    """Split packed pixels into float32 R, G, B, A arrays."""
    pixels = pixels.astype(np.uint32)
    return tuple(
        ((pixels >> shift) & 0xFF).astype(np.float32) for shift in (0, 8, 16, 24)
    )


def _fallback_block_rgb(block_id: int) -> Tuple[int, int, int]:
    # Stable pseudo-color so unknown blocks stay distinguishable across runs
    h = (block_id * 2654435761) & 0xFFFFFF
    return (64 + (h & 0x7F), 64 + ((h >> 8) & 0x7F), 64 + ((h >> 16) & 0x7F))


def _build_block_table() -> np.ndarray:
    table = np.empty(4096, dtype=PIXEL_DTYPE)
    for block_id in range(4096):
        rgb = BLOCK_RGB.get(block_id) or _fallback_block_rgb(block_id)
        table[block_id] = pack_rgba(*rgb)
    table[0] = TRANSPARENT
    table.flags.writeable = False
    return table


def _build_biome_table() -> np.ndarray:
    table = np.empty(256, dtype=PIXEL_DTYPE)
    for biome_id in range(256):
        table[biome_id] = pack_rgba(*BIOME_RGB.get(biome_id, UNKNOWN_BIOME_RGB))
    table.flags.writeable = False
    return table


# Lookup tables indexed by block id (state & 0xFFF) and biome id
BLOCK_COLORS = _build_block_table()
BIOME_COLORS = _build_biome_table()

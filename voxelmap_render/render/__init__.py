"""Rendering and output modules for voxel map images."""

from .output import write_png
from .parallel import render_parallelized
from .processor import (
    Processor,
    SingleImageProcessor,
    TilesProcessor,
    get_processor,
    tile_path,
)

__all__ = [
    "Processor",
    "SingleImageProcessor",
    "TilesProcessor",
    "get_processor",
    "render_parallelized",
    "tile_path",
    "write_png",
]

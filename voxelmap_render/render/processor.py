"""Output sinks that assemble colorized regions into image files."""

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import numpy as np

from ..config import CanvasConfig, RegionConfig
from ..errors import RenderError
from ..palette import PIXEL_DTYPE
from ..types import RegionPixels, RegionPos
from .output import ensure_parent_dir, write_png

logger = logging.getLogger(__name__)


class Processor(ABC):
    """Consumes finished regions and produces the output artifact(s).

    pre_process runs once before the first region, post_process once after
    the last. process_region is never called concurrently on one instance.
    """

    # Whether one failed region must abort the whole run
    abort_on_region_error = False

    def __init__(self, region_config: Optional[RegionConfig] = None):
        self.region_config = region_config or RegionConfig()
        self.skipped_regions: list[RegionPos] = []

    def pre_process(self):
        pass

    @abstractmethod
    def process_region(self, region_pos: RegionPos, region_pixels: RegionPixels):
        ...

    def post_process(self):
        pass

    def _check_pixels(self, region_pos: RegionPos, region_pixels: RegionPixels):
        if region_pixels.size != self.region_config.blocks:
            raise RenderError(
                f"Region {region_pos}: got {region_pixels.size} pixels, "
                f"expected {self.region_config.width}x{self.region_config.height}"
            )


def tile_path(tiles_pattern: str, region_pos: RegionPos) -> str:
    """Substitute a region's coordinates into a tile path pattern."""
    rx, rz = region_pos
    return (
        tiles_pattern.replace("{tile}", f"{rx},{rz}")
        .replace("{x}", str(rx))
        .replace("{z}", str(rz))
    )


def is_tile_pattern(output: str) -> bool:
    return ("{x}" in output and "{z}" in output) or "{tile}" in output


class TilesProcessor(Processor):
    """Writes every region as its own PNG file."""

    def __init__(self, tiles_pattern: str, region_config: Optional[RegionConfig] = None):
        super().__init__(region_config)
        self.tiles_pattern = tiles_pattern

    def process_region(self, region_pos: RegionPos, region_pixels: RegionPixels):
        self._check_pixels(region_pos, region_pixels)
        img_path = tile_path(self.tiles_pattern, region_pos)
        ensure_parent_dir(img_path)
        write_png(
            img_path,
            region_pixels,
            self.region_config.width,
            self.region_config.height,
        )


class SingleImageProcessor(Processor):
    """Stitches all regions into one canvas covering a fixed world window."""

    abort_on_region_error = True

    def __init__(
        self,
        img_pattern: str,
        region_config: Optional[RegionConfig] = None,
        canvas_config: Optional[CanvasConfig] = None,
    ):
        super().__init__(region_config)
        canvas_config = canvas_config or CanvasConfig()
        region = self.region_config

        self.img_path = self.replace_timestamp(img_pattern)
        self.img_width = canvas_config.regions_wide * region.width
        self.img_height = canvas_config.regions_high * region.height
        # World column coordinates of the canvas's top-left pixel
        self.img_west = -(canvas_config.regions_wide // 2) * region.width
        self.img_north = -(canvas_config.regions_high // 2) * region.height

        self.pixbuf = np.zeros(self.img_width * self.img_height, dtype=PIXEL_DTYPE)

    @staticmethod
    def replace_timestamp(img_pattern: str, now: Optional[float] = None) -> str:
        unix_time = int(time.time() if now is None else now)
        return img_pattern.replace("{t}", str(unix_time))

    @property
    def canvas(self) -> np.ndarray:
        """The canvas as a (height, width) view."""
        return self.pixbuf.reshape(self.img_height, self.img_width)

    def region_offset(self, region_pos: RegionPos) -> tuple[int, int]:
        """Canvas pixel offset of a region's top-left column."""
        rx, rz = region_pos
        x_off = rx * self.region_config.width - self.img_west
        z_off = rz * self.region_config.height - self.img_north
        return x_off, z_off

    def contains(self, region_pos: RegionPos) -> bool:
        x_off, z_off = self.region_offset(region_pos)
        return (
            0 <= x_off
            and 0 <= z_off
            and x_off + self.region_config.width <= self.img_width
            and z_off + self.region_config.height <= self.img_height
        )

    def process_region(self, region_pos: RegionPos, region_pixels: RegionPixels):
        self._check_pixels(region_pos, region_pixels)

        if not self.contains(region_pos):
            logger.warning(
                f"Region {region_pos} lies outside the "
                f"{self.img_width}x{self.img_height} canvas, skipping"
            )
            self.skipped_regions.append(region_pos)
            return

        width = self.region_config.width
        x_off, z_off = self.region_offset(region_pos)
        # Canvas rows are wider than region rows, so copy line by line
        for line_z in range(self.region_config.height):
            img_line = x_off + self.img_width * (z_off + line_z)
            self.pixbuf[img_line : img_line + width] = region_pixels[
                line_z * width : (line_z + 1) * width
            ]

    def pre_process(self):
        ensure_parent_dir(self.img_path)

    def post_process(self):
        logger.info(f"Saving image as {self.img_path}")
        write_png(Path(self.img_path), self.pixbuf, self.img_width, self.img_height)


def get_processor(
    output: str,
    region_config: Optional[RegionConfig] = None,
    canvas_config: Optional[CanvasConfig] = None,
) -> Processor:
    """Pick the sink matching an output pattern.

    Patterns with both {x} and {z}, or with {tile}, produce tiles; anything
    else produces one stitched image.
    """
    if is_tile_pattern(output):
        return TilesProcessor(output, region_config)
    return SingleImageProcessor(output, region_config, canvas_config)

"""Tests for the tile and single-image output sinks."""

import time
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from voxelmap_render.config import CanvasConfig, RegionConfig
from voxelmap_render.errors import OutputError, RenderError
from voxelmap_render.palette import PIXEL_DTYPE, pack_rgba
from voxelmap_render.render.processor import (
    SingleImageProcessor,
    TilesProcessor,
    get_processor,
    is_tile_pattern,
    tile_path,
)
from voxelmap_render.types import RegionPos

WHITE = 0xFFFFFFFF


def filled(value, size=4) -> np.ndarray:
    return np.full(size * size, value, dtype=PIXEL_DTYPE)


# =============================================================================
# Path pattern Tests
# =============================================================================


class TestTilePath:
    def test_x_z_tokens(self) -> None:
        assert tile_path("out/{x}_{z}.png", RegionPos(3, -2)) == "out/3_-2.png"

    def test_tile_token(self) -> None:
        assert tile_path("out/{tile}.png", RegionPos(3, -2)) == "out/3,-2.png"

    def test_repeated_tokens(self) -> None:
        assert tile_path("{x}/{z}/{x}.png", RegionPos(1, 2)) == "1/2/1.png"


class TestGetProcessor:
    def test_pattern_detection(self) -> None:
        assert is_tile_pattern("tiles/{x},{z}.png")
        assert is_tile_pattern("tiles/{tile}.png")
        assert not is_tile_pattern("tiles/{x}.png")
        assert not is_tile_pattern("map_{t}.png")

    def test_tiles_selected(self, region_config) -> None:
        processor = get_processor("out/{tile}.png", region_config)
        assert isinstance(processor, TilesProcessor)

    def test_single_image_selected(self, region_config, canvas_config) -> None:
        processor = get_processor("out/map.png", region_config, canvas_config)
        assert isinstance(processor, SingleImageProcessor)

    def test_only_x_is_single_image(self, region_config, canvas_config) -> None:
        processor = get_processor("out/{x}.png", region_config, canvas_config)
        assert isinstance(processor, SingleImageProcessor)


# =============================================================================
# TilesProcessor Tests
# =============================================================================


class TestTilesProcessor:
    def test_writes_tile(self, tmp_path, region_config) -> None:
        processor = TilesProcessor(str(tmp_path / "t" / "{x}" / "{z}.png"), region_config)
        pixels = filled(pack_rgba(10, 20, 30))
        pixels[1] = pack_rgba(200, 100, 50, 128)

        processor.pre_process()
        processor.process_region(RegionPos(3, -2), pixels)
        processor.post_process()

        path = tmp_path / "t" / "3" / "-2.png"
        with Image.open(path) as image:
            assert image.size == (4, 4)
            assert image.mode == "RGBA"
            assert image.getpixel((0, 0)) == (10, 20, 30, 255)
            assert image.getpixel((1, 0)) == (200, 100, 50, 128)

    def test_shared_directory(self, tmp_path, region_config) -> None:
        processor = TilesProcessor(str(tmp_path / "tiles" / "{tile}.png"), region_config)
        processor.process_region(RegionPos(0, 0), filled(WHITE))
        processor.process_region(RegionPos(0, 1), filled(WHITE))
        assert sorted(p.name for p in (tmp_path / "tiles").iterdir()) == [
            "0,0.png",
            "0,1.png",
        ]

    def test_unwritable_tile(self, tmp_path, region_config) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        processor = TilesProcessor(str(blocker / "{tile}.png"), region_config)
        with pytest.raises(OutputError, match="blocker"):
            processor.process_region(RegionPos(0, 0), filled(WHITE))

    def test_wrong_buffer_size(self, tmp_path, region_config) -> None:
        processor = TilesProcessor(str(tmp_path / "{tile}.png"), region_config)
        with pytest.raises(RenderError, match="1,1"):
            processor.process_region(RegionPos(1, 1), filled(WHITE, size=3))


# =============================================================================
# SingleImageProcessor Tests
# =============================================================================


class TestSingleImageProcessor:
    def test_timestamp_replaced_once(self) -> None:
        assert (
            SingleImageProcessor.replace_timestamp("map_{t}.png", now=1234.9)
            == "map_1234.png"
        )

    def test_timestamp_at_construction(self, tmp_path, region_config, canvas_config) -> None:
        before = int(time.time())
        processor = SingleImageProcessor(
            str(tmp_path / "map_{t}.png"), region_config, canvas_config
        )
        after = int(time.time())

        stamp = int(Path(processor.img_path).stem.split("_")[1])
        assert before <= stamp <= after
        processor.process_region(RegionPos(0, 0), filled(WHITE))
        assert processor.img_path == str(tmp_path / f"map_{stamp}.png")

    def test_canvas_size(self, tmp_path, region_config, canvas_config) -> None:
        processor = SingleImageProcessor(str(tmp_path / "m.png"), region_config, canvas_config)
        assert processor.canvas.shape == (16, 16)
        assert not processor.pixbuf.any()

    def test_default_window(self, tmp_path) -> None:
        processor = SingleImageProcessor(
            str(tmp_path / "m.png"), RegionConfig(width=2, height=2)
        )
        assert processor.canvas.shape == (80, 80)
        assert processor.region_offset(RegionPos(0, 0)) == (40, 40)

    def test_origin_region_at_center(self, tmp_path, region_config, canvas_config) -> None:
        processor = SingleImageProcessor(str(tmp_path / "m.png"), region_config, canvas_config)
        processor.process_region(RegionPos(0, 0), filled(WHITE))

        expected = np.zeros((16, 16), dtype=PIXEL_DTYPE)
        expected[8:12, 8:12] = WHITE
        assert np.array_equal(processor.canvas, expected)

    def test_rows_land_in_canvas_rows(self, tmp_path, region_config, canvas_config) -> None:
        processor = SingleImageProcessor(str(tmp_path / "m.png"), region_config, canvas_config)
        pixels = np.arange(1, 17, dtype=PIXEL_DTYPE)
        processor.process_region(RegionPos(-2, -1), pixels)

        x_off, z_off = processor.region_offset(RegionPos(-2, -1))
        assert (x_off, z_off) == (0, 4)
        assert np.array_equal(
            processor.canvas[z_off : z_off + 4, x_off : x_off + 4],
            pixels.reshape(4, 4),
        )

    @pytest.mark.parametrize("pos", [(2, 0), (0, 2), (-3, 0), (0, -3), (50, -50)])
    def test_out_of_window_skipped(self, tmp_path, region_config, canvas_config, pos) -> None:
        processor = SingleImageProcessor(str(tmp_path / "m.png"), region_config, canvas_config)
        sentinel = np.uint32(0x7F00FF7F)
        canvas = processor.canvas
        canvas[0, :] = sentinel
        canvas[-1, :] = sentinel
        canvas[:, 0] = sentinel
        canvas[:, -1] = sentinel
        before = processor.pixbuf.copy()

        processor.process_region(RegionPos(*pos), filled(WHITE))

        assert np.array_equal(processor.pixbuf, before)
        assert processor.skipped_regions == [RegionPos(*pos)]

    def test_edge_regions_accepted(self, tmp_path, region_config, canvas_config) -> None:
        processor = SingleImageProcessor(str(tmp_path / "m.png"), region_config, canvas_config)
        for pos in [(-2, -2), (1, -2), (-2, 1), (1, 1)]:
            processor.process_region(RegionPos(*pos), filled(WHITE))
        assert processor.skipped_regions == []
        assert processor.canvas[0, 0] == WHITE
        assert processor.canvas[15, 15] == WHITE
        assert processor.canvas[8, 8] == 0

    def test_writes_image(self, tmp_path, region_config, canvas_config) -> None:
        out = tmp_path / "nested" / "dir" / "map.png"
        processor = SingleImageProcessor(str(out), region_config, canvas_config)

        processor.pre_process()
        assert out.parent.is_dir()
        processor.process_region(RegionPos(0, 0), filled(pack_rgba(1, 2, 3)))
        processor.post_process()

        with Image.open(out) as image:
            assert image.size == (16, 16)
            assert image.getpixel((8, 8)) == (1, 2, 3, 255)
            assert image.getpixel((0, 0)) == (0, 0, 0, 0)

    def test_forty_region_window(self, tmp_path) -> None:
        processor = SingleImageProcessor(
            str(tmp_path / "m.png"),
            RegionConfig(width=8, height=8),
            CanvasConfig(regions_wide=40, regions_high=40),
        )
        assert (processor.img_width, processor.img_height) == (320, 320)
        assert processor.region_offset(RegionPos(0, 0)) == (160, 160)
        assert processor.contains(RegionPos(19, 19))
        assert not processor.contains(RegionPos(20, 0))
        assert processor.contains(RegionPos(-20, -20))
        assert not processor.contains(RegionPos(-21, 0))

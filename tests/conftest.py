"""Shared fixtures for small regions, canvases and caches."""

import pytest

from factories import REGION_SIZE, build_region, write_cache_region
from voxelmap_render.config import CanvasConfig, RegionConfig


@pytest.fixture
def region_config() -> RegionConfig:
    return RegionConfig(width=REGION_SIZE, height=REGION_SIZE)


@pytest.fixture
def canvas_config() -> CanvasConfig:
    return CanvasConfig(regions_wide=4, regions_high=4)


@pytest.fixture
def make_region():
    return build_region


@pytest.fixture
def make_cache(tmp_path):
    """Create a cache directory holding one synthetic region per position."""

    def _make(positions):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir(exist_ok=True)
        for i, pos in enumerate(positions):
            write_cache_region(cache_dir, build_region(pos, seed=i))
        return cache_dir

    return _make

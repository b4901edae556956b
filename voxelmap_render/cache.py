"""Region cache discovery and decoding.

A cache directory holds one zip archive per region, named "<x>,<z>.zip".
Each archive carries a "data" member with one 17-byte record per column,
row-major (z outer, x inner):

    0       surface height
    1-2     surface block state (big-endian)
    3       surface light (sky << 4 | block)
    4       ocean floor height
    5-6     ocean floor block state
    7       ocean floor light
    8       transparent layer height
    9-10    transparent layer block state
    11      transparent layer light
    12      foliage height
    13-14   foliage block state
    15      foliage light
    16      biome id
"""

import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np

from .config import RegionConfig
from .errors import ColorizeError, RegionSourceError
from .types import RegionData, RegionPos

logger = logging.getLogger(__name__)

COLUMN_BYTES = 17
DATA_MEMBER = "data"


@dataclass
class RegionEntry:
    """A region found in the cache, loaded on demand."""

    pos: RegionPos
    path: Path
    region_config: RegionConfig = field(default_factory=RegionConfig)

    def load(self) -> RegionData:
        """Read and decode this region's column data."""
        try:
            with zipfile.ZipFile(self.path) as archive:
                raw = archive.read(DATA_MEMBER)
        except KeyError as e:
            raise ColorizeError(
                self.pos, f"{self.path} has no '{DATA_MEMBER}' entry"
            ) from e
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            RuntimeError,
            NotImplementedError,
            OSError,
        ) as e:
            raise ColorizeError(self.pos, f"cannot read {self.path}: {e}") from e

        return decode_region(self.pos, raw, self.region_config)


def _state(records: np.ndarray, offset: int) -> np.ndarray:
    return records[..., offset].astype(np.uint16) << 8 | records[..., offset + 1]


def decode_region(
    pos: RegionPos, raw: bytes, region_config: RegionConfig = None
) -> RegionData:
    """Decode raw column records into per-layer arrays.

    Args:
        pos: Region position, used in error messages
        raw: Contents of the archive's data member
        region_config: Expected region dimensions

    Returns:
        RegionData with layers of shape (height, width)
    """
    region_config = region_config or RegionConfig()
    expected = region_config.blocks * COLUMN_BYTES
    if len(raw) != expected:
        raise ColorizeError(
            pos, f"expected {expected} bytes of column data, got {len(raw)}"
        )

    records = np.frombuffer(raw, dtype=np.uint8).reshape(
        region_config.height, region_config.width, COLUMN_BYTES
    )
    light = records[..., 3]

    return RegionData(
        pos=pos,
        height=records[..., 0].copy(),
        block=_state(records, 1),
        light=np.maximum(light >> 4, light & 0x0F),
        biome=records[..., 16].copy(),
        floor_height=records[..., 4].copy(),
        floor_block=_state(records, 5),
        transparent_height=records[..., 8].copy(),
        transparent_block=_state(records, 9),
    )


def enumerate_regions(
    cache_dir: Union[str, Path], region_config: RegionConfig = None
) -> list[RegionEntry]:
    """List all regions in a cache directory, sorted by position.

    Raises:
        RegionSourceError: if the directory is unusable or holds a region
            archive whose name is not a position
    """
    cache_dir = Path(cache_dir)
    region_config = region_config or RegionConfig()

    if not cache_dir.is_dir():
        raise RegionSourceError(f"Cache directory not found: {cache_dir}")

    try:
        paths = sorted(cache_dir.glob("*.zip"))
    except OSError as e:
        raise RegionSourceError(f"Cannot list cache directory {cache_dir}: {e}") from e

    entries: list[RegionEntry] = []
    for path in paths:
        try:
            pos = RegionPos.from_string(path.stem)
        except ValueError as e:
            raise RegionSourceError(
                f"Region file name is not a position: {path}"
            ) from e
        entries.append(RegionEntry(pos=pos, path=path, region_config=region_config))

    entries.sort(key=lambda entry: entry.pos)
    logger.info(f"Found {len(entries)} regions in {cache_dir}")
    return entries

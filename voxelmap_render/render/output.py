"""PNG writing for packed pixel buffers."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..errors import OutputError
from ..palette import PIXEL_DTYPE

logger = logging.getLogger(__name__)


def ensure_parent_dir(path: Union[str, Path]) -> Path:
    """Create the directory containing path if it doesn't exist.

    Safe to call concurrently for the same directory.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(path, f"creating containing directory failed: {e}") from e
    return path.parent


def pixels_to_image(pixels: np.ndarray, width: int, height: int) -> Image.Image:
    """Wrap a packed pixel buffer as an RGBA image.

    Args:
        pixels: uint32 buffer of width * height packed pixels, row-major
        width: Image width in pixels
        height: Image height in pixels
    """
    if pixels.size != width * height:
        raise ValueError(
            f"Pixel buffer holds {pixels.size} values, expected {width}x{height}"
        )
    data = np.ascontiguousarray(pixels, dtype=PIXEL_DTYPE).tobytes()
    return Image.frombuffer("RGBA", (width, height), data, "raw", "RGBA", 0, 1)


def write_png(path: Union[str, Path], pixels: np.ndarray, width: int, height: int):
    """Encode a packed pixel buffer as a PNG file.

    Raises:
        OutputError: if the file could not be encoded or written
    """
    path = Path(path)
    image = pixels_to_image(pixels, width, height)
    try:
        image.save(path, "PNG")
    except (OSError, ValueError) as e:
        raise OutputError(path, f"encoding image failed: {e}") from e
    logger.debug(f"Wrote {width}x{height} image to {path}")

"""Configuration settings for the voxel map renderer."""

from dataclasses import dataclass, field

from .errors import ConfigError
from .types import Colorizer


@dataclass
class RegionConfig:
    """Dimensions of one cached region, in columns."""

    width: int = 256
    height: int = 256

    @property
    def blocks(self) -> int:
        return self.width * self.height

    def validate(self):
        if self.width < 1 or self.height < 1:
            raise ConfigError(
                f"Region dimensions must be positive, got {self.width}x{self.height}"
            )


@dataclass
class CanvasConfig:
    """Fixed world window covered by single-image output.

    The window is measured in regions and centered so that region (0, 0)
    lands in the middle of the canvas.
    """

    regions_wide: int = 40
    regions_high: int = 40

    def validate(self):
        if self.regions_wide < 1 or self.regions_high < 1:
            raise ConfigError(
                "Canvas window must be at least one region, "
                f"got {self.regions_wide}x{self.regions_high}"
            )


@dataclass
class RenderConfig:
    """Main configuration combining all settings."""

    colorizer: Colorizer = Colorizer.UNKNOWN

    # Worker threads used for colorization
    threads: int = 4

    # Log every delivered region
    verbose: bool = False

    region: RegionConfig = field(default_factory=RegionConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)

    def validate(self):
        """Raise ConfigError for any setting that would make the run invalid."""
        validate_colorizer(self.colorizer)
        validate_threads(self.threads)
        self.region.validate()
        self.canvas.validate()


def validate_colorizer(colorizer: Colorizer):
    if not isinstance(colorizer, Colorizer) or colorizer is Colorizer.UNKNOWN:
        raise ConfigError(
            f"Unknown colorizer {colorizer!r}, expected one of: "
            + ", ".join(c.value for c in Colorizer if c is not Colorizer.UNKNOWN)
        )


def validate_threads(threads: int):
    if not isinstance(threads, int) or threads < 1:
        raise ConfigError(f"Thread count must be a positive integer, got {threads!r}")


# Default configuration instance
DEFAULT_CONFIG = RenderConfig()

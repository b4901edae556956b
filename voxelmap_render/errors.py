"""Exceptions raised by the render pipeline."""


class RenderError(Exception):
    """Base class for failures that abort a render run."""


class RegionSourceError(RenderError):
    """The region cache could not be enumerated."""


class ConfigError(RenderError, ValueError):
    """Invalid render configuration, detected before any region is processed."""


class ColorizeError(RenderError):
    """A single region could not be decoded or colorized."""

    def __init__(self, pos, message: str):
        self.pos = pos
        super().__init__(f"Region {pos}: {message}")


class OutputError(RenderError):
    """An output artifact could not be written."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")

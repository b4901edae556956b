"""Render voxel map region caches into PNG images."""

__version__ = "0.1.0"

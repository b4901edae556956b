#!/usr/bin/env python3
"""CLI entry point for the voxel map renderer."""

import logging
import sys

import click

from .cache import enumerate_regions
from .config import CanvasConfig, RegionConfig, RenderConfig
from .errors import RenderError
from .render.parallel import render_parallelized
from .render.processor import get_processor
from .types import Colorizer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

COLORIZER_NAMES = [c.value for c in Colorizer if c is not Colorizer.UNKNOWN]


@click.command()
@click.argument("cache", type=click.Path())
@click.argument("output")
@click.argument(
    "colorizer", type=click.Choice(COLORIZER_NAMES, case_sensitive=False)
)
@click.option(
    "--threads",
    "-t",
    default=4,
    type=int,
    help="Number of worker threads (default: 4)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Do not output info messages",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log every rendered region",
)
@click.option(
    "--canvas-regions",
    default=40,
    type=int,
    help="Regions per side of the single-image window (default: 40)",
)
@click.option(
    "--region-size",
    default=256,
    type=int,
    help="Columns per side of one cached region (default: 256)",
)
def render(
    cache: str,
    output: str,
    colorizer: str,
    threads: int,
    quiet: bool,
    verbose: bool,
    canvas_regions: int,
    region_size: int,
):
    """Render a voxel map region cache to PNG.

    OUTPUT containing both {x} and {z}, or {tile}, writes one PNG per
    region; any other OUTPUT writes one stitched image, with {t} replaced
    by the current Unix time.

    Example:

    \b
        voxelmap-render ~/cache/world 'tiles/{x}_{z}.png' terrain
        voxelmap-render -t 8 ~/cache/world 'map_{t}.png' biome
    """
    if quiet:
        logging.getLogger().setLevel(logging.WARNING)

    config = RenderConfig(
        colorizer=Colorizer.from_string(colorizer),
        threads=threads,
        verbose=verbose and not quiet,
        region=RegionConfig(width=region_size, height=region_size),
        canvas=CanvasConfig(regions_wide=canvas_regions, regions_high=canvas_regions),
    )

    try:
        config.validate()
        regions = enumerate_regions(cache, config.region)
    except RenderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    processor = get_processor(output, config.region, config.canvas)

    if not quiet:
        click.echo(
            f"Rendering {len(regions)} regions from {cache} to {output} "
            f"with {config.colorizer.value}"
        )

    def progress_callback(current: int, total: int):
        percent = (current / total) * 100
        click.echo(f"\rRendering regions: {current}/{total} ({percent:.1f}%)", nl=False)

    try:
        stats = render_parallelized(
            processor,
            config.colorizer,
            regions,
            threads=config.threads,
            verbose=config.verbose,
            progress_callback=None if quiet or config.verbose else progress_callback,
        )
    except RenderError as e:
        click.echo(f"\nError during rendering: {e}", err=True)
        logger.exception("Rendering failed")
        sys.exit(1)

    if not quiet:
        click.echo()  # New line after progress
        click.echo(f"Rendered {stats.rendered}/{stats.total} regions")
        if stats.failed:
            click.echo(f"  Failed: {', '.join(str(p) for p in stats.failed_regions)}")
        if stats.skipped:
            click.echo(f"  Outside the image: {stats.skipped}")

    if stats.failed:
        sys.exit(1)


def main():
    """Main entry point."""
    render()


if __name__ == "__main__":
    main()

"""Parallel region rendering.

Regions are colorized on a thread pool; finished pixel buffers come back
through futures and are handed to the processor by the calling thread only,
so the processor never sees concurrent calls.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Optional, Union

from ..cache import RegionEntry
from ..colorizer import colorize_region
from ..config import validate_colorizer, validate_threads
from ..errors import ColorizeError, RenderError
from ..types import Colorizer, RegionData, RegionPixels, RegionPos, RenderStats
from .processor import Processor

logger = logging.getLogger(__name__)

# Either a cache entry loaded inside the worker, or already decoded data
RegionSource = Union[RegionEntry, tuple[RegionPos, RegionData]]


def _region_pos(region: RegionSource) -> RegionPos:
    if isinstance(region, tuple):
        return region[0]
    return region.pos


def _render_region(colorizer: Colorizer, region: RegionSource) -> RegionPixels:
    try:
        data = region[1] if isinstance(region, tuple) else region.load()
        return colorize_region(colorizer, data)
    except RenderError:
        raise
    except Exception as e:
        raise ColorizeError(
            _region_pos(region), f"{type(e).__name__}: {e}"
        ) from e


def _cancel_pending(futures: Iterable[Future]) -> int:
    return sum(1 for future in futures if future.cancel())


def render_parallelized(
    processor: Processor,
    colorizer: Colorizer,
    regions: Iterable[RegionSource],
    threads: int = 4,
    verbose: bool = False,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> RenderStats:
    """Render all regions through a processor.

    Args:
        processor: Sink receiving every colorized region
        colorizer: Colorization strategy, must not be UNKNOWN
        regions: RegionEntry objects or (RegionPos, RegionData) pairs
        threads: Number of worker threads
        verbose: Log every delivered region
        cancel_event: Checked between dispatches and deliveries. Once set,
            queued regions are dropped, regions being colorized finish but
            are not delivered, and what was delivered is finalized
        progress_callback: Optional callback(done, total) after each region

    Returns:
        Counts of rendered, failed and skipped regions

    Raises:
        ConfigError: for an invalid colorizer or thread count, before the
            processor is touched
        RenderError: when a region fails and the processor cannot tolerate it
    """
    validate_colorizer(colorizer)
    validate_threads(threads)

    regions = list(regions)
    stats = RenderStats(total=len(regions))

    def cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    skipped_before = len(processor.skipped_regions)
    processor.pre_process()

    with ThreadPoolExecutor(
        max_workers=threads, thread_name_prefix="render"
    ) as executor:
        futures: dict[Future, RegionPos] = {}
        for region in regions:
            if cancelled():
                break
            future = executor.submit(_render_region, colorizer, region)
            futures[future] = _region_pos(region)

        done = 0
        for future in as_completed(futures):
            region_pos = futures[future]

            if cancelled():
                stats.cancelled = True
                dropped = _cancel_pending(futures)
                logger.warning(
                    f"Render cancelled after {done} regions, "
                    f"dropping {dropped} queued regions"
                )
                break

            try:
                processor.process_region(region_pos, future.result())
            except RenderError as e:
                if processor.abort_on_region_error:
                    _cancel_pending(futures)
                    logger.error(f"Region {region_pos} failed, aborting render: {e}")
                    raise RenderError(
                        f"Render aborted at region {region_pos}: {e}"
                    ) from e
                logger.error(f"Skipping region {region_pos}: {e}")
                stats.failed += 1
                stats.failed_regions.append(region_pos)
            else:
                stats.rendered += 1

            done += 1
            if verbose:
                logger.info(f"Region {region_pos} done ({done}/{stats.total})")
            if progress_callback:
                progress_callback(done, stats.total)

    if cancelled():
        stats.cancelled = True

    stats.skipped = len(processor.skipped_regions) - skipped_before
    stats.rendered -= stats.skipped

    processor.post_process()

    logger.info(
        f"Rendered {stats.rendered}/{stats.total} regions "
        f"({stats.failed} failed, {stats.skipped} outside the image)"
    )
    return stats

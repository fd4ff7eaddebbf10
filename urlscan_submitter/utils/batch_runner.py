"""Sequential runner for batch analysis."""

import logging
import time
from typing import Callable, Sequence, TypeVar

from ..config import INTER_REQUEST_DELAY

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_batch(
    items: Sequence[str],
    scan_func: Callable[[str], T],
    delay: float = INTER_REQUEST_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    on_start: Callable[[int, str], None] | None = None,
    on_progress: Callable[[int, str, T], None] | None = None,
) -> list[T]:
    """
    Run scans one at a time with a fixed pause between them.

    ``scan_func`` is expected to turn its own failures into results;
    anything it raises (including KeyboardInterrupt) stops the batch.

    Args:
        items: URLs to scan, in order.
        scan_func: Function that scans one URL and returns its result.
        delay: Seconds to wait between consecutive scans (not after the last).
        sleep: Function used for the pause.
        on_start: Optional callback(index, item) called before each scan.
        on_progress: Optional callback(index, item, result) called after each scan.

    Returns:
        List of results in the same order as input items.
    """
    results = []

    for index, item in enumerate(items):
        if on_start:
            on_start(index, item)

        result = scan_func(item)
        results.append(result)

        if on_progress:
            on_progress(index, item, result)

        if index < len(items) - 1 and delay > 0:
            logger.debug("Waiting %ss before next URL", delay)
            sleep(delay)

    return results

"""
Estimates how many events fit in a target corpus size.
"""
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def estimate_tot_events(tot_size: int, render_sample: Callable[[], bytes]) -> int:
    """
    Compute the number of events needed to fill tot_size bytes.

    One sample event is rendered and the target size is divided by its
    length. The sample renderer must use isolated field state so that it does
    not consume values from the real run.

    Args:
        tot_size: Target corpus size in bytes, 0 for unbounded
        render_sample: Callable rendering one complete event

    Returns:
        Number of events (at least 1), or 0 when tot_size is 0
    """
    if tot_size == 0:
        return 0

    sample = render_sample()
    single_event_size = len(sample)
    if single_event_size == 0:
        return 1

    tot_events = max(1, tot_size // single_event_size)
    logger.debug(
        "sample event is %d bytes, %d events fill %d bytes",
        single_event_size, tot_events, tot_size,
    )
    return tot_events

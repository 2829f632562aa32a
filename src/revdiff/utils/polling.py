"""Bounded polling without blocking the event loop."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


async def poll_until(
    predicate: Callable[[], bool],
    *,
    interval: float,
    max_attempts: int,
) -> bool:
    """Await until ``predicate()`` is true or the attempts run out.

    The predicate is checked up to ``max_attempts`` times with ``interval``
    seconds between checks.  Returns whether it ever held.
    """

    for attempt in range(1, max(1, max_attempts) + 1):
        if predicate():
            if attempt > 1:
                logger.debug("condition met after %d attempts", attempt)
            return True
        if attempt < max_attempts:
            await asyncio.sleep(interval)
    return False

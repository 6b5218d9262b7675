"""Pacing helper shared by discovery and enrichment.

All deliberate pauses go through ``pause`` so tests can patch a single point.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def pause(seconds: float) -> float:
    """Sleep for ``seconds`` (negative values sleep for zero).

    Returns the actual sleep duration (useful for testing).
    """
    duration = max(seconds, 0.0)
    logger.debug("Pausing %.2fs", duration)
    await asyncio.sleep(duration)
    return duration

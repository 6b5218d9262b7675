"""Bounded-concurrency scoring with per-item fallback.

Items are scored in fixed-size batches: calls inside a batch run
concurrently, batches run one after another with a pause in between. Each
call resolves to either a ScoredItem or an exception; exceptions are folded
into the caller's fallback value so one failure never drops an item or
aborts the batch. Output order matches input order.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from bookscout.browser.actions import pause
from bookscout.core.schemas import Item, ScoredItem

logger = logging.getLogger(__name__)

ScoreFn = Callable[[Item], Awaitable[ScoredItem]]
FallbackFn = Callable[[Item], ScoredItem]


def _unwrap(item: Item, outcome: ScoredItem | BaseException, fallback: FallbackFn) -> ScoredItem:
    if isinstance(outcome, Exception):
        logger.warning(
            "Error enriching book '%s': %s", item.title, outcome,
            exc_info=(type(outcome), outcome, outcome.__traceback__),
        )
        return fallback(item)
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome


async def score_in_batches(
    items: Sequence[Item],
    score: ScoreFn,
    *,
    batch_size: int,
    batch_delay: float = 0.0,
    fallback: FallbackFn = ScoredItem.fallback,
) -> list[ScoredItem]:
    """Score ``items`` with at most ``batch_size`` calls in flight.

    Args:
        items: Items to score, in output order.
        score: Coroutine function scoring a single item; may raise.
        batch_size: Concurrency limit and batch length (>= 1).
        batch_delay: Pause in seconds between consecutive batches.
        fallback: Builds the replacement for an item whose call raised.

    Returns:
        One ScoredItem per input item.
    """
    if batch_size < 1:
        msg = f"batch_size must be >= 1, got {batch_size}"
        raise ValueError(msg)

    scored: list[ScoredItem] = []
    total = len(items)

    for start in range(0, total, batch_size):
        batch = items[start:start + batch_size]
        outcomes = await asyncio.gather(
            *(score(item) for item in batch), return_exceptions=True,
        )
        scored.extend(_unwrap(item, outcome, fallback) for item, outcome in zip(batch, outcomes))
        logger.debug("Scored batch %d-%d of %d", start + 1, start + len(batch), total)

        if start + batch_size < total:
            await pause(batch_delay)

    return scored

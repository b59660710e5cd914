"""
Paced asynchronous map used for every request issued against Transifex.

Operations are started one at a time with a fixed spacing between starts.
A started operation is never awaited before the next one is started, so
slow responses overlap while the request rate stays under the service limit.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from aiolimiter import AsyncLimiter
from tqdm.asyncio import tqdm

logger = logging.getLogger(__name__)

# Transifex rejects clients that exceed its request ceiling; one start per
# 200ms stays below it.
DISPATCH_INTERVAL_SECONDS = 0.2


@dataclass
class MapResult:
    """Results aligned with the input order plus the first error raised, if any."""
    results: List[Optional[Any]] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def rate_limited_map(
        items: Sequence[Any],
        operation: Callable[[Any], Awaitable[Any]],
        interval: float = DISPATCH_INTERVAL_SECONDS,
        description: Optional[str] = None
) -> MapResult:
    """
    Apply ``operation`` to every item, starting one operation per ``interval``.

    Every operation runs to completion even when a sibling fails. The slot of a
    failed operation stays ``None`` and the first failure is reported in
    ``MapResult.error``.

    Args:
        items: The inputs, in dispatch order.
        operation: Coroutine function called once per item.
        interval: Seconds between two consecutive dispatches.
        description: Label for the progress bar; no bar is shown when omitted.

    Returns:
        MapResult: The collected results and the first error.
    """
    items = list(items)
    results: List[Optional[Any]] = [None] * len(items)
    if not items:
        return MapResult(results=results)

    limiter = AsyncLimiter(max_rate=1, time_period=interval)
    all_done = asyncio.Event()
    remaining = len(items)
    first_error: Optional[BaseException] = None
    progress = tqdm(total=len(items), desc=description, disable=description is None, leave=False)

    async def run_one(index: int, item: Any) -> None:
        nonlocal remaining, first_error
        try:
            results[index] = await operation(item)
        except Exception as exc:
            logger.debug("Operation for %r failed: %s", item, exc)
            if first_error is None:
                first_error = exc
        finally:
            remaining -= 1
            progress.update(1)
            if remaining == 0:
                all_done.set()

    # Strong references; the event loop only keeps weak ones.
    tasks = []
    for index, item in enumerate(items):
        await limiter.acquire()
        tasks.append(asyncio.create_task(run_one(index, item)))

    await all_done.wait()
    progress.close()
    return MapResult(results=results, error=first_error)

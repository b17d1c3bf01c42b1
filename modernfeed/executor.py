"""Bounded-concurrency execution of async work items."""

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar, Union

from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Outcome = Union[R, BaseException]


async def bounded_gather(
    items: Iterable[T],
    fn: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[Outcome]:
    """Run ``fn`` over every item with at most ``limit`` calls in flight.

    A new call is admitted as soon as any running one finishes. Outcomes are
    collected in completion order, not input order; a call that raises
    contributes its exception instead of cancelling the others. Returns once
    every item has been processed.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    sem = asyncio.Semaphore(limit)
    outcomes: list[Outcome] = []

    async def run_one(item: T) -> None:
        async with sem:
            try:
                result = await fn(item)
            except Exception as e:
                logger.debug("bounded_task_failed", error=str(e), error_type=type(e).__name__)
                outcomes.append(e)
            else:
                outcomes.append(result)

    await asyncio.gather(*(run_one(item) for item in items))
    return outcomes

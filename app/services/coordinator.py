import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, List, Sequence
from app.models import RawQuote

logger = logging.getLogger(__name__)


@dataclass
class QuoteTask:
    label: str
    awaitable: Awaitable[RawQuote]


async def settle_quotes(tasks: Sequence[QuoteTask]) -> List[RawQuote]:
    """
    Run every quote fetch concurrently and wait for all of them.

    Returns one RawQuote per task in task order. A task that raised (or
    returned something other than a RawQuote) is replaced by a failed row
    carrying the task's label; sibling tasks are never cancelled.
    """
    if not tasks:
        return []

    results = await asyncio.gather(
        *(task.awaitable for task in tasks),
        return_exceptions=True
    )

    quotes: List[RawQuote] = []
    for task, result in zip(tasks, results):
        if isinstance(result, RawQuote):
            quotes.append(result)
            continue
        if isinstance(result, BaseException):
            logger.warning(f"Quote from {task.label} failed: {type(result).__name__}: {result}")
        else:
            logger.warning(f"Quote from {task.label} returned {type(result).__name__}, expected RawQuote")
        quotes.append(RawQuote.failure(task.label))

    failed = sum(1 for quote in quotes if quote.failed)
    logger.info(f"Settled {len(quotes)} quotes ({failed} failed)")
    return quotes

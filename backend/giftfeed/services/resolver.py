"""
Resilient listing resolver.

Races every configured fetch strategy against the same listing URL:
- each strategy runs under its own timeout budget
- the first Success wins and is returned immediately
- Blocked / TransportError / TimedOut mean "keep waiting for the others"
- if nothing succeeds the result is an empty list, never an exception

Racing (instead of HTTP-then-browser) keeps tail latency low when the
HTTP path is blocked; render cost is capped by its own timeout either way.
"""

import asyncio
import logging
import time
from typing import Optional, Sequence

from giftfeed.core.config import settings
from giftfeed.services.fetchers.base import (
    FetchOutcome,
    FetchStrategy,
    Success,
    TimedOut,
    TransportError,
)
from giftfeed.services.filters import ListingFilter, build_collection_url
from giftfeed.services.parsers.base import ListingRecord

logger = logging.getLogger(__name__)


class ListingResolver:
    """
    Runs fetch strategies concurrently and keeps the first successful result.

    Usage:
        resolver = ListingResolver([HttpFetcher(), RenderFetcher(pool)])
        records = await resolver.resolve("plushpepe", ListingFilter(), limit=10)
    """

    def __init__(
        self,
        strategies: Sequence[FetchStrategy],
        base_url: Optional[str] = None,
        cancel_losers: Optional[bool] = None,
    ):
        self.strategies = list(strategies)
        self.base_url = base_url or settings.MARKET_BASE_URL
        self.cancel_losers = (
            settings.CANCEL_LOSING_STRATEGY if cancel_losers is None else cancel_losers
        )

    async def resolve(
        self,
        collection: str,
        filters: ListingFilter,
        limit: int,
    ) -> list[ListingRecord]:
        """Return up to ``limit`` records, or [] if every strategy failed."""
        url = build_collection_url(self.base_url, collection, filters)
        outcome = await self.race(url, limit)
        if isinstance(outcome, Success):
            return list(outcome.records)
        return []

    async def race(self, url: str, limit: int) -> Optional[Success]:
        """Run all strategies for ``url``; return the winning Success or None."""
        if not self.strategies:
            logger.error("ListingResolver has no fetch strategies configured")
            return None

        started = time.monotonic()
        tasks: dict[asyncio.Task, FetchStrategy] = {
            asyncio.create_task(
                self._run_bounded(strategy, url, limit),
                name=f"fetch-{strategy.name}",
            ): strategy
            for strategy in self.strategies
        }
        pending = set(tasks)
        winner: Optional[Success] = None

        try:
            while pending and winner is None:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    strategy = tasks[task]
                    outcome = self._outcome_of(task, strategy)
                    if isinstance(outcome, Success):
                        winner = outcome
                        logger.info(
                            "Race winner: %s (%d records, %.0f ms) for %s",
                            strategy.name,
                            len(outcome.records),
                            (time.monotonic() - started) * 1000,
                            url,
                        )
                        break
                    logger.info("Race: %s did not succeed (%s) for %s", strategy.name, outcome, url)
        finally:
            self._release_losers(pending)

        if winner is None:
            logger.warning(
                "All %d fetch strategies failed for %s after %.0f ms",
                len(tasks),
                url,
                (time.monotonic() - started) * 1000,
            )
        return winner

    @staticmethod
    async def _run_bounded(strategy: FetchStrategy, url: str, limit: int) -> FetchOutcome:
        """Hard-cap a strategy at its own budget, whatever it does internally."""
        try:
            return await asyncio.wait_for(
                strategy.fetch(url, limit, strategy.timeout),
                timeout=strategy.timeout,
            )
        except asyncio.TimeoutError:
            return TimedOut(after=strategy.timeout)

    @staticmethod
    def _outcome_of(task: asyncio.Task, strategy: FetchStrategy) -> FetchOutcome:
        exc = task.exception()
        if exc is not None:
            logger.error("Fetch strategy %s raised: %r", strategy.name, exc)
            return TransportError(cause=repr(exc))
        return task.result()

    def _release_losers(self, pending: set[asyncio.Task]):
        for task in pending:
            if self.cancel_losers:
                task.cancel()
            # Detached tasks still get their result retrieved
            task.add_done_callback(_discard_result)


def _discard_result(task: asyncio.Task):
    if not task.cancelled():
        task.exception()

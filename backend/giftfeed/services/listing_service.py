"""
Listing service: cache -> resolver -> optional attribute enrichment.

Owns the process-wide resources (HTTP session, browser pool, cache,
attribute client). Built once in the app lifespan and injected into the
routes, so tests can swap any part for a fake.
"""

import logging
from typing import Optional, Union

from giftfeed.core.config import settings
from giftfeed.services.attributes import AttributeLookup
from giftfeed.services.cache import ListingCache, RedisListingCache, build_cache, make_listing_key
from giftfeed.services.fetchers import BrowserPool, HttpFetcher, RenderFetcher
from giftfeed.services.filters import ListingFilter
from giftfeed.services.parsers.base import EnrichedListing, ListingRecord
from giftfeed.services.resolver import ListingResolver

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(
        self,
        resolver: ListingResolver,
        cache: Union[ListingCache, RedisListingCache],
        attributes: Optional[AttributeLookup] = None,
        browser_pool: Optional[BrowserPool] = None,
    ):
        self.resolver = resolver
        self.cache = cache
        self.attributes = attributes or AttributeLookup()
        self.browser_pool = browser_pool

    @classmethod
    def from_settings(cls) -> "ListingService":
        """HTTP strategy always; render strategy when RENDER_ENABLED."""
        pool = BrowserPool() if settings.RENDER_ENABLED else None
        strategies = [HttpFetcher()]
        if pool is not None:
            strategies.append(RenderFetcher(pool))
        return cls(
            resolver=ListingResolver(strategies),
            cache=build_cache(),
            browser_pool=pool,
        )

    @property
    def render_enabled(self) -> bool:
        return self.browser_pool is not None and self.browser_pool.is_running

    async def start(self):
        """Launch the browser pool and the cache sweeper."""
        if self.browser_pool is not None:
            try:
                await self.browser_pool.start()
            except Exception as exc:
                # Without a browser the HTTP strategy still works alone
                logger.error("Browser pool failed to start, render disabled: %s", exc)
                self._drop_render_strategy()
        self.cache.start_sweeper()

    def _drop_render_strategy(self):
        self.resolver.strategies = [
            s for s in self.resolver.strategies if not isinstance(s, RenderFetcher)
        ]
        self.browser_pool = None

    async def close(self):
        """Release every pooled resource."""
        for strategy in self.resolver.strategies:
            await strategy.close()
        if self.browser_pool is not None:
            await self.browser_pool.close()
        await self.attributes.close()
        await self.cache.close()
        logger.info("ListingService closed")

    async def get_listings(
        self,
        collection: str,
        filters: ListingFilter,
        limit: int,
        enrich: bool = False,
    ) -> Union[list[ListingRecord], list[EnrichedListing]]:
        key = make_listing_key(collection, filters, limit)
        records = await self.cache.get_or_compute(
            key, lambda: self.resolver.resolve(collection, filters, limit)
        )
        if not enrich or not records:
            return list(records)
        return await self.attributes.enrich(records)

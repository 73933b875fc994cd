"""
Gift attribute lookup (model / backdrop / symbol) for listing enrichment.

Source: https://nft.fragment.com/gift/{slug}.json
    {"attributes": [{"trait_type": "Model", "value": "Crystal Ball"}, ...]}

Lookups never fail the listing request: any error yields "Unknown".
"""

import asyncio
import logging
import time
from typing import Iterable, Optional

import httpx

from giftfeed.core.config import settings
from giftfeed.services.normalization import gift_lookup_slug
from giftfeed.services.parsers.base import (
    UNKNOWN_ATTRIBUTE,
    EnrichedListing,
    GiftAttributes,
    ListingRecord,
)
from giftfeed.services.retry import retry_with_backoff

logger = logging.getLogger(__name__)

TRAITS = ("model", "backdrop", "symbol")


def parse_attributes(data: dict) -> GiftAttributes:
    """Pick model/backdrop/symbol out of the NFT metadata JSON."""
    found: dict[str, str] = {}
    for attr in data.get("attributes") or []:
        if not isinstance(attr, dict):
            continue
        trait = str(attr.get("trait_type", "")).lower()
        value = attr.get("value")
        if trait in TRAITS and trait not in found and value:
            found[trait] = str(value)
    return GiftAttributes(**{t: found.get(t, UNKNOWN_ATTRIBUTE) for t in TRAITS})


class AttributeLookup:
    """Cached, concurrency-bounded attribute fetcher."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        concurrency: Optional[int] = None,
        ttl_sec: Optional[float] = None,
    ):
        self._client = client
        self.base_url = (base_url or settings.ATTRIBUTES_BASE_URL).rstrip("/")
        self._semaphore = asyncio.Semaphore(concurrency or settings.ATTRIBUTES_CONCURRENCY)
        self.ttl_sec = settings.ATTRIBUTES_CACHE_TTL_SEC if ttl_sec is None else ttl_sec
        self._cache: dict[str, tuple[float, GiftAttributes]] = {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=settings.ATTRIBUTES_TIMEOUT_SEC,
                headers={"User-Agent": settings.USER_AGENT, "Accept": "application/json"},
            )
        return self._client

    @retry_with_backoff(max_retries=1, base_delay=0.2)
    async def _download(self, slug: str) -> dict:
        resp = await self._get_client().get(f"{self.base_url}/{slug}.json")
        resp.raise_for_status()
        return resp.json()

    async def fetch(self, slug: str) -> GiftAttributes:
        cached = self._cache.get(slug)
        if cached is not None and time.monotonic() - cached[0] < self.ttl_sec:
            return cached[1]

        async with self._semaphore:
            try:
                data = await self._download(slug)
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Failed to fetch attributes for '%s': %s", slug, exc)
                return GiftAttributes()

        if not isinstance(data, dict):
            logger.warning("Unexpected attributes payload for '%s'", slug)
            return GiftAttributes()

        attributes = parse_attributes(data)
        self._cache[slug] = (time.monotonic(), attributes)
        return attributes

    async def enrich(self, records: Iterable[ListingRecord]) -> list[EnrichedListing]:
        """Attach attributes to every record, keeping input order."""
        records = list(records)
        attributes = await asyncio.gather(*(self.fetch(gift_lookup_slug(r.name)) for r in records))
        return [
            EnrichedListing(record=record, attributes=attrs)
            for record, attrs in zip(records, attributes)
        ]

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

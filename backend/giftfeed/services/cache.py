"""
Short-lived cache for resolved listing pages.

Absorbs bursts of identical requests so a collection page is fetched at
most once per TTL window. Empty results are cached too, so a collection
with no matching listings is not hammered.

Two backends share the ``get_or_compute`` contract:
- ListingCache: in-process dict with lazy expiry and a background sweep
- RedisListingCache: Redis SET ... EX, shared between workers
"""

import asyncio
import hashlib
import json
import logging
import time
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from giftfeed.core.config import settings
from giftfeed.services.filters import ListingFilter, encode_filters
from giftfeed.services.parsers.base import ListingRecord

logger = logging.getLogger(__name__)

LISTINGS_CACHE_PREFIX = "giftfeed:listings:"

Records = tuple[ListingRecord, ...]
Compute = Callable[[], Awaitable[list[ListingRecord]]]


@dataclass(frozen=True)
class ListingKey:
    collection: str
    filters: str  # encoded attrs fragment, canonical
    limit: int


def make_listing_key(collection: str, filters: ListingFilter, limit: int) -> ListingKey:
    return ListingKey(collection=collection, filters=encode_filters(filters), limit=limit)


class ListingCache:
    """
    In-process TTL cache keyed by (collection, filters, limit).

    Entries are immutable tuples replaced wholesale, so concurrent readers
    never see a partial value. Two concurrent misses on one key may both
    compute; the later write wins.
    """

    backend = "memory"

    def __init__(
        self,
        ttl_sec: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_sec = settings.CACHE_TTL_SEC if ttl_sec is None else ttl_sec
        self._clock = clock
        self._entries: dict[ListingKey, tuple[float, Records]] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, key: ListingKey) -> Optional[Records]:
        """Live value for ``key``, or None. Expired entries are dropped here."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        inserted_at, value = entry
        if self._clock() - inserted_at >= self.ttl_sec:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: ListingKey, records) -> Records:
        value = tuple(records)
        self._entries[key] = (self._clock(), value)
        return value

    async def get_or_compute(self, key: ListingKey, compute: Compute) -> Records:
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached

        logger.debug("Cache miss: %s", key)
        return self.set(key, await compute())

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        stale = [k for k, (inserted_at, _) in self._entries.items() if now - inserted_at >= self.ttl_sec]
        for key in stale:
            self._entries.pop(key, None)
        return len(stale)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def start_sweeper(self, interval_sec: Optional[float] = None):
        """Periodically purge expired entries in the background."""
        if self._sweeper is not None:
            return
        interval = interval_sec or settings.CACHE_SWEEP_INTERVAL_SEC
        self._sweeper = asyncio.create_task(self._sweep_loop(interval))

    async def _sweep_loop(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            removed = self.purge_expired()
            if removed:
                logger.debug("Cache sweep removed %d entries", removed)

    async def close(self):
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        self.clear()


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


def _redis_key(key: ListingKey) -> str:
    raw = json.dumps(asdict(key), sort_keys=True)
    h = hashlib.md5(raw.encode()).hexdigest()[:16]
    return f"{LISTINGS_CACHE_PREFIX}{h}"


def _dump_records(records: Records) -> str:
    return json.dumps([asdict(r) for r in records], cls=DecimalEncoder)


def _load_records(data: str) -> Records:
    return tuple(
        ListingRecord(
            name=item["name"],
            slug=item["slug"],
            price=Decimal(item["price"]),
            address=item["address"],
            provider=item["provider"],
        )
        for item in json.loads(data)
    )


class RedisListingCache:
    """Redis-backed listing cache. Redis errors degrade to computing directly."""

    backend = "redis"

    def __init__(self, client: Optional[redis.Redis] = None, ttl_sec: Optional[float] = None):
        self._redis = client
        self.ttl_sec = settings.CACHE_TTL_SEC if ttl_sec is None else ttl_sec

    def get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=1,
            )
        return self._redis

    async def get_or_compute(self, key: ListingKey, compute: Compute) -> Records:
        r = self.get_redis()
        redis_key = _redis_key(key)

        try:
            data = await r.get(redis_key)
            if data is not None:
                logger.debug("Cache hit: %s", redis_key)
                return _load_records(data)
        except (RedisError, ValueError, KeyError) as e:
            logger.warning("Cache get failed: %s", e)

        records = tuple(await compute())

        try:
            # Redis EX takes whole seconds
            await r.set(redis_key, _dump_records(records), ex=max(1, round(self.ttl_sec)))
            logger.debug("Cache set: %s", redis_key)
        except RedisError as e:
            logger.warning("Cache set failed: %s", e)
        return records

    def start_sweeper(self, interval_sec: Optional[float] = None):
        """Redis expires keys itself."""
        return None

    async def close(self):
        """Close Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


def build_cache():
    """Cache backend selected by ``CACHE_BACKEND``."""
    if settings.CACHE_BACKEND == "redis":
        return RedisListingCache()
    return ListingCache()

"""
Single gift page fetch (https://t.me/nft/{slug}).
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from giftfeed.core.config import settings
from giftfeed.services.parsers import GiftDetail, parse_gift_detail

logger = logging.getLogger(__name__)


class GiftDetailError(Exception):
    """The gift page could not be fetched or parsed."""


class GiftDetailFetcher:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, base_url: Optional[str] = None):
        self._client = client
        self.base_url = (base_url or settings.GIFT_PAGE_BASE_URL).rstrip("/")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=settings.GIFT_DETAIL_TIMEOUT_SEC,
                headers={"User-Agent": settings.USER_AGENT},
                follow_redirects=True,
            )
        return self._client

    async def fetch(self, slug: str) -> GiftDetail:
        url = f"{self.base_url}/{quote(slug, safe='')}"
        logger.info("Fetching gift page for '%s': %s", slug, url)

        try:
            resp = await self._get_client().get(url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Gift page request failed for '%s': %s", slug, exc)
            raise GiftDetailError(str(exc)) from exc

        return parse_gift_detail(resp.text)

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

"""
Lightweight listing fetch over plain HTTP.

Uses curl_cffi to present a browser TLS fingerprint. Cheap (tens to low
hundreds of ms) but has no JavaScript, so every 200 body goes through the
challenge page classifier before it is parsed.
"""

import logging
from typing import Optional

from curl_cffi import CurlError
from curl_cffi.const import CurlECode
from curl_cffi.requests import AsyncSession

from giftfeed.core.config import settings
from giftfeed.services.antibot import classify_page
from giftfeed.services.fetchers.base import (
    Blocked,
    FetchOutcome,
    FetchStrategy,
    Success,
    TimedOut,
    TransportError,
)
from giftfeed.services.parsers import parse_listing_rows

logger = logging.getLogger(__name__)

# Status codes anti-bot layers answer with
BLOCK_STATUSES = {403, 429, 503}


def build_headers(referer: str) -> dict[str, str]:
    return {
        "User-Agent": settings.USER_AGENT,
        "Referer": referer,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


class HttpFetcher(FetchStrategy):
    """Direct GET of the listing page, trusted only if it is not a challenge page."""

    name = "http"

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        timeout: Optional[float] = None,
        referer: Optional[str] = None,
    ):
        self._session = session
        self.timeout = timeout or settings.HTTP_FETCH_TIMEOUT_SEC
        self.referer = referer or f"{settings.MARKET_BASE_URL.rstrip('/')}/"

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession(impersonate=settings.IMPERSONATE)
        return self._session

    async def fetch(self, url: str, limit: int, timeout: float) -> FetchOutcome:
        session = self._get_session()
        try:
            resp = await session.get(
                url,
                headers=build_headers(self.referer),
                timeout=timeout,
                allow_redirects=True,
            )
        except CurlError as exc:
            if getattr(exc, "code", None) == CurlECode.OPERATION_TIMEDOUT:
                logger.info("HTTP fetch timed out after %.2fs: %s", timeout, url)
                return TimedOut(after=timeout)
            logger.warning("HTTP fetch failed for %s: %s", url, exc)
            return TransportError(cause=str(exc))

        if resp.status_code in BLOCK_STATUSES:
            logger.info("HTTP fetch blocked (HTTP %d): %s", resp.status_code, url)
            return Blocked(reason=f"HTTP {resp.status_code}")

        if not 200 <= resp.status_code < 300:
            logger.warning("HTTP fetch got HTTP %d: %s", resp.status_code, url)
            return TransportError(cause=f"HTTP {resp.status_code}")

        body = resp.text
        verdict = classify_page(body)
        if not verdict.ok:
            logger.info("HTTP fetch served a challenge page (%s): %s", verdict.reason, url)
            return Blocked(reason=verdict.reason)

        records = parse_listing_rows(body, limit)
        logger.debug("HTTP fetch parsed %d records: %s", len(records), url)
        return Success(records=tuple(records))

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

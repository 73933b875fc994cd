"""
Backoff retry for the side lookups (attributes JSON), never for the listing race.
"""

import asyncio
import logging
from functools import wraps

import httpx

logger = logging.getLogger(__name__)


def _is_transient(exc: httpx.HTTPError) -> bool:
    # 404 for an unknown gift is an answer, not a hiccup
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.TransportError)


def retry_with_backoff(max_retries: int = 1, base_delay: float = 0.2):
    """Retry an httpx coroutine on transport errors, 429 and 5xx, doubling the delay."""

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except httpx.HTTPError as exc:
                    if attempt == max_retries or not _is_transient(exc):
                        raise
                    delay = base_delay * (2 ** attempt)
                    logger.debug(
                        "%s: attempt %d failed (%s), retrying in %.1fs",
                        func.__name__, attempt + 1, exc, delay,
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator

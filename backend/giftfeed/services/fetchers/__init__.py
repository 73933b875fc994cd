"""
Listing fetch strategies.

- HttpFetcher: plain HTTP with a browser fingerprint, fast, often blocked
- RenderFetcher: headless Chromium from a BrowserPool, slow, rarely blocked
"""

from giftfeed.services.fetchers.base import (
    Blocked,
    FetchOutcome,
    FetchStrategy,
    Success,
    TimedOut,
    TransportError,
)
from giftfeed.services.fetchers.browser import BrowserPool, BrowserPoolClosed, RenderFetcher
from giftfeed.services.fetchers.http import HttpFetcher

__all__ = [
    "Blocked",
    "BrowserPool",
    "BrowserPoolClosed",
    "FetchOutcome",
    "FetchStrategy",
    "HttpFetcher",
    "RenderFetcher",
    "Success",
    "TimedOut",
    "TransportError",
]

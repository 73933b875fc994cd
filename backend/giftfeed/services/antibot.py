"""
Challenge page detection for plain HTTP responses.

Without JavaScript the HTTP path can be served an anti-bot interstitial
with status 200. Parsing such a page yields zero rows, which would look
like an empty collection, so the body is checked before it is trusted.
"""

from dataclasses import dataclass
from typing import Optional

from giftfeed.core.config import settings


# Interstitial challenge pages (Cloudflare and similar)
CHALLENGE_MARKERS = (
    "cf-challenge",
    "cf_chl_opt",
    "just a moment...",
    "checking your browser",
    "captcha-delivery",
    "attention required!",
)

# Block pages ask crawlers not to index them
NOINDEX_MARKERS = (
    'name="robots" content="noindex',
    "name='robots' content='noindex",
)

# 1x1 transparent GIF placeholder served on challenge pages
TRACKING_PIXEL_MARKERS = (
    "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP",
    "data:image/gif;base64,R0lGODlhAQABAIAAAP",
)


@dataclass(frozen=True)
class PageVerdict:
    ok: bool
    reason: Optional[str] = None


PAGE_OK = PageVerdict(ok=True)


def classify_page(body: str, min_length: Optional[int] = None) -> PageVerdict:
    """Decide whether ``body`` is a real listing page or a challenge/block page."""
    threshold = settings.MIN_PAGE_LENGTH if min_length is None else min_length

    if body is None or len(body) < threshold:
        size = 0 if body is None else len(body)
        return PageVerdict(ok=False, reason=f"body too short ({size} < {threshold})")

    lowered = body.lower()
    for marker in CHALLENGE_MARKERS:
        if marker in lowered:
            return PageVerdict(ok=False, reason=f"challenge marker '{marker}'")

    for marker in NOINDEX_MARKERS:
        if marker in lowered:
            return PageVerdict(ok=False, reason="robots noindex")

    for marker in TRACKING_PIXEL_MARKERS:
        if marker in body:
            return PageVerdict(ok=False, reason="challenge tracking pixel")

    return PAGE_OK

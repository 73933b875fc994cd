"""
Attribute filters for collection listing pages.

The marketplace accepts repeated ``attrs=<Trait>___<value>`` query params.
Encoding is canonical (fixed trait order, normalized values) so the same
filter set always maps to the same URL and cache key.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

# Trait name on the marketplace -> ListingFilter field, in encoding order
FILTER_TRAITS = (
    ("Backdrop", "backdrop"),
    ("Model", "model"),
    ("Symbol", "symbol"),
)

# Sentinel the frontend sends for "no filter"
ALL_SENTINEL = "all"

COLLECTION_QUERY = (
    "market_filter_by=on_chain&tab=nfts&view=list&query="
    "&sort_by=price_asc&filter_by=sale"
)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ListingFilter:
    """Optional backdrop/model/symbol filters for a collection query."""

    backdrop: Optional[str] = None
    model: Optional[str] = None
    symbol: Optional[str] = None


def normalize_filter_value(value) -> str:
    """Return the normalized value, or "" when the filter is inactive."""
    if not isinstance(value, str):
        return ""
    normalized = value.strip().lower()
    if normalized == ALL_SENTINEL:
        return ""
    return normalized


def encode_filters(filters: ListingFilter) -> str:
    """Encode active filters as ``attrs=...`` params joined by ``&``."""
    params = []
    for trait, field_name in FILTER_TRAITS:
        value = normalize_filter_value(getattr(filters, field_name, None))
        if value:
            params.append(f"attrs={trait}___{_WHITESPACE_RE.sub('+', value)}")
    return "&".join(params)


def build_collection_url(base_url: str, collection: str, filters: ListingFilter) -> str:
    """Full listing page URL for a collection, cheapest on-sale items first."""
    url = f"{base_url.rstrip('/')}/collection/{quote(collection, safe='')}/?{COLLECTION_QUERY}"
    attrs = encode_filters(filters)
    if attrs:
        url = f"{url}&{attrs}"
    return url

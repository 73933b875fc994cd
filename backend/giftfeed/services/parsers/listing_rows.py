"""
Collection listing page parser.

Each for-sale NFT is a <tr> carrying four markers:
- an element with a ``data-nft-price`` attribute (price in TON)
- an element with a ``data-nft-address`` attribute (on-chain address)
- ``div.table-cell-value`` (display name, "Crystal Ball #123")
- ``div.table-cell-status-thin`` (marketplace, "Getgems")

Parsing is best-effort: incomplete rows are skipped, never raised on.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from bs4 import BeautifulSoup

from giftfeed.core.config import settings
from giftfeed.services.normalization import slugify
from giftfeed.services.parsers.base import ListingRecord

logger = logging.getLogger(__name__)

PRICE_ATTR = "data-nft-price"
ADDRESS_ATTR = "data-nft-address"
NAME_CLASS = "table-cell-value"
PROVIDER_CLASS = "table-cell-status-thin"


def parse_listing_rows(
    html: str,
    limit: int,
    allowed_providers: Optional[Iterable[str]] = None,
) -> list[ListingRecord]:
    """
    Extract up to ``limit`` valid listing records, in document order.

    Stops scanning as soon as ``limit`` records are collected.
    """
    if not html or limit <= 0:
        return []

    allowed = set(allowed_providers if allowed_providers is not None else settings.ALLOWED_PROVIDERS)
    soup = BeautifulSoup(html, "html.parser")

    records: list[ListingRecord] = []
    skipped = 0

    for row in soup.find_all("tr"):
        if len(records) >= limit:
            break
        record = _parse_row(row, allowed)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    logger.debug("Parsed %d listing rows (%d skipped)", len(records), skipped)
    return records


def _parse_row(row, allowed: set[str]) -> Optional[ListingRecord]:
    price_el = row.find(attrs={PRICE_ATTR: True})
    addr_el = row.find(attrs={ADDRESS_ATTR: True})
    name_el = row.find("div", class_=NAME_CLASS)
    provider_el = row.find("div", class_=PROVIDER_CLASS)

    price = _to_price(price_el.get(PRICE_ATTR)) if price_el else None
    address = (addr_el.get(ADDRESS_ATTR) or "").strip() if addr_el else ""
    name = name_el.get_text(strip=True) if name_el else ""
    provider = provider_el.get_text(strip=True) if provider_el else ""

    if price is None or not address or not name or provider not in allowed:
        return None

    slug = slugify(name)
    if not slug:
        return None

    return ListingRecord(
        name=name,
        slug=slug,
        price=price,
        address=address,
        provider=provider,
    )


def _to_price(raw) -> Optional[Decimal]:
    """'12.5' -> Decimal('12.5'); None for junk (including '1,5'), NaN/inf and non-positive values."""
    if not isinstance(raw, str):
        return None
    try:
        price = Decimal(raw.strip())
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price

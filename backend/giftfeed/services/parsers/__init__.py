"""
HTML parsers for marketplace pages.

- listing_rows: collection listing page -> ListingRecord rows
- gift_detail: t.me/nft gift page -> GiftDetail
"""

from giftfeed.services.parsers.base import (
    UNKNOWN_ATTRIBUTE,
    AttributeValue,
    EnrichedListing,
    GiftAttributes,
    GiftDetail,
    GiftOwner,
    ListingRecord,
)
from giftfeed.services.parsers.gift_detail import parse_gift_detail
from giftfeed.services.parsers.listing_rows import parse_listing_rows

__all__ = [
    "UNKNOWN_ATTRIBUTE",
    "AttributeValue",
    "EnrichedListing",
    "GiftAttributes",
    "GiftDetail",
    "GiftOwner",
    "ListingRecord",
    "parse_gift_detail",
    "parse_listing_rows",
]

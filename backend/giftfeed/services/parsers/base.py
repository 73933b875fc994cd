"""
Record types produced by the page parsers.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

UNKNOWN_ATTRIBUTE = "Unknown"


@dataclass(frozen=True)
class ListingRecord:
    """One for-sale NFT row from a collection listing page."""

    name: str  # "Crystal Ball #123"
    slug: str  # "crystal-ball-123"
    price: Decimal  # TON
    address: str  # on-chain NFT address
    provider: str  # "Marketapp", "Getgems", "Fragment"


@dataclass(frozen=True)
class GiftAttributes:
    """Model/backdrop/symbol traits of a single gift."""

    model: str = UNKNOWN_ATTRIBUTE
    backdrop: str = UNKNOWN_ATTRIBUTE
    symbol: str = UNKNOWN_ATTRIBUTE


@dataclass(frozen=True)
class EnrichedListing:
    """Listing row with its gift attributes attached."""

    record: ListingRecord
    attributes: GiftAttributes


@dataclass(frozen=True)
class AttributeValue:
    """An attribute cell on a gift page: trait name plus rarity mark."""

    name: Optional[str]
    value: Optional[str]  # e.g. "1.2%"


@dataclass(frozen=True)
class GiftOwner:
    name: Optional[str]
    link: Optional[str]


@dataclass(frozen=True)
class GiftDetail:
    """Parsed attribute table of a t.me/nft gift page."""

    owner: Optional[GiftOwner] = None
    model: Optional[AttributeValue] = None
    backdrop: Optional[AttributeValue] = None
    symbol: Optional[AttributeValue] = None
    signature: Optional[str] = None

"""
Listing endpoint request/response schemas.
"""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    PlainSerializer,
    PositiveInt,
    StrictStr,
    field_validator,
)

from giftfeed.core.config import settings
from giftfeed.services.filters import ListingFilter
from giftfeed.services.parsers.base import EnrichedListing, ListingRecord

# TON amount, kept as Decimal internally and sent as a JSON number
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ListingRequest(BaseModel):
    """POST /listings body. ``nft`` is accepted as a legacy name for ``collection``."""

    collection: StrictStr = Field(
        min_length=1,
        validation_alias=AliasChoices("collection", "nft"),
    )
    backdrop: Optional[str] = None
    model: Optional[str] = None
    symbol: Optional[str] = None
    limit: PositiveInt = settings.DEFAULT_LIMIT
    enrich: bool = False

    @field_validator("backdrop", "model", "symbol", mode="before")
    @classmethod
    def _non_string_filter_is_inactive(cls, v):
        return v if isinstance(v, str) else None

    def to_filter(self) -> ListingFilter:
        return ListingFilter(backdrop=self.backdrop, model=self.model, symbol=self.symbol)


class ListingOut(BaseModel):
    """One for-sale NFT."""

    name: str
    slug: str
    price: Price
    address: str
    provider: str

    @classmethod
    def from_record(cls, record: ListingRecord) -> "ListingOut":
        return cls(
            name=record.name,
            slug=record.slug,
            price=record.price,
            address=record.address,
            provider=record.provider,
        )


class EnrichedListingOut(ListingOut):
    """Listing with gift attributes ("Unknown" when the lookup failed)."""

    model: str
    backdrop: str
    symbol: str

    @classmethod
    def from_enriched(cls, item: EnrichedListing) -> "EnrichedListingOut":
        record, attrs = item.record, item.attributes
        return cls(
            name=record.name,
            slug=record.slug,
            price=record.price,
            address=record.address,
            provider=record.provider,
            model=attrs.model,
            backdrop=attrs.backdrop,
            symbol=attrs.symbol,
        )


class ErrorOut(BaseModel):
    error: str
    detail: Optional[str] = None

"""
Gift detail endpoint schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field, StrictStr

from giftfeed.services.parsers.base import AttributeValue, GiftDetail


class GiftDetailRequest(BaseModel):
    slug: StrictStr = Field(min_length=1)


class AttributeOut(BaseModel):
    """Trait name plus its rarity mark, e.g. {"name": "Crystal Ball", "value": "1.2%"}."""

    name: Optional[str] = None
    value: Optional[str] = None


class OwnerOut(BaseModel):
    name: Optional[str] = None
    link: Optional[str] = None


class GiftDetailOut(BaseModel):
    owner: Optional[OwnerOut] = None
    model: Optional[AttributeOut] = None
    backdrop: Optional[AttributeOut] = None
    symbol: Optional[AttributeOut] = None
    signature: Optional[str] = None

    @classmethod
    def from_detail(cls, detail: GiftDetail) -> "GiftDetailOut":
        def attr(value: Optional[AttributeValue]) -> Optional[AttributeOut]:
            if value is None:
                return None
            return AttributeOut(name=value.name, value=value.value)

        owner = None
        if detail.owner is not None:
            owner = OwnerOut(name=detail.owner.name, link=detail.owner.link)

        return cls(
            owner=owner,
            model=attr(detail.model),
            backdrop=attr(detail.backdrop),
            symbol=attr(detail.symbol),
            signature=detail.signature,
        )

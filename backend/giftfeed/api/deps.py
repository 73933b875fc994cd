"""
Route dependencies. Instances live on ``app.state`` (created in the lifespan).
"""

from fastapi import Request

from giftfeed.services.gift_detail import GiftDetailFetcher
from giftfeed.services.listing_service import ListingService


def get_listing_service(request: Request) -> ListingService:
    return request.app.state.listing_service


def get_gift_fetcher(request: Request) -> GiftDetailFetcher:
    return request.app.state.gift_fetcher

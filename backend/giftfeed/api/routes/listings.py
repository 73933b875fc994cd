"""
Collection listings endpoint.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from giftfeed.api.deps import get_listing_service
from giftfeed.schemas.listing import EnrichedListingOut, ErrorOut, ListingOut, ListingRequest
from giftfeed.services.listing_service import ListingService
from giftfeed.services.parsers.base import EnrichedListing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/listings", tags=["listings"])


@router.post(
    "",
    response_model=None,
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def list_collection(
    payload: ListingRequest,
    service: ListingService = Depends(get_listing_service),
):
    """
    Cheapest for-sale NFTs of a collection, optionally filtered by
    backdrop/model/symbol and enriched with gift attributes.

    404 when nothing was found (or every fetch strategy was blocked).
    """
    try:
        items = await service.get_listings(
            payload.collection,
            payload.to_filter(),
            payload.limit,
            enrich=payload.enrich,
        )
    except Exception as exc:
        logger.exception("Listing request failed for '%s'", payload.collection)
        return JSONResponse(
            status_code=500,
            content={"error": "Server error", "detail": str(exc)},
        )

    if not items:
        return JSONResponse(
            status_code=404,
            content={"error": f"No NFTs found for collection '{payload.collection}'."},
        )

    if isinstance(items[0], EnrichedListing):
        return [EnrichedListingOut.from_enriched(item) for item in items]
    return [ListingOut.from_record(item) for item in items]

"""
Single gift detail endpoint.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from giftfeed.api.deps import get_gift_fetcher
from giftfeed.schemas.gift import GiftDetailOut, GiftDetailRequest
from giftfeed.schemas.listing import ErrorOut
from giftfeed.services.gift_detail import GiftDetailError, GiftDetailFetcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gift", tags=["gifts"])


@router.post(
    "",
    response_model=GiftDetailOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def get_gift(
    payload: GiftDetailRequest,
    fetcher: GiftDetailFetcher = Depends(get_gift_fetcher),
):
    """Owner, model/backdrop/symbol with rarity, and signature of one gift."""
    try:
        detail = await fetcher.fetch(payload.slug)
    except GiftDetailError as exc:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch or parse", "detail": str(exc)},
        )
    except Exception as exc:
        logger.exception("Gift detail failed for '%s'", payload.slug)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch or parse", "detail": str(exc)},
        )

    return GiftDetailOut.from_detail(detail)

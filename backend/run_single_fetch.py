"""Run a single listing fetch against the live marketplace."""

import asyncio
import logging
import sys

from giftfeed.services.filters import ListingFilter
from giftfeed.services.listing_service import ListingService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
# Only show our resolver logs, silence transport noise
logging.getLogger("curl_cffi").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def main(collection: str, limit: int):
    """Resolve one collection and print the cheapest listings."""
    service = ListingService.from_settings()
    await service.start()
    try:
        listings = await service.get_listings(collection, ListingFilter(), limit, enrich=True)
    finally:
        await service.close()

    logger.info("=" * 60)
    logger.info(f"{collection}: {len(listings)} listings")
    logger.info("=" * 60)
    for item in listings:
        record, attrs = item.record, item.attributes
        logger.info(
            f"  {record.name:28s} {record.price:>10} TON  {record.provider:10s} "
            f"{attrs.model} / {attrs.backdrop} / {attrs.symbol}"
        )


if __name__ == "__main__":
    name = sys.argv[1] if len(sys.argv) > 1 else "EQAOQdwdw8kGftJCSFgOErM1mBjYPe4DBPq8-AhF6vr9si5N"
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 5
    asyncio.run(main(name, count))

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from giftfeed.api.routes.gifts import router as gifts_router
from giftfeed.api.routes.listings import router as listings_router
from giftfeed.core.config import settings
from giftfeed.services.gift_detail import GiftDetailFetcher
from giftfeed.services.listing_service import ListingService

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: browser pool, HTTP session, cache sweeper
    listing_service = ListingService.from_settings()
    await listing_service.start()
    app.state.listing_service = listing_service
    app.state.gift_fetcher = GiftDetailFetcher()
    yield
    # Shutdown: release browser and connections
    await app.state.gift_fetcher.close()
    await listing_service.close()


app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(listings_router, prefix="/api/v1")
app.include_router(gifts_router, prefix="/api/v1")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors (400), never retried."""
    errors = exc.errors()
    field = ".".join(str(p) for p in errors[0].get("loc", ())[1:]) if errors else ""
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": f"Field \"{field}\": {message}" if field else message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.get("/health")
async def health(request: Request):
    service = getattr(request.app.state, "listing_service", None)
    return {
        "status": "ok",
        "render": bool(service and service.render_enabled),
        "cache": service.cache.backend if service else None,
    }

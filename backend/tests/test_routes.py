import pytest
from fastapi.testclient import TestClient

from giftfeed.api.deps import get_gift_fetcher, get_listing_service
from giftfeed.main import app
from giftfeed.services.cache import ListingCache
from giftfeed.services.fetchers import HttpFetcher
from giftfeed.services.gift_detail import GiftDetailError
from giftfeed.services.listing_service import ListingService
from giftfeed.services.parsers.base import (
    AttributeValue,
    EnrichedListing,
    GiftAttributes,
    GiftDetail,
    GiftOwner,
)
from giftfeed.services.resolver import ListingResolver


class FakeResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, page: str) -> None:
        self.page = page
        self.urls: list[str] = []

    async def get(self, url, **kwargs):
        self.urls.append(url)
        return FakeResponse(200, self.page)

    async def close(self) -> None:
        pass


class FakeAttributes:
    async def enrich(self, records):
        return [EnrichedListing(record=r, attributes=GiftAttributes(model="Oracle")) for r in records]

    async def close(self):
        pass


def make_service(page: str):
    session = FakeSession(page)
    resolver = ListingResolver([HttpFetcher(session=session)], base_url="https://m.test")
    service = ListingService(resolver=resolver, cache=ListingCache(ttl_sec=5), attributes=FakeAttributes())
    return service, session


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_service(service):
    app.dependency_overrides[get_listing_service] = lambda: service


def test_limit_two_returns_first_two_valid_rows(client, five_valid_one_invalid_page):
    service, session = make_service(five_valid_one_invalid_page)
    use_service(service)

    resp = client.post("/api/v1/listings", json={"collection": "X", "limit": 2})

    assert resp.status_code == 200
    assert resp.json() == [
        {
            "name": "Crystal Ball #1",
            "slug": "crystal-ball-1",
            "price": 10.0,
            "address": "EQA1",
            "provider": "Getgems",
        },
        {
            "name": "Crystal Ball #3",
            "slug": "crystal-ball-3",
            "price": 11.5,
            "address": "EQA3",
            "provider": "Marketapp",
        },
    ]
    assert session.urls[0].startswith("https://m.test/collection/X/?")


def test_no_valid_rows_is_404(client, empty_listing_page):
    service, _ = make_service(empty_listing_page)
    use_service(service)

    resp = client.post("/api/v1/listings", json={"collection": "X", "limit": 5})

    assert resp.status_code == 404
    assert "error" in resp.json()


def test_missing_collection_is_400_without_fetch(client, five_valid_one_invalid_page):
    service, session = make_service(five_valid_one_invalid_page)
    use_service(service)

    resp = client.post("/api/v1/listings", json={"limit": 2})

    assert resp.status_code == 400
    assert "collection" in resp.json()["error"]
    assert session.urls == []


@pytest.mark.parametrize(
    "body",
    [{"collection": 123}, {"collection": ""}, {"collection": "X", "limit": 0}, {"collection": "X", "limit": -1}],
)
def test_malformed_body_is_400(client, five_valid_one_invalid_page, body):
    service, session = make_service(five_valid_one_invalid_page)
    use_service(service)

    assert client.post("/api/v1/listings", json=body).status_code == 400
    assert session.urls == []


def test_get_is_405(client):
    resp = client.get("/api/v1/listings")
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method Not Allowed"}


def test_legacy_nft_field_and_filters(client, five_valid_one_invalid_page):
    service, session = make_service(five_valid_one_invalid_page)
    use_service(service)

    resp = client.post(
        "/api/v1/listings",
        json={"nft": "plushpepe", "backdrop": "Onyx Black", "model": "all", "symbol": 7, "limit": 1},
    )

    assert resp.status_code == 200
    assert session.urls[0].endswith("&attrs=Backdrop___onyx+black")


def test_repeated_request_is_served_from_cache(client, five_valid_one_invalid_page):
    service, session = make_service(five_valid_one_invalid_page)
    use_service(service)

    first = client.post("/api/v1/listings", json={"collection": "X", "limit": 3})
    second = client.post("/api/v1/listings", json={"collection": "X", "limit": 3})

    assert first.json() == second.json()
    assert len(session.urls) == 1


def test_enrich_adds_attributes(client, five_valid_one_invalid_page):
    service, _ = make_service(five_valid_one_invalid_page)
    use_service(service)

    resp = client.post("/api/v1/listings", json={"collection": "X", "limit": 1, "enrich": True})

    assert resp.status_code == 200
    item = resp.json()[0]
    assert item["model"] == "Oracle"
    assert item["backdrop"] == "Unknown"
    assert item["price"] == 10.0


def test_unexpected_failure_is_500(client):
    class Exploding:
        async def get_listings(self, *args, **kwargs):
            raise RuntimeError("boom")

    use_service(Exploding())

    resp = client.post("/api/v1/listings", json={"collection": "X"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error", "detail": "boom"}


class FakeGiftFetcher:
    def __init__(self, detail=None, error=None) -> None:
        self.detail = detail
        self.error = error
        self.slugs = []

    async def fetch(self, slug):
        self.slugs.append(slug)
        if self.error is not None:
            raise self.error
        return self.detail


def test_gift_detail(client):
    detail = GiftDetail(
        owner=GiftOwner(name="Alice", link="https://t.me/alice"),
        model=AttributeValue(name="Oracle", value="1.5%"),
        signature="Signed by Bob",
    )
    fetcher = FakeGiftFetcher(detail=detail)
    app.dependency_overrides[get_gift_fetcher] = lambda: fetcher

    resp = client.post("/api/v1/gift", json={"slug": "CrystalBall-123"})

    assert resp.status_code == 200
    assert resp.json() == {
        "owner": {"name": "Alice", "link": "https://t.me/alice"},
        "model": {"name": "Oracle", "value": "1.5%"},
        "backdrop": None,
        "symbol": None,
        "signature": "Signed by Bob",
    }
    assert fetcher.slugs == ["CrystalBall-123"]


def test_gift_detail_missing_slug_is_400(client):
    fetcher = FakeGiftFetcher()
    app.dependency_overrides[get_gift_fetcher] = lambda: fetcher

    assert client.post("/api/v1/gift", json={}).status_code == 400
    assert fetcher.slugs == []


def test_gift_detail_fetch_failure_is_500(client):
    app.dependency_overrides[get_gift_fetcher] = lambda: FakeGiftFetcher(error=GiftDetailError("HTTP 502"))

    resp = client.post("/api/v1/gift", json={"slug": "x-1"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch or parse", "detail": "HTTP 502"}


def test_health_without_lifespan(client):
    assert client.get("/health").json() == {"status": "ok", "render": False, "cache": None}

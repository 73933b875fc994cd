from decimal import Decimal

from conftest import listing_page, listing_row

from giftfeed.services.parsers import parse_listing_rows

ALLOWED = {"Marketapp", "Getgems", "Fragment"}


def test_parses_rows_in_document_order(five_valid_one_invalid_page):
    records = parse_listing_rows(five_valid_one_invalid_page, limit=10)

    assert [r.name for r in records] == [
        "Crystal Ball #1",
        "Crystal Ball #3",
        "Crystal Ball #4",
        "Crystal Ball #5",
        "Crystal Ball #6",
    ]
    first = records[0]
    assert first.slug == "crystal-ball-1"
    assert first.price == Decimal("10")
    assert first.address == "EQA1"
    assert first.provider == "Getgems"


def test_limit_bounds_output(five_valid_one_invalid_page):
    records = parse_listing_rows(five_valid_one_invalid_page, limit=2)
    assert [r.address for r in records] == ["EQA1", "EQA3"]


def test_stops_scanning_once_limit_reached(monkeypatch, five_valid_one_invalid_page):
    from giftfeed.services.parsers import listing_rows

    calls = []
    original = listing_rows._parse_row

    def counting(row, allowed):
        calls.append(row)
        return original(row, allowed)

    monkeypatch.setattr(listing_rows, "_parse_row", counting)
    parse_listing_rows(five_valid_one_invalid_page, limit=2)

    # rows 1, 2 (invalid) and 3; rows 4-6 are never looked at
    assert len(calls) == 3


def test_invalid_rows_are_skipped_not_fatal():
    page = listing_page(
        [
            listing_row(price="0"),
            listing_row(price="-3"),
            listing_row(price="abc"),
            listing_row(price="NaN"),
            listing_row(address=None),
            listing_row(name=None),
            listing_row(provider="Portals"),
            listing_row(provider=None),
            listing_row(name="Lol Pop #9", price="1250.5", address="EQok", provider="Fragment"),
        ]
    )
    records = parse_listing_rows(page, limit=10)

    assert len(records) == 1
    assert records[0].price == Decimal("1250.5")
    assert records[0].slug == "lol-pop-9"


def test_every_record_satisfies_invariants(five_valid_one_invalid_page):
    for limit in range(1, 8):
        records = parse_listing_rows(five_valid_one_invalid_page, limit=limit)
        assert len(records) <= limit
        for r in records:
            assert r.provider in ALLOWED
            assert r.price > 0
            assert r.name and r.slug and r.address


def test_custom_allow_list():
    page = listing_page([listing_row(provider="Portals"), listing_row(provider="Getgems")])
    records = parse_listing_rows(page, limit=10, allowed_providers=["Portals"])
    assert [r.provider for r in records] == ["Portals"]


def test_malformed_markup_yields_empty_list():
    assert parse_listing_rows("", limit=5) == []
    assert parse_listing_rows("<<<not html at all", limit=5) == []
    assert parse_listing_rows("<tr><td data-nft-price=", limit=5) == []


def test_non_positive_limit_yields_empty_list(five_valid_one_invalid_page):
    assert parse_listing_rows(five_valid_one_invalid_page, limit=0) == []


def test_comma_prices_are_rejected_not_misread():
    page = listing_page(
        [
            listing_row(name="Lol Pop #1", price="1,5", address="EQcomma"),
            listing_row(name="Lol Pop #2", price="1,250.5", address="EQgrouped"),
            listing_row(name="Lol Pop #3", price=" 2.75 ", address="EQdot"),
        ]
    )
    records = parse_listing_rows(page, limit=10)

    assert [(r.address, r.price) for r in records] == [("EQdot", Decimal("2.75"))]

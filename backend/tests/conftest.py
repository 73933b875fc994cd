import pytest

# Filler that pushes fixture pages past the challenge-page length threshold
_FILLER = "<p>" + "Telegram gifts on the TON blockchain. " * 60 + "</p>"


def listing_row(name="Crystal Ball #1", price="10.5", address="EQAaddr1", provider="Getgems") -> str:
    cells = []
    if name is not None:
        cells.append(f'<td><div class="table-cell-value tm-value">{name}</div></td>')
    if price is not None:
        cells.append(f'<td><span data-nft-price="{price}">{price} TON</span></td>')
    if address is not None:
        cells.append(f'<td><span data-nft-address="{address}"></span></td>')
    if provider is not None:
        cells.append(f'<td><div class="table-cell-status-thin tm-status-market">{provider}</div></td>')
    return "<tr>" + "".join(cells) + "</tr>"


def listing_page(rows) -> str:
    return (
        "<html><head><title>Collection</title></head><body>"
        + _FILLER
        + "<table><tbody>"
        + "".join(rows)
        + "</tbody></table></body></html>"
    )


@pytest.fixture
def five_valid_one_invalid_page() -> str:
    rows = [
        listing_row("Crystal Ball #1", "10", "EQA1", "Getgems"),
        listing_row("Crystal Ball #2", None, "EQA2", "Getgems"),  # missing price
        listing_row("Crystal Ball #3", "11.5", "EQA3", "Marketapp"),
        listing_row("Crystal Ball #4", "12", "EQA4", "Fragment"),
        listing_row("Crystal Ball #5", "13", "EQA5", "Getgems"),
        listing_row("Crystal Ball #6", "14", "EQA6", "Marketapp"),
    ]
    return listing_page(rows)


@pytest.fixture
def empty_listing_page() -> str:
    return listing_page([listing_row("Crystal Ball #7", "0", "EQA7", "Getgems")])

"""
t.me/nft gift page parser.

URL pattern: https://t.me/nft/{slug}
The page holds one attribute table:

    <tr><th>Model</th><td>Crystal Ball <mark>1.2%</mark></td></tr>
    <tr><th>Owner</th><td><a href="https://t.me/alice"><span>Alice</span></a></td></tr>
    ...
    <tr><th class="footer">signature text</th></tr>
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from giftfeed.services.parsers.base import AttributeValue, GiftDetail, GiftOwner

logger = logging.getLogger(__name__)

OWNER_LABEL = "Owner"
OWNER_LINK_PREFIX = "https://t.me/"


def parse_gift_detail(html: str) -> GiftDetail:
    """Extract owner, model/backdrop/symbol and signature from a gift page."""
    soup = BeautifulSoup(html or "", "html.parser")

    attrs: dict[str, AttributeValue] = {}
    owner: Optional[GiftOwner] = None

    for row in soup.find_all("tr"):
        th = row.find("th")
        td = row.find("td")
        if th is None:
            continue
        label = th.get_text(strip=True)
        if not label:
            continue

        if label == OWNER_LABEL and owner is None and td is not None:
            owner = _parse_owner(td)

        attrs[label] = _parse_attribute(td)

    footer = soup.find("th", class_="footer")
    signature = footer.get_text(strip=True) if footer else None

    detail = GiftDetail(
        owner=owner,
        model=attrs.get("Model"),
        backdrop=attrs.get("Backdrop"),
        symbol=attrs.get("Symbol"),
        signature=signature or None,
    )
    if detail.model is None:
        logger.warning("Gift page has no Model row")
    return detail


def _parse_attribute(td) -> AttributeValue:
    """Cell text without the <mark> is the trait name, the <mark> is its rarity."""
    if td is None:
        return AttributeValue(name=None, value=None)

    mark = td.find("mark")
    value = mark.get_text(strip=True) if mark else None
    if mark is not None:
        mark.extract()
    name = td.get_text(strip=True)
    return AttributeValue(name=name or None, value=value or None)


def _parse_owner(td) -> Optional[GiftOwner]:
    link_el = td.find("a", href=lambda h: h and h.startswith(OWNER_LINK_PREFIX))
    if link_el is None:
        return None
    span = link_el.find("span")
    name = span.get_text(strip=True) if span else ""
    link = link_el.get("href") or ""
    if not name and not link:
        return None
    return GiftOwner(name=name or None, link=link or None)

"""Bazaar page source — listing prices scraped from a player's bazaar page."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from hawkeye.models.features import MarketListings

if TYPE_CHECKING:
    from hawkeye.utils.http import AsyncHttpClient

NO_BAZAAR_RE = re.compile(r"doesn[’']?t have a bazaar|no bazaar", re.IGNORECASE)
PRICE_RE = re.compile(r"\$\s*([\d,]+)")


def extract_prices(html: str) -> list[int]:
    """All ``$1,234``-style amounts on the page, in page order."""
    prices = []
    for m in PRICE_RE.finditer(html):
        digits = m.group(1).replace(",", "")
        if digits:
            prices.append(int(digits))
    return prices


def parse_bazaar_page(html: str) -> MarketListings:
    if NO_BAZAAR_RE.search(html):
        return MarketListings(has_listing=False)
    return MarketListings(has_listing=True, prices=extract_prices(html))


class BazaarPageSource:
    """MarketSource that reads ``bazaar.php?userID=<id>``."""

    def __init__(
        self,
        http: AsyncHttpClient,
        bazaar_url: str = "https://www.torn.com/bazaar.php",
    ) -> None:
        self._http = http
        self.bazaar_url = bazaar_url

    async def fetch_listings(self, target_id: str) -> MarketListings:
        html = await self._http.fetch_text(self.bazaar_url, params={"userID": target_id})
        return parse_bazaar_page(html)

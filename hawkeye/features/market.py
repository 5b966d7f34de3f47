"""Bazaar listing aggregation — a liquidity proxy robust to outliers."""

from __future__ import annotations

from collections.abc import Iterable

from hawkeye.models.features import MarketListings, MarketSignals

MIN_PRICE = 1_000
MAX_PRICE = 250_000_000
MAX_LISTINGS = 20


def listing_value(prices: Iterable[int]) -> int:
    """Sum of the 20 cheapest prices strictly between 1,000 and 250,000,000."""
    plausible = sorted(p for p in prices if MIN_PRICE < p < MAX_PRICE)
    return sum(plausible[:MAX_LISTINGS])


def market_signals(listings: MarketListings) -> MarketSignals:
    if not listings.has_listing:
        return MarketSignals()
    return MarketSignals(
        has_market_listing=True,
        market_listing_value=listing_value(listings.prices),
    )

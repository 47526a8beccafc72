from homepick.services.filters.listing_filter import (
    compute_visible_listings,
    comparable_price,
    match_category,
    match_search,
    match_trade_type,
    match_price,
    match_area,
)

__all__ = [
    "compute_visible_listings",
    "comparable_price",
    "match_category",
    "match_search",
    "match_trade_type",
    "match_price",
    "match_area",
]

"""Browse filter: derives the visible listing subset from the filter criteria."""

import logging
from typing import Iterable, List, Sequence

from homepick.schemas.listing import ALL, FilterCriteria

logger = logging.getLogger(__name__)


def _value(listing, field: str) -> str:
    raw = getattr(listing, field, None)
    return str(getattr(raw, "value", raw) or "")


def _number(listing, field: str) -> float:
    """Numeric field, missing or null counted as zero."""
    raw = getattr(listing, field, None)
    try:
        return float(raw or 0)
    except (TypeError, ValueError):
        logger.warning(f"Listing {getattr(listing, 'id', '?')}: non-numeric {field} {raw!r}, treating as 0")
        return 0.0


def _in_range(value: float, low: float, high: float) -> bool:
    if low and value < low:
        return False
    if high and value > high:
        return False
    return True


def comparable_price(listing) -> float:
    """Deposit for MONTHLY listings, the price field for everything else."""
    if _value(listing, "trade_type") == "MONTHLY":
        return _number(listing, "deposit")
    return _number(listing, "price")


def match_category(listing, criteria: FilterCriteria) -> bool:
    return criteria.category == ALL or _value(listing, "type") == criteria.category


def match_search(listing, criteria: FilterCriteria) -> bool:
    """Case-sensitive substring match on title, location or any feature tag."""
    term = criteria.search
    if not term:
        return True
    if term in (getattr(listing, "title", None) or ""):
        return True
    if term in (getattr(listing, "location", None) or ""):
        return True
    return any(term in tag for tag in (getattr(listing, "features", None) or []))


def match_trade_type(listing, criteria: FilterCriteria) -> bool:
    return criteria.trade_type == ALL or _value(listing, "trade_type") == criteria.trade_type


def match_price(listing, criteria: FilterCriteria) -> bool:
    return _in_range(comparable_price(listing), criteria.price_min, criteria.price_max)


def match_area(listing, criteria: FilterCriteria) -> bool:
    return _in_range(_number(listing, "area"), criteria.area_min, criteria.area_max)


PREDICATES = (match_category, match_search, match_trade_type, match_price, match_area)


def compute_visible_listings(all_listings: Iterable, criteria: FilterCriteria) -> List:
    """
    Apply every criterion as an AND filter.

    The input order (newest first, as the store returns it) is preserved, so
    running the result through the same criteria again returns it unchanged.
    """
    listings: Sequence = list(all_listings)
    visible = [
        listing for listing in listings
        if all(predicate(listing, criteria) for predicate in PREDICATES)
    ]
    logger.debug(f"Filter {criteria.model_dump()}: {len(visible)}/{len(listings)} listings visible")
    return visible

"""
Korean won price formatting.
Amounts are plain won. Values of 1억 (100,000,000) and above are split into an
억 part and a 만 (10,000) remainder, e.g. 123,456,780 -> "1억 2,345만원".
"""

from typing import Optional

EOK = 100_000_000
MAN = 10_000


def format_korean_price(amount: Optional[float]) -> str:
    """Render a won amount using the 억 / 만원 convention."""
    price = int(amount or 0)
    if price == 0:
        return "0원"

    eok_unit = price // EOK
    remainder = price % EOK
    man_unit = remainder // MAN

    parts = []
    if eok_unit > 0:
        parts.append(f"{eok_unit}억")
    if man_unit > 0:
        parts.append(f"{man_unit:,}만원")
    elif eok_unit == 0:
        parts.append(f"{price:,}원")
    return " ".join(parts)


def format_full_price(trade_type: str, price: Optional[float] = None,
                      deposit: Optional[float] = None, monthly_rent: Optional[float] = None) -> str:
    """Price line for list rows and detail views."""
    if str(getattr(trade_type, "value", trade_type)) == "MONTHLY":
        return f"보증금 {format_korean_price(deposit)} / 월 {format_korean_price(monthly_rent)}"
    return format_korean_price(price)


def marker_label(listing) -> str:
    """Short price label drawn on a map marker."""
    trade_type = str(getattr(listing.trade_type, "value", listing.trade_type))
    if trade_type == "MONTHLY":
        return f"월 {format_korean_price(listing.monthly_rent)}"
    return format_korean_price(listing.price)

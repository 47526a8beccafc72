from homepick.models.listing import Listing, PropertyType, TradeType
from homepick.models.news import NewsArticle, NewsCategory

__all__ = ["Listing", "PropertyType", "TradeType", "NewsArticle", "NewsCategory"]

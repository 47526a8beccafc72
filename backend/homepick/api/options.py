from fastapi import APIRouter

from homepick.models.listing import PROPERTY_TYPE_LABELS, TRADE_TYPE_LABELS
from homepick.models.news import NEWS_CATEGORY_LABELS

router = APIRouter()


@router.get("")
def get_options():
    """Select-box options (value + Korean label) for forms and filter bars."""
    return {
        "property_types": [{"value": k.value, "label": v} for k, v in PROPERTY_TYPE_LABELS.items()],
        "trade_types": [{"value": k.value, "label": v} for k, v in TRADE_TYPE_LABELS.items()],
        "news_categories": [{"value": k.value, "label": v} for k, v in NEWS_CATEGORY_LABELS.items()],
    }

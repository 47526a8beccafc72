import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from homepick.config import settings
from homepick.services.external.kakao_local import KakaoLocalClient, bounds_for, get_kakao_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/config")
def get_map_config():
    """Initial map center and zoom level for the client widget."""
    return {
        "center": {"lat": settings.map_default_lat, "lng": settings.map_default_lng},
        "level": settings.map_default_level,
    }


@router.get("/search")
def search_places(
    keyword: str = Query(..., min_length=1),
    kakao: KakaoLocalClient = Depends(get_kakao_client),
):
    """Find places by keyword and return the bounds that fit the top results."""
    keyword = keyword.strip()
    if not keyword:
        raise HTTPException(status_code=422, detail="Keyword must not be blank")

    places = kakao.keyword_search(keyword, settings.map_search_limit)
    if not places:
        raise HTTPException(status_code=404, detail="검색 결과가 존재하지 않습니다.")
    return {"keyword": keyword, "places": places, "bounds": bounds_for(places)}

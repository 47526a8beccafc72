from homepick.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingListResponse,
    FilterCriteria,
    MarkerResponse,
    MarkerListResponse,
)
from homepick.schemas.news import (
    NewsCreate,
    NewsUpdate,
    NewsResponse,
    NewsListResponse,
)
from homepick.schemas.user import UserProfile, CurrentUserResponse

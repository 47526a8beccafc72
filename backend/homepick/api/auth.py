from typing import Optional

from fastapi import APIRouter, Depends

from homepick.schemas.user import CurrentUserResponse, UserProfile
from homepick.services.auth import get_current_user, is_admin

router = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
def get_me(user: Optional[UserProfile] = Depends(get_current_user)):
    """Profile behind the Bearer token, or an anonymous response."""
    return CurrentUserResponse(user=user, is_admin=is_admin(user))

from pydantic import BaseModel
from typing import Optional


class UserProfile(BaseModel):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    class Config:
        frozen = True


class CurrentUserResponse(BaseModel):
    user: Optional[UserProfile] = None
    is_admin: bool = False

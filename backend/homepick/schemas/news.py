from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import date, datetime

from homepick.models.news import NewsCategory


class NewsCreate(BaseModel):
    title: str
    summary: str = ""
    category: NewsCategory = NewsCategory.MARKET
    source: str = ""
    image_url: str = ""
    published_on: Optional[date] = None

    @field_validator("title")
    @classmethod
    def _required_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class NewsUpdate(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    category: Optional[NewsCategory] = None
    source: Optional[str] = None
    image_url: Optional[str] = None
    published_on: Optional[date] = None


class NewsResponse(BaseModel):
    id: str
    title: str
    summary: str = ""
    category: NewsCategory
    source: str = ""
    image_url: str = ""
    published_on: Optional[date] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NewsListResponse(BaseModel):
    items: List[NewsResponse]
    total: int

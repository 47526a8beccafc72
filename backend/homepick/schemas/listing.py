from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from homepick.models.listing import PropertyType, TradeType

ALL = "ALL"


class ListingCreate(BaseModel):
    title: str
    description: str = ""
    type: PropertyType = PropertyType.APARTMENT
    trade_type: TradeType = TradeType.SALE
    price: Optional[int] = Field(None, ge=0)
    deposit: Optional[int] = Field(None, ge=0)
    monthly_rent: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    floor: int = 1
    location: str
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    images: List[str] = []
    features: List[str] = []

    @field_validator("title", "location")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("images", "features")
    @classmethod
    def _drop_blank_entries(cls, values: List[str]) -> List[str]:
        return [v.strip() for v in values if v and v.strip()]

    @model_validator(mode="after")
    def _price_fields_match_trade_type(self):
        if self.trade_type == TradeType.MONTHLY:
            if not self.deposit or not self.monthly_rent:
                raise ValueError("MONTHLY listings need both deposit and monthly_rent")
        elif not self.price:
            raise ValueError(f"{self.trade_type.value} listings need a price")
        return self


class ListingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[PropertyType] = None
    trade_type: Optional[TradeType] = None
    price: Optional[int] = Field(None, ge=0)
    deposit: Optional[int] = Field(None, ge=0)
    monthly_rent: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    floor: Optional[int] = None
    location: Optional[str] = None
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None


class ListingResponse(BaseModel):
    id: str
    title: str
    description: str = ""
    type: PropertyType
    trade_type: TradeType
    price: Optional[int] = None
    deposit: Optional[int] = None
    monthly_rent: Optional[int] = None
    area: Optional[float] = None
    floor: Optional[int] = None
    location: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    images: List[str] = []
    features: List[str] = []
    created_by: str = ""
    created_at: Optional[datetime] = None

    # Display helper (filled in by the API)
    display_price: Optional[str] = None

    class Config:
        from_attributes = True


class ListingListResponse(BaseModel):
    items: List[ListingResponse]
    total: int


class FilterCriteria(BaseModel):
    """Browse filters. Zero on a range bound means that side is unbounded."""
    category: str = ALL  # ALL or a PropertyType
    search: str = ""
    trade_type: str = ALL  # ALL or a TradeType
    price_min: float = Field(0, ge=0)
    price_max: float = Field(0, ge=0)
    area_min: float = Field(0, ge=0)
    area_max: float = Field(0, ge=0)

    class Config:
        frozen = True

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        value = (value or ALL).upper()
        if value != ALL and value not in PropertyType.__members__:
            raise ValueError(f"unknown property type: {value}")
        return value

    @field_validator("trade_type")
    @classmethod
    def _known_trade_type(cls, value: str) -> str:
        value = (value or ALL).upper()
        if value != ALL and value not in TradeType.__members__:
            raise ValueError(f"unknown trade type: {value}")
        return value


class MarkerResponse(BaseModel):
    listing_id: str
    lat: float
    lng: float
    label: str
    style: str
    selected: bool


class MarkerListResponse(BaseModel):
    center: List[float]
    level: int
    selected_id: Optional[str] = None
    markers: List[MarkerResponse]

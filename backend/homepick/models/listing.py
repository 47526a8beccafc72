import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Text, DateTime, JSON
from homepick.database import Base


class PropertyType(str, enum.Enum):
    APARTMENT = "APARTMENT"
    OFFICETEL = "OFFICETEL"
    VILLA = "VILLA"
    ONEROOM = "ONEROOM"
    COMMERCIAL = "COMMERCIAL"


class TradeType(str, enum.Enum):
    SALE = "SALE"  # 매매
    JEONSE = "JEONSE"  # 전세 (key-money deposit lease)
    MONTHLY = "MONTHLY"  # 월세 (deposit + monthly rent)


PROPERTY_TYPE_LABELS = {
    PropertyType.APARTMENT: "아파트",
    PropertyType.OFFICETEL: "오피스텔",
    PropertyType.VILLA: "빌라",
    PropertyType.ONEROOM: "원룸",
    PropertyType.COMMERCIAL: "상가",
}

TRADE_TYPE_LABELS = {
    TradeType.SALE: "매매",
    TradeType.JEONSE: "전세",
    TradeType.MONTHLY: "월세",
}


def _new_id() -> str:
    return uuid.uuid4().hex


class Listing(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True, default=_new_id)

    # Basic info
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    type = Column(String, default=PropertyType.APARTMENT.value, index=True)
    trade_type = Column(String, default=TradeType.SALE.value, index=True)

    # Pricing (won). SALE/JEONSE use price; MONTHLY uses deposit + monthly_rent
    price = Column(Integer, nullable=True)
    deposit = Column(Integer, nullable=True)
    monthly_rent = Column(Integer, nullable=True)

    # Property details
    area = Column(Float, nullable=True)  # pyeong
    floor = Column(Integer, default=1)
    location = Column(String, default="")
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    # Content
    images = Column(JSON, default=list)  # Ordered image URLs
    features = Column(JSON, default=list)  # Feature tags, e.g. 남향, 역세권

    # Metadata
    created_by = Column(String, default="")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)

    def __repr__(self):
        return f"<Listing {self.id}: {self.title}>"

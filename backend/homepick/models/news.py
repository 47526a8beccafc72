import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Date, DateTime
from homepick.database import Base


class NewsCategory(str, enum.Enum):
    MARKET = "MARKET"
    POLICY = "POLICY"
    FINANCE = "FINANCE"


NEWS_CATEGORY_LABELS = {
    NewsCategory.MARKET: "시장동향",
    NewsCategory.POLICY: "부동산정책",
    NewsCategory.FINANCE: "금융/세금",
}


class NewsArticle(Base):
    __tablename__ = "news"

    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    title = Column(String, nullable=False)
    summary = Column(Text, default="")
    category = Column(String, default=NewsCategory.MARKET.value, index=True)
    source = Column(String, default="")
    image_url = Column(String, default="")
    published_on = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)

    def __repr__(self):
        return f"<NewsArticle {self.id}: {self.title}>"

# backend/models/article.py
import enum

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base, utcnow


class ArticleStatus(str, enum.Enum):
    SOLD = "sold"
    UNSOLD = "unsold"
    PENDING = "pending"


# Model Article
# A single resale listing. price is the listed (or final) selling price,
# purchase_price what the reseller paid for it; "sold" is read from status only.
class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    brand = Column(String, nullable=False)
    size = Column(String, nullable=False)

    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    purchase_price = Column(Numeric(10, 2), CheckConstraint("purchase_price >= 0"), nullable=False, default=0)

    status = Column(
        Enum(ArticleStatus, values_callable=lambda e: [m.value for m in e], name="articlestatus"),
        nullable=False,
        default=ArticleStatus.UNSOLD,
        index=True,
    )

    image_url = Column(String, nullable=True)
    comment = Column(Text, nullable=True)

    # Filled in by the description generator
    generated_title = Column(String, nullable=True)
    generated_description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False, index=True)

    sales = relationship("Sale", back_populates="article", cascade="all, delete-orphan")

# backend/models/sale.py
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base, utcnow


# Auditable record of a sale. Dashboard statistics do not read this table.
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    sale_price = Column(Numeric(10, 2), nullable=False)
    sale_date = Column(DateTime, default=utcnow, nullable=False)

    # sale_price / purchase_price, NULL when the purchase price is 0
    coefficient = Column(Numeric(6, 2), nullable=True)

    article = relationship("Article", back_populates="sales")

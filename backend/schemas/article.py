# backend/schemas/article.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from models.article import ArticleStatus
from schemas.common import ORMBase
from utils.prices import format_money, parse_money


# Shared validation for money fields arriving as "25", "25,50" or 25.5
class _MoneyFields(ORMBase):
    @field_validator("price", "purchase_price", mode="before", check_fields=False)
    @classmethod
    def _parse_money(cls, value):
        if value is None or isinstance(value, Decimal):
            return value
        if isinstance(value, str) and not value.strip():
            raise ValueError("Field required")
        return parse_money(value)


# Schema for creating an article (multipart form)
class ArticleCreate(_MoneyFields):
    name: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    size: str = Field(min_length=1)
    price: Decimal
    purchase_price: Decimal
    status: ArticleStatus = ArticleStatus.UNSOLD
    comment: Optional[str] = None

    @field_validator("name", "brand", "size", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("comment", mode="before")
    @classmethod
    def _blank_comment(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# Schema for PUT/PATCH - every field optional, only sent fields are applied
class ArticleUpdate(_MoneyFields):
    name: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = Field(None, min_length=1)
    size: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = None
    purchase_price: Optional[Decimal] = None
    status: Optional[ArticleStatus] = None
    comment: Optional[str] = None
    generated_title: Optional[str] = None
    generated_description: Optional[str] = None


class ArticleOut(ORMBase):
    id: int
    name: str
    brand: str
    size: str
    price: str
    purchase_price: str
    status: ArticleStatus
    image_url: Optional[str] = None
    comment: Optional[str] = None
    generated_title: Optional[str] = None
    generated_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("price", "purchase_price", mode="before")
    @classmethod
    def _money(cls, value):
        return format_money(value)


class MarkSoldRequest(ORMBase):
    sale_price: Optional[Decimal] = None

    @field_validator("sale_price", mode="before")
    @classmethod
    def _parse(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return parse_money(value)

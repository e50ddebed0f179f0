# backend/schemas/sale.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import field_validator

from schemas.common import ORMBase
from utils.prices import format_money, parse_money


class SaleCreate(ORMBase):
    article_id: int
    sale_price: Decimal

    @field_validator("sale_price", mode="before")
    @classmethod
    def _parse(cls, value):
        return parse_money(value)


class SaleOut(ORMBase):
    id: int
    article_id: int
    sale_price: str
    sale_date: datetime
    coefficient: Optional[str] = None

    @field_validator("sale_price", mode="before")
    @classmethod
    def _money(cls, value):
        return format_money(value)

    @field_validator("coefficient", mode="before")
    @classmethod
    def _coefficient(cls, value):
        return None if value is None else format_money(value)

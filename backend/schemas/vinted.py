# backend/schemas/vinted.py
from typing import List

from pydantic import Field

from schemas.common import ORMBase

UNIQUE_SIZE = "unique size"
UNKNOWN_BRAND = "brand unknown"


# Common shape every import strategy normalizes to
class VintedItem(ORMBase):
    title: str
    price: str
    size: str = UNIQUE_SIZE
    brand: str = UNKNOWN_BRAND
    image_url: str = ""


class ImportRequest(ORMBase):
    profile_url: str = Field(min_length=1)
    dry_run: bool = False


class ImportResult(ORMBase):
    imported_count: int
    strategy: str
    items: List[VintedItem]

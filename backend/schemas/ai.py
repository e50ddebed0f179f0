# backend/schemas/ai.py
from typing import List

from pydantic import Field

from schemas.common import ORMBase

RESPONSE_TONES = ["warm", "precise", "brief"]


class GeneratedContent(ORMBase):
    title: str
    description: str


class CustomerResponsesRequest(ORMBase):
    customer_message: str = Field(min_length=1)


class CustomerResponsesOut(ORMBase):
    responses: List[str]
    tones: List[str] = RESPONSE_TONES

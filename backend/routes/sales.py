# backend/routes/sales.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.sale import SaleCreate, SaleOut
from utils import storage

router = APIRouter(prefix="/api/sales", tags=["Sales"])


@router.get("", response_model=List[SaleOut])
def list_sales(db: Session = Depends(get_db)):
    return storage.list_sales(db)


# Records a sale and marks its article sold in one commit
@router.post("", response_model=SaleOut)
def create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    return storage.create_sale(db, payload.article_id, payload.sale_price)

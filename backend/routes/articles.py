# backend/routes/articles.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from database import get_db
from schemas.article import ArticleCreate, ArticleOut, ArticleUpdate, MarkSoldRequest
from schemas.common import MessageResponse
from utils import storage
from utils.errors import ValidationFailed
from utils.uploads import check_image, remove_image, save_image

router = APIRouter(prefix="/api/articles", tags=["Articles"])
logger = logging.getLogger(__name__)


# ---- HELPERS ----
def _has_file(file: Any) -> bool:
    # Browsers send an empty part when no file was picked
    return isinstance(file, StarletteUploadFile) and bool(file.filename)


async def _read_update_body(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """Updates arrive as JSON or, when the image changes, as multipart."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        image = form.get("image")
        data = {k: v for k, v in form.items() if k != "image"}
        return data, image if _has_file(image) else None

    try:
        data = await request.json()
    except ValueError:
        raise ValidationFailed.single("body", "Request body must be a JSON object")
    if not isinstance(data, dict):
        raise ValidationFailed.single("body", "Request body must be a JSON object")
    return data, None


# =========================
# LIST / DETAIL
# =========================
@router.get("", response_model=List[ArticleOut])
def list_articles(db: Session = Depends(get_db)):
    return storage.list_articles(db)


@router.get("/{article_id}", response_model=ArticleOut)
def get_article(article_id: int, db: Session = Depends(get_db)):
    return storage.get_article(db, article_id)


# =========================
# CREATE
# =========================
@router.post("", response_model=ArticleOut)
def create_article(
    db: Session = Depends(get_db),
    image: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    purchase_price: Optional[str] = Form(None, alias="purchasePrice"),
    status: Optional[str] = Form(None),
    comment: Optional[str] = Form(None),
):
    fields = {
        "name": name, "brand": brand, "size": size, "price": price,
        "purchasePrice": purchase_price, "status": status, "comment": comment,
    }
    try:
        payload = ArticleCreate.model_validate({k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e)

    image_url = None
    if _has_file(image):
        check_image(image)
        image_url = save_image(image)

    article = storage.create_article(db, payload.model_dump(), image_url=image_url)
    logger.info("Article %s created (%s)", article.id, article.name)
    return article


# =========================
# UPDATE (PUT and PATCH are both partial)
# =========================
@router.put("/{article_id}", response_model=ArticleOut)
@router.patch("/{article_id}", response_model=ArticleOut)
async def update_article(article_id: int, request: Request, db: Session = Depends(get_db)):
    data, image = await _read_update_body(request)
    try:
        payload = ArticleUpdate.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e)

    article = storage.get_article(db, article_id)
    old_image = article.image_url

    image_url = None
    if image is not None:
        check_image(image)
        image_url = save_image(image)

    article = storage.update_article(db, article_id, payload.model_dump(exclude_unset=True), image_url=image_url)
    if image_url and old_image != image_url:
        remove_image(old_image)
    return article


# =========================
# MARK AS SOLD
# =========================
@router.post("/{article_id}/sold", response_model=ArticleOut)
def mark_sold(article_id: int, payload: Optional[MarkSoldRequest] = None, db: Session = Depends(get_db)):
    sale_price = payload.sale_price if payload else None
    article = storage.mark_article_sold(db, article_id, sale_price=sale_price)
    logger.info("Article %s marked sold", article.id)
    return article


# =========================
# DELETE
# =========================
@router.delete("/{article_id}", response_model=MessageResponse)
def delete_article(article_id: int, db: Session = Depends(get_db)):
    article = storage.delete_article(db, article_id)
    remove_image(article.image_url)
    return {"message": f"Article '{article.name}' deleted"}

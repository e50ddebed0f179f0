# backend/routes/ai.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from schemas.ai import CustomerResponsesOut, CustomerResponsesRequest, GeneratedContent
from services.gemini import GeminiContentService, get_ai_service
from utils import storage
from utils.errors import ValidationFailed
from utils.prices import format_money, parse_money
from utils.uploads import check_image

router = APIRouter(prefix="/api", tags=["AI"])
logger = logging.getLogger(__name__)


# =========================
# LISTING DESCRIPTION
# =========================
@router.post("/generate-description", response_model=GeneratedContent)
def generate_description(
    db: Session = Depends(get_db),
    ai: GeminiContentService = Depends(get_ai_service),
    image: Optional[UploadFile] = File(None),
    price: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    comment: Optional[str] = Form(None),
    article_id: Optional[str] = Form(None, alias="articleId"),
):
    # Everything is checked before Gemini is called
    if image is None or not image.filename:
        raise ValidationFailed.single("image", "Image is required")
    missing = [name for name, value in (("price", price), ("size", size), ("brand", brand)) if not (value or "").strip()]
    if missing:
        raise ValidationFailed(
            [{"field": name, "message": "Field required"} for name in missing],
            message="Price, size and brand are required",
        )
    check_image(image)
    try:
        amount = parse_money(price)
    except ValueError as e:
        raise ValidationFailed.single("price", f"Price {e}")

    target_id = None
    if article_id and article_id.strip():
        try:
            target_id = int(article_id)
        except ValueError:
            raise ValidationFailed.single("articleId", "Must be an integer")
        storage.get_article(db, target_id)

    try:
        image_bytes = image.file.read()
    finally:
        image.file.close()

    generated = ai.generate_article_description(
        image_bytes,
        image.content_type,
        price=format_money(amount),
        size=size.strip(),
        brand=brand.strip(),
        comment=(comment or "").strip() or None,
    )

    if target_id is not None:
        storage.update_article_generation(db, target_id, generated.title, generated.description)
    return generated


# =========================
# CUSTOMER REPLIES
# =========================
@router.post("/generate-responses", response_model=CustomerResponsesOut)
def generate_responses(
    payload: CustomerResponsesRequest,
    db: Session = Depends(get_db),
    ai: GeminiContentService = Depends(get_ai_service),
):
    conversation = storage.create_conversation(db, payload.customer_message)
    responses = ai.generate_customer_responses(payload.customer_message)
    storage.update_conversation_responses(db, conversation.id, responses)
    logger.info("Conversation %s answered with %d drafts", conversation.id, len(responses))
    return CustomerResponsesOut(responses=responses)

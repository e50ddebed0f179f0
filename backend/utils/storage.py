# backend/utils/storage.py
"""ORM query layer for articles, sales and conversations."""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from database import utcnow
from models.article import Article, ArticleStatus
from models.conversation import Conversation
from models.sale import Sale
from schemas.vinted import VintedItem
from utils.errors import NotFoundError
from utils.prices import parse_money

# Columns that may never be set back to NULL by an update
_REQUIRED_COLUMNS = {"name", "brand", "size", "price", "purchase_price", "status"}


# ---- ARTICLES ----
def list_articles(db: Session) -> List[Article]:
    return db.query(Article).order_by(Article.created_at.desc(), Article.id.desc()).all()


def get_article(db: Session, article_id: int) -> Article:
    article = db.query(Article).filter(Article.id == article_id).first()
    if not article:
        raise NotFoundError("Article not found")
    return article


def create_article(db: Session, data: Dict[str, Any], image_url: Optional[str] = None) -> Article:
    article = Article(**data, image_url=image_url)
    db.add(article)
    db.commit()
    db.refresh(article)
    return article


def update_article(
    db: Session, article_id: int, changes: Dict[str, Any], image_url: Optional[str] = None
) -> Article:
    article = get_article(db, article_id)
    for key, value in changes.items():
        if value is None and key in _REQUIRED_COLUMNS:
            continue
        setattr(article, key, value)
    if image_url is not None:
        article.image_url = image_url
    # Touch even when nothing changed so updated_at reflects the request
    article.updated_at = utcnow()
    db.commit()
    db.refresh(article)
    return article


def delete_article(db: Session, article_id: int) -> Article:
    article = get_article(db, article_id)
    db.delete(article)
    db.commit()
    return article


def update_article_generation(db: Session, article_id: int, title: str, description: str) -> Article:
    article = get_article(db, article_id)
    article.generated_title = title
    article.generated_description = description
    article.updated_at = utcnow()
    db.commit()
    db.refresh(article)
    return article


def mark_article_sold(db: Session, article_id: int, sale_price: Optional[Decimal] = None) -> Article:
    """
    Flip an article to sold and touch updated_at. Nothing else changes.
    When a sale price is given a Sale row is recorded in the same commit.
    """
    article = get_article(db, article_id)
    article.status = ArticleStatus.SOLD
    article.updated_at = utcnow()
    if sale_price is not None:
        db.add(_build_sale(article, sale_price))
    db.commit()
    db.refresh(article)
    return article


def create_articles_from_items(db: Session, items: Iterable[VintedItem]) -> List[Article]:
    articles = [
        Article(
            name=item.title,
            brand=item.brand,
            size=item.size,
            price=parse_money(item.price),
            purchase_price=Decimal("0"),
            status=ArticleStatus.UNSOLD,
            image_url=item.image_url or None,
        )
        for item in items
    ]
    db.add_all(articles)
    db.commit()
    for article in articles:
        db.refresh(article)
    return articles


# ---- SALES ----
def _coefficient(sale_price: Decimal, purchase_price: Optional[Decimal]) -> Optional[Decimal]:
    if not purchase_price:
        return None
    return (Decimal(sale_price) / Decimal(purchase_price)).quantize(Decimal("0.01"))


def _build_sale(article: Article, sale_price: Decimal) -> Sale:
    return Sale(
        article_id=article.id,
        sale_price=sale_price,
        coefficient=_coefficient(sale_price, article.purchase_price),
    )


def create_sale(db: Session, article_id: int, sale_price: Decimal) -> Sale:
    """Legacy path: record the sale and mark its article sold."""
    article = get_article(db, article_id)
    sale = _build_sale(article, sale_price)
    db.add(sale)
    article.status = ArticleStatus.SOLD
    article.updated_at = utcnow()
    db.commit()
    db.refresh(sale)
    return sale


def list_sales(db: Session) -> List[Sale]:
    return db.query(Sale).order_by(Sale.sale_date.desc(), Sale.id.desc()).all()


# ---- CONVERSATIONS ----
def create_conversation(db: Session, customer_message: str) -> Conversation:
    conversation = Conversation(customer_message=customer_message)
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation


def update_conversation_responses(db: Session, conversation_id: int, responses: List[str]) -> Conversation:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        raise NotFoundError("Conversation not found")
    conversation.generated_responses = list(responses)
    db.commit()
    db.refresh(conversation)
    return conversation

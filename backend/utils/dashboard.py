# backend/utils/dashboard.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Float, and_, case, cast, func
from sqlalchemy.orm import Session

from database import utcnow
from models.article import Article, ArticleStatus
from schemas.stats import DashboardStats
from utils.prices import format_money, format_percent


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def compute_dashboard_stats(db: Session, now: Optional[datetime] = None) -> DashboardStats:
    """
    Snapshot of the dashboard metrics, recomputed on every call.

    An article counts as sold when its status is "sold"; it counts for the
    current month when it was last updated in [first instant of the month, now).
    Everything comes from a single conditional-aggregation query.
    """
    now = now or utcnow()
    month_start = start_of_month(now)

    is_sold = Article.status == ArticleStatus.SOLD
    sold_this_month = and_(is_sold, Article.updated_at >= month_start, Article.updated_at < now)

    # CAST to float so SQLite never falls back to integer division
    coefficient = cast(Article.price, Float) / func.nullif(cast(Article.purchase_price, Float), 0)

    row = db.query(
        func.count(Article.id).label("total_articles"),
        func.count(case((sold_this_month, 1))).label("monthly_items_sold"),
        func.count(case((is_sold, 1))).label("total_items_sold"),
        func.coalesce(func.sum(case((sold_this_month, Article.price), else_=0)), 0).label("monthly_revenue"),
        func.coalesce(func.sum(case((sold_this_month, Article.purchase_price), else_=0)), 0).label("monthly_cost"),
        func.coalesce(func.sum(case((is_sold, Article.price), else_=0)), 0).label("total_revenue"),
        func.coalesce(func.sum(case((is_sold, Article.purchase_price), else_=0)), 0).label("total_cost"),
        func.avg(case((is_sold, coefficient))).label("average_coefficient"),
    ).one()

    monthly_revenue = _dec(row.monthly_revenue)
    monthly_margin = monthly_revenue - _dec(row.monthly_cost)
    total_revenue = _dec(row.total_revenue)
    total_margin = total_revenue - _dec(row.total_cost)

    # No revenue, no percentage: avoids dividing by zero on an empty shop
    if total_revenue > 0:
        margin_percent = total_margin / total_revenue * 100
    else:
        margin_percent = Decimal("0")

    return DashboardStats(
        total_articles=row.total_articles or 0,
        monthly_items_sold=row.monthly_items_sold or 0,
        monthly_revenue=format_money(monthly_revenue),
        monthly_margin=format_money(monthly_margin),
        total_items_sold=row.total_items_sold or 0,
        total_revenue=format_money(total_revenue),
        total_margin=format_money(total_margin),
        average_coefficient=format_money(row.average_coefficient),
        average_margin_percent=format_percent(margin_percent),
    )

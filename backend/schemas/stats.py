# backend/schemas/stats.py
from schemas.common import ORMBase


# Dashboard snapshot. Money fields are 2-decimal strings, the percentage 1-decimal.
class DashboardStats(ORMBase):
    total_articles: int
    monthly_items_sold: int
    monthly_revenue: str
    monthly_margin: str
    total_items_sold: int
    total_revenue: str
    total_margin: str
    average_coefficient: str
    average_margin_percent: str

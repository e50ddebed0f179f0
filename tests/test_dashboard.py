"""Tests for the dashboard statistics aggregation."""

from datetime import datetime, timedelta
from decimal import Decimal

from models.article import Article, ArticleStatus
from utils.dashboard import compute_dashboard_stats, start_of_month

NOW = datetime(2026, 3, 15, 12, 0, 0)
EARLIER = NOW - timedelta(hours=1)


def _add(db, price, purchase, status=ArticleStatus.UNSOLD, updated_at=EARLIER):
    article = Article(
        name="Pull", brand="Zara", size="S",
        price=Decimal(price), purchase_price=Decimal(purchase),
        status=status, created_at=updated_at, updated_at=updated_at,
    )
    db.add(article)
    db.commit()
    return article


class TestStartOfMonth:
    def test_first_instant(self):
        assert start_of_month(NOW) == datetime(2026, 3, 1, 0, 0, 0)


class TestComputeDashboardStats:
    """Test compute_dashboard_stats against a seeded database."""

    def test_empty_table(self, db):
        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.total_articles == 0
        assert stats.total_items_sold == 0
        assert stats.monthly_revenue == "0.00"
        assert stats.total_margin == "0.00"
        assert stats.average_coefficient == "0.00"
        assert stats.average_margin_percent == "0.0"

    def test_sold_and_unsold(self, db):
        _add(db, "25.00", "10.00", ArticleStatus.SOLD)
        _add(db, "30.00", "10.00", ArticleStatus.SOLD, updated_at=NOW - timedelta(days=40))
        _add(db, "50.00", "20.00")
        _add(db, "15.00", "5.00", ArticleStatus.PENDING)

        stats = compute_dashboard_stats(db, now=NOW)

        assert stats.total_articles == 4
        assert stats.total_items_sold == 2
        assert stats.monthly_items_sold == 1
        assert stats.monthly_revenue == "25.00"
        assert stats.monthly_margin == "15.00"
        assert stats.total_revenue == "55.00"
        assert stats.total_margin == "35.00"
        assert stats.average_coefficient == "2.75"
        assert stats.average_margin_percent == "63.6"

    def test_month_boundary_is_inclusive(self, db):
        _add(db, "10.00", "5.00", ArticleStatus.SOLD, updated_at=start_of_month(NOW))
        _add(db, "10.00", "5.00", ArticleStatus.SOLD, updated_at=start_of_month(NOW) - timedelta(microseconds=1))

        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.monthly_items_sold == 1
        assert stats.total_items_sold == 2

    def test_updates_after_now_not_counted(self, db):
        _add(db, "10.00", "5.00", ArticleStatus.SOLD)
        _add(db, "10.00", "5.00", ArticleStatus.SOLD, updated_at=NOW)
        _add(db, "10.00", "5.00", ArticleStatus.SOLD, updated_at=NOW + timedelta(days=2))

        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.monthly_items_sold == 1
        assert stats.monthly_revenue == "10.00"
        assert stats.total_items_sold == 3

    def test_loss_is_negative_margin(self, db):
        _add(db, "5.00", "10.00", ArticleStatus.SOLD)

        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.total_margin == "-5.00"
        assert stats.monthly_margin == "-5.00"
        assert stats.average_margin_percent == "-100.0"
        assert stats.average_coefficient == "0.50"

    def test_zero_purchase_price_excluded_from_coefficient(self, db):
        _add(db, "20.00", "0", ArticleStatus.SOLD)
        _add(db, "20.00", "10.00", ArticleStatus.SOLD)

        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.average_coefficient == "2.00"
        assert stats.total_margin == "30.00"

    def test_free_items_sold_gives_zero_percent(self, db):
        _add(db, "0", "0", ArticleStatus.SOLD)

        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.total_revenue == "0.00"
        assert stats.average_margin_percent == "0.0"

    def test_invariants_hold(self, db):
        for i in range(6):
            status = ArticleStatus.SOLD if i % 2 else ArticleStatus.UNSOLD
            _add(db, f"{10 + i}.50", f"{i}.25", status, updated_at=NOW - timedelta(days=12 * i))

        stats = compute_dashboard_stats(db, now=NOW)
        assert stats.total_items_sold <= stats.total_articles
        assert stats.monthly_items_sold <= stats.total_items_sold

        cost = sum(
            a.purchase_price for a in db.query(Article).filter(Article.status == ArticleStatus.SOLD)
        )
        assert Decimal(stats.total_margin) == Decimal(stats.total_revenue) - cost

# backend/routes/stats.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.stats import DashboardStats
from utils.dashboard import compute_dashboard_stats

router = APIRouter(prefix="/api", tags=["Stats"])


# === Dashboard summary, recomputed on every request ===
@router.get("/dashboard-stats", response_model=DashboardStats)
def get_dashboard_stats(db: Session = Depends(get_db)):
    return compute_dashboard_stats(db)

# backend/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


# Liveness probe, also the target of utils/keep_alive.py
@router.get("/ping")
def ping():
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}

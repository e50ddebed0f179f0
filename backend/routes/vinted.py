# backend/routes/vinted.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.vinted import ImportRequest, ImportResult
from services.vinted_importer import VintedImporter, get_importer
from utils import storage

router = APIRouter(prefix="/api", tags=["Vinted"])
logger = logging.getLogger(__name__)


@router.post("/import-vinted", response_model=ImportResult)
async def import_vinted(
    payload: ImportRequest,
    db: Session = Depends(get_db),
    importer: VintedImporter = Depends(get_importer),
):
    outcome = await importer.import_profile(payload.profile_url)

    imported = 0
    if not payload.dry_run:
        imported = len(storage.create_articles_from_items(db, outcome.items))
        logger.info("Imported %d articles via %s", imported, outcome.strategy)

    return ImportResult(imported_count=imported, strategy=outcome.strategy, items=outcome.items)

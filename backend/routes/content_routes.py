from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from db.mongo import get_db
from services.content_service import search_highlights, search_photos

router = APIRouter(prefix="/api", tags=["content"])


@router.get("/photos/search")
def photo_search(
    q: Optional[str] = Query(None),
    team: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    db: Database = Depends(get_db),
):
    """Best matching library photos for an article thumbnail."""
    return search_photos(db, q, team, limit)


@router.get("/highlights")
def highlights(q: Optional[str] = Query(None)):
    return search_highlights(q)

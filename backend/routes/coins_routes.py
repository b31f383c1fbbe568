from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from db.mongo import get_db
from middleware.auth import get_current_user_id
from services.ledger_service import get_balance, get_coin_history

router = APIRouter(prefix="/api/coins", tags=["coins"])


@router.get("/balance")
def coin_balance(
    db: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    return get_balance(db, user_id)


@router.get("/history")
def coin_history(
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    db: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    """Newest-first ledger page; limit is capped at 100."""
    return get_coin_history(db, user_id, limit, offset)

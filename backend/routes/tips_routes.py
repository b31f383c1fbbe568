from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from pymongo.database import Database

from db.mongo import get_db
from middleware.auth import get_current_user_id
from services.ledger_service import get_tips_history, send_tip
from utils.timezone import get_request_time

router = APIRouter(prefix="/api/tips", tags=["tips"])


class TipRequest(BaseModel):
    recipientId: Optional[str] = None
    amount: Any = None  # validated (and coerced) by the ledger
    message: Optional[str] = None


@router.get("/history")
def tips_history(
    type: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    db: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    return get_tips_history(db, user_id, type, limit, offset)


@router.post("/send")
def tip_user(
    body: TipRequest,
    db: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
    now: datetime = Depends(get_request_time),
):
    return send_tip(db, user_id, body.recipientId, body.amount, body.message, now)

"""
Game prediction endpoints
"""
from datetime import datetime
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Cookie, Depends, Header, Query
from pydantic import BaseModel
from pymongo.database import Database

from db.mongo import get_db
from middleware.auth import get_current_user_id, get_optional_user_id
from services.predictions_service import create_prediction, get_leaderboard, get_predictions
from utils.timezone import get_request_time

router = APIRouter(prefix="/api/predictions", tags=["predictions"])


class PredictionRequest(BaseModel):
    gameId: Optional[str] = None
    predictedWinner: Optional[str] = None


@router.get("")
def list_predictions(
    type: Optional[str] = Query("upcoming"),
    db: Database = Depends(get_db),
    now: datetime = Depends(get_request_time),
    auth_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
):
    """upcoming games, the caller's own picks (type=user) or recent results."""
    # Own picks need a valid token
    if type == "user":
        user_id = get_current_user_id(auth_token, authorization)
    else:
        user_id = get_optional_user_id(auth_token, authorization)
    return get_predictions(db, type, user_id, now)


@router.post("", status_code=201)
def submit_prediction(
    body: PredictionRequest,
    db: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
    now: datetime = Depends(get_request_time),
):
    return create_prediction(db, user_id, body.gameId, body.predictedWinner, now)


@router.get("/leaderboard")
def leaderboard(
    type: Optional[str] = Query("predictions"),
    limit: Optional[int] = Query(None),
    db: Database = Depends(get_db),
):
    return get_leaderboard(db, type, limit)

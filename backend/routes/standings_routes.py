from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from db.mongo import get_db
from services.standings_service import get_college_standings, get_division_standings
from utils.timezone import get_request_time

router = APIRouter(prefix="/api/standings", tags=["standings"])


# Declared before /{league} so it is not captured as a league
@router.get("/college-basketball")
def college_standings(
    team: Optional[str] = Query(None),
    now: datetime = Depends(get_request_time),
):
    return get_college_standings(team, now)


@router.get("/{league}")
def division_standings(
    league: str,
    db: Database = Depends(get_db),
    now: datetime = Depends(get_request_time),
):
    """Philly team's division, cached for an hour."""
    return get_division_standings(league, db, now)

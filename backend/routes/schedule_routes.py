from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from config import PHILLY_HOME_DEFAULT_DAYS, SCHEDULE_CACHE_CONTROL, SCHEDULE_DEFAULT_DAYS
from services.schedule_service import get_philly_home_games, get_recent_scores, get_upcoming_schedule
from utils.timezone import get_request_time

router = APIRouter(prefix="/api", tags=["schedule"])


@router.get("/schedule")
def upcoming_schedule(
    response: Response,
    team: Optional[str] = Query(None),
    days: int = Query(SCHEDULE_DEFAULT_DAYS),
    now: datetime = Depends(get_request_time),
):
    """Next games of the in-season Philly teams, soonest first."""
    response.headers["Cache-Control"] = SCHEDULE_CACHE_CONTROL
    return get_upcoming_schedule(team, days, now)


@router.get("/schedules/philly")
def philly_home_games(
    response: Response,
    team: Optional[str] = Query(None),
    days: int = Query(PHILLY_HOME_DEFAULT_DAYS),
    now: datetime = Depends(get_request_time),
):
    response.headers["Cache-Control"] = SCHEDULE_CACHE_CONTROL
    return get_philly_home_games(team, days, now)


@router.get("/scores")
def recent_scores(
    team: Optional[str] = Query(None),
    now: datetime = Depends(get_request_time),
):
    """Most recent final per team from the last three days."""
    return get_recent_scores(team, now)

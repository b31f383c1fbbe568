from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from config import ODDS_CACHE_CONTROL, SCHEDULE_CACHE_CONTROL
from services.sportsdata_service import get_league_schedule, get_league_standings, get_odds
from utils.timezone import get_request_time

router = APIRouter(prefix="/api/sportsdata", tags=["sportsdata"])


@router.get("/schedules")
def league_schedule(
    response: Response,
    sport: Optional[str] = Query(None),
    team: Optional[str] = Query(None),
    season: Optional[str] = Query(None),
    now: datetime = Depends(get_request_time),
):
    response.headers["Cache-Control"] = SCHEDULE_CACHE_CONTROL
    return get_league_schedule(sport, team, season, now)


@router.get("/standings")
def league_standings(
    response: Response,
    sport: Optional[str] = Query(None),
    season: Optional[str] = Query(None),
    now: datetime = Depends(get_request_time),
):
    response.headers["Cache-Control"] = SCHEDULE_CACHE_CONTROL
    return get_league_standings(sport, season, now)


@router.get("/odds")
def league_odds(
    response: Response,
    sport: Optional[str] = Query(None),
    team: Optional[str] = Query(None),
    gameId: Optional[str] = Query(None),
    now: datetime = Depends(get_request_time),
):
    """Consensus lines; Philly games only unless a team is given."""
    response.headers["Cache-Control"] = ODDS_CACHE_CONTROL
    return get_odds(sport, team, gameId, now)

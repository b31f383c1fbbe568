from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from services.game_service import get_game_detail
from utils.timezone import get_request_time

router = APIRouter(prefix="/api/game", tags=["game"])


@router.get("/{game_id}")
def game_detail(
    game_id: str,
    sport: Optional[str] = Query(None),
    source: Optional[str] = Query(None),
    now: datetime = Depends(get_request_time),
):
    """Single game with odds, records, team stats, injuries and box score.

    `source=espn` reads the ESPN game summary instead of SportsDataIO.
    """
    return get_game_detail(game_id, sport, source, now)

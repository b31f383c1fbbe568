"""
League-wide SportsDataIO feeds: schedules, grouped standings and odds.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from core.odds import is_team_game, transform_odds
from core.sport_config import (
    PRO_LEAGUES,
    League,
    get_current_season,
    get_schedule_season,
    get_standings_season,
    normalize_sport,
)
from core.standings import group_standings
from integrations import sportsdata_api
from utils.timezone import get_today_et

logger = logging.getLogger(__name__)


def get_league_schedule(sport: Optional[str], team: Optional[str], season: Optional[str], now: datetime) -> Dict[str, Any]:
    league = normalize_sport(sport, PRO_LEAGUES, default=League.NFL)
    season = season or get_schedule_season(league, now)

    games = sportsdata_api.fetch_schedule(league, season)
    if team:
        target = team.upper()
        games = [
            g for g in games
            if (g.get("HomeTeam") or "").upper() == target or (g.get("AwayTeam") or "").upper() == target
        ]

    rows = [sportsdata_api.transform_league_game(g, team).model_dump() for g in games]
    rows.sort(key=sportsdata_api.game_sort_key)

    return {
        "success": True,
        "sport": league.value,
        "season": season,
        "team": team or "all",
        "games": rows,
    }


def get_league_standings(sport: Optional[str], season: Optional[str], now: datetime) -> Dict[str, Any]:
    league = normalize_sport(sport, PRO_LEAGUES, default=League.NFL)
    season = season or get_standings_season(league, now)

    rows = sportsdata_api.fetch_standings(league, season)
    return {
        "success": True,
        "sport": league.value,
        "season": season,
        "standings": group_standings(rows or []),
    }


def _upcoming_odds(league: League, now: datetime):
    if league == League.NFL:
        week = sportsdata_api.fetch_current_nfl_week() or 1
        season = f"{get_current_season(league, now)}REG"
        return sportsdata_api.fetch_odds_by_week(season, week)
    return sportsdata_api.fetch_odds_by_date(league, get_today_et(now))


def get_odds(sport: Optional[str], team: Optional[str], game_id: Optional[str], now: datetime) -> Dict[str, Any]:
    """
    Consensus odds for one game, or for today's (this week's for NFL) games
    of `team`; without a team only Philly games are returned.
    """
    league = normalize_sport(sport, PRO_LEAGUES, default=League.NFL)

    if game_id:
        odds = transform_odds(sportsdata_api.fetch_game_odds(league, game_id)).model_dump()
    else:
        games = [g for g in _upcoming_odds(league, now) if is_team_game(g, team)]
        odds = [transform_odds(g).model_dump() for g in games]

    return {
        "success": True,
        "sport": league.value,
        "team": team or "all",
        "odds": odds,
    }

"""
SportsDataIO Integration

Schedules, scores, box scores, standings, odds, team stats and injuries for
NFL / NBA / MLB / NHL and college football / basketball.

Requires SPORTSDATA_API_KEY. Primary feeds raise SportsDataApiError on a
non-2xx answer; enrichment feeds (optional=True) return None instead.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from config import REQUEST_TIMEOUT, get_sportsdata_api_key
from core.sport_config import League, SPORTSDATA_SLUGS, team_logo_url
from core.sports_models import LeagueGame, NormalizedGame, TeamSide
from integrations.normalization import (
    AWAY_SCORE_FIELDS,
    BOX_SCORE_FIELDS,
    GAME_DATE_FIELDS,
    GAME_ID_FIELDS,
    HOME_SCORE_FIELDS,
    VENUE_FIELDS,
    first_present,
    require,
)
from utils.errors import ConfigError, UpstreamError
from utils.timezone import ET_TZ, format_display_datetime, parse_iso

logger = logging.getLogger(__name__)

SPORTSDATA_BASE_URL = "https://api.sportsdata.io/v3"


class SportsDataApiError(UpstreamError):
    pass


def _api_key() -> str:
    key = get_sportsdata_api_key()
    if not key:
        raise ConfigError("SportsDataIO API key not configured")
    return key


def _url(league: League, feed: str, path: str) -> str:
    return f"{SPORTSDATA_BASE_URL}/{SPORTSDATA_SLUGS[league]}/{feed}/json/{path}"


def _get(url: str, optional: bool = False) -> Any:
    """GET a SportsDataIO feed; the key is checked before any request goes out."""
    key = _api_key()
    try:
        response = requests.get(url, params={"key": key}, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"SportsDataIO request failed for {url}: {e}")
        if optional:
            return None
        raise SportsDataApiError(f"SportsDataIO request failed: {e}")

    if not response.ok:
        if optional:
            logger.warning(f"SportsDataIO {url} returned {response.status_code}, skipping")
            return None
        logger.error(f"SportsDataIO API error {response.status_code} for {url}")
        raise SportsDataApiError(f"SportsDataIO API error: {response.status_code}", response.status_code)

    return response.json()


# ============================================================================
# SCHEDULES / SCORES
# ============================================================================

def fetch_schedule(league: League, season: str) -> List[Dict[str, Any]]:
    path = f"Schedules/{season}" if league == League.NFL else f"Games/{season}"
    return _get(_url(league, "scores", path)) or []


def fetch_team_schedule(league: League, season, team_key: str) -> List[Dict[str, Any]]:
    return _get(_url(league, "scores", f"TeamSchedule/{season}/{team_key}")) or []


def fetch_score(league: League, game_id: str) -> Optional[Dict[str, Any]]:
    return _get(_url(league, "scores", f"Score/{game_id}"), optional=True)


def fetch_box_score(league: League, game_id: str) -> Optional[Dict[str, Any]]:
    return _get(_url(league, "stats", f"BoxScore/{game_id}"), optional=True)


# ============================================================================
# STANDINGS / STATS / INJURIES
# ============================================================================

def fetch_standings(league: League, season, optional: bool = False) -> Optional[List[Dict[str, Any]]]:
    return _get(_url(league, "scores", f"Standings/{season}"), optional=optional)


def fetch_team_season_stats(league: League, season) -> Optional[List[Dict[str, Any]]]:
    return _get(_url(league, "scores", f"TeamSeasonStats/{season}"), optional=True)


def fetch_injuries(league: League) -> Optional[List[Dict[str, Any]]]:
    return _get(_url(league, "scores", "Injuries"), optional=True)


# ============================================================================
# ODDS
# ============================================================================

def fetch_current_nfl_week() -> Optional[int]:
    return _get(_url(League.NFL, "scores", "CurrentWeek"), optional=True)


def fetch_odds_by_week(season: str, week: int) -> List[Dict[str, Any]]:
    return _get(_url(League.NFL, "odds", f"GameOddsByWeek/{season}/{week}")) or []


def fetch_odds_by_date(league: League, date: str) -> List[Dict[str, Any]]:
    return _get(_url(league, "odds", f"GameOddsByDate/{date}")) or []


def fetch_game_odds(league: League, game_id: str) -> Dict[str, Any]:
    return _get(_url(league, "odds", f"GameOdds/{game_id}")) or {}


def fetch_game_odds_by_game(league: League, game_id: str) -> Optional[List[Dict[str, Any]]]:
    return _get(_url(league, "odds", f"GameOddsByGameID/{game_id}"), optional=True)


# ============================================================================
# TRANSFORMS
# ============================================================================

def transform_league_game(game: Dict[str, Any], team: Optional[str] = None) -> LeagueGame:
    """One row of a league schedule; isHome is only set when filtering by team."""
    game_id = first_present(game, GAME_ID_FIELDS)
    date = first_present(game, GAME_DATE_FIELDS)
    home = game.get("HomeTeam")

    return LeagueGame(
        id=str(game_id) if game_id is not None else None,
        date=date,
        dateDisplay=format_display_datetime(date, ET_TZ),
        homeTeam=home,
        awayTeam=game.get("AwayTeam"),
        homeScore=first_present(game, HOME_SCORE_FIELDS),
        awayScore=first_present(game, AWAY_SCORE_FIELDS),
        status=game.get("Status"),
        channel=game.get("Channel"),
        stadium=first_present(game, VENUE_FIELDS),
        week=game.get("Week"),
        isHome=(home or "").upper() == team.upper() if team else None,
        quarter=game.get("Quarter"),
        period=game.get("Period"),
        inning=game.get("Inning"),
    )


def transform_game(game: Dict[str, Any], league: League, fallback_id: Optional[str] = None) -> NormalizedGame:
    """
    Reshape a SportsDataIO Score/BoxScore game into a NormalizedGame.

    Raises:
        NormalizationError: the record has no home or away team
    """
    home = require(game, ("HomeTeam",), "home team")
    away = require(game, ("AwayTeam",), "away team")
    game_id = first_present(game, GAME_ID_FIELDS, fallback_id)

    return NormalizedGame(
        id=str(game_id),
        sport=league.value,
        status=game.get("Status"),
        dateTime=first_present(game, GAME_DATE_FIELDS),
        venue=first_present(game, VENUE_FIELDS),
        channel=game.get("Channel"),
        weather=first_present(game, ("ForecastDescription", "Weather")),
        homeTeam=TeamSide(
            abbr=home,
            name=game.get("HomeTeamName") or home,
            score=first_present(game, HOME_SCORE_FIELDS, 0) or 0,
            logoUrl=team_logo_url(league, home),
        ),
        awayTeam=TeamSide(
            abbr=away,
            name=game.get("AwayTeamName") or away,
            score=first_present(game, AWAY_SCORE_FIELDS, 0) or 0,
            logoUrl=team_logo_url(league, away),
        ),
        quarter=first_present(game, ("Quarter", "Period", "Inning")),
        timeRemaining=first_present(game, ("TimeRemaining", "TimeRemainingMinutes")),
        possession=game.get("Possession"),
        source="sportsdata",
    )


def extract_box_score(data: Optional[Dict[str, Any]], league: League) -> Optional[Dict[str, Dict[str, Any]]]:
    """Per-side team stats from a BoxScore payload ({'Game': {...}} or the game itself)."""
    if not data:
        return None
    fields = BOX_SCORE_FIELDS.get(league.value)
    if not fields:
        return None

    game = data.get("Game") or data
    return {
        side: {
            key: first_present(game, tuple(f"{prefix}{suffix}" for suffix in suffixes))
            for key, suffixes in fields.items()
        }
        for side, prefix in (("home", "HomeTeam"), ("away", "AwayTeam"))
    }


def game_sort_key(game) -> float:
    """Chronological sort key; undated games sort last."""
    dt = parse_iso(game.get("date") if isinstance(game, dict) else game.date, ET_TZ)
    return dt.timestamp() if dt else float("inf")
